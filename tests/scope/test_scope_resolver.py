from __future__ import annotations

import pytest

from src.activity_tracker.activity_tracker.core.enums import Role
from src.activity_tracker.activity_tracker.scope.resolver import Scope, ScopeResolver
from src.activity_tracker.activity_tracker.users.model import Requester
from tests.fakes import InMemoryUsers, requester_for


@pytest.fixture
def directory():
    users = InMemoryUsers()
    people = {
        "cs_a": users.add("Asha", Role.STUDENT, department="CS", class_name="A", semester=5, roll_number="CS1"),
        "cs_b": users.add("Bilal", Role.STUDENT, department="CS", class_name="B", semester=5, roll_number="CS2"),
        "ee_a": users.add("Chen", Role.STUDENT, department="EE", class_name="A", semester=3, roll_number="EE1"),
        "t_cs_a": users.add("Teacher A", Role.TEACHER, department="CS", class_name="A"),
        "t_cs": users.add("Teacher CS", Role.TEACHER, department="CS"),
        "admin": users.add("Admin", Role.SUPERADMIN),
    }
    return users, people


def test_student_scope_is_only_self(directory):
    users, p = directory
    scope = ScopeResolver(users).activity_scope(requester_for(p["cs_a"]))

    assert scope.student_ids == frozenset({p["cs_a"].user_id})
    assert not scope.allows(p["cs_b"].user_id)


def test_teacher_with_class_sees_only_that_class(directory):
    users, p = directory
    scope = ScopeResolver(users).activity_scope(requester_for(p["t_cs_a"]))

    assert scope.student_ids == frozenset({p["cs_a"].user_id})


def test_teacher_without_class_sees_whole_department(directory):
    users, p = directory
    scope = ScopeResolver(users).activity_scope(requester_for(p["t_cs"]))

    assert scope.student_ids == frozenset({p["cs_a"].user_id, p["cs_b"].user_id})
    assert not scope.allows(p["ee_a"].user_id)


def test_teacher_without_department_sees_nothing(directory):
    users, _ = directory
    scope = ScopeResolver(users).activity_scope(Requester(user_id=99, role=Role.TEACHER))

    assert scope.is_empty


def test_superadmin_scope_is_unrestricted(directory):
    users, p = directory
    scope = ScopeResolver(users).activity_scope(requester_for(p["admin"]))

    assert scope.is_unrestricted
    assert scope.allows(p["ee_a"].user_id)


def test_teacher_visible_users_never_include_other_departments_or_teachers(directory):
    users, p = directory
    resolver = ScopeResolver(users)

    visible = resolver.visible_users(requester_for(p["t_cs"]), order_by_name=True)
    assert [u.name for u in visible] == ["Asha", "Bilal"]
    assert resolver.visible_users(requester_for(p["t_cs"]), role=Role.TEACHER) == []


def test_can_view_user_follows_scope(directory):
    users, p = directory
    resolver = ScopeResolver(users)
    teacher = requester_for(p["t_cs_a"])

    assert resolver.can_view_user(teacher, p["cs_a"])
    assert not resolver.can_view_user(teacher, p["cs_b"])
    assert not resolver.can_view_user(teacher, p["ee_a"])
    assert not resolver.can_view_user(teacher, p["t_cs"])
    assert resolver.can_view_user(requester_for(p["admin"]), p["t_cs"])


def test_report_students_default_to_teacher_department(directory):
    users, p = directory
    resolver = ScopeResolver(users)

    names = {u.name for u in resolver.report_students(requester_for(p["t_cs_a"]))}
    assert names == {"Asha", "Bilal"}

    ee = resolver.report_students(requester_for(p["t_cs_a"]), department="EE")
    assert [u.name for u in ee] == ["Chen"]


def test_scope_only_with_empty_ids_allows_nothing():
    scope = Scope.only([])
    assert scope.is_empty
    assert not scope.allows(1)


def test_report_students_for_teacher_without_department_is_empty(directory):
    users, _ = directory
    resolver = ScopeResolver(users)
    loose = Requester(user_id=99, role=Role.TEACHER)

    assert resolver.report_students(loose) == []
    assert [u.name for u in resolver.report_students(loose, department="EE")] == ["Chen"]
