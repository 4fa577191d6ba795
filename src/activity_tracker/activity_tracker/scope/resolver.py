"""Visibility rules shared by every read/list operation.

Which users and activities a requester may see depends only on the
requester's role and organizational attributes:

- student: their own activities (and their own directory entry);
- teacher: students of their department, narrowed to their class when the
  teacher has one assigned, and the activities owned by those students;
- superadmin: everything.

A teacher without a class sees the whole department on purpose.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, assert_never

from ..core.enums import Role
from ..users.model import Requester, User
from ..users.repository import UserRepository


@dataclass(frozen=True)
class Scope:
    """Set of eligible activity owner ids, or unrestricted when `student_ids` is None."""

    student_ids: Optional[frozenset[int]] = None

    @classmethod
    def unrestricted(cls) -> "Scope":
        return cls(student_ids=None)

    @classmethod
    def only(cls, student_ids: Iterable[int]) -> "Scope":
        return cls(student_ids=frozenset(int(i) for i in student_ids))

    @property
    def is_unrestricted(self) -> bool:
        return self.student_ids is None

    @property
    def is_empty(self) -> bool:
        return self.student_ids is not None and not self.student_ids

    def allows(self, student_id: int) -> bool:
        return self.student_ids is None or int(student_id) in self.student_ids


class ScopeResolver:
    def __init__(self, users: UserRepository):
        self._users = users

    def students_for_teacher(self, requester: Requester, *, order_by_name: bool = False) -> Sequence[User]:
        if not requester.department:
            return []
        return self._users.list_users(
            role=Role.STUDENT,
            department=requester.department,
            class_name=requester.class_name or None,
            order_by_name=order_by_name,
        )

    def activity_scope(self, requester: Requester) -> Scope:
        role = requester.role
        if role is Role.STUDENT:
            return Scope.only([requester.user_id])
        if role is Role.TEACHER:
            return Scope.only(u.user_id for u in self.students_for_teacher(requester))
        if role is Role.SUPERADMIN:
            return Scope.unrestricted()
        assert_never(role)

    def visible_users(
        self,
        requester: Requester,
        *,
        role: Optional[Role] = None,
        order_by_name: bool = False,
    ) -> Sequence[User]:
        requester_role = requester.role
        if requester_role is Role.SUPERADMIN:
            return self._users.list_users(role=role, order_by_name=order_by_name)
        if requester_role is Role.TEACHER:
            if role not in (None, Role.STUDENT):
                return []
            return self.students_for_teacher(requester, order_by_name=order_by_name)
        if requester_role is Role.STUDENT:
            me = self._users.get_by_id(requester.user_id)
            if me is None or (role is not None and me.role != role):
                return []
            return [me]
        assert_never(requester_role)

    def can_view_user(self, requester: Requester, user: User) -> bool:
        role = requester.role
        if role is Role.SUPERADMIN:
            return True
        if role is Role.TEACHER:
            if user.role != Role.STUDENT or not requester.department:
                return False
            if user.department != requester.department:
                return False
            return not requester.class_name or user.class_name == requester.class_name
        if role is Role.STUDENT:
            return user.user_id == requester.user_id
        assert_never(role)

    def report_students(
        self,
        requester: Requester,
        *,
        department: Optional[str] = None,
        semester: Optional[int] = None,
    ) -> Sequence[User]:
        """Student population for a report.

        Teachers default to their own department when none is given, and
        see no one when they have neither.
        """
        role = requester.role
        if role is Role.SUPERADMIN:
            return self._users.list_users(role=Role.STUDENT, department=department, semester=semester)
        if role is Role.TEACHER:
            dept = department or requester.department
            if not dept:
                return []
            return self._users.list_users(role=Role.STUDENT, department=dept, semester=semester)
        if role is Role.STUDENT:
            return [
                u
                for u in self.visible_users(requester, role=Role.STUDENT)
                if (department is None or u.department == department)
                and (semester is None or u.semester == semester)
            ]
        assert_never(role)
