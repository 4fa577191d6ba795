"""In-memory stand-ins for the repositories and artifact store."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from src.activity_tracker.activity_tracker.activities.model import Activity, NewActivity, ReviewDecision
from src.activity_tracker.activity_tracker.core.enums import ActivityStatus, Role
from src.activity_tracker.activity_tracker.core.exceptions import StoreError
from src.activity_tracker.activity_tracker.users.model import Requester, User, UserChanges, UserSummary

BASE_TIME = datetime(2026, 2, 1, 9, 0, 0)


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}
        self._next_id = 1

    def add(
        self,
        name: str,
        role: Role,
        *,
        department: Optional[str] = None,
        class_name: Optional[str] = None,
        semester: Optional[int] = None,
        roll_number: Optional[str] = None,
        email: Optional[str] = None,
        password_hash: str = "!",
    ) -> User:
        return self.get_by_id(
            self.create_user(
                name=name,
                email=email or f"{name.lower().replace(' ', '.')}@example.com",
                password_hash=password_hash,
                role=role,
                department=department,
                class_name=class_name,
                semester=semester,
                roll_number=roll_number,
            )
        )

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, *, name, email, password_hash, role, department, class_name, semester, roll_number) -> int:
        uid = self._next_id
        self._next_id += 1
        self.users[uid] = User(
            user_id=uid,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            department=department,
            class_name=class_name,
            semester=semester,
            roll_number=roll_number,
            created_at=BASE_TIME + timedelta(minutes=uid),
        )
        return uid

    def update_user(self, user_id: int, changes: UserChanges) -> bool:
        user = self.users.get(int(user_id))
        if not user:
            return False
        self.users[user.user_id] = replace(
            user,
            name=changes.name,
            email=changes.email,
            role=changes.role,
            department=changes.department,
            class_name=changes.class_name,
            semester=changes.semester,
            roll_number=changes.roll_number,
        )
        return True

    def delete_by_id(self, user_id: int) -> bool:
        return self.users.pop(int(user_id), None) is not None

    def list_users(self, *, role=None, department=None, class_name=None, semester=None, order_by_name=False):
        out = [
            u
            for u in self.users.values()
            if (role is None or u.role == role)
            and (department is None or u.department == department)
            and (class_name is None or u.class_name == class_name)
            and (semester is None or u.semester == semester)
        ]
        if order_by_name:
            out.sort(key=lambda u: (u.name, u.user_id))
        else:
            out.sort(key=lambda u: (u.created_at, u.user_id), reverse=True)
        return out


class InMemoryActivities:
    def __init__(self, users: InMemoryUsers):
        self._users = users
        self.rows: dict[int, Activity] = {}
        self._next_id = 1
        self.fail_next_create = False
        self.review_calls = 0

    def _summary(self, user_id: Optional[int], *, as_reviewer: bool = False) -> Optional[UserSummary]:
        user = self._users.get_by_id(user_id) if user_id is not None else None
        if not user:
            return None
        if as_reviewer:
            return UserSummary(user_id=user.user_id, name=user.name, email=user.email, role=user.role)
        return UserSummary(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            department=user.department,
            class_name=user.class_name,
            semester=user.semester,
            roll_number=user.roll_number,
        )

    def create_activity(self, new: NewActivity) -> int:
        if self.fail_next_create:
            self.fail_next_create = False
            raise StoreError("Database operation failed")
        aid = self._next_id
        self._next_id += 1
        self.rows[aid] = Activity(
            activity_id=aid,
            student_id=new.student_id,
            activity_type=new.activity_type,
            title=new.title,
            description=new.description,
            date=new.date,
            event_organizer=new.event_organizer,
            level=new.level,
            certificate_file=new.certificate_file,
            student_class=new.student_class,
            student_department=new.student_department,
            created_at=BASE_TIME + timedelta(hours=aid),
        )
        return aid

    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        a = self.rows.get(int(activity_id))
        return replace(a, student=self._summary(a.student_id)) if a else None

    def list_activities(
        self,
        *,
        student_ids=None,
        status=None,
        populate_student=True,
        populate_reviewer=False,
    ):
        out = [
            a
            for a in self.rows.values()
            if (student_ids is None or a.student_id in set(student_ids)) and (status is None or a.status == status)
        ]
        out.sort(key=lambda a: (a.created_at, a.activity_id), reverse=True)
        out = [
            replace(
                a,
                student=self._summary(a.student_id) if populate_student else None,
                reviewer=self._summary(a.reviewed_by, as_reviewer=True) if populate_reviewer else None,
            )
            for a in out
        ]
        return out

    def count_by_status(self, *, student_ids=None):
        counts = {s: 0 for s in ActivityStatus}
        for a in self.rows.values():
            if student_ids is None or a.student_id in set(student_ids):
                counts[a.status] += 1
        return counts

    def apply_review(self, activity_id: int, decision: ReviewDecision) -> bool:
        self.review_calls += 1
        a = self.rows.get(int(activity_id))
        if not a or a.status != ActivityStatus.PENDING:
            return False
        self.rows[a.activity_id] = replace(
            a,
            status=decision.status,
            points_awarded=decision.points_awarded,
            feedback=decision.feedback,
            reviewed_by=decision.reviewed_by,
            reviewed_at=decision.reviewed_at,
        )
        return True

    def count_references(self, user_id: int) -> int:
        return sum(1 for a in self.rows.values() if user_id in (a.student_id, a.reviewed_by))


class FakeArtifacts:
    def __init__(self):
        self.stored: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_delete = False
        self._n = 0

    def store(self, data: bytes, filename: str) -> str:
        self._n += 1
        ref = f"{self._n}-{filename}"
        self.stored[ref] = data
        return ref

    def delete(self, reference: str) -> None:
        if self.fail_delete:
            raise OSError("disk is read-only")
        self.stored.pop(reference)
        self.deleted.append(reference)

    def open(self, reference: str) -> Path:
        return Path("/nonexistent") / reference


def requester_for(user: User) -> Requester:
    return Requester.from_user(user)
