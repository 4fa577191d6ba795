from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..activities.repository import ActivityRepository
from ..common.validators import optional_text, require_enum, require_int_range
from ..core.constants import MAX_SEMESTER
from ..core.enums import ActivityStatus, Role
from ..core.exceptions import AuthorizationError
from ..scope.resolver import ScopeResolver
from ..users.model import Requester, User


@dataclass(frozen=True)
class StudentSummary:
    student: User
    total_activities: int = 0
    approved_activities: int = 0
    pending_activities: int = 0
    rejected_activities: int = 0
    total_points: int = 0

    def to_dict(self) -> dict:
        s = self.student
        return {
            "student": {
                "id": s.user_id,
                "name": s.name,
                "rollNumber": s.roll_number,
                "class": s.class_name,
                "semester": s.semester,
                "department": s.department,
            },
            "totalActivities": self.total_activities,
            "approvedActivities": self.approved_activities,
            "pendingActivities": self.pending_activities,
            "rejectedActivities": self.rejected_activities,
            "totalPoints": self.total_points,
        }


@dataclass(frozen=True)
class ReportData:
    rows: list[StudentSummary]
    department: Optional[str]
    semester: Optional[int]
    status: Optional[ActivityStatus]


def _summary_sort_key(summary: StudentSummary) -> tuple:
    s = summary.student
    return (s.name.casefold(), s.roll_number or "", s.user_id)


class ActivityReportService:
    """Per-student activity statistics over a filtered student population."""

    def __init__(self, activities: ActivityRepository, scope: ScopeResolver):
        self._activities = activities
        self._scope = scope

    def generate_report(
        self,
        requester: Requester,
        *,
        department: Optional[str] = None,
        semester: object = None,
        status: Optional[str] = None,
    ) -> ReportData:
        if requester.role not in (Role.TEACHER, Role.SUPERADMIN):
            raise AuthorizationError("Not authorized to generate reports")

        dept = optional_text(department, "department")
        if dept is None and requester.role is Role.TEACHER:
            dept = requester.department
        sem = None
        if semester not in (None, ""):
            sem = require_int_range(semester, "semester", min_value=1, max_value=MAX_SEMESTER)
        status_filter = None if not status else require_enum(ActivityStatus, status, "status")

        students = self._scope.report_students(requester, department=dept, semester=sem)
        counters = {
            u.user_id: {"total": 0, "points": 0, **{st: 0 for st in ActivityStatus}} for u in students
        }

        if counters:
            for a in self._activities.list_activities(
                student_ids=counters.keys(),
                status=status_filter,
                populate_student=False,
            ):
                c = counters.get(a.student_id)
                if c is None:
                    continue
                c["total"] += 1
                c[a.status] += 1
                # Non-approved activities always hold 0 points.
                c["points"] += a.points_awarded

        rows = [
            StudentSummary(
                student=u,
                total_activities=counters[u.user_id]["total"],
                approved_activities=counters[u.user_id][ActivityStatus.APPROVED],
                pending_activities=counters[u.user_id][ActivityStatus.PENDING],
                rejected_activities=counters[u.user_id][ActivityStatus.REJECTED],
                total_points=counters[u.user_id]["points"],
            )
            for u in students
        ]
        rows.sort(key=_summary_sort_key)
        return ReportData(rows=rows, department=dept, semester=sem, status=status_filter)
