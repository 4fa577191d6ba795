from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_datetime
from ..core.enums import ActivityStatus, ActivityType
from ..users.model import UserSummary


@dataclass(frozen=True)
class Activity:
    """A student-submitted extracurricular record.

    `student_class` / `student_department` are display-only snapshots of the
    owner's attributes at submission time. They are never re-synced and must
    not be used for authorization.
    """

    activity_id: int
    student_id: int
    activity_type: ActivityType
    title: str
    description: str
    date: date
    event_organizer: str
    level: int
    certificate_file: str
    student_class: Optional[str]
    student_department: Optional[str]
    status: ActivityStatus = ActivityStatus.PENDING
    points_awarded: int = 0
    feedback: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    student: Optional[UserSummary] = None
    reviewer: Optional[UserSummary] = None

    def to_dict(self) -> dict:
        return {
            "id": self.activity_id,
            "student": self.student.to_dict() if self.student else self.student_id,
            "activityType": self.activity_type.value,
            "title": self.title,
            "description": self.description,
            "date": self.date.isoformat(),
            "eventOrganizer": self.event_organizer,
            "level": self.level,
            "certificateFile": self.certificate_file,
            "studentClass": self.student_class,
            "studentDepartment": self.student_department,
            "status": self.status.value,
            "pointsAwarded": self.points_awarded,
            "feedback": self.feedback,
            "reviewedBy": self.reviewer.to_dict() if self.reviewer else self.reviewed_by,
            "reviewedAt": format_datetime(self.reviewed_at),
            "createdAt": format_datetime(self.created_at),
        }


@dataclass(frozen=True)
class NewActivity:
    student_id: int
    activity_type: ActivityType
    title: str
    description: str
    date: date
    event_organizer: str
    level: int
    certificate_file: str
    student_class: Optional[str]
    student_department: Optional[str]


@dataclass(frozen=True)
class ReviewDecision:
    """All fields written by a review, applied together in one update."""

    status: ActivityStatus
    points_awarded: int
    feedback: Optional[str]
    reviewed_by: int
    reviewed_at: datetime
