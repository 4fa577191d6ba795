from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    STUDENT = "student"
    TEACHER = "teacher"
    SUPERADMIN = "superadmin"


class ActivityStatus(str, Enum):
    """Review state of a submitted activity."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ActivityStatus.PENDING


class ActivityType(str, Enum):
    SPORTS = "Sports"
    CULTURAL = "Cultural"
    TECHNICAL = "Technical"
    PROFESSIONAL_DEVELOPMENT = "Professional Development"
    COMMUNITY_SERVICE = "Community Service"
    OTHER = "Other"
