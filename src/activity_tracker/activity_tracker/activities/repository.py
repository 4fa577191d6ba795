from __future__ import annotations

from typing import Collection, Dict, Optional, Protocol, Sequence

from ..core.enums import ActivityStatus
from .model import Activity, NewActivity, ReviewDecision


class ActivityRepository(Protocol):
    def create_activity(self, new: NewActivity) -> int:
        raise NotImplementedError

    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        raise NotImplementedError

    def list_activities(
        self,
        *,
        student_ids: Optional[Collection[int]] = None,
        status: Optional[ActivityStatus] = None,
        populate_student: bool = True,
        populate_reviewer: bool = False,
    ) -> Sequence[Activity]:
        """Newest first. `student_ids=None` means any owner; an empty collection matches nothing."""

        raise NotImplementedError

    def count_by_status(self, *, student_ids: Optional[Collection[int]] = None) -> Dict[ActivityStatus, int]:
        raise NotImplementedError

    def apply_review(self, activity_id: int, decision: ReviewDecision) -> bool:
        """Atomically apply the decision if and only if the activity is still pending."""

        raise NotImplementedError

    def count_references(self, user_id: int) -> int:
        """Activities owned by or reviewed by the user."""

        raise NotImplementedError
