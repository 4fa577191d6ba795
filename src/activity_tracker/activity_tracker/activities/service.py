from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Collection, Dict, Optional, Sequence

from ..artifacts.store import ArtifactStore
from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import optional_text, require_enum, require_int_range, require_non_empty
from ..core.constants import (
    DEFAULT_ACTIVITY_LEVEL,
    DEFAULT_CERTIFICATE_EXTENSIONS,
    DEFAULT_EVENT_ORGANIZER,
    MAX_ACTIVITY_LEVEL,
    MAX_ORGANIZER_LENGTH,
    MAX_POINTS,
    MAX_TEXT_LENGTH,
    MAX_TITLE_LENGTH,
    MIN_ACTIVITY_LEVEL,
)
from ..core.enums import ActivityStatus, ActivityType, Role
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, StoreError, ValidationError
from ..scope.resolver import ScopeResolver
from ..users.model import Requester
from ..users.repository import UserRepository
from .model import Activity, NewActivity, ReviewDecision
from .repository import ActivityRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivitySubmission:
    """Raw submission fields as received from the caller."""

    activity_type: Optional[str]
    title: Optional[str]
    description: Optional[str]
    date: Optional[str]
    event_organizer: Optional[str] = None
    level: object = None


@dataclass(frozen=True)
class CertificateUpload:
    filename: str
    data: bytes


@dataclass(frozen=True)
class SubmissionReceipt:
    activity: Activity
    teacher_count: int

    @property
    def message(self) -> str:
        note = "" if self.teacher_count > 0 else " (Note: No teacher is currently assigned to your class)"
        return f"Activity submitted successfully! Your certificate will be reviewed by your teacher{note}."


@dataclass(frozen=True)
class PendingQueue:
    activities: Sequence[Activity]
    stats: Dict[str, int] = field(default_factory=dict)


def _require_role(requester: Requester, *roles: Role) -> None:
    if requester.role not in roles:
        raise AuthorizationError("Not authorized to perform this action")


class ActivityService:
    """Use cases: submit, list and review activities."""

    def __init__(
        self,
        activities: ActivityRepository,
        users: UserRepository,
        artifacts: ArtifactStore,
        scope: ScopeResolver,
        *,
        allowed_extensions: Collection[str] = DEFAULT_CERTIFICATE_EXTENSIONS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._activities = activities
        self._users = users
        self._artifacts = artifacts
        self._scope = scope
        self._allowed_extensions = frozenset(e.lower().lstrip(".") for e in allowed_extensions)
        self._clock = clock

    def _check_certificate(self, certificate: Optional[CertificateUpload]) -> CertificateUpload:
        if certificate is None or not certificate.data:
            raise ValidationError("Please upload a certificate", field="certificate")
        ext = Path(certificate.filename or "").suffix.lower().lstrip(".")
        if ext not in self._allowed_extensions:
            allowed = ", ".join(sorted(self._allowed_extensions))
            raise ValidationError(f"Certificate must be one of: {allowed}", field="certificate")
        return certificate

    def _release_artifact(self, reference: str) -> None:
        try:
            self._artifacts.delete(reference)
        except (OSError, DomainError):
            logger.exception("Failed to release orphaned certificate %s", reference)

    def submit_activity(
        self,
        requester: Requester,
        submission: ActivitySubmission,
        certificate: Optional[CertificateUpload],
    ) -> SubmissionReceipt:
        _require_role(requester, Role.STUDENT)
        certificate = self._check_certificate(certificate)

        activity_type = require_enum(ActivityType, submission.activity_type, "activityType")
        title = require_non_empty(submission.title, "title", max_length=MAX_TITLE_LENGTH)
        description = require_non_empty(submission.description, "description", max_length=MAX_TEXT_LENGTH)
        activity_date = parse_iso_date(require_non_empty(submission.date, "date"), "date")
        organizer = (
            optional_text(submission.event_organizer, "eventOrganizer", max_length=MAX_ORGANIZER_LENGTH)
            or DEFAULT_EVENT_ORGANIZER
        )
        level = DEFAULT_ACTIVITY_LEVEL
        if submission.level not in (None, ""):
            level = require_int_range(submission.level, "level", min_value=MIN_ACTIVITY_LEVEL, max_value=MAX_ACTIVITY_LEVEL)

        student = self._users.get_by_id(requester.user_id)
        if not student:
            raise NotFoundError("Student not found")

        try:
            reference = self._artifacts.store(certificate.data, certificate.filename)
        except OSError as exc:
            raise StoreError("Could not store certificate") from exc

        try:
            activity_id = self._activities.create_activity(
                NewActivity(
                    student_id=student.user_id,
                    activity_type=activity_type,
                    title=title,
                    description=description,
                    date=activity_date,
                    event_organizer=organizer,
                    level=level,
                    certificate_file=reference,
                    student_class=student.class_name,
                    student_department=student.department,
                )
            )
        except Exception:
            self._release_artifact(reference)
            raise

        logger.info("Student %s submitted activity %s (%s)", student.user_id, activity_id, activity_type.value)

        activity = self._activities.get_by_id(activity_id)
        if activity is None:
            raise StoreError("Activity was not persisted")

        teachers = self._users.list_users(
            role=Role.TEACHER,
            department=student.department,
            class_name=student.class_name,
        )
        return SubmissionReceipt(activity=activity, teacher_count=len(teachers))

    def list_own_activities(self, requester: Requester) -> Sequence[Activity]:
        _require_role(requester, Role.STUDENT)
        scope = self._scope.activity_scope(requester)
        return self._activities.list_activities(student_ids=scope.student_ids, populate_student=False)

    def list_pending_for_scope(self, requester: Requester) -> PendingQueue:
        _require_role(requester, Role.TEACHER)
        scope = self._scope.activity_scope(requester)
        if scope.is_empty:
            return PendingQueue(activities=[], stats={s.value: 0 for s in ActivityStatus})

        pending = self._activities.list_activities(student_ids=scope.student_ids, status=ActivityStatus.PENDING)
        counts = self._activities.count_by_status(student_ids=scope.student_ids)
        stats = {
            ActivityStatus.PENDING.value: len(pending),
            ActivityStatus.APPROVED.value: counts.get(ActivityStatus.APPROVED, 0),
            ActivityStatus.REJECTED.value: counts.get(ActivityStatus.REJECTED, 0),
        }
        return PendingQueue(activities=pending, stats=stats)

    def list_all_activities(self, requester: Requester) -> Sequence[Activity]:
        _require_role(requester, Role.SUPERADMIN)
        scope = self._scope.activity_scope(requester)
        return self._activities.list_activities(student_ids=scope.student_ids, populate_reviewer=True)

    def review_activity(
        self,
        requester: Requester,
        *,
        activity_id: int,
        status: Optional[str],
        points_awarded: object = None,
        feedback: object = None,
    ) -> Activity:
        _require_role(requester, Role.TEACHER)

        new_status = require_enum(ActivityStatus, status, "status")
        if not new_status.is_terminal:
            raise ValidationError("status must be approved or rejected", field="status")

        # Rejections never carry points, whatever the caller sent.
        points = 0
        if new_status is ActivityStatus.APPROVED and points_awarded not in (None, ""):
            points = require_int_range(points_awarded, "pointsAwarded", min_value=0, max_value=MAX_POINTS)
        feedback_text = optional_text(feedback, "feedback", max_length=MAX_TEXT_LENGTH)

        activity = self._activities.get_by_id(int(activity_id))
        if not activity:
            raise NotFoundError("Activity not found")

        # Authorize against the live owner record, not the submission snapshot.
        student = self._users.get_by_id(activity.student_id)
        if not student or not requester.department or student.department != requester.department:
            raise AuthorizationError("Not authorized to review this activity")

        if activity.status.is_terminal:
            raise ValidationError("Activity has already been reviewed", field="status")

        decision = ReviewDecision(
            status=new_status,
            points_awarded=points,
            feedback=feedback_text,
            reviewed_by=requester.user_id,
            reviewed_at=self._clock(),
        )
        if not self._activities.apply_review(activity.activity_id, decision):
            if self._activities.get_by_id(activity.activity_id) is None:
                raise NotFoundError("Activity not found")
            raise ValidationError("Activity has already been reviewed", field="status")

        logger.info(
            "Teacher %s %s activity %s (points=%s)",
            requester.user_id,
            new_status.value,
            activity.activity_id,
            points,
        )

        reviewed = self._activities.get_by_id(activity.activity_id)
        if reviewed is None:
            raise NotFoundError("Activity not found")
        return reviewed

    def certificate_for(self, requester: Requester, activity_id: int) -> tuple[Activity, Path]:
        activity = self._activities.get_by_id(int(activity_id))
        if not activity:
            raise NotFoundError("Activity not found")
        if not self._scope.activity_scope(requester).allows(activity.student_id):
            raise AuthorizationError("Not authorized to view this activity")
        return activity, self._artifacts.open(activity.certificate_file)
