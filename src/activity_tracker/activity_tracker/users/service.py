from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..activities.repository import ActivityRepository
from ..common.validators import (
    normalize_email,
    optional_text,
    require_enum,
    require_int_range,
    require_min_length,
    require_non_empty,
)
from ..core.constants import (
    MAX_CLASS_LENGTH,
    MAX_DEPARTMENT_LENGTH,
    MAX_NAME_LENGTH,
    MAX_ROLL_NUMBER_LENGTH,
    MAX_SEMESTER,
    MIN_PASSWORD_LENGTH,
)
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..scope.resolver import ScopeResolver
from .model import Requester, User, UserChanges
from .repository import UserRepository

logger = logging.getLogger(__name__)

DIRECTORY_ROLES = (Role.STUDENT, Role.TEACHER)


def _student_fields(role: Role, semester: object, roll_number: Optional[str]) -> tuple[Optional[int], Optional[str]]:
    """Only students carry semester/roll number; everyone else gets None."""
    if role is not Role.STUDENT:
        return None, None
    sem = require_int_range(semester, "semester", min_value=1, max_value=MAX_SEMESTER)
    return sem, require_non_empty(roll_number, "rollNumber", max_length=MAX_ROLL_NUMBER_LENGTH)


class AuthService:
    """Use case: self-registration and login."""

    def __init__(self, users: UserRepository):
        self._users = users

    def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: str,
        department: Optional[str],
        class_name: Optional[str] = None,
        semester: object = None,
        roll_number: Optional[str] = None,
    ) -> User:
        name = require_non_empty(name, "name", max_length=MAX_NAME_LENGTH)
        email = normalize_email(email)
        require_min_length(password, "password", MIN_PASSWORD_LENGTH)
        user_role = require_enum(Role, role or Role.STUDENT.value, "role")
        if user_role not in DIRECTORY_ROLES:
            raise ValidationError("Only students and teachers can register", field="role")
        department = require_non_empty(department, "department", max_length=MAX_DEPARTMENT_LENGTH)
        class_text = optional_text(class_name, "class", max_length=MAX_CLASS_LENGTH)
        sem, roll = _student_fields(user_role, semester, roll_number)

        if self._users.get_by_email(email):
            raise ValidationError("Email is already registered", field="email")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=user_role,
            department=department,
            class_name=class_text,
            semester=sem,
            roll_number=roll,
        )
        logger.info("Registered %s %s", user_role.value, user_id)

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def authenticate(self, email: object, password: object) -> User:
        if not isinstance(email, str) or not isinstance(password, str):
            raise AuthenticationError("Invalid credentials")

        user = self._users.get_by_email(email.strip().lower())
        if not user:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")
        return user

    def get_profile(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user


class UserService:
    """Use case: directory reads (scoped) and superadmin management."""

    def __init__(self, users: UserRepository, activities: ActivityRepository, scope: ScopeResolver):
        self._users = users
        self._activities = activities
        self._scope = scope

    def list_users(self, requester: Requester) -> Sequence[User]:
        if requester.role is not Role.SUPERADMIN:
            raise AuthorizationError("Not authorized to list users")
        return self._scope.visible_users(requester)

    def list_users_by_role(self, requester: Requester, role: str) -> Sequence[User]:
        if requester.role not in (Role.SUPERADMIN, Role.TEACHER):
            raise AuthorizationError("Not authorized to list users")
        wanted = require_enum(Role, role, "role")
        if wanted not in DIRECTORY_ROLES:
            raise ValidationError("Invalid role specified", field="role")
        return self._scope.visible_users(requester, role=wanted, order_by_name=True)

    def get_user(self, requester: Requester, user_id: int) -> User:
        if requester.role not in (Role.SUPERADMIN, Role.TEACHER):
            raise AuthorizationError("Not authorized to view users")
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        if not self._scope.can_view_user(requester, user):
            raise AuthorizationError("Not authorized to view this user")
        return user

    def update_user(self, requester: Requester, user_id: int, changes: Mapping[str, object]) -> User:
        """Apply the provided profile fields; keys that are absent keep their value.

        Activity snapshots (studentClass/studentDepartment) are left untouched.
        """
        if requester.role is not Role.SUPERADMIN:
            raise AuthorizationError("Not authorized to update users")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")

        def pick(key: str, current: Any) -> Any:
            return changes[key] if key in changes else current

        name = require_non_empty(pick("name", user.name), "name", max_length=MAX_NAME_LENGTH)
        email = normalize_email(pick("email", user.email))
        role = require_enum(Role, pick("role", user.role.value), "role")
        if user.user_id == requester.user_id and role != user.role:
            raise ValidationError("You cannot change your own role", field="role")

        department = optional_text(
            pick("department", user.department), "department", max_length=MAX_DEPARTMENT_LENGTH
        )
        class_name = optional_text(pick("class", user.class_name), "class", max_length=MAX_CLASS_LENGTH)
        semester, roll_number = _student_fields(
            role,
            pick("semester", user.semester),
            pick("rollNumber", user.roll_number),
        )

        if email != user.email:
            other = self._users.get_by_email(email)
            if other and other.user_id != user.user_id:
                raise ValidationError("Email is already registered", field="email")

        ok = self._users.update_user(
            user.user_id,
            UserChanges(
                name=name,
                email=email,
                role=role,
                department=department,
                class_name=class_name,
                semester=semester,
                roll_number=roll_number,
            ),
        )
        if not ok:
            raise NotFoundError("User not found")

        logger.info("Superadmin %s updated user %s", requester.user_id, user.user_id)
        updated = self._users.get_by_id(user.user_id)
        if not updated:
            raise NotFoundError("User not found")
        return updated

    def delete_user(self, requester: Requester, user_id: int) -> None:
        """Delete a user that no activity references (as owner or reviewer)."""
        if requester.role is not Role.SUPERADMIN:
            raise AuthorizationError("Not authorized to delete users")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        if user.user_id == requester.user_id:
            raise ValidationError("You cannot delete your own account", field="user")

        references = self._activities.count_references(user.user_id)
        if references:
            raise ValidationError(
                f"User is referenced by {references} activities and cannot be deleted",
                field="user",
            )

        if not self._users.delete_by_id(user.user_id):
            raise NotFoundError("User not found")
        logger.info("Superadmin %s deleted user %s", requester.user_id, user.user_id)
