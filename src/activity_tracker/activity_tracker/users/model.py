from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: Plain data object (no DB access code). Only students carry a
    meaningful `semester` and `roll_number`.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    department: Optional[str] = None
    class_name: Optional[str] = None
    semester: Optional[int] = None
    roll_number: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "department": self.department,
            "class": self.class_name,
            "semester": self.semester,
            "rollNumber": self.roll_number,
            "createdAt": self.created_at.isoformat(timespec="seconds") if self.created_at else None,
        }


@dataclass(frozen=True)
class UserSummary:
    """Subset of User fields populated into activity read results."""

    user_id: int
    name: str
    email: str
    role: Optional[Role] = None
    department: Optional[str] = None
    class_name: Optional[str] = None
    semester: Optional[int] = None
    roll_number: Optional[str] = None

    def to_dict(self) -> dict:
        out: dict = {"id": self.user_id, "name": self.name, "email": self.email}
        if self.role is not None:
            out["role"] = self.role.value
        else:
            out.update(
                {
                    "rollNumber": self.roll_number,
                    "class": self.class_name,
                    "semester": self.semester,
                    "department": self.department,
                }
            )
        return out


@dataclass(frozen=True)
class Requester:
    """Authenticated identity attached to a request."""

    user_id: int
    role: Role
    department: Optional[str] = None
    class_name: Optional[str] = None
    semester: Optional[int] = None

    @classmethod
    def from_user(cls, user: User) -> "Requester":
        return cls(
            user_id=user.user_id,
            role=user.role,
            department=user.department,
            class_name=user.class_name,
            semester=user.semester,
        )


@dataclass(frozen=True)
class UserChanges:
    """Full replacement of the mutable profile fields (superadmin edit)."""

    name: str
    email: str
    role: Role
    department: Optional[str]
    class_name: Optional[str]
    semester: Optional[int]
    roll_number: Optional[str]
