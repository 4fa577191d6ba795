from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User, UserChanges


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, never on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[str],
        class_name: Optional[str],
        semester: Optional[int],
        roll_number: Optional[str],
    ) -> int:
        raise NotImplementedError

    def update_user(self, user_id: int, changes: UserChanges) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def list_users(
        self,
        *,
        role: Optional[Role] = None,
        department: Optional[str] = None,
        class_name: Optional[str] = None,
        semester: Optional[int] = None,
        order_by_name: bool = False,
    ) -> Sequence[User]:
        """Filter by any combination of fields; None means "any".

        Default order is newest first; `order_by_name` sorts by name then id.
        """

        raise NotImplementedError
