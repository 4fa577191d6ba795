from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User, UserChanges
from .repository import UserRepository

_USER_COLUMNS = """
    user_id, name, email, password_hash, role,
    department, class_name, semester, roll_number, created_at
"""


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        department=row.get("department"),
        class_name=row.get("class_name"),
        semester=int(row["semester"]) if row.get("semester") is not None else None,
        roll_number=row.get("roll_number"),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(name, email, password_hash, role, department, class_name, semester, roll_number)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, email, password_hash, role.value, department, class_name, semester, roll_number),
            )
            return int(cur.lastrowid)

    def update_user(self, user_id: int, changes: UserChanges) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET name=%s, email=%s, role=%s, department=%s, class_name=%s, semester=%s, roll_number=%s
                WHERE user_id=%s
                """,
                (
                    changes.name,
                    changes.email,
                    changes.role.value,
                    changes.department,
                    changes.class_name,
                    changes.semester,
                    changes.roll_number,
                    int(user_id),
                ),
            )
            # MySQL reports 0 affected rows when values are unchanged.
            cur.execute("SELECT 1 FROM users WHERE user_id=%s", (int(user_id),))
            return fetchone(cur) is not None

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0

    def list_users(
        self,
        *,
        role: Optional[Role] = None,
        department: Optional[str] = None,
        class_name: Optional[str] = None,
        semester: Optional[int] = None,
        order_by_name: bool = False,
    ) -> Sequence[User]:
        clauses = ["1=1"]
        params: list[object] = []

        if role is not None:
            clauses.append("role=%s")
            params.append(role.value)
        if department is not None:
            clauses.append("department=%s")
            params.append(department)
        if class_name is not None:
            clauses.append("class_name=%s")
            params.append(class_name)
        if semester is not None:
            clauses.append("semester=%s")
            params.append(int(semester))

        where = " AND ".join(clauses)
        order = "name ASC, user_id ASC" if order_by_name else "created_at DESC, user_id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE {where} ORDER BY {order}", tuple(params))
            return [_row_to_user(r) for r in fetchall(cur)]
