from __future__ import annotations

from typing import Collection, Dict, Optional, Sequence

from ..core.enums import ActivityStatus, ActivityType, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from ..users.model import UserSummary
from .model import Activity, NewActivity, ReviewDecision
from .repository import ActivityRepository

_ACTIVITY_COLUMNS = """
    a.activity_id, a.student_id, a.activity_type, a.title, a.description,
    a.activity_date, a.event_organizer, a.level, a.certificate_file,
    a.student_class, a.student_department, a.status, a.points_awarded,
    a.feedback, a.reviewed_by, a.reviewed_at, a.created_at
"""

_STUDENT_COLUMNS = """
    s.name AS s_name, s.email AS s_email, s.roll_number AS s_roll_number,
    s.class_name AS s_class_name, s.semester AS s_semester, s.department AS s_department
"""

_REVIEWER_COLUMNS = "r.name AS r_name, r.email AS r_email, r.role AS r_role"


def _row_to_activity(row: dict, *, with_student: bool = False, with_reviewer: bool = False) -> Activity:
    student = None
    if with_student and row.get("s_name") is not None:
        student = UserSummary(
            user_id=int(row["student_id"]),
            name=row["s_name"],
            email=row["s_email"],
            department=row.get("s_department"),
            class_name=row.get("s_class_name"),
            semester=int(row["s_semester"]) if row.get("s_semester") is not None else None,
            roll_number=row.get("s_roll_number"),
        )

    reviewer = None
    if with_reviewer and row.get("reviewed_by") is not None and row.get("r_name") is not None:
        reviewer = UserSummary(
            user_id=int(row["reviewed_by"]),
            name=row["r_name"],
            email=row["r_email"],
            role=Role(row["r_role"]),
        )

    return Activity(
        activity_id=int(row["activity_id"]),
        student_id=int(row["student_id"]),
        activity_type=ActivityType(row["activity_type"]),
        title=row["title"],
        description=row["description"],
        date=row["activity_date"],
        event_organizer=row["event_organizer"],
        level=int(row["level"]),
        certificate_file=row["certificate_file"],
        student_class=row.get("student_class"),
        student_department=row.get("student_department"),
        status=ActivityStatus(row["status"]),
        points_awarded=int(row.get("points_awarded") or 0),
        feedback=row.get("feedback"),
        reviewed_by=int(row["reviewed_by"]) if row.get("reviewed_by") is not None else None,
        reviewed_at=row.get("reviewed_at"),
        created_at=row.get("created_at"),
        student=student,
        reviewer=reviewer,
    )


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_activity(self, new: NewActivity) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activities(
                    student_id, activity_type, title, description, activity_date,
                    event_organizer, level, certificate_file, student_class, student_department,
                    status, points_awarded
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    int(new.student_id),
                    new.activity_type.value,
                    new.title,
                    new.description,
                    new.date,
                    new.event_organizer,
                    int(new.level),
                    new.certificate_file,
                    new.student_class,
                    new.student_department,
                    ActivityStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ACTIVITY_COLUMNS}, {_STUDENT_COLUMNS}
                FROM activities a
                LEFT JOIN users s ON s.user_id = a.student_id
                WHERE a.activity_id=%s
                """,
                (int(activity_id),),
            )
            row = fetchone(cur)
            return _row_to_activity(row, with_student=True) if row else None

    def list_activities(
        self,
        *,
        student_ids: Optional[Collection[int]] = None,
        status: Optional[ActivityStatus] = None,
        populate_student: bool = True,
        populate_reviewer: bool = False,
    ) -> Sequence[Activity]:
        clauses = ["1=1"]
        params: list[object] = []

        if student_ids is not None:
            clause, ids = in_clause("a.student_id", sorted(int(i) for i in student_ids))
            clauses.append(clause)
            params.extend(ids)
        if status is not None:
            clauses.append("a.status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        columns = _ACTIVITY_COLUMNS
        joins = ""
        if populate_student:
            columns += f", {_STUDENT_COLUMNS}"
            joins += " LEFT JOIN users s ON s.user_id = a.student_id"
        if populate_reviewer:
            columns += f", {_REVIEWER_COLUMNS}"
            joins += " LEFT JOIN users r ON r.user_id = a.reviewed_by"

        sql = f"SELECT {columns} FROM activities a{joins} WHERE {where} ORDER BY a.created_at DESC, a.activity_id DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                _row_to_activity(r, with_student=populate_student, with_reviewer=populate_reviewer)
                for r in fetchall(cur)
            ]

    def count_by_status(self, *, student_ids: Optional[Collection[int]] = None) -> Dict[ActivityStatus, int]:
        counts = {s: 0 for s in ActivityStatus}
        clause, params = ("1=1", [])
        if student_ids is not None:
            clause, params = in_clause("student_id", sorted(int(i) for i in student_ids))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT status, COUNT(*) AS n FROM activities WHERE {clause} GROUP BY status",
                tuple(params),
            )
            for r in fetchall(cur):
                counts[ActivityStatus(r["status"])] = int(r["n"])
        return counts

    def apply_review(self, activity_id: int, decision: ReviewDecision) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE activities
                SET status=%s, points_awarded=%s, feedback=%s, reviewed_by=%s, reviewed_at=%s
                WHERE activity_id=%s AND status=%s
                """,
                (
                    decision.status.value,
                    int(decision.points_awarded),
                    decision.feedback,
                    int(decision.reviewed_by),
                    decision.reviewed_at,
                    int(activity_id),
                    ActivityStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def count_references(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM activities WHERE student_id=%s OR reviewed_by=%s",
                (int(user_id), int(user_id)),
            )
            row = fetchone(cur)
            return int(row["n"]) if row else 0
