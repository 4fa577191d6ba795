from __future__ import annotations

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Optional

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"
SAMPLE_CERTIFICATE = "sample-certificate.pdf"


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connect(db_config: dict, *, with_database: bool = True):
    target = DBConfig.from_dict(db_config)
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _exec_sql_file(db_config: dict, path: str | Path) -> None:
    sql = _strip_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))
    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(db_config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _exec_sql_file(db_config, schema_path)
    logger.info("Applied schema %s", schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _exec_sql_file(db_config, seed_path)
    logger.info("Applied seed %s", seed_path)


def ensure_sample_certificate(upload_dir: str | Path) -> Path:
    path = Path(upload_dir) / SAMPLE_CERTIFICATE
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("This is a sample certificate file for testing purposes.", encoding="utf-8")
    return path


def ensure_demo_users(db_config: dict) -> dict[str, int]:
    """Upsert the demo superadmin/teacher/student and their demo activities.

    Returns the user ids keyed by demo role.
    """
    conn = _connect(db_config)
    try:
        cur = conn.cursor(dictionary=True)

        def upsert_user(
            name: str,
            email: str,
            role: str,
            department: Optional[str] = None,
            class_name: Optional[str] = None,
            semester: Optional[int] = None,
            roll_number: Optional[str] = None,
        ) -> int:
            password_hash = generate_password_hash(DEMO_PASSWORD)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    """
                    UPDATE users
                    SET name=%s, password_hash=%s, role=%s, department=%s, class_name=%s, semester=%s, roll_number=%s
                    WHERE email=%s
                    """,
                    (name, password_hash, role, department, class_name, semester, roll_number, email),
                )
                return int(existing["user_id"])
            cur.execute(
                """
                INSERT INTO users (name, email, password_hash, role, department, class_name, semester, roll_number)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (name, email, password_hash, role, department, class_name, semester, roll_number),
            )
            return int(cur.lastrowid)

        ids = {
            "superadmin": upsert_user("Super Admin", "admin@example.com", "superadmin"),
            "teacher": upsert_user("Teacher User", "teacher@example.com", "teacher", "Computer Science"),
            "student": upsert_user(
                "Student User", "student@example.com", "student", "Computer Science", "CSE-A", 5, "CS2001"
            ),
        }

        now = datetime.now()
        demo_activities = [
            ("Technical", "Hackathon Participation",
             "Participated in a 24-hour hackathon and built a web application",
             date(2023, 10, 15), "pending", 0, None, None, None),
            ("Cultural", "College Fest Performance",
             "Performed in the annual college cultural festival",
             date(2023, 9, 20), "approved", 15, "Great performance!", ids["teacher"], now),
            ("Sports", "Inter-College Cricket Tournament",
             "Represented the college in cricket tournament",
             date(2023, 8, 10), "rejected", 0, "Certificate not valid", ids["teacher"], now),
            ("Professional Development", "AWS Certification",
             "Completed AWS Solutions Architect Associate certification",
             date(2023, 11, 5), "pending", 0, None, None, None),
        ]
        for activity_type, title, description, day, status, points, feedback, reviewer, reviewed_at in demo_activities:
            cur.execute(
                """
                INSERT INTO activities (
                    student_id, activity_type, title, description, activity_date, certificate_file,
                    student_class, student_department, status, points_awarded, feedback, reviewed_by, reviewed_at
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    ids["student"], activity_type, title, description, day, SAMPLE_CERTIFICATE,
                    "CSE-A", "Computer Science", status, points, feedback, reviewer, reviewed_at,
                ),
            )

        conn.commit()
        return ids
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def table_stats(db_config: dict) -> dict[str, dict[str, int]]:
    """Row counts per table plus users by role and activities by status."""
    conn = _connect(db_config)
    try:
        cur = conn.cursor(dictionary=True)
        stats: dict[str, dict[str, int]] = {}
        cur.execute("SELECT role AS k, COUNT(*) AS n FROM users GROUP BY role")
        stats["users"] = {r["k"]: int(r["n"]) for r in cur.fetchall()}
        cur.execute("SELECT status AS k, COUNT(*) AS n FROM activities GROUP BY status")
        stats["activities"] = {r["k"]: int(r["n"]) for r in cur.fetchall()}
        return stats
    finally:
        conn.close()
