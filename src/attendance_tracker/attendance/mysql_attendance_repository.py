from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus, SessionStatus
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key, new_id
from .model import AttendanceMark, AttendanceSession
from .repository import AttendanceRepository, SessionRepository

_SESSION_COLUMNS = "id, class_id, session_date, created_by, status, started_at, ended_at, created_at"


def _session(r: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=r["id"],
        class_id=r["class_id"],
        session_date=r["session_date"],
        created_by=r["created_by"],
        status=SessionStatus(r["status"]),
        started_at=r.get("started_at"),
        ended_at=r.get("ended_at"),
        created_at=r.get("created_at"),
    )


def _mark(r: dict) -> AttendanceMark:
    return AttendanceMark(
        student_id=r["student_id"],
        class_id=r["class_id"],
        session_id=r["session_id"],
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: str) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE id=%s", (session_id,))
            r = fetchone(cur)
            return _session(r) if r else None

    def get_for_class_date(self, class_id: str, session_date: date) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE class_id=%s AND session_date=%s",
                (class_id, session_date),
            )
            r = fetchone(cur)
            return _session(r) if r else None

    def create(self, *, class_id: str, session_date: date, created_by: str, started_at: datetime) -> str:
        session_id = new_id()
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_sessions(id, class_id, session_date, created_by, started_at, status)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (session_id, class_id, session_date, created_by, started_at, SessionStatus.ONGOING.value),
                )
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ValidationError("A session already exists for this class on that date")
            raise
        return session_id

    def mark_ended(self, *, session_id: str, ended_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_sessions SET status=%s, ended_at=%s WHERE id=%s AND status=%s",
                (SessionStatus.ENDED.value, ended_at, session_id, SessionStatus.ONGOING.value),
            )
            return cur.rowcount > 0

    def list_for_class(self, class_id: str) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE class_id=%s ORDER BY session_date DESC",
                (class_id,),
            )
            return [_session(r) for r in fetchall(cur)]

    def list_for_classes(self, class_ids: Sequence[str]) -> Sequence[AttendanceSession]:
        if not class_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS} FROM attendance_sessions
                WHERE class_id IN ({in_clause(class_ids)})
                ORDER BY session_date ASC
                """,
                tuple(class_ids),
            )
            return [_session(r) for r in fetchall(cur)]


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_marks(self, marks: Sequence[AttendanceMark]) -> int:
        if not marks:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO attendance(id, student_id, class_id, session_id, status, notes)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status), notes=VALUES(notes)
                """,
                [
                    (new_id(), m.student_id, m.class_id, m.session_id, m.status.value, m.notes)
                    for m in marks
                ],
            )
        return len(marks)

    def insert_missing_marks(self, marks: Sequence[AttendanceMark]) -> int:
        if not marks:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT IGNORE INTO attendance(id, student_id, class_id, session_id, status, notes)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                [
                    (new_id(), m.student_id, m.class_id, m.session_id, m.status.value, m.notes)
                    for m in marks
                ],
            )
            return cur.rowcount

    def list_for_session(self, session_id: str) -> Sequence[AttendanceMark]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT student_id, class_id, session_id, status, notes FROM attendance WHERE session_id=%s",
                (session_id,),
            )
            return [_mark(r) for r in fetchall(cur)]

    def list_for_sessions(self, session_ids: Sequence[str]) -> Sequence[AttendanceMark]:
        if not session_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT student_id, class_id, session_id, status, notes FROM attendance
                WHERE session_id IN ({in_clause(session_ids)})
                """,
                tuple(session_ids),
            )
            return [_mark(r) for r in fetchall(cur)]
