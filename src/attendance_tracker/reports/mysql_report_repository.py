from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ClassAttendanceRow, DailyMark, StudentSummary
from .repository import ReportRepository


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_student_summary(self, student_id: str) -> Optional[StudentSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, first_name, last_name, total_present, total_absent, total_classes
                FROM student_attendance_summary
                WHERE student_id=%s
                """,
                (student_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return StudentSummary(
                student_id=r["student_id"],
                first_name=r["first_name"],
                last_name=r["last_name"],
                total_present=int(r["total_present"] or 0),
                total_absent=int(r["total_absent"] or 0),
                total_classes=int(r["total_classes"] or 0),
            )

    def list_class_attendance(self, student_id: str) -> Sequence[ClassAttendanceRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, class_id, class_name, present_count, absent_count, total_sessions
                FROM student_class_attendance
                WHERE student_id=%s
                ORDER BY class_name ASC
                """,
                (student_id,),
            )
            return [
                ClassAttendanceRow(
                    student_id=r["student_id"],
                    class_id=r["class_id"],
                    class_name=r["class_name"],
                    present_count=int(r["present_count"] or 0),
                    absent_count=int(r["absent_count"] or 0),
                    total_sessions=int(r["total_sessions"] or 0),
                )
                for r in fetchall(cur)
            ]

    def list_daily_marks(self, on_date: date) -> Sequence[DailyMark]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ce.student_id, ats.class_id, a.status
                FROM attendance_sessions ats
                JOIN class_enrollment ce ON ce.class_id = ats.class_id
                LEFT JOIN attendance a
                    ON a.session_id = ats.id AND a.student_id = ce.student_id
                WHERE ats.session_date=%s
                """,
                (on_date,),
            )
            return [
                DailyMark(
                    student_id=r["student_id"],
                    class_id=r["class_id"],
                    status=AttendanceStatus(r["status"]) if r.get("status") else None,
                )
                for r in fetchall(cur)
            ]
