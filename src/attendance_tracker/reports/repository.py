from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import ClassAttendanceRow, DailyMark, StudentSummary


class ReportRepository(Protocol):
    def get_student_summary(self, student_id: str) -> Optional[StudentSummary]:
        raise NotImplementedError

    def list_class_attendance(self, student_id: str) -> Sequence[ClassAttendanceRow]:
        raise NotImplementedError

    def list_daily_marks(self, on_date: date) -> Sequence[DailyMark]:
        """Enrolled students of every class holding a session on `on_date`."""

        raise NotImplementedError
