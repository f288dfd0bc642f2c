from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceMark, AttendanceSession


class SessionRepository(Protocol):
    def get_by_id(self, session_id: str) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_for_class_date(self, class_id: str, session_date: date) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def create(self, *, class_id: str, session_date: date, created_by: str, started_at: datetime) -> str:
        """Insert an Ongoing session and return its id."""

        raise NotImplementedError

    def mark_ended(self, *, session_id: str, ended_at: datetime) -> bool:
        raise NotImplementedError

    def list_for_class(self, class_id: str) -> Sequence[AttendanceSession]:
        """Newest first."""

        raise NotImplementedError

    def list_for_classes(self, class_ids: Sequence[str]) -> Sequence[AttendanceSession]:
        """Sessions of several classes, oldest first."""

        raise NotImplementedError


class AttendanceRepository(Protocol):
    def upsert_marks(self, marks: Sequence[AttendanceMark]) -> int:
        """Insert or update one row per (student, class, session)."""

        raise NotImplementedError

    def insert_missing_marks(self, marks: Sequence[AttendanceMark]) -> int:
        """Insert rows that do not exist yet; existing marks are left untouched."""

        raise NotImplementedError

    def list_for_session(self, session_id: str) -> Sequence[AttendanceMark]:
        raise NotImplementedError

    def list_for_sessions(self, session_ids: Sequence[str]) -> Sequence[AttendanceMark]:
        raise NotImplementedError
