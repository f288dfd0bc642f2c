from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..classes.model import EnrolledStudent
from ..core.enums import AttendanceStatus, SessionStatus


@dataclass(frozen=True)
class AttendanceSession:
    """One meeting of a class on a given date."""

    session_id: str
    class_id: str
    session_date: date
    created_by: str
    status: SessionStatus
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_ongoing(self) -> bool:
        return self.status == SessionStatus.ONGOING


@dataclass(frozen=True)
class AttendanceMark:
    student_id: str
    class_id: str
    session_id: str
    status: AttendanceStatus
    notes: Optional[str] = None


@dataclass(frozen=True)
class RosterEntry:
    """An enrolled student with the mark recorded for one session, if any."""

    student: EnrolledStudent
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None
