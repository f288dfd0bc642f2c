from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Mapping, Optional, Sequence

from ..classes.repository import EnrollmentRepository
from ..classes.service import ClassService
from ..common.datetime_utils import now_local
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from .model import AttendanceMark, AttendanceSession, RosterEntry
from .repository import AttendanceRepository, SessionRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use case: a teacher runs a session and marks the roster."""

    def __init__(
        self,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        enrollments: EnrollmentRepository,
        classes: ClassService,
    ):
        self._sessions = sessions
        self._attendance = attendance
        self._enrollments = enrollments
        self._classes = classes

    def _owned_session(self, *, teacher_id: str, session_id: str) -> AttendanceSession:
        session = self._sessions.get_by_id(session_id)
        if not session:
            raise NotFoundError("Session not found")
        # raises when the class belongs to another teacher
        self._classes.get_owned_class(teacher_id=teacher_id, class_id=session.class_id)
        return session

    def start_session(
        self,
        *,
        teacher_id: str,
        class_id: str,
        session_date: Optional[date] = None,
        now: datetime | None = None,
    ) -> AttendanceSession:
        now = now or now_local()
        session_date = session_date or now.date()
        self._classes.get_owned_class(teacher_id=teacher_id, class_id=class_id)

        existing = self._sessions.get_for_class_date(class_id, session_date)
        if existing:
            if existing.is_ongoing:
                return existing
            raise ValidationError("The session for this date has already ended")

        session_id = self._sessions.create(
            class_id=class_id,
            session_date=session_date,
            created_by=teacher_id,
            started_at=now,
        )
        logger.info("session %s started for class %s on %s", session_id, class_id, session_date)
        return self._sessions.get_by_id(session_id)

    def record_attendance(
        self,
        *,
        teacher_id: str,
        session_id: str,
        marks: Mapping[str, str],
        notes: Optional[Mapping[str, str]] = None,
    ) -> int:
        """Save marks for a session; `marks` maps student id to Present/Absent."""
        session = self._owned_session(teacher_id=teacher_id, session_id=session_id)
        if not session.is_ongoing:
            raise ValidationError("Attendance can only be recorded for an ongoing session")

        enrolled = {s.student_id for s in self._enrollments.list_students(session.class_id)}
        notes = notes or {}

        rows = []
        for student_id, raw_status in marks.items():
            if student_id not in enrolled:
                raise ValidationError("Student is not enrolled in this class")
            try:
                status = AttendanceStatus(raw_status)
            except ValueError:
                raise ValidationError(f"Invalid attendance status: {raw_status!r}")
            note = (notes.get(student_id) or "").strip() or None
            rows.append(
                AttendanceMark(
                    student_id=student_id,
                    class_id=session.class_id,
                    session_id=session.session_id,
                    status=status,
                    notes=note,
                )
            )

        return self._attendance.upsert_marks(rows)

    def end_session(self, *, teacher_id: str, session_id: str, now: datetime | None = None) -> int:
        """End an ongoing session; returns how many students were auto-marked Absent."""
        now = now or now_local()
        session = self._owned_session(teacher_id=teacher_id, session_id=session_id)
        if not session.is_ongoing:
            raise ValidationError("Session has already ended")

        marked = {m.student_id for m in self._attendance.list_for_session(session_id)}
        missing = [
            AttendanceMark(
                student_id=s.student_id,
                class_id=session.class_id,
                session_id=session_id,
                status=AttendanceStatus.ABSENT,
            )
            for s in self._enrollments.list_students(session.class_id)
            if s.student_id not in marked
        ]
        auto_absent = self._attendance.insert_missing_marks(missing)

        if not self._sessions.mark_ended(session_id=session_id, ended_at=now):
            raise ValidationError("Session has already ended")

        logger.info("session %s ended; %d unmarked students recorded absent", session_id, auto_absent)
        return auto_absent

    def session_roster(self, *, teacher_id: str, session_id: str) -> tuple[AttendanceSession, list[RosterEntry]]:
        session = self._owned_session(teacher_id=teacher_id, session_id=session_id)
        marks = {m.student_id: m for m in self._attendance.list_for_session(session_id)}

        roster = []
        for student in self._enrollments.list_students(session.class_id):
            mark = marks.get(student.student_id)
            roster.append(
                RosterEntry(
                    student=student,
                    status=mark.status if mark else None,
                    notes=mark.notes if mark else None,
                )
            )
        return session, roster

    def list_sessions(self, *, teacher_id: str, class_id: str) -> Sequence[AttendanceSession]:
        self._classes.get_owned_class(teacher_id=teacher_id, class_id=class_id)
        return self._sessions.list_for_class(class_id)

