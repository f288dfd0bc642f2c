from __future__ import annotations

import json
import logging
from collections import defaultdict
from typing import Optional

from ..attendance.repository import AttendanceRepository, SessionRepository
from ..classes.repository import ClassRepository, EnrollmentRepository
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import ValidationError
from .llm_client import CompletionClient

logger = logging.getLogger(__name__)

NO_ENROLLED_CLASSES = "No enrolled classes found."
NO_CLASSES = "No classes found."
NO_RESPONSE = "No response"

PROMPT_TEMPLATE = """
You are a smart assistant for role: {role}.
You have attendance data per class as follows:

{data}

Answer the user's question: "{question}".
- If the question is "Who is absent today?", list absent students by class.
- If the question is "Who has the most absences?", compute totals across sessions and rank students.
- Always include class names and session dates when relevant.
"""


def build_prompt(*, role: Role, attendance_data: dict, question: str) -> str:
    return PROMPT_TEMPLATE.format(
        role=role.value,
        data=json.dumps(attendance_data, indent=2),
        question=question,
    )


class AttendanceAssistant:
    """Answers free-text questions about attendance with an LLM.

    The prompt carries, for each class of the caller that has sessions, the
    present and absent student names of every session in date order.
    """

    def __init__(
        self,
        classes: ClassRepository,
        enrollments: EnrollmentRepository,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        client: CompletionClient,
    ):
        self._classes = classes
        self._enrollments = enrollments
        self._sessions = sessions
        self._attendance = attendance
        self._client = client

    def collect_attendance(self, classes) -> dict[str, list[dict]]:
        sessions_by_class = defaultdict(list)
        for s in self._sessions.list_for_classes([c.class_id for c in classes]):
            sessions_by_class[s.class_id].append(s)

        marks_by_session = defaultdict(list)
        all_session_ids = [s.session_id for group in sessions_by_class.values() for s in group]
        for m in self._attendance.list_for_sessions(all_session_ids):
            marks_by_session[m.session_id].append(m)

        data: dict[str, list[dict]] = {}
        for school_class in classes:
            sessions = sorted(sessions_by_class.get(school_class.class_id, []), key=lambda s: s.session_date)
            if not sessions:
                continue

            # enrollment list is already ordered by last name
            roster = self._enrollments.list_students(school_class.class_id)
            order = {s.student_id: i for i, s in enumerate(roster)}
            names = {s.student_id: s.full_name for s in roster}

            entries = data.setdefault(school_class.class_name, [])
            for s in sessions:
                marks = sorted(marks_by_session.get(s.session_id, []), key=lambda m: order.get(m.student_id, len(order)))
                present = [names.get(m.student_id, "Unknown") for m in marks if m.status == AttendanceStatus.PRESENT]
                absent = [names.get(m.student_id, "Unknown") for m in marks if m.status == AttendanceStatus.ABSENT]
                entries.append(
                    {
                        "sessionDate": s.session_date.isoformat(),
                        "presentStudents": present,
                        "absentStudents": absent,
                        "totalStudents": len(present) + len(absent),
                    }
                )
        return data

    def answer(self, *, question: str, teacher_id: Optional[str] = None, student_id: Optional[str] = None) -> str:
        question = (question or "").strip()
        if (not teacher_id and not student_id) or not question:
            raise ValidationError("Missing teacherId/studentId or question")

        if teacher_id:
            role = Role.TEACHER
            classes = self._classes.list_for_teacher(teacher_id)
        else:
            role = Role.STUDENT
            class_ids = self._enrollments.list_class_ids(student_id)
            if not class_ids:
                return NO_ENROLLED_CLASSES
            classes = self._classes.list_by_ids(list(class_ids))

        if not classes:
            return NO_CLASSES

        prompt = build_prompt(role=role, attendance_data=self.collect_attendance(classes), question=question)
        logger.info("assistant question from %s (%d classes)", role.value, len(classes))
        return self._client.complete(prompt) or NO_RESPONSE
