from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from ..attendance.model import AttendanceMark, AttendanceSession
from ..attendance.repository import AttendanceRepository, SessionRepository
from ..classes.repository import ClassRepository, EnrollmentRepository
from ..classes.service import ClassService
from ..common.datetime_utils import month_label, now_local
from ..core.constants import ATTENDANCE_THRESHOLD, TOP_PERFORMERS
from ..core.enums import AttendanceStatus, DailyStatus
from ..people.repository import StudentRepository
from .model import (
    AdminDashboard,
    AdminStudentRow,
    ClassReport,
    ClassReportRow,
    StudentAttendanceRow,
    StudentDashboard,
    StudentOverview,
    StudentSummary,
    TeacherDailySummary,
)
from .repository import ReportRepository

CLASS_REPORT_FIELDS = [
    "class_name",
    "course",
    "block",
    "schedule",
    "students",
    "sessions",
    "present",
    "absent",
    "attendance_percent",
]


def _month_key(d: date) -> tuple[int, int]:
    return d.year, d.month


def _monthly_chart(buckets: dict[tuple[int, int], dict]) -> list[dict]:
    """Buckets keyed by (year, month), emitted in calendar order."""
    return [{"month": month_label(date(y, m, 1)), **buckets[(y, m)]} for y, m in sorted(buckets)]


def daily_status(statuses: Iterable[Optional[AttendanceStatus]]) -> Optional[DailyStatus]:
    """Collapse one student's marks of a day: Absent, then Missed, then Present."""
    statuses = list(statuses)
    if not statuses:
        return None
    if AttendanceStatus.ABSENT in statuses:
        return DailyStatus.ABSENT
    if None in statuses:
        return DailyStatus.MISSED
    return DailyStatus.PRESENT


class ReportService:
    def __init__(
        self,
        reports: ReportRepository,
        classes: ClassRepository,
        enrollments: EnrollmentRepository,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        students: StudentRepository,
        class_service: ClassService,
    ):
        self._reports = reports
        self._classes = classes
        self._enrollments = enrollments
        self._sessions = sessions
        self._attendance = attendance
        self._students = students
        self._class_service = class_service

    def student_dashboard(self, student_id: str) -> StudentDashboard:
        summary = self._reports.get_student_summary(student_id)
        if not summary:
            student = self._students.get_by_id(student_id)
            summary = StudentSummary(
                student_id=student_id,
                first_name=student.first_name if student else "",
                last_name=student.last_name if student else "",
            )

        return StudentDashboard(
            summary=summary,
            classes=list(self._reports.list_class_attendance(student_id)),
            chart=[
                {"name": AttendanceStatus.PRESENT.value, "value": summary.total_present},
                {"name": AttendanceStatus.ABSENT.value, "value": summary.total_absent},
            ],
        )

    def class_report(self, teacher_id: str) -> ClassReport:
        classes = self._classes.list_for_teacher(teacher_id)
        sessions_by_class: dict[str, list[AttendanceSession]] = defaultdict(list)
        for s in self._sessions.list_for_classes([c.class_id for c in classes]):
            sessions_by_class[s.class_id].append(s)

        all_sessions = [s for group in sessions_by_class.values() for s in group]
        marks_by_session: dict[str, list[AttendanceMark]] = defaultdict(list)
        for m in self._attendance.list_for_sessions([s.session_id for s in all_sessions]):
            marks_by_session[m.session_id].append(m)

        rows: list[ClassReportRow] = []
        monthly: dict[tuple[int, int], dict] = {}
        for school_class in classes:
            sessions = sessions_by_class.get(school_class.class_id)
            if not sessions:
                continue

            chart = []
            class_present = class_absent = 0
            for s in sessions:
                marks = marks_by_session.get(s.session_id, [])
                present = sum(1 for m in marks if m.status == AttendanceStatus.PRESENT)
                absent = sum(1 for m in marks if m.status == AttendanceStatus.ABSENT)
                chart.append({"date": s.session_date.isoformat(), "present": present, "absent": absent})

                bucket = monthly.setdefault(_month_key(s.session_date), {"present": 0, "absent": 0})
                bucket["present"] += present
                bucket["absent"] += absent

                class_present += present
                class_absent += absent

            rows.append(
                ClassReportRow(
                    school_class=school_class,
                    students=len(self._enrollments.list_students(school_class.class_id)),
                    present=class_present,
                    absent=class_absent,
                    sessions=len(sessions),
                    chart=chart,
                )
            )

        return ClassReport(
            classes=rows,
            total_students=sum(r.students for r in rows),
            total_sessions=sum(r.sessions for r in rows),
            total_present=sum(r.present for r in rows),
            total_absent=sum(r.absent for r in rows),
            monthly_chart=_monthly_chart(monthly),
        )

    def class_report_rows(self, teacher_id: str) -> list[dict]:
        """Flat rows of the class report for CSV export."""
        report = self.class_report(teacher_id)
        return [
            {
                "class_name": r.school_class.class_name,
                "course": r.school_class.course_name,
                "block": r.school_class.block.value,
                "schedule": r.school_class.schedule_label,
                "students": r.students,
                "sessions": r.sessions,
                "present": r.present,
                "absent": r.absent,
                "attendance_percent": r.percent,
            }
            for r in report.classes
        ]

    def student_overview(self, *, teacher_id: str, class_id: str) -> StudentOverview:
        school_class = self._class_service.get_owned_class(teacher_id=teacher_id, class_id=class_id)
        students = self._enrollments.list_students(class_id)
        sessions = self._sessions.list_for_classes([class_id])
        session_dates = {s.session_id: s.session_date for s in sessions}

        counts = {s.student_id: {"present": 0, "absent": 0} for s in students}
        monthly: dict[tuple[int, int], dict] = {}
        for m in self._attendance.list_for_sessions(list(session_dates)):
            if m.student_id not in counts:
                continue
            if m.status == AttendanceStatus.PRESENT:
                counts[m.student_id]["present"] += 1
                bucket = monthly.setdefault(_month_key(session_dates[m.session_id]), {"present": 0})
                bucket["present"] += 1
            else:
                counts[m.student_id]["absent"] += 1

        rows = [
            StudentAttendanceRow(
                student=s,
                present=counts[s.student_id]["present"],
                absent=counts[s.student_id]["absent"],
                total_sessions=len(sessions),
            )
            for s in students
        ]
        ranked = sorted(rows, key=lambda r: r.ratio, reverse=True)

        return StudentOverview(
            school_class=school_class,
            rows=rows,
            top_performers=ranked[:TOP_PERFORMERS],
            bottom_performers=ranked[-TOP_PERFORMERS:],
            monthly_chart=_monthly_chart(monthly),
            threshold=ATTENDANCE_THRESHOLD,
        )

    def admin_dashboard(self, *, department: Optional[str] = None, on_date: Optional[date] = None) -> AdminDashboard:
        on_date = on_date or now_local().date()
        listings = self._students.list_with_department()

        by_student: dict[str, list[Optional[AttendanceStatus]]] = defaultdict(list)
        for mark in self._reports.list_daily_marks(on_date):
            by_student[mark.student_id].append(mark.status)

        rows = [AdminStudentRow(student=s, status=daily_status(by_student.get(s.student_id, []))) for s in listings]
        present = sum(1 for r in rows if r.status == DailyStatus.PRESENT)
        absent = sum(1 for r in rows if r.status == DailyStatus.ABSENT)
        missed = sum(1 for r in rows if r.status == DailyStatus.MISSED)

        department = department if department and department != "All" else None
        return AdminDashboard(
            present=present,
            absent=absent,
            missed=missed,
            total_students=len(rows),
            departments=sorted({s.department for s in listings if s.department}),
            students=[r for r in rows if not department or r.student.department == department],
            selected_department=department,
            chart=[
                {"name": DailyStatus.PRESENT.value, "value": present},
                {"name": DailyStatus.ABSENT.value, "value": absent},
                {"name": DailyStatus.MISSED.value, "value": missed},
            ],
        )

    def teacher_today(self, teacher_id: str, *, on_date: Optional[date] = None) -> TeacherDailySummary:
        on_date = on_date or now_local().date()
        class_ids = {c.class_id for c in self._classes.list_for_teacher(teacher_id)}

        student_ids: set[str] = set()
        for class_id in class_ids:
            student_ids.update(s.student_id for s in self._enrollments.list_students(class_id))

        by_student: dict[str, list[Optional[AttendanceStatus]]] = defaultdict(list)
        for mark in self._reports.list_daily_marks(on_date):
            if mark.class_id in class_ids:
                by_student[mark.student_id].append(mark.status)

        statuses = [daily_status(by_student.get(s, [])) for s in student_ids]
        present = statuses.count(DailyStatus.PRESENT)
        absent = statuses.count(DailyStatus.ABSENT)
        missed = statuses.count(DailyStatus.MISSED)
        return TeacherDailySummary(
            present=present,
            absent=absent,
            missed=missed,
            total_students=len(student_ids),
            chart=[
                {"name": DailyStatus.PRESENT.value, "value": present},
                {"name": DailyStatus.ABSENT.value, "value": absent},
                {"name": DailyStatus.MISSED.value, "value": missed},
            ],
        )
