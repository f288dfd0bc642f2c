from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..classes.model import EnrolledStudent, SchoolClass
from ..core.enums import AttendanceStatus, DailyStatus
from ..people.model import StudentListing


@dataclass(frozen=True)
class StudentSummary:
    """Row of the `student_attendance_summary` view."""

    student_id: str
    first_name: str
    last_name: str
    total_present: int = 0
    total_absent: int = 0
    total_classes: int = 0


@dataclass(frozen=True)
class ClassAttendanceRow:
    """Row of the `student_class_attendance` view."""

    student_id: str
    class_id: str
    class_name: str
    present_count: int
    absent_count: int
    total_sessions: int


@dataclass(frozen=True)
class DailyMark:
    """An enrolled student of a class that met on a day, with the mark if any."""

    student_id: str
    class_id: str
    status: Optional[AttendanceStatus]


@dataclass(frozen=True)
class StudentDashboard:
    summary: StudentSummary
    classes: list[ClassAttendanceRow]
    chart: list[dict]


@dataclass(frozen=True)
class ClassReportRow:
    school_class: SchoolClass
    students: int
    present: int
    absent: int
    sessions: int
    chart: list[dict]

    @property
    def percent(self) -> str:
        return format_percent(self.present, self.students * self.sessions)


@dataclass(frozen=True)
class ClassReport:
    classes: list[ClassReportRow]
    total_students: int
    total_sessions: int
    total_present: int
    total_absent: int
    monthly_chart: list[dict]

    @property
    def percent(self) -> str:
        if not self.total_students or not self.total_sessions:
            return "0"
        return format_percent(self.total_present, self.total_students * self.total_sessions)


@dataclass(frozen=True)
class StudentAttendanceRow:
    student: EnrolledStudent
    present: int
    absent: int
    total_sessions: int

    @property
    def ratio(self) -> float:
        return (self.present / self.total_sessions) * 100 if self.total_sessions else 0.0

    @property
    def percent(self) -> str:
        return format_percent(self.present, self.total_sessions)


@dataclass(frozen=True)
class StudentOverview:
    school_class: SchoolClass
    rows: list[StudentAttendanceRow]
    top_performers: list[StudentAttendanceRow]
    bottom_performers: list[StudentAttendanceRow]
    monthly_chart: list[dict]
    threshold: int


@dataclass(frozen=True)
class AdminStudentRow:
    student: StudentListing
    status: Optional[DailyStatus]


@dataclass(frozen=True)
class AdminDashboard:
    present: int
    absent: int
    missed: int
    total_students: int
    departments: list[str]
    students: list[AdminStudentRow]
    selected_department: Optional[str] = None
    chart: list[dict] = field(default_factory=list)


@dataclass(frozen=True)
class TeacherDailySummary:
    """Today's statuses of the students enrolled in one teacher's classes."""

    present: int
    absent: int
    missed: int
    total_students: int
    chart: list[dict] = field(default_factory=list)

def format_percent(numerator: int, denominator: int) -> str:
    """Percentage with two decimals, or "0" when undefined."""
    if not denominator:
        return "0"
    return f"{numerator / denominator * 100:.2f}"
