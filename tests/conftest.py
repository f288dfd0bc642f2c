from __future__ import annotations

import itertools
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from types import SimpleNamespace
from typing import Optional

import pytest

from attendance_tracker.accounts.model import Account
from attendance_tracker.attendance.model import AttendanceMark, AttendanceSession
from attendance_tracker.catalog.model import Course, Department
from attendance_tracker.classes.model import EnrolledStudent, SchoolClass
from attendance_tracker.container import wire_container
from attendance_tracker.core.enums import Role, SessionStatus
from attendance_tracker.core.exceptions import ValidationError
from attendance_tracker.people.model import Student, StudentListing, Teacher
from attendance_tracker.reports.model import ClassAttendanceRow, DailyMark, StudentSummary


class InMemoryAccounts:
    def __init__(self):
        self.items: dict[str, Account] = {}
        self._ids = itertools.count(1)

    def get_by_id(self, account_id: str) -> Optional[Account]:
        return self.items.get(account_id)

    def get_by_email(self, email: str) -> Optional[Account]:
        return next((a for a in self.items.values() if a.email == email), None)

    def create_account(self, *, email: str, password_hash: str, role: Role) -> str:
        account_id = f"acc-{next(self._ids)}"
        self.items[account_id] = Account(account_id=account_id, email=email, password_hash=password_hash, role=role)
        return account_id

    def update_email(self, account_id: str, email: str) -> bool:
        self.items[account_id] = replace(self.items[account_id], email=email)
        return True

    def update_password_hash(self, account_id: str, password_hash: str) -> bool:
        self.items[account_id] = replace(self.items[account_id], password_hash=password_hash)
        return True

    def delete_by_id(self, account_id: str) -> bool:
        return self.items.pop(account_id, None) is not None


@dataclass
class InMemoryCatalog:
    departments: dict[str, Department] = field(default_factory=dict)
    courses: dict[str, Course] = field(default_factory=dict)

    def list_departments(self):
        return sorted(self.departments.values(), key=lambda d: d.name)

    def get_department(self, department_id: str):
        return self.departments.get(department_id)

    def list_courses(self, department_id: str):
        return sorted((c for c in self.courses.values() if c.department_id == department_id), key=lambda c: c.name)

    def get_course(self, course_id: str):
        return self.courses.get(course_id)


@dataclass
class InMemoryTeachers:
    items: dict[str, Teacher] = field(default_factory=dict)

    def get_by_id(self, teacher_id: str) -> Optional[Teacher]:
        return self.items.get(teacher_id)

    def create(self, *, teacher_id, first_name, last_name, email, department_id) -> None:
        self.items[teacher_id] = Teacher(teacher_id, first_name, last_name, email, department_id)

    def update_profile(self, *, teacher_id, first_name, last_name, email, department_id) -> bool:
        if teacher_id not in self.items:
            return False
        self.items[teacher_id] = Teacher(teacher_id, first_name, last_name, email, department_id)
        return True


@dataclass
class InMemoryStudents:
    catalog: InMemoryCatalog
    items: dict[str, Student] = field(default_factory=dict)
    fail_on_create: bool = False

    def get_by_id(self, student_id: str) -> Optional[Student]:
        return self.items.get(student_id)

    def create(self, *, student_id, first_name, last_name, email, department_id, course_id, year_level) -> None:
        if self.fail_on_create:
            raise RuntimeError("insert failed")
        self.items[student_id] = Student(student_id, first_name, last_name, email, department_id, course_id, year_level)

    def update_profile(self, *, student_id, first_name, last_name, department_id, course_id, year_level) -> bool:
        s = self.items.get(student_id)
        if not s:
            return False
        self.items[student_id] = replace(
            s,
            first_name=first_name,
            last_name=last_name,
            department_id=department_id,
            course_id=course_id,
            year_level=year_level,
        )
        return True

    def list_with_department(self, *, department: Optional[str] = None):
        rows = []
        for s in sorted(self.items.values(), key=lambda s: (s.last_name, s.first_name)):
            dep = self.catalog.get_department(s.department_id)
            course = self.catalog.get_course(s.course_id)
            row = StudentListing(
                student_id=s.student_id,
                first_name=s.first_name,
                last_name=s.last_name,
                email=s.email,
                department=dep.name if dep else None,
                course=course.name if course else None,
                year_level=s.year_level,
            )
            if not department or row.department == department:
                rows.append(row)
        return rows


@dataclass
class InMemoryClasses:
    catalog: InMemoryCatalog
    teachers: InMemoryTeachers
    items: dict[str, SchoolClass] = field(default_factory=dict)

    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        return self.items.get(class_id)

    def create(self, *, teacher_id, class_name, course_id, year_level, block, day_of_week, start_time, end_time) -> str:
        for c in self.items.values():
            if (c.course_id, c.class_name, c.year_level, c.block, c.day_of_week, c.start_time) == (
                course_id, class_name, year_level, block, day_of_week, start_time
            ):
                raise ValidationError("A class with the same course, name, year level, block, day and start time already exists")
        class_id = f"class-{len(self.items) + 1}"
        course = self.catalog.get_course(course_id)
        teacher = self.teachers.get_by_id(teacher_id)
        self.items[class_id] = SchoolClass(
            class_id=class_id,
            teacher_id=teacher_id,
            class_name=class_name,
            course_id=course_id,
            year_level=year_level,
            block=block,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            created_at=datetime(2026, 1, 1, 0, len(self.items)),
            course_name=course.name if course else "",
            teacher_name=teacher.full_name if teacher else "",
        )
        return class_id

    def _ordered(self, classes):
        return sorted(classes, key=lambda c: (c.block.value, c.day_of_week.index, c.start_time))

    def list_for_teacher(self, teacher_id: str):
        return sorted((c for c in self.items.values() if c.teacher_id == teacher_id), key=lambda c: c.created_at, reverse=True)

    def list_for_course_year(self, *, course_id: str, year_level: str):
        return self._ordered(c for c in self.items.values() if c.course_id == course_id and c.year_level == year_level)

    def list_by_ids(self, class_ids):
        return self._ordered(self.items[i] for i in class_ids if i in self.items)


@dataclass
class InMemoryEnrollments:
    students: InMemoryStudents
    pairs: list[tuple[str, str]] = field(default_factory=list)

    def enroll(self, *, student_id: str, class_id: str) -> str:
        if (student_id, class_id) in self.pairs:
            raise ValidationError("You are already enrolled in this class.")
        self.pairs.append((student_id, class_id))
        return f"enr-{len(self.pairs)}"

    def list_class_ids(self, student_id: str):
        return [c for s, c in self.pairs if s == student_id]

    def list_students(self, class_id: str):
        out = []
        for s_id, c_id in self.pairs:
            if c_id == class_id:
                s = self.students.get_by_id(s_id)
                out.append(EnrolledStudent(s.student_id, s.first_name, s.last_name, s.email))
        return sorted(out, key=lambda s: (s.last_name, s.first_name))


@dataclass
class InMemorySessions:
    items: dict[str, AttendanceSession] = field(default_factory=dict)

    def get_by_id(self, session_id: str):
        return self.items.get(session_id)

    def get_for_class_date(self, class_id: str, session_date: date):
        return next((s for s in self.items.values() if s.class_id == class_id and s.session_date == session_date), None)

    def create(self, *, class_id, session_date, created_by, started_at) -> str:
        if self.get_for_class_date(class_id, session_date):
            raise ValidationError("A session already exists for this class on that date")
        session_id = f"sess-{len(self.items) + 1}"
        self.items[session_id] = AttendanceSession(
            session_id=session_id,
            class_id=class_id,
            session_date=session_date,
            created_by=created_by,
            status=SessionStatus.ONGOING,
            started_at=started_at,
        )
        return session_id

    def mark_ended(self, *, session_id, ended_at) -> bool:
        s = self.items.get(session_id)
        if not s or s.status != SessionStatus.ONGOING:
            return False
        self.items[session_id] = replace(s, status=SessionStatus.ENDED, ended_at=ended_at)
        return True

    def list_for_class(self, class_id: str):
        return sorted((s for s in self.items.values() if s.class_id == class_id), key=lambda s: s.session_date, reverse=True)

    def list_for_classes(self, class_ids):
        return sorted((s for s in self.items.values() if s.class_id in class_ids), key=lambda s: s.session_date)


@dataclass
class InMemoryAttendance:
    marks: dict[tuple[str, str, str], AttendanceMark] = field(default_factory=dict)

    def upsert_marks(self, marks) -> int:
        for m in marks:
            self.marks[(m.student_id, m.class_id, m.session_id)] = m
        return len(marks)

    def insert_missing_marks(self, marks) -> int:
        inserted = 0
        for m in marks:
            key = (m.student_id, m.class_id, m.session_id)
            if key not in self.marks:
                self.marks[key] = m
                inserted += 1
        return inserted

    def list_for_session(self, session_id: str):
        return [m for m in self.marks.values() if m.session_id == session_id]

    def list_for_sessions(self, session_ids):
        return [m for m in self.marks.values() if m.session_id in session_ids]


@dataclass
class InMemoryReports:
    """Computes the dashboard views from the other in-memory stores."""

    students: InMemoryStudents
    classes: InMemoryClasses
    enrollments: InMemoryEnrollments
    sessions: InMemorySessions
    attendance: InMemoryAttendance

    def get_student_summary(self, student_id: str):
        s = self.students.get_by_id(student_id)
        if not s:
            return None
        rows = self.list_class_attendance(student_id)
        return StudentSummary(
            student_id=student_id,
            first_name=s.first_name,
            last_name=s.last_name,
            total_present=sum(r.present_count for r in rows),
            total_absent=sum(r.absent_count for r in rows),
            total_classes=len(rows),
        )

    def list_class_attendance(self, student_id: str):
        rows = []
        for class_id in self.enrollments.list_class_ids(student_id):
            c = self.classes.get_by_id(class_id)
            marks = [m for m in self.attendance.marks.values() if m.student_id == student_id and m.class_id == class_id]
            rows.append(
                ClassAttendanceRow(
                    student_id=student_id,
                    class_id=class_id,
                    class_name=c.class_name,
                    present_count=sum(1 for m in marks if m.status.value == "Present"),
                    absent_count=sum(1 for m in marks if m.status.value == "Absent"),
                    total_sessions=len(self.sessions.list_for_classes([class_id])),
                )
            )
        return rows

    def list_daily_marks(self, on_date: date):
        out = []
        for s in self.sessions.items.values():
            if s.session_date != on_date:
                continue
            for student in self.enrollments.list_students(s.class_id):
                mark = self.attendance.marks.get((student.student_id, s.class_id, s.session_id))
                out.append(DailyMark(student.student_id, s.class_id, mark.status if mark else None))
        return out


class FakeCompletionClient:
    def __init__(self, reply: Optional[str] = "Everyone was present."):
        self.reply = reply
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> Optional[str]:
        self.prompts.append(prompt)
        return self.reply


@pytest.fixture
def fixed_now() -> datetime:
    # a Monday
    return datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def world():
    """In-memory repositories seeded with two departments, two teachers and three students."""
    catalog = InMemoryCatalog(
        departments={
            "dep-ccs": Department("dep-ccs", "College of Computer Studies"),
            "dep-cba": Department("dep-cba", "College of Business Administration"),
        },
        courses={
            "crs-bsit": Course("crs-bsit", "dep-ccs", "BSIT"),
            "crs-cs": Course("crs-cs", "dep-ccs", "Computer Science"),
            "crs-acc": Course("crs-acc", "dep-cba", "Accounting"),
        },
    )
    teachers = InMemoryTeachers(
        {
            "t-1": Teacher("t-1", "Maria", "Santos", "maria@school.test", "dep-ccs"),
            "t-2": Teacher("t-2", "Jose", "Rizal", "jose@school.test", "dep-ccs"),
        }
    )
    students = InMemoryStudents(
        catalog,
        {
            "s-1": Student("s-1", "Ana", "Cruz", "ana@school.test", "dep-ccs", "crs-bsit", "1st Year"),
            "s-2": Student("s-2", "Ben", "Abad", "ben@school.test", "dep-ccs", "crs-bsit", "1st Year"),
            "s-3": Student("s-3", "Cy", "Diaz", "cy@school.test", "dep-ccs", "crs-bsit", "1st Year"),
            "s-4": Student("s-4", "Dee", "Lim", "dee@school.test", "dep-cba", "crs-acc", "2nd Year"),
        },
    )
    classes = InMemoryClasses(catalog, teachers)
    enrollments = InMemoryEnrollments(students)
    sessions = InMemorySessions()
    attendance = InMemoryAttendance()
    reports = InMemoryReports(students, classes, enrollments, sessions, attendance)
    accounts = InMemoryAccounts()
    llm = FakeCompletionClient()

    container = wire_container(
        conn=None,
        accounts_repo=accounts,
        catalog_repo=catalog,
        teachers_repo=teachers,
        students_repo=students,
        classes_repo=classes,
        enrollments_repo=enrollments,
        sessions_repo=sessions,
        attendance_repo=attendance,
        reports_repo=reports,
        completion_client=llm,
    )
    return SimpleNamespace(
        container=container,
        accounts=accounts,
        catalog=catalog,
        teachers=teachers,
        students=students,
        classes=classes,
        enrollments=enrollments,
        sessions=sessions,
        attendance=attendance,
        llm=llm,
    )


@pytest.fixture
def make_class(world):
    """Create a class through the service with sensible defaults."""

    def _make(teacher_id="t-1", *, class_name="IT 101", block="A", day_of_week="Monday", start="08:00", end="09:30", **kw):
        return world.container.class_service.create_class(
            teacher_id=teacher_id,
            class_name=class_name,
            course_id=kw.get("course_id", "crs-bsit"),
            year_level=kw.get("year_level", "1st Year"),
            block=block,
            day_of_week=day_of_week,
            start_time=start,
            end_time=end,
        )

    return _make

