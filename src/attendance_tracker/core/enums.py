from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role used for routing and permission checks."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class Block(str, Enum):
    """Section letter partitioning class offerings."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"


class DayOfWeek(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @property
    def index(self) -> int:
        return list(DayOfWeek).index(self)


class SessionStatus(str, Enum):
    """Lifecycle of an attendance session: Ongoing -> Ended."""

    ONGOING = "Ongoing"
    ENDED = "Ended"


class AttendanceStatus(str, Enum):
    """Mark stored per student and session."""

    PRESENT = "Present"
    ABSENT = "Absent"


class DailyStatus(str, Enum):
    """Derived status shown on the admin dashboard for today."""

    PRESENT = "Present"
    ABSENT = "Absent"
    MISSED = "Missed"
