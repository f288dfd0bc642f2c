from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Teacher:
    """Teacher profile; `teacher_id` is the owning account id."""

    teacher_id: str
    first_name: str
    last_name: str
    email: str
    department_id: Optional[str]
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def initials(self) -> str:
        return f"{self.first_name[:1]}{self.last_name[:1]}".upper() or "T"


@dataclass(frozen=True)
class Student:
    """Student profile; `student_id` is the owning account id."""

    student_id: str
    first_name: str
    last_name: str
    email: str
    department_id: Optional[str]
    course_id: Optional[str]
    year_level: str
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class StudentListing:
    """Read-model row for the admin student table."""

    student_id: str
    first_name: str
    last_name: str
    email: str
    department: Optional[str]
    course: Optional[str]
    year_level: str
