from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..catalog.service import CatalogService
from ..common.validators import (
    require_email,
    require_matching_passwords,
    require_non_empty,
    require_strong_password,
)
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from ..people.repository import StudentRepository, TeacherRepository
from .repository import AccountRepository

logger = logging.getLogger(__name__)

HOME_ENDPOINTS = {
    Role.ADMIN: "admin_dashboard",
    Role.TEACHER: "teacher_dashboard",
    Role.STUDENT: "student_dashboard",
}


def home_endpoint(role: Role) -> str:
    """Dashboard endpoint a signed-in user lands on."""
    return HOME_ENDPOINTS.get(role, "login")


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    account_id: str
    email: str
    role: Role
    display_name: str


class AuthService:
    """Use case: sign in and manage one's own credentials."""

    def __init__(self, accounts: AccountRepository, teachers: TeacherRepository, students: StudentRepository):
        self._accounts = accounts
        self._teachers = teachers
        self._students = students

    def _display_name(self, account_id: str, role: Role, fallback: str) -> str:
        profile = None
        if role == Role.TEACHER:
            profile = self._teachers.get_by_id(account_id)
        elif role == Role.STUDENT:
            profile = self._students.get_by_id(account_id)
        return profile.full_name if profile else fallback

    def authenticate(self, email: str, password: str) -> SessionUser:
        account = self._accounts.get_by_email((email or "").strip().lower())
        if not account or not account.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(account.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return SessionUser(
            account_id=account.account_id,
            email=account.email,
            role=account.role,
            display_name=self._display_name(account.account_id, account.role, account.email),
        )

    def update_credentials(
        self,
        *,
        account_id: str,
        email: Optional[str] = None,
        new_password: str = "",
        confirm_password: str = "",
    ) -> list[str]:
        """Change email and/or password; returns the names of the fields changed."""
        account = self._accounts.get_by_id(account_id)
        if not account:
            raise ValidationError("Account does not exist")

        require_matching_passwords(new_password, confirm_password)
        if new_password:
            require_strong_password(new_password)

        changed: list[str] = []
        if email is not None:
            email = require_email(email)
            if email != account.email:
                existing = self._accounts.get_by_email(email)
                if existing and existing.account_id != account_id:
                    raise ValidationError("Email is already registered")
                self._accounts.update_email(account_id, email)
                changed.append("email")

        if new_password:
            self._accounts.update_password_hash(account_id, generate_password_hash(new_password))
            changed.append("password")

        return changed


class AccountService:
    """Use case: create accounts (student self sign-up, admin-created teachers)."""

    def __init__(
        self,
        accounts: AccountRepository,
        teachers: TeacherRepository,
        students: StudentRepository,
        catalog: CatalogService,
    ):
        self._accounts = accounts
        self._teachers = teachers
        self._students = students
        self._catalog = catalog

    def _new_account(self, *, email: str, password: str, role: Role) -> str:
        email = require_email(email)
        require_strong_password(password)
        if self._accounts.get_by_email(email):
            raise ValidationError("Email is already registered")
        return self._accounts.create_account(email=email, password_hash=generate_password_hash(password), role=role)

    def sign_up_student(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        department_id: str,
        course_id: str,
        year_level: str,
    ) -> str:
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        year_level = require_non_empty(year_level, "Year level")
        department_id = require_non_empty(department_id, "Department")
        course_id = require_non_empty(course_id, "Course")
        self._catalog.require_course_in_department(course_id=course_id, department_id=department_id)

        account_id = self._new_account(email=email, password=password, role=Role.STUDENT)
        try:
            self._students.create(
                student_id=account_id,
                first_name=first_name,
                last_name=last_name,
                email=email.strip().lower(),
                department_id=department_id,
                course_id=course_id,
                year_level=year_level,
            )
        except Exception:
            logger.warning("student profile insert failed; removing account %s", account_id)
            self._accounts.delete_by_id(account_id)
            raise

        logger.info("student account created: %s", account_id)
        return account_id

    def create_teacher_account(
        self,
        *,
        current_role: Role,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        department_id: Optional[str],
    ) -> str:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission to do this")

        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        department_id = department_id or None
        if department_id:
            self._catalog.require_department(department_id)

        account_id = self._new_account(email=email, password=password, role=Role.TEACHER)
        try:
            self._teachers.create(
                teacher_id=account_id,
                first_name=first_name,
                last_name=last_name,
                email=email.strip().lower(),
                department_id=department_id,
            )
        except Exception:
            logger.warning("teacher profile insert failed; removing account %s", account_id)
            self._accounts.delete_by_id(account_id)
            raise

        logger.info("teacher account created: %s", account_id)
        return account_id
