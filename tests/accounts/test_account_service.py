from __future__ import annotations

import pytest
from werkzeug.security import check_password_hash

from attendance_tracker.accounts.service import home_endpoint
from attendance_tracker.core.enums import Role
from attendance_tracker.core.exceptions import AuthenticationError, AuthorizationError, ValidationError


def _sign_up(world, **overrides):
    data = dict(
        first_name="Ella",
        last_name="Reyes",
        email="Ella@School.test",
        password="Secret#2026",
        department_id="dep-ccs",
        course_id="crs-bsit",
        year_level="1st Year",
    )
    data.update(overrides)
    return world.container.account_service.sign_up_student(**data)


def test_sign_up_creates_account_and_profile(world):
    account_id = _sign_up(world)

    account = world.accounts.get_by_id(account_id)
    assert account.email == "ella@school.test"
    assert account.role == Role.STUDENT
    assert check_password_hash(account.password_hash, "Secret#2026")
    assert world.students.get_by_id(account_id).full_name == "Ella Reyes"


def test_sign_up_rejects_weak_password(world):
    with pytest.raises(ValidationError, match="at least 8 characters"):
        _sign_up(world, password="weakpass")
    assert world.accounts.items == {}


def test_sign_up_rejects_course_outside_department(world):
    with pytest.raises(ValidationError, match="does not belong"):
        _sign_up(world, course_id="crs-acc")


def test_sign_up_rejects_duplicate_email(world):
    _sign_up(world)
    with pytest.raises(ValidationError, match="already registered"):
        _sign_up(world, email="ella@school.test")


def test_sign_up_removes_account_when_profile_insert_fails(world):
    world.students.fail_on_create = True

    with pytest.raises(RuntimeError):
        _sign_up(world)
    assert world.accounts.items == {}


def test_authenticate_returns_session_user(world):
    account_id = _sign_up(world)

    user = world.container.auth_service.authenticate(" ELLA@school.test ", "Secret#2026")
    assert user.account_id == account_id
    assert user.role == Role.STUDENT
    assert user.display_name == "Ella Reyes"


def test_authenticate_rejects_wrong_password_and_unknown_email(world):
    _sign_up(world)
    auth = world.container.auth_service

    with pytest.raises(AuthenticationError, match="Invalid email or password"):
        auth.authenticate("ella@school.test", "wrong")
    with pytest.raises(AuthenticationError):
        auth.authenticate("nobody@school.test", "Secret#2026")


def test_only_admin_can_create_teacher(world):
    service = world.container.account_service
    data = dict(first_name="Rosa", last_name="Luna", email="rosa@school.test", password="Teach#2026", department_id="dep-ccs")

    with pytest.raises(AuthorizationError):
        service.create_teacher_account(current_role=Role.TEACHER, **data)

    teacher_id = service.create_teacher_account(current_role=Role.ADMIN, **data)
    assert world.accounts.get_by_id(teacher_id).role == Role.TEACHER
    assert world.teachers.get_by_id(teacher_id).department_id == "dep-ccs"


def test_update_credentials_changes_email_and_password(world):
    account_id = _sign_up(world)
    auth = world.container.auth_service

    changed = auth.update_credentials(
        account_id=account_id,
        email="ella.reyes@school.test",
        new_password="Better#2027",
        confirm_password="Better#2027",
    )

    assert changed == ["email", "password"]
    assert auth.authenticate("ella.reyes@school.test", "Better#2027").account_id == account_id


def test_update_credentials_requires_matching_passwords(world):
    account_id = _sign_up(world)
    with pytest.raises(ValidationError, match="Passwords do not match."):
        world.container.auth_service.update_credentials(
            account_id=account_id, new_password="Better#2027", confirm_password="Better#2028"
        )


@pytest.mark.parametrize(
    "role, endpoint",
    [(Role.ADMIN, "admin_dashboard"), (Role.TEACHER, "teacher_dashboard"), (Role.STUDENT, "student_dashboard")],
)
def test_home_endpoint_routes_by_role(role, endpoint):
    assert home_endpoint(role) == endpoint
