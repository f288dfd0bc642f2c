from __future__ import annotations

from datetime import date, time

import pytest

from attendance_tracker.common.datetime_utils import (
    format_time_12h,
    minutes_between,
    month_label,
    parse_hhmm,
    parse_iso_date,
)
from attendance_tracker.common.validators import (
    is_strong_password,
    require_email,
    require_matching_passwords,
    require_non_empty,
)
from attendance_tracker.core.exceptions import ValidationError


@pytest.mark.parametrize(
    "password, ok",
    [
        ("Abcdef1!", True),
        ("abcdef1!", False),
        ("ABCDEF1!", False),
        ("Abcdefg!", False),
        ("Abcdefg1", False),
        ("Ab1!", False),
    ],
)
def test_password_strength(password, ok):
    assert is_strong_password(password) is ok


def test_require_email_lowercases_and_rejects_bad_shape():
    assert require_email("  Ana@School.Test ") == "ana@school.test"
    with pytest.raises(ValidationError):
        require_email("not-an-email")


def test_require_non_empty_names_the_field():
    with pytest.raises(ValidationError, match="First name is required"):
        require_non_empty("   ", "First name")


def test_matching_passwords():
    require_matching_passwords("", "")
    with pytest.raises(ValidationError, match="Passwords do not match."):
        require_matching_passwords("Abcdef1!", "Abcdef1?")


def test_time_helpers():
    assert parse_hhmm("08:30") == time(8, 30)
    assert parse_hhmm("13:05:00") == time(13, 5)
    assert format_time_12h(time(13, 5)) == "1:05 PM"
    assert format_time_12h(time(0, 0)) == "12:00 AM"
    assert minutes_between(time(8, 0), time(9, 30)) == 90
    with pytest.raises(ValidationError):
        parse_hhmm("8 o'clock")


def test_date_helpers():
    assert parse_iso_date("2026-03-02") == date(2026, 3, 2)
    assert month_label(date(2026, 3, 2)) == "Mar 2026"
    with pytest.raises(ValidationError):
        parse_iso_date("02/03/2026")
