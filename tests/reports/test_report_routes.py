from __future__ import annotations

import pytest

from attendance_tracker.main import create_app


@pytest.fixture
def client(world, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=world.container).test_client()


def _sign_in(client, *, user_id, role, name="Maria Santos"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role
        sess["name"] = name


@pytest.fixture
def reported_class(world, make_class, fixed_now):
    class_id = make_class()
    for student_id in ("s-1", "s-2"):
        world.container.class_service.enroll(student_id=student_id, class_id=class_id)
    service = world.container.attendance_service
    session = service.start_session(teacher_id="t-1", class_id=class_id, now=fixed_now)
    service.record_attendance(teacher_id="t-1", session_id=session.session_id, marks={"s-1": "Present"})
    service.end_session(teacher_id="t-1", session_id=session.session_id, now=fixed_now)
    return class_id


def test_class_report_csv_download(client, reported_class):
    _sign_in(client, user_id="t-1", role="teacher")

    resp = client.get("/teacher/reports.csv")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    disposition = resp.headers["Content-Disposition"]
    assert disposition.startswith("attachment; filename=class_report_")
    assert disposition.endswith(".csv")
    assert resp.data.startswith(b"\xef\xbb\xbf")

    lines = resp.data.decode("utf-8-sig").splitlines()
    assert lines[0] == "class_name,course,block,schedule,students,sessions,present,absent,attendance_percent"
    assert lines[1].startswith("IT 101,BSIT,A,")
    assert lines[1].endswith(",2,1,1,1,50.00")


def test_class_report_csv_is_for_teachers_only(client):
    _sign_in(client, user_id="s-1", role="student")

    assert client.get("/teacher/reports.csv").status_code == 403


def test_teacher_dashboard_shows_today_cards(client, make_class):
    make_class()
    _sign_in(client, user_id="t-1", role="teacher")

    resp = client.get("/teacher/dashboard")

    assert resp.status_code == 200
    assert b"Present today" in resp.data
    assert b"Total students" in resp.data
