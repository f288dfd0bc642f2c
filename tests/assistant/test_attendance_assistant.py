from __future__ import annotations

import json

import pytest

from attendance_tracker.assistant.llm_client import OpenAICompletionClient
from attendance_tracker.assistant.service import NO_CLASSES, NO_ENROLLED_CLASSES, NO_RESPONSE
from attendance_tracker.core.exceptions import AssistantError, ValidationError
from attendance_tracker.main import create_app


@pytest.fixture
def marked_class(world, make_class, fixed_now):
    class_id = make_class()
    for student_id in ("s-1", "s-2", "s-3"):
        world.container.class_service.enroll(student_id=student_id, class_id=class_id)
    service = world.container.attendance_service
    session = service.start_session(teacher_id="t-1", class_id=class_id, now=fixed_now)
    service.record_attendance(
        teacher_id="t-1",
        session_id=session.session_id,
        marks={"s-1": "Present", "s-3": "Present", "s-2": "Absent"},
    )
    return class_id


@pytest.fixture
def client(world, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=world.container)
    return app.test_client()


def _sign_in(client, *, user_id, role, name="User"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role
        sess["name"] = name


def test_teacher_prompt_lists_marks_per_session(world, marked_class):
    answer = world.container.assistant.answer(teacher_id="t-1", question="Who is absent today?")

    assert answer == "Everyone was present."
    prompt = world.llm.prompts[0]
    assert "You are a smart assistant for role: teacher." in prompt
    assert 'Answer the user\'s question: "Who is absent today?".' in prompt

    data = world.container.assistant.collect_attendance(world.classes.list_for_teacher("t-1"))
    assert data == {
        "IT 101": [
            {
                "sessionDate": "2026-03-02",
                "presentStudents": ["Ana Cruz", "Cy Diaz"],
                "absentStudents": ["Ben Abad"],
                "totalStudents": 3,
            }
        ]
    }
    assert json.dumps(data, indent=2) in prompt


def test_student_prompt_uses_enrolled_classes(world, marked_class):
    world.container.assistant.answer(student_id="s-2", question="How many times was I absent?")

    assert "role: student" in world.llm.prompts[0]
    assert '"IT 101"' in world.llm.prompts[0]


def test_classes_without_sessions_are_left_out(world, make_class):
    make_class()

    world.container.assistant.answer(teacher_id="t-1", question="Who is absent today?")

    assert "{}" in world.llm.prompts[0]


def test_early_answers_skip_the_model(world):
    assert world.container.assistant.answer(student_id="s-4", question="Any absences?") == NO_ENROLLED_CLASSES
    assert world.container.assistant.answer(teacher_id="t-2", question="Any absences?") == NO_CLASSES
    assert world.llm.prompts == []


def test_empty_reply_becomes_no_response(world, marked_class):
    world.llm.reply = None

    assert world.container.assistant.answer(teacher_id="t-1", question="Who is absent today?") == NO_RESPONSE


@pytest.mark.parametrize("kwargs", [{"question": "hi"}, {"teacher_id": "t-1", "question": "   "}])
def test_missing_caller_or_question(world, kwargs):
    with pytest.raises(ValidationError, match="Missing teacherId/studentId or question"):
        world.container.assistant.answer(**kwargs)


def test_completion_client_requires_api_key():
    with pytest.raises(AssistantError, match="missing API key"):
        OpenAICompletionClient(api_key=None).complete("hello")


def test_endpoint_requires_sign_in(client):
    resp = client.post("/api/attendance-chatbot", json={"teacherId": "t-1", "question": "hi"})

    assert resp.status_code == 401


def test_endpoint_answers_own_classes(client, world, marked_class):
    _sign_in(client, user_id="t-1", role="teacher")

    resp = client.post("/api/attendance-chatbot", json={"teacherId": "t-1", "question": "Who is absent today?"})

    assert resp.status_code == 200
    assert resp.get_json() == {"answer": "Everyone was present."}


def test_endpoint_rejects_other_callers_ids(client):
    _sign_in(client, user_id="s-1", role="student")

    resp = client.post("/api/attendance-chatbot", json={"teacherId": "t-1", "question": "Who is absent today?"})

    assert resp.status_code == 403


def test_endpoint_validation_error_is_400(client):
    _sign_in(client, user_id="t-1", role="teacher")

    resp = client.post("/api/attendance-chatbot", json={"teacherId": "t-1"})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Missing teacherId/studentId or question"


@pytest.mark.parametrize(
    "body",
    [
        ["t-1", "Who is absent today?"],
        {"teacherId": "t-1", "question": 42},
        {"teacherId": ["t-1"], "question": "Who is absent today?"},
    ],
)
def test_endpoint_malformed_body_is_400(client, world, body):
    _sign_in(client, user_id="t-1", role="teacher")

    resp = client.post("/api/attendance-chatbot", json=body)

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Missing teacherId/studentId or question"}
    assert world.llm.prompts == []


def test_admin_may_ask_about_any_teacher(client, world, marked_class):
    _sign_in(client, user_id="acc-admin", role="admin")

    resp = client.post("/api/attendance-chatbot", json={"teacherId": "t-1", "question": "Who has the most absences?"})

    assert resp.status_code == 200
    assert len(world.llm.prompts) == 1


def test_model_failure_is_500(client, world, marked_class, monkeypatch):
    def fail(prompt):
        raise AssistantError("upstream unavailable")

    monkeypatch.setattr(world.llm, "complete", fail)
    _sign_in(client, user_id="t-1", role="teacher")

    resp = client.post("/api/attendance-chatbot", json={"teacherId": "t-1", "question": "Who is absent today?"})

    assert resp.status_code == 500
    assert resp.get_json() == {"error": "upstream unavailable"}


def test_assistant_page_uses_last_question(client, world, marked_class):
    _sign_in(client, user_id="t-1", role="teacher", name="Maria Santos")

    resp = client.post("/assistant", data={"question": ["", "Who has the most absences?"]})

    assert resp.status_code == 200
    assert b"Everyone was present." in resp.data
    assert 'Answer the user\'s question: "Who has the most absences?".' in world.llm.prompts[0]
