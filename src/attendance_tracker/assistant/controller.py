from __future__ import annotations

import logging

from flask import Flask, flash, jsonify, render_template, request, session

from ..common.web import role_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AssistantError, ValidationError

logger = logging.getLogger(__name__)


def _json_text(payload: dict, key: str) -> str:
    value = payload.get(key)
    return value.strip() if isinstance(value, str) else ""


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance-chatbot", methods=["POST"], endpoint="api_attendance_chatbot")
    def api_attendance_chatbot():
        if "user_id" not in session:
            return jsonify({"error": "Not signed in"}), 401

        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            payload = {}
        teacher_id = _json_text(payload, "teacherId") or None
        student_id = _json_text(payload, "studentId") or None
        question = _json_text(payload, "question")

        requested_id = teacher_id or student_id
        if requested_id and session.get("role") != Role.ADMIN.value and requested_id != session["user_id"]:
            return jsonify({"error": "You can only ask about your own classes"}), 403

        try:
            answer = container.assistant.answer(teacher_id=teacher_id, student_id=student_id, question=question)
            return jsonify({"answer": answer})
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except AssistantError as e:
            return jsonify({"error": str(e)}), 500
        except Exception as e:
            logger.exception("attendance chatbot failed")
            return jsonify({"error": str(e)}), 500

    @app.route("/assistant", methods=["GET", "POST"], endpoint="assistant")
    @role_required(Role.TEACHER, Role.STUDENT)
    def assistant_page():
        # preset buttons submit a second "question" value after the text box
        question = next((q for q in reversed(request.form.getlist("question")) if q.strip()), "")
        answer = None

        if request.method == "POST":
            ids = {"teacher_id": session["user_id"]} if session.get("role") == Role.TEACHER.value else {"student_id": session["user_id"]}
            try:
                answer = container.assistant.answer(question=question, **ids)
            except (ValidationError, AssistantError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("assistant page failed")
                flash("System error while asking the assistant", "danger")

        return render_template(
            "assistant/chat.html",
            question=question,
            answer=answer,
            active_page="assistant",
        )
