from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.datetime_utils import parse_iso_date
from ..common.web import render_forbidden, role_required
from ..container import Container
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _marks_from_form(form) -> tuple[dict, dict]:
    """Collect `status_<student_id>` / `notes_<student_id>` fields."""
    marks, notes = {}, {}
    for key, value in form.items():
        if key.startswith("status_") and value:
            marks[key[len("status_"):]] = value
        elif key.startswith("notes_"):
            notes[key[len("notes_"):]] = value
    return marks, notes


def register(app: Flask, container: Container) -> None:
    @app.route("/teacher/classes/<class_id>/sessions", methods=["GET", "POST"], endpoint="teacher_class_sessions")
    @role_required(Role.TEACHER)
    def teacher_class_sessions(class_id: str):
        teacher_id = session["user_id"]

        if request.method == "POST":
            try:
                date_s = request.form.get("session_date")
                started = container.attendance_service.start_session(
                    teacher_id=teacher_id,
                    class_id=class_id,
                    session_date=parse_iso_date(date_s) if date_s else None,
                )
                return redirect(url_for("teacher_session", session_id=started.session_id))
            except AuthorizationError:
                return render_forbidden()
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("failed to start session for class %s", class_id)
                flash("System error while starting the session", "danger")

        try:
            school_class = container.class_service.get_owned_class(teacher_id=teacher_id, class_id=class_id)
            sessions = container.attendance_service.list_sessions(teacher_id=teacher_id, class_id=class_id)
        except AuthorizationError:
            return render_forbidden()
        except NotFoundError as e:
            flash(str(e), "danger")
            return redirect(url_for("teacher_classes"))

        return render_template(
            "teacher/sessions.html",
            school_class=school_class,
            sessions=sessions,
            active_page="teacher_classes",
        )

    @app.route("/teacher/sessions/<session_id>", methods=["GET", "POST"], endpoint="teacher_session")
    @role_required(Role.TEACHER)
    def teacher_session(session_id: str):
        teacher_id = session["user_id"]

        if request.method == "POST":
            try:
                marks, notes = _marks_from_form(request.form)
                saved = container.attendance_service.record_attendance(
                    teacher_id=teacher_id,
                    session_id=session_id,
                    marks=marks,
                    notes=notes,
                )
                flash(f"Attendance saved for {saved} student(s).", "success")
                return redirect(url_for("teacher_session", session_id=session_id))
            except AuthorizationError:
                return render_forbidden()
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("failed to record attendance for session %s", session_id)
                flash("System error while saving attendance", "danger")

        try:
            attendance_session, roster = container.attendance_service.session_roster(
                teacher_id=teacher_id, session_id=session_id
            )
        except AuthorizationError:
            return render_forbidden()
        except NotFoundError as e:
            flash(str(e), "danger")
            return redirect(url_for("teacher_classes"))

        return render_template(
            "teacher/session.html",
            attendance_session=attendance_session,
            school_class=container.classes_repo.get_by_id(attendance_session.class_id),
            roster=roster,
            statuses=list(AttendanceStatus),
            active_page="teacher_classes",
        )

    @app.route("/teacher/sessions/<session_id>/end", methods=["POST"], endpoint="teacher_session_end")
    @role_required(Role.TEACHER)
    def teacher_session_end(session_id: str):
        try:
            auto_absent = container.attendance_service.end_session(teacher_id=session["user_id"], session_id=session_id)
            flash(f"Session ended. {auto_absent} unmarked student(s) recorded absent.", "success")
        except AuthorizationError:
            return render_forbidden()
        except (ValidationError, NotFoundError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("failed to end session %s", session_id)
            flash("System error while ending the session", "danger")

        return redirect(url_for("teacher_session", session_id=session_id))
