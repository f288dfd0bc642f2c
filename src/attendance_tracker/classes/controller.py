from __future__ import annotations

import logging

from flask import Flask, flash, jsonify, redirect, render_template, request, session, url_for

from ..common.web import role_required
from ..container import Container
from ..core.enums import Block, DayOfWeek, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/teacher/classes", methods=["GET", "POST"], endpoint="teacher_classes")
    @role_required(Role.TEACHER)
    def teacher_classes():
        teacher_id = session["user_id"]

        if request.method == "POST":
            try:
                container.class_service.create_class(
                    teacher_id=teacher_id,
                    class_name=request.form.get("class_name", ""),
                    course_id=request.form.get("course_id", ""),
                    year_level=request.form.get("year_level", ""),
                    block=request.form.get("block", ""),
                    day_of_week=request.form.get("day_of_week", ""),
                    start_time=request.form.get("start_time", ""),
                    end_time=request.form.get("end_time", ""),
                )
                flash("Class created successfully!", "success")
                return redirect(url_for("teacher_classes"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("failed to create class")
                flash("System error while creating the class", "danger")

        teacher = container.teachers_repo.get_by_id(teacher_id)
        if teacher and teacher.department_id:
            courses = container.catalog_service.list_courses(teacher.department_id)
        else:
            courses = [
                c for d in container.catalog_service.list_departments()
                for c in container.catalog_service.list_courses(d.department_id)
            ]

        return render_template(
            "teacher/classes.html",
            classes=container.class_service.list_for_teacher(teacher_id),
            courses=courses,
            blocks=list(Block),
            days=list(DayOfWeek),
            last_seq=container.class_service.last_change_seq,
            active_page="teacher_classes",
        )

    @app.route("/api/classes/changes", endpoint="api_class_changes")
    @role_required(Role.TEACHER, Role.ADMIN)
    def api_class_changes():
        """Polling endpoint: class changes newer than `after`."""
        try:
            after = int(request.args.get("after") or 0)
        except ValueError:
            return jsonify({"error": "after must be an integer"}), 400

        teacher_id = session["user_id"] if session.get("role") == Role.TEACHER.value else None
        changes = container.class_service.changes_after(after, teacher_id=teacher_id)
        return jsonify(
            {
                "last_seq": container.class_service.last_change_seq,
                "changes": [c.to_dict() for c in changes],
            }
        )

    @app.route("/student/enroll", endpoint="student_enroll")
    @role_required(Role.STUDENT)
    def student_enroll():
        student_id = session["user_id"]
        return render_template(
            "student/enroll.html",
            offerings=container.class_service.list_available_for_student(student_id),
            enrolled=container.class_service.list_enrolled(student_id),
            active_page="student_enroll",
        )

    @app.route("/student/enroll/<class_id>", methods=["POST"], endpoint="student_enroll_class")
    @role_required(Role.STUDENT)
    def student_enroll_class(class_id: str):
        try:
            container.class_service.enroll(student_id=session["user_id"], class_id=class_id)
            flash("Enrolled successfully!", "success")
        except (ValidationError, AuthorizationError, NotFoundError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("enrollment failed for class %s", class_id)
            flash("System error while enrolling", "danger")

        return redirect(url_for("student_enroll"))
