from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.web import role_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/student/profile", methods=["GET", "POST"], endpoint="student_profile")
    @role_required(Role.STUDENT)
    def student_profile():
        student_id = session["user_id"]

        if request.method == "POST":
            try:
                container.profile_service.update_student_profile(
                    student_id=student_id,
                    first_name=request.form.get("first_name", ""),
                    last_name=request.form.get("last_name", ""),
                    department_id=request.form.get("department_id", ""),
                    course_id=request.form.get("course_id", ""),
                    year_level=request.form.get("year_level", ""),
                )
                session["name"] = f"{request.form.get('first_name', '').strip()} {request.form.get('last_name', '').strip()}"
                flash("Profile updated successfully!", "success")
                return redirect(url_for("student_profile"))
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("student profile update failed")
                flash("System error while updating the profile", "danger")

        try:
            student = container.profile_service.get_student(student_id)
        except NotFoundError as e:
            flash(str(e), "danger")
            return redirect(url_for("logout"))

        return render_template(
            "student/profile.html",
            student=student,
            departments=container.catalog_service.list_departments(),
            courses=container.catalog_service.list_courses(student.department_id),
            active_page="student_profile",
        )

    @app.route("/teacher/profile", methods=["GET", "POST"], endpoint="teacher_profile")
    @role_required(Role.TEACHER)
    def teacher_profile():
        teacher_id = session["user_id"]

        if request.method == "POST":
            try:
                container.profile_service.update_teacher_profile(
                    teacher_id=teacher_id,
                    first_name=request.form.get("first_name", ""),
                    last_name=request.form.get("last_name", ""),
                    email=request.form.get("email", ""),
                    department_id=request.form.get("department_id") or None,
                    new_password=request.form.get("new_password", ""),
                    confirm_password=request.form.get("confirm_password", ""),
                )
                teacher = container.profile_service.get_teacher(teacher_id)
                session["name"] = teacher.full_name
                session["email"] = teacher.email
                flash("Profile updated successfully!", "success")
                return redirect(url_for("teacher_profile"))
            except (ValidationError, NotFoundError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("teacher profile update failed")
                flash("System error while updating the profile", "danger")

        try:
            teacher = container.profile_service.get_teacher(teacher_id)
        except NotFoundError as e:
            flash(str(e), "danger")
            return redirect(url_for("logout"))

        return render_template(
            "teacher/profile.html",
            teacher=teacher,
            stats=container.profile_service.teacher_schedule_stats(teacher_id),
            departments=container.catalog_service.list_departments(),
            active_page="teacher_profile",
        )
