from __future__ import annotations

import csv
import io
import logging

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.datetime_utils import now_local
from ..common.web import render_forbidden, role_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from .service import CLASS_REPORT_FIELDS

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _write_report_csv(*, rows: list[dict], filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CLASS_REPORT_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/student/dashboard", endpoint="student_dashboard")
    @role_required(Role.STUDENT)
    def student_dashboard():
        student_id = session["user_id"]
        return render_template(
            "student/dashboard.html",
            dashboard=container.report_service.student_dashboard(student_id),
            enrolled=container.class_service.list_enrolled(student_id),
            active_page="student_dashboard",
        )

    @app.route("/teacher/dashboard", endpoint="teacher_dashboard")
    @role_required(Role.TEACHER)
    def teacher_dashboard():
        teacher_id = session["user_id"]
        return render_template(
            "teacher/dashboard.html",
            classes=container.class_service.list_for_teacher(teacher_id),
            stats=container.profile_service.teacher_schedule_stats(teacher_id),
            today=container.report_service.teacher_today(teacher_id),
            last_seq=container.class_service.last_change_seq,
            active_page="teacher_dashboard",
        )

    @app.route("/teacher/reports", endpoint="teacher_reports")
    @role_required(Role.TEACHER)
    def teacher_reports():
        return render_template(
            "teacher/reports.html",
            report=container.report_service.class_report(session["user_id"]),
            active_page="teacher_reports",
        )

    @app.route("/teacher/reports.csv", endpoint="teacher_reports_csv")
    @role_required(Role.TEACHER)
    def teacher_reports_csv():
        rows = container.report_service.class_report_rows(session["user_id"])
        filename = f"class_report_{now_local().strftime('%Y%m%d')}.csv"
        return _write_report_csv(rows=rows, filename=filename)

    @app.route("/teacher/classes/<class_id>/students", endpoint="teacher_class_students")
    @role_required(Role.TEACHER)
    def teacher_class_students(class_id: str):
        try:
            overview = container.report_service.student_overview(teacher_id=session["user_id"], class_id=class_id)
        except AuthorizationError:
            return render_forbidden()
        except NotFoundError as e:
            flash(str(e), "danger")
            return redirect(url_for("teacher_classes"))

        return render_template(
            "teacher/class_students.html",
            overview=overview,
            active_page="teacher_reports",
        )

    @app.route("/admin/dashboard", endpoint="admin_dashboard")
    @role_required(Role.ADMIN)
    def admin_dashboard():
        return render_template(
            "admin/dashboard.html",
            dashboard=container.report_service.admin_dashboard(department=request.args.get("department")),
            active_page="admin_dashboard",
        )
