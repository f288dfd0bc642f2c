from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.web import current_role, role_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .service import home_endpoint

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    app.jinja_env.globals["csrf_token"] = lambda: ""

    @app.route("/", endpoint="home")
    def home():
        if "user_id" not in session:
            return redirect(url_for("login"))
        return redirect(url_for(home_endpoint(current_role())))

    @app.route("/login", methods=["GET", "POST"], endpoint="login")
    def login():
        if "user_id" in session:
            return redirect(url_for("home"))

        if request.method == "POST":
            email = request.form.get("email", "")
            password = request.form.get("password", "")
            remember = request.form.get("remember_me")

            try:
                s_user = container.auth_service.authenticate(email, password)

                session.permanent = bool(remember)
                app.permanent_session_lifetime = timedelta(days=7)

                session["user_id"] = s_user.account_id
                session["email"] = s_user.email
                session["name"] = s_user.display_name
                session["role"] = s_user.role.value

                flash("Signed in successfully!", "success")
                return redirect(url_for(home_endpoint(s_user.role)))
            except AuthenticationError as e:
                flash(str(e), "danger")
            except Exception as e:
                logger.exception("sign-in failed")
                if bool(app.config.get("DEBUG", False)):
                    flash(f"System error while signing in: {e}", "danger")
                else:
                    flash("System error while signing in", "danger")

        return render_template("auth/login.html")

    @app.route("/logout", endpoint="logout")
    def logout():
        session.clear()
        flash("You have been signed out.", "info")
        return redirect(url_for("login"))

    @app.route("/register", methods=["GET", "POST"], endpoint="register")
    def register_student():
        if "user_id" in session:
            return redirect(url_for("home"))

        form = request.form
        if request.method == "POST":
            try:
                container.account_service.sign_up_student(
                    first_name=form.get("first_name", ""),
                    last_name=form.get("last_name", ""),
                    email=form.get("email", ""),
                    password=form.get("password", ""),
                    department_id=form.get("department_id", ""),
                    course_id=form.get("course_id", ""),
                    year_level=form.get("year_level", ""),
                )
                flash("Account created. You can now sign in.", "success")
                return redirect(url_for("login"))
            except ValidationError as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("student sign-up failed")
                flash("System error while creating the account", "danger")

        department_id = form.get("department_id", "")
        return render_template(
            "auth/register.html",
            form=form,
            departments=container.catalog_service.list_departments(),
            courses=container.catalog_service.list_courses(department_id),
        )

    @app.route("/admin/teachers/add", methods=["GET", "POST"], endpoint="admin_add_teacher")
    @role_required(Role.ADMIN)
    def admin_add_teacher():
        if request.method == "POST":
            try:
                container.account_service.create_teacher_account(
                    current_role=current_role(),
                    first_name=request.form.get("first_name", ""),
                    last_name=request.form.get("last_name", ""),
                    email=request.form.get("email", ""),
                    password=request.form.get("password", ""),
                    department_id=request.form.get("department_id") or None,
                )
                flash("Teacher account created!", "success")
                return redirect(url_for("admin_dashboard"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("teacher account creation failed")
                flash("System error while creating the teacher account", "danger")

        return render_template(
            "admin/add_teacher.html",
            departments=container.catalog_service.list_departments(),
            active_page="admin_add_teacher",
        )
