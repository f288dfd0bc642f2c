from __future__ import annotations

from functools import wraps

from flask import redirect, render_template, session, url_for

from ..core.enums import Role


def current_user() -> dict:
    return {"full_name": session.get("name"), "role": session.get("role"), "email": session.get("email")}


def current_role() -> Role:
    return Role(session.get("role"))


def render_forbidden():
    return render_template("403.html", current_user=current_user()), 403


def role_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return redirect(url_for("login"))

            if session.get("role") not in allowed:
                return render_forbidden()

            return view(*args, **kwargs)

        return wrapper

    return decorator
