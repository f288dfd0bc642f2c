from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/departments/<department_id>/courses", endpoint="api_courses")
    def api_courses(department_id: str):
        """Courses of a department, used by the registration and profile forms."""
        courses = container.catalog_service.list_courses(department_id)
        return jsonify([{"id": c.course_id, "name": c.name} for c in courses])
