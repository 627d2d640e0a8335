from __future__ import annotations

import logging

from flask import Flask, g, jsonify

from ..common.http import bearer_token, current_actor, json_body, login_required
from ..container import Container
from ..core.enums import Action
from ..core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.before_request
    def load_actor():
        g.actor = None
        g.auth_error = None
        token = bearer_token()
        if not token:
            return None
        try:
            g.actor = container.auth_service.verify(token)
        except AuthenticationError as e:
            g.auth_error = str(e)
        return None

    def admin_only():
        container.policy.require(current_actor(), Action.MANAGE_CATALOG)

    # --- auth ---

    @app.route("/api/login", methods=["POST"], endpoint="api_login")
    def api_login():
        data = json_body()
        token, actor = container.auth_service.login(data.get("email"), data.get("password"))
        return jsonify({"message": "Login successful", "token": token, "user": actor.to_dict()}), 200

    @app.route("/api/logout", methods=["POST"], endpoint="api_logout")
    @login_required
    def api_logout():
        # Tokens are stateless; the client discards it.
        return jsonify({"message": "Logged out successfully."}), 200

    @app.route("/api/verify", methods=["GET"], endpoint="api_verify")
    @login_required
    def api_verify():
        return jsonify(container.auth_service.profile(current_actor())), 200

    # --- students ---

    @app.route("/api/students", methods=["GET"], endpoint="api_students_list")
    @login_required
    def api_students_list():
        admin_only()
        return jsonify([s.to_dict() for s in container.student_service.list_students()]), 200

    @app.route("/api/students/<student_id>", methods=["GET"], endpoint="api_students_get")
    @login_required
    def api_students_get(student_id: str):
        container.policy.require(current_actor(), Action.VIEW_STUDENT_HISTORY, student_id)
        return jsonify(container.student_service.get_student(student_id).to_dict()), 200

    @app.route("/api/students", methods=["POST"], endpoint="api_students_create")
    @login_required
    def api_students_create():
        admin_only()
        data = json_body()
        student = container.student_service.create_student(
            student_id=data.get("student_id"),
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
        )
        return jsonify(student.to_dict()), 201

    @app.route("/api/students/<student_id>", methods=["PUT"], endpoint="api_students_update")
    @login_required
    def api_students_update(student_id: str):
        admin_only()
        student = container.student_service.update_student(student_id, json_body())
        return jsonify(student.to_dict()), 200

    @app.route("/api/students/<student_id>", methods=["DELETE"], endpoint="api_students_delete")
    @login_required
    def api_students_delete(student_id: str):
        admin_only()
        container.student_service.delete_student(student_id)
        return jsonify({"message": "Student deleted"}), 200

    # --- lecturers ---

    @app.route("/api/lecturers", methods=["GET"], endpoint="api_lecturers_list")
    @login_required
    def api_lecturers_list():
        admin_only()
        return jsonify([l.to_dict() for l in container.lecturer_service.list_lecturers()]), 200

    @app.route("/api/lecturers/<int:lecturer_id>", methods=["GET"], endpoint="api_lecturers_get")
    @login_required
    def api_lecturers_get(lecturer_id: int):
        container.policy.require(current_actor(), Action.VIEW_LECTURER_REPORTS, lecturer_id)
        return jsonify(container.lecturer_service.get_lecturer(lecturer_id).to_dict()), 200

    @app.route("/api/lecturers", methods=["POST"], endpoint="api_lecturers_create")
    @login_required
    def api_lecturers_create():
        admin_only()
        data = json_body()
        lecturer = container.lecturer_service.create_lecturer(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            is_admin=bool(data.get("is_admin", False)),
        )
        return jsonify(lecturer.to_dict()), 201

    @app.route("/api/lecturers/<int:lecturer_id>", methods=["PUT"], endpoint="api_lecturers_update")
    @login_required
    def api_lecturers_update(lecturer_id: int):
        admin_only()
        lecturer = container.lecturer_service.update_lecturer(lecturer_id, json_body())
        return jsonify(lecturer.to_dict()), 200

    @app.route("/api/lecturers/<int:lecturer_id>", methods=["DELETE"], endpoint="api_lecturers_delete")
    @login_required
    def api_lecturers_delete(lecturer_id: int):
        admin_only()
        container.lecturer_service.delete_lecturer(lecturer_id)
        return jsonify({"message": "Lecturer deleted"}), 200
