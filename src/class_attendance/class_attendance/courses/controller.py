from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_actor, json_body, login_required
from ..container import Container
from ..core.enums import Action
from ..core.exceptions import AuthorizationError


def register(app: Flask, container: Container) -> None:
    def admin_only():
        container.policy.require(current_actor(), Action.MANAGE_CATALOG)

    # --- courses ---

    @app.route("/api/courses", methods=["GET"], endpoint="api_courses_list")
    @login_required
    def api_courses_list():
        return jsonify([c.to_dict() for c in container.course_service.list_courses()]), 200

    @app.route("/api/courses/<course_code>", methods=["GET"], endpoint="api_courses_get")
    @login_required
    def api_courses_get(course_code: str):
        return jsonify(container.course_service.get_course(course_code).to_dict()), 200

    @app.route("/api/courses", methods=["POST"], endpoint="api_courses_create")
    @login_required
    def api_courses_create():
        admin_only()
        data = json_body()
        course = container.course_service.create_course(
            course_code=data.get("course_code"),
            course_name=data.get("course_name"),
        )
        return jsonify(course.to_dict()), 201

    @app.route("/api/courses/<course_code>", methods=["PUT"], endpoint="api_courses_update")
    @login_required
    def api_courses_update(course_code: str):
        admin_only()
        course = container.course_service.rename_course(course_code, json_body().get("course_name"))
        return jsonify(course.to_dict()), 200

    @app.route("/api/courses/<course_code>", methods=["DELETE"], endpoint="api_courses_delete")
    @login_required
    def api_courses_delete(course_code: str):
        admin_only()
        container.course_service.delete_course(course_code)
        return jsonify({"message": "Course deleted"}), 200

    @app.route("/api/courses/<course_code>/sections", methods=["GET"], endpoint="api_course_sections")
    @login_required
    def api_course_sections(course_code: str):
        return jsonify([s.to_dict() for s in container.course_service.sections_of(course_code)]), 200

    @app.route("/api/courses/<course_code>/students", methods=["GET"], endpoint="api_course_students")
    @login_required
    def api_course_students(course_code: str):
        container.policy.require(current_actor(), Action.VIEW_COURSE_ROSTER, course_code)
        return jsonify([s.to_dict() for s in container.course_service.students_of(course_code)]), 200

    # --- sections ---

    @app.route("/api/sections", methods=["GET"], endpoint="api_sections_list")
    @login_required
    def api_sections_list():
        return jsonify([s.to_dict() for s in container.section_service.list_sections(current_actor())]), 200

    @app.route("/api/sections/<int:section_id>", methods=["GET"], endpoint="api_sections_get")
    @login_required
    def api_sections_get(section_id: int):
        return jsonify(container.section_service.get_section(section_id).to_dict()), 200

    @app.route("/api/sections", methods=["POST"], endpoint="api_sections_create")
    @login_required
    def api_sections_create():
        data = json_body()
        section = container.section_service.create_section(
            current_actor(),
            section_name=data.get("section_name"),
            course_code=data.get("course_code"),
            lecturer_id=data.get("lecturer_id"),
        )
        return jsonify(section.to_dict()), 201

    @app.route("/api/sections/<int:section_id>", methods=["PUT"], endpoint="api_sections_update")
    @login_required
    def api_sections_update(section_id: int):
        section = container.section_service.update_section(current_actor(), section_id, json_body())
        return jsonify(section.to_dict()), 200

    @app.route("/api/sections/<int:section_id>", methods=["DELETE"], endpoint="api_sections_delete")
    @login_required
    def api_sections_delete(section_id: int):
        container.section_service.delete_section(current_actor(), section_id)
        return jsonify({"message": "Section deleted"}), 200

    @app.route("/api/lecturers/<int:lecturer_id>/sections", methods=["GET"], endpoint="api_lecturer_sections")
    @login_required
    def api_lecturer_sections(lecturer_id: int):
        sections = container.section_service.sections_for_lecturer(current_actor(), lecturer_id)
        return jsonify([s.to_dict() for s in sections]), 200

    # --- enrollment ---

    @app.route("/api/sections/<int:section_id>/students", methods=["GET"], endpoint="api_section_students")
    @login_required
    def api_section_students(section_id: int):
        students = container.section_service.list_students(current_actor(), section_id)
        return jsonify([s.to_dict() for s in students]), 200

    @app.route("/api/sections/<int:section_id>/students", methods=["POST"], endpoint="api_section_enroll")
    @login_required
    def api_section_enroll(section_id: int):
        added = container.section_service.enroll(current_actor(), section_id, json_body().get("student_id"))
        if not added:
            return jsonify({"message": "Student is already enrolled in this section"}), 200
        return jsonify({"message": "Enrollment successful"}), 201

    @app.route("/api/sections/<int:section_id>/students/batch", methods=["POST"], endpoint="api_section_enroll_batch")
    @login_required
    def api_section_enroll_batch(section_id: int):
        added = container.section_service.enroll_many(current_actor(), section_id, json_body().get("student_ids"))
        return jsonify({"message": f"{added} students enrolled", "added": added}), 200

    @app.route("/api/sections/<int:section_id>/students/batch", methods=["DELETE"], endpoint="api_section_unenroll_batch")
    @login_required
    def api_section_unenroll_batch(section_id: int):
        removed = container.section_service.unenroll_many(current_actor(), section_id, json_body().get("student_ids"))
        return jsonify({"message": f"{removed} students removed", "removed": removed}), 200

    @app.route(
        "/api/sections/<int:section_id>/students/<student_id>",
        methods=["DELETE"],
        endpoint="api_section_unenroll",
    )
    @login_required
    def api_section_unenroll(section_id: int, student_id: str):
        container.section_service.unenroll(current_actor(), section_id, student_id)
        return jsonify({"message": "Student removed from section"}), 200

    @app.route("/api/student/courses", methods=["GET"], endpoint="api_student_courses")
    @login_required
    def api_student_courses():
        actor = current_actor()
        if not actor.is_student:
            raise AuthorizationError("Only students have enrolled courses")
        return jsonify([s.to_dict() for s in container.section_service.sections_for_student(actor.user_id)]), 200
