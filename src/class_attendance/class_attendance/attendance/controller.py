from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import current_actor, json_body, login_required
from ..common.validators import require_non_empty, require_positive_int
from ..container import Container
from ..core.exceptions import AuthorizationError, ValidationError
from ..qrcodes.image import decode_image
from .history_service import HistoryReconciler
from .model import ScanResult


def _scan_response(result: ScanResult):
    if not result.created:
        return jsonify({"message": "Attendance already recorded for this session.", "status": result.status.value}), 200
    return (
        jsonify(
            {
                "message": "Attendance recorded successfully.",
                "status": result.status.value,
                "record": result.record.to_dict() if result.record else None,
            }
        ),
        201,
    )


def _required_date(value, field_name: str):
    parsed = parse_optional_date(value, field_name)
    if parsed is None:
        raise ValidationError(f"{field_name} is required")
    return parsed


def register(app: Flask, container: Container) -> None:
    def scan(qr_string: str, section_id):
        actor = current_actor()
        return container.recorder.record_scan(
            actor,
            actor.user_id,
            require_positive_int(section_id, "section_id"),
            require_non_empty(qr_string, "qr_string"),
        )

    @app.route("/api/attendance/record", methods=["POST"], endpoint="api_attendance_record")
    @login_required
    def api_attendance_record():
        data = json_body()
        return _scan_response(scan(data.get("qr_string"), data.get("section_id")))

    @app.route("/api/attendance/record/image", methods=["POST"], endpoint="api_attendance_record_image")
    @login_required
    def api_attendance_record_image():
        file = request.files.get("image")
        if file is None or not file.filename:
            raise ValidationError("image file is required")
        qr_string = decode_image(file.stream)
        return _scan_response(scan(qr_string, request.form.get("section_id")))

    @app.route("/api/attendance/session/<session_id>", methods=["GET"], endpoint="api_attendance_session")
    @login_required
    def api_attendance_session(session_id: str):
        records = container.recorder.session_records(current_actor(), session_id)
        return jsonify([r.to_dict() for r in records]), 200

    @app.route("/api/sections/<int:section_id>/attendance", methods=["GET"], endpoint="api_section_attendance")
    @login_required
    def api_section_attendance(section_id: int):
        records = container.recorder.section_records(current_actor(), section_id)
        return jsonify([r.to_dict() for r in records]), 200

    @app.route("/api/students/<student_id>/attendance", methods=["GET"], endpoint="api_student_attendance")
    @login_required
    def api_student_attendance(student_id: str):
        records = container.recorder.student_records(current_actor(), student_id)
        return jsonify([r.to_dict() for r in records]), 200

    # --- manual override ---

    @app.route("/api/attendance/update", methods=["POST"], endpoint="api_attendance_update")
    @login_required
    def api_attendance_update():
        data = json_body()
        result = container.override_service.set_presence(
            current_actor(),
            require_positive_int(data.get("section_id"), "section_id"),
            data.get("student_id"),
            _required_date(data.get("report_date"), "report_date"),
            data.get("is_present"),
        )
        return jsonify(result.to_dict()), 200

    @app.route(
        "/api/attendance-reports/details/<int:section_id>/<report_date>",
        methods=["GET"],
        endpoint="api_attendance_details",
    )
    @login_required
    def api_attendance_details(section_id: int, report_date: str):
        roster = container.override_service.section_day_roster(
            current_actor(), section_id, _required_date(report_date, "report_date")
        )
        return jsonify([r.to_dict() for r in roster]), 200

    # --- history ---

    def history_response(student_id: str):
        history = container.history_service.history_for(current_actor(), student_id)
        summary = HistoryReconciler.summarize(history)
        summary["percentage"] = round(summary["percentage"], 1)
        return jsonify({"history": [h.to_dict() for h in history], "summary": summary}), 200

    @app.route("/api/student/attendance-history", methods=["GET"], endpoint="api_my_attendance_history")
    @login_required
    def api_my_attendance_history():
        actor = current_actor()
        if not actor.is_student:
            raise AuthorizationError("Only students have an attendance history")
        return history_response(actor.user_id)

    @app.route(
        "/api/students/<student_id>/attendance-history",
        methods=["GET"],
        endpoint="api_student_attendance_history",
    )
    @login_required
    def api_student_attendance_history(student_id: str):
        return history_response(student_id)
