from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_actor, login_required, query_date, query_int
from ..container import Container
from ..core.enums import Action
from ..core.exceptions import ValidationError
from .model import ReportFilters


def register(app: Flask, container: Container) -> None:
    def date_range():
        start_date = query_date("start_date")
        end_date = query_date("end_date")
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must not be after end_date")
        return start_date, end_date

    @app.route(
        "/api/lecturers/<int:lecturer_id>/attendance-reports",
        methods=["GET"],
        endpoint="api_lecturer_attendance_reports",
    )
    @login_required
    def api_lecturer_attendance_reports(lecturer_id: int):
        start_date, end_date = date_range()
        rates = container.report_service.lecturer_attendance_reports(
            current_actor(),
            lecturer_id,
            start_date=start_date,
            end_date=end_date,
            section_id=query_int("section_id"),
            course_code=(request.args.get("course_code") or "").strip() or None,
        )
        return jsonify([r.to_dict() for r in rates]), 200

    @app.route(
        "/api/lecturers/<int:lecturer_id>/dashboard-summary",
        methods=["GET"],
        endpoint="api_lecturer_dashboard_summary",
    )
    @login_required
    def api_lecturer_dashboard_summary(lecturer_id: int):
        return jsonify(container.report_service.lecturer_dashboard_summary(current_actor(), lecturer_id)), 200

    @app.route("/api/reports/dashboard-summary", methods=["GET"], endpoint="api_reports_dashboard")
    @login_required
    def api_reports_dashboard():
        container.policy.require(current_actor(), Action.VIEW_ADMIN_REPORTS)
        return jsonify(container.report_service.dashboard_summary()), 200

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="api_reports_attendance")
    @login_required
    def api_reports_attendance():
        container.policy.require(current_actor(), Action.VIEW_ADMIN_REPORTS)
        start_date, end_date = date_range()
        filters = ReportFilters(
            start_date=start_date,
            end_date=end_date,
            course_code=(request.args.get("course_code") or "").strip() or None,
            lecturer_id=query_int("lecturer_id"),
            section_id=query_int("section_id"),
        )
        rows = container.report_service.attendance_report(filters)
        return jsonify([r.to_dict() for r in rows]), 200

    @app.route("/api/reports/at-risk-students", methods=["GET"], endpoint="api_reports_at_risk")
    @login_required
    def api_reports_at_risk():
        container.policy.require(current_actor(), Action.VIEW_ADMIN_REPORTS)
        return jsonify([s.to_dict() for s in container.report_service.at_risk_students()]), 200

    @app.route(
        "/api/reports/course-details/<course_code>",
        methods=["GET"],
        endpoint="api_reports_course_details",
    )
    @login_required
    def api_reports_course_details(course_code: str):
        details = container.report_service.course_details(current_actor(), course_code)
        return jsonify([d.to_dict() for d in details]), 200

    @app.route("/api/reports/logs/<log_type>", methods=["GET"], endpoint="api_reports_logs")
    @login_required
    def api_reports_logs(log_type: str):
        rows = container.report_service.audit_log(current_actor(), log_type)
        return jsonify([r.to_dict() for r in rows]), 200
