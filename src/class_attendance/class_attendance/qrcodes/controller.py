from __future__ import annotations

import io

from flask import Flask, current_app, jsonify, send_file

from ..common.http import current_actor, json_body, login_required
from ..container import Container
from ..core.constants import QR_DEFAULT_VALIDITY_MINUTES
from ..core.enums import Action
from .image import render_png


def register(app: Flask, container: Container) -> None:
    def token_for(qrcode_id: int, action: Action):
        token = container.qr_service.get(qrcode_id)
        container.policy.require(current_actor(), action, token.course_code)
        return token

    @app.route("/api/qrcodes", methods=["POST"], endpoint="api_qrcodes_issue")
    @login_required
    def api_qrcodes_issue():
        data = json_body()
        course_code = data.get("course_code")
        container.policy.require(current_actor(), Action.ISSUE_TOKEN, course_code)
        token = container.qr_service.issue(
            course_code,
            validity_minutes=data.get("expires_in_minutes")
            or current_app.config.get("QR_DEFAULT_VALIDITY_MINUTES", QR_DEFAULT_VALIDITY_MINUTES),
            existing_session_id=data.get("session_id"),
        )
        return jsonify({"message": "QR Code generated successfully.", "qrcode": token.to_dict()}), 201

    @app.route("/api/qrcodes/<int:qrcode_id>", methods=["GET"], endpoint="api_qrcodes_get")
    @login_required
    def api_qrcodes_get(qrcode_id: int):
        return jsonify(token_for(qrcode_id, Action.VIEW_TOKEN).to_dict()), 200

    @app.route("/api/qrcodes/<int:qrcode_id>", methods=["DELETE"], endpoint="api_qrcodes_invalidate")
    @login_required
    def api_qrcodes_invalidate(qrcode_id: int):
        token_for(qrcode_id, Action.INVALIDATE_TOKEN)
        container.qr_service.invalidate(qrcode_id)
        return jsonify({"message": "QR Code invalidated successfully."}), 200

    @app.route("/api/qrcodes/<int:qrcode_id>/image", methods=["GET"], endpoint="api_qrcodes_image")
    @login_required
    def api_qrcodes_image(qrcode_id: int):
        token = token_for(qrcode_id, Action.VIEW_TOKEN)
        return send_file(io.BytesIO(render_png(token.qr_string)), mimetype="image/png")
