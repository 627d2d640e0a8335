from __future__ import annotations

import logging
import threading

from flask import Flask, current_app, jsonify, request
from flask_socketio import SocketIO, join_room, leave_room

from ..common.http import current_actor, json_body, login_required
from ..container import Container
from ..core.enums import Action
from .realtime import section_room

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/notifications/vapid-public-key", methods=["GET"], endpoint="api_vapid_public_key")
    def api_vapid_public_key():
        return jsonify({"public_key": current_app.config.get("VAPID_PUBLIC_KEY", "")}), 200

    @app.route("/api/subscribe", methods=["POST"], endpoint="api_subscribe")
    @login_required
    def api_subscribe():
        actor = current_actor()
        data = json_body()
        subscription = data.get("subscription", data)
        container.push_service.subscribe(actor.user_id, actor.user_type, subscription)
        return jsonify({"message": "Subscription saved."}), 201

    @app.route("/api/notifications/send-test", methods=["POST"], endpoint="api_notifications_send_test")
    @login_required
    def api_notifications_send_test():
        actor = current_actor()
        sent = container.push_service.send_to_user(
            actor.user_id,
            actor.user_type,
            {"title": "Hello from your Attendance App!", "body": "This is a test notification."},
        )
        return jsonify({"message": "Test notification sent.", "devices": sent}), 200

    @app.route("/api/admin/run-attendance-check", methods=["POST"], endpoint="api_run_attendance_check")
    @login_required
    def api_run_attendance_check():
        container.policy.require(current_actor(), Action.RUN_ATTENDANCE_CHECK)
        threading.Thread(
            target=container.attendance_checker.run_daily_check,
            name="attendance-check",
            daemon=True,
        ).start()
        return jsonify({"message": "Daily attendance check has been triggered. Check server logs for progress."}), 202


def register_socket_events(socketio: SocketIO) -> None:
    def _room(data):
        section_id = data.get("section_id") if isinstance(data, dict) else data
        return section_room(int(section_id))

    @socketio.on("join_section")
    def on_join_section(data):
        try:
            room = _room(data)
        except (TypeError, ValueError):
            logger.warning("join_section with invalid payload: %r", data)
            return
        join_room(room)
        logger.debug("Client %s joined %s", request.sid, room)

    @socketio.on("leave_section")
    def on_leave_section(data):
        try:
            room = _room(data)
        except (TypeError, ValueError):
            return
        leave_room(room)
