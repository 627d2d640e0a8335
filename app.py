from __future__ import annotations

import os

from src.class_attendance.class_attendance.main import create_app

app = create_app()
socketio = app.extensions["socketio"]


if __name__ == "__main__":
    socketio.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        debug=app.config["DEBUG"],
        allow_unsafe_werkzeug=True,
    )
