from __future__ import annotations

import logging
from typing import Protocol

from ..core.constants import SECTION_ROOM_PREFIX

logger = logging.getLogger(__name__)


def section_room(section_id: int) -> str:
    return f"{SECTION_ROOM_PREFIX}{section_id}"


class Broadcaster(Protocol):
    def emit_to_section(self, section_id: int, event: str, payload: dict) -> None:
        raise NotImplementedError


class SocketIOBroadcaster(Broadcaster):
    """Pushes events to Socket.IO clients that joined a section room."""

    def __init__(self, socketio):
        self._socketio = socketio

    def emit_to_section(self, section_id: int, event: str, payload: dict) -> None:
        self._socketio.emit(event, payload, to=section_room(section_id))
        logger.debug("Emitted %s to %s", event, section_room(section_id))


class NullBroadcaster(Broadcaster):
    """Used when no socket server is attached (scripts, scheduled jobs)."""

    def emit_to_section(self, section_id: int, event: str, payload: dict) -> None:
        logger.debug("No realtime channel; dropped %s for section %s", event, section_id)
