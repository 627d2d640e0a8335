from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import g, request

from ..core.exceptions import AuthenticationError, ValidationError
from .datetime_utils import parse_optional_date


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    parts = header.split(" ", 1)
    if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1].strip():
        return parts[1].strip()
    return None


def current_actor():
    return getattr(g, "actor", None)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_actor() is None:
            raise AuthenticationError(getattr(g, "auth_error", None) or "Authentication token required")
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def query_date(name: str):
    return parse_optional_date(request.args.get(name), name)


def query_int(name: str) -> Optional[int]:
    raw = request.args.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")
