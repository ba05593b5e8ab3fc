"""Flask helpers shared by the JSON controllers."""

from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import g, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, DomainError, ValidationError
from ..core.permissions import Actor
from .serialization import to_payload


def login_required(view):
    """Resolve actor and tenant from the session into `g` before the view runs."""

    @wraps(view)
    async def wrapper(*args, **kwargs):
        if "user_id" not in session or "business_id" not in session:
            raise AuthenticationError("Unauthorized")
        try:
            g.actor = Actor(user_id=int(session["user_id"]), role=Role(session.get("role")))
        except ValueError:
            raise AuthenticationError("Unauthorized")
        g.business_id = int(session["business_id"])
        return await view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def query_flag(name: str, default: bool = False) -> bool:
    value = request.args.get(name)
    if value is None:
        return default
    return value.strip().lower() == "true"


def query_value(name: str) -> Optional[str]:
    return request.args.get(name) or None


def respond(value, status: int = 200):
    return jsonify(to_payload(value)), status


def handle_domain_error(exc: DomainError):
    return jsonify({"error": str(exc)}), exc.status_code
