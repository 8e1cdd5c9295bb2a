from __future__ import annotations

from flask import request
from flask_login import current_user

from chattrix.errors import AuthenticationError
from chattrix.realtime.identity import Identity


def acting_identity() -> Identity:
    """Identity of the logged-in user making this request."""
    identity = Identity.parse(getattr(current_user, "user_id", None)) if current_user.is_authenticated else None
    if identity is None:
        raise AuthenticationError("Unauthorized")
    return identity


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
