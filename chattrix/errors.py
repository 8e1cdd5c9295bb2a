"""Domain errors raised by the relay services.

Blueprints let these propagate; ``create_app`` registers one handler that
renders them as ``{"error": ...}`` with the carried status code.
"""
from __future__ import annotations

from typing import Any, Optional


class RelayError(Exception):
    status_code = 500

    def __init__(self, message: str, *, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict:
        payload: dict = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(RelayError):
    status_code = 400


class AuthenticationError(RelayError):
    status_code = 401


class ForbiddenError(RelayError):
    status_code = 403


class NotFoundError(RelayError):
    status_code = 404


class ConflictError(RelayError):
    status_code = 409
