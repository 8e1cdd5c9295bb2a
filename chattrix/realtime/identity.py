"""Typed identity parsed once when a connection is established."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True, order=True)
class Identity:
    user_id: int

    @classmethod
    def parse(cls, raw: Any) -> Optional["Identity"]:
        """Return an Identity for a positive integer id, else None.

        Accepts ints and numeric strings (query parameters arrive as text).
        Booleans, fractional numbers, blanks and anything non-numeric are
        rejected.
        """
        if raw is None or isinstance(raw, bool):
            return None
        if isinstance(raw, Identity):
            return raw
        if isinstance(raw, float) and not raw.is_integer():
            return None
        if isinstance(raw, str):
            raw = raw.strip()
            if not raw:
                return None
        try:
            value = int(raw)
        except (TypeError, ValueError):
            return None
        if value <= 0:
            return None
        return cls(value)

    def __str__(self) -> str:
        return str(self.user_id)
