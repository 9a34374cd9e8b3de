"""Process-lifetime high-water mark for processed conversations."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..utils.timestamps import parse_timestamp, to_storage_timestamp, utc_now


class Watermark:
    """Forward-only timestamp; stale or equal values never move it back."""

    def __init__(self, initial: Optional[datetime] = None) -> None:
        self._value = parse_timestamp(initial) if initial is not None else utc_now()

    @property
    def value(self) -> datetime:
        return self._value

    def advance(self, candidate: datetime) -> bool:
        normalized = parse_timestamp(candidate)
        if normalized <= self._value:
            return False
        self._value = normalized
        return True

    def isoformat(self) -> str:
        return to_storage_timestamp(self._value)

    def __repr__(self) -> str:
        return f"Watermark({self.isoformat()})"


__all__ = ["Watermark"]
