"""Helpers for the UTC timestamps shared by the store reader and history files."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Union

from dateutil import parser as date_parser


UTC = timezone.utc


def utc_now() -> datetime:
    """Return the current time in UTC."""

    return datetime.now(UTC)


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """Parse an ISO timestamp, defaulting to UTC when timezone is absent."""

    if isinstance(value, datetime):
        dt = value
    else:
        dt = date_parser.isoparse(value.strip())
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_storage_timestamp(moment: datetime) -> str:
    """Render a timestamp the way SQLite date functions understand it."""

    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


__all__ = ["UTC", "parse_timestamp", "to_storage_timestamp", "utc_now"]
