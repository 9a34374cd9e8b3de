from .timestamps import UTC, parse_timestamp, to_storage_timestamp, utc_now

__all__ = [
    "UTC",
    "parse_timestamp",
    "to_storage_timestamp",
    "utc_now",
]
