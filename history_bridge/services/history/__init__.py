"""History file helpers."""

from .reader import HistoryReader
from .writer import NO_MESSAGES_PLACEHOLDER, HistoryWriter, format_entry, history_filename

__all__ = [
    "HistoryReader",
    "HistoryWriter",
    "NO_MESSAGES_PLACEHOLDER",
    "format_entry",
    "history_filename",
]
