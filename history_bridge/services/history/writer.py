"""Append-only, date-partitioned Markdown history of observed conversations."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable, List

from ...logging_config import logger
from ...models import ConversationRecord
from ...utils.timestamps import to_storage_timestamp, utc_now


NO_MESSAGES_PLACEHOLDER = "No messages"
HISTORY_SUFFIX = ".md"

Clock = Callable[[], datetime]


def history_filename(moment: datetime) -> str:
    return f"{moment.strftime('%Y-%m-%d')}{HISTORY_SUFFIX}"


def format_entry(record: ConversationRecord, timestamp: str) -> str:
    if record.messages:
        blocks: List[str] = [f"\n### {message.role}\n{message.content}\n" for message in record.messages]
        body = "\n".join(blocks)
    else:
        body = NO_MESSAGES_PLACEHOLDER

    return (
        f"\n## {timestamp}\n"
        f"\n**Conversation ID:** {record.id or 'unknown'}\n"
        f"\n**Messages:**\n"
        f"{body}\n"
        f"\n---\n"
    )


class HistoryWriter:
    """Writes one Markdown block per conversation into ``<YYYY-MM-DD>.md``.

    The target file follows the writer's wall clock at append time, not the
    conversation's own timestamp.
    """

    def __init__(self, history_dir: Path, *, clock: Clock = utc_now) -> None:
        self._history_dir = history_dir
        self._clock = clock
        self._directory_ready = False

    @property
    def history_dir(self) -> Path:
        return self._history_dir

    def ensure_directory(self) -> bool:
        if self._directory_ready:
            return True
        try:
            self._history_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning(
                "history directory creation failed",
                extra={"error": str(exc), "path": str(self._history_dir)},
            )
            return False
        self._directory_ready = True
        return True

    def path_for(self, moment: datetime) -> Path:
        return self._history_dir / history_filename(moment)

    def append(self, record: ConversationRecord) -> bool:
        now = self._clock()
        path = self.path_for(now)
        entry = format_entry(record, to_storage_timestamp(now))
        if not self.ensure_directory():
            return False
        try:
            with path.open("a", encoding="utf-8") as handle:
                handle.write(entry)
        except OSError as exc:
            logger.error(
                "history append failed",
                extra={"error": str(exc), "conversation_id": record.id, "path": str(path)},
            )
            return False
        logger.info(
            "saved conversation to history",
            extra={"conversation_id": record.id, "path": str(path)},
        )
        return True


__all__ = ["HistoryWriter", "NO_MESSAGES_PLACEHOLDER", "format_entry", "history_filename"]
