"""Background poller that copies new conversations into the history log."""

from __future__ import annotations

import asyncio
import enum
from typing import Optional

from ..logging_config import logger
from .history import HistoryWriter
from .store_reader import ConversationStoreReader, QueryFailure, StoreUnavailable
from .watermark import Watermark


DEFAULT_POLL_INTERVAL_SECONDS = 30.0


class PollerState(str, enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"


class ConversationPoller:
    """Polls the conversation store on a fixed interval and appends new records.

    Each tick runs synchronously on the event loop, so cancelling the task from
    :meth:`stop` can only interrupt the sleep between ticks, never a tick.
    """

    def __init__(
        self,
        reader: ConversationStoreReader,
        writer: HistoryWriter,
        *,
        watermark: Optional[Watermark] = None,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._watermark = watermark or Watermark()
        self._poll_interval = poll_interval_seconds
        self._task: Optional[asyncio.Task[None]] = None
        self._running = False
        self._state = PollerState.IDLE
        self._lock = asyncio.Lock()

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def watermark(self) -> Watermark:
        return self._watermark

    @property
    def reader(self) -> ConversationStoreReader:
        return self._reader

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        async with self._lock:
            if self._task and not self._task.done():
                return
            self._state = PollerState.ACTIVE
            self._open_reader()
            loop = asyncio.get_running_loop()
            self._running = True
            self._task = loop.create_task(self._run(), name="conversation-poller")
            logger.info(
                "Conversation poller started",
                extra={"interval_seconds": self._poll_interval, "watermark": self._watermark.isoformat()},
            )

    async def stop(self) -> None:
        async with self._lock:
            self._running = False
            if self._task:
                self._task.cancel()
                try:
                    await self._task
                except asyncio.CancelledError:
                    pass
                finally:
                    self._task = None
                logger.info("Conversation poller stopped")
            self._reader.close()

    async def _run(self) -> None:
        while self._running:
            await asyncio.sleep(self._poll_interval)
            try:
                self.poll_once()
            except Exception as exc:  # pragma: no cover - defensive
                logger.exception("Conversation poll failed", extra={"error": str(exc)})

    def _open_reader(self) -> bool:
        try:
            self._reader.open()
        except StoreUnavailable as exc:
            logger.warning("conversation database unavailable", extra={"error": str(exc)})
            return False
        return True

    def poll_once(self) -> int:
        """Run one fetch-and-write cycle; returns the number of records handed to the writer."""
        if not self._reader.is_open and not self._open_reader():
            logger.debug("skipping poll; conversation database still unavailable")
            return 0

        try:
            batch = self._reader.query(self._watermark.value)
        except (QueryFailure, StoreUnavailable) as exc:
            logger.error("conversation query failed", extra={"error": str(exc)})
            return 0

        for record in batch.records:
            self._writer.append(record)

        if batch.newest_updated_at is not None and self._watermark.advance(batch.newest_updated_at):
            logger.debug(
                "watermark advanced",
                extra={"watermark": self._watermark.isoformat(), "skipped_rows": batch.skipped},
            )
        return len(batch.records)


__all__ = ["ConversationPoller", "PollerState", "DEFAULT_POLL_INTERVAL_SECONDS"]
