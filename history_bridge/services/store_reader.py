"""Read-only access to the source application's conversation database."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from ..logging_config import logger
from ..models import ConversationRecord
from ..utils.timestamps import parse_timestamp, to_storage_timestamp


DEFAULT_BATCH_SIZE = 10


@dataclass
class ConversationBatch:
    """Records from one query plus the newest update time among all fetched rows."""

    records: List[ConversationRecord] = field(default_factory=list)
    newest_updated_at: Optional[datetime] = None
    skipped: int = 0

    def observe(self, updated_at: datetime) -> None:
        if self.newest_updated_at is None or updated_at > self.newest_updated_at:
            self.newest_updated_at = updated_at


class StoreUnavailable(RuntimeError):
    """The conversation database is missing or could not be opened."""


class QueryFailure(RuntimeError):
    """The conversation query raised inside SQLite."""


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class ConversationStoreReader:
    """Poll-friendly reader over an append-mostly SQLite conversation table.

    The table layout belongs to the source application, so table and column
    names are injected rather than assumed. Timestamps are compared through
    ``julianday`` so ISO-8601 text of differing precision sorts chronologically.
    """

    def __init__(
        self,
        db_path: Path,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        table: str = "conversations",
        id_column: str = "id",
        updated_column: str = "updated_at",
        messages_column: str = "messages",
    ) -> None:
        self._db_path = db_path
        self._batch_size = max(1, batch_size)
        self._table = table
        self._id_column = id_column
        self._updated_column = updated_column
        self._messages_column = messages_column
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn
        if not self._db_path.exists():
            raise StoreUnavailable(f"conversation database not found: {self._db_path}")
        try:
            conn = sqlite3.connect(f"{self._db_path.resolve().as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"failed to open conversation database: {exc}") from exc
        conn.row_factory = sqlite3.Row
        self._conn = conn
        logger.info("conversation database opened", extra={"path": str(self._db_path)})
        return conn

    def close(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.close()
        except sqlite3.Error as exc:  # pragma: no cover - defensive
            logger.warning("conversation database close failed", extra={"error": str(exc)})
        finally:
            self._conn = None

    def _build_query(self) -> str:
        updated = _quote_identifier(self._updated_column)
        # julianday only resolves milliseconds; rows in the watermark's own
        # millisecond are fetched and filtered at full precision in query().
        return (
            f"SELECT * FROM {_quote_identifier(self._table)}"
            f" WHERE julianday({updated}) >= julianday(?)"
            f" ORDER BY julianday({updated}) DESC"
            " LIMIT ?"
        )

    def _row_timestamp(self, row: sqlite3.Row) -> Optional[datetime]:
        try:
            return parse_timestamp(row[self._updated_column])
        except (AttributeError, IndexError, OverflowError, TypeError, ValueError):
            return None

    def query(self, since: datetime) -> ConversationBatch:
        """Return up to ``batch_size`` records updated strictly after *since*, newest first.

        Rows whose payload fails validation are skipped, but their update time
        still counts toward ``newest_updated_at`` so they are not fetched again.
        Comparison is exact to the microsecond; finer store precision is truncated.
        """
        if self._conn is None:
            raise StoreUnavailable("conversation database is not open")
        try:
            rows = self._conn.execute(
                self._build_query(), (to_storage_timestamp(since), self._batch_size)
            ).fetchall()
        except sqlite3.Error as exc:
            raise QueryFailure(str(exc)) from exc

        batch = ConversationBatch()
        for row in rows:
            updated_at = self._row_timestamp(row)
            if updated_at is not None and updated_at <= since:
                continue
            if updated_at is not None:
                batch.observe(updated_at)
            try:
                record = ConversationRecord.from_row(
                    row,
                    id_column=self._id_column,
                    updated_column=self._updated_column,
                    messages_column=self._messages_column,
                )
            except ValidationError as exc:
                row_id = row[self._id_column] if self._id_column in row.keys() else None
                batch.skipped += 1
                logger.warning(
                    "skipping malformed conversation row",
                    extra={"error": str(exc), "row_id": row_id},
                )
                continue
            batch.records.append(record)
            batch.observe(record.updated_at)
        return batch


__all__ = [
    "ConversationBatch",
    "ConversationStoreReader",
    "QueryFailure",
    "StoreUnavailable",
    "DEFAULT_BATCH_SIZE",
]
