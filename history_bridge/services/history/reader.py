from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path
from typing import List, Optional

from ...logging_config import logger
from ...utils.timestamps import utc_now
from .writer import HISTORY_SUFFIX


class HistoryReader:
    """Read back history files written within a lookback window of days."""

    def __init__(self, history_dir: Path) -> None:
        self._history_dir = history_dir

    def recent_files(self, days: int, today: Optional[date] = None) -> List[Path]:
        if isinstance(days, bool) or not isinstance(days, int) or days < 1:
            raise ValueError("days must be a positive integer")
        current = today or utc_now().date()
        paths: List[Path] = []
        for offset in range(days - 1, -1, -1):
            day = current - timedelta(days=offset)
            candidate = self._history_dir / f"{day.isoformat()}{HISTORY_SUFFIX}"
            if candidate.is_file():
                paths.append(candidate)
        return paths

    def load_recent(self, days: int, today: Optional[date] = None) -> str:
        parts: List[str] = []
        for path in self.recent_files(days, today):
            try:
                parts.append(f"# {path.stem}\n{path.read_text(encoding='utf-8')}")
            except OSError as exc:
                logger.error("history read failed", extra={"error": str(exc), "path": str(path)})
        return "\n".join(parts)


__all__ = ["HistoryReader"]
