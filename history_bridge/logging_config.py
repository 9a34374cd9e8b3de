from __future__ import annotations

import logging
import sys

logger = logging.getLogger("history_bridge")


def configure_logging(level: str = "INFO") -> None:
    """Configure logging on stderr; stdout is reserved for protocol responses."""
    if logger.handlers or logging.getLogger().handlers:
        return

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
