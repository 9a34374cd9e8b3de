"""Simplified configuration management."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


def _load_env_file() -> None:
    """Load .env from root directory if present."""
    env_path = Path(__file__).parent.parent / ".env"
    if not env_path.is_file():
        return
    try:
        for line in env_path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if stripped and not stripped.startswith("#") and "=" in stripped:
                key, value = stripped.split("=", 1)
                key, value = key.strip(), value.strip().strip("'\"")
                if key and value and key not in os.environ:
                    os.environ[key] = value
    except OSError:
        pass


_load_env_file()


DEFAULT_APP_NAME = "PAI History"
DEFAULT_APP_VERSION = "1.0.0"
DEFAULT_APP_DESCRIPTION = "Automatic conversation history tracking"

DEFAULT_POLL_INTERVAL_SECONDS = 30.0
DEFAULT_BATCH_SIZE = 10


def _env_int(name: str, fallback: int) -> int:
    try:
        return int(os.getenv(name, str(fallback)))
    except (TypeError, ValueError):
        return fallback


def _env_float(name: str, fallback: float) -> float:
    try:
        value = float(os.getenv(name, str(fallback)))
    except (TypeError, ValueError):
        return fallback
    return value if value > 0 else fallback


def _env_str(name: str, fallback: str) -> str:
    value = os.getenv(name)
    return value if value else fallback


def _get_home() -> str:
    """Home directory, checking HOME first, then USERPROFILE."""
    return os.getenv("HOME") or os.getenv("USERPROFILE") or ""


class Settings(BaseModel):
    """Bridge settings with lightweight env fallbacks."""

    # App metadata
    app_name: str = Field(default=DEFAULT_APP_NAME)
    app_version: str = Field(default=DEFAULT_APP_VERSION)
    app_description: str = Field(default=DEFAULT_APP_DESCRIPTION)

    # Filesystem layout
    home_dir: str = Field(default_factory=_get_home)
    data_dir_override: Optional[str] = Field(default_factory=lambda: os.getenv("PAI_DIR") or None)
    db_path_override: Optional[str] = Field(default=None)
    history_dir_override: Optional[str] = Field(default=None)

    # Polling
    poll_interval_seconds: float = Field(
        default_factory=lambda: _env_float("HISTORY_BRIDGE_POLL_INTERVAL", DEFAULT_POLL_INTERVAL_SECONDS)
    )
    batch_size: int = Field(default_factory=lambda: _env_int("HISTORY_BRIDGE_BATCH_SIZE", DEFAULT_BATCH_SIZE))

    # Source store schema
    store_table: str = Field(default_factory=lambda: _env_str("HISTORY_BRIDGE_TABLE", "conversations"))
    id_column: str = Field(default_factory=lambda: _env_str("HISTORY_BRIDGE_ID_COLUMN", "id"))
    updated_column: str = Field(default_factory=lambda: _env_str("HISTORY_BRIDGE_UPDATED_COLUMN", "updated_at"))
    messages_column: str = Field(default_factory=lambda: _env_str("HISTORY_BRIDGE_MESSAGES_COLUMN", "messages"))

    log_level: str = Field(default_factory=lambda: _env_str("HISTORY_BRIDGE_LOG_LEVEL", "INFO"))

    @property
    def opencode_dir(self) -> Path:
        return Path(self.home_dir) / ".opencode"

    @property
    def db_path(self) -> Path:
        """Location of the watched conversation database."""
        if self.db_path_override:
            return Path(self.db_path_override).expanduser()
        return self.opencode_dir / "conversations.db"

    @property
    def data_dir(self) -> Path:
        if self.data_dir_override:
            return Path(self.data_dir_override).expanduser()
        return self.opencode_dir / "pai"

    @property
    def history_dir(self) -> Path:
        """Directory holding one history file per calendar date."""
        if self.history_dir_override:
            return Path(self.history_dir_override).expanduser()
        return self.data_dir / "history" / "sessions"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
