from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Literal

Mode = Literal["connected", "standalone"]
LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Sync job configuration loaded at process startup."""

    login: str
    mode: Mode = "connected"
    password: str | None = None
    api_url: str | None = None
    export_path: Path | None = None
    database_url: str = "sqlite:///bnpere.db"
    log_level: LogLevel = "INFO"

    @property
    def standalone(self) -> bool:
        return self.mode == "standalone"


def _require_env(name: str) -> str:
    value = os.environ.get(name, "").strip()
    if not value:
        raise ValueError(f"Missing required environment variable: {name}")
    return value


def load_sync_config_from_env(export_path: Path | None = None) -> SyncConfig:
    """Load sync config from env and validate startup requirements.

    Standalone mode reads a JSON export (``BNPERE_EXPORT_PATH``) and opens no
    provider session; connected mode needs the API URL and a password.

    Args:
        export_path: Export file that takes precedence over ``BNPERE_EXPORT_PATH``
    """
    mode_value = os.environ.get("BNPERE_MODE", "connected").strip().lower()
    if mode_value not in {"connected", "standalone"}:
        raise ValueError("BNPERE_MODE must be one of: connected, standalone")
    mode: Mode = mode_value  # type: ignore[assignment]

    login = _require_env("BNPERE_LOGIN")

    log_level = os.environ.get("BNPERE_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(
            "BNPERE_LOG_LEVEL must be one of: " + ", ".join(sorted(_LOG_LEVELS))
        )

    database_url = (
        os.environ.get("BNPERE_DATABASE_URL", "").strip() or "sqlite:///bnpere.db"
    )

    password: str | None = None
    api_url: str | None = None
    if mode == "standalone":
        if export_path is None:
            export_path = Path(_require_env("BNPERE_EXPORT_PATH"))
    else:
        password = _require_env("BNPERE_PASSWORD")
        api_url = _require_env("BNPERE_API_URL")

    return SyncConfig(
        login=login,
        mode=mode,
        password=password,
        api_url=api_url,
        export_path=export_path,
        database_url=database_url,
        log_level=log_level,  # type: ignore[arg-type]
    )
