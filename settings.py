from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Storage
    data_dir: Path | None

    # Identifier generation
    id_max_attempts: int

    # Logging
    log_level: str
    debug_log_requests: bool


def get_settings() -> Settings:
    raw_data_dir = os.getenv("DATA_DIR", "").strip()
    data_dir = Path(raw_data_dir).expanduser().resolve() if raw_data_dir else None

    # Cap on collision retries; generation fails closed past this.
    id_max_attempts = max(1, _env_int("ID_MAX_ATTEMPTS", 10_000))

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        log_level = "INFO"
    debug_log_requests = _env_bool("DEBUG_LOG_REQUESTS", True)

    return Settings(
        data_dir=data_dir,
        id_max_attempts=id_max_attempts,
        log_level=log_level,
        debug_log_requests=debug_log_requests,
    )
