"""Environment-driven settings for the event board backend."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

DEFAULTS: dict[str, Any] = {
    "frontend_origin": "http://localhost:5173",
    "hide_past_events": True,
    "import_data_dir": "/data",
}


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str]
    frontend_origins: tuple[str, ...]
    hide_past_events: bool
    import_data_dir: Path


def _boolify(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"Cannot parse boolean value from {value!r}")


def _split_origins(value: str) -> tuple[str, ...]:
    return tuple(origin.strip() for origin in value.split(",") if origin.strip())


def load_settings(environ: Optional[dict[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        database_url=env.get("DATABASE_URL") or None,
        frontend_origins=_split_origins(env.get("FRONTEND_ORIGIN", DEFAULTS["frontend_origin"])),
        hide_past_events=_boolify(env.get("CITYBOARD_HIDE_PAST_EVENTS", DEFAULTS["hide_past_events"])),
        import_data_dir=Path(env.get("IMPORT_DATA_DIR", DEFAULTS["import_data_dir"])),
    )
