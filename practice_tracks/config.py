from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    database_url: str
    youtube_timeout_s: float
    duration_wait_s: float


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def get_settings() -> Settings:
    database_url = os.getenv("DATABASE_URL", "sqlite:///./practice_tracks.db").strip()

    return Settings(
        database_url=database_url,
        youtube_timeout_s=_float_env("YOUTUBE_TIMEOUT_S", 10.0),
        # The player may take a while to report a length; don't wait forever.
        duration_wait_s=_float_env("DURATION_WAIT_S", 5.0),
    )
