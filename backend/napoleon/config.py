"""Runtime settings read from environment variables.

main.py loads backend/.env first, so values there apply too.
"""

import math
import os
from dataclasses import dataclass, field
from pathlib import Path

_BACKEND_DIR = Path(__file__).resolve().parent.parent


def is_serverless_runtime() -> bool:
    """True on read-only function hosts, where only /tmp is writable."""
    return any(
        os.environ.get(name)
        for name in ("VERCEL", "AWS_LAMBDA_FUNCTION_NAME", "LAMBDA_TASK_ROOT")
    )


def read_int_env(name: str, fallback: int, minimum: int, maximum: int) -> int:
    """Integer env var clamped to [minimum, maximum]; fallback if unset or invalid."""
    raw = os.environ.get(name)
    try:
        value = float(raw) if raw is not None else math.nan
    except ValueError:
        return fallback
    if not math.isfinite(value):
        return fallback
    return min(maximum, max(minimum, math.floor(value)))


@dataclass(frozen=True)
class Settings:
    db_path: str
    share_inbox_file: str | None
    share_max_content: int
    share_max_items: int
    cors_origins: list[str] = field(default_factory=list)
    log_level: str = "INFO"


def load_settings() -> Settings:
    default_db = (
        "/tmp/napoleon/napoleon.db"
        if is_serverless_runtime()
        else str(_BACKEND_DIR / "data" / "napoleon.db")
    )
    origins = os.environ.get("NAPOLEON_CORS_ORIGINS", "http://localhost:3000")
    return Settings(
        db_path=os.environ.get("NAPOLEON_DB_PATH") or default_db,
        share_inbox_file=os.environ.get("NAPOLEON_SHARE_INBOX_FILE") or None,
        share_max_content=read_int_env("NAPOLEON_SHARE_INBOX_MAX_CONTENT", 20_000, 2_000, 100_000),
        share_max_items=read_int_env("NAPOLEON_SHARE_INBOX_MAX_ITEMS", 500, 20, 5_000),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        log_level=os.environ.get("NAPOLEON_LOG_LEVEL", "INFO").upper(),
    )
