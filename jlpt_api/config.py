"""Application configuration and constants."""
import os
from pathlib import Path


def _parse_int_env(name: str, default: int) -> int:
    """Parse integer from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_list_env(name: str, default: list[str]) -> list[str]:
    """Parse comma separated list from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    items = [item.strip() for item in raw.split(",")]
    return [item for item in items if item] or default


# Database
DB_DIR = Path(os.environ.get("DB_DIR", Path.cwd() / "data"))
DATABASE_URL = os.environ.get("DATABASE_URL", f"sqlite:///{DB_DIR / 'jlpt.db'}")

# Server
HOST = os.environ.get("HOST", "127.0.0.1")
PORT = _parse_int_env("PORT", 8000)
CORS_ORIGINS = _parse_list_env("CORS_ORIGINS", ["*"])

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Question types with special handling
SENTENCE_ORDERING_TYPE_ID = 8  # answer parts keep their stored order
READING_TYPE_ID = 9  # questions grouped under a passage

# Mixed-template preset ("mock exam")
MIXED_PRESET_NAME = "mixed_chapter"
MIXED_PRESET_QUOTAS: dict[int, int] = {
    1: 5,
    2: 5,
    3: 5,
    4: 7,
    5: 5,
    6: 5,
    7: 12,
    8: 5,
    9: 5,
}
