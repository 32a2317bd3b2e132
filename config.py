"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _int_list(raw: str) -> list[int]:
    """Parse a comma-separated list of integer IDs, skipping junk entries."""
    ids = []
    for part in raw.split(","):
        part = part.strip()
        if part.lstrip("-").isdigit():
            ids.append(int(part))
    return ids


# ── Telegram ──────────────────────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
CONCURRENT_UPDATES: int = int(os.getenv("CONCURRENT_UPDATES", "8"))

# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "serverpulse")
DB_USER: str = os.getenv("DB_USER", "serverpulse")
DB_PASS: str = os.getenv("DB_PASS", "")
DB_POOL_MIN: int = int(os.getenv("DB_POOL_MIN", "1"))
DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "5"))

DATABASE_URL: str = os.getenv("DATABASE_URL") or (
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

# ── Monitoring API ────────────────────────────────────────
MONITORING_API_URL: str = os.getenv("MONITORING_API_URL", "http://localhost:8080/api")
MONITORING_API_TIMEOUT: float = float(os.getenv("MONITORING_API_TIMEOUT", "30"))
METRICS_CACHE_TTL: float = float(os.getenv("METRICS_CACHE_TTL", "60"))
BOT_SOURCE_TAG: str = os.getenv("BOT_SOURCE_TAG", "TGBot")

# ── Security ──────────────────────────────────────────────
ALLOWED_USER_IDS: list[int] = _int_list(os.getenv("ALLOWED_USER_IDS", ""))
ADMIN_USER_IDS: list[int] = _int_list(os.getenv("ADMIN_USER_IDS", ""))

# ── Rate Limiting ─────────────────────────────────────────
RATE_LIMIT_MESSAGES: int = int(os.getenv("RATE_LIMIT_MESSAGES", "30"))
RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
