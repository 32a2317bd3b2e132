"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import transaction
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Users: one row per Telegram account ever seen; deactivation is a soft flag
CREATE TABLE IF NOT EXISTS users (
    id              BIGSERIAL PRIMARY KEY,
    telegram_id     BIGINT UNIQUE NOT NULL,
    username        VARCHAR(255),
    first_name      VARCHAR(255),
    last_name       VARCHAR(255),
    is_admin        BOOLEAN NOT NULL DEFAULT FALSE,
    is_active       BOOLEAN NOT NULL DEFAULT TRUE,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    last_seen       TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Servers: keyed by the opaque key the user typed (e.g. srv_12313)
CREATE TABLE IF NOT EXISTS servers (
    server_key      VARCHAR(100) PRIMARY KEY,
    name            VARCHAR(255) NOT NULL,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- User <-> server relation; re-adding the same pair is a no-op
CREATE TABLE IF NOT EXISTS user_servers (
    id              BIGSERIAL PRIMARY KEY,
    user_id         BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    server_key      VARCHAR(100) NOT NULL REFERENCES servers(server_key) ON DELETE CASCADE,
    role            VARCHAR(50) NOT NULL DEFAULT 'owner',
    added_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE(user_id, server_key)
);

-- Indexes for faster queries
CREATE INDEX IF NOT EXISTS idx_user_servers_user_added ON user_servers(user_id, added_at DESC);
CREATE INDEX IF NOT EXISTS idx_user_servers_server ON user_servers(server_key);
"""


def create_tables() -> None:
    """
    Execute the schema SQL to create all tables.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    try:
        with transaction() as conn, conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        logger.error(f"Failed to initialize schema: {e}")
        raise


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    print("✅ Database schema created successfully.")
