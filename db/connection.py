"""
db/connection.py
----------------
Manages the PostgreSQL connection pool.

Repositories run inside worker threads (services call them through
``asyncio.to_thread``), so the pool is psycopg2's ThreadedConnectionPool.
That pool raises PoolError when it is empty instead of waiting, so
`transaction()` first takes one of ``max_conn`` slots from a semaphore and
blocks until a connection is free.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import psycopg2
from psycopg2 import pool

from config import DATABASE_URL, DB_POOL_MAX, DB_POOL_MIN
from utils.logger import get_logger

logger = get_logger(__name__)

_pool: Optional[pool.ThreadedConnectionPool] = None
_slots: Optional[threading.BoundedSemaphore] = None


def init_pool(min_conn: int = DB_POOL_MIN, max_conn: int = DB_POOL_MAX, dsn: str = DATABASE_URL) -> None:
    """
    Initialize the database connection pool.

    Args:
        min_conn: Minimum number of connections to keep open.
        max_conn: Maximum number of connections allowed.
        dsn: libpq connection string.

    Raises:
        psycopg2.OperationalError: If the database is unreachable.
    """
    global _pool, _slots
    if _pool is not None:
        return
    try:
        _pool = pool.ThreadedConnectionPool(min_conn, max_conn, dsn)
        _slots = threading.BoundedSemaphore(max_conn)
        logger.info(f"Database connection pool initialized ({min_conn}-{max_conn} connections).")
    except psycopg2.OperationalError as e:
        logger.error(f"Failed to initialize database pool: {e}")
        raise


def get_connection():
    """
    Get a connection from the pool without waiting.

    Raises:
        RuntimeError: If the pool has not been initialized.
        psycopg2.pool.PoolError: If every connection is in use.
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")
    return _pool.getconn()


def release_connection(conn) -> None:
    """Return a connection back to the pool."""
    if _pool is not None:
        _pool.putconn(conn)


@contextmanager
def transaction() -> Iterator:
    """
    Borrow a connection for one unit of work.

    Waits for a free connection, commits when the block exits normally,
    rolls back and re-raises on any exception, and always hands the
    connection back to the pool.

    Usage:
        with transaction() as conn, conn.cursor() as cur:
            cur.execute(...)
    """
    slots = _slots
    if slots is not None:
        slots.acquire()
    try:
        conn = get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            release_connection(conn)
    finally:
        if slots is not None:
            slots.release()


def close_pool() -> None:
    """Close all connections in the pool."""
    global _pool, _slots
    if _pool is not None:
        _pool.closeall()
        _pool = None
        _slots = None
        logger.info("Database connection pool closed.")
