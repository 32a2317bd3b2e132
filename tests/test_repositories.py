from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
import threading
import time
from unittest.mock import MagicMock

import psycopg2
import pytest

from db import connection
from models.user import User
from repositories.server_repo import ServerRepository
from repositories.user_repo import UserRepository

NOW = datetime(2024, 5, 1, 12, 0)


@pytest.fixture
def db(monkeypatch):
    """Fake pool whose connection hands out one shared cursor mock."""
    conn = MagicMock()
    conn.cursor.return_value.__exit__.return_value = False
    cursor = conn.cursor.return_value.__enter__.return_value
    pool = MagicMock()
    pool.getconn.return_value = conn
    monkeypatch.setattr(connection, "_pool", pool)
    return pool, conn, cursor


def test_upsert_keeps_is_active_out_of_the_update(db):
    pool, conn, cursor = db
    cursor.fetchone.return_value = (5, 42, "ada", "Ada", None, True, False, NOW, NOW)

    user = UserRepository().upsert(User(telegram_id=42, username="ada", first_name="Ada", is_admin=True))

    sql, params = cursor.execute.call_args.args
    update_clause = sql.split("DO UPDATE SET", 1)[1]
    assert "ON CONFLICT (telegram_id)" in sql
    assert "is_active" not in update_clause.split("RETURNING")[0]
    assert params == (42, "ada", "Ada", None, True)
    assert user.id == 5 and user.is_admin and not user.is_active
    conn.commit.assert_called_once()
    pool.putconn.assert_called_once_with(conn)


def test_failed_query_rolls_back_and_releases(db):
    pool, conn, cursor = db
    cursor.execute.side_effect = RuntimeError("db down")

    with pytest.raises(RuntimeError):
        UserRepository().upsert(User(telegram_id=42))

    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()
    pool.putconn.assert_called_once_with(conn)


def test_get_by_telegram_id_missing(db):
    _, _, cursor = db
    cursor.fetchone.return_value = None
    assert UserRepository().get_by_telegram_id(42) is None


def test_add_user_server_inserts_server_then_relation(db):
    _, conn, cursor = db
    cursor.rowcount = 1
    cursor.fetchone.return_value = (5, "srv_12313", "srv_12313", NOW, NOW, "owner", NOW)

    relation = ServerRepository().add_user_server(5, "srv_12313")

    statements = [c.args[0] for c in cursor.execute.call_args_list]
    assert "INSERT INTO servers" in statements[0] and "DO NOTHING" in statements[0]
    assert "INSERT INTO user_servers" in statements[1] and "DO NOTHING" in statements[1]
    assert relation.server_key == "srv_12313"
    assert relation.role == "owner"
    conn.commit.assert_called_once()


def test_list_user_servers_orders_most_recent_first(db):
    _, _, cursor = db
    cursor.fetchall.return_value = [
        (5, "srv_b", "Backend", NOW, NOW, "owner", datetime(2024, 5, 2)),
        (5, "srv_a", "srv_a", NOW, NOW, "viewer", datetime(2024, 5, 1)),
    ]

    servers = ServerRepository().list_user_servers(5)

    sql = cursor.execute.call_args.args[0]
    assert "ORDER BY us.added_at DESC" in sql
    assert [s.server_key for s in servers] == ["srv_b", "srv_a"]
    assert servers[0].name == "Backend"


def test_remove_user_server_reports_missing(db):
    _, _, cursor = db
    cursor.rowcount = 0
    assert ServerRepository().remove_user_server(5, "srv_12313") is False


def test_pool_must_be_initialized(monkeypatch):
    monkeypatch.setattr(connection, "_pool", None)
    with pytest.raises(RuntimeError):
        connection.get_connection()


def test_transaction_waits_for_a_free_connection(monkeypatch):
    """More concurrent callers than connections: everyone waits, nobody gets PoolError."""

    def fake_connect(*args, **kwargs):
        conn = MagicMock()
        conn.closed = False
        return conn

    monkeypatch.setattr(psycopg2, "connect", fake_connect)
    monkeypatch.setattr(connection, "_pool", None)
    monkeypatch.setattr(connection, "_slots", None)
    connection.init_pool(1, 2, "dbname=test")

    in_use, peak = 0, 0
    counter_lock = threading.Lock()

    def work(_):
        nonlocal in_use, peak
        with connection.transaction():
            with counter_lock:
                in_use += 1
                peak = max(peak, in_use)
            time.sleep(0.05)
            with counter_lock:
                in_use -= 1

    try:
        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(work, range(8)))
    finally:
        connection.close_pool()

    assert peak <= 2
