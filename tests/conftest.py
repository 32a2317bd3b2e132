"""Shared fakes: chat transport, clock, in-memory repositories and Telegram updates."""

from datetime import datetime, timedelta
from types import SimpleNamespace
from typing import Any, Optional

import pytest

from models.server import Server, UserServer
from models.user import User


class FakeTransport:
    """Records every outgoing call instead of talking to Telegram."""

    def __init__(self):
        self.sent: list[tuple[int, str, Any]] = []
        self.edited: list[tuple[int, int, str, Any]] = []
        self.answered: list[tuple[str, Optional[str]]] = []
        self.commands: list = []

    async def send_message(self, chat_id, text, keyboard=None):
        self.sent.append((chat_id, text, keyboard))

    async def answer_callback(self, callback_id, text=None):
        self.answered.append((callback_id, text))

    async def edit_message(self, chat_id, message_id, text, keyboard=None):
        self.edited.append((chat_id, message_id, text, keyboard))

    async def set_commands(self, descriptors):
        self.commands = list(descriptors)

    @property
    def texts(self) -> list[str]:
        return [text for _, text, _ in self.sent]


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUserRepo:
    """In-memory stand-in for UserRepository."""

    def __init__(self):
        self.users: dict[int, User] = {}
        self._next_id = 1
        self.fail = False

    def upsert(self, user: User) -> User:
        if self.fail:
            raise RuntimeError("database is down")
        stored = self.users.get(user.telegram_id)
        if stored is None:
            user.id = self._next_id
            self._next_id += 1
            user.created_at = user.last_seen = datetime.now()
            self.users[user.telegram_id] = user
            return user
        stored.username = user.username
        stored.first_name = user.first_name
        stored.last_name = user.last_name
        stored.is_admin = user.is_admin
        stored.last_seen = datetime.now()
        return stored

    def get_by_telegram_id(self, telegram_id: int) -> Optional[User]:
        return self.users.get(telegram_id)

    def set_active(self, telegram_id: int, active: bool) -> bool:
        user = self.users.get(telegram_id)
        if user is None:
            return False
        user.is_active = active
        return True


class FakeServerRepo:
    """In-memory stand-in for ServerRepository with a controllable clock for added_at."""

    def __init__(self):
        self.servers: dict[str, Server] = {}
        self.relations: dict[tuple[int, str], UserServer] = {}
        self._tick = datetime(2024, 1, 1, 12, 0)

    def add_user_server(self, user_id, server_key, role="owner"):
        server = self.servers.setdefault(server_key, Server(server_key))
        if (user_id, server_key) not in self.relations:
            self._tick += timedelta(minutes=1)
            self.relations[(user_id, server_key)] = UserServer(user_id, server, role, self._tick)
        return self.relations[(user_id, server_key)]

    def list_user_servers(self, user_id):
        rows = [r for (uid, _), r in self.relations.items() if uid == user_id]
        return sorted(rows, key=lambda r: r.added_at, reverse=True)

    def get_user_server(self, user_id, server_key):
        return self.relations.get((user_id, server_key))

    def remove_user_server(self, user_id, server_key):
        return self.relations.pop((user_id, server_key), None) is not None

    def rename_server(self, server_key, name):
        server = self.servers.get(server_key)
        if server is None:
            return False
        server.name = name
        return True


def make_tg_user(user_id: int = 42, first_name: str = "Ada", username: str = "ada", last_name=None):
    return SimpleNamespace(id=user_id, first_name=first_name, last_name=last_name, username=username)


def message_update(text: Optional[str], user_id: int = 42, chat_id: Optional[int] = None):
    tg_user = make_tg_user(user_id)
    return SimpleNamespace(
        callback_query=None,
        message=SimpleNamespace(text=text, message_id=7),
        effective_user=tg_user,
        effective_chat=SimpleNamespace(id=chat_id or user_id),
    )


def callback_update(data: str, user_id: int = 42, message_id: int = 99):
    tg_user = make_tg_user(user_id)
    return SimpleNamespace(
        callback_query=SimpleNamespace(
            id="cb-1",
            data=data,
            message=SimpleNamespace(message_id=message_id),
        ),
        message=None,
        effective_user=tg_user,
        effective_chat=SimpleNamespace(id=user_id),
    )


SAMPLE_METRICS = {
    "cpu": 37.5,
    "cpu_usage": {
        "usage_total": 37.5,
        "usage_user": 25.0,
        "usage_system": 12.5,
        "usage_idle": 62.5,
        "load_average": {"load_1min": 0.5, "load_5min": 0.75, "load_15min": 1.0},
        "cores": 4,
        "frequency": 2400,
    },
    "memory": 50.0,
    "memory_details": {"total_gb": 16, "used_gb": 8, "available_gb": 7.5, "free_gb": 6, "used_percent": 50},
    "disk": 40.0,
    "disk_details": [
        {"path": "/", "filesystem": "ext4", "total_gb": 100, "used_gb": 40, "free_gb": 60, "used_percent": 40},
    ],
    "network": 3.0,
    "network_details": {
        "interfaces": [
            {"name": "lo", "rx_mbps": 0.1, "tx_mbps": 0.1},
            {"name": "eth0", "rx_mbps": 2.0, "tx_mbps": 1.0},
        ],
        "total_rx_mbps": 2.1,
        "total_tx_mbps": 1.1,
    },
    "temperature_details": {"cpu_temperature": 55, "highest_temperature": 60},
    "system_details": {
        "hostname": "web-1",
        "os": "Ubuntu 22.04",
        "kernel": "6.5.0",
        "architecture": "x86_64",
        "uptime_human": "3 days",
        "processes_total": 210,
        "processes_running": 2,
    },
}


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def user():
    return User(telegram_id=42, first_name="Ada", id=1)


@pytest.fixture
def admin():
    return User(telegram_id=7, first_name="Root", id=2, is_admin=True)
