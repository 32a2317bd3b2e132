"""
Full path from a Telegram update to the stored relation, with the real
router, dispatcher, services and handlers, an httpx mock of the
Monitoring API and in-memory repositories.
"""

import json

import httpx
import pytest

from api.monitoring_client import MonitoringClient
from bot.outcome import Outcome
from main import build_dispatcher
from services import server_service as server_service_module
from services import user_service as user_service_module

from tests.conftest import SAMPLE_METRICS, FakeServerRepo, FakeUserRepo, message_update


class FakeMonitoringAPI:
    def __init__(self, sources):
        self.sources = {"srv_12313": list(sources), "srv_99999": ["Web"]}
        self.posts = []
        self.metric_calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        parts = request.url.path.split("/")
        key, resource = parts[-2], parts[-1]
        if key not in self.sources:
            return httpx.Response(404, json={"error": "server not found"})
        if resource == "sources" and request.method == "GET":
            return httpx.Response(200, json={"server_id": "1", "server_key": key, "sources": self.sources[key]})
        if resource == "sources" and request.method == "POST":
            source = json.loads(request.content)["source"]
            self.posts.append((key, source))
            self.sources[key].append(source)
            return httpx.Response(200, json={"server_id": "1", "source": source, "message": "added"})
        if resource == "metrics":
            self.metric_calls += 1
            return httpx.Response(200, json={"metrics": SAMPLE_METRICS})
        return httpx.Response(400)


@pytest.fixture
def api():
    return FakeMonitoringAPI(["Web"])


@pytest.fixture
def repos(monkeypatch):
    users, servers = FakeUserRepo(), FakeServerRepo()
    monkeypatch.setattr(user_service_module, "UserRepository", lambda: users)
    monkeypatch.setattr(server_service_module, "ServerRepository", lambda: servers)
    return users, servers


@pytest.fixture
def dispatcher(api, repos, transport):
    http = httpx.AsyncClient(transport=httpx.MockTransport(api), base_url="http://monitor.test/api")
    return build_dispatcher(transport, MonitoringClient("http://monitor.test/api", http_client=http))


async def test_add_server_then_list(dispatcher, api, repos, transport):
    users, servers = repos

    assert await dispatcher.handle(message_update("/add srv_12313")) is Outcome.HANDLED

    assert api.posts == [("srv_12313", "TGBot")]
    user = users.users[42]
    relation = servers.get_user_server(user.id, "srv_12313")
    assert relation.role == "owner"
    assert relation.server_key == "srv_12313"
    assert "✅ Server srv_12313 added" in transport.texts[-1]

    await dispatcher.handle(message_update("/add srv_99999"))
    await dispatcher.handle(message_update("/servers"))

    listing = transport.texts[-1]
    assert listing.index("srv_99999") < listing.index("srv_12313")


async def test_repeated_add_writes_source_once(dispatcher, api, transport):
    await dispatcher.handle(message_update("/add srv_12313"))
    await dispatcher.handle(message_update("/add srv_12313"))

    assert api.posts == [("srv_12313", "TGBot")]
    assert "already enabled" in transport.texts[-1]


async def test_unknown_key_is_not_persisted(dispatcher, repos, transport):
    _, servers = repos

    await dispatcher.handle(message_update("/add srv_missing"))

    assert servers.relations == {}
    assert "was not found" in transport.texts[-1]


async def test_metrics_are_cached_between_commands(dispatcher, api, transport):
    await dispatcher.handle(message_update("/add srv_12313"))
    await dispatcher.handle(message_update("/cpu"))
    await dispatcher.handle(message_update("/memory"))

    assert api.metric_calls == 1
    assert "CPU usage: 37.5%" in transport.texts[-2]
    assert "Memory: 50.0% used" in transport.texts[-1]


async def test_admin_command_is_denied_to_regular_user(dispatcher, transport):
    assert await dispatcher.handle(message_update("/cache_clear")) is Outcome.PERMISSION_DENIED


async def test_unknown_command(dispatcher, transport):
    assert await dispatcher.handle(message_update("/nope")) is Outcome.UNKNOWN_COMMAND
    assert "/help" in transport.texts[-1]


async def test_admin_deactivation_locks_user_out(api, repos, transport, monkeypatch):
    monkeypatch.setattr(user_service_module, "ADMIN_USER_IDS", [7])
    http = httpx.AsyncClient(transport=httpx.MockTransport(api), base_url="http://monitor.test/api")
    dispatcher = build_dispatcher(transport, MonitoringClient("http://monitor.test/api", http_client=http))

    assert await dispatcher.handle(message_update("/servers")) is Outcome.HANDLED
    assert await dispatcher.handle(message_update("/deactivate 42", user_id=7)) is Outcome.HANDLED
    assert "User 42 deactivated" in transport.texts[-1]

    assert await dispatcher.handle(message_update("/servers")) is Outcome.UNAUTHORIZED
