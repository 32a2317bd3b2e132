from unittest.mock import AsyncMock

import pytest

from services.source_reconciler import ReconcileResult, SourceReconciler
from utils.errors import ExternalServiceError, NotFoundError, ValidationError


def make_client(sources=None):
    client = AsyncMock()
    client.get_server_sources.return_value = list(sources or [])
    client.add_server_source.return_value = {"server_id": "1", "source": "TGBot", "message": "ok"}
    return client


@pytest.mark.parametrize("key", ["", "abc", "x" * 101])
async def test_malformed_key_makes_no_upstream_call(key):
    client = make_client()
    reconciler = SourceReconciler(client)

    with pytest.raises(ValidationError):
        await reconciler.ensure_registered(key)

    client.get_server_sources.assert_not_awaited()
    client.add_server_source.assert_not_awaited()


async def test_adds_missing_source():
    client = make_client(["Web"])
    result = await SourceReconciler(client, source_tag="TGBot").ensure_registered("srv_12313")

    assert result is ReconcileResult.SOURCE_ADDED
    client.add_server_source.assert_awaited_once_with("srv_12313", "TGBot")


async def test_existing_source_is_not_written_again():
    client = make_client(["Web", "TGBot"])
    result = await SourceReconciler(client).ensure_registered("srv_12313")

    assert result is ReconcileResult.ALREADY_REGISTERED
    client.add_server_source.assert_not_awaited()


async def test_repeated_calls_write_once():
    sources = ["Web"]
    client = AsyncMock()
    client.get_server_sources.side_effect = lambda key: list(sources)

    async def add(key, tag):
        sources.append(tag)
        return {"source": tag}

    client.add_server_source.side_effect = add
    reconciler = SourceReconciler(client)

    assert await reconciler.ensure_registered("srv_12313") is ReconcileResult.SOURCE_ADDED
    assert await reconciler.ensure_registered("srv_12313") is ReconcileResult.ALREADY_REGISTERED
    assert client.add_server_source.await_count == 1


async def test_not_found_on_read_is_surfaced():
    client = make_client()
    client.get_server_sources.side_effect = NotFoundError("server with key 'srv_nope'")

    with pytest.raises(NotFoundError):
        await SourceReconciler(client).ensure_registered("srv_nope")
    client.add_server_source.assert_not_awaited()


async def test_external_error_on_read_is_surfaced():
    client = make_client()
    client.get_server_sources.side_effect = ExternalServiceError("Monitoring API", "boom", 500)

    with pytest.raises(ExternalServiceError):
        await SourceReconciler(client).ensure_registered("srv_12313")


async def test_not_found_on_write_is_external_error():
    client = make_client(["Web"])
    client.add_server_source.side_effect = NotFoundError("gone")

    with pytest.raises(ExternalServiceError) as exc_info:
        await SourceReconciler(client).ensure_registered("srv_12313")
    assert exc_info.value.status_code == 404
