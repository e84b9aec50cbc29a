"""Tests for local-first favorites with remote mirroring and undo."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from moodplaces.client.errors import ServiceResponseError, TransportError
from moodplaces.client.favorites import FAVORITES_STORAGE_KEY, UNDO_WINDOW_SECONDS, FavoritesManager
from moodplaces.client.models import Identity
from moodplaces.client.storage import MemoryStorage

IDENTITY = Identity(user_id="user-1", access_token="token-abc")


def _remote(remote_ids=()):
    remote = MagicMock()
    remote.list_favorites = AsyncMock(return_value=list(remote_ids))
    remote.add_favorite = AsyncMock()
    remote.remove_favorite = AsyncMock()
    return remote


def test_toggle_twice_restores_membership(storage, clock):
    manager = FavoritesManager(storage, clock=clock)

    first = manager.toggle("osm-1", "Chai Point")
    second = manager.toggle("osm-1", "Chai Point")

    assert first.added is True
    assert first.message == "Added Chai Point to favorites"
    assert second.added is False
    assert second.message == "Removed Chai Point from favorites"
    assert manager.is_favorite("osm-1") is False


def test_toggle_persists_local_set(storage, clock):
    manager = FavoritesManager(storage, clock=clock)

    manager.toggle("osm-1")
    manager.toggle("osm-2")

    assert json.loads(storage.get_item(FAVORITES_STORAGE_KEY)) == ["osm-1", "osm-2"]
    assert FavoritesManager(storage, clock=clock).favorites == {"osm-1", "osm-2"}


def test_default_display_name(storage, clock):
    manager = FavoritesManager(storage, clock=clock)

    assert manager.toggle("osm-1").message == "Added Place to favorites"


def test_guest_toggle_has_no_remote_task(storage, clock):
    remote = _remote()
    manager = FavoritesManager(storage, remote=remote, clock=clock)

    result = manager.toggle("osm-1")

    assert result.remote is None
    remote.add_favorite.assert_not_called()


def test_undo_within_window(storage, clock):
    manager = FavoritesManager(storage, clock=clock)
    result = manager.toggle("osm-1")

    clock.advance(UNDO_WINDOW_SECONDS - 0.5)

    assert result.undo() is True
    assert manager.is_favorite("osm-1") is False
    assert result.undo() is False


def test_undo_after_window_expires(storage, clock):
    manager = FavoritesManager(storage, clock=clock)
    result = manager.toggle("osm-1")

    clock.advance(UNDO_WINDOW_SECONDS + 0.1)

    assert result.undo() is False
    assert manager.is_favorite("osm-1") is True


@pytest.mark.asyncio
async def test_signed_in_toggle_and_undo_mirror_insert_then_delete(storage, clock):
    remote = _remote()
    manager = FavoritesManager(storage, remote=remote, clock=clock)
    await manager.sign_in(IDENTITY)

    result = manager.toggle("osm-1", "Chai Point")
    assert result.undo() is True
    await manager.drain()

    remote.add_favorite.assert_awaited_once_with("token-abc", "osm-1", "Chai Point")
    remote.remove_favorite.assert_awaited_once_with("token-abc", "osm-1")
    assert manager.is_favorite("osm-1") is False


@pytest.mark.asyncio
async def test_removal_undo_mirrors_delete_then_insert(clock):
    storage = MemoryStorage({FAVORITES_STORAGE_KEY: json.dumps(["osm-1"])})
    remote = _remote(["osm-1"])
    manager = FavoritesManager(storage, remote=remote, clock=clock)
    await manager.sign_in(IDENTITY)

    result = manager.toggle("osm-1", "Chai Point")
    await result.remote
    result.undo()
    await result.undo_remote

    remote.remove_favorite.assert_awaited_once_with("token-abc", "osm-1")
    remote.add_favorite.assert_awaited_once_with("token-abc", "osm-1", "Chai Point")
    assert manager.is_favorite("osm-1") is True


@pytest.mark.asyncio
async def test_remote_failure_is_not_surfaced(storage, clock):
    remote = _remote()
    remote.add_favorite = AsyncMock(side_effect=TransportError("offline"))
    manager = FavoritesManager(storage, remote=remote, clock=clock)
    await manager.sign_in(IDENTITY)

    result = manager.toggle("osm-1")
    await result.remote

    assert manager.is_favorite("osm-1") is True
    remote.add_favorite.assert_awaited_once()


@pytest.mark.asyncio
async def test_mock_ids_stay_local(storage, clock):
    remote = _remote()
    manager = FavoritesManager(storage, remote=remote, clock=clock)
    await manager.sign_in(IDENTITY)

    result = manager.toggle("mock-3", "Social")

    assert result.remote is None
    assert manager.is_favorite("mock-3") is True
    remote.add_favorite.assert_not_called()


@pytest.mark.asyncio
async def test_sign_in_merges_local_into_remote(clock):
    storage = MemoryStorage({FAVORITES_STORAGE_KEY: json.dumps(["osm-1", "osm-2", "mock-4"])})
    remote = _remote(["osm-2", "osm-3"])
    manager = FavoritesManager(storage, remote=remote, clock=clock)

    merged = await manager.sign_in(IDENTITY)

    assert merged is True
    assert manager.synced is True
    assert manager.favorites == {"osm-1", "osm-2", "osm-3", "mock-4"}
    remote.add_favorite.assert_awaited_once_with("token-abc", "osm-1")
    assert set(json.loads(storage.get_item(FAVORITES_STORAGE_KEY))) == {"osm-1", "osm-2", "osm-3", "mock-4"}


@pytest.mark.asyncio
async def test_sign_in_listing_failure_keeps_local_state(clock):
    storage = MemoryStorage({FAVORITES_STORAGE_KEY: json.dumps(["osm-1"])})
    remote = _remote()
    remote.list_favorites = AsyncMock(side_effect=ServiceResponseError("Invalid token", 401))
    manager = FavoritesManager(storage, remote=remote, clock=clock)

    merged = await manager.sign_in(IDENTITY)

    assert merged is False
    assert manager.synced is False
    assert manager.favorites == {"osm-1"}
    remote.add_favorite.assert_not_called()


@pytest.mark.asyncio
async def test_sign_out_keeps_local_set_and_stops_mirroring(storage, clock):
    remote = _remote()
    manager = FavoritesManager(storage, remote=remote, clock=clock)
    await manager.sign_in(IDENTITY)
    manager.toggle("osm-1")
    await manager.drain()

    manager.sign_out()
    result = manager.toggle("osm-2")

    assert result.remote is None
    assert manager.favorites == {"osm-1", "osm-2"}
    assert manager.identity is None


def test_unreadable_local_favorites_start_empty(clock):
    storage = MemoryStorage({FAVORITES_STORAGE_KEY: "not-json"})

    assert FavoritesManager(storage, clock=clock).favorites == frozenset()
