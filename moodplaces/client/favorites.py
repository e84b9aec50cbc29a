"""
Local-first favorites with best-effort remote mirroring.

The local set is the source of truth for the UI and is persisted on every change.
When a user is signed in, each change is mirrored to the favorites store as an
independent asyncio task: failures are logged, never retried and never surfaced.
Mock catalog ids are kept locally but never mirrored.
"""

import asyncio
import json
import logging
import time
from typing import Callable, Optional

from moodplaces.client.api import PlacesApiClient
from moodplaces.client.errors import ServiceError
from moodplaces.client.models import Identity, is_mock_place_id
from moodplaces.client.storage import KeyValueStorage

logger = logging.getLogger(__name__)

FAVORITES_STORAGE_KEY = "moodplaces_favorites"
UNDO_WINDOW_SECONDS = 4.0


class ToggleResult:
    """Outcome of a toggle: what happened, the remote mirror task (if any) and a time-limited undo."""

    def __init__(
        self,
        manager: "FavoritesManager",
        place_id: str,
        display_name: str | None,
        added: bool,
        remote: Optional[asyncio.Task],
        created_at: float,
    ):
        self._manager = manager
        self.place_id = place_id
        self.display_name = display_name
        self.added = added
        self.remote = remote
        self.created_at = created_at
        self.undo_remote: Optional[asyncio.Task] = None
        self._undone = False

    @property
    def message(self) -> str:
        name = self.display_name or "Place"
        if self.added:
            return f"Added {name} to favorites"
        return f"Removed {name} from favorites"

    @property
    def undo_available(self) -> bool:
        return not self._undone and self._manager.now() - self.created_at <= UNDO_WINDOW_SECONDS

    def undo(self) -> bool:
        """Reverse the toggle. Returns False once the window has passed or after a previous undo."""
        if not self.undo_available:
            return False
        self._undone = True
        self.undo_remote = self._manager._set_membership(self.place_id, not self.added, self.display_name)
        return True


class FavoritesManager:
    def __init__(
        self,
        storage: KeyValueStorage,
        remote: PlacesApiClient | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._storage = storage
        self._remote = remote
        self._clock = clock
        self._identity: Identity | None = None
        self._synced = False
        # Ordered set: insertion order is kept when persisting
        self._ids: dict[str, None] = dict.fromkeys(self._load())
        self._pending: set[asyncio.Task] = set()

    @property
    def favorites(self) -> frozenset[str]:
        return frozenset(self._ids)

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def synced(self) -> bool:
        return self._synced

    def now(self) -> float:
        return self._clock()

    def is_favorite(self, place_id: str) -> bool:
        return place_id in self._ids

    def toggle(self, place_id: str, display_name: str | None = None) -> ToggleResult:
        """
        Flip membership of place_id and persist it.

        When signed in, the remote insert or delete runs as a task on the running
        event loop; awaiting ToggleResult.remote is optional.
        """
        added = place_id not in self._ids
        remote = self._set_membership(place_id, added, display_name)
        return ToggleResult(self, place_id, display_name, added, remote, self._clock())

    async def sign_in(self, identity: Identity) -> bool:
        """
        Adopt an identity and reconcile with the favorites store.

        Local ids missing remotely are inserted (local wins on the first merge) and
        the union becomes the local set. If the remote listing fails the local set
        is kept and the manager stays unsynced. Returns whether the merge happened.
        """
        self._identity = identity
        self._synced = False
        if self._remote is None:
            return False

        try:
            remote_ids = await self._remote.list_favorites(identity.access_token)
        except ServiceError as e:
            logger.warning(f"Failed to fetch remote favorites, keeping local set: {e}")
            return False

        remote_set = set(remote_ids)
        to_insert = [
            place_id for place_id in self._ids
            if place_id not in remote_set and not is_mock_place_id(place_id)
        ]
        for place_id in to_insert:
            try:
                await self._remote.add_favorite(identity.access_token, place_id)
            except ServiceError as e:
                logger.warning(f"Failed to upload local favorite {place_id}: {e}")

        merged = dict.fromkeys(remote_ids)
        merged.update(self._ids)
        self._ids = merged
        self._persist()
        self._synced = True
        logger.info(f"Favorites synced: {len(remote_set)} remote, {len(to_insert)} uploaded")
        return True

    def sign_out(self) -> None:
        """Forget the identity; the local set stays as it is."""
        self._identity = None
        self._synced = False

    async def drain(self) -> None:
        """Wait for outstanding remote mirror tasks."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
            self._pending = {task for task in self._pending if not task.done()}

    def _set_membership(self, place_id: str, present: bool, display_name: str | None) -> Optional[asyncio.Task]:
        if present:
            self._ids[place_id] = None
        else:
            self._ids.pop(place_id, None)
        self._persist()
        return self._mirror(place_id, present, display_name)

    def _mirror(self, place_id: str, present: bool, display_name: str | None) -> Optional[asyncio.Task]:
        if self._identity is None or self._remote is None or is_mock_place_id(place_id):
            return None
        task = asyncio.create_task(self._mirror_remote(self._identity, place_id, present, display_name))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _mirror_remote(
        self,
        identity: Identity,
        place_id: str,
        present: bool,
        display_name: str | None,
    ) -> None:
        try:
            if present:
                await self._remote.add_favorite(identity.access_token, place_id, display_name)
            else:
                await self._remote.remove_favorite(identity.access_token, place_id)
        except ServiceError as e:
            logger.warning(f"Favorite sync failed for {place_id}: {e}")

    def _load(self) -> list[str]:
        raw = self._storage.get_item(FAVORITES_STORAGE_KEY)
        if not raw:
            return []
        try:
            ids = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Ignoring unreadable favorites: {e}")
            return []
        if not isinstance(ids, list):
            return []
        return [place_id for place_id in ids if isinstance(place_id, str)]

    def _persist(self) -> None:
        try:
            self._storage.set_item(FAVORITES_STORAGE_KEY, json.dumps(list(self._ids)))
        except Exception as e:
            logger.error(f"Failed to save favorites: {e}")
