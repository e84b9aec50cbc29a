"""
Persistent cache of place details with stale-while-revalidate timing.

Entries younger than STALE_TTL are fresh. Entries between STALE_TTL and CACHE_TTL
are served but flagged stale so the caller can revalidate. Anything older than
CACHE_TTL is treated as absent and purged on access. Capacity is bounded by
MAX_CACHE_SIZE; the entry inserted first is evicted first (overwrites keep their
original position).
"""

import logging
import time
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from moodplaces.client.models import CacheEntry, CacheEnvelope, CachedDetail, PlaceDetail
from moodplaces.client.storage import KeyValueStorage

logger = logging.getLogger(__name__)

CACHE_TTL = 5 * 60
STALE_TTL = 30
MAX_CACHE_SIZE = 50
CACHE_STORAGE_KEY = "moodplaces_details_cache"
CACHE_VERSION = 1


class _StoredEnvelope(BaseModel):
    """Outer shape only; entries are validated one at a time."""
    entries: dict[str, Any] = {}
    version: int


class DetailCacheStore:
    def __init__(
        self,
        storage: KeyValueStorage,
        clock: Callable[[], float] = time.time,
        ttl: float = CACHE_TTL,
        stale_ttl: float = STALE_TTL,
        max_size: int = MAX_CACHE_SIZE,
    ):
        self._storage = storage
        self._clock = clock
        self.ttl = ttl
        self.stale_ttl = stale_ttl
        self.max_size = max_size
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, place_id: object) -> bool:
        return place_id in self._entries

    def keys(self) -> list[str]:
        """Cached ids in insertion order."""
        return list(self._entries)

    def load(self) -> int:
        """
        Replace the in-memory entries with the persisted envelope.

        An unreadable envelope or a version mismatch yields an empty cache. Entries
        that fail validation or have expired are dropped one by one. Returns the
        number of entries loaded.
        """
        self._entries = {}
        raw = self._storage.get_item(CACHE_STORAGE_KEY)
        if not raw:
            return 0

        try:
            envelope = _StoredEnvelope.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Failed to load detail cache: {e.error_count()} validation errors")
            return 0

        if envelope.version != CACHE_VERSION:
            logger.info(f"Discarding detail cache with version {envelope.version}")
            return 0

        now = self._clock()
        for place_id, item in envelope.entries.items():
            try:
                entry = CacheEntry.model_validate(item)
            except ValidationError as e:
                logger.warning(f"Skipping cached details for {place_id}: {e.error_count()} validation errors")
                continue
            if now - entry.timestamp <= self.ttl:
                self._entries[place_id] = entry

        logger.info(f"Loaded {len(self._entries)} cached place details")
        return len(self._entries)

    def get(self, place_id: str) -> CachedDetail | None:
        entry = self._entries.get(place_id)
        if entry is None:
            return None

        age = self._clock() - entry.timestamp
        if age > self.ttl:
            del self._entries[place_id]
            self._persist()
            return None

        return CachedDetail(detail=entry.details, is_stale=age > self.stale_ttl)

    def put(self, place_id: str, detail: PlaceDetail) -> None:
        self._entries[place_id] = CacheEntry(details=detail, timestamp=self._clock())

        if len(self._entries) > self.max_size:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug(f"Evicted {oldest} from detail cache")

        self._persist()

    def clear(self) -> None:
        self._entries.clear()
        try:
            self._storage.remove_item(CACHE_STORAGE_KEY)
        except Exception as e:
            logger.warning(f"Failed to remove persisted detail cache: {e}")

    def _persist(self) -> None:
        envelope = CacheEnvelope(entries=self._entries, version=CACHE_VERSION)
        try:
            self._storage.set_item(CACHE_STORAGE_KEY, envelope.model_dump_json())
        except Exception as e:
            # The in-memory entries stay authoritative
            logger.warning(f"Failed to persist detail cache: {e}")
