"""Small pieces of persisted client state: the last location and recently viewed places."""

import logging
import time
from typing import Callable

from pydantic import TypeAdapter, ValidationError

from moodplaces.client.models import PlaceSummary, SavedLocation
from moodplaces.client.storage import KeyValueStorage

logger = logging.getLogger(__name__)

SAVED_LOCATION_KEY = "moodplaces_saved_location"
SAVED_LOCATION_MAX_AGE = 24 * 60 * 60
RECENTLY_VIEWED_KEY = "moodplaces_recently_viewed"
MAX_RECENT_PLACES = 5

_summaries = TypeAdapter(list[PlaceSummary])


class SavedLocationStore:
    """Last known coordinates, reused for 24 hours."""

    def __init__(self, storage: KeyValueStorage, clock: Callable[[], float] = time.time):
        self._storage = storage
        self._clock = clock

    def get(self) -> SavedLocation | None:
        raw = self._storage.get_item(SAVED_LOCATION_KEY)
        if not raw:
            return None
        try:
            location = SavedLocation.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Failed to read saved location: {e.error_count()} validation errors")
            return None
        if self._clock() - location.timestamp >= SAVED_LOCATION_MAX_AGE:
            return None
        return location

    def save(self, latitude: float, longitude: float) -> SavedLocation:
        location = SavedLocation(latitude=latitude, longitude=longitude, timestamp=self._clock())
        self._storage.set_item(SAVED_LOCATION_KEY, location.model_dump_json())
        return location

    def clear(self) -> None:
        self._storage.remove_item(SAVED_LOCATION_KEY)


class RecentlyViewedStore:
    """Up to five places, most recent first, one entry per id."""

    def __init__(self, storage: KeyValueStorage, max_items: int = MAX_RECENT_PLACES):
        self._storage = storage
        self.max_items = max_items
        self._places = self._load()

    @property
    def places(self) -> list[PlaceSummary]:
        return list(self._places)

    def add(self, place: PlaceSummary) -> list[PlaceSummary]:
        remaining = [existing for existing in self._places if existing.id != place.id]
        self._places = [place, *remaining][: self.max_items]
        self._storage.set_item(RECENTLY_VIEWED_KEY, _summaries.dump_json(self._places).decode())
        return self.places

    def clear(self) -> None:
        self._places = []
        self._storage.remove_item(RECENTLY_VIEWED_KEY)

    def _load(self) -> list[PlaceSummary]:
        raw = self._storage.get_item(RECENTLY_VIEWED_KEY)
        if not raw:
            return []
        try:
            return _summaries.validate_json(raw)[: self.max_items]
        except ValidationError as e:
            logger.error(f"Failed to parse recently viewed places: {e.error_count()} validation errors")
            self._storage.remove_item(RECENTLY_VIEWED_KEY)
            return []
