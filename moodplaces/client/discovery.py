"""Entry point for client applications: wires transport, storage and the client services together."""

import logging
import random
import time
from typing import Callable

from moodplaces.client.api import PlacesApiClient
from moodplaces.client.detail_cache import DetailCacheStore
from moodplaces.client.details import PlaceDetailsService
from moodplaces.client.explanations import ExplanationService
from moodplaces.client.favorites import FavoritesManager
from moodplaces.client.local_state import RecentlyViewedStore, SavedLocationStore
from moodplaces.client.search import SearchPipeline
from moodplaces.client.storage import KeyValueStorage, SQLStorage

logger = logging.getLogger(__name__)


class PlaceDiscoveryClient:
    """
    One client session. Use as an async context manager, or call open() and aclose().

        async with PlaceDiscoveryClient() as client:
            places = await client.search.search_for_mood(19.076, 72.8777, "work")
            result = await client.details.fetch_details(places[0].id, places[0])
    """

    def __init__(
        self,
        api: PlacesApiClient | None = None,
        storage: KeyValueStorage | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.api = api or PlacesApiClient()
        self._owns_storage = storage is None
        self.storage = storage if storage is not None else SQLStorage()
        rng = rng or random.Random()

        self.cache = DetailCacheStore(self.storage, clock=clock)
        self.details = PlaceDetailsService(self.api, self.cache, rng=rng)
        self.search = SearchPipeline(self.api, rng=rng)
        self.favorites = FavoritesManager(self.storage, remote=self.api, clock=clock)
        self.explanations = ExplanationService(self.api, clock=clock)
        self.saved_location = SavedLocationStore(self.storage, clock=clock)
        self.recently_viewed = RecentlyViewedStore(self.storage)
        self._opened = False

    async def open(self) -> "PlaceDiscoveryClient":
        if not self._opened:
            loaded = self.cache.load()
            logger.info(f"Client opened against {self.api.base_url} ({loaded} cached details)")
            self._opened = True
        return self

    async def aclose(self) -> None:
        await self.details.drain()
        await self.favorites.drain()
        await self.api.aclose()
        if self._owns_storage:
            self.storage.close()
        self._opened = False

    async def __aenter__(self) -> "PlaceDiscoveryClient":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
