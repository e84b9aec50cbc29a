"""
Stale-while-revalidate orchestration of place details.

fetch_details never raises for remote failures: a fresh cache hit returns at once,
a stale hit returns at once and refreshes in the background, and a miss fetches in
the foreground, synthesizing a fallback from the place summary if the service fails.
"""

import asyncio
import inspect
import logging
import random
import weakref
from datetime import datetime
from typing import Awaitable, Callable, Optional, Union

from moodplaces.client.api import DetailServiceResponse, PlacesApiClient, place_context
from moodplaces.client.detail_cache import DetailCacheStore
from moodplaces.client.errors import ServiceError, ServiceResponseError
from moodplaces.client.mock_data import (
    fallback_place_detail,
    fallback_tips,
    generate_popular_times,
    mock_place_detail,
)
from moodplaces.client.models import (
    DayHours,
    DetailResult,
    HourlyPopularity,
    PlaceDetail,
    PlaceSummary,
    Tip,
    is_mock_place_id,
)
from moodplaces.core.opening_hours import DAYS_OF_WEEK, format_hhmm
from moodplaces.schemas.places import PlaceContext, PopularDay, RawHours, RawTip

logger = logging.getLogger(__name__)

DetailCallback = Callable[[PlaceDetail], Optional[Awaitable[None]]]
PlaceInput = Union[PlaceSummary, PlaceContext, None]


def weekly_hours_from(hours: RawHours | None) -> list[DayHours] | None:
    """Seven DayHours, Monday first; days without a slot are closed. No slots means unknown."""
    if hours is None or not hours.regular:
        return None

    by_day: dict[int, DayHours] = {}
    for slot in hours.regular:
        if 1 <= slot.day <= 7:
            by_day[slot.day] = DayHours(
                day=DAYS_OF_WEEK[slot.day - 1],
                open=format_hhmm(slot.open),
                close=format_hhmm(slot.close),
            )

    return [
        by_day.get(index + 1) or DayHours(day=name, closed=True)
        for index, name in enumerate(DAYS_OF_WEEK)
    ]


def popular_times_from(
    hours_popular: list[PopularDay] | None,
    weekday: int,
    rng: random.Random,
) -> list[HourlyPopularity] | None:
    """Today's popularity slots (weekday 1 = Monday), or None when today is not listed."""
    if not hours_popular:
        return None
    today = next((day for day in hours_popular if day.day == weekday), None)
    if today is None or not today.popular:
        return None

    result = []
    for slot in today.popular:
        hour_text = slot.open[:2]
        if not hour_text.isdigit() or int(hour_text) > 23:
            continue
        popularity = slot.popularity if slot.popularity else rng.randint(20, 79)
        result.append(HourlyPopularity(hour=int(hour_text), popularity=max(0, min(popularity, 100))))
    return result or None


def _tip_from(raw: RawTip) -> Tip:
    created_at = None
    if raw.created_at:
        try:
            created_at = datetime.fromisoformat(raw.created_at)
        except ValueError:
            created_at = None
    return Tip(text=raw.text, created_at=created_at)


def detail_from_response(
    response: DetailServiceResponse,
    context: Optional[PlaceContext],
    weekday: int,
    rng: random.Random,
) -> PlaceDetail:
    details = response.details
    tips = [_tip_from(tip) for tip in response.tips if tip.text]
    return PlaceDetail(
        description=details.description,
        phone=details.tel,
        website=details.website,
        photos=response.photo_urls,
        tips=tips or fallback_tips(context),
        weekly_hours=weekly_hours_from(details.hours),
        popular_times=popular_times_from(details.hours_popular, weekday, rng) or generate_popular_times(rng),
    )


def _as_context(place: PlaceInput) -> Optional[PlaceContext]:
    if isinstance(place, PlaceSummary):
        return place_context(place)
    return place


def _hold_callback(callback: DetailCallback | None) -> Callable[[], DetailCallback | None] | None:
    # Bound methods are held weakly so a discarded owner is not kept alive by a refresh
    if callback is None:
        return None
    if inspect.ismethod(callback):
        return weakref.WeakMethod(callback)
    return lambda: callback


class PlaceDetailsService:
    def __init__(
        self,
        api: PlacesApiClient,
        cache: DetailCacheStore,
        rng: random.Random | None = None,
        weekday: Callable[[], int] | None = None,
    ):
        self._api = api
        self._cache = cache
        self._rng = rng or random.Random()
        self._weekday = weekday or (lambda: datetime.now().isoweekday())
        self._refreshing: dict[str, asyncio.Task] = {}

    @property
    def refreshing(self) -> set[str]:
        """Ids with a background refresh in flight."""
        return {place_id for place_id, task in self._refreshing.items() if not task.done()}

    async def fetch_details(
        self,
        place_id: str,
        context: PlaceInput = None,
        on_background_update: DetailCallback | None = None,
    ) -> DetailResult:
        place = _as_context(context)

        cached = self._cache.get(place_id)
        if cached is not None:
            logger.info(f"Using cached details for {place_id} ({'stale, revalidating' if cached.is_stale else 'fresh'})")
            if cached.is_stale:
                self._schedule_refresh(place_id, place, on_background_update)
            return DetailResult(detail=cached.detail, is_stale=cached.is_stale)

        if is_mock_place_id(place_id):
            detail = mock_place_detail(self._rng)
            self._cache.put(place_id, detail)
            return DetailResult(detail=detail)

        try:
            detail = await self._fetch_remote(place_id, place)
        except ServiceError as e:
            logger.warning(f"Detail fetch failed for {place_id}, using fallback: {e}")
            detail = fallback_place_detail(place, self._rng)

        self._cache.put(place_id, detail)
        return DetailResult(detail=detail)

    async def drain(self) -> None:
        """Wait for every in-flight background refresh to finish."""
        while self._refreshing:
            tasks = list(self._refreshing.values())
            await asyncio.gather(*tasks, return_exceptions=True)
            for place_id, task in list(self._refreshing.items()):
                if task.done():
                    self._refreshing.pop(place_id, None)

    async def _fetch_remote(self, place_id: str, place: Optional[PlaceContext]) -> PlaceDetail:
        response = await self._api.get_place_details(place_id, place)
        if response.error or response.details is None:
            raise ServiceResponseError(response.error or "Missing details in response")
        return detail_from_response(response, place, self._weekday(), self._rng)

    def _schedule_refresh(
        self,
        place_id: str,
        place: Optional[PlaceContext],
        callback: DetailCallback | None,
    ) -> None:
        existing = self._refreshing.get(place_id)
        if existing is not None and not existing.done():
            logger.debug(f"Refresh already in flight for {place_id}")
            return

        task = asyncio.create_task(self._refresh(place_id, place, _hold_callback(callback)))
        self._refreshing[place_id] = task
        task.add_done_callback(lambda done: self._forget_refresh(place_id, done))

    def _forget_refresh(self, place_id: str, task: asyncio.Task) -> None:
        if self._refreshing.get(place_id) is task:
            del self._refreshing[place_id]

    async def _refresh(
        self,
        place_id: str,
        place: Optional[PlaceContext],
        callback_ref: Callable[[], DetailCallback | None] | None,
    ) -> None:
        if is_mock_place_id(place_id):
            detail = mock_place_detail(self._rng)
        else:
            try:
                detail = await self._fetch_remote(place_id, place)
            except ServiceError as e:
                logger.warning(f"Background refresh failed for {place_id}: {e}")
                return

        self._cache.put(place_id, detail)

        callback = callback_ref() if callback_ref else None
        if callback is None:
            return
        try:
            result = callback(detail)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception(f"Detail update callback failed for {place_id}")
