"""
"Why this place" explanations with a local cache and a locally written fallback.

Unlike search and details, the caller is told when the text is a fallback, and
whether it is because the service is rate limiting (no retry for a minute).
"""

import logging
import time
from typing import Callable, Optional

from pydantic import BaseModel

from moodplaces.client.api import PlacesApiClient
from moodplaces.client.errors import RateLimitedError, ServiceError
from moodplaces.client.models import PlaceSummary
from moodplaces.core.moods import Mood

logger = logging.getLogger(__name__)

EXPLANATION_CACHE_TTL = 10 * 60
RATE_LIMIT_BACKOFF_SECONDS = 60


class Explanation(BaseModel):
    text: str
    is_fallback: bool = False
    rate_limited: bool = False


def _mood_value(mood: Mood | str | None) -> Optional[str]:
    if isinstance(mood, Mood):
        return mood.value
    return mood or None


def cache_key(place_id: str, mood: Mood | str | None) -> str:
    return f"{place_id}-{_mood_value(mood) or 'none'}"


def fallback_explanation(place: PlaceSummary, mood: Mood | str | None = None) -> str:
    """A one-liner built from distance, rating and mood."""
    mood = _mood_value(mood)
    parts = []
    if place.distance < 500:
        parts.append("Just a short walk away")
    elif place.distance < 1000:
        parts.append("Close by")

    if place.rating and place.rating >= 4.5:
        parts.append("with excellent ratings")
    elif place.rating and place.rating >= 4.0:
        parts.append("highly rated")

    mood_phrase = None
    if mood == Mood.WORK.value and "cafe" in (place.category or "").lower():
        mood_phrase = "perfect for a productive session"
    elif mood == Mood.DATE.value:
        mood_phrase = "great ambiance for a memorable evening"
    elif mood == Mood.BUDGET.value and place.price_level == 1:
        mood_phrase = "easy on your wallet"
    elif mood == Mood.QUICK_BITE.value:
        mood_phrase = "quick and satisfying"

    text = " ".join(parts)
    if mood_phrase:
        text = f"{text}, {mood_phrase}" if text else mood_phrase
    if not text:
        text = f"{place.name} is a solid pick nearby"
    return text[0].upper() + text[1:] + "."


class ExplanationService:
    def __init__(
        self,
        api: PlacesApiClient,
        clock: Callable[[], float] = time.time,
        ttl: float = EXPLANATION_CACHE_TTL,
    ):
        self._api = api
        self._clock = clock
        self.ttl = ttl
        self._cache: dict[str, tuple[str, float]] = {}
        self._suppressed_until = 0.0

    @property
    def rate_limited(self) -> bool:
        return self._clock() < self._suppressed_until

    async def explain(self, place: PlaceSummary, mood: Mood | str | None = None) -> Explanation:
        """Cached text, fresh text from the service, or a fallback flagged as such. Never raises for remote failures."""
        key = cache_key(place.id, mood)
        now = self._clock()

        cached = self._cache.get(key)
        if cached and now - cached[1] < self.ttl:
            return Explanation(text=cached[0])

        if self.rate_limited:
            return Explanation(text=fallback_explanation(place, mood), is_fallback=True, rate_limited=True)

        try:
            text = await self._api.explain(place, _mood_value(mood))
        except RateLimitedError as e:
            logger.warning(f"Explanation service rate limited, pausing for {RATE_LIMIT_BACKOFF_SECONDS}s: {e}")
            self._suppressed_until = now + RATE_LIMIT_BACKOFF_SECONDS
            return Explanation(text=fallback_explanation(place, mood), is_fallback=True, rate_limited=True)
        except ServiceError as e:
            logger.warning(f"Failed to get explanation for {place.id}: {e}")
            return Explanation(text=fallback_explanation(place, mood), is_fallback=True)

        self._cache[key] = (text, now)
        return Explanation(text=text)

    def clear(self) -> None:
        self._cache.clear()
