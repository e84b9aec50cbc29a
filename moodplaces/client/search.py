"""
Search pipeline: validate, call the search service, enrich results, fall back to
the mock catalog when the service fails or finds nothing.
"""

import logging
import math
import random
from typing import Any

from moodplaces.client.api import PlacesApiClient
from moodplaces.client.errors import PlaceValidationError, ServiceError
from moodplaces.client.mock_data import mock_places
from moodplaces.client.models import CuisineType, PlaceSummary
from moodplaces.core.geo import calculate_distance_m
from moodplaces.core.moods import Mood, get_categories_for_mood
from moodplaces.schemas.places import DEFAULT_RADIUS_M, MAX_CATEGORY_LENGTH, RawPlace, clamp_radius

logger = logging.getLogger(__name__)

ADDRESS_NOT_AVAILABLE = "Address not available"

# Keyword classifier for OSM places, which carry no cuisine or price we can trust.
# Name rules are checked before category rules; the first match wins.
CUISINE_NAME_KEYWORDS: list[tuple[tuple[str, ...], CuisineType]] = [
    (("chinese", "wok", "noodle"), CuisineType.CHINESE),
    (("dosa", "idli", "saravana", "south"), CuisineType.SOUTH_INDIAN),
    (("punjab", "dhaba", "tandoor", "mughal"), CuisineType.NORTH_INDIAN),
    (("burger", "pizza", "kfc", "mcdonald"), CuisineType.FAST_FOOD),
    (("cafe", "coffee", "starbucks", "chai"), CuisineType.CAFE),
    (("chaat", "pani puri", "golgappa"), CuisineType.STREET_FOOD),
]
CUISINE_CATEGORY_KEYWORDS: list[tuple[tuple[str, ...], CuisineType]] = [
    (("fast_food",), CuisineType.FAST_FOOD),
    (("cafe", "coffee"), CuisineType.CAFE),
    (("restaurant",), CuisineType.NORTH_INDIAN),
]
PREMIUM_NAME_KEYWORDS = ("starbucks", "mainland", "barbeque", "grill", "fine dining", "taj")
BUDGET_NAME_KEYWORDS = ("chaat", "dhaba", "street", "chai")
BUDGET_CATEGORY_KEYWORDS = ("fast_food",)


def _matches(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def guess_cuisine_type(category: str | None, name: str | None) -> CuisineType:
    lower_name = (name or "").lower()
    lower_category = (category or "").lower()
    for keywords, cuisine in CUISINE_NAME_KEYWORDS:
        if _matches(lower_name, keywords):
            return cuisine
    for keywords, cuisine in CUISINE_CATEGORY_KEYWORDS:
        if _matches(lower_category, keywords):
            return cuisine
    return CuisineType.OTHER


def guess_price_level(category: str | None, name: str | None) -> int:
    """1 = budget, 2 = mid-range, 3 = premium."""
    lower_name = (name or "").lower()
    lower_category = (category or "").lower()
    if _matches(lower_name, PREMIUM_NAME_KEYWORDS):
        return 3
    if _matches(lower_name, BUDGET_NAME_KEYWORDS) or _matches(lower_category, BUDGET_CATEGORY_KEYWORDS):
        return 1
    return 2


def format_category(category: str | None) -> str:
    """`fast_food` -> `Fast Food`."""
    if not category:
        return "Place"
    return " ".join(word[:1].upper() + word[1:] for word in category.split("_"))


def validate_search_input(latitude: Any, longitude: Any, categories: Any) -> None:
    if not _is_finite_number(latitude) or not -90 <= latitude <= 90:
        raise PlaceValidationError("latitude", "Invalid latitude. Must be a number between -90 and 90.")
    if not _is_finite_number(longitude) or not -180 <= longitude <= 180:
        raise PlaceValidationError("longitude", "Invalid longitude. Must be a number between -180 and 180.")
    if not isinstance(categories, (list, tuple)) or not all(
        isinstance(category, str) and len(category) <= MAX_CATEGORY_LENGTH for category in categories
    ):
        raise PlaceValidationError("categories", "Categories must be an array of strings (max 50 chars each).")


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


class SearchPipeline:
    def __init__(self, api: PlacesApiClient, rng: random.Random | None = None):
        self._api = api
        self._rng = rng or random.Random()

    async def search(
        self,
        latitude: float,
        longitude: float,
        categories: list[str],
        radius: float = DEFAULT_RADIUS_M,
    ) -> list[PlaceSummary]:
        """
        Places near (latitude, longitude). Never raises for remote failures: a service
        error, an error response or an empty result all return the mock catalog.

        Raises:
            PlaceValidationError: coordinates out of range or malformed categories.
        """
        validate_search_input(latitude, longitude, categories)
        effective_radius = clamp_radius(radius)

        try:
            response = await self._api.search_places(latitude, longitude, list(categories), effective_radius)
        except ServiceError as e:
            logger.warning(f"Search service failed, using mock places: {e}")
            return mock_places(latitude, longitude, self._rng)

        if response.error or not response.results:
            logger.info(f"No results from search service ({response.error or 'empty'}), using mock places")
            return mock_places(latitude, longitude, self._rng)

        return [self._enrich(place, latitude, longitude) for place in response.results]

    async def search_for_mood(
        self,
        latitude: float,
        longitude: float,
        mood: Mood | str,
        radius: float = DEFAULT_RADIUS_M,
    ) -> list[PlaceSummary]:
        return await self.search(latitude, longitude, get_categories_for_mood(mood), radius)

    def _enrich(self, place: RawPlace, latitude: float, longitude: float) -> PlaceSummary:
        return PlaceSummary(
            id=place.id,
            name=place.name,
            category=format_category(place.category),
            latitude=place.latitude,
            longitude=place.longitude,
            distance=calculate_distance_m(latitude, longitude, place.latitude, place.longitude),
            # OSM has no ratings
            rating=round(3 + self._rng.random() * 2, 1),
            price_level=guess_price_level(place.category, place.name),
            cuisine_type=guess_cuisine_type(place.category, place.name),
            # No live status upstream
            is_open=True,
            opening_hours=place.opening_hours,
            address=place.address or ADDRESS_NOT_AVAILABLE,
            phone=place.phone,
            website=place.website,
        )
