"""Client-side filtering and sorting of a search result list."""

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel

from moodplaces.client.models import CuisineType, PlaceSummary

DEFAULT_PRICE_LEVEL = 2


class PriceFilter(str, Enum):
    ALL = "all"
    BUDGET = "budget"
    MID = "mid"
    PREMIUM = "premium"


class SortOption(str, Enum):
    DISTANCE = "distance"
    RATING = "rating"


class PlaceFilters(BaseModel):
    search_query: str = ""
    show_open_only: bool = False
    show_favorites_only: bool = False
    price_filter: PriceFilter = PriceFilter.ALL
    cuisine_filter: Optional[CuisineType] = None
    sort_by: SortOption = SortOption.DISTANCE

    def has_active_filters(self) -> bool:
        """True when any filter narrows the list (sorting alone does not count)."""
        return bool(
            self.search_query.strip()
            or self.show_open_only
            or self.show_favorites_only
            or self.price_filter != PriceFilter.ALL
            or self.cuisine_filter is not None
        )


def _matches_query(place: PlaceSummary, query: str) -> bool:
    return any(query in (value or "").lower() for value in (place.name, place.category, place.address))


def _matches_price(place: PlaceSummary, price_filter: PriceFilter) -> bool:
    level = place.price_level or DEFAULT_PRICE_LEVEL
    if price_filter == PriceFilter.BUDGET:
        return level == 1
    if price_filter == PriceFilter.MID:
        return level == 2
    if price_filter == PriceFilter.PREMIUM:
        return level >= 3
    return True


def apply_filters(
    places: Iterable[PlaceSummary],
    filters: PlaceFilters,
    favorites: Iterable[str] = (),
) -> list[PlaceSummary]:
    """Filter then sort. Sorting is stable, so ties keep their incoming order."""
    result = list(places)

    query = filters.search_query.strip().lower()
    if query:
        result = [place for place in result if _matches_query(place, query)]

    if filters.show_open_only:
        result = [place for place in result if place.is_open is True]

    if filters.show_favorites_only:
        favorite_ids = set(favorites)
        result = [place for place in result if place.id in favorite_ids]

    if filters.price_filter != PriceFilter.ALL:
        result = [place for place in result if _matches_price(place, filters.price_filter)]

    if filters.cuisine_filter is not None:
        result = [place for place in result if place.cuisine_type == filters.cuisine_filter]

    if filters.sort_by == SortOption.RATING:
        result.sort(key=lambda place: place.rating or 0, reverse=True)
    else:
        result.sort(key=lambda place: place.distance)

    return result
