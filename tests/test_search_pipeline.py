"""Tests for the client search pipeline: validation, enrichment and mock fallback."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from moodplaces.client.errors import PlaceValidationError, RateLimitedError, TransportError
from moodplaces.client.models import CuisineType
from moodplaces.client.search import (
    SearchPipeline,
    format_category,
    guess_cuisine_type,
    guess_price_level,
)
from moodplaces.schemas.places import SearchPlacesResponse

MUMBAI = (19.0760, 72.8777)


def _api(**kwargs):
    api = MagicMock()
    api.search_places = AsyncMock(**kwargs)
    return api


def _raw(place_id, name, category, lat=19.0800, lon=72.8800, **extra):
    return {"id": place_id, "name": name, "category": category, "latitude": lat, "longitude": lon, **extra}


@pytest.mark.asyncio
async def test_transport_failure_returns_mock_catalog(rng):
    pipeline = SearchPipeline(_api(side_effect=TransportError("offline")), rng=rng)

    places = await pipeline.search(*MUMBAI, ["cafe"])

    assert [place.id for place in places] == [f"mock-{index}" for index in range(15)]
    assert all(place.distance >= 0 for place in places)
    assert all(place.is_mock for place in places)
    assert places[0].name == "Chai Point"
    assert places[0].latitude == pytest.approx(MUMBAI[0] + 0.005)


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    SearchPlacesResponse(error="All Overpass API endpoints failed", results=[]),
    SearchPlacesResponse(results=[]),
])
async def test_error_or_empty_response_returns_mock_catalog(response, rng):
    pipeline = SearchPipeline(_api(return_value=response), rng=rng)

    places = await pipeline.search(*MUMBAI, [])

    assert len(places) == 15


@pytest.mark.asyncio
async def test_rate_limited_search_falls_back(rng):
    pipeline = SearchPipeline(_api(side_effect=RateLimitedError("slow down")), rng=rng)

    places = await pipeline.search(*MUMBAI, [])

    assert places[0].id == "mock-0"


@pytest.mark.asyncio
async def test_real_results_are_enriched(rng):
    response = SearchPlacesResponse.model_validate({"results": [
        _raw("osm-1", "Wok On Fire", "restaurant", address="Linking Road", opening_hours="Mo-Su 11:00-23:00"),
        _raw("osm-2", "Sharma Dhaba", "fast_food"),
    ]})
    pipeline = SearchPipeline(_api(return_value=response), rng=rng)

    places = await pipeline.search(*MUMBAI, ["restaurant"])

    wok, dhaba = places
    assert wok.id == "osm-1"
    assert wok.category == "Restaurant"
    assert wok.cuisine_type == CuisineType.CHINESE
    assert wok.price_level == 2
    assert wok.address == "Linking Road"
    assert wok.opening_hours == "Mo-Su 11:00-23:00"
    assert wok.is_open is True
    assert 3 <= wok.rating <= 5
    assert wok.distance > 0

    assert dhaba.category == "Fast Food"
    assert dhaba.cuisine_type == CuisineType.NORTH_INDIAN
    assert dhaba.price_level == 1
    assert dhaba.address == "Address not available"


@pytest.mark.asyncio
async def test_radius_is_clamped_before_request(rng):
    api = _api(return_value=SearchPlacesResponse(results=[]))
    pipeline = SearchPipeline(api, rng=rng)

    await pipeline.search(*MUMBAI, [], radius=10)
    await pipeline.search(*MUMBAI, [], radius=1_000_000)
    await pipeline.search(*MUMBAI, [], radius=float("nan"))

    radii = [call.args[3] for call in api.search_places.await_args_list]
    assert radii == [100, 50000, 5000]


@pytest.mark.asyncio
@pytest.mark.parametrize("latitude, longitude, categories, field", [
    (91, 72.0, [], "latitude"),
    (float("nan"), 72.0, [], "latitude"),
    ("19", 72.0, [], "latitude"),
    (19.0, -180.5, [], "longitude"),
    (19.0, float("inf"), [], "longitude"),
    (19.0, 72.0, "cafe", "categories"),
    (19.0, 72.0, ["x" * 51], "categories"),
    (19.0, 72.0, [1], "categories"),
])
async def test_invalid_input_raises_before_remote_call(latitude, longitude, categories, field):
    api = _api()
    pipeline = SearchPipeline(api)

    with pytest.raises(PlaceValidationError) as exc_info:
        await pipeline.search(latitude, longitude, categories)

    assert exc_info.value.field == field
    api.search_places.assert_not_awaited()


@pytest.mark.asyncio
async def test_search_for_mood_uses_mood_categories(rng):
    api = _api(return_value=SearchPlacesResponse(results=[]))
    pipeline = SearchPipeline(api, rng=rng)

    await pipeline.search_for_mood(*MUMBAI, "work")

    assert api.search_places.await_args.args[2] == ["cafe", "coffee_shop"]


@pytest.mark.parametrize("name, category, expected", [
    ("Saravana Bhavan", "restaurant", CuisineType.SOUTH_INDIAN),
    ("Pizza Express", "restaurant", CuisineType.FAST_FOOD),
    ("Chai Sutta Bar", "cafe", CuisineType.CAFE),
    ("Chaat House", "restaurant", CuisineType.STREET_FOOD),
    ("Blue Door", "cafe", CuisineType.CAFE),
    ("Blue Door", "restaurant", CuisineType.NORTH_INDIAN),
    ("Blue Door", "bar", CuisineType.OTHER),
])
def test_guess_cuisine_type(name, category, expected):
    assert guess_cuisine_type(category, name) == expected


@pytest.mark.parametrize("name, category, expected", [
    ("Starbucks", "cafe", 3),
    ("Punjab Grill", "restaurant", 3),
    ("Street Eats", "restaurant", 1),
    ("Anything", "fast_food", 1),
    ("Blue Door", "restaurant", 2),
    (None, None, 2),
])
def test_guess_price_level(name, category, expected):
    assert guess_price_level(category, name) == expected


def test_format_category():
    assert format_category("fast_food") == "Fast Food"
    assert format_category("cafe") == "Cafe"
    assert format_category(None) == "Place"
