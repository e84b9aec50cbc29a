"""
Deterministic fallback data: the mock catalog shown when search fails, and the
synthesized details used for mock places and failed detail fetches.
"""

import random
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from moodplaces.client.models import (
    MOCK_ID_PREFIX,
    CuisineType,
    DayHours,
    HourlyPopularity,
    PlaceDetail,
    PlaceSummary,
    Tip,
)
from moodplaces.core.geo import calculate_distance_m
from moodplaces.schemas.places import PlaceContext


class MockVenue(NamedTuple):
    name: str
    category: str
    lat_offset: float
    lon_offset: float
    rating: float
    is_open: bool
    cuisine_type: CuisineType
    price_level: int
    opening_hours: str


MOCK_VENUES: list[MockVenue] = [
    MockVenue("Chai Point", "Cafe", 0.005, 0.003, 4.5, True, CuisineType.CAFE, 1, "7:00 AM - 11:00 PM"),
    MockVenue("Cafe Coffee Day", "Coffee Shop", -0.003, 0.007, 4.2, True, CuisineType.CAFE, 2, "8:00 AM - 10:00 PM"),
    MockVenue("Saravana Bhavan", "Restaurant", 0.008, -0.002, 4.7, False, CuisineType.SOUTH_INDIAN, 2, "7:00 AM - 10:30 PM"),
    MockVenue("Haldiram's", "Restaurant", -0.002, -0.004, 3.9, True, CuisineType.NORTH_INDIAN, 1, "9:00 AM - 11:00 PM"),
    MockVenue("Social", "Bar", 0.004, -0.008, 4.4, False, CuisineType.CONTINENTAL, 2, "12:00 PM - 1:00 AM"),
    MockVenue("Burger King", "Fast Food", 0.002, 0.009, 3.8, True, CuisineType.FAST_FOOD, 1, "10:00 AM - 11:00 PM"),
    MockVenue("Mainland China", "Restaurant", -0.007, 0.002, 4.8, True, CuisineType.CHINESE, 3, "12:00 PM - 11:30 PM"),
    MockVenue("Starbucks India", "Coffee Shop", 0.006, -0.005, 4.3, True, CuisineType.CAFE, 3, "7:00 AM - 10:00 PM"),
    MockVenue("Barbeque Nation", "Restaurant", -0.004, 0.008, 4.5, True, CuisineType.MUGHLAI, 3, "12:00 PM - 11:00 PM"),
    MockVenue("Punjab Grill", "Restaurant", 0.010, 0.004, 4.6, True, CuisineType.NORTH_INDIAN, 3, "12:00 PM - 12:00 AM"),
    MockVenue("Wok Express", "Fast Food", -0.005, -0.006, 4.0, True, CuisineType.CHINESE, 1, "11:00 AM - 10:00 PM"),
    MockVenue("Dosa Plaza", "Restaurant", 0.007, 0.006, 4.3, True, CuisineType.SOUTH_INDIAN, 2, "8:00 AM - 10:00 PM"),
    MockVenue("Chaat Corner", "Street Food", -0.008, 0.004, 4.1, True, CuisineType.STREET_FOOD, 1, "10:00 AM - 9:00 PM"),
    MockVenue("The Irish House", "Bar", 0.003, 0.005, 4.2, True, CuisineType.CONTINENTAL, 2, "12:00 PM - 1:30 AM"),
    MockVenue("Toit Brewpub", "Bar", -0.006, -0.003, 4.6, True, CuisineType.CONTINENTAL, 2, "12:00 PM - 12:30 AM"),
]

MOCK_WEEKLY_HOURS: list[DayHours] = [
    DayHours(day="Monday", open="9:00 AM", close="10:00 PM"),
    DayHours(day="Tuesday", open="9:00 AM", close="10:00 PM"),
    DayHours(day="Wednesday", open="9:00 AM", close="10:00 PM"),
    DayHours(day="Thursday", open="9:00 AM", close="10:00 PM"),
    DayHours(day="Friday", open="9:00 AM", close="11:00 PM"),
    DayHours(day="Saturday", open="10:00 AM", close="11:00 PM"),
    DayHours(day="Sunday", open="10:00 AM", close="9:00 PM"),
]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def mock_places(latitude: float, longitude: float, rng: random.Random | None = None) -> list[PlaceSummary]:
    """The 15-venue catalog placed around the user's coordinates, ids mock-0..mock-14."""
    rng = rng or random.Random()
    places = []
    for index, venue in enumerate(MOCK_VENUES):
        lat = latitude + venue.lat_offset
        lon = longitude + venue.lon_offset
        places.append(PlaceSummary(
            id=f"{MOCK_ID_PREFIX}{index}",
            name=venue.name,
            category=venue.category,
            latitude=lat,
            longitude=lon,
            distance=calculate_distance_m(latitude, longitude, lat, lon),
            rating=venue.rating,
            price_level=venue.price_level,
            cuisine_type=venue.cuisine_type,
            is_open=venue.is_open,
            opening_hours=venue.opening_hours,
            address=f"{rng.randint(1, 999)} Main Road",
        ))
    return places


def generate_popular_times(rng: random.Random | None = None) -> list[HourlyPopularity]:
    """A plausible busyness curve from 6:00 to 23:00, peaking at meal times."""
    rng = rng or random.Random()
    hours = []
    for hour in range(6, 24):
        popularity = 10.0
        if 8 <= hour <= 10:
            popularity = 30 + rng.random() * 30
        elif 12 <= hour <= 14:
            popularity = 60 + rng.random() * 35
        elif 18 <= hour <= 21:
            popularity = 70 + rng.random() * 30
        elif hour >= 22:
            popularity = 20 + rng.random() * 20
        hours.append(HourlyPopularity(hour=hour, popularity=min(100, round(popularity))))
    return hours


def mock_place_detail(rng: random.Random | None = None) -> PlaceDetail:
    return PlaceDetail(
        description="A wonderful local spot loved by the community.",
        photos=[],
        tips=[
            Tip(text="Great atmosphere and friendly staff!", created_at=_now()),
            Tip(text="Love coming here on weekends.", created_at=_now()),
        ],
        weekly_hours=MOCK_WEEKLY_HOURS,
        popular_times=generate_popular_times(rng),
    )


def fallback_tips(context: Optional[PlaceContext] = None) -> list[Tip]:
    tips = []
    cuisine = context.cuisine_type if context else None
    if cuisine and cuisine != CuisineType.OTHER.value:
        tips.append(Tip(text=f"Great for {cuisine.replace('-', ' ')} food lovers!", created_at=_now()))
    tips.append(Tip(text="The ambiance here is really nice. Perfect for a relaxed visit.", created_at=_now()))
    return tips


def fallback_place_detail(
    context: Optional[PlaceContext] = None,
    rng: random.Random | None = None,
) -> PlaceDetail:
    """Detail synthesized from what the summary already says, used when the detail service fails."""
    description = None
    if context and context.name:
        category = (context.category or "place").lower()
        description = f"{context.name} is a popular {category} in the area."
    return PlaceDetail(
        description=description,
        phone=context.phone if context else None,
        website=context.website if context else None,
        photos=[],
        tips=fallback_tips(context),
        popular_times=generate_popular_times(rng),
    )
