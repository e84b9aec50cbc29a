import pytest

from moodplaces.core.geo import calculate_distance_m, format_distance, haversine_distance_km
from moodplaces.core.locations import find_popular_location
from moodplaces.core.moods import Mood, get_categories_for_mood, get_mood_config


def test_haversine_known_distance():
    # Mumbai to Pune is roughly 120 km as the crow flies
    distance = haversine_distance_km(19.0760, 72.8777, 18.5204, 73.8567)

    assert distance == pytest.approx(120, abs=5)


def test_distance_in_meters_is_rounded():
    meters = calculate_distance_m(19.0760, 72.8777, 19.0810, 72.8807)

    assert meters == round(meters)
    assert 600 < meters < 700


def test_same_point_is_zero():
    assert calculate_distance_m(19.0, 72.0, 19.0, 72.0) == 0


@pytest.mark.parametrize("meters, expected", [
    (450, "450 m"),
    (999.4, "999 m"),
    (1000, "1.0 km"),
    (1234, "1.2 km"),
])
def test_format_distance(meters, expected):
    assert format_distance(meters) == expected


def test_mood_categories():
    assert get_categories_for_mood(Mood.WORK) == ["cafe", "coffee_shop"]
    assert get_categories_for_mood("fun") == ["bar", "pub", "restaurant"]
    assert get_categories_for_mood("unknown") == []
    assert get_mood_config("quick_bite").label == "Quick Bite"


def test_find_popular_location():
    mumbai = find_popular_location(" mumbai ")

    assert (mumbai.lat, mumbai.lng) == (19.0760, 72.8777)
    assert find_popular_location("Atlantis") is None
