"""Tests for POST /api/v1/place-details and the content it generates."""

import random
from unittest.mock import AsyncMock, patch

from moodplaces.schemas.places import PlaceContext
from moodplaces.services import osm_client
from moodplaces.services.place_content import (
    build_details_response,
    format_address,
    generate_tips,
    get_photo_urls,
    parse_hours,
)

URL = "/api/v1/place-details"

NODE = {
    "id": 123,
    "lat": 19.08,
    "lon": 72.88,
    "tags": {
        "name": "Cafe Madras",
        "amenity": "cafe",
        "cuisine": "south_indian",
        "opening_hours": "Mo-Fr 07:00-22:00; Sa,Su 08:00-23:00",
        "phone": "+91 22 2401 4419",
        "addr:street": "Bhaudaji Road",
        "addr:city": "Mumbai",
        "outdoor_seating": "yes",
    },
}


def test_details_from_osm_node(client):
    with patch.object(osm_client, "fetch_node", AsyncMock(return_value=NODE)) as mock_fetch:
        response = client.post(URL, json={"placeId": "osm-123"})

    assert response.status_code == 200
    mock_fetch.assert_awaited_once_with("123")
    data = response.json()
    details = data["details"]
    assert details["name"] == "Cafe Madras"
    assert details["tel"] == "+91 22 2401 4419"
    assert details["formatted_address"] == "Bhaudaji Road, Mumbai"
    assert details["hours"]["display"] == "Mo-Fr 07:00-22:00; Sa,Su 08:00-23:00"
    assert len(details["hours"]["regular"]) == 7
    assert details["hours"]["regular"][0] == {"day": 1, "open": "0700", "close": "2200"}
    assert len(data["photos"]) <= 5
    assert any("outdoor seating" in tip["text"] for tip in data["tips"])


def test_falls_back_to_posted_place_data(client):
    with patch.object(osm_client, "fetch_node", AsyncMock(return_value=None)):
        response = client.post(URL, json={
            "placeId": "osm-123",
            "placeData": {"name": "Dosa Plaza", "category": "Restaurant", "cuisineType": "south-indian",
                          "address": "Station Road", "rating": 4.3, "priceLevel": 2},
        })

    assert response.status_code == 200
    details = response.json()["details"]
    assert details["name"] == "Dosa Plaza"
    assert details["formatted_address"] == "Station Road"
    assert details["rating"] == 4.3
    assert details["price"] == 2


def test_unknown_place_returns_400(client):
    with patch.object(osm_client, "fetch_node", AsyncMock(return_value=None)):
        response = client.post(URL, json={"placeId": "osm-999"})

    assert response.status_code == 400
    assert response.json() == {"error": "Unable to fetch place details"}


def test_non_osm_id_returns_400(client):
    with patch.object(osm_client, "fetch_node", AsyncMock()) as mock_fetch:
        response = client.post(URL, json={"placeId": "fsq-abc"})

    assert response.status_code == 400
    mock_fetch.assert_not_awaited()


def test_missing_place_id_returns_400(client):
    response = client.post(URL, json={"placeData": {"name": "x"}})

    assert response.status_code == 400
    assert response.json() == {"error": "Place ID is required"}


def test_parse_osm_node_id():
    assert osm_client.parse_osm_node_id("osm-42") == "42"
    assert osm_client.parse_osm_node_id("osm-abc") is None
    assert osm_client.parse_osm_node_id("mock-1") is None


def test_photo_urls_are_category_based():
    urls = get_photo_urls("cafe", "indian")

    assert len(urls) == 5
    assert all(url.startswith("https://source.unsplash.com/800x600/?") for url in urls)
    assert len(set(urls)) == 5


def test_format_address_prefers_tags():
    tags = {"addr:housenumber": "12", "addr:street": "Hill Road", "addr:postcode": "400050"}

    assert format_address(tags) == "12 Hill Road, 400050"
    assert format_address({}, PlaceContext(address="Fallback")) == "Fallback"
    assert format_address({}) == "Address not available"


def test_parse_hours_unparseable_has_no_regular_slots():
    hours = parse_hours("sunrise-sunset")

    assert hours.display == "sunrise-sunset"
    assert hours.regular == []


def test_build_details_response_is_deterministic_with_seeded_rng():
    first = build_details_response("osm-1", {"name": "A"}, rng=random.Random(7))
    second = build_details_response("osm-1", {"name": "A"}, rng=random.Random(7))

    assert first.details.rating == second.details.rating
    assert first.details.description == second.details.description
    assert 3.5 <= first.details.rating <= 5.0


def test_tips_skip_unclassified_cuisine():
    tips = generate_tips({}, PlaceContext(name="Corner Spot", category="cafe", cuisine_type="other"))

    assert [tip.text for tip in tips] == ["The ambiance here is really nice. Perfect for a relaxed meal."]
    assert generate_tips({"cuisine": "south_indian"})[0].text == "Great for south_indian cuisine lovers!"
