"""OpenStreetMap Overpass client used by the search-places endpoint."""

import logging

import httpx

from moodplaces.core.config import settings
from moodplaces.schemas.places import RawPlace

logger = logging.getLogger(__name__)

# Mood categories -> OSM amenity types (food & drink only)
CATEGORY_AMENITIES: dict[str, list[str]] = {
    "cafe": ["cafe"],
    "coffee_shop": ["cafe"],
    "restaurant": ["restaurant"],
    "fast_food": ["fast_food"],
    "bar": ["bar", "pub"],
    "pub": ["pub", "bar"],
}
DEFAULT_AMENITIES = ["restaurant", "cafe", "bar", "fast_food", "pub"]

MAX_ELEMENTS = 25
MAX_RESULTS = 20


class OverpassUnavailableError(Exception):
    """Raised when every configured Overpass endpoint failed."""


def amenity_types_for_categories(categories: list[str]) -> list[str]:
    """Map search categories to de-duplicated OSM amenity types, keeping first-seen order."""
    if not categories:
        return list(DEFAULT_AMENITIES)

    amenity_types: list[str] = []
    for category in categories:
        for amenity in CATEGORY_AMENITIES.get(category, DEFAULT_AMENITIES):
            if amenity not in amenity_types:
                amenity_types.append(amenity)
    return amenity_types


def build_overpass_query(amenity_types: list[str], radius: int, latitude: float, longitude: float) -> str:
    """Build an Overpass QL query for named amenity nodes around a point."""
    timeout = int(settings.overpass_timeout_seconds)
    node_filters = "\n".join(
        f'  node["amenity"="{amenity}"](around:{radius},{latitude},{longitude});'
        for amenity in amenity_types
    )
    return f"[out:json][timeout:{timeout}];\n(\n{node_filters}\n);\nout body {MAX_ELEMENTS};"


async def query_overpass(query: str) -> dict:
    """
    POST a query to each configured Overpass endpoint in turn and return the first
    successful JSON payload.

    Raises:
        OverpassUnavailableError: If all endpoints failed or returned non-200.
    """
    async with httpx.AsyncClient(
        timeout=settings.overpass_timeout_seconds,
        headers={"User-Agent": settings.upstream_user_agent},
    ) as client:
        for endpoint in settings.overpass_endpoints:
            try:
                logger.info(f"Trying Overpass endpoint: {endpoint}")
                response = await client.post(endpoint, data={"data": query})
                if response.status_code == 200:
                    data = response.json()
                    logger.info(
                        "Overpass success from %s, elements=%s",
                        endpoint,
                        len(data.get("elements") or []),
                    )
                    return data
                logger.warning(f"Overpass endpoint {endpoint} returned status {response.status_code}")
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Overpass endpoint {endpoint} failed: {e}")

    raise OverpassUnavailableError("All Overpass API endpoints failed")


def _join_address(tags: dict) -> str | None:
    parts = [tags.get("addr:street"), tags.get("addr:city")]
    return ", ".join(part for part in parts if part) or None


def normalize_elements(elements: list[dict]) -> list[RawPlace]:
    """Turn Overpass elements into RawPlace results; unnamed elements are skipped."""
    results: list[RawPlace] = []
    for element in elements:
        tags = element.get("tags") or {}
        if not tags.get("name"):
            continue
        if element.get("lat") is None or element.get("lon") is None:
            continue
        results.append(RawPlace(
            id=f"osm-{element.get('id')}",
            name=tags["name"],
            category=tags.get("amenity") or tags.get("tourism") or tags.get("leisure") or "Place",
            latitude=element["lat"],
            longitude=element["lon"],
            address=_join_address(tags),
            phone=tags.get("phone"),
            website=tags.get("website"),
            cuisine=tags.get("cuisine"),
            opening_hours=tags.get("opening_hours"),
        ))
        if len(results) >= MAX_RESULTS:
            break
    return results


async def search_nearby(
    latitude: float,
    longitude: float,
    categories: list[str],
    radius: int,
) -> list[RawPlace]:
    """Search named food & drink places around a point."""
    amenity_types = amenity_types_for_categories(categories)
    logger.info(
        "Searching places at %s, %s radius=%s amenities=%s",
        latitude,
        longitude,
        radius,
        ",".join(amenity_types),
    )
    data = await query_overpass(build_overpass_query(amenity_types, radius, latitude, longitude))
    return normalize_elements(data.get("elements") or [])
