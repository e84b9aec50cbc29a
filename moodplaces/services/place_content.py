"""
Assemble place-details payloads from OSM tags and the client's place context.

OpenStreetMap carries no photos, tips or ratings, so those are generated here:
category-based stock photo URLs, a short description and a few tips.
"""

import random
from datetime import datetime, timezone
from urllib.parse import quote

from moodplaces.core.opening_hours import parse_osm_opening_hours
from moodplaces.schemas.places import (
    HoursSlot,
    PlaceContext,
    PlaceDetailsResponse,
    RawDetails,
    RawHours,
    RawTip,
)

PHOTO_BASE_URL = "https://source.unsplash.com/800x600/"
MAX_PHOTOS = 5

PHOTO_QUERIES: dict[str, list[str]] = {
    "restaurant": ["restaurant interior", "indian food platter", "restaurant ambience", "food menu"],
    "cafe": ["cafe interior", "coffee shop", "cafe ambience", "latte art"],
    "bar": ["bar interior", "cocktail drinks", "bar ambience", "pub"],
    "fast_food": ["fast food restaurant", "burger and fries", "street food india", "food counter"],
    "default": ["restaurant food", "dining ambience", "food plating", "cafe interior"],
}

# (substring of the cuisine, extra photo queries)
CUISINE_PHOTO_QUERIES: list[tuple[tuple[str, ...], list[str]]] = [
    (("indian", "mughlai"), ["indian food thali", "indian restaurant"]),
    (("chinese",), ["chinese food", "noodles dish"]),
    (("pizza",), ["pizza restaurant", "italian pizza"]),
    (("coffee", "cafe"), ["coffee beans", "cafe latte"]),
]

_default_rng = random.Random()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_photo_urls(category: str | None, cuisine: str | None = None) -> list[str]:
    """Up to five stock photo URLs for a category, with a couple of cuisine-specific extras."""
    category_key = (category or "default").strip().lower().replace(" ", "_") or "default"
    queries = list(PHOTO_QUERIES.get(category_key, PHOTO_QUERIES["default"]))

    if cuisine:
        lowered = cuisine.lower()
        for needles, extra in CUISINE_PHOTO_QUERIES:
            if any(needle in lowered for needle in needles):
                queries.extend(extra)
                break

    unique_queries = list(dict.fromkeys(queries))[:MAX_PHOTOS]
    return [
        f"{PHOTO_BASE_URL}?{quote(query)}&sig={quote(f'{category}-{cuisine}-{index}')}"
        for index, query in enumerate(unique_queries)
    ]


def format_address(tags: dict, place_data: PlaceContext | None = None) -> str:
    parts = []
    street = tags.get("addr:street")
    if street:
        housenumber = tags.get("addr:housenumber")
        parts.append(f"{housenumber} {street}" if housenumber else street)
    for key in ("addr:city", "addr:state", "addr:postcode"):
        if tags.get(key):
            parts.append(tags[key])

    if parts:
        return ", ".join(parts)
    if place_data and place_data.address:
        return place_data.address
    return "Address not available"


def generate_rating(rng: random.Random | None = None) -> float:
    rng = rng or _default_rng
    return round(3.5 + rng.random() * 1.5, 1)


def generate_description(
    tags: dict,
    place_data: PlaceContext | None = None,
    rng: random.Random | None = None,
) -> str:
    rng = rng or _default_rng
    category = tags.get("amenity") or tags.get("cuisine") or (place_data and place_data.category) or "place"
    name = tags.get("name") or (place_data and place_data.name) or "This place"

    descriptions = [
        f"{name} is a popular {category} known for its welcoming atmosphere and quality service.",
        f"A well-regarded {category} that locals love to visit for a great experience.",
        f"{name} offers a wonderful {category} experience with attentive service.",
    ]
    return rng.choice(descriptions)


def generate_tips(tags: dict, place_data: PlaceContext | None = None) -> list[RawTip]:
    tips: list[RawTip] = []
    category = (tags.get("amenity") or (place_data and place_data.category) or "restaurant").lower()
    cuisine = tags.get("cuisine") or (place_data and place_data.cuisine_type)

    if cuisine and cuisine != "other":
        tips.append(RawTip(text=f"Great for {cuisine} cuisine lovers!", created_at=_now_iso()))
    if category in ("restaurant", "cafe"):
        tips.append(RawTip(
            text="The ambiance here is really nice. Perfect for a relaxed meal.",
            created_at=_now_iso(),
        ))
    if tags.get("outdoor_seating") == "yes":
        tips.append(RawTip(
            text="They have outdoor seating available - great on nice days!",
            created_at=_now_iso(),
        ))
    return tips


def parse_hours(opening_hours: str | None) -> RawHours | None:
    if not opening_hours:
        return None
    return RawHours(
        display=opening_hours,
        regular=[HoursSlot(**slot) for slot in parse_osm_opening_hours(opening_hours)],
    )


def build_details_response(
    place_id: str,
    tags: dict,
    place_data: PlaceContext | None = None,
    element: dict | None = None,
    rng: random.Random | None = None,
) -> PlaceDetailsResponse:
    """
    Build a place-details payload from OSM tags (possibly empty) and the client's context.

    OSM tags win over the posted context for every field both provide.
    """
    element = element or {}
    category = (place_data and place_data.category) or "restaurant"
    cuisine = (place_data and place_data.cuisine_type) or tags.get("cuisine")

    details = RawDetails(
        id=place_id,
        name=tags.get("name") or (place_data and place_data.name) or "Unknown Place",
        category=tags.get("amenity") or tags.get("cuisine") or (place_data and place_data.category) or "Place",
        latitude=element.get("lat") if element.get("lat") is not None else (place_data and place_data.latitude),
        longitude=element.get("lon") if element.get("lon") is not None else (place_data and place_data.longitude),
        formatted_address=format_address(tags, place_data),
        hours=parse_hours(tags.get("opening_hours") or (place_data and place_data.opening_hours)),
        rating=(place_data and place_data.rating) or generate_rating(rng),
        price=_price_from_tags(tags) or (place_data and place_data.price_level) or 2,
        tel=tags.get("phone") or tags.get("contact:phone") or (place_data and place_data.phone),
        website=tags.get("website") or tags.get("contact:website") or (place_data and place_data.website),
        description=tags.get("description") or tags.get("note") or generate_description(tags, place_data, rng),
    )

    return PlaceDetailsResponse(
        details=details,
        photos=get_photo_urls(category, cuisine),
        tips=generate_tips(tags, place_data),
    )


def _price_from_tags(tags: dict) -> int | None:
    value = tags.get("price_level")
    if value and str(value).isdigit():
        return max(1, min(int(value), 3))
    return None
