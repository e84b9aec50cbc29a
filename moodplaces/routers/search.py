"""Nearby place search backed by OpenStreetMap Overpass."""

import logging
from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from moodplaces.schemas.places import SearchPlacesRequest, SearchPlacesResponse
from moodplaces.services import overpass_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["places"])

VALIDATION_MESSAGES = {
    "latitude": "Invalid latitude. Must be a number between -90 and 90.",
    "longitude": "Invalid longitude. Must be a number between -180 and 180.",
    "categories": "Categories must be an array of strings (max 50 chars each).",
    "radius": "Invalid radius. Must be a number of meters.",
}


def _first_invalid_field(exc: ValidationError) -> str:
    for error in exc.errors():
        loc = error.get("loc") or ()
        if loc:
            return str(loc[0])
    return "body"


@router.post("/search-places", response_model=SearchPlacesResponse, response_model_exclude_none=True)
async def search_places(body: dict[str, Any] = Body(...)):
    """
    Search named food & drink places around a point.

    - 400 with the offending field when coordinates or categories are invalid.
    - 200 with an error and empty results when every Overpass endpoint fails, so
      clients fall back to their own data instead of showing an error.
    - Radius is clamped to [100, 50000] meters.

    Example curl:
    ```bash
    curl -X POST http://localhost:8000/api/v1/search-places \\
      -H 'Content-Type: application/json' \\
      -d '{"latitude": 19.076, "longitude": 72.8777, "categories": ["cafe"], "radius": 2000}'
    ```
    """
    try:
        request = SearchPlacesRequest.model_validate(body)
    except ValidationError as e:
        field = _first_invalid_field(e)
        logger.info(f"Rejected search request: field={field}")
        return JSONResponse(
            status_code=400,
            content={
                "error": VALIDATION_MESSAGES.get(field, "Invalid request body."),
                "field": field,
                "results": [],
            },
        )

    try:
        results = await overpass_client.search_nearby(
            request.latitude,
            request.longitude,
            request.categories,
            request.effective_radius,
        )
    except overpass_client.OverpassUnavailableError as e:
        logger.error(f"Error in search-places: {e}")
        return SearchPlacesResponse(error=str(e), results=[])

    logger.info(f"Returning {len(results)} places")
    return SearchPlacesResponse(results=results)
