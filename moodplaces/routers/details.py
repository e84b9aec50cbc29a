"""Place details for OpenStreetMap places."""

import logging
from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from moodplaces.schemas.places import PlaceDetailsRequest, PlaceDetailsResponse
from moodplaces.services import osm_client
from moodplaces.services.place_content import build_details_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["places"])


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


@router.post("/place-details", response_model=PlaceDetailsResponse, response_model_exclude_none=True)
async def place_details(body: dict[str, Any] = Body(...)):
    """
    Details for an `osm-<node>` place: OSM node tags when the OSM API answers,
    otherwise the place data the client posted along. Photos, tips and a
    description are generated from category and cuisine.

    Returns 400 `{error}` when the id is missing or nothing is known about the place.
    """
    try:
        request = PlaceDetailsRequest.model_validate(body)
    except ValidationError:
        return _error("Place ID is required")

    place_id = request.place_id
    node_id = osm_client.parse_osm_node_id(place_id)
    if node_id is None:
        logger.warning(f"Unsupported place id for details: {place_id}")
        return _error("Unable to fetch place details")

    logger.info(f"Fetching details for place: {place_id}")
    element = await osm_client.fetch_node(node_id)
    if element is not None:
        tags = element.get("tags") or {}
        logger.info(f"Fetched OSM data for: {tags.get('name') or place_id}")
        return build_details_response(place_id, tags, request.place_data, element)

    if request.place_data is not None:
        logger.info(f"OSM lookup failed, using provided place data for {place_id}")
        return build_details_response(place_id, {}, request.place_data)

    return _error("Unable to fetch place details")
