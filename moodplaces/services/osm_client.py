"""OpenStreetMap API client: single node lookup for place details."""

import logging

import httpx

from moodplaces.core.config import settings

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10.0
OSM_ID_PREFIX = "osm-"


def parse_osm_node_id(place_id: str) -> str | None:
    """"osm-123" -> "123"; None for ids outside the OSM namespace or with a non-numeric node id."""
    if not place_id.startswith(OSM_ID_PREFIX):
        return None
    node_id = place_id[len(OSM_ID_PREFIX):]
    return node_id if node_id.isdigit() else None


async def fetch_node(node_id: str) -> dict | None:
    """
    Fetch a node from the OSM API.

    Returns:
        The node element dict (with "lat", "lon", "tags"), or None on any failure.
    """
    url = f"{settings.osm_api_base.rstrip('/')}/node/{node_id}.json"
    logger.info(f"Fetching OSM node: {url}")

    try:
        async with httpx.AsyncClient(
            timeout=REQUEST_TIMEOUT,
            headers={"User-Agent": settings.upstream_user_agent, "Accept": "application/json"},
        ) as client:
            response = await client.get(url)
        if response.status_code != 200:
            logger.warning(f"OSM node lookup failed: status={response.status_code}, node={node_id}")
            return None
        elements = response.json().get("elements") or []
        return elements[0] if elements else None
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"OSM node lookup error for node={node_id}: {e}")
        return None
