"""HTTP transport for the MoodPlaces services: search, details, explanations, favorites."""

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ValidationError

from moodplaces.client.errors import (
    RateLimitedError,
    ServiceResponseError,
    TransportError,
)
from moodplaces.client.models import PlaceSummary
from moodplaces.core.config import settings
from moodplaces.schemas.explanations import ExplanationPlace, ExplanationRequest, ExplanationResponse
from moodplaces.schemas.favorites import FavoriteCreate, FavoriteListResponse
from moodplaces.schemas.places import (
    PlaceContext,
    PlaceDetailsRequest,
    PlaceDetailsResponse,
    SearchPlacesResponse,
)

logger = logging.getLogger(__name__)

# Response shapes as seen from the client
SearchServiceResponse = SearchPlacesResponse
DetailServiceResponse = PlaceDetailsResponse


def place_context(place: PlaceSummary) -> PlaceContext:
    """Summary fields posted along with a detail request."""
    return PlaceContext(
        name=place.name,
        category=place.category,
        latitude=place.latitude,
        longitude=place.longitude,
        address=place.address,
        rating=place.rating,
        price_level=place.price_level,
        cuisine_type=place.cuisine_type.value,
        opening_hours=place.opening_hours,
        phone=place.phone,
        website=place.website,
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP {response.status_code}"


class PlacesApiClient:
    """
    Thin async wrapper over the MoodPlaces HTTP API.

    Failures are mapped to the client exception hierarchy:
    TransportError for connection problems and timeouts, RateLimitedError for 429,
    ServiceResponseError for other error statuses and bodies that do not validate.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.client_api_base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.client_request_timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json: Any = None,
        token: str | None = None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        try:
            response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            raise TransportError(str(e) or e.__class__.__name__) from e

        logger.info(f"{method} {path}: status={response.status_code}")
        if response.status_code == 429:
            raise RateLimitedError(_error_message(response))
        return response

    @staticmethod
    def _parse(response: httpx.Response, model: type[BaseModel]) -> Any:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ServiceResponseError(f"Invalid response body: {e}", response.status_code) from e

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code >= 400:
            raise ServiceResponseError(_error_message(response), response.status_code)

    async def search_places(
        self,
        latitude: float,
        longitude: float,
        categories: list[str],
        radius: int,
    ) -> SearchPlacesResponse:
        response = await self._request(
            "POST",
            "/search-places",
            json={
                "latitude": latitude,
                "longitude": longitude,
                "categories": categories,
                "radius": radius,
            },
        )
        self._raise_for_status(response)
        return self._parse(response, SearchPlacesResponse)

    async def get_place_details(
        self,
        place_id: str,
        context: Optional[PlaceContext] = None,
    ) -> PlaceDetailsResponse:
        try:
            body = PlaceDetailsRequest(place_id=place_id, place_data=context)
        except ValidationError as e:
            raise ServiceResponseError(f"Invalid detail request: {e.error_count()} validation errors") from e
        response = await self._request(
            "POST",
            "/place-details",
            json=body.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        self._raise_for_status(response)
        return self._parse(response, PlaceDetailsResponse)

    async def explain(self, place: PlaceSummary, mood: str | None = None) -> str:
        body = ExplanationRequest(
            place=ExplanationPlace(
                name=place.name,
                category=place.category,
                distance=place.distance,
                rating=place.rating,
                price_level=place.price_level,
                cuisine_type=place.cuisine_type.value,
                is_open=place.is_open,
                address=place.address,
            ),
            mood=mood,
        )
        response = await self._request(
            "POST",
            "/why-this-place",
            json=body.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        self._raise_for_status(response)
        parsed: ExplanationResponse = self._parse(response, ExplanationResponse)
        if not parsed.explanation:
            raise ServiceResponseError(parsed.error or "Empty explanation", response.status_code)
        return parsed.explanation

    async def list_favorites(self, token: str) -> list[str]:
        response = await self._request("GET", "/favorites", token=token)
        self._raise_for_status(response)
        parsed: FavoriteListResponse = self._parse(response, FavoriteListResponse)
        return [favorite.place_id for favorite in parsed.results]

    async def add_favorite(self, token: str, place_id: str, place_name: str | None = None) -> None:
        body = FavoriteCreate(place_id=place_id, place_name=place_name)
        response = await self._request(
            "POST",
            "/favorites",
            json=body.model_dump(exclude_none=True),
            token=token,
        )
        self._raise_for_status(response)

    async def remove_favorite(self, token: str, place_id: str) -> None:
        response = await self._request("DELETE", f"/favorites/{place_id}", token=token)
        self._raise_for_status(response)
