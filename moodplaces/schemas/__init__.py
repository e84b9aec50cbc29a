from moodplaces.schemas.places import (
    RawPlace,
    SearchPlacesRequest,
    SearchPlacesResponse,
    PlaceContext,
    PlaceDetailsRequest,
    PlaceDetailsResponse,
)
from moodplaces.schemas.explanations import ExplanationPlace, ExplanationRequest, ExplanationResponse
from moodplaces.schemas.favorites import FavoriteCreate, FavoriteRead, FavoriteListResponse

__all__ = [
    "RawPlace",
    "SearchPlacesRequest",
    "SearchPlacesResponse",
    "PlaceContext",
    "PlaceDetailsRequest",
    "PlaceDetailsResponse",
    "ExplanationPlace",
    "ExplanationRequest",
    "ExplanationResponse",
    "FavoriteCreate",
    "FavoriteRead",
    "FavoriteListResponse",
]
