"""Wire schemas for the search and detail services.

The same models validate requests on the server and responses on the client, so
loosely-shaped upstream JSON is normalized at the boundary.
"""

import math
from typing import Annotated, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
)
from pydantic.alias_generators import to_camel

DEFAULT_RADIUS_M = 5000
MIN_RADIUS_M = 100
MAX_RADIUS_M = 50000
MAX_CATEGORY_LENGTH = 50


def clamp_radius(radius: float | None) -> int:
    """Clamp a search radius to [100, 50000] meters; missing or non-finite becomes 5000."""
    if radius is None or not math.isfinite(radius):
        return DEFAULT_RADIUS_M
    return int(max(MIN_RADIUS_M, min(radius, MAX_RADIUS_M)))


class SearchPlacesRequest(BaseModel):
    """Body of POST /search-places."""
    latitude: float = Field(ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(ge=-180, le=180, allow_inf_nan=False)
    categories: list[Annotated[str, StringConstraints(max_length=MAX_CATEGORY_LENGTH)]] = []
    radius: Optional[float] = DEFAULT_RADIUS_M

    @property
    def effective_radius(self) -> int:
        return clamp_radius(self.radius)


class RawPlace(BaseModel):
    """A place as returned by the search service, before client-side enrichment."""
    id: str
    name: str
    category: Optional[str] = None
    latitude: float
    longitude: float
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    cuisine: Optional[str] = None
    opening_hours: Optional[str] = None


class SearchPlacesResponse(BaseModel):
    """Either results or an error; an empty result list is valid but triggers the client fallback."""
    results: list[RawPlace] = []
    error: Optional[str] = None
    field: Optional[str] = None


class PlaceContext(BaseModel):
    """Summary fields the client already knows about a place, sent along with detail requests."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = None
    category: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    rating: Optional[float] = None
    price_level: Optional[int] = None
    cuisine_type: Optional[str] = None
    opening_hours: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None


class PlaceDetailsRequest(BaseModel):
    """Body of POST /place-details."""
    model_config = ConfigDict(populate_by_name=True)

    place_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("placeId", "place_id"),
        serialization_alias="placeId",
    )
    place_data: Optional[PlaceContext] = Field(
        default=None,
        validation_alias=AliasChoices("placeData", "placeContext", "place_data"),
        serialization_alias="placeData",
    )


class HoursSlot(BaseModel):
    """One regular opening slot; day 1 = Monday .. 7 = Sunday, times as "HHMM"."""
    day: int
    open: str
    close: str


class RawHours(BaseModel):
    display: Optional[str] = None
    regular: list[HoursSlot] = []


class PopularSlot(BaseModel):
    open: str
    popularity: Optional[int] = None


class PopularDay(BaseModel):
    day: int
    popular: list[PopularSlot] = []


class RawDetails(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    category: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    formatted_address: Optional[str] = None
    hours: Optional[RawHours] = None
    hours_popular: Optional[list[PopularDay]] = None
    rating: Optional[float] = None
    price: Optional[int] = None
    tel: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None


class RawTip(BaseModel):
    text: str
    created_at: Optional[str] = None


class RawPhoto(BaseModel):
    """Prefix/suffix photo reference; the full URL is prefix + size + suffix."""
    prefix: str
    suffix: str

    @property
    def url(self) -> str:
        return f"{self.prefix}original{self.suffix}"


class PlaceDetailsResponse(BaseModel):
    details: Optional[RawDetails] = None
    photos: list[Union[str, RawPhoto]] = []
    tips: list[RawTip] = []
    error: Optional[str] = None

    @field_validator("photos", mode="before")
    @classmethod
    def _drop_null_photos(cls, value):
        if isinstance(value, list):
            return [photo for photo in value if photo]
        return value

    @property
    def photo_urls(self) -> list[str]:
        return [photo if isinstance(photo, str) else photo.url for photo in self.photos]
