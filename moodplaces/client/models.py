"""Client-side data model: place summaries, details and cache records."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

MOCK_ID_PREFIX = "mock-"


def is_mock_place_id(place_id: str) -> bool:
    """True for ids from the deterministic mock catalog."""
    return place_id.startswith(MOCK_ID_PREFIX)


class CuisineType(str, Enum):
    NORTH_INDIAN = "north-indian"
    SOUTH_INDIAN = "south-indian"
    CHINESE = "chinese"
    FAST_FOOD = "fast-food"
    CAFE = "cafe"
    CONTINENTAL = "continental"
    MUGHLAI = "mughlai"
    STREET_FOOD = "street-food"
    OTHER = "other"


class PlaceSummary(BaseModel):
    """A place as listed in search results. Built once per search, never mutated."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: str
    latitude: float
    longitude: float
    # Meters from the user's coordinates, computed client-side
    distance: float = Field(ge=0)
    rating: Optional[float] = None
    price_level: Optional[int] = Field(default=None, ge=1, le=3)
    cuisine_type: CuisineType = CuisineType.OTHER
    is_open: Optional[bool] = None
    opening_hours: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None

    @property
    def is_mock(self) -> bool:
        return is_mock_place_id(self.id)


class Tip(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    created_at: Optional[datetime] = None


class DayHours(BaseModel):
    """Hours for one weekday: either an open/close pair or closed all day."""
    model_config = ConfigDict(frozen=True)

    day: str
    open: Optional[str] = None
    close: Optional[str] = None
    closed: bool = False

    @model_validator(mode="after")
    def _open_close_or_closed(self) -> "DayHours":
        if not self.closed and (self.open is None or self.close is None):
            raise ValueError("open and close are required unless the day is closed")
        return self


class HourlyPopularity(BaseModel):
    model_config = ConfigDict(frozen=True)

    hour: int = Field(ge=0, le=23)
    popularity: int = Field(ge=0, le=100)


class PlaceDetail(BaseModel):
    """Detail view of a place, keyed by place id in the detail cache."""
    model_config = ConfigDict(frozen=True)

    description: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    photos: list[str] = []
    tips: list[Tip] = []
    weekly_hours: Optional[list[DayHours]] = None
    popular_times: list[HourlyPopularity] = []

    @model_validator(mode="after")
    def _one_entry_per_weekday(self) -> "PlaceDetail":
        if self.weekly_hours is not None and len(self.weekly_hours) != 7:
            raise ValueError("weekly_hours must have exactly 7 entries")
        return self


class CacheEntry(BaseModel):
    details: PlaceDetail
    # Capture instant, epoch seconds
    timestamp: float


class CacheEnvelope(BaseModel):
    """Versioned on-disk shape of the detail cache."""
    entries: dict[str, CacheEntry] = {}
    version: int


class CachedDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    detail: PlaceDetail
    is_stale: bool


class DetailResult(BaseModel):
    """What the detail orchestrator hands back: the detail plus whether it is stale."""
    model_config = ConfigDict(frozen=True)

    detail: PlaceDetail
    is_stale: bool = False


class Identity(BaseModel):
    """Signed-in user as seen by the client: the user id plus a bearer token for the API."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    access_token: str


class SavedLocation(BaseModel):
    latitude: float
    longitude: float
    timestamp: float
