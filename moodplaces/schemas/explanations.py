"""Schemas for the "why this place" explanation endpoint."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExplanationPlace(BaseModel):
    """Place fields the explanation prompt is built from."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(min_length=1, max_length=200)
    category: Optional[str] = Field(default=None, max_length=100)
    # Meters
    distance: Optional[float] = None
    rating: Optional[float] = None
    price_level: Optional[int] = None
    cuisine_type: Optional[str] = None
    is_open: Optional[bool] = None
    address: Optional[str] = Field(default=None, max_length=300)


class ExplanationRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    place: ExplanationPlace
    mood: Optional[str] = Field(default=None, max_length=50)
    user_context: Optional[str] = Field(default=None, max_length=500)


class ExplanationResponse(BaseModel):
    explanation: Optional[str] = None
    error: Optional[str] = None
