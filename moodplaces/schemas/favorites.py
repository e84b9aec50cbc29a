from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FavoriteCreate(BaseModel):
    place_id: str = Field(min_length=1, max_length=200)
    place_name: Optional[str] = Field(default=None, max_length=200)


class FavoriteRead(BaseModel):
    place_id: str
    place_name: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FavoriteListResponse(BaseModel):
    results: list[FavoriteRead]
