import uuid
from sqlalchemy import Column, String, DateTime, Uuid, UniqueConstraint, func

from moodplaces.db.base import Base


class Favorite(Base):
    __tablename__ = "favorites"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Supabase auth uid (JWT sub)
    user_id = Column(String(64), nullable=False, index=True)
    # Provider-qualified place id, e.g. "osm-123456"
    place_id = Column(String(200), nullable=False)
    place_name = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "place_id", name="uq_favorites_user_id_place_id"),
    )
