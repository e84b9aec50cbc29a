from sqlalchemy import Column, Integer, String, DateTime, PrimaryKeyConstraint

from moodplaces.db.base import Base


class RateLimit(Base):
    """Fixed-window request counter per (client_ip, function_name)."""
    __tablename__ = "rate_limits"

    client_ip = Column(String(64), nullable=False)
    function_name = Column(String(64), nullable=False)
    request_count = Column(Integer, nullable=False, default=0)
    window_start = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        PrimaryKeyConstraint("client_ip", "function_name", name="pk_rate_limits"),
    )
