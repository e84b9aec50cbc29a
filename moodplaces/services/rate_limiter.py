"""Database-backed fixed-window rate limiter, keyed by (client_ip, function_name)."""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from moodplaces.models.rate_limit import RateLimit

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def check_rate_limit(
    db: Session,
    client_ip: str,
    function_name: str,
    max_requests: int,
    window_seconds: int,
    now: datetime | None = None,
) -> bool:
    """
    Count a request against the client's current window.

    Returns:
        True if the request is allowed, False if the window is exhausted.
        Storage errors allow the request so legitimate traffic is not blocked.
    """
    now = now or datetime.now(timezone.utc)
    try:
        record = db.get(RateLimit, (client_ip, function_name))

        if record is None:
            db.add(RateLimit(
                client_ip=client_ip,
                function_name=function_name,
                request_count=1,
                window_start=now,
            ))
            db.commit()
            return True

        if _as_utc(record.window_start) < now - timedelta(seconds=window_seconds):
            record.request_count = 1
            record.window_start = now
            db.commit()
            return True

        if record.request_count >= max_requests:
            logger.info(
                "Rate limited client=%s function=%s count=%s",
                client_ip,
                function_name,
                record.request_count,
            )
            return False

        record.request_count += 1
        db.commit()
        return True

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Rate limit check failed, allowing request: {e}")
        return True
