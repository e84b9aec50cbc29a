from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from moodplaces.services.rate_limiter import check_rate_limit

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _check(db, now, ip="1.2.3.4", max_requests=3):
    return check_rate_limit(db, ip, "why-this-place", max_requests=max_requests, window_seconds=60, now=now)


def test_allows_up_to_limit_within_window(db_session):
    results = [_check(db_session, NOW + timedelta(seconds=index)) for index in range(4)]

    assert results == [True, True, True, False]


def test_window_resets_after_expiry(db_session):
    for index in range(3):
        _check(db_session, NOW + timedelta(seconds=index))

    assert _check(db_session, NOW + timedelta(seconds=30)) is False
    assert _check(db_session, NOW + timedelta(seconds=61)) is True


def test_counters_are_per_client(db_session):
    assert _check(db_session, NOW, ip="a", max_requests=1) is True
    assert _check(db_session, NOW, ip="b", max_requests=1) is True
    assert _check(db_session, NOW, ip="a", max_requests=1) is False


def test_storage_error_fails_open():
    db = MagicMock()
    db.get.side_effect = OperationalError("SELECT", {}, Exception("db down"))

    assert _check(db, NOW) is True
    db.rollback.assert_called_once()
