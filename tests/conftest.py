import base64
import random
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import jwt as pyjwt
import pytest
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import moodplaces.models  # noqa: F401  registers models on Base.metadata
from moodplaces.client.models import PlaceSummary, CuisineType
from moodplaces.client.storage import MemoryStorage
from moodplaces.core.config import settings
from moodplaces.db.base import Base
from moodplaces.db.session import get_db
from moodplaces.main import app


# File-backed SQLite so the TestClient's worker thread sees the same data
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def rng():
    return random.Random(42)


def make_place(place_id="osm-1", name="Blue Tokai Coffee", **overrides) -> PlaceSummary:
    """Build a PlaceSummary with sensible defaults for tests."""
    values = {
        "id": place_id,
        "name": name,
        "category": "Cafe",
        "latitude": 19.0760,
        "longitude": 72.8777,
        "distance": 350.0,
        "rating": 4.2,
        "price_level": 2,
        "cuisine_type": CuisineType.CAFE,
        "is_open": True,
        "address": "12 Hill Road",
    }
    values.update(overrides)
    return PlaceSummary(**values)


# Test JWT key pair (generated once)
_test_private_key = rsa.generate_private_key(
    public_exponent=65537,
    key_size=2048,
    backend=default_backend()
)
_test_public_key = _test_private_key.public_key()


def _create_test_jwks(public_key, kid="test-key-id"):
    """Create a test JWKS structure from a public key."""
    public_numbers = public_key.public_numbers()

    def int_to_base64url(n):
        byte_length = (n.bit_length() + 7) // 8
        n_bytes = n.to_bytes(byte_length, 'big')
        b64 = base64.urlsafe_b64encode(n_bytes).decode('utf-8')
        return b64.rstrip('=')

    return {
        "keys": [
            {
                "kty": "RSA",
                "kid": kid,
                "use": "sig",
                "alg": "RS256",
                "n": int_to_base64url(public_numbers.n),
                "e": int_to_base64url(public_numbers.e),
            }
        ]
    }


def _create_test_token(
    private_key,
    sub="test-user-123",
    email="test@example.com",
    exp=None,
    aud=None,
    iss=None,
    kid="test-key-id"
):
    """Create a test JWT token with the given claims."""
    if exp is None:
        exp = int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp())

    claims = {
        "sub": sub,
        "email": email,
        "aud": aud if aud is not None else settings.supabase_jwt_audience,
        "iss": iss if iss is not None else settings.supabase_issuer,
        "exp": exp,
        "iat": int(datetime.now(timezone.utc).timestamp()),
    }

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    ).decode('utf-8')

    headers = {"kid": kid, "alg": "RS256", "typ": "JWT"}

    return pyjwt.encode(claims, private_pem, algorithm="RS256", headers=headers)


TEST_SUPABASE_UID_1 = "550e8400-e29b-41d4-a716-446655440000"
TEST_SUPABASE_UID_2 = "550e8400-e29b-41d4-a716-446655440001"


@pytest.fixture
def mock_jwks():
    """Fixture that mocks JWKS so JWT verification uses the test key."""
    test_jwks = _create_test_jwks(_test_public_key)
    with patch("moodplaces.core.auth.fetch_jwks", return_value=test_jwks):
        yield test_jwks


@pytest.fixture
def create_test_token():
    """Fixture that provides a function to create test JWT tokens."""
    def _create(sub=TEST_SUPABASE_UID_1, email="test@example.com", **kwargs):
        return _create_test_token(_test_private_key, sub=sub, email=email, **kwargs)
    return _create


@pytest.fixture
def auth_headers(mock_jwks, create_test_token):
    return {"Authorization": f"Bearer {create_test_token()}"}
