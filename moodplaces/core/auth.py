import logging
import time
from typing import Optional, Dict, Any

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, jwk
from jose.exceptions import JWTError, JWKError, ExpiredSignatureError, JWTClaimsError
from pydantic import BaseModel

from moodplaces.core.config import settings

logger = logging.getLogger(__name__)

# Security scheme for Bearer token
security = HTTPBearer()

# JWKS cache with TTL
_jwks_cache: Optional[Dict[str, Any]] = None
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 600  # 10 minutes in seconds

SUPPORTED_ALGORITHMS = ["ES256", "RS256"]


class Identity(BaseModel):
    """Represents the authenticated identity from the token."""
    uid: str
    email: Optional[str] = None


def _unauthorized(detail: str = "Token verification failed") -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def fetch_jwks() -> Dict[str, Any]:
    """
    Fetch JWKS from the Supabase endpoint, cached for JWKS_CACHE_TTL.

    Falls back to an expired cached copy when the endpoint is unreachable.

    Raises:
        HTTPException: 503 if JWKS cannot be fetched and nothing is cached
    """
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()
    if _jwks_cache is not None and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        logger.debug("Using cached JWKS")
        return _jwks_cache

    try:
        logger.info(f"Fetching JWKS from {settings.supabase_jwks_url}")
        response = httpx.get(settings.supabase_jwks_url, timeout=10.0)
        response.raise_for_status()
        jwks_data = response.json()

        if not isinstance(jwks_data, dict) or "keys" not in jwks_data:
            raise ValueError("Invalid JWKS structure: missing 'keys' field")

        _jwks_cache = jwks_data
        _jwks_cache_time = current_time
        logger.info(f"JWKS fetched successfully, {len(jwks_data.get('keys', []))} keys found")
        return jwks_data

    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Failed to fetch JWKS: {e}")
        if _jwks_cache is not None:
            logger.warning("Using expired JWKS cache due to fetch failure")
            return _jwks_cache
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Unable to verify token: JWKS endpoint unavailable"
        )


def get_signing_key(token: str, jwks: Dict[str, Any]) -> Dict[str, Any]:
    """
    Find the JWK matching the token header's kid.

    Raises:
        HTTPException: 401 if kid is missing or unknown
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError as e:
        logger.warning(f"Malformed token header: {e}")
        raise _unauthorized()

    kid = unverified_header.get("kid")
    if not kid:
        logger.warning("Token missing 'kid' in header")
        raise _unauthorized()

    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return key

    logger.warning(f"Key ID '{kid}' not found in JWKS")
    raise _unauthorized()


def verify_supabase_token(token: str) -> dict:
    """
    Verify a Supabase JWT (signature, issuer, audience, expiry) and return its claims.

    Raises:
        HTTPException: If token verification fails
    """
    jwks = fetch_jwks()
    jwk_key = get_signing_key(token, jwks)

    try:
        key = jwk.construct(jwk_key)
    except JWKError as e:
        logger.error(f"Failed to construct key from JWK: {e}")
        raise _unauthorized()

    header_alg = jwt.get_unverified_header(token).get("alg")
    jwk_alg = jwk_key.get("alg")
    if header_alg and jwk_alg and header_alg != jwk_alg:
        logger.warning(f"Algorithm mismatch: header={header_alg}, JWK={jwk_alg}")
        raise _unauthorized()

    algorithm = header_alg or jwk_alg or "ES256"
    if algorithm not in SUPPORTED_ALGORITHMS:
        logger.warning(f"Unsupported algorithm: {algorithm}")
        raise _unauthorized()

    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=SUPPORTED_ALGORITHMS,
            audience=settings.supabase_jwt_audience,
            issuer=settings.supabase_issuer,
        )
    except ExpiredSignatureError:
        logger.warning("Token has expired")
        raise _unauthorized()
    except JWTClaimsError as e:
        logger.warning(f"Token claims validation failed: {e}")
        raise _unauthorized()
    except JWTError as e:
        logger.warning(f"JWT verification error: {e}")
        raise _unauthorized()

    logger.debug(f"Token verified successfully for sub: {payload.get('sub')}")
    return payload


def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Identity:
    """
    Extract and verify identity from a Supabase Bearer token.

    Raises:
        HTTPException: If token is missing, invalid, or verification fails
    """
    token = credentials.credentials
    if not token:
        raise _unauthorized("Missing token")

    claims = verify_supabase_token(token)

    uid = claims.get("sub")
    if not uid:
        logger.warning("Token missing subject (sub) claim")
        raise _unauthorized("Token missing subject (sub) claim")

    return Identity(uid=str(uid), email=claims.get("email"))
