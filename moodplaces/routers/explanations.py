"""AI "why this place" explanations using Gemini."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from moodplaces.core.config import settings
from moodplaces.db.session import get_db
from moodplaces.schemas.explanations import ExplanationRequest, ExplanationResponse
from moodplaces.services import gemini_client
from moodplaces.services.explanation_service import generate_explanation
from moodplaces.services.rate_limiter import check_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ai"])

FUNCTION_NAME = "why-this-place"


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/why-this-place", response_model=ExplanationResponse, response_model_exclude_none=True)
def why_this_place(
    body: ExplanationRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Generate a one or two sentence explanation of why a place suits the user's mood.

    - 429 when the caller exceeded the per-IP window or Gemini is in quota cooldown;
      clients should not retry within the window.
    - 500 on any other failure; clients render their own fallback line.
    """
    client_ip = _client_ip(request)
    allowed = check_rate_limit(
        db,
        client_ip,
        FUNCTION_NAME,
        max_requests=settings.explanation_rate_limit_requests,
        window_seconds=settings.explanation_rate_limit_window_seconds,
    )
    if not allowed:
        return _error(429, "Too many requests. Please wait a moment.")

    try:
        explanation = generate_explanation(body)
    except ValueError as e:
        logger.error(f"why-this-place configuration error: {e}")
        return _error(500, "Unable to generate explanation. Please try again.")
    except Exception as e:
        logger.exception("why-this-place error: %s", e)
        return _error(500, "Unable to generate explanation. Please try again.")

    if explanation is None:
        if gemini_client.quota_cooldown_active():
            return _error(429, "Rate limited. Please try again shortly.")
        return _error(500, "AI service unavailable")

    return ExplanationResponse(explanation=explanation)
