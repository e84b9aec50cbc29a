"""Gemini calls behind POST /why-this-place, with a process-wide pause after quota errors."""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from google import genai
from google.genai import errors as genai_errors

from moodplaces.core.config import settings

logger = logging.getLogger(__name__)

RETRY_INFO_TYPE = "type.googleapis.com/google.rpc.RetryInfo"
_RETRY_DELAY = re.compile(r"^(\d+(?:\.\d+)?)\s*s")

# While set and in the future, explanation requests skip Gemini entirely
_cooldown_until: Optional[datetime] = None


def _is_quota_error(exc: genai_errors.ClientError) -> bool:
    if exc.code == 429:
        return True
    return "RESOURCE_EXHAUSTED" in str(exc.status or "").upper()


def _retry_after_seconds(exc: BaseException) -> Optional[int]:
    """Delay suggested by a RetryInfo entry in the error payload ("34s", "60.5s")."""
    payload = getattr(exc, "details", None)
    if not isinstance(payload, dict):
        return None
    error = payload.get("error", payload)
    entries = error.get("details") if isinstance(error, dict) else None
    if not isinstance(entries, list):
        return None

    for entry in entries:
        if isinstance(entry, dict) and entry.get("@type") == RETRY_INFO_TYPE:
            match = _RETRY_DELAY.match(str(entry.get("retryDelay", "")).strip())
            if match:
                return int(float(match.group(1)))
    return None


def quota_cooldown_active() -> bool:
    global _cooldown_until
    if _cooldown_until is None:
        return False
    if datetime.now(timezone.utc) >= _cooldown_until:
        _cooldown_until = None
        return False
    return True


def _start_cooldown(exc: genai_errors.ClientError) -> None:
    global _cooldown_until
    retry_after = _retry_after_seconds(exc)
    seconds = retry_after if retry_after is not None else settings.gemini_quota_cooldown_seconds
    _cooldown_until = datetime.now(timezone.utc) + timedelta(seconds=seconds)
    logger.warning(f"Gemini quota exhausted, pausing explanations for {seconds}s (retryDelay={retry_after})")


def _get_client() -> genai.Client:
    if not settings.gemini_api_key:
        raise ValueError("GEMINI_API_KEY missing")
    return genai.Client(api_key=settings.gemini_api_key)


def complete(
    prompt: str,
    system_instruction: str,
    max_output_tokens: Optional[int] = None,
    temperature: Optional[float] = None,
) -> Optional[str]:
    """
    Run one explanation prompt through the configured Gemini model.

    Returns None while the quota pause is on, when this call hits the quota
    (which starts the pause), or when the model answers with no text.
    Raises ValueError when no API key is configured; other SDK errors propagate.
    """
    if quota_cooldown_active():
        logger.debug("Gemini quota pause in effect, skipping call")
        return None

    client = _get_client()
    logger.info(f"Requesting explanation from {settings.gemini_model} ({len(prompt)} prompt chars)")
    try:
        response = client.models.generate_content(
            model=settings.gemini_model,
            contents=prompt,
            config=genai.types.GenerateContentConfig(
                system_instruction=system_instruction,
                max_output_tokens=max_output_tokens,
                temperature=temperature,
            ),
        )
    except genai_errors.ClientError as e:
        if not _is_quota_error(e):
            raise
        _start_cooldown(e)
        return None

    return response.text or None
