"""Tests for Gemini client: 429 handling and cooldown."""

from datetime import datetime, timezone, timedelta
from unittest.mock import MagicMock, patch

from google.genai import errors as genai_errors

from moodplaces.services import gemini_client


class _MockResponse429:
    """Minimal mock response that produces 429 RESOURCE_EXHAUSTED in ClientError."""
    body_segments = [{"error": {"code": 429, "status": "RESOURCE_EXHAUSTED", "message": "quota exceeded"}}]


def test_429_sets_cooldown_and_returns_none():
    """A 429 RESOURCE_EXHAUSTED from the SDK starts the quota pause and yields None."""
    gemini_client._cooldown_until = None

    def raise_429(*args, **kwargs):
        raise genai_errors.ClientError(429, _MockResponse429())

    try:
        with patch.object(gemini_client, "_get_client") as mock_get_client:
            mock_client = MagicMock()
            mock_client.models.generate_content = raise_429
            mock_get_client.return_value = mock_client

            result = gemini_client.complete("test prompt", "system")

        assert result is None
        assert gemini_client._cooldown_until is not None
        assert gemini_client._cooldown_until > datetime.now(timezone.utc)
        assert gemini_client.quota_cooldown_active() is True
    finally:
        gemini_client._cooldown_until = None


def test_cooldown_skips_call_and_returns_none():
    """During the quota pause the SDK is never reached."""
    gemini_client._cooldown_until = datetime.now(timezone.utc) + timedelta(seconds=60)

    try:
        with patch.object(gemini_client, "_get_client") as mock_get_client:
            result = gemini_client.complete("test prompt", "system")

        assert result is None
        mock_get_client.assert_not_called()
    finally:
        gemini_client._cooldown_until = None


def test_expired_cooldown_is_cleared():
    gemini_client._cooldown_until = datetime.now(timezone.utc) - timedelta(seconds=1)

    assert gemini_client.quota_cooldown_active() is False
    assert gemini_client._cooldown_until is None


def test_success_passes_generation_config():
    gemini_client._cooldown_until = None

    mock_response = MagicMock()
    mock_response.text = "Hello from Gemini"

    with patch.object(gemini_client, "_get_client") as mock_get_client:
        mock_client = MagicMock()
        mock_client.models.generate_content = MagicMock(return_value=mock_response)
        mock_get_client.return_value = mock_client

        result = gemini_client.complete(
            "test prompt", "system", max_output_tokens=100, temperature=0.7
        )

    assert result == "Hello from Gemini"
    config = mock_client.models.generate_content.call_args.kwargs["config"]
    assert config.max_output_tokens == 100
    assert config.temperature == 0.7
    assert config.system_instruction == "system"


def test_retry_delay_is_read_from_retry_info():
    exc = MagicMock()
    exc.details = {"error": {"details": [
        {"@type": "type.googleapis.com/google.rpc.RetryInfo", "retryDelay": "34.5s"},
    ]}}

    assert gemini_client._retry_after_seconds(exc) == 34


def test_empty_model_text_is_none():
    gemini_client._cooldown_until = None

    with patch.object(gemini_client, "_get_client") as mock_get_client:
        mock_get_client.return_value.models.generate_content.return_value = MagicMock(text="")

        assert gemini_client.complete("test prompt", "system") is None
