"""
EchoNote Backend — Gemini Service Unit Tests (Mocked)
=======================================================

What:  GeminiService with the Google Generative AI SDK patched out.
How:   Patches ``echonote.services.gemini_service.genai`` so no network call
       or API key is involved.

What we test:
    ✅ Text is returned verbatim
    ✅ Audio is sent inline with its MIME type
    ✅ Default policy is a single attempt; failures become AIGenerationError
    ✅ Raising AI_MAX_ATTEMPTS retries transient failures
    ✅ Missing key → AIServiceUnavailableError without touching the SDK
    ❌ Real API calls (use integration tests for that)
"""

import warnings
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from echonote.config import Settings
from echonote.exceptions import AIGenerationError, AIServiceUnavailableError
from echonote.services.gemini_service import GeminiService


def make_settings(**overrides) -> Settings:
    values = {"gemini_api_key": "test-key-not-real", "jwt_secret": "x"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_response(text: str) -> MagicMock:
    response = MagicMock()
    response.text = text
    return response


class BlockedResponse:
    @property
    def text(self):
        raise ValueError("blocked")


class TestGeminiServiceMocked:

    @pytest.mark.asyncio
    async def test_generate_text_returns_verbatim(self):
        with patch("echonote.services.gemini_service.genai") as mock_genai:
            mock_model = MagicMock()
            mock_model.generate_content_async = AsyncMock(return_value=make_response("  **Summary**\n"))
            mock_genai.GenerativeModel.return_value = mock_model

            service = GeminiService(make_settings())
            result = await service.generate_text("Summarize: hello")

            assert result == "  **Summary**\n"
            mock_genai.configure.assert_called_once_with(api_key="test-key-not-real")
            mock_model.generate_content_async.assert_awaited_once_with(["Summarize: hello"])

    @pytest.mark.asyncio
    async def test_transcribe_sends_inline_audio(self):
        with patch("echonote.services.gemini_service.genai") as mock_genai:
            mock_model = MagicMock()
            mock_model.generate_content_async = AsyncMock(return_value=make_response("hello world"))
            mock_genai.GenerativeModel.return_value = mock_model

            service = GeminiService(make_settings())
            result = await service.transcribe_audio(b"\x1aE\xdf\xa3", "audio/webm", "Transcribe this")

            assert result == "hello world"
            contents = mock_model.generate_content_async.await_args.args[0]
            assert contents[0] == {"mime_type": "audio/webm", "data": b"\x1aE\xdf\xa3"}
            assert contents[1] == "Transcribe this"

    @pytest.mark.asyncio
    async def test_single_attempt_by_default(self):
        with patch("echonote.services.gemini_service.genai") as mock_genai:
            mock_model = MagicMock()
            mock_model.generate_content_async = AsyncMock(side_effect=RuntimeError("quota exceeded"))
            mock_genai.GenerativeModel.return_value = mock_model

            service = GeminiService(make_settings())

            with pytest.raises(AIGenerationError) as exc_info:
                await service.generate_text("prompt")

            assert mock_model.generate_content_async.await_count == 1
            assert exc_info.value.message == "AI generation failed"
            assert exc_info.value.context["error_type"] == "RuntimeError"

    @pytest.mark.asyncio
    async def test_retries_when_configured(self):
        with patch("echonote.services.gemini_service.genai") as mock_genai:
            mock_model = MagicMock()
            mock_model.generate_content_async = AsyncMock(
                side_effect=[ConnectionError("reset"), make_response("second time lucky")]
            )
            mock_genai.GenerativeModel.return_value = mock_model

            service = GeminiService(make_settings(ai_max_attempts=2, ai_retry_min_wait=1, ai_retry_max_wait=1))
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always")
                result = await service.generate_text("prompt")

            assert result == "second time lucky"
            assert mock_model.generate_content_async.await_count == 2
            deprecations = [
                w for w in caught
                if issubclass(w.category, DeprecationWarning)
                and ("tenacity" in w.filename or w.filename.endswith("gemini_service.py"))
            ]
            assert deprecations == []

    @pytest.mark.asyncio
    async def test_blocked_response_is_generation_error(self):
        """``response.text`` raises ValueError when the candidate was blocked."""
        with patch("echonote.services.gemini_service.genai") as mock_genai:
            blocked = BlockedResponse()
            mock_model = MagicMock()
            mock_model.generate_content_async = AsyncMock(return_value=blocked)
            mock_genai.GenerativeModel.return_value = mock_model

            service = GeminiService(make_settings())

            with pytest.raises(AIGenerationError):
                await service.generate_text("prompt")

    @pytest.mark.asyncio
    async def test_missing_key_is_unavailable(self):
        with patch("echonote.services.gemini_service.genai") as mock_genai:
            service = GeminiService(make_settings(gemini_api_key=""))

            assert service.is_configured is False
            with pytest.raises(AIServiceUnavailableError):
                await service.generate_text("prompt")
            mock_genai.configure.assert_not_called()
            assert await service.health_check() is False

    @pytest.mark.asyncio
    async def test_health_check(self):
        with patch("echonote.services.gemini_service.genai") as mock_genai:
            model = MagicMock()
            model.name = "models/gemini-1.5-flash"
            mock_genai.list_models.return_value = [model]

            service = GeminiService(make_settings())
            assert await service.health_check() is True

            mock_genai.list_models.side_effect = RuntimeError("network down")
            assert await service.health_check() is False
