"""
EchoNote Backend — Google Gemini Service Implementation
=========================================================

What:  Concrete LLM service using Google Gemini for text generation and
       audio transcription.
How:   Sends a prompt (plus inline audio for transcriptions) to Gemini and
       returns ``response.text`` unmodified. Calls run inside a tenacity
       ``AsyncRetrying`` loop bounded by AI_MAX_ATTEMPTS.
Who:   Built once per application by AppContext; called by AIService.

Retry Policy:
    AI_MAX_ATTEMPTS defaults to 1: a failed call is reported straight back
    to the client, which decides whether to try again. Raising the setting
    enables exponential backoff with jitter between attempts.

Error Translation:
    no API key                → AIServiceUnavailableError (503)
    any SDK / network failure → AIGenerationError (500)
"""

import logging
import time
import uuid
from typing import Any, List

import google.generativeai as genai
from starlette.concurrency import run_in_threadpool
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from echonote.config import Settings
from echonote.exceptions import AIGenerationError, AIServiceUnavailableError
from echonote.services.llm_base import LLMService

logger = logging.getLogger(__name__)


class GeminiService(LLMService):
    """
    Google Gemini implementation of LLMService.

    The SDK keeps its credential in module-level state, so ``genai.configure``
    runs once here rather than per request.
    """

    def __init__(self, settings: Settings):
        self.model_name = settings.gemini_model
        self.max_attempts = settings.ai_max_attempts
        self.retry_min_wait = settings.ai_retry_min_wait
        self.retry_max_wait = settings.ai_retry_max_wait
        self._configured = settings.ai_configured

        if self._configured:
            genai.configure(api_key=settings.gemini_api_key)

        self.model = genai.GenerativeModel(self.model_name)

        logger.info(
            "GeminiService initialized with model=%s, configured=%s, max_attempts=%d",
            self.model_name,
            self._configured,
            self.max_attempts,
        )

    @property
    def is_configured(self) -> bool:
        return self._configured

    async def generate_text(self, prompt: str) -> str:
        return await self._generate([prompt], operation="generate")

    async def transcribe_audio(self, audio: bytes, mime_type: str, prompt: str) -> str:
        # Inline blob part; the SDK base64-encodes it on the wire
        audio_part = {"mime_type": mime_type, "data": audio}
        return await self._generate([audio_part, prompt], operation="transcribe")

    async def _generate(self, contents: List[Any], operation: str) -> str:
        """
        Runs one generate_content call under the retry policy.

        Returns ``response.text`` verbatim, or "" when the model sent no text.
        """
        if not self._configured:
            raise AIServiceUnavailableError()

        # Per-call ID for correlating the log lines of a single generation
        call_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        logger.info("[%s] Starting Gemini %s request", call_id, operation)

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                # exponential backoff between min and max wait, plus up to 1s of jitter
                wait=wait_exponential(
                    multiplier=self.retry_min_wait,
                    min=self.retry_min_wait,
                    max=self.retry_max_wait,
                )
                + wait_random(0, 1),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    response = await self.model.generate_content_async(contents)
                    text = response.text or ""
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "[%s] Gemini %s failed after %.0fms: %s",
                call_id,
                operation,
                duration_ms,
                str(e),
            )
            raise AIGenerationError(
                context={"call_id": call_id, "operation": operation, "error_type": type(e).__name__},
            )

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "[%s] Gemini %s completed in %.0fms, %d chars",
            call_id,
            operation,
            duration_ms,
            len(text),
        )
        return text

    async def health_check(self) -> bool:
        """
        Lists models to verify the key and connectivity (no token cost).

        The SDK call is blocking, so it runs in the threadpool.
        """
        if not self._configured:
            return False
        try:
            models = await run_in_threadpool(lambda: list(genai.list_models()))
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False

        target = f"models/{self.model_name}"
        if target not in [m.name for m in models]:
            logger.warning("Configured model %s not found in available models", target)
        return True
