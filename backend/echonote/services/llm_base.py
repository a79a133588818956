"""
EchoNote Backend — Abstract LLM Service Interface
===================================================

What:  Abstract base class for the generative-model provider behind the AI endpoints.
How:   Concrete implementations inherit from LLMService and implement
       generate_text() and transcribe_audio().
Who:   Called by AIService; GeminiService is the production implementation,
       tests plug in a canned fake.
"""

from abc import ABC, abstractmethod


class LLMService(ABC):
    """
    Contract:
        - Outputs are returned verbatim; callers never post-process them
        - Provider-specific errors are translated to AIGenerationError
        - A provider without credentials raises AIServiceUnavailableError
    """

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when the provider has a credential and can be called at all."""
        ...

    @abstractmethod
    async def generate_text(self, prompt: str) -> str:
        """
        Send a text prompt and return the model's text response.

        Raises:
            AIServiceUnavailableError: no credential configured
            AIGenerationError:         the upstream call failed
        """
        ...

    @abstractmethod
    async def transcribe_audio(self, audio: bytes, mime_type: str, prompt: str) -> str:
        """
        Send an audio buffer inline together with an instruction.

        Args:
            audio:     raw bytes of the recording (already size-checked)
            mime_type: declared content type, e.g. ``audio/webm``
            prompt:    transcription instruction

        Returns:
            The model's text response, treated as the transcript.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Lightweight connectivity test (does NOT consume generation quota).

        Returns True if the provider is reachable and authenticated.
        """
        ...
