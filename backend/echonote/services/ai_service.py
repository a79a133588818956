"""
EchoNote Backend — AI Assistance Service
==========================================

What:  Builds prompts for the AI endpoints and forwards them to the LLM provider.
How:   Plain string templates filled by ``str.format``; the provider's reply
       is handed back untouched.
Who:   Called by routes/ai.py.

Modes:
    summary   summarise a note or an arbitrary text
    question  answer a question about one note
    refine    rewrite a text following an instruction
    query     answer an instruction against a text
    transcribe  turn an audio recording into text
"""

import logging
from typing import Optional

from echonote.exceptions import ValidationError
from echonote.services.llm_base import LLMService

logger = logging.getLogger(__name__)


SUMMARY_PROMPT = (
    "Summarize the following note in a few concise sentences. "
    "Keep the key points and any action items.\n\n"
    "{text}"
)

QUESTION_PROMPT = (
    "Here is a note:\n\n"
    "{text}\n\n"
    "Answer the following question using the note above: {question}"
)

REFINE_PROMPT = (
    "Refine the following text according to this instruction: {instruction}\n\n"
    "Text:\n{text}\n\n"
    "Return only the refined text."
)

QUERY_PROMPT = (
    "Using the text below, respond to this request: {instruction}\n\n"
    "Text:\n{text}"
)

TRANSCRIBE_PROMPT = (
    "Transcribe this audio recording accurately. "
    "Return only the spoken words as plain text, without commentary or timestamps."
)


def _require(value: Optional[str], field: str, message: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(message=message, field=field)
    return value


class AIService:
    """Prompt construction on top of an LLMService provider."""

    def __init__(self, llm: LLMService):
        self.llm = llm

    async def summarize(self, text: str) -> str:
        return await self.llm.generate_text(SUMMARY_PROMPT.format(text=text))

    async def assist_note(self, content: str, action: str, query: Optional[str] = None) -> str:
        """
        Runs POST /notes/{id}/ai for an already-resolved note.

        ``action == "summary"`` summarises the content; any other action is
        treated as a question and needs a non-blank ``query``.
        """
        if action == "summary":
            logger.info("AI note summary requested (%d chars)", len(content))
            return await self.summarize(content)

        question = _require(query, "query", "Query is required for questions")
        logger.info("AI note question requested (%d chars)", len(content))
        return await self.llm.generate_text(
            QUESTION_PROMPT.format(text=content, question=question.strip())
        )

    async def process(self, text: str, instruction: Optional[str], kind: str) -> str:
        """
        Runs POST /ai-process.

        Raises:
            ValidationError: blank text, or refine/query without an instruction
        """
        _require(text, "text", "Text is required")

        if kind == "summary":
            return await self.summarize(text)

        instruction = _require(instruction, "instruction", "Instruction is required")
        template = REFINE_PROMPT if kind == "refine" else QUERY_PROMPT
        return await self.llm.generate_text(
            template.format(text=text, instruction=instruction.strip())
        )

    async def transcribe(self, audio: bytes, mime_type: str) -> str:
        logger.info("Transcription requested (%d bytes, %s)", len(audio), mime_type)
        return await self.llm.transcribe_audio(audio, mime_type, TRANSCRIBE_PROMPT)
