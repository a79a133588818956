"""
EchoNote Backend — AI Endpoint Schemas
========================================

Bodies and responses of POST /notes/{id}/ai, POST /ai-process and
POST /upload-audio.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class NoteAIRequest(BaseModel):
    """
    action: "summary" summarises the note; anything else asks ``query``
            about it (the client sends "question").
    """
    action: str = Field(default="summary", max_length=50)
    query: Optional[str] = Field(default=None, max_length=4000)


class NoteAIResponse(BaseModel):
    response: str = Field(description="Model output, returned verbatim")


class AIProcessRequest(BaseModel):
    """
    type:        summary | refine | query
    instruction: how to refine, or the question to answer (required unless summary)
    """
    text: str = Field(max_length=200_000)
    instruction: Optional[str] = Field(default=None, max_length=4000)
    type: Literal["summary", "refine", "query"] = "summary"


class AIProcessResponse(BaseModel):
    result: str = Field(description="Model output, returned verbatim")


class TranscriptionResponse(BaseModel):
    transcription: str = Field(description="Transcript text, returned verbatim")
