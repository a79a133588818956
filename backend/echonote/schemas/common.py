"""
EchoNote Backend — Shared Schema Pieces
=========================================

What:  Base model with camelCase wire names, plus error and health responses.
Why:   The browser client speaks camelCase (``phoneNumber``, ``totalPages``);
       Python code keeps snake_case attribute names.
"""

from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _assume_utc(value: datetime) -> datetime:
    # SQLite drops the offset; every stored timestamp is UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


UTCDateTime = Annotated[datetime, AfterValidator(_assume_utc)]


class CamelModel(BaseModel):
    """Accepts both ``phone_number`` and ``phoneNumber``; serializes camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    message: str = Field(description="Human-readable result")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "Email already exists",
            "code": "conflict",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Human-readable error description")
    code: str = Field(description="Machine-readable error code")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    ai: str = Field(description="AI provider status: available, unavailable, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
