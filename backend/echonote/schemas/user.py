"""
EchoNote Backend — Account & Profile Schemas
==============================================

Request bodies are validated here before they reach the services; response
models never carry the password hash.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from echonote.schemas.common import CamelModel, UTCDateTime


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════


class SignupRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=72)


class UserUpdateRequest(CamelModel):
    """Partial profile update; fields left out of the body are not touched."""
    name: Optional[str] = Field(default=None, max_length=255)
    phone_number: Optional[str] = Field(default=None, max_length=50)


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════


class UserSummary(BaseModel):
    id: uuid.UUID
    name: str
    email: str


class SignupResponse(BaseModel):
    message: str = "User created"
    user: UserSummary


class TokenResponse(BaseModel):
    token: str = Field(description="Bearer token, valid for one hour")


class UserResponse(CamelModel):
    """The stored user minus the password hash."""
    id: uuid.UUID
    name: str
    email: str
    phone_number: Optional[str] = None
    profile_picture: Optional[str] = None
    created_at: UTCDateTime


class AvatarResponse(CamelModel):
    profile_picture: str = Field(description="data:<mime>;base64,<payload>")
