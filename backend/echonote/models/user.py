"""
EchoNote Backend — User SQLAlchemy Model
==========================================

What:  ORM model for the ``users`` table (credential store + profile).
Who:   Used by AuthService (signup/login) and UserService (profile, avatar).

Table Design:
    - UUID primary key, assigned in Python at insert
    - email: unique + indexed, looked up on every login
    - password_hash: bcrypt hash only; the plaintext never reaches the database
    - profile_picture: self-describing ``data:<mime>;base64,...`` string
    - created_at: UTC, defaulted at insert
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from echonote.database import Base


class User(Base):
    """
    Registered account.

    Lifecycle:
        1. Created on signup
        2. Mutated by profile update and avatar upload
        3. Never deleted
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, default=None)

    # Inline data URI; a 10MB upload grows to ~13.4MB once base64-encoded
    profile_picture: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    notes: Mapped[List["Note"]] = relationship(  # noqa: F821
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
