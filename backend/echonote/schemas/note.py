"""
EchoNote Backend — Note Schemas
=================================

What:  Request bodies, query parameters and responses of the /notes endpoints.
How:   FastAPI validates bodies against these models and serializes responses
       with camelCase aliases (``userId``, ``currentPage``, ``totalNotes``).
"""

import uuid
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from echonote.schemas.common import CamelModel, UTCDateTime

TagList = List[str]


def _clean_tags(tags: Optional[TagList]) -> Optional[TagList]:
    """Strips tags, drops blanks and collapses duplicates keeping first occurrence."""
    if tags is None:
        return None
    seen = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════


class NoteCreateRequest(CamelModel):
    """
    Body of POST /notes.

    The owner is never part of the body: it comes from the bearer token.
    Omitted tags default to ["Live Recording"] in the service.
    """
    title: str = Field(min_length=1, max_length=500)
    content: str = Field(default="")
    summary: Optional[str] = None
    tags: Optional[List[str]] = Field(default=None, max_length=50)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title is required")
        return v

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: Optional[TagList]) -> Optional[TagList]:
        for tag in v or []:
            if len(tag) > 100:
                raise ValueError("Tags must be at most 100 characters")
        return _clean_tags(v)


class NoteUpdateRequest(CamelModel):
    """Body of PUT /notes/{id}; only the fields present are applied."""
    title: Optional[str] = Field(default=None, max_length=500)
    content: Optional[str] = None
    summary: Optional[str] = None
    tags: Optional[List[str]] = Field(default=None, max_length=50)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Title must not be blank")
        return v

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: Optional[TagList]) -> Optional[TagList]:
        for tag in v or []:
            if len(tag) > 100:
                raise ValueError("Tags must be at most 100 characters")
        return _clean_tags(v)


class NoteQuery(CamelModel):
    """
    Validated query parameters of GET /notes.

    filter: tag to match exactly; None / "" / "all" mean no tag filter
    search: case-insensitive substring of the title
    sort:   "latest" (newest first, default) or "oldest"
    page:   1-based page number
    limit:  page size; None means NOTES_PAGE_SIZE, capped by NOTES_MAX_PAGE_SIZE
    """
    filter: Optional[str] = None
    search: Optional[str] = None
    sort: Literal["latest", "oldest"] = "latest"
    page: int = Field(default=1, ge=1)
    limit: Optional[int] = Field(default=None, ge=1)

    @property
    def tag(self) -> Optional[str]:
        if self.filter is None:
            return None
        tag = self.filter.strip()
        if not tag or tag.lower() == "all":
            return None
        return tag

    @property
    def title_search(self) -> Optional[str]:
        if self.search is None or not self.search.strip():
            return None
        return self.search.strip()


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(CamelModel):
    """Full representation of a note."""
    id: uuid.UUID = Field(description="Unique note identifier")
    user_id: uuid.UUID = Field(description="Owner of the note")
    title: str
    content: str
    summary: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    date: UTCDateTime = Field(description="Creation timestamp (UTC)")


class NoteListResponse(CamelModel):
    """One page of the filtered, searched, sorted note list."""
    notes: List[NoteResponse]
    current_page: int
    total_pages: int
    total_notes: int
