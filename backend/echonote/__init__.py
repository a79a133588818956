"""
EchoNote Backend — Application Package
========================================

What: Personal note-taking API: accounts, bearer-token auth, notes with
      tags/search/pagination, and Gemini-backed transcription and Q&A.
Who:  Imported by uvicorn (``echonote.main:app``), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Auth, notes, AI bridge
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Collaborators are built once per application in ``create_app()`` and
    carried on ``app.state.context`` (see ``echonote.context``).
"""

__version__ = "1.0.0"
