"""
EchoNote Backend — Application Context
========================================

What:  The collaborators one application instance needs, built once at startup.
How:   ``AppContext.build(settings)`` wires the database and services together;
       ``create_app()`` stores the result on ``app.state.context`` and routes
       reach it through the ``get_context`` dependency.
Who:   main.py builds it; tests build one with a fake LLM provider.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from echonote.config import Settings
from echonote.database import Database
from echonote.services.ai_service import AIService
from echonote.services.auth_service import AuthService, PasswordHasher
from echonote.services.llm_base import LLMService
from echonote.services.media_service import MediaService
from echonote.services.note_service import NoteService
from echonote.services.token_service import TokenService
from echonote.services.user_service import UserService


@dataclass
class AppContext:
    settings: Settings
    database: Database
    tokens: TokenService
    auth: AuthService
    users: UserService
    notes: NoteService
    media: MediaService
    llm: LLMService
    ai: AIService

    @classmethod
    def build(cls, settings: Settings, llm_service: Optional[LLMService] = None) -> "AppContext":
        """
        Builds every service from ``settings``.

        ``llm_service`` replaces the Gemini provider (tests pass a fake).
        """
        if llm_service is None:
            from echonote.services.gemini_service import GeminiService

            llm_service = GeminiService(settings)

        tokens = TokenService(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expire_minutes=settings.token_expire_minutes,
        )
        return cls(
            settings=settings,
            database=Database(settings),
            tokens=tokens,
            auth=AuthService(PasswordHasher(settings.password_hash_rounds), tokens),
            users=UserService(),
            notes=NoteService(
                default_page_size=settings.notes_page_size,
                max_page_size=settings.notes_max_page_size,
            ),
            media=MediaService(max_size=settings.max_upload_size),
            llm=llm_service,
            ai=AIService(llm_service),
        )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the running application's context."""
    return request.app.state.context
