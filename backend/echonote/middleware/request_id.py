"""
EchoNote Backend — Request ID Middleware
==========================================

What:  Assigns an ID to each incoming request and echoes it in ``X-Request-ID``.
How:   Reuses a client-provided ID when present, otherwise generates a short
       UUID. The ID lives in a ContextVar so loggers and error handlers can
       read it without access to the request object.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one thread each see their own value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_REQUEST_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 8 chars of a UUID is enough for correlation and reads well in logs
        rid = request.headers.get("X-Request-ID", "")[:MAX_REQUEST_ID_LENGTH] or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
