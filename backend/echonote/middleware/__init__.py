"""
EchoNote Backend — Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    The order is reversed for responses, so the request ID header is set on
    every response and the access log sees the final status and duration.
"""
