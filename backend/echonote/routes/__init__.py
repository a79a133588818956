"""
EchoNote Backend — API Routes Package
=======================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each module owns one resource; handlers stay thin and delegate to
       services reached through the application context.

Route Inventory:
    - auth.py:    POST /api/signup, POST /api/login, GET /api/dashboard
    - users.py:   GET/PUT /api/user, POST /api/user/avatar
    - notes.py:   /api/notes CRUD and the paginated list
    - ai.py:      POST /api/notes/{id}/ai, POST /api/upload-audio, POST /api/ai-process
    - health.py:  GET /health
"""
