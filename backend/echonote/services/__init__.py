# Services package init
"""
EchoNote Backend — Services Layer
===================================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Services take an ``AsyncSession`` per call plus validated schema
       objects, apply the rules, and return response schemas. They raise
       ``EchoNoteError`` subclasses; routes never build error responses.

Service Inventory:
    - TokenService:   issue/verify signed, one-hour bearer tokens
    - PasswordHasher: bcrypt hashing off the event loop
    - AuthService:    signup and login
    - UserService:    profile read/update and avatar storage
    - MediaService:   bounded in-memory upload reading, data URI encoding
    - NoteService:    note CRUD and the filter/search/sort/page pipeline
    - LLMService:     abstract generative-model provider
    - GeminiService:  Google Gemini implementation of LLMService
    - AIService:      prompt templates for summary, Q&A, refine, transcription
"""
