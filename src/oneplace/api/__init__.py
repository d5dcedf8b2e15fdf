"""
FastAPI REST API for the OnePlace policy assistant.

Endpoints:
    POST /api/ingest - Replace the stored policy text
    POST /api/chat - Answer a question from the stored policy
    GET /api/policy - Current policy version and size
    GET /health - Health check
"""

from oneplace.api.main import app, create_app

__all__ = ["app", "create_app"]
