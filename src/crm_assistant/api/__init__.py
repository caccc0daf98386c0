"""API package - FastAPI routes and dependencies."""

from crm_assistant.api.router import api_router, health_router

__all__ = ["api_router", "health_router"]
