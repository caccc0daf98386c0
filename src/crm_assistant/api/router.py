"""API router configuration."""

from fastapi import APIRouter

from crm_assistant.api.endpoints import chat, health

# Chat API keeps the path the frontend already calls
api_router = APIRouter(prefix="/api/gemini")
api_router.include_router(chat.router)

# Health router at root level
health_router = health.router
