"""
Health check endpoints for system status and LLM connectivity.
"""
from fastapi import APIRouter

from sitesmith.core.config import settings
from sitesmith.services.llm_client import get_llm_client

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    """
    Basic health check endpoint.

    Returns:
        Simple status message indicating the API is running
    """
    return {
        "status": "ok",
        "service": settings.PROJECT_NAME,
    }


@router.get("/llm")
async def llm_health_check():
    """
    Check LLM server connectivity.

    Returns:
        LLM connection status including provider, model, and any errors
    """
    client = get_llm_client()
    result = await client.health_check()
    return result
