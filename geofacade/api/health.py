"""
Health check endpoint - no authentication required
"""

from fastapi import APIRouter

from ..config import API_VERSION
from ..providers import get_provider

router = APIRouter()


@router.get("/health", include_in_schema=False)
async def health():
    provider = get_provider()
    return {
        "status": "ok" if provider.loaded else "degraded",
        "version": API_VERSION,
        "provider": provider.get_status(),
    }
