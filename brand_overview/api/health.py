"""
Health check endpoints for monitoring application status.
"""

import time
from datetime import datetime

from fastapi import APIRouter, Request

from ..config import settings

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Basic health check endpoint"""
    started_at = getattr(request.app.state, "started_at", None)
    return {
        "status": "OK",
        "timestamp": datetime.now().isoformat(),
        "uptime": round(time.time() - started_at, 3) if started_at else 0.0,
        "service": settings.APP_NAME,
        "version": settings.VERSION,
    }


@router.get("/health/detailed")
async def detailed_health_check(request: Request):
    """Health check including configuration and model usage"""
    state = request.app.state
    llm_service = getattr(state, "llm_service", None)
    return {
        "status": "OK",
        "timestamp": datetime.now().isoformat(),
        "service": settings.APP_NAME,
        "version": settings.VERSION,
        "checks": {
            "configuration": {
                "gemini_models": settings.gemini_models,
                "has_gemini_key": bool(settings.GEMINI_API_KEY),
                "has_zoho_credentials": bool(settings.ZOHO_CLIENT_ID and settings.ZOHO_REFRESH_TOKEN),
                "slack_notifications": bool(settings.SLACK_WEBHOOK_URL),
            },
            "llm_metrics": llm_service.metrics_dict() if llm_service else None,
        },
    }
