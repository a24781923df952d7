from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Request

from signal_relay.api import get_registry
from signal_relay.websockets.registry import ConnectionRegistry

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(request: Request, registry: ConnectionRegistry = Depends(get_registry)):
    """Application health check endpoint"""
    stats = await registry.stats()

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc),
        "channels": stats.channel_count,
        "participants": stats.participant_count,
        "service": request.app.title
    }


@router.get("/health/ready")
async def readiness_check():
    """Kubernetes readiness probe endpoint"""
    return {"status": "ready"}


@router.get("/health/live")
async def liveness_check():
    """Kubernetes liveness probe endpoint"""
    return {"status": "alive", "timestamp": datetime.now(timezone.utc)}
