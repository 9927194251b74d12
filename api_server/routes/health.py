"""Health check endpoint"""

from datetime import datetime, timezone
from fastapi import APIRouter

import api_server.routes.debate as debate_routes

router = APIRouter()

VERSION = "1.0.0"


@router.get("/health")
async def health_check():
    """Health check endpoint

    Returns:
        Health status with timestamp, version and active debate count
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": VERSION,
        "active_debates": len(debate_routes.debate_store.list_debates("active")),
    }
