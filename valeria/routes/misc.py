"""
Miscellaneous routes: health check.
"""

from fastapi import APIRouter

from ..models import now_ms

router = APIRouter(tags=["misc"])


@router.get("/health")
async def health_check() -> dict:
    """Liveness probe."""
    return {"status": "ok", "timestamp": now_ms()}
