from __future__ import annotations

import time

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Liveness only; the database is checked once at startup."""
    return {"ok": True, "ts": int(time.time() * 1000)}
