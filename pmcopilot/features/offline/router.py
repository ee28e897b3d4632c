from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response

from pmcopilot.features.offline.service_worker import render_service_worker

router = APIRouter(tags=["offline"])

_SCRIPT = render_service_worker()


@router.get("/sw.js")
async def service_worker_script():
    # Browsers re-check the worker on navigation; keep it uncached so a new CACHE_VERSION lands quickly.
    return Response(
        content=_SCRIPT,
        media_type="application/javascript",
        headers={"Cache-Control": "no-cache", "Service-Worker-Allowed": "/"},
    )
