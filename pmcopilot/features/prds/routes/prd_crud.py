from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from starlette.requests import Request

from pmcopilot.features.prds.prd_contracts import (
    PRD,
    PRDCreateRequest,
    PRDUpdateRequest,
    RiceUpdateRequest,
)
from pmcopilot.features.prds.prd_repository import PRDRepository, get_prd_repository
from pmcopilot.platform.observability.request_logging import http_context, summarize_for_log
from pmcopilot.platform.observability.smart_logger import SmartLogger

router = APIRouter(prefix="/api/prds")

LIST_LIMIT = 50


@router.get("", response_model=list[PRD])
async def list_prds(request: Request, repo: PRDRepository = Depends(get_prd_repository)):
    """GET /api/prds - most recently updated PRDs first."""
    items = repo.list_recent(LIST_LIMIT)
    SmartLogger.log(
        "INFO",
        "PRD list returned.",
        category="api.prds.list.done",
        params={**http_context(request), "count": len(items)},
    )
    return items


@router.post("", response_model=PRD, status_code=201)
async def create_prd(
    body: PRDCreateRequest,
    request: Request,
    repo: PRDRepository = Depends(get_prd_repository),
):
    prd = repo.create(body)
    SmartLogger.log(
        "INFO",
        "PRD created.",
        category="api.prds.create.done",
        params={
            **http_context(request),
            "prd_id": prd.id,
            "template_id": prd.templateId,
            "sections": prd.sections.model_dump(),
        },
    )
    return prd


@router.get("/{prd_id}", response_model=PRD)
async def get_prd(prd_id: str, repo: PRDRepository = Depends(get_prd_repository)):
    prd = repo.get(prd_id)
    if prd is None:
        raise HTTPException(status_code=404, detail="Not found")
    return prd


@router.put("/{prd_id}", response_model=PRD)
async def update_prd(
    prd_id: str,
    body: PRDUpdateRequest,
    request: Request,
    repo: PRDRepository = Depends(get_prd_repository),
):
    changes = body.model_dump(exclude_unset=True)
    prd = repo.update(prd_id, changes)
    if prd is None:
        SmartLogger.log(
            "WARNING",
            "PRD update rejected: not found.",
            category="api.prds.update.not_found",
            params=http_context(request),
        )
        raise HTTPException(status_code=404, detail="Not found")
    SmartLogger.log(
        "INFO",
        "PRD updated.",
        category="api.prds.update.done",
        params={**http_context(request), "changes": summarize_for_log(changes)},
    )
    return prd


@router.patch("/{prd_id}/rice", response_model=PRD)
async def update_prd_rice(
    prd_id: str,
    body: RiceUpdateRequest,
    request: Request,
    repo: PRDRepository = Depends(get_prd_repository),
):
    """Replace the prioritization matrix rows of a PRD."""
    prd = repo.update_rice(prd_id, body.riceScores)
    if prd is None:
        raise HTTPException(status_code=404, detail="Not found")
    SmartLogger.log(
        "INFO",
        "PRD RICE scores replaced.",
        category="api.prds.rice.done",
        params={**http_context(request), "rows": len(body.riceScores)},
    )
    return prd


@router.delete("/{prd_id}")
async def delete_prd(
    prd_id: str,
    request: Request,
    repo: PRDRepository = Depends(get_prd_repository),
):
    if not repo.delete(prd_id):
        raise HTTPException(status_code=404, detail="Not found")
    SmartLogger.log(
        "INFO",
        "PRD deleted.",
        category="api.prds.delete.done",
        params=http_context(request),
    )
    return {"ok": True}
