"""
Snapshot API (feature router)

Immutable point-in-time copies of a PRD's form data and section toggles.
"""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from starlette.requests import Request

from pmcopilot.features.snapshots.snapshot_codec import SnapshotDecodeError, encode_payload, hydrate
from pmcopilot.features.snapshots.snapshot_contracts import (
    Snapshot,
    SnapshotCreateRequest,
    SnapshotCreated,
)
from pmcopilot.features.snapshots.snapshot_repository import (
    SnapshotRepository,
    get_snapshot_repository,
)
from pmcopilot.platform.observability.request_logging import http_context
from pmcopilot.platform.observability.smart_logger import SmartLogger

router = APIRouter(prefix="/api/snapshots", tags=["snapshots"])

LIST_LIMIT = 100


@router.get("/{prd_id}", response_model=list[Snapshot])
async def list_snapshots(
    prd_id: str,
    request: Request,
    repo: SnapshotRepository = Depends(get_snapshot_repository),
):
    """GET /api/snapshots/{prdId} - newest first, payloads decompressed and migrated."""
    stored = repo.list_for_prd(prd_id, LIST_LIMIT)
    items: list[Snapshot] = []
    for raw in stored:
        try:
            items.append(Snapshot.model_validate(hydrate(raw)))
        except (SnapshotDecodeError, ValidationError) as e:
            SmartLogger.log(
                "WARNING",
                "Snapshot skipped: stored payload could not be decoded.",
                category="api.snapshots.list.corrupt",
                params={
                    **http_context(request),
                    "snapshot_id": raw.get("id"),
                    "error": {"type": type(e).__name__, "message": str(e)},
                },
            )
    SmartLogger.log(
        "INFO",
        "Snapshot list returned.",
        category="api.snapshots.list.done",
        params={**http_context(request), "count": len(items), "skipped": len(stored) - len(items)},
    )
    return items


@router.post("", response_model=SnapshotCreated, status_code=201)
async def create_snapshot(
    body: SnapshotCreateRequest,
    request: Request,
    repo: SnapshotRepository = Depends(get_snapshot_repository),
):
    t0 = time.perf_counter()
    form_blob, sections_blob = encode_payload(body.formData.model_dump(), body.sections.model_dump())
    stored = repo.create(
        body.prdId,
        form_data=form_blob,
        sections=sections_blob,
        note=body.note,
        template_id=body.templateId,
    )
    if stored is None:
        SmartLogger.log(
            "WARNING",
            "Snapshot rejected: referenced PRD does not exist.",
            category="api.snapshots.create.missing_prd",
            params={**http_context(request), "prd_id": body.prdId},
        )
        raise HTTPException(status_code=400, detail="PRD does not exist")

    SmartLogger.log(
        "INFO",
        "Snapshot stored.",
        category="api.snapshots.create.done",
        params={
            **http_context(request),
            "prd_id": body.prdId,
            "snapshot_id": stored["id"],
            "duration_ms": int((time.perf_counter() - t0) * 1000),
            "compressed": True,
            "form_bytes": len(form_blob),
            "sections_bytes": len(sections_blob),
        },
    )
    return SnapshotCreated(id=stored["id"], createdAt=stored["createdAt"])
