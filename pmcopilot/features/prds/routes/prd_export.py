from __future__ import annotations

import re
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel
from starlette.requests import Request

from pmcopilot.features.exports.csv_export import requirements_to_csv, stories_to_csv
from pmcopilot.features.exports.html_export import prd_to_html
from pmcopilot.features.exports.markdown_export import Assessment, prd_to_markdown
from pmcopilot.features.exports.share import SharedPRD, build_share_url, random_token
from pmcopilot.features.prds.prd_contracts import (
    PRD,
    PRDFormData,
    PRDSections,
    ShareLinkResponse,
)
from pmcopilot.features.prds.prd_repository import PRDRepository, get_prd_repository
from pmcopilot.platform.env import get_share_base_url
from pmcopilot.platform.observability.request_logging import http_context, text_digest
from pmcopilot.platform.observability.smart_logger import SmartLogger

router = APIRouter(prefix="/api/prds")

SHARE_TOKEN_LENGTH = 10


class MarkdownExportRequest(BaseModel):
    """Export of unsaved editor state."""

    prd: PRDFormData
    sections: PRDSections = PRDSections()
    assessment: Optional[Assessment] = None


def _load(repo: PRDRepository, prd_id: str) -> PRD:
    prd = repo.get(prd_id)
    if prd is None:
        raise HTTPException(status_code=404, detail="Not found")
    return prd


def _filename(title: str, suffix: str) -> str:
    stem = re.sub(r"[^A-Za-z0-9._-]+", "_", title or "").strip("_") or "prd"
    return f"{stem}{suffix}"


def _attachment(body: str, media_type: str, filename: str) -> Response:
    return Response(
        content=body,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _log_export(request: Request, kind: str, body: str, t0: float) -> None:
    SmartLogger.log(
        "INFO",
        "PRD export rendered.",
        category=f"api.prds.export.{kind}",
        params={
            **http_context(request),
            "duration_ms": int((time.perf_counter() - t0) * 1000),
            "summary": text_digest(body),
        },
    )


@router.post("/export/markdown")
async def export_unsaved_markdown(body: MarkdownExportRequest, request: Request):
    t0 = time.perf_counter()
    md = prd_to_markdown(body.prd, body.sections, body.assessment)
    _log_export(request, "markdown_unsaved", md, t0)
    return _attachment(md, "text/markdown; charset=utf-8", _filename(body.prd.title, ".md"))


@router.get("/{prd_id}/export/markdown")
async def export_markdown(
    prd_id: str,
    request: Request,
    score: Optional[float] = Query(default=None, ge=0, le=100),
    gaps: list[str] = Query(default=[]),
    repo: PRDRepository = Depends(get_prd_repository),
):
    """Findings are appended only when a score or gaps are passed."""
    t0 = time.perf_counter()
    prd = _load(repo, prd_id)
    assessment = Assessment(score=score, gaps=gaps) if score is not None or gaps else None
    md = prd_to_markdown(prd.form_data(), prd.sections, assessment)
    _log_export(request, "markdown", md, t0)
    return _attachment(md, "text/markdown; charset=utf-8", _filename(prd.title, ".md"))


@router.get("/{prd_id}/export/html", response_class=HTMLResponse)
async def export_html(prd_id: str, request: Request, repo: PRDRepository = Depends(get_prd_repository)):
    t0 = time.perf_counter()
    prd = _load(repo, prd_id)
    html = prd_to_html(prd.form_data(), prd.sections)
    _log_export(request, "html", html, t0)
    return HTMLResponse(content=html)


@router.get("/{prd_id}/export/csv/stories")
async def export_stories_csv(prd_id: str, request: Request, repo: PRDRepository = Depends(get_prd_repository)):
    t0 = time.perf_counter()
    prd = _load(repo, prd_id)
    csv_text = stories_to_csv(prd.userStories)
    _log_export(request, "csv_stories", csv_text, t0)
    return _attachment(csv_text, "text/csv; charset=utf-8", "user_stories.csv")


@router.get("/{prd_id}/export/csv/requirements")
async def export_requirements_csv(prd_id: str, request: Request, repo: PRDRepository = Depends(get_prd_repository)):
    t0 = time.perf_counter()
    prd = _load(repo, prd_id)
    csv_text = requirements_to_csv(prd.requirements)
    _log_export(request, "csv_requirements", csv_text, t0)
    return _attachment(csv_text, "text/csv; charset=utf-8", "requirements.csv")


@router.post("/{prd_id}/share", response_model=ShareLinkResponse)
async def create_share_link(prd_id: str, request: Request, repo: PRDRepository = Depends(get_prd_repository)):
    prd = _load(repo, prd_id)
    token = random_token(SHARE_TOKEN_LENGTH)
    payload = SharedPRD(
        prd=prd.form_data(),
        sections=prd.sections,
        templateId=prd.templateId,
        ts=int(time.time() * 1000),
        token=token,
    )
    url = build_share_url(get_share_base_url(), payload)
    SmartLogger.log(
        "INFO",
        "PRD share link created.",
        category="api.prds.share.done",
        params={**http_context(request), "url_chars": len(url)},
    )
    return ShareLinkResponse(token=token, url=url)
