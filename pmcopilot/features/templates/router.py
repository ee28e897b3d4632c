"""
Export templates API (feature router)

- built-in PRD templates (default sections + checklist)
- custom Markdown export templates, unique by name per user (case-insensitive)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from starlette.requests import Request

from pmcopilot.features.templates.builtin_templates import TEMPLATES, BuiltinTemplate
from pmcopilot.features.templates.template_contracts import (
    ExportTemplate,
    ExportTemplateCreate,
    ExportTemplateUpdate,
)
from pmcopilot.features.templates.template_repository import (
    ExportTemplateRepository,
    get_template_repository,
)
from pmcopilot.platform.env import DEFAULT_USER_ID
from pmcopilot.platform.observability.request_logging import http_context
from pmcopilot.platform.observability.smart_logger import SmartLogger

router = APIRouter(prefix="/api/templates", tags=["templates"])


def _name_taken(existing: list[ExportTemplate], name: str, *, exclude_id: str | None = None) -> bool:
    lowered = name.lower()
    return any(t.id != exclude_id and t.name.lower() == lowered for t in existing)


@router.get("/builtin", response_model=list[BuiltinTemplate])
async def list_builtin_templates():
    return TEMPLATES


@router.get("", response_model=list[ExportTemplate])
async def list_templates(repo: ExportTemplateRepository = Depends(get_template_repository)):
    return repo.list_for_user(DEFAULT_USER_ID)


@router.post("", response_model=ExportTemplate, status_code=201)
async def create_template(
    body: ExportTemplateCreate,
    request: Request,
    repo: ExportTemplateRepository = Depends(get_template_repository),
):
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=422, detail="name must not be blank")
    if _name_taken(repo.list_for_user(DEFAULT_USER_ID), name):
        SmartLogger.log(
            "INFO",
            "Template create rejected: duplicate name.",
            category="api.templates.create.duplicate",
            params={**http_context(request), "name": name},
        )
        raise HTTPException(status_code=409, detail="duplicate_name")
    tmpl = repo.create(DEFAULT_USER_ID, name, body.markdown)
    SmartLogger.log(
        "INFO",
        "Template created.",
        category="api.templates.create.done",
        params={**http_context(request), "template_id": tmpl.id, "markdown_chars": len(body.markdown)},
    )
    return tmpl


@router.put("/{template_id}", response_model=ExportTemplate)
async def update_template(
    template_id: str,
    body: ExportTemplateUpdate,
    request: Request,
    repo: ExportTemplateRepository = Depends(get_template_repository),
):
    existing = repo.list_for_user(DEFAULT_USER_ID)
    if not any(t.id == template_id for t in existing):
        raise HTTPException(status_code=404, detail="not_found")

    changes: dict[str, str] = {}
    if body.name is not None:
        name = body.name.strip()
        if not name:
            raise HTTPException(status_code=422, detail="name must not be blank")
        if _name_taken(existing, name, exclude_id=template_id):
            raise HTTPException(status_code=409, detail="duplicate_name")
        changes["name"] = name
    if body.markdown is not None:
        changes["markdown"] = body.markdown

    tmpl = repo.update(DEFAULT_USER_ID, template_id, changes)
    if tmpl is None:
        raise HTTPException(status_code=404, detail="not_found")
    SmartLogger.log(
        "INFO",
        "Template updated.",
        category="api.templates.update.done",
        params={**http_context(request), "fields": sorted(changes)},
    )
    return tmpl


@router.delete("/{template_id}")
async def delete_template(
    template_id: str,
    request: Request,
    repo: ExportTemplateRepository = Depends(get_template_repository),
):
    if not repo.delete(DEFAULT_USER_ID, template_id):
        raise HTTPException(status_code=404, detail="not_found")
    SmartLogger.log(
        "INFO",
        "Template deleted.",
        category="api.templates.delete.done",
        params=http_context(request),
    )
    return {"ok": True}
