"""
Notion export API (feature router)

Creates a Notion page (or database row) from exported PRD Markdown.
"""

from __future__ import annotations

from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.requests import Request

from pmcopilot.features.notion.notion_blocks import markdown_to_notion_blocks
from pmcopilot.features.notion.notion_client import NotionExportError, build_page_body, create_page
from pmcopilot.platform.env import get_notion_settings
from pmcopilot.platform.observability.request_logging import http_context, text_digest
from pmcopilot.platform.observability.smart_logger import SmartLogger

router = APIRouter(prefix="/api/notion", tags=["notion"])

PREVIEW_BLOCKS = 10


class NotionPageRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    markdown: str = Field(..., min_length=1, max_length=50000)
    parentId: Optional[str] = None
    preview: bool = False


def get_notion_http_client() -> Optional[httpx.AsyncClient]:
    """None lets the client module open (and close) its own connection."""
    return None


@router.post("/page")
async def create_notion_page(
    body: NotionPageRequest,
    request: Request,
    client: Optional[httpx.AsyncClient] = Depends(get_notion_http_client),
):
    api_key, parent_page, parent_db = get_notion_settings()
    if not api_key:
        raise HTTPException(status_code=500, detail="notion_not_configured")
    parent_id = body.parentId or parent_db or parent_page
    if not parent_id:
        raise HTTPException(status_code=400, detail="missing_parent")

    blocks = markdown_to_notion_blocks(body.markdown)
    if body.preview:
        return {
            "preview": True,
            "parentId": parent_id,
            "title": body.title,
            "blocks": blocks[:PREVIEW_BLOCKS],
            "totalBlocks": len(blocks),
        }

    is_database = bool(parent_db) and parent_id == parent_db
    page_body = build_page_body(body.title, parent_id, blocks, is_database=is_database)
    try:
        page = await create_page(api_key, page_body, client=client)
    except NotionExportError as e:
        SmartLogger.log(
            "ERROR",
            "Notion page creation failed.",
            category="api.notion.page.error",
            params={**http_context(request), "error": {"type": type(e).__name__, "message": str(e)}},
        )
        raise HTTPException(status_code=502, detail=str(e)) from e

    SmartLogger.log(
        "INFO",
        "Notion page created.",
        category="api.notion.page.done",
        params={
            **http_context(request),
            "blocks": len(blocks),
            "database_parent": is_database,
            "markdown": text_digest(body.markdown),
        },
    )
    return {"id": page.get("id"), "url": page.get("url"), "created": True, "blocks": len(blocks)}
