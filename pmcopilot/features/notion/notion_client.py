from __future__ import annotations

from typing import Any, Optional

import httpx

from pmcopilot.platform.env import UPSTREAM_TIMEOUT_SECONDS

NOTION_PAGES_URL = "https://api.notion.com/v1/pages"
NOTION_VERSION = "2022-06-28"


class NotionExportError(RuntimeError):
    """Notion rejected the page or could not be reached."""


def build_page_body(title: str, parent_id: str, blocks: list[dict[str, Any]], *, is_database: bool) -> dict[str, Any]:
    title_prop = [{"type": "text", "text": {"content": title}}]
    if is_database:
        return {
            "parent": {"database_id": parent_id},
            "properties": {"Name": {"title": title_prop}},
            "children": blocks,
        }
    return {
        "parent": {"page_id": parent_id},
        "properties": {"title": title_prop},
        "children": blocks,
    }


async def create_page(
    api_key: str,
    body: dict[str, Any],
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> dict[str, Any]:
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
        "Notion-Version": NOTION_VERSION,
    }
    http = client if client is not None else httpx.AsyncClient(timeout=UPSTREAM_TIMEOUT_SECONDS)
    try:
        resp = await http.post(NOTION_PAGES_URL, json=body, headers=headers)
        if resp.status_code >= 400:
            raise NotionExportError(f"notion_api_error: {resp.text[:500]}")
        return resp.json()
    except (httpx.HTTPError, ValueError) as e:
        raise NotionExportError(str(e) or "notion_failed") from e
    finally:
        if client is None:
            await http.aclose()
