"""
Issue creation in Linear (GraphQL) and Jira (REST v3).

Items are created one by one in order; the first failure aborts the batch
and earlier issues stay created upstream.
"""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx

from pmcopilot.features.sync.sync_contracts import (
    JiraItem,
    JiraSyncRequest,
    LinearItem,
    LinearSyncRequest,
    SyncResult,
)
from pmcopilot.platform.env import UPSTREAM_TIMEOUT_SECONDS, get_jira_settings, get_linear_api_key
from pmcopilot.platform.observability.smart_logger import SmartLogger

LINEAR_GRAPHQL_URL = "https://api.linear.app/graphql"
LINEAR_ISSUE_CREATE = (
    "mutation IssueCreate($input: IssueCreateInput!) "
    "{ issueCreate(input: $input) { success issue { id identifier url title } } }"
)
DEFAULT_JIRA_ISSUE_TYPE = "Task"


class IssueSyncError(RuntimeError):
    """Issue creation failed (not configured, upstream rejected, or unreachable)."""


def linear_issue_input(item: LinearItem, team_id: Optional[str]) -> dict[str, Any]:
    payload: dict[str, Any] = {"title": item.title}
    if item.description is not None:
        payload["description"] = item.description
    if team_id:
        payload["teamId"] = team_id
    return payload


def jira_issue_fields(item: JiraItem) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "project": {"key": item.projectKey},
        "summary": item.summary,
        "issuetype": {"name": item.issueType or DEFAULT_JIRA_ISSUE_TYPE},
    }
    if item.description is not None:
        fields["description"] = item.description
    return fields


def preview_linear(request: LinearSyncRequest) -> dict[str, Any]:
    items = [
        {"mutation": "issueCreate", "variables": {"input": linear_issue_input(item, request.teamId)}}
        for item in request.items
    ]
    return {"items": items, "count": len(items), "teamId": request.teamId or None}


def preview_jira(request: JiraSyncRequest) -> dict[str, Any]:
    items = [{"fields": jira_issue_fields(item)} for item in request.items]
    return {"items": items, "count": len(items)}


def _client(client: Optional[httpx.AsyncClient]) -> httpx.AsyncClient:
    return client or httpx.AsyncClient(timeout=UPSTREAM_TIMEOUT_SECONDS)


async def run_linear_sync(
    request: LinearSyncRequest,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> SyncResult:
    api_key = get_linear_api_key()
    if not api_key:
        raise IssueSyncError("Linear API not configured")

    t0 = time.perf_counter()
    created: list[dict] = []
    http = _client(client)
    try:
        for item in request.items:
            body = {
                "query": LINEAR_ISSUE_CREATE,
                "variables": {"input": linear_issue_input(item, request.teamId)},
            }
            resp = await http.post(
                LINEAR_GRAPHQL_URL,
                json=body,
                headers={"Content-Type": "application/json", "Authorization": api_key},
            )
            if resp.status_code >= 400:
                raise IssueSyncError(f"Linear API error: {resp.text[:500]}")
            data = resp.json()
            issue_create = ((data or {}).get("data") or {}).get("issueCreate") or {}
            if not issue_create.get("success"):
                raise IssueSyncError("Linear creation failed")
            created.append(issue_create.get("issue") or {})
    except (httpx.HTTPError, ValueError) as e:
        raise IssueSyncError(f"Linear request failed: {e}") from e
    finally:
        if client is None:
            await http.aclose()

    SmartLogger.log(
        "INFO",
        "Linear issues created.",
        category="sync.linear.done",
        params={"created": len(created), "duration_ms": int((time.perf_counter() - t0) * 1000)},
    )
    return SyncResult(created=created)


async def run_jira_sync(
    request: JiraSyncRequest,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> SyncResult:
    base_url, email, token = get_jira_settings()
    if not (base_url and email and token):
        raise IssueSyncError("Jira API not configured")

    t0 = time.perf_counter()
    url = f"{base_url.rstrip('/')}/rest/api/3/issue"
    created: list[dict] = []
    http = _client(client)
    try:
        for item in request.items:
            resp = await http.post(url, json={"fields": jira_issue_fields(item)}, auth=(email, token))
            if resp.status_code >= 400:
                raise IssueSyncError(f"Jira API error: {resp.text[:500]}")
            data = resp.json()
            created.append({"id": data.get("id"), "key": data.get("key"), "self": data.get("self")})
    except (httpx.HTTPError, ValueError) as e:
        raise IssueSyncError(f"Jira request failed: {e}") from e
    finally:
        if client is None:
            await http.aclose()

    SmartLogger.log(
        "INFO",
        "Jira issues created.",
        category="sync.jira.done",
        params={"created": len(created), "duration_ms": int((time.perf_counter() - t0) * 1000)},
    )
    return SyncResult(created=created)
