"""
Request correlation and log-payload helpers for the routers.

The HTTP middleware in pmcopilot.main stores a request id per request; every
SmartLogger call made while serving it picks the id up through
http_context(). Exported documents and PRD text can be large, so routers log
digests (length + sha256) instead of bodies.
"""

from __future__ import annotations

import contextvars
import hashlib
import time
import uuid
from typing import Any

from starlette.requests import Request

_request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


def set_request_id(request_id: str | None) -> None:
    _request_id_var.set(request_id)


def get_request_id() -> str | None:
    return _request_id_var.get()


def sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8", errors="replace")).hexdigest()


def text_digest(text: str, *, preview_chars: int = 0) -> dict[str, Any]:
    """{"chars", "sha256"} of a document, plus its head when preview_chars > 0."""
    digest: dict[str, Any] = {"chars": len(text), "sha256": sha256_text(text)}
    if preview_chars > 0:
        digest["preview"] = text[:preview_chars]
    return digest


def summarize_for_log(value: Any, *, max_str: int = 400, max_items: int = 50) -> Any:
    """
    Shrink a JSON-like value for a log line.

    Strings over max_str become a digest with a short preview; lists keep
    their first max_items entries plus a count of the dropped ones; dicts are
    summarized value by value.
    """
    if isinstance(value, str):
        return value if len(value) <= max_str else text_digest(value, preview_chars=max_str // 4)
    if isinstance(value, dict):
        return {str(k): summarize_for_log(v, max_str=max_str, max_items=max_items) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        head = [summarize_for_log(v, max_str=max_str, max_items=max_items) for v in value[:max_items]]
        if len(value) > max_items:
            head.append({"dropped": len(value) - max_items})
        return head
    return value


def http_context(request: Request) -> dict[str, Any]:
    """Request id, method, path and params; headers stay out of the logs (they carry API keys)."""
    return {
        "request_id": get_request_id(),
        "http": {
            "method": request.method,
            "path": request.url.path,
            "query": dict(request.query_params),
            "path_params": dict(request.path_params),
            "client_host": getattr(request.client, "host", None),
        },
    }


class RequestTimer:
    def __init__(self) -> None:
        self._t0 = time.perf_counter()

    def ms(self) -> int:
        return int((time.perf_counter() - self._t0) * 1000)
