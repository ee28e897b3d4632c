from __future__ import annotations

import math
import time
from dataclasses import dataclass

from fastapi import HTTPException
from starlette.requests import Request
from starlette.responses import Response


@dataclass
class _Window:
    count: int
    reset_ms: int


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return getattr(request.client, "host", None) or "unknown"


class RateLimiter:
    """
    Fixed-window counter per (client ip, path), kept in process memory.

    Used as a FastAPI dependency: sets X-RateLimit-* headers on every
    response and raises 429 once the window's budget is spent.
    """

    def __init__(self, max_requests: int, window_ms: int):
        self.max_requests = max_requests
        self.window_ms = window_ms
        self._windows: dict[str, _Window] = {}
        self._next_sweep_ms = 0

    def tracked_keys(self) -> int:
        return len(self._windows)

    def _sweep(self, now: int) -> None:
        # Full scan at most once per window length.
        if now < self._next_sweep_ms:
            return
        self._windows = {k: w for k, w in self._windows.items() if w.reset_ms >= now}
        self._next_sweep_ms = now + self.window_ms

    def hit(self, key: str, now_ms: int | None = None) -> tuple[_Window, int]:
        """Count one request; returns (window, remaining). Expired windows of other keys are dropped."""
        now = int(time.time() * 1000) if now_ms is None else now_ms
        self._sweep(now)
        window = self._windows.get(key)
        if window is None or window.reset_ms < now:
            window = _Window(count=0, reset_ms=now + self.window_ms)
            self._windows[key] = window
        window.count += 1
        return window, max(0, self.max_requests - window.count)

    def __call__(self, request: Request, response: Response) -> None:
        key = f"{client_ip(request)}:{request.url.path}"
        now = int(time.time() * 1000)
        window, remaining = self.hit(key, now)
        headers = {
            "X-RateLimit-Limit": str(self.max_requests),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(math.floor(window.reset_ms / 1000)),
        }
        if window.count > self.max_requests:
            raise HTTPException(
                status_code=429,
                detail={"error": "rate_limited", "retryAfterMs": window.reset_ms - now},
                headers=headers,
            )
        response.headers.update(headers)
