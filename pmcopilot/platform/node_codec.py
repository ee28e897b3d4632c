"""
Helpers for mapping API models onto Neo4j node properties.

Node properties only hold primitives and homogeneous lists, so nested
structures (section toggles, RICE rows) are stored as JSON strings and
timestamps as fixed-width ISO-8601 UTC strings, which sort chronologically.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Any


def new_id() -> str:
    return uuid.uuid4().hex


def to_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds")


def utc_now_iso() -> str:
    return to_iso(datetime.now(timezone.utc))


def dump_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def load_json(value: str | None, default: Any) -> Any:
    if not value:
        return default
    try:
        return json.loads(value)
    except ValueError:
        return default
