"""
Snapshot payload storage format and schema versioning.

formData and sections are stored as gzip-compressed, base64-encoded JSON
strings. Bump SNAPSHOT_SCHEMA_VERSION whenever the payload shape changes and
register a migration from the previous version in MIGRATIONS. Migrations must
be pure and idempotent: they receive a copy and return the upgraded payload.
"""

from __future__ import annotations

import base64
import binascii
import gzip
import json
from typing import Any, Callable, Mapping

SNAPSHOT_SCHEMA_VERSION = 1

Payload = dict[str, Any]
Migration = Callable[[Payload], Payload]

# from_version -> migration producing from_version + 1
MIGRATIONS: dict[int, Migration] = {}


class SnapshotDecodeError(ValueError):
    """Stored snapshot payload could not be decompressed or parsed."""


def compress_json(value: Any) -> str:
    raw = json.dumps(value, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(gzip.compress(raw)).decode("ascii")


def decompress_json(data: str) -> Any:
    try:
        return json.loads(gzip.decompress(base64.b64decode(data)).decode("utf-8"))
    except (binascii.Error, OSError, EOFError, UnicodeError, ValueError) as e:
        raise SnapshotDecodeError(str(e)) from e


def apply_migrations(
    raw: Payload,
    *,
    migrations: Mapping[int, Migration] | None = None,
    target_version: int | None = None,
) -> Payload:
    """
    Walk a payload up to target_version one step at a time.

    A missing schemaVersion counts as 0 (written before versioning). The walk
    stops at the first version without a registered migration; the result is
    always tagged with target_version.
    """
    migrations = MIGRATIONS if migrations is None else migrations
    target = SNAPSHOT_SCHEMA_VERSION if target_version is None else target_version

    current = raw.get("schemaVersion") or 0
    snap = dict(raw)
    while current < target:
        migration = migrations.get(current)
        if migration is None:
            break
        snap = migration({**snap, "schemaVersion": current})
        current += 1
    snap["schemaVersion"] = target
    return snap


def encode_payload(form_data: Payload, sections: Payload) -> tuple[str, str]:
    return compress_json(form_data), compress_json(sections)


def hydrate(stored: Mapping[str, Any]) -> Payload:
    """
    Decode a stored snapshot into plain formData/sections dicts and migrate it.

    Uncompressed (legacy) payloads are stored as plain JSON strings.

    Raises:
        SnapshotDecodeError: payload is corrupt.
    """
    snap = dict(stored)
    if snap.get("compressed"):
        snap["formData"] = decompress_json(snap.get("formData") or "")
        snap["sections"] = decompress_json(snap.get("sections") or "")
    else:
        try:
            snap["formData"] = json.loads(snap.get("formData") or "{}")
            snap["sections"] = json.loads(snap.get("sections") or "{}")
        except ValueError as e:
            raise SnapshotDecodeError(str(e)) from e
    return apply_migrations(snap)
