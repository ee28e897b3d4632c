"""
Read-only share links.

The whole PRD travels inside the URL as URL-safe base64 JSON, so opening a
link needs no backend round trip. The token is a human-readable tag shown
next to the shared view.
"""

from __future__ import annotations

import base64
import binascii
import json
import secrets
from typing import Optional
from urllib.parse import urlencode

from pydantic import BaseModel, ValidationError

from pmcopilot.features.prds.prd_contracts import PRDFormData, PRDSections

# No 0/O or 1/I, so tokens survive being read aloud or retyped.
TOKEN_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


class SharedPRD(BaseModel):
    v: int = 1
    prd: PRDFormData
    sections: PRDSections
    templateId: Optional[str] = None
    ts: int
    token: Optional[str] = None


def random_token(length: int = 8) -> str:
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def encode_share_payload(payload: SharedPRD) -> str:
    raw = payload.model_dump_json(exclude_none=True).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_share_payload(data: str) -> SharedPRD | None:
    """Inverse of encode_share_payload; None for anything that is not a v1 payload."""
    try:
        padded = data + "=" * (-len(data) % 4)
        obj = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        return None
    if not isinstance(obj, dict) or obj.get("v") != 1 or not obj.get("prd"):
        return None
    try:
        return SharedPRD.model_validate(obj)
    except ValidationError:
        return None


def build_share_url(base_url: str, payload: SharedPRD) -> str:
    params = {"view": "prd", "data": encode_share_payload(payload)}
    if payload.token:
        params["token"] = payload.token
    sep = "&" if "?" in base_url else "?"
    return f"{base_url}{sep}{urlencode(params)}"
