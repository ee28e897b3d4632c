from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from pmcopilot.features.prds.prd_contracts import PRDFormData, PRDSections


class SnapshotCreateRequest(BaseModel):
    prdId: str = Field(..., min_length=1)
    note: Optional[str] = None
    formData: PRDFormData = Field(default_factory=PRDFormData)
    sections: PRDSections = Field(default_factory=PRDSections)
    templateId: Optional[str] = None


class SnapshotCreated(BaseModel):
    id: str
    createdAt: datetime


class Snapshot(BaseModel):
    """Hydrated snapshot as returned to clients (payload decompressed and migrated)."""

    id: str
    prdId: str
    note: Optional[str] = None
    formData: PRDFormData
    sections: PRDSections
    templateId: Optional[str] = None
    compressed: bool = False
    schemaVersion: int
    createdAt: datetime
