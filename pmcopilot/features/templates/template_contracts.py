from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ExportTemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)
    markdown: str = Field(..., min_length=1, max_length=20000)


class ExportTemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=80)
    markdown: Optional[str] = Field(default=None, min_length=1, max_length=20000)


class ExportTemplate(BaseModel):
    id: str
    name: str
    markdown: str
    createdAt: datetime
    updatedAt: datetime
