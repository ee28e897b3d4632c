from __future__ import annotations

from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator


class IntegrationConfigUpdate(BaseModel):
    """PUT body; every field optional, only the provided ones are written."""

    jiraBaseUrl: Optional[str] = None
    jiraProjectHint: Optional[str] = None
    jiraProjectKey: Optional[str] = Field(default=None, pattern=r"^[A-Z][A-Z0-9]{1,9}$")
    linearWorkspace: Optional[str] = None
    linearTeamHint: Optional[str] = None

    @field_validator("jiraBaseUrl")
    @classmethod
    def _validate_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("jiraBaseUrl must be an absolute http(s) URL")
        return v


class IntegrationConfig(BaseModel):
    userId: str
    jiraBaseUrl: Optional[str] = None
    jiraProjectHint: Optional[str] = None
    jiraProjectKey: Optional[str] = None
    linearWorkspace: Optional[str] = None
    linearTeamHint: Optional[str] = None
    createdAt: datetime
    updatedAt: datetime
