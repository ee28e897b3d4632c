from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class LinearItem(BaseModel):
    title: str
    description: Optional[str] = None


class LinearSyncRequest(BaseModel):
    items: List[LinearItem]
    teamId: Optional[str] = None


class JiraItem(BaseModel):
    summary: str
    description: Optional[str] = None
    issueType: Optional[str] = None
    projectKey: str


class JiraSyncRequest(BaseModel):
    items: List[JiraItem]


class SyncTarget(str, Enum):
    LINEAR = "linear"
    JIRA = "jira"


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


class JobAccepted(BaseModel):
    jobId: str
    status: JobStatus


class JobSummary(BaseModel):
    id: str
    type: SyncTarget
    status: JobStatus
    updatedAt: int


class JobDetail(JobSummary):
    result: Optional[Any] = None
    error: Optional[str] = None


class SyncResult(BaseModel):
    created: List[dict] = Field(default_factory=list)
