from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

PRD_SCHEMA_VERSION = 1


class PRDSections(BaseModel):
    """Which sections render and export."""

    problem: bool = True
    solution: bool = True
    objectives: bool = True
    userStories: bool = True
    requirements: bool = True


class RiceScore(BaseModel):
    """Reach x Impact x Confidence / Effort row from the prioritization matrix."""

    id: str
    name: str
    reach: float = 0
    impact: float = 0
    confidence: float = 0
    effort: float = 0
    rice: float = 0
    category: Optional[str] = None


class AcceptanceCriterion(BaseModel):
    id: str
    storyIndex: int = Field(..., ge=0)
    text: str
    done: bool = False


class PRDFormData(BaseModel):
    """Authored PRD content, without storage metadata."""

    title: str = ""
    problem: str = ""
    solution: str = ""
    objectives: List[str] = Field(default_factory=list)
    userStories: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)


class PRDCreateRequest(BaseModel):
    title: str = ""
    problem: str = ""
    solution: str = ""
    objectives: List[str] = Field(default_factory=list)
    userStories: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)
    sections: Optional[PRDSections] = None
    templateId: Optional[str] = None


class PRDUpdateRequest(BaseModel):
    """
    Partial update: only fields present in the request body are written.

    Fields may be omitted but not sent as null, except templateId where null
    detaches the PRD from its template.
    """

    title: Optional[str] = None
    problem: Optional[str] = None
    solution: Optional[str] = None
    objectives: Optional[List[str]] = None
    userStories: Optional[List[str]] = None
    requirements: Optional[List[str]] = None
    sections: Optional[PRDSections] = None
    templateId: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _reject_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            nulls = sorted(k for k, v in data.items() if v is None and k != "templateId")
            if nulls:
                raise ValueError(f"fields must not be null: {', '.join(nulls)}")
        return data


class RiceUpdateRequest(BaseModel):
    riceScores: List[RiceScore]


class PRD(PRDFormData):
    id: str
    riceScores: List[RiceScore] = Field(default_factory=list)
    acceptanceCriteria: List[AcceptanceCriterion] = Field(default_factory=list)
    sections: PRDSections = Field(default_factory=PRDSections)
    templateId: Optional[str] = None
    schemaVersion: int = PRD_SCHEMA_VERSION
    createdAt: datetime
    updatedAt: datetime

    def form_data(self) -> PRDFormData:
        return PRDFormData(**self.model_dump(include=set(PRDFormData.model_fields)))


class ShareLinkResponse(BaseModel):
    token: str
    url: str
