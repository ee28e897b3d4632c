from __future__ import annotations

from typing import List

from pydantic import BaseModel

from pmcopilot.features.prds.prd_contracts import PRDSections


class ChecklistItem(BaseModel):
    id: str
    label: str


class BuiltinTemplate(BaseModel):
    id: str
    label: str
    description: str
    defaultSections: PRDSections
    checklist: List[ChecklistItem]


DEFAULT_TEMPLATE_ID = "feature"

TEMPLATES: list[BuiltinTemplate] = [
    BuiltinTemplate(
        id="feature",
        label="Feature PRD",
        description="Standard feature proposal with problems, solutions, stories, and requirements.",
        defaultSections=PRDSections(),
        checklist=[
            ChecklistItem(id="user_problem", label="Clear user problem and context"),
            ChecklistItem(id="solution_value", label="Solution outlines value proposition"),
            ChecklistItem(id="objectives", label="Objectives and success metrics defined"),
            ChecklistItem(id="stories", label="At least 3 user stories"),
            ChecklistItem(id="requirements", label="Functional and non-functional requirements"),
        ],
    ),
    BuiltinTemplate(
        id="experiment",
        label="Experiment",
        description="Lean experiment format, focused on hypothesis and success metrics.",
        defaultSections=PRDSections(userStories=False, requirements=False),
        checklist=[
            ChecklistItem(id="hypothesis", label="Hypothesis stated and falsifiable"),
            ChecklistItem(id="metrics", label="Primary and guardrail metrics"),
            ChecklistItem(id="scope", label="Scope and timeline defined"),
            ChecklistItem(id="risks", label="Risks and ethics reviewed"),
        ],
    ),
    BuiltinTemplate(
        id="techspec",
        label="Tech Spec",
        description="Technical plan emphasizing requirements and constraints.",
        defaultSections=PRDSections(objectives=False, userStories=False),
        checklist=[
            ChecklistItem(id="nonfunctional", label="Non-functional requirements (perf, reliability, security)"),
            ChecklistItem(id="constraints", label="Constraints and trade-offs documented"),
            ChecklistItem(id="rollout", label="Rollout plan and monitoring"),
        ],
    ),
]

_BY_ID = {t.id: t for t in TEMPLATES}


def get_template_by_id(template_id: str | None) -> BuiltinTemplate:
    """Unknown or missing ids fall back to the feature template."""
    return _BY_ID.get(template_id or "", _BY_ID[DEFAULT_TEMPLATE_ID])
