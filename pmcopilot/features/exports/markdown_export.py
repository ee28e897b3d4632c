from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from pmcopilot.features.prds.prd_contracts import PRDFormData, PRDSections

DEFAULT_TITLE = "Product Requirements Document"


class Assessment(BaseModel):
    """Completeness score and gaps supplied by the caller (e.g. the AI assistant panel)."""

    score: Optional[float] = None
    gaps: List[str] = Field(default_factory=list)


def _bullets(items: list[str]) -> str:
    return "\n".join(f"- {item}" for item in items if item)


def _format_score(score: Optional[float]) -> str:
    if score is None:
        return "n/a"
    if float(score).is_integer():
        return str(int(score))
    return f"{score:g}"


def prd_to_markdown(
    form: PRDFormData,
    sections: PRDSections,
    assessment: Optional[Assessment] = None,
) -> str:
    """
    Render a PRD as Markdown.

    Only enabled sections are emitted, always in the order Problem, Solution,
    Objectives, User Stories, Requirements. A disabled section leaves no
    heading behind. The Findings block is appended only when an assessment
    is given.
    """
    parts: list[str] = [f"# {form.title or DEFAULT_TITLE}"]

    if sections.problem:
        parts.append(f"## Problem Statement\n{form.problem}".rstrip())
    if sections.solution:
        parts.append(f"## Solution Overview\n{form.solution}".rstrip())
    if sections.objectives:
        parts.append(f"## Objectives\n{_bullets(form.objectives)}".rstrip())
    if sections.userStories:
        parts.append(f"## User Stories\n{_bullets(form.userStories)}".rstrip())
    if sections.requirements:
        parts.append(f"## Requirements\n{_bullets(form.requirements)}".rstrip())

    if assessment is not None:
        gaps = _bullets(assessment.gaps) or "- None"
        parts.append(f"## Findings\nScore: {_format_score(assessment.score)}/100\n\nGaps:\n{gaps}")

    return "\n\n".join(parts) + "\n"
