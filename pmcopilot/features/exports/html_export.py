from __future__ import annotations

from html import escape

from pmcopilot.features.exports.markdown_export import DEFAULT_TITLE
from pmcopilot.features.prds.prd_contracts import PRDFormData, PRDSections


def _items(values: list[str]) -> str:
    return "".join(f"\n<li>{escape(v, quote=False)}</li>" for v in values if v)


def prd_to_html(form: PRDFormData, sections: PRDSections) -> str:
    """Standalone HTML document with the same section gating as the Markdown export."""
    title = escape(form.title or DEFAULT_TITLE, quote=False)
    parts = [
        f'<!DOCTYPE html><html><head><meta charset="utf-8"/><title>{escape(form.title or "PRD", quote=False)}</title></head><body>',
        f"<h1>{title}</h1>",
    ]
    if sections.problem:
        parts.append(f"<h2>Problem Statement</h2><p>{escape(form.problem, quote=False)}</p>")
    if sections.solution:
        parts.append(f"<h2>Solution Overview</h2><p>{escape(form.solution, quote=False)}</p>")
    if sections.objectives:
        parts.append(f"<h2>Objectives</h2><ul>{_items(form.objectives)}\n</ul>")
    if sections.userStories:
        parts.append(f"<h2>User Stories</h2><ol>{_items(form.userStories)}\n</ol>")
    if sections.requirements:
        parts.append(f"<h2>Requirements</h2><ol>{_items(form.requirements)}\n</ol>")
    parts.append("<footer><small>Exported via PM Copilot</small></footer></body></html>")
    return "\n".join(parts)
