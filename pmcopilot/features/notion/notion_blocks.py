from __future__ import annotations

import re
from typing import Any

_HEADING = re.compile(r"^(#{1,6})\s+(.*)$")
MAX_PARAGRAPH_CHARS = 2000


def _rich_text(content: str) -> list[dict[str, Any]]:
    return [{"type": "text", "text": {"content": content}}]


def markdown_to_notion_blocks(markdown: str) -> list[dict[str, Any]]:
    """
    Minimal Markdown -> Notion block conversion.

    `#`..`###` become heading_1..heading_3; deeper headings and every other
    non-blank line become paragraphs (trimmed to Notion's text limit).
    """
    blocks: list[dict[str, Any]] = []
    for line in markdown.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        m = _HEADING.match(stripped)
        if m and len(m.group(1)) <= 3:
            kind = f"heading_{len(m.group(1))}"
            blocks.append({"object": "block", "type": kind, kind: {"rich_text": _rich_text(m.group(2))}})
            continue
        blocks.append(
            {
                "object": "block",
                "type": "paragraph",
                "paragraph": {"rich_text": _rich_text(line[:MAX_PARAGRAPH_CHARS])},
            }
        )
    return blocks
