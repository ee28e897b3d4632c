"""
CSV export of PRD lists.

Rows are terminated by "\\n" (including the last one). Cells that contain a
comma, a double quote or a line break are quoted with inner quotes doubled,
so an embedded newline is always inside quotes and never mistaken for a row
terminator.
"""

from __future__ import annotations

from typing import Iterable, Sequence

_NEEDS_QUOTING = (",", '"', "\n", "\r")


def csv_cell(value: str) -> str:
    text = "" if value is None else str(value)
    if any(ch in text for ch in _NEEDS_QUOTING):
        return '"' + text.replace('"', '""') + '"'
    return text


def array_to_csv(rows: Iterable[Sequence[str]]) -> str:
    """
    >>> array_to_csv([["a,b", 'c"d']])
    '"a,b","c""d"\\n'
    """
    return "".join(",".join(csv_cell(cell) for cell in row) + "\n" for row in rows)


def _numbered_table(header: str, items: Iterable[str]) -> str:
    rows: list[list[str]] = [["#", header]]
    for item in items:
        if item:
            rows.append([str(len(rows)), item])
    return array_to_csv(rows)


def stories_to_csv(stories: Iterable[str]) -> str:
    return _numbered_table("User Story", stories)


def requirements_to_csv(requirements: Iterable[str]) -> str:
    return _numbered_table("Requirement", requirements)
