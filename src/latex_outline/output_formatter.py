"""Format constructed outlines as text or JSON."""

from __future__ import annotations

import json
import os

from latex_outline.schemas import ElementKind, StructuralElement
from latex_outline.sections import count_elements


def format_outline(
    elements: list[StructuralElement],
    *,
    show_lines: bool = False,
    relative_to: str | None = None,
) -> str:
    """Render the outline as an indented tree, one element per line."""
    lines: list[str] = []
    _create_outline_tree(elements, lines, 0, show_lines=show_lines, relative_to=relative_to)
    return "\n".join(lines)


def format_outline_json(elements: list[StructuralElement], *, indent: int = 2) -> str:
    """Dump the outline as a JSON array."""
    return json.dumps([element.model_dump(mode="json") for element in elements], indent=indent)


def summarize_outline(elements: list[StructuralElement]) -> str:
    """One-line element counts, e.g. ``Sections: 4, Environments: 2``."""
    sections = count_elements(elements, ElementKind.SECTION) + count_elements(
        elements, ElementKind.SECTION_STARRED
    )
    parts = [f"Sections: {sections}"]
    for kind, title in (
        (ElementKind.ENVIRONMENT, "Environments"),
        (ElementKind.COMMAND, "Commands"),
        (ElementKind.SUB_FILE, "Sub-files"),
    ):
        total = count_elements(elements, kind)
        if total:
            parts.append(f"{title}: {total}")
    return ", ".join(parts)


def _create_outline_tree(
    elements: list[StructuralElement],
    lines: list[str],
    indent: int,
    *,
    show_lines: bool,
    relative_to: str | None,
) -> None:
    for element in elements:
        line = " " * (indent * 4) + element.label
        if show_lines:
            path = element.file_path
            if relative_to:
                path = os.path.relpath(path, relative_to)
            line += f"  ({path}:{element.line_start + 1})"
        lines.append(line)
        if element.children:
            _create_outline_tree(
                element.children,
                lines,
                indent + 1,
                show_lines=show_lines,
                relative_to=relative_to,
            )
