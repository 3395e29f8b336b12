"""Assemble per-file element forests into one nested outline."""

from __future__ import annotations

from typing import Iterable, Iterator

from latex_outline.schemas import (
    ElementKind,
    FileStructureCache,
    StructuralElement,
    StructureConfig,
)


def _copy(element: StructuralElement, children: list[StructuralElement]) -> StructuralElement:
    return element.model_copy(update={"children": children})


def insert_sub_files(
    cache: FileStructureCache,
    elements: list[StructuralElement],
    root: str | None = None,
) -> list[StructuralElement]:
    """Replace resolved sub-file markers with the forests of their files.

    A marker whose file is ``root`` or is already being expanded further up
    the current path stays a leaf, so cyclic inclusions terminate. A file
    included twice side by side is expanded twice.
    """

    def _splice(
        nodes: list[StructuralElement], expanding: frozenset[str]
    ) -> list[StructuralElement]:
        result: list[StructuralElement] = []
        for element in nodes:
            if (
                element.kind == ElementKind.SUB_FILE
                and element.label in cache
                and element.label not in expanding
            ):
                result.extend(_splice(cache[element.label], expanding | {element.label}))
                continue
            result.append(_copy(element, _splice(element.children, expanding)))
        return result

    return _splice(elements, frozenset({root}) if root else frozenset())


def nest_non_sections(elements: list[StructuralElement]) -> list[StructuralElement]:
    """Move every non-section element under the closest preceding section.

    Elements ahead of the first section stay where they are. Each level of
    the tree is handled on its own.
    """
    result: list[StructuralElement] = []
    current_section: StructuralElement | None = None
    for element in elements:
        element = _copy(element, nest_non_sections(element.children))
        if element.is_section:
            result.append(element)
            current_section = element
        elif current_section is None:
            result.append(element)
        else:
            current_section.children.append(element)
    return result


def nest_sections(
    elements: list[StructuralElement], config: StructureConfig
) -> list[StructuralElement]:
    """Nest top-level sections by their configured rank.

    A section at the same or a higher level than the outermost open one
    closes everything. Any other section becomes a child of the innermost
    open section of a strictly higher level, closing the deeper ones.
    Unresolved sub-file markers are placed like sections but never hold
    children.
    """
    result: list[StructuralElement] = []
    stack: list[StructuralElement] = []
    for element in elements:
        rank = config.rank(element.name) if element.is_section else None
        if rank is not None:
            element = _copy(element, list(element.children))
            if not stack or rank <= config.rank(stack[0].name):
                stack.clear()
                result.append(element)
            elif rank > config.rank(stack[-1].name):
                stack[-1].children.append(element)
            else:
                while rank <= config.rank(stack[-1].name):
                    stack.pop()
                stack[-1].children.append(element)
            stack.append(element)
        elif element.kind == ElementKind.SUB_FILE and stack:
            stack[-1].children.append(element)
        else:
            result.append(element)
    return result


def iter_elements(elements: Iterable[StructuralElement]) -> Iterator[StructuralElement]:
    """Yield elements depth-first in document order."""
    for element in elements:
        yield element
        yield from iter_elements(element.children)


def count_elements(
    elements: Iterable[StructuralElement], kind: ElementKind | None = None
) -> int:
    """Count elements in the tree, optionally of a single kind."""
    return sum(1 for element in iter_elements(elements) if kind is None or element.kind == kind)
