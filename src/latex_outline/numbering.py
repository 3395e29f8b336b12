"""Number floats and sections of an assembled outline in place."""

from __future__ import annotations

from latex_outline.extractor import DOCTEX_ENVIRONMENTS
from latex_outline.schemas import ElementKind, StructuralElement, StructureConfig


def add_float_numbers(
    elements: list[StructuralElement], counter: dict[str, int] | None = None
) -> list[StructuralElement]:
    """Number environment elements per name across the whole tree.

    ``Figure: Caption`` becomes ``Figure 3: Caption``.
    """
    counter = {} if counter is None else counter
    for element in elements:
        if element.kind == ElementKind.ENVIRONMENT and element.name not in DOCTEX_ENVIRONMENTS:
            counter[element.name] = counter.get(element.name, 0) + 1
            head, sep, tail = element.label.partition(":")
            element.label = f"{head} {counter[element.name]}{sep}{tail}"
        if element.children:
            add_float_numbers(element.children, counter)
    return elements


def add_section_numbers(
    elements: list[StructuralElement],
    config: StructureConfig,
    prefix: str = "",
    lowest: int | None = None,
) -> list[StructuralElement]:
    """Prefix section labels with hierarchical numbers.

    Counters are kept per rank within one level of the tree. A section
    whose rank sits below the scope's lowest rank is padded with ``0.``
    segments; starred sections are marked ``*`` and do not advance the
    counter. Elements without a configured rank are skipped along with
    their children.
    """
    ranks = [config.rank(element.name) for element in elements if element.is_section]
    ranks = [rank for rank in ranks if rank is not None]
    if not ranks:
        return elements
    if lowest is None:
        lowest = min(ranks)

    counter: dict[int, int] = {}
    for element in elements:
        rank = config.rank(element.name)
        if not element.is_section or rank is None:
            continue
        if element.kind == ElementKind.SECTION:
            counter[rank] = counter.get(rank, 0) + 1
        number = prefix + "0." * max(rank - lowest, 0) + str(counter.get(rank, 0))
        marker = number if element.kind == ElementKind.SECTION else "*"
        element.label = f"{marker} {element.label}"
        if element.children:
            add_section_numbers(element.children, config, f"{number}.", rank + 1)
    return elements
