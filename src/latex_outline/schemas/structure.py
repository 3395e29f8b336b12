"""Outline element models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class ElementKind(str, Enum):
    """Kinds of structural elements surfaced in an outline."""

    SECTION = "Section"
    SECTION_STARRED = "SectionStarred"
    ENVIRONMENT = "Environment"
    COMMAND = "Command"
    SUB_FILE = "SubFile"


class StructuralElement(BaseModel):
    """A node of the document outline.

    Attributes:
        kind: What produced the element.
        name: Macro or environment name, used for rank and counter lookups.
        label: Display string, possibly prefixed by a number.
        offset: Character offset of the originating node in its file.
        line_start: Zero-based line where the node starts.
        line_end: Zero-based line where the node ends.
        file_path: Absolute path of the file the element comes from.
        children: Nested elements in document order.
    """

    kind: ElementKind
    name: str
    label: str
    offset: int = Field(default=0, ge=0)
    line_start: int = Field(default=0, ge=0)
    line_end: int = Field(default=0, ge=0)
    file_path: str
    children: list["StructuralElement"] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_lines(self) -> "StructuralElement":
        if self.line_start > self.line_end:
            raise ValueError(
                f"line_start ({self.line_start}) is after line_end ({self.line_end})"
            )
        return self

    @property
    def is_section(self) -> bool:
        return self.kind in (ElementKind.SECTION, ElementKind.SECTION_STARRED)


# Per-run mapping from absolute file path to the file's flat element forest.
FileStructureCache = dict[str, list[StructuralElement]]
