"""Shared schemas for latex_outline."""

from latex_outline.schemas.settings import OutlineSettings, StructureConfig
from latex_outline.schemas.structure import (
    ElementKind,
    FileStructureCache,
    StructuralElement,
)

__all__ = [
    "ElementKind",
    "FileStructureCache",
    "OutlineSettings",
    "StructuralElement",
    "StructureConfig",
]
