"""latex_outline: build navigable outlines of LaTeX projects."""

from latex_outline.document_source import CachedDocument, DocumentSource, FileDocumentSource
from latex_outline.exceptions import (
    ConfigurationError,
    LatexOutlineError,
    LatexParseError,
    SourceNotAvailableError,
)
from latex_outline.latex_parser import parse_latex
from latex_outline.schemas import (
    ElementKind,
    OutlineSettings,
    StructuralElement,
    StructureConfig,
)
from latex_outline.structure import OutlineBuilder, construct, construct_sync

__all__ = [
    "CachedDocument",
    "ConfigurationError",
    "DocumentSource",
    "ElementKind",
    "FileDocumentSource",
    "LatexOutlineError",
    "LatexParseError",
    "OutlineBuilder",
    "OutlineSettings",
    "SourceNotAvailableError",
    "StructuralElement",
    "StructureConfig",
    "construct",
    "construct_sync",
    "parse_latex",
]
