"""Outline construction pipeline for LaTeX projects."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from pathlib import Path
from typing import Mapping

from latex_outline.config import load_settings
from latex_outline.document_source import DocumentSource, FileDocumentSource
from latex_outline.extractor import FileExtractor
from latex_outline.latex_parser import MACRO_SIGNATURES, parse_latex
from latex_outline.numbering import add_float_numbers, add_section_numbers
from latex_outline.schemas import (
    FileStructureCache,
    OutlineSettings,
    StructuralElement,
    StructureConfig,
)
from latex_outline.sections import insert_sub_files, nest_non_sections, nest_sections

logger = logging.getLogger(__name__)

_SECTION_SIGNATURE = "s o m"
_COMMAND_SIGNATURE = "o m"


def extra_signatures(settings: OutlineSettings) -> dict[str, str]:
    """Signatures for configured macros the parser does not know yet."""
    signatures: dict[str, str] = {}
    for group in settings.sections:
        for name in group.split("|"):
            name = name.strip()
            if name and name not in MACRO_SIGNATURES:
                signatures[name] = _SECTION_SIGNATURE
    for name in settings.commands:
        if name not in MACRO_SIGNATURES:
            signatures.setdefault(name, _COMMAND_SIGNATURE)
    return signatures


class OutlineBuilder:
    """Build document outlines from a root file and everything it includes.

    Attributes:
        source: Supplier of file text and parsed AST.
        settings: Configuration snapshot; each run derives its own
            ``StructureConfig`` from it.
        root_file: Project root used when ``construct`` gets no path, and
            as a search base for inclusions.
        dirty_documents: Unsaved editor text by path, parsed on the spot
            instead of asking the source.
    """

    def __init__(
        self,
        source: DocumentSource | None = None,
        settings: OutlineSettings | None = None,
        *,
        root_file: str | Path | None = None,
        dirty_documents: Mapping[str, str] | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        signatures = extra_signatures(self.settings)
        self.source = source or FileDocumentSource(signatures=signatures)
        self.root_file = _normalize(root_file) if root_file is not None else None
        self.dirty_documents = {
            _normalize(path): text for path, text in (dirty_documents or {}).items()
        }
        self._parse = partial(parse_latex, macros=signatures)

    async def construct(
        self, file_path: str | Path | None = None, include_sub_files: bool = True
    ) -> list[StructuralElement]:
        """Build the nested, numbered outline of a document.

        Args:
            file_path: File to outline. Defaults to ``root_file``.
            include_sub_files: Merge included files into the outline. When
                False, inclusions stay as unresolved sub-file leaves and no
                numbering is applied.

        Returns:
            Top-level outline elements; empty when no file is known.

        Raises:
            ConfigurationError: If the settings are inconsistent.
        """
        if file_path is None and self.root_file is None:
            return []
        target = _normalize(file_path) if file_path is not None else self.root_file

        config = StructureConfig.from_settings(self.settings, merge_sub_files=include_sub_files)
        cache: FileStructureCache = {}
        extractor = FileExtractor(
            self.source,
            config,
            root_file=self.root_file or target,
            settings=self.settings,
            dirty_documents=self.dirty_documents,
            parse=self._parse,
        )
        await extractor.extract(target, cache)
        logger.debug("Extracted %d file(s) for %s", len(cache), target)

        root_forest = cache.get(target, [])
        struct = insert_sub_files(cache, root_forest, target) if include_sub_files else root_forest
        struct = nest_non_sections(struct)
        struct = nest_sections(struct, config)
        if include_sub_files and config.number_floats:
            struct = add_float_numbers(struct)
        if include_sub_files and config.number_sections:
            struct = add_section_numbers(struct, config)
        return struct


async def construct(
    file_path: str | Path | None = None,
    include_sub_files: bool = True,
    *,
    settings: OutlineSettings | None = None,
    source: DocumentSource | None = None,
    dirty_documents: Mapping[str, str] | None = None,
) -> list[StructuralElement]:
    """Build the outline of ``file_path`` with a fresh builder."""
    builder = OutlineBuilder(
        source,
        settings,
        root_file=file_path,
        dirty_documents=dirty_documents,
    )
    return await builder.construct(include_sub_files=include_sub_files)


def construct_sync(
    file_path: str | Path | None = None,
    include_sub_files: bool = True,
    *,
    settings: OutlineSettings | None = None,
) -> list[StructuralElement]:
    """Blocking wrapper around :func:`construct`."""
    return asyncio.run(construct(file_path, include_sub_files, settings=settings))


def _normalize(path: str | Path) -> str:
    return str(Path(path).expanduser().resolve())
