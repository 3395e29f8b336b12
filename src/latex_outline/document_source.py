"""Document sources supplying text and parsed AST for a file path."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Callable, Mapping, Protocol

from latex_outline.exceptions import LatexParseError, SourceNotAvailableError
from latex_outline.latex_parser import parse_latex
from latex_outline.nodes import Root

logger = logging.getLogger(__name__)


@dataclass
class CachedDocument:
    """Raw text of a file and the AST parsed from it."""

    content: str
    ast: Root | None


class DocumentSource(Protocol):
    """What the outline builder needs from a caching and parsing layer."""

    def get(self, file_path: str) -> CachedDocument | None:
        """Return the cached document, if one has been produced."""

    def has_pending(self, file_path: str) -> bool:
        """Return True while the document is being produced."""

    async def wait_pending(self, file_path: str) -> None:
        """Wait for an in-flight production of the document, if any."""

    async def force_refresh(self, file_path: str) -> None:
        """Produce the document now.

        Raises:
            SourceNotAvailableError: If the document cannot be produced.
        """


async def read_text_async(path: Path, encoding: str = "utf-8") -> str:
    """Read text from a file asynchronously using a thread pool.

    Args:
        path: Path to the file to read.
        encoding: Text encoding to use.

    Returns:
        The file contents as a string.
    """
    return await asyncio.to_thread(path.read_text, encoding=encoding, errors="replace")


class FileDocumentSource:
    """On-demand in-memory cache of documents read from disk.

    Asking whether a path is pending queues a load for paths that are
    neither cached nor loading, so a builder polling this source never has
    to fall back to a forced refresh for readable files.
    """

    def __init__(
        self,
        *,
        parse: Callable[[str], Root] | None = None,
        signatures: Mapping[str, str] | None = None,
        encoding: str = "utf-8",
    ) -> None:
        self._documents: dict[str, CachedDocument] = {}
        self._pending: dict[str, asyncio.Task[None]] = {}
        self._failed: set[str] = set()
        self._encoding = encoding
        if parse is None:
            parse = partial(parse_latex, macros=dict(signatures or {}))
        self._parse = parse

    def get(self, file_path: str) -> CachedDocument | None:
        return self._documents.get(file_path)

    def has_pending(self, file_path: str) -> bool:
        task = self._pending.get(file_path)
        if task is not None:
            return not task.done()
        if file_path in self._documents or file_path in self._failed:
            return False
        self._pending[file_path] = asyncio.ensure_future(self._load_quietly(file_path))
        return True

    async def wait_pending(self, file_path: str) -> None:
        task = self._pending.get(file_path)
        if task is not None:
            await task

    async def force_refresh(self, file_path: str) -> None:
        self._failed.discard(file_path)
        await self._load(file_path)

    def invalidate(self, file_path: str) -> None:
        """Drop a cached document so the next request re-reads it."""
        self._documents.pop(file_path, None)
        self._pending.pop(file_path, None)
        self._failed.discard(file_path)

    async def _load_quietly(self, file_path: str) -> None:
        try:
            await self._load(file_path)
        except SourceNotAvailableError as exc:
            logger.warning("%s", exc)
            self._failed.add(file_path)
        finally:
            self._pending.pop(file_path, None)

    async def _load(self, file_path: str) -> None:
        try:
            content = await read_text_async(Path(file_path), encoding=self._encoding)
        except OSError as exc:
            raise SourceNotAvailableError(f"Cannot read {file_path}: {exc}") from exc
        try:
            ast = self._parse(content)
        except LatexParseError as exc:
            raise SourceNotAvailableError(f"Cannot parse {file_path}: {exc}") from exc
        self._documents[file_path] = CachedDocument(content=content, ast=ast)
