"""Extract flat structural element forests from parsed files."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Callable, Mapping

from latex_outline.document_source import CachedDocument, DocumentSource
from latex_outline.exceptions import LatexParseError, SourceNotAvailableError
from latex_outline.inputs import ChildDirective, find_child_directives, resolve_file
from latex_outline.latex_parser import parse_latex
from latex_outline.nodes import (
    Argument,
    Environment,
    Group,
    Macro,
    MathEnvironment,
    Node,
    Root,
    String,
    children_of,
)
from latex_outline.render import render_nodes
from latex_outline.schemas import (
    ElementKind,
    FileStructureCache,
    OutlineSettings,
    StructuralElement,
    StructureConfig,
)

logger = logging.getLogger(__name__)

INPUT_MACROS = frozenset(
    {
        "input",
        "InputIfFileExists",
        "include",
        "SweaveInput",
        "subfile",
        "loadglsentries",
        "markdownInput",
    }
)
IMPORT_MACROS = frozenset({"import", "inputfrom", "includefrom"})
SUB_IMPORT_MACROS = frozenset({"subimport", "subinputfrom", "subincludefrom"})

FLOAT_ENVIRONMENTS = {"figure": "figure", "figure*": "figure", "table": "table", "table*": "table"}
# DocTeX documentation blocks: \begin{macro}{\foo}
DOCTEX_ENVIRONMENTS = ("macro", "environment")
RNW_CHILD_NAME = "RnwChild"


class FileExtractor:
    """Walk file ASTs and record their structural elements in a run cache.

    One extractor serves one construction run. Sub-files reached through
    inclusion macros or child chunk directives are extracted recursively
    into the same cache when sub-file merging is enabled.
    """

    def __init__(
        self,
        source: DocumentSource,
        config: StructureConfig,
        *,
        root_file: str | None = None,
        settings: OutlineSettings | None = None,
        dirty_documents: Mapping[str, str] | None = None,
        parse: Callable[[str], Root] = parse_latex,
    ) -> None:
        settings = settings or OutlineSettings()
        self._source = source
        self._config = config
        self._root_file = root_file
        self._poll_interval_s = settings.cache_poll_interval_s
        self._poll_attempts = max(settings.cache_poll_attempts, 1)
        self._dirty_documents = dict(dirty_documents or {})
        self._parse = parse

    async def extract(self, file_path: str, cache: FileStructureCache) -> None:
        """Extract ``file_path`` into ``cache`` unless it is already there.

        The file's forest is registered before the walk starts, so a file
        that includes itself, directly or through other files, is only
        walked once per run.
        """
        if file_path in cache:
            return
        forest: list[StructuralElement] = []
        cache[file_path] = forest

        document = await self._load(file_path)
        if document is None:
            return

        directives = find_child_directives(
            document.content, file_path, self._root_file, self._config.tex_dirs
        )
        # Consumed from the end, so the earliest directive goes last.
        pending = list(reversed(directives))
        try:
            for node in document.ast.content:
                await self._walk(node, pending, forest, file_path, cache)
        except RecursionError:
            logger.warning("Structure of %s nests too deeply, outline truncated", file_path)

    async def _load(self, file_path: str) -> CachedDocument | None:
        if file_path in self._dirty_documents:
            content = self._dirty_documents[file_path]
            try:
                return CachedDocument(content=content, ast=self._parse(content))
            except LatexParseError as exc:
                logger.warning("Error parsing unsaved %s during structuring: %s", file_path, exc)
                return None

        waited = 0
        while not self._source.has_pending(file_path) and self._source.get(file_path) is None:
            await asyncio.sleep(self._poll_interval_s)
            waited += 1
            if waited >= self._poll_attempts:
                logger.info("Document not cached during structuring, forcing: %s", file_path)
                try:
                    await self._source.force_refresh(file_path)
                except SourceNotAvailableError as exc:
                    logger.warning("Forced refresh failed for %s: %s", file_path, exc)
                break
        await self._source.wait_pending(file_path)

        document = self._source.get(file_path)
        if document is None or document.ast is None:
            missing = "AST" if document is not None else "content"
            logger.warning("Error loading %s during structuring: %s", missing, file_path)
            return None
        return document

    async def _walk(
        self,
        node: Node,
        pending: list[ChildDirective],
        siblings: list[StructuralElement],
        file_path: str,
        cache: FileStructureCache,
    ) -> None:
        span = _span_of(node, file_path)
        element = await self._classify(node, span, file_path, cache)

        while pending and pending[-1].line <= span["line_start"]:
            child = pending.pop()
            siblings.append(
                StructuralElement(
                    kind=ElementKind.SUB_FILE,
                    name=RNW_CHILD_NAME,
                    label=child.sub_file if self._config.merge_sub_files else child.path,
                    **{**span, "offset": max(span["offset"] - 1, 0)},
                )
            )
            if self._config.merge_sub_files:
                await self.extract(child.sub_file, cache)

        if element is not None:
            siblings.append(element)
            siblings = element.children

        for sub in children_of(node):
            await self._walk(sub, pending, siblings, file_path, cache)

    async def _classify(
        self, node: Node, span: dict, file_path: str, cache: FileStructureCache
    ) -> StructuralElement | None:
        if isinstance(node, Macro):
            return await self._classify_macro(node, span, file_path, cache)
        if isinstance(node, Environment):
            return self._classify_environment(node, span)
        if isinstance(node, MathEnvironment) and node.env in self._config.environment_names:
            return StructuralElement(
                kind=ElementKind.ENVIRONMENT, name=node.env, label=_capitalize(node.env), **span
            )
        return None

    async def _classify_macro(
        self, macro: Macro, span: dict, file_path: str, cache: FileStructureCache
    ) -> StructuralElement | None:
        config = self._config
        if macro.name in config.section_index:
            short_title = _optional_content(macro.args)
            return StructuralElement(
                kind=ElementKind.SECTION_STARRED if _is_starred(macro) else ElementKind.SECTION,
                name=macro.name,
                label=render_nodes(short_title or _mandatory_content(macro.args)),
                **span,
            )
        if macro.name in config.command_names:
            argument = render_nodes(_mandatory_content(macro.args, last=False))
            return StructuralElement(
                kind=ElementKind.COMMAND,
                name=macro.name,
                label=f"#{macro.name}" + (f": {argument}" if argument else ""),
                **span,
            )

        if macro.name in INPUT_MACROS:
            raw_path = render_nodes(macro.arg_content(0))
            dirs = [
                os.path.dirname(file_path),
                os.path.dirname(self._root_file or ""),
                *config.tex_dirs,
            ]
            sub_file = resolve_file(dirs, raw_path)
        elif macro.name in IMPORT_MACROS:
            directory = render_nodes(macro.arg_content(0))
            raw_path = render_nodes(macro.arg_content(1))
            dirs = [directory, os.path.join(os.path.dirname(self._root_file or ""), directory)]
            sub_file = resolve_file(dirs, raw_path)
        elif macro.name in SUB_IMPORT_MACROS:
            directory = render_nodes(macro.arg_content(0))
            raw_path = render_nodes(macro.arg_content(1))
            sub_file = resolve_file(
                [os.path.dirname(file_path)], os.path.join(directory, raw_path)
            )
        else:
            return None

        if sub_file is None:
            logger.debug("Unresolved \\%s{%s} in %s", macro.name, raw_path, file_path)
            return None
        element = StructuralElement(
            kind=ElementKind.SUB_FILE,
            name=macro.name,
            label=sub_file if config.merge_sub_files else raw_path,
            **span,
        )
        if config.merge_sub_files:
            await self.extract(sub_file, cache)
        return element

    def _classify_environment(self, env: Environment, span: dict) -> StructuralElement | None:
        config = self._config
        if env.env == "frame":
            caption = render_nodes(_mandatory_content(env.args, last=False))
            if not caption:
                frame_title = _find_macro(env.content, "frametitle")
                if frame_title is not None:
                    caption = render_nodes(_mandatory_content(frame_title.args))
            return self._environment_element(env.env, caption, span)

        float_kind = FLOAT_ENVIRONMENTS.get(env.env)
        if float_kind is not None and float_kind in config.environment_names:
            caption_macro = _find_macro(env.content, "caption")
            caption = (
                render_nodes(_mandatory_content(caption_macro.args)) if caption_macro else ""
            )
            return self._environment_element(float_kind, caption, span)

        if env.env in DOCTEX_ENVIRONMENTS:
            first = env.content[0] if env.content else None
            caption = render_nodes(first.content) if isinstance(first, Group) else ""
            return self._environment_element(env.env, caption, span)

        if env.env in config.environment_names:
            return StructuralElement(
                kind=ElementKind.ENVIRONMENT, name=env.env, label=_capitalize(env.env), **span
            )
        return None

    def _environment_element(self, name: str, caption: str, span: dict) -> StructuralElement:
        label = _capitalize(name)
        if self._config.show_captions and caption:
            label += f": {caption}"
        return StructuralElement(kind=ElementKind.ENVIRONMENT, name=name, label=label, **span)


def _span_of(node: Node, file_path: str) -> dict:
    position = node.position
    if position is None:
        return {"offset": 0, "line_start": 0, "line_end": 0, "file_path": file_path}
    return {
        "offset": position.start.offset,
        "line_start": position.start.line - 1,
        "line_end": position.end.line - 1,
        "file_path": file_path,
    }


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


def _is_star(argument: Argument) -> bool:
    return (
        argument.open_mark == ""
        and len(argument.content) == 1
        and isinstance(argument.content[0], String)
        and argument.content[0].content == "*"
    )


def _is_starred(macro: Macro) -> bool:
    return bool(macro.args) and _is_star(macro.args[0])


def _optional_content(args: list[Argument]) -> list[Node]:
    """Content of the last non-empty ``[...]`` argument."""
    for argument in reversed(args):
        if argument.open_mark == "[" and argument.content:
            return argument.content
    return []


def _mandatory_content(args: list[Argument], *, last: bool = True) -> list[Node]:
    """Content of the last (or first) braced or bare mandatory argument."""
    candidates = [
        argument
        for argument in args
        if argument.open_mark == "{"
        or (argument.open_mark == "" and argument.content and not _is_star(argument))
    ]
    if not candidates:
        return []
    return (candidates[-1] if last else candidates[0]).content


def _find_macro(nodes: list[Node], name: str) -> Macro | None:
    for node in nodes:
        if isinstance(node, Macro) and node.name == name:
            return node
    return None
