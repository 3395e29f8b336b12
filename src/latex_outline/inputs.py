"""Resolve inclusion paths and scan for knitr/Sweave child chunks."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

# <<label, child='chapter1.Rnw', echo=FALSE>>=
_CHILD_CHUNK_RE = re.compile(
    r"<<(?:[^,>]*,)*\s*child\s*=\s*(['\"])([^'\"]*)\1\s*(?:,[^,>]*)*>>="
)


@dataclass(frozen=True)
class ChildDirective:
    """A child document referenced from a chunk header."""

    sub_file: str
    path: str
    line: int


def resolve_file(dirs: Iterable[str], input_file: str, suffix: str = ".tex") -> str | None:
    """Find the file an inclusion argument refers to.

    Each directory is tried in order. A path without extension gets
    ``suffix`` appended; a path with an extension is also tried with
    ``suffix`` appended when only that variant exists.

    Args:
        dirs: Directories to search, most specific first.
        input_file: The raw path argument.
        suffix: Default extension.

    Returns:
        Absolute path of the first existing candidate, or None.
    """
    input_file = input_file.strip()
    if not input_file:
        return None
    search_dirs = list(dirs)
    if os.path.isabs(input_file):
        search_dirs.insert(0, "")
    for directory in search_dirs:
        candidate = Path(directory, input_file).resolve()
        if not candidate.suffix:
            candidate = candidate.with_name(candidate.name + suffix)
        elif not candidate.exists():
            suffixed = candidate.with_name(candidate.name + suffix)
            if suffixed.exists():
                candidate = suffixed
        if candidate.is_file():
            return str(candidate)
    return None


def find_child_directives(
    content: str,
    file_path: str,
    root_file: str | None,
    tex_dirs: Iterable[str] = (),
) -> list[ChildDirective]:
    """Collect child chunk directives in ascending line order.

    Children that resolve to no existing file are dropped.
    """
    dirs = [os.path.dirname(file_path), os.path.dirname(root_file or ""), *tex_dirs]
    children: list[ChildDirective] = []
    for match in _CHILD_CHUNK_RE.finditer(content):
        raw_path = match.group(2)
        sub_file = resolve_file(dirs, raw_path)
        if sub_file is None:
            continue
        line = content.count("\n", 0, match.start())
        children.append(ChildDirective(sub_file=sub_file, path=raw_path, line=line))
    return sorted(children, key=lambda child: child.line)
