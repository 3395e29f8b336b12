"""Parse LaTeX source text into the node tree used for outlining."""

from __future__ import annotations

import re
from bisect import bisect_right
from pathlib import Path
from typing import Mapping

from latex_outline.exceptions import LatexParseError, SourceNotAvailableError
from latex_outline.nodes import (
    Argument,
    Comment,
    DisplayMath,
    Environment,
    Group,
    InlineMath,
    Macro,
    MathEnvironment,
    Node,
    Parbreak,
    Point,
    Position,
    Root,
    String,
    VerbatimEnvironment,
    Verb,
    Whitespace,
)

# Argument signatures, xparse style: s = star, o = [optional], m = {mandatory},
# d<> = <optional>, g = {optional}.
MACRO_SIGNATURES: dict[str, str] = {
    "part": "s o m",
    "chapter": "s o m",
    "section": "s o m",
    "subsection": "s o m",
    "subsubsection": "s o m",
    "paragraph": "s o m",
    "subparagraph": "s o m",
    "addchap": "s o m",
    "addsec": "s o m",
    "frametitle": "d<> o m",
    "framesubtitle": "d<> o m",
    "caption": "o m",
    "label": "m",
    "ref": "m",
    "eqref": "m",
    "pageref": "m",
    "cite": "o o m",
    "citep": "o o m",
    "citet": "o o m",
    "footnote": "o m",
    "emph": "m",
    "textbf": "m",
    "textit": "m",
    "texttt": "m",
    "textsc": "m",
    "textsf": "m",
    "textrm": "m",
    "textup": "m",
    "underline": "m",
    "mbox": "m",
    "text": "m",
    "mathbf": "m",
    "mathrm": "m",
    "mathit": "m",
    "mathcal": "m",
    "mathbb": "m",
    "operatorname": "s m",
    "frac": "m m",
    "sqrt": "o m",
    "url": "m",
    "href": "m m",
    "texorpdfstring": "m m",
    "includegraphics": "s o m",
    "input": "m",
    "include": "m",
    "InputIfFileExists": "m m m",
    "SweaveInput": "m",
    "subfile": "m",
    "loadglsentries": "m",
    "markdownInput": "m",
    "import": "m m",
    "inputfrom": "m m",
    "includefrom": "m m",
    "subimport": "m m",
    "subinputfrom": "m m",
    "subincludefrom": "m m",
    "documentclass": "o m",
    "usepackage": "o m",
    "title": "o m",
    "author": "o m",
    "newcommand": "s m o o m",
    "renewcommand": "s m o o m",
    "hspace": "s m",
    "vspace": "s m",
    "item": "o",
    "\\": "s o",
}

ENVIRONMENT_SIGNATURES: dict[str, str] = {
    "figure": "o",
    "figure*": "o",
    "table": "o",
    "table*": "o",
    "frame": "d<> o o g g",
    "minipage": "o o o m",
    "tabular": "o m",
    "wrapfigure": "o m o m",
    "subfigure": "o m",
    "thebibliography": "m",
    "itemize": "o",
    "enumerate": "o",
    "description": "o",
}

MATH_ENVIRONMENTS = frozenset(
    {
        "equation",
        "equation*",
        "align",
        "align*",
        "alignat",
        "alignat*",
        "gather",
        "gather*",
        "multline",
        "multline*",
        "flalign",
        "flalign*",
        "eqnarray",
        "eqnarray*",
        "displaymath",
        "math",
    }
)

VERBATIM_ENVIRONMENTS = frozenset(
    {
        "verbatim",
        "verbatim*",
        "Verbatim",
        "lstlisting",
        "minted",
        "comment",
        "filecontents",
        "filecontents*",
    }
)

_MACRO_NAME_RE = re.compile(r"[A-Za-z@]+")
_WHITESPACE_CHARS = " \t\r\n"
_STOP_CHARS = frozenset("\\%{}$") | frozenset(_WHITESPACE_CHARS)


def parse_latex(
    text: str,
    *,
    macros: Mapping[str, str] | None = None,
    environments: Mapping[str, str] | None = None,
) -> Root:
    """Parse LaTeX source into a ``Root`` node.

    Malformed input is tolerated: unclosed groups and environments are
    closed at the end of the text, and a stray ``\\end`` that matches no
    open environment is kept as a plain macro.

    Args:
        text: LaTeX source.
        macros: Extra macro signatures, merged over the built-in table.
        environments: Extra environment signatures.

    Returns:
        The parsed document.

    Raises:
        LatexParseError: If the text nests deeper than the parser can follow.
    """
    parser = _Parser(
        text,
        macros={**MACRO_SIGNATURES, **(macros or {})},
        environments={**ENVIRONMENT_SIGNATURES, **(environments or {})},
    )
    try:
        content, _ = parser.parse_sequence()
    except RecursionError as exc:
        raise LatexParseError(f"Nesting too deep to parse near offset {parser.pos}") from exc
    return Root(content=content, position=parser.position(0, len(text)))


def detect_main_tex(source_dir: Path) -> Path:
    """Find the root .tex file of a project directory.

    Detection order:
    1. File containing \\documentclass directive
    2. File named 'main.tex' or 'ms.tex'
    3. Alphabetically first .tex file

    Raises:
        SourceNotAvailableError: If no .tex files are found in the directory.
    """
    tex_files = sorted(source_dir.glob("*.tex"))
    if not tex_files:
        raise SourceNotAvailableError(f"No .tex files found in {source_dir}")

    for tex_file in tex_files:
        content = tex_file.read_text(errors="replace")
        if r"\documentclass" in content:
            return tex_file

    for conventional in ("main.tex", "ms.tex"):
        candidate = source_dir / conventional
        if candidate.exists():
            return candidate

    return tex_files[0]


def _find_matching_brace(text: str, start_pos: int) -> int | None:
    """Find position of closing brace matching opening brace at start_pos."""
    if start_pos >= len(text) or text[start_pos] != "{":
        return None

    depth = 0
    for i in range(start_pos, len(text)):
        if text[i] == "{":
            depth += 1
        elif text[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


class _Parser:
    def __init__(
        self, text: str, *, macros: Mapping[str, str], environments: Mapping[str, str]
    ) -> None:
        self.text = text
        self.pos = 0
        self.macros = macros
        self.environments = environments
        self._open_envs: list[str] = []
        self._end_marker_stop = 0
        self._unclosed: set[tuple[int, str, tuple[str, ...]]] = set()
        self._line_starts = [0] + [m.end() for m in re.finditer(r"\n", text)]

    def point(self, offset: int) -> Point:
        line = bisect_right(self._line_starts, offset)
        return Point(offset=offset, line=line, column=offset - self._line_starts[line - 1])

    def position(self, start: int, end: int) -> Position:
        return Position(start=self.point(start), end=self.point(end))

    def parse_sequence(
        self, *, until: str | None = None, env: str | None = None
    ) -> tuple[list[Node], bool]:
        """Parse nodes until ``until``, ``\\end{env}`` or the end of input.

        Returns the nodes and whether the terminator was found.
        """
        text = self.text
        nodes: list[Node] = []
        stop_chars = _STOP_CHARS | {until[0]} if until else _STOP_CHARS

        while self.pos < len(text):
            if until is not None and text.startswith(until, self.pos):
                self.pos += len(until)
                return nodes, True

            start = self.pos
            char = text[start]

            if char == "%":
                end = text.find("\n", start)
                end = len(text) if end == -1 else end
                nodes.append(Comment(text[start + 1 : end], self.position(start, end)))
                self.pos = end
            elif char in _WHITESPACE_CHARS:
                end = start
                while end < len(text) and text[end] in _WHITESPACE_CHARS:
                    end += 1
                self.pos = end
                span = self.position(start, end)
                if text.count("\n", start, end) >= 2:
                    nodes.append(Parbreak(span))
                else:
                    nodes.append(Whitespace(span))
            elif char == "\\":
                end_name = self._peek_end_name()
                if end_name is not None:
                    if end_name == env:
                        self.pos = self._end_marker_stop
                        return nodes, True
                    if end_name in self._open_envs:
                        return nodes, False
                nodes.append(self._parse_control_sequence())
            elif char == "$":
                if text.startswith("$$", start):
                    self.pos = start + 2
                    content, _ = self.parse_sequence(until="$$")
                    nodes.append(DisplayMath(content, self.position(start, self.pos)))
                else:
                    self.pos = start + 1
                    content, _ = self.parse_sequence(until="$")
                    nodes.append(InlineMath(content, self.position(start, self.pos)))
            elif char == "{":
                self.pos = start + 1
                content, _ = self.parse_sequence(until="}")
                nodes.append(Group(content, self.position(start, self.pos)))
            elif char == "}":
                # Unbalanced closing brace outside of any group.
                self.pos = start + 1
                nodes.append(String("}", self.position(start, self.pos)))
            else:
                end = start + 1
                while end < len(text) and text[end] not in stop_chars:
                    end += 1
                self.pos = end
                nodes.append(String(text[start:end], self.position(start, end)))

        return nodes, until is None and env is None

    def _peek_end_name(self) -> str | None:
        """Return the environment name if ``\\end{name}`` starts at pos."""
        if not self.text.startswith("\\end", self.pos):
            return None
        after = self.pos + 4
        if after < len(self.text) and self.text[after].isalpha():
            return None
        brace = self._skip_spaces(after)
        close = _find_matching_brace(self.text, brace)
        if close is None:
            return None
        self._end_marker_stop = close + 1
        return self.text[brace + 1 : close].strip()

    def _skip_spaces(self, pos: int) -> int:
        while pos < len(self.text) and self.text[pos] in " \t":
            pos += 1
        return pos

    def _parse_control_sequence(self) -> Node:
        text = self.text
        start = self.pos
        match = _MACRO_NAME_RE.match(text, start + 1)
        if match:
            name = match.group(0)
            self.pos = match.end()
        elif start + 1 < len(text):
            name = text[start + 1]
            self.pos = start + 2
        else:
            self.pos = start + 1
            return String("\\", self.position(start, self.pos))

        if name == "begin":
            brace = self._skip_spaces(self.pos)
            close = _find_matching_brace(text, brace)
            if close is not None:
                env_name = text[brace + 1 : close].strip()
                self.pos = close + 1
                return self._parse_environment(start, env_name)
        if name == "(":
            content, _ = self.parse_sequence(until="\\)")
            return InlineMath(content, self.position(start, self.pos))
        if name == "[":
            content, _ = self.parse_sequence(until="\\]")
            return DisplayMath(content, self.position(start, self.pos))
        if name == "verb":
            return self._parse_verb(start)

        signature = self.macros.get(name, "")
        if name == "end":
            signature = "m"
        args = self._parse_args(signature)
        return Macro(name, args, self.position(start, self.pos))

    def _parse_verb(self, start: int) -> Node:
        text = self.text
        if text.startswith("*", self.pos):
            self.pos += 1
        if self.pos >= len(text) or text[self.pos].isspace():
            return Macro("verb", [], self.position(start, self.pos))
        delimiter = text[self.pos]
        close = text.find(delimiter, self.pos + 1)
        line_end = text.find("\n", self.pos + 1)
        if close == -1 or (line_end != -1 and line_end < close):
            close = len(text) if line_end == -1 else line_end
            content = text[self.pos + 1 : close]
            self.pos = close
        else:
            content = text[self.pos + 1 : close]
            self.pos = close + 1
        return Verb("verb", delimiter, content, self.position(start, self.pos))

    def _parse_environment(self, start: int, name: str) -> Node:
        text = self.text
        if name in VERBATIM_ENVIRONMENTS:
            marker = re.compile(r"\\end\s*\{" + re.escape(name) + r"\}")
            match = marker.search(text, self.pos)
            if match:
                content = text[self.pos : match.start()]
                self.pos = match.end()
            else:
                content = text[self.pos :]
                self.pos = len(text)
            return VerbatimEnvironment(name, content, self.position(start, self.pos))

        self._open_envs.append(name)
        try:
            args = self._parse_args(self.environments.get(name, ""))
            content, _ = self.parse_sequence(env=name)
        finally:
            self._open_envs.pop()
        span = self.position(start, self.pos)
        if name in MATH_ENVIRONMENTS:
            return MathEnvironment(name, args, content, span)
        return Environment(name, args, content, span)

    def _parse_args(self, signature: str) -> list[Argument]:
        args: list[Argument] = []
        for arg_type in signature.split():
            if arg_type == "s":
                if self.text.startswith("*", self.pos):
                    self.pos += 1
                    args.append(Argument(content=[String("*")]))
                else:
                    args.append(Argument())
            elif arg_type == "o":
                args.append(self._parse_delimited("[", "]"))
            elif arg_type == "d<>":
                args.append(self._parse_delimited("<", ">"))
            elif arg_type == "g":
                args.append(self._parse_brace_arg(required=False))
            elif arg_type == "m":
                args.append(self._parse_brace_arg(required=True))
        return args

    def _parse_delimited(self, open_mark: str, close_mark: str) -> Argument:
        if not self.text.startswith(open_mark, self.pos):
            return Argument()
        saved = self.pos
        # An opener that failed to close is never scanned again.
        key = (saved, close_mark, tuple(self._open_envs))
        if key in self._unclosed or self.text.find(close_mark, saved + len(open_mark)) == -1:
            return Argument()
        self.pos += len(open_mark)
        content, closed = self.parse_sequence(until=close_mark)
        if not closed:
            self._unclosed.add(key)
            self.pos = saved
            return Argument()
        return Argument(open_mark, close_mark, content)

    def _parse_brace_arg(self, *, required: bool) -> Argument:
        text = self.text
        saved = self.pos
        pos = self._skip_spaces(self.pos)
        if pos < len(text) and text[pos] == "\n":
            pos = self._skip_spaces(pos + 1)
        if pos < len(text) and text[pos] == "{":
            self.pos = pos + 1
            content, _ = self.parse_sequence(until="}")
            return Argument("{", "}", content)
        if required and pos < len(text) and text[pos] not in "}%$\n":
            # A bare mandatory argument is the next single token.
            self.pos = pos
            if text[pos] == "\\":
                return Argument(content=[self._parse_control_sequence()])
            self.pos = pos + 1
            return Argument(content=[String(text[pos], self.position(pos, pos + 1))])
        self.pos = saved
        return Argument()
