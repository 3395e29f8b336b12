"""AST node types for parsed LaTeX documents.

The node set is closed: every consumer dispatches over the ``Node`` union
below. Line numbers in positions are 1-based, columns 0-based.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Point:
    """A location in the source text."""

    offset: int
    line: int
    column: int


@dataclass(frozen=True)
class Position:
    """Start and end points of a node (end is exclusive)."""

    start: Point
    end: Point


@dataclass
class Argument:
    """A macro or environment argument and the delimiters it was written with."""

    open_mark: str = ""
    close_mark: str = ""
    content: list[Node] = field(default_factory=list)


@dataclass
class String:
    content: str
    position: Position | None = None


@dataclass
class Whitespace:
    position: Position | None = None


@dataclass
class Parbreak:
    position: Position | None = None


@dataclass
class Comment:
    content: str
    position: Position | None = None


@dataclass
class Macro:
    """``\\name`` followed by the arguments its signature asked for."""

    name: str
    args: list[Argument] = field(default_factory=list)
    position: Position | None = None

    def arg(self, index: int) -> Argument | None:
        if 0 <= index < len(self.args):
            return self.args[index]
        return None

    def arg_content(self, index: int) -> list[Node]:
        argument = self.arg(index)
        return argument.content if argument is not None else []


@dataclass
class Environment:
    env: str
    args: list[Argument] = field(default_factory=list)
    content: list[Node] = field(default_factory=list)
    position: Position | None = None


@dataclass
class MathEnvironment:
    env: str
    args: list[Argument] = field(default_factory=list)
    content: list[Node] = field(default_factory=list)
    position: Position | None = None


@dataclass
class VerbatimEnvironment:
    env: str
    content: str
    position: Position | None = None


@dataclass
class InlineMath:
    content: list[Node] = field(default_factory=list)
    position: Position | None = None


@dataclass
class DisplayMath:
    content: list[Node] = field(default_factory=list)
    position: Position | None = None


@dataclass
class Group:
    content: list[Node] = field(default_factory=list)
    position: Position | None = None


@dataclass
class Verb:
    """Inline verbatim such as ``\\verb|text|``."""

    env: str
    escape: str
    content: str
    position: Position | None = None


@dataclass
class Root:
    content: list[Node] = field(default_factory=list)
    position: Position | None = None


Node = Union[
    String,
    Whitespace,
    Parbreak,
    Comment,
    Macro,
    Environment,
    MathEnvironment,
    VerbatimEnvironment,
    InlineMath,
    DisplayMath,
    Group,
    Verb,
]

# Nodes whose body is a node sequence the structure walk descends into.
CONTAINER_TYPES = (Environment, MathEnvironment, InlineMath, DisplayMath, Group)


def children_of(node: Node) -> list[Node]:
    """Return the body of a container node, or an empty list."""
    if isinstance(node, CONTAINER_TYPES):
        return node.content
    return []
