"""Render inline node sequences into outline label strings."""

from __future__ import annotations

from typing import Iterable

from latex_outline.nodes import (
    Comment,
    DisplayMath,
    Environment,
    Group,
    InlineMath,
    Macro,
    MathEnvironment,
    Node,
    Parbreak,
    String,
    Verb,
    VerbatimEnvironment,
    Whitespace,
)

# \texorpdfstring{<typeset>}{<plain text>}
ALTERNATE_TEXT_MACRO = "texorpdfstring"


def render_nodes(nodes: Iterable[Node]) -> str:
    """Render argument content as a single display string.

    Environments are not expanded: they render as ``\\environment{name}``.
    Node kinds without a textual form render as an empty string.
    """
    return "".join(_render_node(node) for node in nodes)


def render_macro(macro: Macro) -> str:
    """Render a macro with each argument in its original delimiters."""
    if macro.name == ALTERNATE_TEXT_MACRO:
        return render_nodes(macro.arg_content(1))
    return f"\\{macro.name}" + "".join(
        f"{arg.open_mark}{render_nodes(arg.content)}{arg.close_mark}" for arg in macro.args
    )


def _render_node(node: Node) -> str:
    if isinstance(node, String):
        return node.content
    if isinstance(node, (Whitespace, Parbreak, Comment)):
        return " "
    if isinstance(node, Macro):
        return render_macro(node)
    if isinstance(node, (Environment, MathEnvironment, VerbatimEnvironment)):
        return f"\\environment{{{node.env}}}"
    if isinstance(node, InlineMath):
        return f"${render_nodes(node.content)}$"
    if isinstance(node, DisplayMath):
        return f"\\[{render_nodes(node.content)}\\]"
    if isinstance(node, Group):
        return render_nodes(node.content)
    if isinstance(node, Verb):
        return node.content
    return ""
