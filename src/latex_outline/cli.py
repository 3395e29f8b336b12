"""Command-line interface: print the outline of a LaTeX project."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from latex_outline.config import load_settings
from latex_outline.exceptions import LatexOutlineError
from latex_outline.latex_parser import detect_main_tex
from latex_outline.output_formatter import (
    format_outline,
    format_outline_json,
    summarize_outline,
)
from latex_outline.structure import construct_sync


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="latex-outline",
        description="Print the section, float and inclusion outline of a LaTeX project.",
    )
    parser.add_argument("root", help="Root .tex file, or a directory to search for one")
    parser.add_argument(
        "--no-subfiles",
        action="store_true",
        help="Do not merge included files; list inclusions as leaves",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of a tree")
    parser.add_argument(
        "--show-lines", action="store_true", help="Show file and line of each element"
    )
    parser.add_argument(
        "--tex-dir",
        action="append",
        default=[],
        help="Extra directory searched for included files (repeatable)",
    )
    parser.add_argument(
        "--command",
        action="append",
        default=[],
        help="Extra macro to list as a command element (repeatable)",
    )
    parser.add_argument("--no-numbers", action="store_true", help="Do not number sections")
    parser.add_argument(
        "--no-float-numbers", action="store_true", help="Do not number floats"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = load_settings()
    updates: dict = {}
    if args.tex_dir:
        updates["tex_dirs"] = [*settings.tex_dirs, *args.tex_dir]
    if args.command:
        updates["commands"] = [*settings.commands, *args.command]
    if args.no_numbers:
        updates["section_numbers_enabled"] = False
    if args.no_float_numbers:
        updates["float_numbers_enabled"] = False
    settings = settings.model_copy(update=updates)

    root = Path(args.root)
    try:
        if root.is_dir():
            root = detect_main_tex(root)
        outline = construct_sync(root, not args.no_subfiles, settings=settings)
    except LatexOutlineError as exc:
        print(f"latex-outline: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(format_outline_json(outline))
    else:
        base_dir = str(root.parent.resolve())
        print(format_outline(outline, show_lines=args.show_lines, relative_to=base_dir))
        print()
        print(summarize_outline(outline))
    return 0


if __name__ == "__main__":
    sys.exit(main())
