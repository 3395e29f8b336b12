"""Tests for outline assembly passes."""

from __future__ import annotations

from latex_outline.schemas import (
    ElementKind,
    FileStructureCache,
    OutlineSettings,
    StructuralElement,
    StructureConfig,
)
from latex_outline.sections import (
    count_elements,
    insert_sub_files,
    iter_elements,
    nest_non_sections,
    nest_sections,
)

CONFIG = StructureConfig.from_settings(OutlineSettings())


def section(name: str, label: str, *children: StructuralElement, starred: bool = False):
    kind = ElementKind.SECTION_STARRED if starred else ElementKind.SECTION
    return StructuralElement(
        kind=kind, name=name, label=label, file_path="/doc/main.tex", children=list(children)
    )


def figure(label: str) -> StructuralElement:
    return StructuralElement(
        kind=ElementKind.ENVIRONMENT, name="figure", label=label, file_path="/doc/main.tex"
    )


def sub_file(path: str) -> StructuralElement:
    return StructuralElement(
        kind=ElementKind.SUB_FILE, name="input", label=path, file_path="/doc/main.tex"
    )


def _shape(elements: list[StructuralElement]) -> list:
    return [(e.label, _shape(e.children)) if e.children else e.label for e in elements]


class TestInsertSubFiles:
    """Tests for insert_sub_files function."""

    def test_splices_nested_files(self) -> None:
        cache: FileStructureCache = {
            "/doc/main.tex": [section("section", "Intro"), sub_file("/doc/a.tex")],
            "/doc/a.tex": [section("section", "A"), sub_file("/doc/b.tex")],
            "/doc/b.tex": [figure("Figure: B")],
        }

        result = insert_sub_files(cache, cache["/doc/main.tex"], "/doc/main.tex")

        assert _shape(result) == ["Intro", "A", "Figure: B"]

    def test_unresolved_marker_stays(self) -> None:
        cache: FileStructureCache = {"/doc/main.tex": [sub_file("chapter")]}

        result = insert_sub_files(cache, cache["/doc/main.tex"])

        assert [e.kind for e in result] == [ElementKind.SUB_FILE]

    def test_markers_inside_children_are_spliced(self) -> None:
        cache: FileStructureCache = {
            "/doc/main.tex": [section("section", "Intro", sub_file("/doc/a.tex"))],
            "/doc/a.tex": [figure("Figure: A")],
        }

        result = insert_sub_files(cache, cache["/doc/main.tex"])

        assert _shape(result) == [("Intro", ["Figure: A"])]

    def test_cycle_leaves_marker(self) -> None:
        """A file already on the inclusion path is not expanded again."""
        cache: FileStructureCache = {
            "/doc/main.tex": [sub_file("/doc/a.tex")],
            "/doc/a.tex": [section("section", "A"), sub_file("/doc/main.tex")],
        }

        result = insert_sub_files(cache, cache["/doc/main.tex"], "/doc/main.tex")

        assert [(e.kind, e.label) for e in result] == [
            (ElementKind.SECTION, "A"),
            (ElementKind.SUB_FILE, "/doc/main.tex"),
        ]

    def test_repeated_inclusion_expands_twice(self) -> None:
        cache: FileStructureCache = {
            "/doc/main.tex": [sub_file("/doc/a.tex"), sub_file("/doc/a.tex")],
            "/doc/a.tex": [figure("Figure: A")],
        }

        result = insert_sub_files(cache, cache["/doc/main.tex"])

        assert _shape(result) == ["Figure: A", "Figure: A"]

    def test_input_is_not_modified(self) -> None:
        cache: FileStructureCache = {
            "/doc/main.tex": [sub_file("/doc/a.tex")],
            "/doc/a.tex": [figure("Figure: A")],
        }

        insert_sub_files(cache, cache["/doc/main.tex"])

        assert cache["/doc/main.tex"][0].kind == ElementKind.SUB_FILE

    def test_second_pass_is_a_no_op(self) -> None:
        cache: FileStructureCache = {
            "/doc/main.tex": [sub_file("/doc/a.tex")],
            "/doc/a.tex": [section("section", "A")],
        }

        once = insert_sub_files(cache, cache["/doc/main.tex"])

        assert insert_sub_files(cache, once) == once


class TestNestNonSections:
    """Tests for nest_non_sections function."""

    def test_front_matter_stays_top_level(self) -> None:
        elements = [
            figure("Figure: Title"),
            section("section", "Intro"),
            figure("Figure: Plot"),
            section("subsection", "Detail"),
            figure("Figure: Zoom"),
        ]

        result = nest_non_sections(elements)

        assert _shape(result) == [
            "Figure: Title",
            ("Intro", ["Figure: Plot"]),
            ("Detail", ["Figure: Zoom"]),
        ]

    def test_applies_to_children(self) -> None:
        frame = StructuralElement(
            kind=ElementKind.ENVIRONMENT,
            name="frame",
            label="Frame",
            file_path="/doc/main.tex",
            children=[section("section", "Inner"), figure("Figure: X")],
        )

        result = nest_non_sections([frame])

        assert _shape(result) == [("Frame", [("Inner", ["Figure: X"])])]

    def test_does_not_modify_input(self) -> None:
        intro = section("section", "Intro")

        nest_non_sections([intro, figure("Figure: Plot")])

        assert intro.children == []


class TestNestSections:
    """Tests for nest_sections function."""

    def test_nests_by_rank(self) -> None:
        elements = [
            section("chapter", "One"),
            section("section", "1a"),
            section("subsection", "1a-i"),
            section("section", "1b"),
            section("chapter", "Two"),
        ]

        result = nest_sections(elements, CONFIG)

        assert _shape(result) == [
            ("One", [("1a", ["1a-i"]), "1b"]),
            "Two",
        ]

    def test_skipped_level(self) -> None:
        """A subsubsection directly under a section nests under it."""
        elements = [
            section("section", "Method"),
            section("subsubsection", "Deep"),
            section("subsection", "Mid"),
        ]

        result = nest_sections(elements, CONFIG)

        assert _shape(result) == [("Method", ["Deep", "Mid"])]

    def test_higher_level_after_deeper_start(self) -> None:
        """A section outranking the first open one closes everything."""
        elements = [section("subsection", "Sub"), section("section", "Sec")]

        result = nest_sections(elements, CONFIG)

        assert _shape(result) == ["Sub", "Sec"]

    def test_non_sections_pass_through(self) -> None:
        elements = [figure("Figure: Front"), section("section", "Intro")]

        result = nest_sections(elements, CONFIG)

        assert _shape(result) == ["Figure: Front", "Intro"]

    def test_unranked_section_passes_through(self) -> None:
        elements = [section("section", "Intro"), section("paragraph", "Note")]

        result = nest_sections(elements, CONFIG)

        assert _shape(result) == ["Intro", "Note"]

    def test_unresolved_sub_file_goes_under_open_section(self) -> None:
        elements = [
            sub_file("early"),
            section("section", "Intro"),
            sub_file("chapter"),
            section("subsection", "Detail"),
        ]

        result = nest_sections(elements, CONFIG)

        assert _shape(result) == ["early", ("Intro", ["chapter", "Detail"])]

    def test_existing_children_are_kept(self) -> None:
        elements = [section("section", "Intro", figure("Figure: A")), section("subsection", "B")]

        result = nest_sections(elements, CONFIG)

        assert _shape(result) == [("Intro", ["Figure: A", "B"])]


class TestIterElements:
    """Tests for tree walking helpers."""

    def test_depth_first_order(self) -> None:
        tree = [section("section", "A", figure("Figure: 1")), section("section", "B")]

        assert [e.label for e in iter_elements(tree)] == ["A", "Figure: 1", "B"]

    def test_count_by_kind(self) -> None:
        tree = [section("section", "A", figure("Figure: 1"), figure("Figure: 2"))]

        assert count_elements(tree) == 3
        assert count_elements(tree, ElementKind.ENVIRONMENT) == 2
