"""Unit tests for raw-text normalization rules."""

from __future__ import annotations

import pytest

from pdfnarrator.text import (
    BlankNonPrintable,
    CollapseBlankLines,
    RemovePageMarkers,
    TextNormalizer,
)


def test_normalize_removes_page_marker_and_collapses_whitespace() -> None:
    normalizer = TextNormalizer()

    assert normalizer.normalize("Page\n\n-- 3 of 10 --\nHello   world\n") == "Hello world"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Intro.\n-- 1 of 2 --\nBody.", "Intro. Body."),
        ("Intro. --12 of 340-- Body.", "Intro. Body."),
        ("Intro. Page -- 4 of 9 -- Body.", "Intro. Body."),
        ("We counted 3 of 10 apples.", "We counted 3 of 10 apples."),
        (
            "Read chapters 1-5 of 12 first. See page 3 of 10 for details.",
            "Read chapters 1-5 of 12 first. See page 3 of 10 for details.",
        ),
        ("Pages -- 2 of 7 for now.", "Pages -- 2 of 7 for now."),
    ],
)
def test_page_markers_require_dash_runs_on_both_sides(raw: str, expected: str) -> None:
    """Dashed markers are removed; ranges and prose page references survive."""

    assert TextNormalizer().normalize(raw) == expected


def test_normalize_joins_lines_and_paragraphs_into_one_line() -> None:
    raw = "First line\nsecond line\n\n\n  Next paragraph\t with tab\r\n"

    assert TextNormalizer().normalize(raw) == "First line second line Next paragraph with tab"


def test_normalize_blanks_characters_outside_printable_ascii() -> None:
    """Non-ASCII characters become spaces after whitespace collapsing."""

    assert TextNormalizer().normalize("café naïve") == "caf  na ve"


def test_normalize_returns_empty_string_for_marker_only_text() -> None:
    assert TextNormalizer().normalize("\n-- 1 of 1 --\n\n  ") == ""


@pytest.mark.parametrize(
    "raw",
    [
        "Page\n\n-- 3 of 10 --\nHello   world\n",
        "One. Two.\n\nThree   four\nfive.",
        "  leading and trailing  \n",
        "Chapter 1\n-- 2 of 5 --\nIt was a dark night. The end.",
    ],
)
def test_normalize_is_idempotent_for_ascii_text(raw: str) -> None:
    normalizer = TextNormalizer()
    once = normalizer.normalize(raw)

    assert normalizer.normalize(once) == once


def test_individual_rules_apply_single_transformations() -> None:
    assert RemovePageMarkers().apply("a -- 2 of 3 -- b") == "a  b"
    assert CollapseBlankLines().apply("a\n \n\nb\nc") == "a b\nc"
    assert BlankNonPrintable().apply("a—b") == "a b"


def test_custom_rule_sequence_is_applied_in_order() -> None:
    normalizer = TextNormalizer(rules=[BlankNonPrintable()])

    assert normalizer.normalize("x\ny") == "x y"


def test_marker_removal_keeps_words_around_it_apart() -> None:
    assert RemovePageMarkers().apply("end.-- 5 of 6 --Next") == "end.Next"
    assert TextNormalizer().normalize("end. -- 5 of 6 -- Next") == "end. Next"
