"""
tests/test_utils.py
Unit tests for clientgen.utils.
"""

from __future__ import annotations

import pathlib
import time

import pytest

from clientgen.utils import (
    Timer,
    capitalize,
    count_lines,
    ensure_directory,
    indent,
    lower_case,
    sha256_hex,
    to_plural,
    unique_by,
    wrap_comment,
)


class TestCaseHelpers:
    def test_capitalize_first_character_only(self) -> None:
        assert capitalize("userPost") == "UserPost"
        assert capitalize("U") == "U"
        assert capitalize("") == ""

    def test_lower_case_first_character_only(self) -> None:
        assert lower_case("UserPost") == "userPost"
        assert lower_case("ID") == "iD"
        assert lower_case("") == ""


class TestToPlural:
    @pytest.mark.parametrize(
        "singular, plural",
        [
            ("User", "Users"),
            ("Category", "Categories"),
            ("Box", "Boxes"),
            ("Address", "Addresses"),
            ("Person", "People"),
            ("day", "days"),
            ("Leaf", "Leaves"),
        ],
    )
    def test_plural_forms(self, singular: str, plural: str) -> None:
        assert to_plural(singular) == plural

    def test_empty(self) -> None:
        assert to_plural("") == ""


class TestIndentAndComments:
    def test_indent_skips_blank_lines(self) -> None:
        assert indent("a\n\nb") == "  a\n\n  b"
        assert indent("a", 4) == "    a"

    def test_wrap_comment_single_line(self) -> None:
        assert wrap_comment("Model User") == "/**\n * Model User\n**/"

    def test_wrap_comment_multi_line_has_no_trailing_spaces(self) -> None:
        text = wrap_comment("first\n\nthird")
        assert text == "/**\n * first\n *\n * third\n**/"
        assert all(line == line.rstrip() for line in text.split("\n"))

    def test_wrap_comment_escapes_block_end(self) -> None:
        text = wrap_comment("glob is src/*/index.ts")
        assert text == "/**\n * glob is src/*\\/index.ts\n**/"
        assert text.count("*/") == 1


class TestUniqueBy:
    def test_first_occurrence_wins_and_order_is_kept(self) -> None:
        items = [("where", 1), ("take", 2), ("where", 3), ("skip", 4)]
        assert unique_by(items, lambda i: i[0]) == [("where", 1), ("take", 2), ("skip", 4)]

    def test_empty(self) -> None:
        assert unique_by([], lambda i: i) == []


class TestMetrics:
    def test_sha256_hex(self) -> None:
        assert sha256_hex("") == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_count_lines(self) -> None:
        assert count_lines("") == 0
        assert count_lines("a") == 1
        assert count_lines("a\nb\n") == 2

    def test_timer_measures_elapsed(self) -> None:
        with Timer("sleep") as t:
            time.sleep(0.01)
        assert t.elapsed > 0
        assert "sleep" in repr(t)


class TestEnsureDirectory:
    def test_creates_nested_and_is_idempotent(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "a" / "b"
        ensure_directory(target)
        ensure_directory(target)
        assert target.is_dir()
