"""Tests for slug normalization."""

from __future__ import annotations

from pathlib import PurePosixPath

import pytest

from folio.domain.slug import slugify, slugify_path


class TestSlugify:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Hello World", "hello-world"),
            ("  padded  ", "padded"),
            ("snake_case_name", "snake-case-name"),
            ("a -- b", "a-b"),
            ("What's Up?", "whats-up"),
            ("Crème Brûlée", "creme-brulee"),
            ("Ünïcödé", "unicode"),
            ("file.name.html", "file.name.html"),
            ("C++ & Rust", "c-rust"),
            ("", ""),
            ("?!", ""),
        ],
    )
    def test_examples(self, text: str, expected: str) -> None:
        assert slugify(text) == expected

    @pytest.mark.parametrize("text", ["Hello World", "-x-", "Crème__Brûlée", "a - - b", "?!", "北京 Øst"])
    def test_idempotent(self, text: str) -> None:
        once = slugify(text)
        assert slugify(once) == once

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Søren Kierkegaard", "soren-kierkegaard"),
            ("Straße", "strasse"),
            ("Łódź", "lodz"),
            ("Æsir", "aesir"),
            ("Œuvre", "oeuvre"),
            ("北京", "bei-jing"),
            ("日本語", "ri-ben-yu"),
        ],
    )
    def test_transliterates_beyond_accents(self, text: str, expected: str) -> None:
        assert slugify(text) == expected

    def test_output_alphabet(self) -> None:
        slug = slugify("Mixed: CASE, punctuation; & symbols/slashes\ttabs")
        assert all(c.isascii() and (c.islower() or c.isdigit() or c in ".-") for c in slug)
        assert not slug.startswith("-")
        assert not slug.endswith("-")
        assert "--" not in slug


class TestSlugifyPath:
    def test_each_segment_slugified(self) -> None:
        assert slugify_path("My Notes/Sub Folder/Page One.html") == PurePosixPath(
            "my-notes/sub-folder/page-one.html"
        )

    def test_empty_path(self) -> None:
        assert slugify_path("") == PurePosixPath()

    def test_non_latin_segments_keep_a_name(self) -> None:
        assert slugify_path("笔记/Straße.html") == PurePosixPath("bi-ji/strasse.html")
