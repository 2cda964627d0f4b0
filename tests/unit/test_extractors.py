"""
Unit tests for header field extraction.

Tests name, title and contact extractors in
resumepilot.contexts.parsing.extractors.
"""

import pytest

from resumepilot.contexts.parsing.extractors import (
    extract_contact,
    extract_name,
    extract_title,
    first_match,
)


def body(text: str) -> str:
    return f"\\documentclass{{article}}\n\\begin{{document}}\n{text}\n\\end{{document}}\n"


@pytest.mark.unit
class TestFirstMatch:
    """Tests for first_match ordering."""

    def test_first_non_empty_wins(self):
        calls = []

        def record(value):
            def extractor(text):
                calls.append(value)
                return value

            return extractor

        result = first_match([record(None), record(""), record("third"), record("fourth")], "x")

        assert result == "third"
        assert calls == [None, "", "third"]

    def test_no_match(self):
        assert first_match([lambda text: None], "x") is None


@pytest.mark.unit
class TestExtractName:
    """Tests for extract_name across dialects."""

    def test_jake_center_huge(self, jake_source):
        assert extract_name(jake_source) == "Jake Ryan"

    def test_moderncv_name_macro(self, moderncv_source):
        """\\name{First}{Last} arguments are joined with a space."""
        assert extract_name(moderncv_source) == "John Doe"

    def test_sized_text(self, plain_source):
        assert extract_name(plain_source) == "Maria Garcia"

    def test_name_macro_beats_layout(self):
        """Earlier extractors win even when a later one would also match."""
        source = "\\name{Ada}{Lovelace}\n" + body("{\\LARGE\\textbf{Someone Else}}")

        assert extract_name(source) == "Ada Lovelace"

    def test_large_bold(self):
        assert extract_name(body("{\\LARGE\\textbf{Grace Hopper}}")) == "Grace Hopper"

    def test_centerline_huge(self):
        assert extract_name(body("\\centerline{\\huge \\bfseries Alan Turing}")) == "Alan Turing"

    def test_capitalized_pair_heuristic(self):
        assert extract_name(body("Linus Torvalds\n\nKernel hacker")) == "Linus Torvalds"

    def test_nothing_found(self):
        assert extract_name(body("just some lowercase text")) is None


@pytest.mark.unit
class TestExtractTitle:
    """Tests for extract_title."""

    def test_title_macro(self, moderncv_source):
        assert extract_title(moderncv_source) == "Senior Data Engineer"

    def test_document_titles_are_rejected(self):
        """\\title{Resume} describes the document, not the candidate."""
        assert extract_title("\\title{Resume}\n" + body("Hello")) is None

    def test_italic_role_in_header(self):
        source = body("{\\LARGE Jane Doe}\\\\\n\\textit{Platform Engineer}\n\\section{Work}\nx")

        assert extract_title(source) == "Platform Engineer"

    def test_italic_outside_header_is_ignored(self):
        source = body("{\\LARGE Jane Doe}\n\\section{Work}\n\\textit{Platform Engineer}")

        assert extract_title(source) is None

    def test_no_title(self, jake_source):
        assert extract_title(jake_source) is None


@pytest.mark.unit
class TestExtractContact:
    """Tests for extract_contact."""

    def test_jake_header(self, jake_source):
        contact = extract_contact(jake_source)

        assert contact.email == "jake@su.edu"
        assert contact.phone == "123-456-7890"
        assert contact.linkedin == "jake"
        assert contact.github == "jake"
        assert contact.address is None

    def test_moderncv_macros(self, moderncv_source):
        contact = extract_contact(moderncv_source)

        assert contact.email == "john.doe@example.com"
        assert contact.phone == "+44 7700 900123"
        assert contact.address == "221B Baker Street, London, United Kingdom"
        assert contact.linkedin == "johndoe"
        assert contact.github == "jdoe"

    def test_free_text_header(self, plain_source):
        contact = extract_contact(plain_source)

        assert contact.email == "maria.garcia@example.org"
        assert contact.phone == "(555) 123-4567"
        assert contact.github == "mgarcia"

    def test_fields_are_independent(self):
        """A document with only an email and a GitHub link yields exactly those two."""
        source = body("dev@example.com \\quad \\href{https://github.com/octo}{github.com/octo}")

        contact = extract_contact(source)

        assert [name for name, _ in contact.items()] == ["email", "github"]
        assert contact.email == "dev@example.com"
        assert contact.github == "octo"

    def test_short_digit_runs_are_not_phones(self):
        assert extract_contact(body("\\phone{12-34}")).phone is None

    def test_empty_document(self):
        assert extract_contact(body("")).is_empty()
