"""
Unit tests for section segmentation and classification.

Tests resumepilot.contexts.parsing.sections.
"""

import pytest

from resumepilot.contexts.parsing.sections import (
    classify,
    document_body,
    header_region,
    segment,
    split_document,
)


@pytest.mark.unit
class TestSplitDocument:
    """Tests for split_document and document_body."""

    def test_preamble_and_body(self):
        preamble, body = split_document("\\documentclass{article}\n\\begin{document}\nHi\n\\end{document}\ntrailer")

        assert preamble == "\\documentclass{article}\n"
        assert body.strip() == "Hi"

    def test_without_begin_whole_text_is_body(self):
        """Fragments without \\begin{document} are still parsed."""
        preamble, body = split_document("\\section{Skills}\nPython")

        assert preamble == ""
        assert body == "\\section{Skills}\nPython"

    def test_header_region_stops_at_first_heading(self, jake_source):
        header = header_region(jake_source)

        assert "Jake Ryan" in header
        assert "\\section" not in header
        assert "Southwestern" not in header

    def test_document_body_excludes_preamble(self, jake_source):
        assert "\\usepackage" not in document_body(jake_source)


@pytest.mark.unit
class TestSegment:
    """Tests for segment()."""

    def test_sections_in_document_order(self, jake_source):
        titles = [section.title for section in segment(jake_source)]

        assert titles == ["Education", "Experience", "Projects", "Technical Skills"]

    def test_starred_and_moderncv_headings(self):
        text = "\\section*{Work}\na\n\\cvsection{Skills}\nb"
        sections = segment(text)

        assert [(s.title, s.body, s.command) for s in sections] == [
            ("Work", "a", "section"),
            ("Skills", "b", "cvsection"),
        ]

    def test_subsections_only_when_no_sections(self):
        text = "\\subsection{Experience}\na\n\\subsection{Education}\nb"

        assert [section.title for section in segment(text)] == ["Experience", "Education"]

    def test_subsections_stay_inside_sections(self):
        """With section-level headings present, subsections are part of the body."""
        text = "\\section{Experience}\n\\subsection{Acme}\na\n\\section{Skills}\nb"
        sections = segment(text)

        assert [section.title for section in sections] == ["Experience", "Skills"]
        assert "\\subsection{Acme}" in sections[0].body

    def test_formatted_titles_become_plaintext(self):
        sections = segment("\\section{\\textbf{Work} \\& Projects}\nx")

        assert sections[0].title == "Work & Projects"

    def test_no_headings(self):
        assert segment("\\begin{document}Just text\\end{document}") == []


@pytest.mark.unit
class TestClassify:
    """Tests for classify()."""

    @pytest.mark.parametrize(
        "title,category",
        [
            ("Experience", "experience"),
            ("Professional Experience", "experience"),
            ("Work History", "experience"),
            ("EMPLOYMENT", "experience"),
            ("Education", "education"),
            ("Academic Background", "education"),
            ("Technical Skills", "skills"),
            ("Core Competencies", "skills"),
            ("Awards & Honors", "achievements"),
            ("Achievements", "achievements"),
            ("Summary", "summary"),
            ("Objective", "summary"),
            ("Profile", "summary"),
            ("Projects", "projects"),
        ],
    )
    def test_synonyms(self, title, category):
        assert classify(title) == category

    def test_projects_checked_before_education(self):
        assert classify("Academic Projects") == "projects"

    def test_substring_matching(self):
        assert classify("ProfessionalExperience") == "experience"
        assert classify("WORKHISTORY") == "experience"

    def test_unknown_titles(self):
        assert classify("Certifications") is None
        assert classify("Languages") is None
        assert classify("") is None
