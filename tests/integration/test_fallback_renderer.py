"""
Integration tests for the fallback document renderer.

Renders ResumeModels to PDF with reportlab and reads the pages back with
pdfplumber and PyPDF2.
"""

import pytest

from resumepilot.contexts.parsing import parse
from resumepilot.contexts.parsing.resume_model import (
    ContactInfo,
    Entry,
    OtherSection,
    ResumeModel,
    SkillGroup,
)
from resumepilot.contexts.rendering import render, render_notice
from resumepilot.utils.pdf_processing import extract_pdf_text, looks_like_pdf, page_count
from resumepilot.utils.settings import FallbackLimits


def jobs(count: int):
    return [
        Entry(primary_label=f"Role {i}", secondary_label=f"Employer {i}", period=f"{2010 + i}")
        for i in range(count)
    ]


@pytest.mark.integration
class TestRenderedContent:
    """Tests for what the preview shows."""

    def test_parsed_jake_resume(self, jake_source):
        outcome = render(parse(jake_source))
        text = extract_pdf_text(outcome.document)

        assert outcome.warnings == []
        assert "Jake Ryan" in text
        assert "Email: jake@su.edu" in text
        assert "PROFESSIONAL EXPERIENCE" in text
        assert "Undergraduate Research Assistant" in text
        assert "Languages: Java, Python" in text
        assert "Gitlytics" in text

    def test_empty_model(self):
        """An empty model still yields a valid one-page document."""
        outcome = render(ResumeModel())

        assert looks_like_pdf(outcome.document)
        assert page_count(outcome.document) == 1
        assert "Resume Preview" in extract_pdf_text(outcome.document)
        assert outcome.warnings == []

    def test_title_and_contact_lines(self):
        model = ResumeModel(
            name="Jane Doe",
            title="Staff Engineer",
            contact=ContactInfo(phone="555-0100", github="jdoe"),
        )
        text = extract_pdf_text(render(model).document)

        assert "Staff Engineer" in text
        assert "Phone: 555-0100" in text
        assert "GitHub: jdoe" in text
        assert "Email:" not in text

    def test_education_grade_on_details_line(self):
        degree = Entry(
            primary_label="MSc Computer Science",
            secondary_label="University of Edinburgh",
            period="2015",
            location="Edinburgh",
            bullet_points=["Distinction"],
        )
        text = extract_pdf_text(render(ResumeModel(education=[degree])).document)

        assert "University of Edinburgh | Edinburgh | 2015 | Distinction" in text

    def test_parsed_moderncv_grade_is_shown(self, moderncv_source):
        text = extract_pdf_text(render(parse(moderncv_source)).document)

        assert "Distinction" in text

    def test_characters_outside_font_encoding(self):
        model = ResumeModel(name="Zoë Ştefan", summary="Latency 10→2 ms, café owner")

        outcome = render(model)

        assert looks_like_pdf(outcome.document)
        assert "café" in extract_pdf_text(outcome.document)

    def test_deterministic_output(self, moderncv_source):
        model = parse(moderncv_source)

        assert render(model).document == render(model).document


@pytest.mark.integration
class TestPageBudget:
    """Tests for truncation under the page budget."""

    def test_experience_capped(self):
        outcome = render(ResumeModel(name="A", experience=jobs(5)))
        text = extract_pdf_text(outcome.document)

        assert "Role 2" in text
        assert "Role 3" not in text
        assert outcome.warnings == ["Fallback preview truncated: showing 3 of 5 experience entries"]

    def test_education_capped(self):
        outcome = render(ResumeModel(education=jobs(3)))

        assert outcome.warnings == ["Fallback preview truncated: showing 2 of 3 education entries"]

    def test_project_description_cut(self):
        project = Entry(primary_label="Big", bullet_points=["x" * 300])

        outcome = render(ResumeModel(projects=[project]))

        assert "project description cut to 200 characters" in outcome.warnings[0]

    def test_achievements_need_room(self):
        limits = FallbackLimits(bottom_threshold_pt=10)
        model = ResumeModel(name="A", achievements=jobs(2))

        outcome = render(model, limits)

        assert outcome.warnings == ["Fallback preview truncated: no room for 2 achievement entries"]
        assert "Role 0" not in extract_pdf_text(outcome.document)

    def test_other_sections_need_room(self):
        limits = FallbackLimits(bottom_threshold_pt=10)
        sections = [OtherSection("Languages", "English"), OtherSection("Hobbies", "Chess")]

        outcome = render(ResumeModel(other_sections=sections), limits)

        assert outcome.warnings == [
            "Fallback preview truncated: no room for sections Languages, Hobbies"
        ]

    def test_other_section_shortened(self):
        model = ResumeModel(other_sections=[OtherSection("Publications", "word " * 100)])

        outcome = render(model)

        assert outcome.warnings == ["Fallback preview truncated: section 'Publications' shortened"]
        assert "PUBLICATIONS" in extract_pdf_text(outcome.document)

    def test_overflow_is_reported(self):
        groups = [SkillGroup(f"Group {i}", ["a", "b"]) for i in range(80)]

        outcome = render(ResumeModel(skills=groups))

        assert page_count(outcome.document) == 1
        assert outcome.warnings[-1].endswith("lines did not fit on the page")


@pytest.mark.integration
class TestRenderNotice:
    """Tests for the error notice document."""

    def test_lists_errors(self):
        document = render_notice(["Missing \\end{document}", "1 unmatched opening brace"])
        text = extract_pdf_text(document)

        assert "Compilation failed" in text
        assert "Missing \\end{document}" in text
        assert "1 unmatched opening brace" in text

    def test_without_errors(self):
        assert "Unknown error" in extract_pdf_text(render_notice([]))
