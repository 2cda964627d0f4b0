"""
Fallback document renderer.

Draws a one-page approximate preview of a ResumeModel when no typesetting
engine produced a document. Rendering is deterministic (same model, same
bytes) and never fails: an empty model still yields a valid page.

The page budget is fixed:

    Section         Shown
    header          name (or "Resume Preview"), title, contact lines
    summary         wrapped
    experience      first 3 entries
    education       first 2 entries
    skills          every group, wrapped
    projects        first 3, descriptions cut at 200 characters
    achievements    first 3, only while above the bottom threshold
    other sections  while above the bottom threshold, 200 characters / 3 lines each

Anything dropped by the budget is logged at WARNING and reported in
RenderOutcome.warnings.
"""

import io
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from resumepilot.contexts.parsing.resume_model import Entry, ResumeModel
from resumepilot.contexts.rendering.logger import _log_debug, log_render_result, log_truncation
from resumepilot.utils.settings import FallbackLimits
from resumepilot.utils.text_processing import truncate_display

DEFAULT_HEADER = "Resume Preview"
NOTICE_HEADER = "Compilation failed"
TEXT_ENCODING = "cp1252"


@dataclass(frozen=True)
class PreviewLayout:
    """Fonts, sizes and spacing of the preview page (points)."""

    PAGE_SIZE: tuple = letter
    MARGIN_X: float = 20 * mm
    MARGIN_TOP: float = 20 * mm
    MARGIN_BOTTOM: float = 15 * mm

    FONT: str = "Helvetica"
    FONT_BOLD: str = "Helvetica-Bold"

    NAME_SIZE: int = 20
    TITLE_SIZE: int = 14
    HEADING_SIZE: int = 12
    ENTRY_SIZE: int = 10
    BODY_SIZE: int = 9
    CONTACT_SIZE: int = 10

    LINE_GAP: float = 1.5  # leading as a multiple of the font size
    SECTION_GAP: float = 5 * mm
    ENTRY_GAP: float = 3 * mm


LAYOUT = PreviewLayout()


@dataclass
class RenderOutcome:
    """
    Rendered preview.

    Attributes:
        document: PDF bytes
        warnings: One message per truncation applied by the page budget
    """

    document: bytes
    warnings: List[str] = field(default_factory=list)


def sanitize(text: str) -> str:
    """
    Reduce text to what the built-in PDF fonts can show.

    Example:
        >>> sanitize("Café – 10→20")
        'Café – 10?20'
    """
    return text.encode(TEXT_ENCODING, "replace").decode(TEXT_ENCODING)


class _PageWriter:
    """
    Top-down text cursor over a single canvas page.

    `y` is the distance from the top edge; lines that would cross the bottom
    margin are not drawn and are counted in `overflow_lines`.
    """

    def __init__(self, pdf: canvas.Canvas):
        self.pdf = pdf
        self.width, self.height = LAYOUT.PAGE_SIZE
        self.text_width = self.width - 2 * LAYOUT.MARGIN_X
        self.y = LAYOUT.MARGIN_TOP
        self.overflow_lines = 0

    def has_room(self, threshold: float) -> bool:
        return self.y < threshold

    def gap(self, amount: float) -> None:
        self.y += amount

    def line(self, text: str, size: int, bold: bool = False) -> None:
        font = LAYOUT.FONT_BOLD if bold else LAYOUT.FONT
        leading = size * LAYOUT.LINE_GAP
        if self.y + size > self.height - LAYOUT.MARGIN_BOTTOM:
            self.overflow_lines += 1
            return
        self.y += size
        self.pdf.setFont(font, size)
        self.pdf.drawString(LAYOUT.MARGIN_X, self.height - self.y, sanitize(text))
        self.y += leading - size

    def wrapped(self, text: str, size: int, bold: bool = False, max_lines: int = None) -> int:
        """Draw text wrapped to the page width; returns the number of lines it needed."""
        font = LAYOUT.FONT_BOLD if bold else LAYOUT.FONT
        lines = simpleSplit(sanitize(text), font, size, self.text_width)
        for text_line in lines[:max_lines]:
            self.line(text_line, size, bold)
        return len(lines)

    def heading(self, text: str) -> None:
        self.gap(LAYOUT.ENTRY_GAP)
        self.line(text.upper(), LAYOUT.HEADING_SIZE, bold=True)
        self.gap(LAYOUT.ENTRY_GAP / 2)


def _join(parts: Sequence[Optional[str]], separator: str) -> str:
    return separator.join(part for part in parts if part)


class _PreviewBuilder:
    """Draws one model under one page budget and records every truncation."""

    def __init__(self, pdf: canvas.Canvas, limits: FallbackLimits):
        self.page = _PageWriter(pdf)
        self.limits = limits
        self.warnings: List[str] = []

    def truncated(self, message: str) -> None:
        log_truncation(message)
        self.warnings.append(f"Fallback preview truncated: {message}")

    def capped(self, entries: List[Entry], cap: int, label: str) -> List[Entry]:
        if len(entries) > cap:
            self.truncated(f"showing {cap} of {len(entries)} {label} entries")
        return entries[:cap]

    def description(self, text: str, label: str) -> str:
        limit = self.limits.description_chars
        if len(text) > limit:
            self.truncated(f"{label} description cut to {limit} characters")
        return truncate_display(text, limit)

    # Sections

    def header(self, model: ResumeModel) -> None:
        self.page.line(model.name or DEFAULT_HEADER, LAYOUT.NAME_SIZE, bold=True)
        if model.title:
            self.page.line(model.title, LAYOUT.TITLE_SIZE)

        contact = model.contact
        labelled = [
            ("Email", contact.email),
            ("Phone", contact.phone),
            ("Location", contact.address),
            ("LinkedIn", contact.linkedin),
            ("GitHub", contact.github),
        ]
        for label, value in labelled:
            if value:
                self.page.line(f"{label}: {value}", LAYOUT.CONTACT_SIZE)

    def summary(self, text: str) -> None:
        self.page.heading("Professional Summary")
        self.page.wrapped(text, LAYOUT.BODY_SIZE)

    def experience(self, entries: List[Entry]) -> None:
        self.page.heading("Professional Experience")
        for entry in self.capped(entries, self.limits.experience, "experience"):
            self.page.line(entry.position or entry.company, LAYOUT.ENTRY_SIZE, bold=True)
            details = _join([_join([entry.company, entry.location], ", "), entry.period], " | ")
            if details:
                self.page.wrapped(details, LAYOUT.BODY_SIZE)
            self.page.gap(LAYOUT.ENTRY_GAP)

    def education(self, entries: List[Entry]) -> None:
        self.page.heading("Education")
        for entry in self.capped(entries, self.limits.education, "education"):
            self.page.line(entry.degree or entry.institution, LAYOUT.ENTRY_SIZE, bold=True)
            # First detail line carries the grade (\cventry grade argument, GPA line)
            grade = entry.bullet_points[0] if entry.bullet_points else None
            if entry.degree:
                details = _join([entry.institution, entry.location, entry.period, grade], " | ")
            else:
                details = _join([entry.period, grade], " | ")
            if details:
                self.page.wrapped(details, LAYOUT.BODY_SIZE)
            self.page.gap(LAYOUT.ENTRY_GAP)

    def skills(self, model: ResumeModel) -> None:
        self.page.heading("Technical Skills")
        for group in model.skills:
            self.page.wrapped(f"{group.category}: {', '.join(group.items)}", LAYOUT.BODY_SIZE)
            self.page.gap(2)

    def described_entries(self, title: str, entries: List[Entry], cap: int, label: str) -> None:
        self.page.heading(title)
        for entry in self.capped(entries, cap, label):
            heading = _join([entry.name, entry.secondary_label], " | ")
            self.page.line(heading, LAYOUT.ENTRY_SIZE, bold=True)
            if entry.description:
                self.page.wrapped(self.description(entry.description, label), LAYOUT.BODY_SIZE)
            self.page.gap(LAYOUT.ENTRY_GAP)

    def other_sections(self, model: ResumeModel) -> None:
        threshold = self.limits.bottom_threshold_pt
        for i, section in enumerate(model.other_sections):
            if not self.page.has_room(threshold):
                omitted = [other.title for other in model.other_sections[i:]]
                self.truncated(f"no room for sections {', '.join(omitted)}")
                return
            if not section.raw_text:
                continue
            self.page.heading(section.title)
            text = section.raw_text[: self.limits.extra_section_chars]
            max_lines = self.limits.extra_section_lines
            needed = self.page.wrapped(text, LAYOUT.BODY_SIZE, max_lines=max_lines)
            if len(section.raw_text) > len(text) or needed > max_lines:
                self.truncated(f"section '{section.title}' shortened")

    def build(self, model: ResumeModel) -> None:
        self.header(model)
        self.page.gap(LAYOUT.SECTION_GAP)

        if model.summary:
            self.summary(model.summary)
        if model.experience:
            self.experience(model.experience)
        if model.education:
            self.education(model.education)
        if model.skills:
            self.skills(model)
        if model.projects:
            self.described_entries("Projects", model.projects, self.limits.projects, "project")
        if model.achievements:
            if self.page.has_room(self.limits.bottom_threshold_pt):
                self.described_entries(
                    "Achievements", model.achievements, self.limits.achievements, "achievement"
                )
            else:
                self.truncated(f"no room for {len(model.achievements)} achievement entries")
        if model.other_sections:
            self.other_sections(model)

        if self.page.overflow_lines:
            self.truncated(f"{self.page.overflow_lines} lines did not fit on the page")


def _new_canvas(buffer: io.BytesIO, title: str) -> canvas.Canvas:
    # invariant=1 fixes timestamps and document ids so output is byte-stable
    pdf = canvas.Canvas(buffer, pagesize=LAYOUT.PAGE_SIZE, invariant=1)
    pdf.setTitle(sanitize(title))
    pdf.setCreator("resumepilot fallback renderer")
    return pdf


def render(model: ResumeModel, limits: FallbackLimits = None) -> RenderOutcome:
    """
    Render a ResumeModel to a one-page PDF.

    Args:
        model: Parsed resume (may be empty)
        limits: Page budget (defaults to FallbackLimits())

    Returns:
        RenderOutcome with the PDF bytes and truncation warnings

    Example:
        >>> outcome = render(ResumeModel())
        >>> outcome.document[:5]
        b'%PDF-'
    """
    limits = limits or FallbackLimits()
    buffer = io.BytesIO()
    pdf = _new_canvas(buffer, model.name or DEFAULT_HEADER)

    builder = _PreviewBuilder(pdf, limits)
    builder.build(model)
    _log_debug(f"  cursor finished at {builder.page.y:.0f}pt")

    pdf.showPage()
    pdf.save()

    outcome = RenderOutcome(document=buffer.getvalue(), warnings=builder.warnings)
    log_render_result(outcome, model.name)
    return outcome


def render_notice(errors: Sequence[str]) -> bytes:
    """
    Render a one-page notice listing why no document could be compiled.

    Args:
        errors: Messages to list (e.g. validation errors)

    Returns:
        PDF bytes
    """
    buffer = io.BytesIO()
    pdf = _new_canvas(buffer, NOTICE_HEADER)
    errors = list(errors or []) or ["Unknown error"]
    page = _PageWriter(pdf)

    page.line(NOTICE_HEADER, LAYOUT.NAME_SIZE, bold=True)
    page.gap(LAYOUT.SECTION_GAP)
    page.wrapped("The resume markup could not be compiled:", LAYOUT.ENTRY_SIZE)
    page.gap(LAYOUT.ENTRY_GAP)
    for error in errors:
        page.wrapped(f"- {error}", LAYOUT.BODY_SIZE)

    pdf.showPage()
    pdf.save()
    _log_debug(f"Rendered error notice with {len(errors)} entries")
    return buffer.getvalue()
