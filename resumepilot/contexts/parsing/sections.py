"""
Section segmentation and classification.

Segmentation is dialect-agnostic and runs once: the document body is split
into (title, body) pairs at heading macros. Classification is a second pass
that maps each title to a resume category through a synonym table.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from resumepilot.contexts.parsing.patterns import (
    BEGIN_DOCUMENT,
    END_DOCUMENT,
    SECTION_CATEGORIES,
    SECTION_COMMANDS,
    SUBSECTION_COMMANDS,
)
from resumepilot.utils.latex_parsing_tools import CommandCall, find_command_calls, to_plaintext


@dataclass
class RawSection:
    """
    One heading and the markup up to the next heading.

    Attributes:
        title: Plaintext heading
        body: Raw markup of the section
        command: Heading macro that opened it (e.g. "section")
    """

    title: str
    body: str
    command: str = "section"


def split_document(text: str) -> Tuple[str, str]:
    """
    Split markup into (preamble, body).

    The body runs from after \\begin{document} to \\end{document}. Without a
    \\begin{document} marker the whole text is treated as body.
    """
    begin = re.search(BEGIN_DOCUMENT, text)
    if not begin:
        preamble, body = "", text
    else:
        preamble, body = text[:begin.start()], text[begin.end():]

    end = re.search(END_DOCUMENT, body)
    if end:
        body = body[:end.start()]
    return preamble, body


def document_body(text: str) -> str:
    return split_document(text)[1]


def _find_headings(body: str, commands: Sequence[str]) -> List[CommandCall]:
    headings = []
    for command in commands:
        headings.extend(find_command_calls(body, command, 1))
    return sorted(headings, key=lambda call: call.start)


def _headings(body: str) -> List[CommandCall]:
    """Section-level headings, or subsection headings if there are none."""
    return _find_headings(body, SECTION_COMMANDS) or _find_headings(body, SUBSECTION_COMMANDS)


def header_region(text: str) -> str:
    """Body markup before the first heading (where name, title and contact live)."""
    body = document_body(text)
    headings = _headings(body)
    return body[:headings[0].start] if headings else body


def segment(text: str) -> List[RawSection]:
    """
    Split a document into sections.

    Args:
        text: Markup (comments already removed)

    Returns:
        Sections in document order; empty if the document has no headings

    Example:
        >>> [s.title for s in segment("\\\\section{Work}a\\\\section*{Skills}b")]
        ['Work', 'Skills']
    """
    body = document_body(text)
    headings = _headings(body)

    sections = []
    for i, heading in enumerate(headings):
        end = headings[i + 1].start if i + 1 < len(headings) else len(body)
        sections.append(
            RawSection(
                title=to_plaintext(heading.args[0]),
                body=body[heading.end:end].strip(),
                command=heading.name,
            )
        )
    return sections


def classify(title: str) -> Optional[str]:
    """
    Map a section title to a resume category.

    Synonyms match as case-insensitive substrings; categories are tried in
    SECTION_CATEGORIES order and the first hit wins.

    Example:
        >>> classify("ProfessionalExperience"), classify("Certifications")
        ('experience', None)
    """
    normalized = title.lower()
    for category, synonyms in SECTION_CATEGORIES.items():
        for synonym in synonyms:
            if synonym in normalized:
                return category
    return None
