"""
Universal resume parser.

Best-effort extraction of a ResumeModel from arbitrary resume markup
(Jake-style templates, moderncv, plain article documents). Never raises on
odd input: anything unrecognised is simply left empty.

Pipeline:
    1. Strip comments
    2. Header fields (name, title, contact) via ordered extractor lists
    3. Segment the body at headings and classify each title
    4. Per-category entry parsing; unclassified sections kept as plain text
"""

from collections import defaultdict
from typing import Dict, List

from resumepilot.contexts.parsing.entries import (
    parse_achievements,
    parse_education,
    parse_experience,
    parse_projects,
    parse_skills,
)
from resumepilot.contexts.parsing.extractors import extract_contact, extract_name, extract_title
from resumepilot.contexts.parsing.logger import _log_debug, log_parse_result
from resumepilot.contexts.parsing.resume_model import OtherSection, ResumeModel
from resumepilot.contexts.parsing.sections import RawSection, classify, segment
from resumepilot.utils.latex_parsing_tools import to_plaintext
from resumepilot.utils.text_processing import strip_latex_comments

ENTRY_PARSERS = {
    "experience": parse_experience,
    "education": parse_education,
    "projects": parse_projects,
    "achievements": parse_achievements,
    "skills": parse_skills,
}


def _group_by_category(sections: List[RawSection]):
    """Split sections into {category: [sections]} and the unclassified rest."""
    grouped: Dict[str, List[RawSection]] = defaultdict(list)
    unclassified = []
    for section in sections:
        category = classify(section.title)
        _log_debug(f"  section '{section.title}' -> {category or 'other'}")
        if category:
            grouped[category].append(section)
        else:
            unclassified.append(section)
    return grouped, unclassified


def parse(source: str) -> ResumeModel:
    """
    Parse resume markup into a ResumeModel.

    Sections of the same category are concatenated in document order
    ("Work Experience" and "Volunteer Work" both feed experience). The
    summary is the plaintext of the first non-empty summary section.

    Args:
        source: Resume markup

    Returns:
        ResumeModel; fields that could not be recovered are None or empty

    Example:
        >>> model = parse("\\\\begin{document}\\\\author{Jane Doe}\\\\end{document}")
        >>> model.name
        'Jane Doe'
    """
    text = strip_latex_comments(source)

    model = ResumeModel(
        name=extract_name(text),
        title=extract_title(text),
        contact=extract_contact(text),
    )

    grouped, unclassified = _group_by_category(segment(text))

    for section in grouped.get("summary", []):
        summary = to_plaintext(section.body)
        if summary:
            model.summary = summary
            break

    for category, parse_entries in ENTRY_PARSERS.items():
        for section in grouped.get(category, []):
            getattr(model, category).extend(parse_entries(section.body, section.title))

    model.other_sections = [
        OtherSection(title=section.title, raw_text=to_plaintext(section.body))
        for section in unclassified
        if section.title
    ]

    log_parse_result(model)
    return model
