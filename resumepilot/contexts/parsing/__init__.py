"""
Parsing Context

Responsibilities:
- Recovers resume structure from markup of any common dialect (Jake-style, moderncv, plain article)
- Extracts header fields (name, title, contact) through ordered extractor lists
- Segments documents into sections and classifies them by title
- Falls back to line heuristics when no structured macro matches

Owns: ResumeModel and everything that populates it
Never: Compiles or renders documents
"""

from resumepilot.contexts.parsing.parser import parse
from resumepilot.contexts.parsing.resume_model import (
    ContactInfo,
    Entry,
    OtherSection,
    ResumeModel,
    SkillGroup,
)

__all__ = [
    # Entry point
    "parse",
    # Data structure classes
    "ResumeModel",
    "ContactInfo",
    "Entry",
    "SkillGroup",
    "OtherSection",
]
