"""
Resume model data structures.

Canonical representation reconstructed from resume markup. Every field is
optional: an empty value means "not found", never "empty by design".

Entries are deliberately generic (two labels, a period, a location and
bullets) so that experience, education, projects and achievements share one
shape:

    Category      primary_label   secondary_label
    experience    position        company
    education     degree          institution
    projects      name            tech stack
    achievements  title           issuer / context
"""

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass
class ContactInfo:
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None

    def items(self) -> List[Tuple[str, str]]:
        """(field, value) pairs for the fields that were found, in display order."""
        return [(name, value) for name, value in asdict(self).items() if value]

    def is_empty(self) -> bool:
        return not self.items()


@dataclass
class Entry:
    """
    One dated item of a resume section.

    Attributes:
        primary_label: Role, degree or project name
        secondary_label: Organisation, institution or tech stack
        period: Date range as written ("Aug. 2018 – May 2021")
        location: Place as written
        bullet_points: Detail lines in document order
    """

    primary_label: str = ""
    secondary_label: str = ""
    period: str = ""
    location: str = ""
    bullet_points: List[str] = field(default_factory=list)

    # Category-specific aliases

    @property
    def position(self) -> str:
        return self.primary_label

    @property
    def company(self) -> str:
        return self.secondary_label

    @property
    def degree(self) -> str:
        return self.primary_label

    @property
    def institution(self) -> str:
        return self.secondary_label

    @property
    def name(self) -> str:
        return self.primary_label

    @property
    def description(self) -> str:
        return " ".join(self.bullet_points)

    def is_empty(self) -> bool:
        return not (
            self.primary_label
            or self.secondary_label
            or self.period
            or self.location
            or self.bullet_points
        )


@dataclass
class SkillGroup:
    category: str
    items: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.items


@dataclass
class OtherSection:
    """A section no category claimed, kept as plain text."""

    title: str
    raw_text: str = ""


@dataclass
class ResumeModel:
    name: Optional[str] = None
    title: Optional[str] = None
    contact: ContactInfo = field(default_factory=ContactInfo)
    summary: Optional[str] = None
    experience: List[Entry] = field(default_factory=list)
    education: List[Entry] = field(default_factory=list)
    skills: List[SkillGroup] = field(default_factory=list)
    projects: List[Entry] = field(default_factory=list)
    achievements: List[Entry] = field(default_factory=list)
    other_sections: List[OtherSection] = field(default_factory=list)

    def is_empty(self) -> bool:
        """True when nothing at all was recovered from the markup."""
        return not (
            self.name
            or self.title
            or self.summary
            or not self.contact.is_empty()
            or self.experience
            or self.education
            or self.skills
            or self.projects
            or self.achievements
            or self.other_sections
        )

    def to_dict(self) -> Dict:
        """Plain-dict form for serialization (YAML/JSON)."""
        return asdict(self)
