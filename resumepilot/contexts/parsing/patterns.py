"""
Reusable patterns and vocabularies for resume markup parsing.

Pattern classes follow the convention from compilation/latex_patterns.py:
- Dataclasses with frozen=True for immutability
- Class-level constants for patterns
- Vocabularies and tables as module-level constants
"""

from dataclasses import dataclass

# =============================================================================
# HEADER PATTERNS (name, title)
# =============================================================================


@dataclass(frozen=True)
class NamePatterns:
    """
    Layout forms that typically hold the candidate's name.

    Group 1 is the name. Applied to the document body only, in the order
    listed by extractors.NAME_EXTRACTORS.
    """

    # Article class: {\LARGE\textbf{Jane Doe}}
    LARGE_BOLD: str = r"\\LARGE\s*\\textbf\s*\{([^{}]+)\}"
    # Custom templates: \centerline{\huge \bfseries Jane Doe}
    CENTERLINE_HUGE: str = r"\\centerline\s*\{\s*\\huge\s*\\(?:bfseries|scshape)\s*([^{}]+)\}"
    # Jake-style: \begin{center} \textbf{\Huge \scshape Jane Doe}
    CENTER_HUGE: str = r"\\begin\{center\}[\s\S]*?\{\s*\\(?:Huge|huge)\s*\\(?:scshape|bfseries)\s*([^{}]+)\}"
    LARGE_TEXTBF: str = r"\\large\s*\\textbf\s*\{([^{}]+)\}"
    # Bare size switch: \LARGE Jane Doe
    SIZED_TEXT: str = r"\\(?:LARGE|huge|Huge)(?![A-Za-z@])\s*(?:\\(?:scshape|bfseries)(?![A-Za-z@])\s*)?([^\\{}\n]+)"
    CENTER_ENV: str = r"\\begin\{center\}([\s\S]*?)\\end\{center\}"
    SIZED_GROUP: str = r"\{\s*\\(?:Huge|huge|LARGE|Large)\s*(?:\\(?:scshape|bfseries)\s*)?([^{}\\]+)\}"
    CENTERLINE_PAIR: str = r"\\centerline\s*\{[^}]*?([A-Z][a-z]+\s+[A-Z][a-z]+)[^}]*\}"
    # Heuristic: "Jane Doe" or "Jane Q. Doe" at the start of a line
    CAPITALIZED_PAIR: str = r"^([A-Z][a-z]+(?:\s+[A-Z]\.)?\s+[A-Z][a-z]+)"


NAME_HEURISTIC_LINES = 15
MAX_NAME_LENGTH = 60

# Titles that describe the document rather than the candidate
DOCUMENT_TITLES = ("resume", "résumé", "cv", "curriculum vitae")

# =============================================================================
# CONTACT PATTERNS
# =============================================================================


@dataclass(frozen=True)
class ContactPatterns:
    """Free-text contact patterns; group 1 is the value."""

    MAILTO: str = r"\\href\s*\{\s*mailto:([^}\s]+)\s*\}"
    EMAIL_LABEL: str = r"Email:\s*([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})"
    EMAIL: str = r"([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})"

    GLYPH_PHONE: str = r"\\(?:faPhone|faMobile|Mobilefone|Telefon)\*?(?![A-Za-z@])(?:\{\})?\\?\s*([+\d][\d\s\-().]{6,}\d)"
    PHONE_LABEL: str = r"(?:Tel|Phone|Mobile):\s*([+\d][\d\s\-().]{6,}\d)"
    INTERNATIONAL_PHONE: str = r"(\+\d{1,3}[\s-]?\d{4,5}[\s-]?\d{5,6})"
    PHONE: str = r"(\+?1?[-.\s]?\(?[0-9]{3}\)?[-.\s]?[0-9]{3}[-.\s]?[0-9]{4})(?!\d)"

    LINKEDIN_URL: str = r"linkedin\.com/in/([A-Za-z0-9_\-%.]+)"
    GITHUB_URL: str = r"github\.com/([A-Za-z0-9_\-.]+)"


MIN_PHONE_DIGITS = 7

# =============================================================================
# SECTION PATTERNS
# =============================================================================

# Heading macros, by level. Subsection headings are used only when a
# document has no section-level heading at all.
SECTION_COMMANDS = ("section", "cvsection")
SUBSECTION_COMMANDS = ("subsection",)

END_DOCUMENT = r"\\end\s*\{document\}"
BEGIN_DOCUMENT = r"\\begin\s*\{document\}"

# Category -> title synonyms, matched as case-insensitive substrings.
# Checked in this order; the first category with a matching synonym wins.
SECTION_CATEGORIES = {
    "projects": ("project",),
    "experience": ("experience", "work", "employment"),
    "education": ("education", "academic"),
    "skills": ("skill", "technical", "competenc"),
    "achievements": ("achievement", "award", "honor", "honour"),
    "summary": ("summary", "objective", "profile"),
}

# =============================================================================
# ENTRY HEURISTICS
# =============================================================================

YEAR = r"(?<!\d)(?:19|20)\d{2}(?!\d)"
PERIOD_WORDS = r"\b(?:Present|Current|Now|Ongoing)\b"

ROLE_VOCABULARY = (
    r"\b(?:Engineer|Developer|Manager|Analyst|Designer|Intern|Organizer|Participant|"
    r"Scientist|Researcher|Consultant|Architect|Lead|Director|Assistant|Specialist|"
    r"Administrator|Coordinator|Officer|Founder|Associate|Technician|Teacher|Tutor)s?\b"
)
DEGREE_VOCABULARY = (
    r"\b(?:Bachelor|Master|PhD|Doctorate|Degree|Diploma|MBA|BSc|MSc)\b|\bPh\.D|\b[BM]\.(?:S|A|Sc|Tech)\.?"
)
INSTITUTION_VOCABULARY = r"\b(?:University|College|Institute|School|Academy|Polytechnic)\b"
TITLE_VOCABULARY = r"\b(?:Engineer|Developer|Manager|Analyst|Designer)"

MIN_PROJECT_LINE_LENGTH = 10
