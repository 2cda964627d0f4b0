"""
LaTeX Pattern Constants

Pattern strings and lookup tables used by the compatibility simplifier.
Organized into frozen dataclasses by category for immutability and clear grouping.
"""

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class DocumentPatterns:
    """
    Document-level patterns.

    Used to split the preamble from the body and to find the document class.
    """
    DOCUMENTCLASS: str = r'\\documentclass\s*(?:\[[^\]]*\])?\s*\{([^}]*)\}'
    BEGIN_DOCUMENT: str = r'\\begin\s*\{document\}'


@dataclass(frozen=True)
class PackagePatterns:
    """
    Package loading patterns.

    Group 1 holds the command, group 2 the options (with brackets), group 3 the
    comma-separated package list.
    """
    USEPACKAGE: str = r'\\(usepackage|RequirePackage)\s*(\[[^\]]*\])?\s*\{([^}]*)\}'
    INPUT_GLYPHTOUNICODE: str = r'\\input\s*\{glyphtounicode(?:\.tex)?\}'


@dataclass(frozen=True)
class LayoutPatterns:
    """
    Page layout adjustments that remote engines frequently reject.

    Margin deltas are the \\addtolength calls Jake-style templates use to widen
    the text block; the rest are fancyhdr and list-label overrides.
    """
    MARGIN_DELTA: str = (
        r'\\addtolength\s*\{?\s*\\(?:oddsidemargin|evensidemargin|textwidth|topmargin|textheight)'
        r'\s*\}?\s*\{[^{}]*\}'
    )
    PAGESTYLE_FANCY: str = r'\\pagestyle\s*\{fancy\}'
    PAGESTYLE_EMPTY: str = r'\pagestyle{empty}'
    FANCY_CLEAR: str = r'\\fancy(?:hf|head|foot)\s*\{\s*\}'
    # Matches up to the opening brace of the new label definition
    LABELITEM_OVERRIDE: str = r'\\renewcommand\s*\{?\s*\\labelitem(?:i|ii|iii|iv)(?![A-Za-z@])\s*\}?\s*\{'


@dataclass(frozen=True)
class GlyphPatterns:
    """
    Icon macro patterns.

    Use GLYPH_MACRO with .format(name=...) to match one macro (with optional star
    and empty argument group).
    """
    GLYPH_MACRO: str = r'\\{name}(?![A-Za-z@])\*?(?:\{{\s*\}})?'
    ANY_FONTAWESOME: str = r'\\fa[A-Z][A-Za-z]*(?![A-Za-z@])\*?(?:\{\s*\})?'


# Packages remote engines do not reliably provide
DENIED_PACKAGES: Tuple[str, ...] = ("fontawesome5", "fontawesome", "marvosym")

# Classes that do not configure page geometry themselves
BASELINE_GEOMETRY_CLASSES: Tuple[str, ...] = ("article", "extarticle", "report")
BASELINE_GEOMETRY: str = r'\usepackage[margin=0.75in]{geometry}'

FONTAWESOME_GLYPHS: Dict[str, str] = {
    "faPhone": "Tel:",
    "faPhoneAlt": "Tel:",
    "faPhoneSquare": "Tel:",
    "faMobile": "Tel:",
    "faMobileAlt": "Tel:",
    "faEnvelope": "Email:",
    "faEnvelopeO": "Email:",
    "faEnvelopeSquare": "Email:",
    "faAt": "Email:",
    "faLinkedin": "LinkedIn:",
    "faLinkedinIn": "LinkedIn:",
    "faLinkedinSquare": "LinkedIn:",
    "faGithub": "GitHub:",
    "faGithubAlt": "GitHub:",
    "faGithubSquare": "GitHub:",
    "faGlobe": "Web:",
    "faMapMarker": "Location:",
    "faMapMarkerAlt": "Location:",
}

# Only applied when the document loads marvosym (names are generic)
MARVOSYM_GLYPHS: Dict[str, str] = {
    "Mobilefone": "Tel:",
    "Telefon": "Tel:",
    "Letter": "Email:",
    "Email": "Email:",
}
