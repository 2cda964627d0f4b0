"""
Markup validation.

Structural sanity checks run before any typesetting attempt. Every check runs
and every violation is collected; nothing short-circuits.
"""

import re
from dataclasses import dataclass, field
from typing import List

from resumepilot.contexts.compilation.exceptions import MarkupValidationError
from resumepilot.utils.text_processing import count_unescaped, strip_latex_comments

DOCUMENTCLASS_PATTERN = re.compile(r"\\documentclass(?![A-Za-z@])")
BEGIN_DOCUMENT_PATTERN = re.compile(r"\\begin\s*\{document\}")
END_DOCUMENT_PATTERN = re.compile(r"\\end\s*\{document\}")


@dataclass
class ValidationOutcome:
    """
    Result of markup validation.

    Attributes:
        ok: Whether every check passed
        errors: Human-readable violations, in check order
    """

    ok: bool
    errors: List[str] = field(default_factory=list)

    def raise_for_errors(self) -> None:
        """Raise MarkupValidationError if any check failed."""
        if not self.ok:
            raise MarkupValidationError(self.errors)


def validate(source: str) -> ValidationOutcome:
    """
    Check markup for the structure every typesetter needs.

    Checks (all run):
        1. \\documentclass declaration present
        2. \\begin{document} present
        3. \\end{document} present
        4. Unescaped { and } counts match (comments ignored); the mismatch is reported numerically

    Args:
        source: Markup text

    Returns:
        ValidationOutcome with all violations

    Example:
        >>> validate("\\\\documentclass{article}\\\\begin{document}x").errors
        ['Missing \\\\end{document}']
    """
    text = strip_latex_comments(source)
    errors = []

    if not DOCUMENTCLASS_PATTERN.search(text):
        errors.append("Missing \\documentclass declaration")
    if not BEGIN_DOCUMENT_PATTERN.search(text):
        errors.append("Missing \\begin{document}")
    if not END_DOCUMENT_PATTERN.search(text):
        errors.append("Missing \\end{document}")

    opening = count_unescaped(text, "{")
    closing = count_unescaped(text, "}")
    if opening != closing:
        side = "opening" if opening > closing else "closing"
        errors.append(
            f"Mismatched braces: {abs(opening - closing)} unmatched {side} "
            f"({opening} '{{' vs {closing} '}}')"
        )

    return ValidationOutcome(ok=not errors, errors=errors)
