"""
Header field extraction: name, title and contact details.

Each field has an ordered list of extractor functions, most specific first.
An extractor takes the (comment-free) markup and returns a value or None;
first_match() returns the first non-empty value. Later extractors are never
consulted once one matches, even if they would find "better" text.
"""

import re
from typing import Callable, List, Optional, Sequence

from resumepilot.contexts.parsing.logger import _log_info
from resumepilot.contexts.parsing.patterns import (
    DOCUMENT_TITLES,
    MAX_NAME_LENGTH,
    MIN_PHONE_DIGITS,
    NAME_HEURISTIC_LINES,
    TITLE_VOCABULARY,
    ContactPatterns,
    NamePatterns,
)
from resumepilot.contexts.parsing.resume_model import ContactInfo
from resumepilot.contexts.parsing.sections import document_body, header_region
from resumepilot.utils.latex_parsing_tools import find_command_calls, to_plaintext

Extractor = Callable[[str], Optional[str]]


def first_match(extractors: Sequence[Extractor], text: str) -> Optional[str]:
    """
    Run extractors in order and return the first non-empty result.

    Example:
        >>> first_match([lambda t: None, lambda t: "second", lambda t: "third"], "")
        'second'
    """
    for extractor in extractors:
        value = extractor(text)
        if value:
            return value
    return None


# =============================================================================
# EXTRACTOR FACTORIES
# =============================================================================


def command_argument(command: str, num_params: int = 1, joiner: str = " ") -> Extractor:
    """Extractor for the plaintext of a macro's arguments (e.g. \\name{Jane}{Doe})."""

    def extract(text: str) -> Optional[str]:
        for call in find_command_calls(text, command, num_params, min_params=1):
            parts = [to_plaintext(arg) for arg in call.args]
            value = joiner.join(part for part in parts if part)
            if value:
                return value
        return None

    extract.__name__ = f"command_{command}"
    return extract


def regex_group(pattern: str, scope: Callable[[str], str] = None, flags: int = 0) -> Extractor:
    """Extractor for group 1 of a pattern, optionally searched within a sub-region."""
    compiled = re.compile(pattern, flags)

    def extract(text: str) -> Optional[str]:
        match = compiled.search(scope(text) if scope else text)
        return match.group(1).strip() if match else None

    extract.__name__ = f"regex_{pattern[:20]}"
    return extract


def cleaned(extractor: Extractor, cleaner: Callable[[str], Optional[str]]) -> Extractor:
    """Wrap an extractor so that its raw result is normalized (None rejects it)."""

    def extract(text: str) -> Optional[str]:
        value = extractor(text)
        return cleaner(value) if value else None

    extract.__name__ = getattr(extractor, "__name__", "extractor")
    return extract


# =============================================================================
# NAME
# =============================================================================


def _clean_name(raw: str) -> Optional[str]:
    name = to_plaintext(raw).strip(" ,;|")
    if not name or len(name) > MAX_NAME_LENGTH or not re.search(r"[A-Za-z]", name):
        return None
    return name


def _name_in_center_environment(text: str) -> Optional[str]:
    """Large or bold group inside the first center environment."""
    center = re.search(NamePatterns.CENTER_ENV, document_body(text))
    if not center:
        return None
    match = re.search(NamePatterns.SIZED_GROUP, center.group(1))
    return match.group(1) if match else None


def _capitalized_pair_heuristic(text: str) -> Optional[str]:
    """Last resort: a "First Last" pair opening one of the first lines of the body."""
    lines = [line for line in document_body(text).splitlines() if line.strip()]
    for line in lines[:NAME_HEURISTIC_LINES]:
        match = re.match(NamePatterns.CAPITALIZED_PAIR, to_plaintext(line))
        if match:
            _log_info(f"Name taken from leading capitalized words: '{match.group(1)}'")
            return match.group(1)
    return None


NAME_EXTRACTORS: List[Extractor] = [
    cleaned(extractor, _clean_name)
    for extractor in (
        # Explicit name macros (moderncv \name{First}{Last}, article \author)
        command_argument("name", num_params=2),
        command_argument("author"),
        # Large bold centered text, per dialect
        regex_group(NamePatterns.LARGE_BOLD, scope=document_body),
        regex_group(NamePatterns.CENTERLINE_HUGE, scope=document_body),
        regex_group(NamePatterns.CENTER_HUGE, scope=document_body),
        regex_group(NamePatterns.LARGE_TEXTBF, scope=document_body),
        regex_group(NamePatterns.SIZED_TEXT, scope=document_body),
        _name_in_center_environment,
        regex_group(NamePatterns.CENTERLINE_PAIR, scope=document_body),
        _capitalized_pair_heuristic,
    )
]


def extract_name(text: str) -> Optional[str]:
    return first_match(NAME_EXTRACTORS, text)


# =============================================================================
# TITLE
# =============================================================================


def _clean_title(raw: str) -> Optional[str]:
    title = to_plaintext(raw)
    if not title or title.lower() in DOCUMENT_TITLES:
        return None
    return title


def _role_styled_text(command: str) -> Extractor:
    """Italic/emphasized header text that names a role (\\textit{Data Engineer})."""

    def extract(text: str) -> Optional[str]:
        for call in find_command_calls(header_region(text), command, 1):
            value = to_plaintext(call.args[0])
            if re.search(TITLE_VOCABULARY, value, re.IGNORECASE):
                return value
        return None

    return extract


TITLE_EXTRACTORS: List[Extractor] = [
    cleaned(extractor, _clean_title)
    for extractor in (
        command_argument("title"),
        command_argument("subtitle"),
        _role_styled_text("textit"),
        _role_styled_text("emph"),
    )
]


def extract_title(text: str) -> Optional[str]:
    return first_match(TITLE_EXTRACTORS, text)


# =============================================================================
# CONTACT
# =============================================================================


def _clean_phone(raw: str) -> Optional[str]:
    phone = re.sub(r"\s+", " ", to_plaintext(raw)).strip(" -.")
    if sum(char.isdigit() for char in phone) < MIN_PHONE_DIGITS:
        return None
    return phone


def _profile_handle(site: str) -> Callable[[str], Optional[str]]:
    """Reduce a profile value to its handle ("linkedin.com/in/jdoe/" -> "jdoe")."""

    def clean(raw: str) -> Optional[str]:
        value = to_plaintext(raw)
        marker = f"{site}.com/in/" if site == "linkedin" else f"{site}.com/"
        if marker in value:
            value = value.split(marker, 1)[1]
        value = value.strip().strip("/").split("/")[0].split("?")[0]
        return value or None

    return clean


def _social(network: str) -> Extractor:
    """moderncv \\social[network]{handle}."""
    return regex_group(rf"\\social\s*\[{network}\]\s*\{{([^{{}}]+)\}}")


EMAIL_EXTRACTORS: List[Extractor] = [
    cleaned(command_argument("email"), lambda value: to_plaintext(value) or None),
    regex_group(ContactPatterns.MAILTO),
    regex_group(ContactPatterns.EMAIL_LABEL, scope=document_body),
    regex_group(ContactPatterns.EMAIL, scope=document_body),
]

PHONE_EXTRACTORS: List[Extractor] = [
    cleaned(extractor, _clean_phone)
    for extractor in (
        command_argument("phone"),
        command_argument("mobile"),
        regex_group(ContactPatterns.GLYPH_PHONE, scope=document_body),
        regex_group(ContactPatterns.PHONE_LABEL, scope=document_body),
        regex_group(ContactPatterns.INTERNATIONAL_PHONE, scope=document_body),
        regex_group(ContactPatterns.PHONE, scope=document_body),
    )
]

ADDRESS_EXTRACTORS: List[Extractor] = [
    command_argument("address", num_params=3, joiner=", "),
    command_argument("location"),
]

LINKEDIN_EXTRACTORS: List[Extractor] = [
    cleaned(extractor, _profile_handle("linkedin"))
    for extractor in (
        _social("linkedin"),
        command_argument("linkedin"),
        regex_group(ContactPatterns.LINKEDIN_URL, scope=document_body),
    )
]

GITHUB_EXTRACTORS: List[Extractor] = [
    cleaned(extractor, _profile_handle("github"))
    for extractor in (
        _social("github"),
        command_argument("github"),
        regex_group(ContactPatterns.GITHUB_URL, scope=document_body),
    )
]


def extract_contact(text: str) -> ContactInfo:
    """
    Extract each contact field independently.

    A document with only an email and a GitHub handle yields exactly those
    two fields; one field failing never affects another.
    """
    return ContactInfo(
        email=first_match(EMAIL_EXTRACTORS, text),
        phone=first_match(PHONE_EXTRACTORS, text),
        address=first_match(ADDRESS_EXTRACTORS, text),
        linkedin=first_match(LINKEDIN_EXTRACTORS, text),
        github=first_match(GITHUB_EXTRACTORS, text),
    )
