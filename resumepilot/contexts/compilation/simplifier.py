"""
Compatibility simplification of resume markup for remote typesetters.

simplify() rewrites only preamble and layout-control constructs plus icon
glyph macros; text in the document body is never touched otherwise. Passes
repeat until the markup stops changing, so the rewrite is idempotent:
simplify(simplify(x)) == simplify(x).

Preamble rewrites:
    - Denied packages (DENIED_PACKAGES) are dropped from \\usepackage lists
    - \\input{glyphtounicode} is commented out
    - Margin deltas (\\addtolength on page dimensions) are removed
    - fancyhdr page styles become \\pagestyle{empty}
    - \\labelitem overrides are removed
    - A baseline geometry declaration is added when none exists

Everywhere:
    - Icon macros become plain-text labels (\\faPhone -> "Tel:")
    - \\raisebox lifts ({len}[height][depth]) are removed, keeping the raised content
"""

import re
from typing import List, Tuple

from resumepilot.contexts.compilation.latex_patterns import (
    BASELINE_GEOMETRY,
    BASELINE_GEOMETRY_CLASSES,
    DENIED_PACKAGES,
    FONTAWESOME_GLYPHS,
    MARVOSYM_GLYPHS,
    DocumentPatterns,
    GlyphPatterns,
    LayoutPatterns,
    PackagePatterns,
)
from resumepilot.contexts.compilation.logger import _log_debug, _log_info
from resumepilot.utils.latex_parsing_tools import remove_command
from resumepilot.utils.text_processing import extract_balanced_delimiters, strip_latex_comments


def _split_preamble(source: str) -> Tuple[str, str]:
    """Split at \\begin{document}; without one the whole source is preamble."""
    match = re.search(DocumentPatterns.BEGIN_DOCUMENT, source)
    if not match:
        return source, ""
    return source[:match.start()], source[match.start():]


def _loaded_packages(preamble: str) -> List[str]:
    """Package names loaded by the preamble (comments ignored)."""
    packages = []
    for match in re.finditer(PackagePatterns.USEPACKAGE, strip_latex_comments(preamble)):
        packages.extend(name.strip() for name in match.group(3).split(",") if name.strip())
    return packages


def _drop_denied_packages(preamble: str) -> str:
    """
    Remove denied packages from \\usepackage lists.

    A call left with no packages is replaced by a "% <pkg> not available" note
    when it ends its line, or removed outright when more code follows it.
    """

    def rewrite(match: re.Match) -> str:
        command, options, names = match.group(1), match.group(2) or "", match.group(3)
        packages = [name.strip() for name in names.split(",") if name.strip()]
        kept = [name for name in packages if name not in DENIED_PACKAGES]
        dropped = [name for name in packages if name in DENIED_PACKAGES]
        if not dropped:
            return match.group(0)

        note = f"% {', '.join(dropped)} not available"
        rest_of_line = match.string[match.end():].split("\n", 1)[0]
        if kept:
            replacement = f"\\{command}{options}{{{','.join(kept)}}}"
            return replacement + (f" {note}" if not rest_of_line.strip() else "")
        return note if not rest_of_line.strip() else ""

    preamble = re.sub(PackagePatterns.USEPACKAGE, rewrite, preamble)
    return re.sub(PackagePatterns.INPUT_GLYPHTOUNICODE, "% glyphtounicode not available", preamble)


def _strip_margin_deltas(preamble: str) -> Tuple[str, bool]:
    """Remove \\addtolength adjustments to page dimensions."""
    stripped, count = re.subn(LayoutPatterns.MARGIN_DELTA, "", preamble)
    return stripped, count > 0


def _disable_fancy_headers(preamble: str) -> str:
    preamble = re.sub(LayoutPatterns.PAGESTYLE_FANCY, lambda _: LayoutPatterns.PAGESTYLE_EMPTY, preamble)
    return re.sub(LayoutPatterns.FANCY_CLEAR, "", preamble)


def _remove_label_overrides(preamble: str) -> str:
    """Remove \\renewcommand{\\labelitemi}{...} definitions (balanced braces)."""
    pattern = re.compile(LayoutPatterns.LABELITEM_OVERRIDE)
    search_from = 0
    while True:
        match = pattern.search(preamble, search_from)
        if not match:
            return preamble
        try:
            _, end_pos = extract_balanced_delimiters(preamble, match.end())
        except ValueError:
            search_from = match.end()
            continue
        preamble = preamble[:match.start()] + preamble[end_pos:]
        search_from = match.start()


def _ensure_baseline_geometry(preamble: str, margins_stripped: bool) -> str:
    """
    Add \\usepackage[margin=0.75in]{geometry} after \\documentclass.

    Only when no geometry package is loaded, and either the class leaves page
    geometry to the document or margin deltas were just removed.
    """
    if "geometry" in _loaded_packages(preamble):
        return preamble

    match = re.search(DocumentPatterns.DOCUMENTCLASS, preamble)
    if not match:
        return preamble

    document_class = match.group(1).strip()
    if document_class not in BASELINE_GEOMETRY_CLASSES and not margins_stripped:
        return preamble

    return preamble[:match.end()] + "\n" + BASELINE_GEOMETRY + preamble[match.end():]


def _replace_glyphs(text: str, include_marvosym: bool) -> str:
    """Replace icon macros with their plain-text labels."""
    tables = [FONTAWESOME_GLYPHS] + ([MARVOSYM_GLYPHS] if include_marvosym else [])
    for table in tables:
        for name, label in table.items():
            pattern = GlyphPatterns.GLYPH_MACRO.format(name=re.escape(name))
            text = re.sub(pattern, lambda _, label=label: label, text)

    # Icons without a text equivalent are dropped
    text = re.sub(GlyphPatterns.ANY_FONTAWESOME, "", text)
    return remove_command(text, "raisebox", 1, trailing_optional=2)


def _simplify_pass(source: str) -> str:
    preamble, body = _split_preamble(source)
    include_marvosym = "marvosym" in _loaded_packages(preamble)

    preamble, margins_stripped = _strip_margin_deltas(preamble)
    preamble = _drop_denied_packages(preamble)
    preamble = _disable_fancy_headers(preamble)
    preamble = _remove_label_overrides(preamble)
    preamble = _ensure_baseline_geometry(preamble, margins_stripped)

    return _replace_glyphs(preamble, include_marvosym) + _replace_glyphs(body, include_marvosym)


def simplify(source: str) -> str:
    """
    Rewrite markup to avoid constructs remote typesetters commonly reject.

    A removal can join neighbouring text into a new construct (a bare
    \\raisebox followed by a lifted one), so passes repeat until the output is
    stable.

    Args:
        source: Markup text

    Returns:
        Simplified markup (identical to the input when nothing applies)

    Example:
        >>> simplify("\\\\documentclass{article}\\n\\\\usepackage{fontawesome5}\\n\\\\begin{document}\\\\faPhone 555\\\\end{document}")
        '\\\\documentclass{article}\\n\\\\usepackage[margin=0.75in]{geometry}\\n% fontawesome5 not available\\n\\\\begin{document}Tel: 555\\\\end{document}'
    """
    simplified = source
    while True:
        rewritten = _simplify_pass(simplified)
        if rewritten == simplified:
            break
        simplified = rewritten

    if simplified != source:
        _log_info(f"Simplified markup ({len(source)} -> {len(simplified)} chars)")
    else:
        _log_debug("Simplification made no changes")
    return simplified
