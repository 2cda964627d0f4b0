"""
LaTeX Parsing Tools

Fundamental parsing utilities for extracting LaTeX structures.

Self-contained module with no context dependencies - designed for reusability.
All LaTeX patterns are defined as constants below for visibility and maintainability.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from resumepilot.utils.text_processing import extract_balanced_delimiters


@dataclass(frozen=True)
class LaTeXPatterns:
    """
    LaTeX pattern templates for parsing and manipulation.

    These are format string templates that accept command/environment names.
    Use .format() or f-strings to substitute the command name.
    """

    # Command patterns (use with .format(command=name))
    COMMAND_START: str = r"\\{command}(?![A-Za-z@])\*?"  # Matches \cmd or \cmd* but not \cmdfoo

    # Environment patterns (use with .format(env=name))
    BEGIN_ENV: str = r"\\begin\{{{env}\}}"  # Matches \begin{envname}
    END_ENV: str = r"\\end\{{{env}\}}"  # Matches \end{envname}

    # Itemize marker patterns
    ITEM_ANY: str = r"\\item(?![A-Za-z@])(?:\s*\[[^\]]*\])?"  # Matches \item and \item[...]

    # Optional argument opener, e.g. the [0pt] in \raisebox{1pt}[0pt]{...}
    OPTIONAL_ARG_START: str = r"\s*\["

    # Plaintext conversion patterns (for stripping LaTeX in to_plaintext())
    ENV_DELIMITERS: str = r"\\(?:begin|end)\{[^}]*\}"  # Matches \begin{env} and \end{env}
    COLOR_STANDALONE: str = r"\\(?:color|textcolor)\{[^}]+\}"  # Matches \color{red}
    SPACING_COMMANDS: str = r"\\(?:[vh]space|vskip|hskip)\*?(?:\{[^}]*\}|\s*-?[\d.]+\s*[a-z]{2})"
    ANY_COMMAND_NO_BRACES: str = r"\\[a-zA-Z@]+\*?"  # Matches any \command


def extract_sequential_params(
    latex_str: str, start_pos: int, num_params: int
) -> Tuple[List[str], int]:
    """
    Extract up to N consecutive brace-delimited parameters, handling nested braces.

    Only whitespace may separate the parameters; extraction stops at the first
    non-brace character so that text following the command is never consumed.

    Args:
        latex_str: LaTeX source
        start_pos: Position right after the command name
        num_params: Maximum number of {...} parameters to extract

    Returns:
        (params, end_pos) where end_pos is the position after the last parameter

    Example:
        >>> latex = "\\\\resumeSubheading{Acme {\\\\small Corp}}{2020}{Engineer}{NYC} tail"
        >>> extract_sequential_params(latex, 17, 4)
        (['Acme {\\\\small Corp}', '2020', 'Engineer', 'NYC'], 58)
    """
    params = []
    pos = start_pos

    for _ in range(num_params):
        # Skip whitespace, then require an opening brace
        match = re.compile(r"\s*\{").match(latex_str, pos)
        if not match:
            break

        try:
            param_value, pos = extract_balanced_delimiters(latex_str, match.end())
        except ValueError:
            break
        params.append(param_value)

    return params, pos


@dataclass
class CommandCall:
    """
    One invocation of a LaTeX command with its brace arguments.

    Attributes:
        name: Command name without backslash
        args: Brace arguments in order (may be fewer than requested)
        start: Position of the backslash
        end: Position after the last extracted argument
    """

    name: str
    args: List[str]
    start: int
    end: int


def find_command_calls(
    latex_str: str, command: str, num_params: int, min_params: Optional[int] = None
) -> List[CommandCall]:
    """
    Find every call of a command and extract its brace arguments.

    Optional [...] arguments directly after the command name are skipped.

    Args:
        latex_str: LaTeX source
        command: Command name without backslash (e.g., "resumeSubheading")
        num_params: Maximum number of brace arguments to extract
        min_params: Calls with fewer arguments are ignored (default: num_params)

    Returns:
        List of CommandCall in document order

    Example:
        >>> calls = find_command_calls("\\\\cvitem{Languages}{Python, Go}", "cvitem", 2)
        >>> calls[0].args
        ['Languages', 'Python, Go']
    """
    if min_params is None:
        min_params = num_params

    pattern = LaTeXPatterns.COMMAND_START.format(command=re.escape(command))
    calls = []
    for match in re.finditer(pattern, latex_str):
        pos = match.end()

        # Skip optional arguments, e.g. \phone[mobile]{...}
        optional = re.compile(LaTeXPatterns.OPTIONAL_ARG_START).match(latex_str, pos)
        if optional:
            try:
                _, pos = extract_balanced_delimiters(latex_str, optional.end(), "[", "]")
            except ValueError:
                continue

        args, end = extract_sequential_params(latex_str, pos, num_params)
        if len(args) >= min_params:
            calls.append(CommandCall(name=command, args=args, start=match.start(), end=end))
    return calls


def extract_environment_content(text: str, env_name: str, start_pos: int = 0) -> Tuple[str, int, int]:
    """
    Extract content from LaTeX environment, handling nested environments.

    Finds \\begin{env_name} and matching \\end{env_name}, correctly handling
    nested environments of the same name.

    Args:
        text: LaTeX text
        env_name: Environment name (e.g., 'itemize', 'center', 'tabular*')
        start_pos: Position to start searching (default: 0)

    Returns:
        (content, begin_end_pos, end_start_pos) where:
        - content: Text between \\begin{env} and \\end{env}
        - begin_end_pos: Position after \\begin{env_name}
        - end_start_pos: Position at \\end{env_name}

    Raises:
        ValueError: If environment is not found or unmatched

    Example:
        >>> text = "\\\\begin{itemize} foo \\\\begin{itemize} bar \\\\end{itemize} \\\\end{itemize}"
        >>> content, begin_end, end_start = extract_environment_content(text, "itemize")
        >>> content
        ' foo \\\\begin{itemize} bar \\\\end{itemize} '
    """
    # Escape special regex characters in env_name (e.g., * in tabular*)
    env_name_escaped = re.escape(env_name)

    begin_pattern = re.compile(LaTeXPatterns.BEGIN_ENV.format(env=env_name_escaped))
    end_pattern = re.compile(LaTeXPatterns.END_ENV.format(env=env_name_escaped))

    begin_match = begin_pattern.search(text, start_pos)
    if not begin_match:
        raise ValueError(f"No \\begin{{{env_name}}} found")

    begin_end_pos = begin_match.end()

    # Count nested environments to find matching \end{env_name}
    pos = begin_end_pos
    depth = 1

    while depth > 0:
        begin_nested = begin_pattern.search(text, pos)
        end_nested = end_pattern.search(text, pos)

        if not end_nested:
            break

        if begin_nested and begin_nested.start() < end_nested.start():
            depth += 1
            pos = begin_nested.end()
        else:
            depth -= 1
            if depth == 0:
                return text[begin_end_pos:end_nested.start()], begin_end_pos, end_nested.start()
            pos = end_nested.end()

    raise ValueError(f"Unmatched \\begin{{{env_name}}}")


def split_itemize_entries(content: str, marker_pattern: str = LaTeXPatterns.ITEM_ANY) -> List[str]:
    """
    Split itemize content into the text of individual entries (markers removed).

    Args:
        content: LaTeX content containing \\item entries
        marker_pattern: Regex pattern matching an item marker

    Returns:
        List of entry strings without their markers

    Example:
        >>> split_itemize_entries("\\\\item First \\\\item[--] Second")
        ['First', 'Second']
    """
    matches = list(re.finditer(marker_pattern, content))

    entries = []
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(content)
        entry = content[match.end():end].strip()
        if entry:
            entries.append(entry)
    return entries


def replace_command(text: str, command: str, prefix: str = "", suffix: str = "") -> str:
    """
    Replace LaTeX command with optional prefix/suffix around content.

    Handles nested braces correctly using balanced delimiter matching.

    Args:
        text: Text containing the command
        command: Command name without backslash (e.g., "textbf", "underline")
        prefix: String to insert before content (default: "")
        suffix: String to insert after content (default: "")

    Returns:
        Text with command replaced by prefix + content + suffix

    Examples:
        >>> replace_command("\\\\textbf{bold text}", "textbf")
        'bold text'
        >>> replace_command("Normal \\\\textbf{bold} text", "textbf", "**", "**")
        'Normal **bold** text'
    """
    result = text
    pattern = re.compile(r"\\" + re.escape(command) + r"(?![A-Za-z@])\*?\s*\{")
    search_from = 0

    while True:
        match = pattern.search(result, search_from)
        if not match:
            break

        try:
            content, end_pos = extract_balanced_delimiters(result, match.end())
        except ValueError:
            # Unmatched braces, skip this occurrence
            search_from = match.end()
            continue

        result = result[:match.start()] + prefix + content + suffix + result[end_pos:]
        search_from = match.start()

    return result


def _skip_optional_args(text: str, pos: int, limit: int) -> int:
    """Position after up to `limit` consecutive [...] arguments starting at pos."""
    for _ in range(limit):
        optional = re.compile(LaTeXPatterns.OPTIONAL_ARG_START).match(text, pos)
        if not optional:
            break
        try:
            _, pos = extract_balanced_delimiters(text, optional.end(), "[", "]")
        except ValueError:
            break
    return pos


def remove_command(text: str, command: str, num_params: int = 1, trailing_optional: int = 0) -> str:
    """
    Remove a command together with its brace arguments.

    Args:
        text: LaTeX source
        command: Command name without backslash
        num_params: Brace arguments to remove
        trailing_optional: [...] arguments after the brace arguments to remove as well
            (\\raisebox{len}[height][depth] takes 2)

    Example:
        >>> remove_command("Visit \\\\href{https://x.io}{site}", "href", 1)
        'Visit {site}'
        >>> remove_command("\\\\raisebox{-2pt}[0pt][0pt]{icon}", "raisebox", 1, trailing_optional=2)
        '{icon}'
    """
    pieces = []
    pos = 0
    for call in find_command_calls(text, command, num_params):
        # Calls nested in an argument go with the enclosing call
        if call.start < pos:
            continue
        pieces.append(text[pos:call.start])
        pos = _skip_optional_args(text, call.end, trailing_optional)
    pieces.append(text[pos:])
    return "".join(pieces)


def to_plaintext(latex_str: str) -> str:
    """
    Strip LaTeX markup from text, keeping the visible words.

    Unlike a blanket command filter, arguments of unknown commands are kept
    (\\resumeItem{Built X} becomes "Built X") because resume dialects wrap most
    user text in custom macros.

    Removes:
    - Hyperlink targets (\\href{url}{text} keeps only text)
    - Environment delimiters, color/spacing/size commands
    - All remaining backslash commands and grouping braces
    - Extra whitespace

    Converts to plaintext equivalents:
    - Escaped special chars (\\%, \\$, \\&, \\#, \\_) become their characters
    - Line breaks (\\\\) and LaTeX spacing (\\;, \\,, \\:) become spaces
    - "--" and "---" become dashes, "~" becomes a space

    Example:
        >>> to_plaintext("\\\\textbf{\\\\vspace{2pt} Bold text}\\\\par")
        'Bold text'
        >>> to_plaintext("\\\\href{mailto:a@b.io}{\\\\underline{a@b.io}}")
        'a@b.io'
        >>> to_plaintext("Aug. 2018 -- May 2021")
        'Aug. 2018 – May 2021'
    """
    if not latex_str:
        return ""

    result = latex_str

    # Hyperlinks: keep the display text only
    result = remove_command(result, "href", 1)
    result = replace_command(result, "url")

    result = re.sub(LaTeXPatterns.ENV_DELIMITERS, " ", result)
    result = re.sub(LaTeXPatterns.COLOR_STANDALONE, "", result)
    result = re.sub(LaTeXPatterns.SPACING_COMMANDS, " ", result)
    result = remove_command(result, "raisebox", 1, trailing_optional=2)
    for command in ("rule", "setlength", "addtolength"):
        result = remove_command(result, command, 2)

    # Line breaks, including \\[2pt]
    result = re.sub(r"\\\\(?:\[[^\]]*\])?", " ", result)

    escaped_chars = [
        ("%", r"\%"),
        ("<<<DOLLAR>>>", r"\$"),
        ("&", r"\&"),
        ("#", r"\#"),
        ("_", r"\_"),
        (" ", r"\ "),
        (" ", r"\;"),
        (" ", r"\,"),
        (" ", r"\:"),
        ("", r"\!"),
        ("<<<LEFTBRACE>>>", r"\{"),
        ("<<<RIGHTBRACE>>>", r"\}"),
    ]
    for replacement, escaped in escaped_chars:
        result = result.replace(escaped, replacement)

    # Math-mode separators like $|$ and $\cdot$
    result = re.sub(r"\$\s*\|\s*\$", "|", result)
    result = re.sub(r"\$\s*\\(?:cdot|bullet|diamond)\s*\$", "·", result)
    result = result.replace("$", "")

    result = re.sub(LaTeXPatterns.ANY_COMMAND_NO_BRACES, "", result)

    # Bracketed options left behind (e.g. [leftmargin=0.15in])
    result = re.sub(r"\[[^\]]*=[^\]]*\]", "", result)

    # Adjacent argument groups ({English}{Native}) read as separate words
    result = re.sub(r"\}\s*\{", "} {", result)
    result = result.replace("{", "").replace("}", "")
    result = result.replace("<<<LEFTBRACE>>>", "{").replace("<<<RIGHTBRACE>>>", "}")
    result = result.replace("<<<DOLLAR>>>", "$")

    result = result.replace("---", "—").replace("--", "–").replace("~", " ")

    result = re.sub(r"\s+", " ", result)
    return result.strip()
