"""
Text processing utilities shared by the compilation, parsing and rendering contexts.

Note: LaTeX-aware extraction helpers live in resumepilot.utils.latex_parsing_tools
"""

import re
from typing import List, Tuple


def extract_balanced_delimiters(
    text: str,
    start_pos: int,
    open_char: str = '{',
    close_char: str = '}',
    escape_char: str = '\\'
) -> Tuple[str, int]:
    """
    Extract content between balanced delimiters, handling escaped characters.

    Assumes start_pos is AFTER an opening delimiter. Counts nested delimiters
    to find the matching closing delimiter, skipping escaped characters.

    Args:
        text: Text containing delimited content
        start_pos: Position right after the opening delimiter
        open_char: Opening delimiter character (default: '{')
        close_char: Closing delimiter character (default: '}')
        escape_char: Character used for escaping (default: '\\')

    Returns:
        (content, end_pos) where:
        - content: Text between the delimiters (excluding delimiters themselves)
        - end_pos: Position after the closing delimiter

    Raises:
        ValueError: If delimiters are unmatched

    Example:
        >>> text = "foo {bar {nested} baz} qux"
        >>> content, end = extract_balanced_delimiters(text, 5)
        >>> content
        'bar {nested} baz'
        >>> text2 = "code [list [1, 2] more] end"
        >>> content2, end2 = extract_balanced_delimiters(text2, 6, '[', ']')
        >>> content2
        'list [1, 2] more'
    """
    depth = 1  # Start at 1 (already inside opening delimiter)
    pos = start_pos

    while pos < len(text) and depth > 0:
        if text[pos] == escape_char:
            # Skip escaped character
            pos += 2
            continue
        elif text[pos] == open_char:
            depth += 1
        elif text[pos] == close_char:
            depth -= 1
        pos += 1

    if depth != 0:
        raise ValueError(
            f"Unmatched {open_char}{close_char} delimiters starting at position {start_pos}"
        )

    # content is from start_pos to pos-1 (excluding closing delimiter)
    content = text[start_pos:pos - 1]
    return content, pos


def strip_latex_comments(text: str) -> str:
    """
    Remove LaTeX line comments (unescaped % to end of line).

    Escaped percentages (\\%) are kept, but a % after a line break (\\\\%) starts
    a comment. Line structure is preserved so that line-based heuristics still
    see the same number of lines.

    Example:
        >>> strip_latex_comments("87\\\\% done % reviewer note")
        '87\\\\% done '
        >>> strip_latex_comments("a\\\\\\\\% note {")
        'a\\\\\\\\'
    """
    return re.sub(r'(?<!\\)((?:\\\\)*)%.*$', r'\1', text, flags=re.MULTILINE)


def count_unescaped(text: str, char: str, escape_char: str = '\\') -> int:
    """
    Count occurrences of a single character that are not escaped.

    Example:
        >>> count_unescaped("{a} \\\\{ {b}", "{")
        2
    """
    count = 0
    pos = 0
    while pos < len(text):
        if text[pos] == escape_char:
            pos += 2
            continue
        if text[pos] == char:
            count += 1
        pos += 1
    return count


def split_items(text: str, separators: str = ",;") -> List[str]:
    """
    Split a delimited list of items, ignoring separators nested in parentheses.

    Example:
        >>> split_items("Python, C/C++ (GCC, Clang); Rust")
        ['Python', 'C/C++ (GCC, Clang)', 'Rust']
    """
    items = []
    current = []
    depth = 0
    for char in text:
        if char in "([":
            depth += 1
        elif char in ")]" and depth > 0:
            depth -= 1
        if char in separators and depth == 0:
            items.append("".join(current))
            current = []
        else:
            current.append(char)
    items.append("".join(current))
    return [item.strip() for item in items if item.strip()]


def truncate_display(text: str, max_len: int) -> str:
    """
    Truncate text for display with ellipsis if needed.

    Args:
        text: Text to truncate
        max_len: Maximum length including ellipsis

    Returns:
        Original text if within max_len, otherwise truncated with "..."

    Example:
        >>> truncate_display("short", 10)
        'short'
        >>> truncate_display("this is a very long string", 10)
        'this is...'
    """
    return text if len(text) <= max_len else text[: max_len - 3] + "..."
