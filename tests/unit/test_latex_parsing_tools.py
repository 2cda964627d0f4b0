"""
Unit tests for LaTeX parsing tools.

Tests core parsing utilities in resumepilot.utils.latex_parsing_tools and
resumepilot.utils.text_processing.
"""

import pytest

from resumepilot.utils.latex_parsing_tools import (
    extract_environment_content,
    extract_sequential_params,
    find_command_calls,
    remove_command,
    replace_command,
    split_itemize_entries,
    to_plaintext,
)
from resumepilot.utils.text_processing import (
    count_unescaped,
    extract_balanced_delimiters,
    split_items,
    strip_latex_comments,
    truncate_display,
)


@pytest.mark.unit
class TestExtractSequentialParams:
    """Tests for extract_sequential_params function."""

    def test_nested_braces(self):
        latex = r"\cmd{a {b} c}{d}"
        params, end = extract_sequential_params(latex, 4, 2)

        assert params == ["a {b} c", "d"]
        assert end == len(latex)

    def test_whitespace_between_params(self):
        latex = "\\resumeSubheading\n  {Acme}{2020}\n  {Engineer}{NYC}"
        params, _ = extract_sequential_params(latex, len("\\resumeSubheading"), 4)

        assert params == ["Acme", "2020", "Engineer", "NYC"]

    def test_stops_at_text(self):
        """Text following the command is never consumed as a parameter."""
        latex = r"\textbf{Name} rest {not a param}"
        params, end = extract_sequential_params(latex, 7, 2)

        assert params == ["Name"]
        assert latex[end:] == " rest {not a param}"

    def test_unbalanced_stops_extraction(self):
        params, _ = extract_sequential_params(r"\cmd{ok}{broken", 4, 2)

        assert params == ["ok"]


@pytest.mark.unit
class TestFindCommandCalls:
    """Tests for find_command_calls function."""

    def test_finds_every_call_in_order(self):
        latex = r"\cvitem{A}{1} text \cvitem{B}{2}"
        calls = find_command_calls(latex, "cvitem", 2)

        assert [call.args for call in calls] == [["A", "1"], ["B", "2"]]
        assert calls[0].start == 0

    def test_skips_optional_argument(self):
        calls = find_command_calls(r"\phone[mobile]{+44 7700 900123}", "phone", 1)

        assert calls[0].args == ["+44 7700 900123"]

    def test_does_not_match_longer_command_names(self):
        latex = r"\resumeItemListStart \resumeItem{Built X}"
        calls = find_command_calls(latex, "resumeItem", 1)

        assert len(calls) == 1
        assert calls[0].args == ["Built X"]

    def test_min_params_filters_short_calls(self):
        latex = r"\cventry{2020}{Role}{Org}{City} \cventry{2021}{Role}"
        calls = find_command_calls(latex, "cventry", 6, min_params=4)

        assert len(calls) == 1
        assert len(calls[0].args) == 4

    def test_starred_command(self):
        calls = find_command_calls(r"\section*{Skills}", "section", 1)

        assert calls[0].args == ["Skills"]


@pytest.mark.unit
class TestEnvironmentsAndItems:
    """Tests for extract_environment_content and split_itemize_entries."""

    def test_nested_environment(self):
        text = r"\begin{itemize} a \begin{itemize} b \end{itemize} c \end{itemize} tail"
        content, _, end_start = extract_environment_content(text, "itemize")

        assert content.strip().startswith("a")
        assert content.strip().endswith("c")
        assert text[end_start:].startswith(r"\end{itemize} tail")

    def test_missing_environment_raises(self):
        with pytest.raises(ValueError):
            extract_environment_content("no environments", "itemize")

    def test_split_entries_with_bracketed_markers(self):
        entries = split_itemize_entries(r"\item First \item[--] Second \item Third")

        assert entries == ["First", "Second", "Third"]

    def test_itemize_prefix_command_is_not_an_item(self):
        assert split_itemize_entries(r"\itemsep 2pt \item Only") == ["Only"]


@pytest.mark.unit
class TestCommandRewriting:
    """Tests for replace_command and remove_command."""

    def test_replace_nested(self):
        result = replace_command(r"\textbf{outer \textbf{inner}}", "textbf")

        assert result == "outer inner"

    def test_replace_with_affixes(self):
        assert replace_command(r"a \emph{b} c", "emph", "_", "_") == "a _b_ c"

    def test_remove_command_with_arguments(self):
        result = remove_command(r"\addtolength{\textwidth}{1in}kept", "addtolength", 2)

        assert result == "kept"

    def test_remove_command_with_trailing_optional_arguments(self):
        latex = r"\raisebox{-2pt}[0pt] [0pt]{\icon} 555"
        result = remove_command(latex, "raisebox", 1, trailing_optional=2)

        assert result == r"{\icon} 555"

    def test_remove_command_keeps_brackets_when_not_asked(self):
        assert remove_command(r"\raisebox{1pt}[0pt]{x}", "raisebox", 1) == r"[0pt]{x}"

    def test_remove_command_nested_in_argument(self):
        assert remove_command(r"a\raisebox{\raisebox{1pt}{b}}{c}", "raisebox", 1) == r"a{c}"


@pytest.mark.unit
class TestToPlaintext:
    """Tests for to_plaintext function."""

    def test_formatting_commands_keep_content(self):
        assert to_plaintext(r"\textbf{Bold} and \textit{italic} text") == "Bold and italic text"

    def test_unknown_macro_arguments_kept(self):
        """Custom resume macros wrap user text; the text survives."""
        assert to_plaintext(r"\resumeItem{Built a \textbf{fast} parser}") == "Built a fast parser"

    def test_href_keeps_display_text(self):
        result = to_plaintext(r"\href{https://github.com/jdoe}{\underline{github.com/jdoe}}")

        assert result == "github.com/jdoe"

    def test_escaped_characters(self):
        assert to_plaintext(r"Texas A\&M: 40\% faster, \$5 saved, C\#") == "Texas A&M: 40% faster, $5 saved, C#"

    def test_math_separators(self):
        assert to_plaintext(r"\textbf{Gitlytics} $|$ \emph{Python}") == "Gitlytics | Python"

    def test_dashes_and_ties(self):
        assert to_plaintext(r"June~2020 -- Present") == "June 2020 – Present"

    def test_adjacent_groups_are_separate_words(self):
        assert to_plaintext(r"\cvitemwithcomment{English}{Native}{}") == "English Native"

    def test_environment_and_list_options_removed(self):
        latex = r"\begin{itemize}[leftmargin=0.15in, label={}] \item One \end{itemize}"

        assert to_plaintext(latex) == "One"

    def test_empty(self):
        assert to_plaintext("") == ""


@pytest.mark.unit
class TestTextProcessing:
    """Tests for resumepilot.utils.text_processing helpers."""

    def test_balanced_delimiters_skip_escaped(self):
        content, end = extract_balanced_delimiters(r"{a \} b} c", 1)

        assert content == r"a \} b"
        assert end == 8

    def test_balanced_delimiters_unmatched_raises(self):
        with pytest.raises(ValueError):
            extract_balanced_delimiters("{never closed", 1)

    def test_strip_comments_keeps_escaped_percent(self):
        text = "50\\% faster % note\n% whole line\nnext"

        assert strip_latex_comments(text) == "50\\% faster \n\nnext"

    def test_strip_comments_after_line_break(self):
        """\\\\% is a line break followed by a comment, not an escaped percent."""
        text = "first\\\\% note {\n2\\\\\\% off"

        assert strip_latex_comments(text) == "first\\\\\n2\\\\\\% off"

    def test_count_unescaped(self):
        assert count_unescaped(r"{a} \{ \} {b}", "{") == 2
        assert count_unescaped(r"{a} \{ \} {b}", "}") == 2

    def test_split_items_respects_parentheses(self):
        assert split_items("Python, SQL (Postgres, SQLite); Go") == ["Python", "SQL (Postgres, SQLite)", "Go"]

    def test_split_items_drops_empty(self):
        assert split_items(" , Rust,, ") == ["Rust"]

    def test_truncate_display(self):
        assert truncate_display("abcdefghij", 8) == "abcde..."
        assert truncate_display("short", 8) == "short"
