"""
Per-category entry parsing.

Every category has an ordered list of structured strategies, one per dialect
macro family, and a line heuristic:

    Dialect                 Experience / Education          Projects / Achievements
    Jake-style subheadings  \\resumeSubheading{4 args}        \\resumeProjectHeading{2 args}
    moderncv                \\cventry{6 args}                 \\cventry, \\cvitem
    generic macros          \\experience / \\education         \\item \\textbf{Name} ...

The first strategy that yields entries wins and the heuristic is never
consulted for that section. Heuristics only run when no structured pattern
matched; that fallback is logged as informational.
"""

import re
from typing import Callable, List, Optional, Sequence

from resumepilot.contexts.parsing.logger import _log_debug, log_heuristic_fallback
from resumepilot.contexts.parsing.patterns import (
    DEGREE_VOCABULARY,
    INSTITUTION_VOCABULARY,
    MIN_PROJECT_LINE_LENGTH,
    PERIOD_WORDS,
    ROLE_VOCABULARY,
    YEAR,
)
from resumepilot.contexts.parsing.resume_model import Entry, SkillGroup
from resumepilot.utils.latex_parsing_tools import (
    CommandCall,
    LaTeXPatterns,
    extract_environment_content,
    find_command_calls,
    split_itemize_entries,
    to_plaintext,
)
from resumepilot.utils.text_processing import extract_balanced_delimiters, split_items

EntryStrategy = Callable[[str], List[Entry]]
SkillStrategy = Callable[[str], List[SkillGroup]]

ITEM_LINE = re.compile(r"^\s*" + LaTeXPatterns.ITEM_ANY)
BOLD_ITALIC_PERIOD = re.compile(
    r"((?:19|20)\d{2}\s*(?:-{1,3}|–|to)\s*(?:(?:19|20)\d{2}|Present|Current)|Present|Current)"
)
PERIOD_WINDOW = 160
SKILL_ITEMS_END = re.compile(r"\\\\|&|\n|\\item(?![A-Za-z@])|\\end\s*\{")
MAX_PERIOD_LINE_LENGTH = 40


# =============================================================================
# SHARED HELPERS
# =============================================================================


def looks_like_period(text: str) -> bool:
    """
    Whether text reads as a date or date range.

    Example:
        >>> looks_like_period("Aug. 2018 -- May 2021"), looks_like_period("NYC")
        (True, False)
    """
    return bool(re.search(YEAR, text) or re.search(PERIOD_WORDS, text, re.IGNORECASE))


def _names_a_role(text: str) -> bool:
    return bool(re.search(ROLE_VOCABULARY, text) or re.search(DEGREE_VOCABULARY, text))


def _bullets(markup: str) -> List[str]:
    """Detail lines: \\resumeItem arguments, else \\item entries."""
    calls = find_command_calls(markup, "resumeItem", 2, min_params=1)
    if calls:
        bullets = [
            ": ".join(part for part in (to_plaintext(arg) for arg in call.args) if part)
            for call in calls
        ]
    else:
        bullets = [to_plaintext(item) for item in split_itemize_entries(markup)]
    return [bullet for bullet in bullets if bullet]


def _description_bullets(markup: str) -> List[str]:
    """Bullets of a free-form description argument (itemized or a single paragraph)."""
    if re.search(LaTeXPatterns.ITEM_ANY, markup):
        return _bullets(markup)
    text = to_plaintext(markup)
    return [text] if text else []


def _spans(body: str, calls: Sequence[CommandCall]) -> List[str]:
    """Markup following each call up to the next one."""
    spans = []
    for i, call in enumerate(calls):
        end = calls[i + 1].start if i + 1 < len(calls) else len(body)
        spans.append(body[call.end:end])
    return spans


def first_structured(strategies: Sequence[Callable[[str], list]], body: str) -> list:
    """Return the results of the first strategy that finds anything."""
    for strategy in strategies:
        results = [
            result for result in strategy(body) if result is not None and not result.is_empty()
        ]
        if results:
            _log_debug(f"  matched by {strategy.__name__}: {len(results)}")
            return results
    return []


# =============================================================================
# STRUCTURED STRATEGIES: EXPERIENCE / EDUCATION
# =============================================================================


def subheading_entries(body: str) -> List[Entry]:
    """
    Jake-style \\resumeSubheading{a}{b}{c}{d} (plus \\resumeSubSubheading{role}{period}).

    Slot order is decided by where the period is: b holds it in
    {Company}{Period}{Position}{Location}; d holds it in
    {Institution}{Location}{Degree}{Period}. When the first slot names a role
    and the third does not, the two labels are swapped.
    """
    calls = find_command_calls(body, "resumeSubheading", 4)
    calls += find_command_calls(body, "resumeSubSubheading", 2)
    calls.sort(key=lambda call: call.start)

    entries = []
    for call, span in zip(calls, _spans(body, calls)):
        args = [to_plaintext(arg) for arg in call.args]

        if call.name == "resumeSubSubheading":
            previous = entries[-1] if entries else Entry()
            entry = Entry(
                primary_label=args[0],
                secondary_label=previous.secondary_label,
                period=args[1],
                location=previous.location,
            )
        else:
            first, second, third, fourth = args
            if looks_like_period(fourth) and not looks_like_period(second):
                organisation, location, role, period = first, second, third, fourth
            else:
                organisation, period, role, location = first, second, third, fourth
            if _names_a_role(organisation) and not _names_a_role(role):
                organisation, role = role, organisation
            entry = Entry(
                primary_label=role, secondary_label=organisation, period=period, location=location
            )

        entry.bullet_points = _bullets(span)
        entries.append(entry)
    return entries


def cventry_entries(body: str) -> List[Entry]:
    """
    moderncv \\cventry{period}{role}{organisation}{location}{grade}{description}.

    A grade (fifth argument) is kept as the first bullet.
    """
    entries = []
    for call in find_command_calls(body, "cventry", 6, min_params=4):
        args = call.args + [""] * (6 - len(call.args))
        bullets = []
        grade = to_plaintext(args[4])
        if grade:
            bullets.append(grade)
        bullets.extend(_description_bullets(args[5]))
        entries.append(
            Entry(
                primary_label=to_plaintext(args[1]),
                secondary_label=to_plaintext(args[2]),
                period=to_plaintext(args[0]),
                location=to_plaintext(args[3]),
                bullet_points=bullets,
            )
        )
    return entries


def _four_argument_entries(commands: Sequence[str], slots: Sequence[str]) -> EntryStrategy:
    """Strategy for simple 4-argument macros; `slots` names the Entry field of each argument."""

    def strategy(body: str) -> List[Entry]:
        calls = []
        for command in commands:
            calls.extend(find_command_calls(body, command, 4))
        calls.sort(key=lambda call: call.start)

        entries = []
        for call, span in zip(calls, _spans(body, calls)):
            fields = {slot: to_plaintext(arg) for slot, arg in zip(slots, call.args)}
            entries.append(Entry(bullet_points=_bullets(span), **fields))
        return entries

    strategy.__name__ = f"{'_'.join(commands)}_entries"
    return strategy


def bold_italic_year_entries(body: str) -> List[Entry]:
    """
    \\textbf{Role} ... \\textit{Company} ... 2019 -- 2021 in free layout.

    The italic must come before the next bold, and the period must follow the
    italic within PERIOD_WINDOW characters.
    """
    bolds = find_command_calls(body, "textbf", 1)
    italics = find_command_calls(body, "textit", 1)

    headings = []
    italic_index = 0
    for i, bold in enumerate(bolds):
        next_bold = bolds[i + 1].start if i + 1 < len(bolds) else len(body)
        while italic_index < len(italics) and italics[italic_index].start < bold.end:
            italic_index += 1
        if italic_index == len(italics) or italics[italic_index].start >= next_bold:
            continue
        italic = italics[italic_index]
        window = body[italic.end:min(next_bold, italic.end + PERIOD_WINDOW)]
        period = BOLD_ITALIC_PERIOD.search(window)
        if period:
            headings.append((bold, italic, period.group(1), italic.end + period.end()))

    entries = []
    for i, (bold, italic, period, heading_end) in enumerate(headings):
        end = headings[i + 1][0].start if i + 1 < len(headings) else len(body)
        entries.append(
            Entry(
                primary_label=to_plaintext(bold.args[0]),
                secondary_label=to_plaintext(italic.args[0]),
                period=to_plaintext(period),
                bullet_points=_bullets(body[heading_end:end]),
            )
        )
    return entries


generic_experience_entries = _four_argument_entries(
    ("experience", "job", "position"),
    ("primary_label", "secondary_label", "period", "location"),
)
generic_education_entries = _four_argument_entries(
    ("education",),
    ("period", "primary_label", "secondary_label", "location"),
)


# =============================================================================
# STRUCTURED STRATEGIES: PROJECTS / ACHIEVEMENTS
# =============================================================================


def project_heading_entries(body: str) -> List[Entry]:
    """
    Jake-style \\resumeProjectHeading{\\textbf{Name} $|$ \\emph{Stack}}{Date}.

    The text after the first "|" becomes the secondary label (tech stack).
    """
    calls = find_command_calls(body, "resumeProjectHeading", 2)
    entries = []
    for call, span in zip(calls, _spans(body, calls)):
        heading = to_plaintext(call.args[0])
        name, _, stack = heading.partition("|")
        entries.append(
            Entry(
                primary_label=name.strip(),
                secondary_label=stack.strip(),
                period=to_plaintext(call.args[1]),
                bullet_points=_bullets(span),
            )
        )
    return entries


def bold_item_entries(body: str) -> List[Entry]:
    """\\item \\textbf{Name} description, one entry per item."""
    entries = []
    for item in split_itemize_entries(body):
        match = re.match(r"\s*\\textbf\s*\{", item)
        if not match:
            continue
        try:
            name, end = extract_balanced_delimiters(item, match.end())
        except ValueError:
            continue
        description = to_plaintext(item[end:]).lstrip(":–- ").strip()
        entries.append(
            Entry(
                primary_label=to_plaintext(name),
                bullet_points=[description] if description else [],
            )
        )
    return entries


def cvitem_entries(body: str) -> List[Entry]:
    """moderncv \\cvitem{Name}{Description}."""
    entries = []
    for call in find_command_calls(body, "cvitem", 2):
        description = _description_bullets(call.args[1])
        entries.append(Entry(primary_label=to_plaintext(call.args[0]), bullet_points=description))
    return entries


# =============================================================================
# STRUCTURED STRATEGIES: SKILLS
# =============================================================================


def _skill_group(category: str, items_markup: str) -> Optional[SkillGroup]:
    category = to_plaintext(category).rstrip(":").strip()
    items = split_items(to_plaintext(items_markup))
    if not category or not items:
        return None
    return SkillGroup(category=category, items=items)


def cvitem_skill_groups(body: str) -> List[SkillGroup]:
    """moderncv \\cvitem{Category}{items} and \\cvdoubleitem{Cat}{items}{Cat}{items}."""
    calls = find_command_calls(body, "cvitem", 2) + find_command_calls(body, "cvdoubleitem", 4)
    calls.sort(key=lambda call: call.start)
    groups = []
    for call in calls:
        pairs = [call.args[i:i + 2] for i in range(0, len(call.args), 2)]
        groups.extend(_skill_group(category, items) for category, items in pairs)
    return groups


def skill_macro_groups(body: str) -> List[SkillGroup]:
    """\\skill{Category}{items}."""
    return [_skill_group(*call.args) for call in find_command_calls(body, "skill", 2)]


def bold_category_groups(body: str) -> List[SkillGroup]:
    """
    Bold category labels followed by a list.

    Handles \\textbf{Languages}{: Python, Go}, \\textbf{Languages}: Python, Go
    and \\textbf{Languages:} Python, Go, including tabular cells split by &.
    """
    groups = []
    for call in find_command_calls(body, "textbf", 1):
        category = call.args[0]
        rest = body[call.end:]

        braced = re.match(r"\s*\{", rest)
        if braced and not to_plaintext(category).endswith(":"):
            try:
                content, _ = extract_balanced_delimiters(rest, braced.end())
            except ValueError:
                continue
            if not content.lstrip().startswith(":"):
                continue
            items = content.lstrip()[1:]
        else:
            if not to_plaintext(category).endswith(":"):
                colon = re.match(r"\s*:", rest)
                if not colon:
                    continue
                rest = rest[colon.end():]
            # Tabular rows put the items in the next cell
            items = SKILL_ITEMS_END.split(rest.lstrip(" \t&"), maxsplit=1)[0]

        groups.append(_skill_group(category, items))
    return groups


def itemize_skill_groups(body: str) -> List[SkillGroup]:
    """Plain itemized skills without categories, one group per list."""
    groups = []
    pos = 0
    while True:
        try:
            content, _, end_start = extract_environment_content(body, "itemize", pos)
        except ValueError:
            break
        items = [to_plaintext(item) for item in split_itemize_entries(content)]
        items = [item for item in items if item]
        if items:
            groups.append(SkillGroup(category="Skills", items=items))
        pos = end_start + 1
    return groups


# =============================================================================
# LINE HEURISTICS
# =============================================================================


def _clean_lines(body: str):
    """Yield (plaintext, is_item) per non-empty line."""
    for raw_line in body.splitlines():
        is_item = bool(ITEM_LINE.match(raw_line))
        line = to_plaintext(raw_line)
        if line:
            yield line, is_item


def experience_heuristic(body: str) -> List[Entry]:
    """
    Line-by-line experience reconstruction.

    A line with a year becomes the period, a line with a role word becomes
    the primary label, the next unclaimed line the secondary label; item
    lines become bullets. A new role (or a second period) starts a new entry.
    """
    entries = []
    current = Entry()

    def flush():
        nonlocal current
        if current.primary_label:
            entries.append(current)
        current = Entry()

    for line, is_item in _clean_lines(body):
        if is_item and current.primary_label:
            current.bullet_points.append(line)
        elif looks_like_period(line) and len(line) <= MAX_PERIOD_LINE_LENGTH:
            if current.period and current.primary_label:
                flush()
            current.period = line
        elif re.search(ROLE_VOCABULARY, line, re.IGNORECASE):
            if current.primary_label:
                flush()
            current.primary_label = line
        elif current.primary_label and not current.secondary_label:
            current.secondary_label = line
        elif current.primary_label:
            current.bullet_points.append(line)

    flush()
    return entries


def education_heuristic(body: str) -> List[Entry]:
    """Degree lines open entries; institution and year lines complete them."""
    entries = []
    current: Optional[Entry] = None

    def start(**fields) -> Entry:
        if current is not None and not current.is_empty():
            entries.append(current)
        return Entry(**fields)

    for line, is_item in _clean_lines(body):
        if re.search(DEGREE_VOCABULARY, line):
            if current is not None and not current.primary_label:
                current.primary_label = line
            else:
                current = start(primary_label=line)
        elif re.search(INSTITUTION_VOCABULARY, line, re.IGNORECASE):
            if current is not None and not current.secondary_label:
                current.secondary_label = line
            else:
                current = start(secondary_label=line)
        elif current is not None and looks_like_period(line) and not current.period:
            current.period = line
        elif current is not None and is_item:
            current.bullet_points.append(line)

    if current is not None and not current.is_empty():
        entries.append(current)
    return entries


def project_heuristic(body: str) -> List[Entry]:
    """Longer lines open entries; item lines under them become bullets."""
    entries = []
    for line, is_item in _clean_lines(body):
        if is_item and entries:
            entries[-1].bullet_points.append(line)
        elif (
            entries
            and not entries[-1].period
            and looks_like_period(line)
            and len(line) <= MAX_PERIOD_LINE_LENGTH
        ):
            entries[-1].period = line
        elif len(line) > MIN_PROJECT_LINE_LENGTH:
            entries.append(Entry(primary_label=line))
    return entries


def skills_heuristic(body: str) -> List[SkillGroup]:
    """Lines of the form "Category: a, b, c"."""
    groups = []
    for line, _ in _clean_lines(body):
        category, colon, items = line.partition(":")
        if colon:
            group = _skill_group(category, items)
            if group:
                groups.append(group)
    return groups


# =============================================================================
# CATEGORY PARSERS
# =============================================================================

EXPERIENCE_STRATEGIES: List[EntryStrategy] = [
    subheading_entries,
    cventry_entries,
    generic_experience_entries,
    bold_italic_year_entries,
]
EDUCATION_STRATEGIES: List[EntryStrategy] = [
    subheading_entries,
    cventry_entries,
    generic_education_entries,
]
PROJECT_STRATEGIES: List[EntryStrategy] = [
    project_heading_entries,
    subheading_entries,
    cventry_entries,
    bold_item_entries,
    cvitem_entries,
]
SKILL_STRATEGIES: List[SkillStrategy] = [
    cvitem_skill_groups,
    skill_macro_groups,
    bold_category_groups,
    itemize_skill_groups,
]


def _parse_with_fallback(body: str, title: str, category: str, strategies, heuristic) -> list:
    results = first_structured(strategies, body)
    if results:
        return results
    log_heuristic_fallback(title, category)
    return heuristic(body)


def parse_experience(body: str, title: str = "Experience") -> List[Entry]:
    return _parse_with_fallback(body, title, "experience", EXPERIENCE_STRATEGIES, experience_heuristic)


def parse_education(body: str, title: str = "Education") -> List[Entry]:
    return _parse_with_fallback(body, title, "education", EDUCATION_STRATEGIES, education_heuristic)


def parse_projects(body: str, title: str = "Projects") -> List[Entry]:
    return _parse_with_fallback(body, title, "project", PROJECT_STRATEGIES, project_heuristic)


def parse_achievements(body: str, title: str = "Achievements") -> List[Entry]:
    return _parse_with_fallback(body, title, "achievement", PROJECT_STRATEGIES, project_heuristic)


def parse_skills(body: str, title: str = "Skills") -> List[SkillGroup]:
    return _parse_with_fallback(body, title, "skill", SKILL_STRATEGIES, skills_heuristic)
