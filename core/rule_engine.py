"""
rule_engine.py - Rule Application

Responsibilities:
- Apply a single rule to the parts of one filename
- Pure functions only: no disk access, no hidden state

The sequential index is supplied by the caller for every call.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Dict, Optional, Type
import re

from .rules import (
    Rule, PrefixRule, SuffixRule, ReplaceRule, RemoveCharsRule, CaseRule,
    SequentialRule, InsertAtRule, RemoveAtRule, FilterExtRule, ChangeExtRule,
    TrimSpacesRule, RemoveSpecialRule, DateRenameRule, RegexRule,
    CaseMode, Placement, TrimMode, DateSource,
)
from .text_match import (
    replace_text, regex_replace, remove_chars, title_case, camel_case,
    join_words, collapse_spaces, remove_spaces, remove_special,
)


@dataclass(frozen=True)
class NameParts:
    """A filename split for rule processing, plus the timestamps date rules read"""
    base: str
    ext: str
    mtime: Optional[datetime] = None
    birthtime: Optional[datetime] = None

    @property
    def name(self) -> str:
        return self.base + self.ext


_Applier = Callable[[NameParts, Rule, int], NameParts]
_APPLIERS: Dict[Type, _Applier] = {}


def _applies_to(rule_cls: Type) -> Callable[[_Applier], _Applier]:
    def register(func: _Applier) -> _Applier:
        _APPLIERS[rule_cls] = func
        return func
    return register


def place(base: str, text: str, position: Placement, separator: str) -> str:
    """Put generated text before, after, or instead of the base name"""
    if position == Placement.PREFIX:
        return text + separator + base
    if position == Placement.REPLACE:
        return text
    return base + separator + text


_DATE_TOKENS = re.compile(r"YYYY|YY|MM|DD|HH|mm|ss")


def format_date(moment: Optional[datetime], fmt: str) -> str:
    """
    Format a timestamp with YYYY YY MM DD HH mm ss tokens

    Tokens are substituted in one pass, so a substituted value is never
    re-read as another token. Aware timestamps are shown in local time.

    Returns:
        Formatted string, or "unknown" when there is no timestamp
    """
    if moment is None:
        return "unknown"
    if moment.tzinfo is not None:
        moment = moment.astimezone()

    values = {
        "YYYY": f"{moment.year:04d}",
        "YY": f"{moment.year:04d}"[2:],
        "MM": f"{moment.month:02d}",
        "DD": f"{moment.day:02d}",
        "HH": f"{moment.hour:02d}",
        "mm": f"{moment.minute:02d}",
        "ss": f"{moment.second:02d}",
    }
    return _DATE_TOKENS.sub(lambda m: values[m.group(0)], fmt)


@_applies_to(PrefixRule)
def _prefix(parts: NameParts, rule: PrefixRule, index: int) -> NameParts:
    if not rule.value:
        return parts
    return replace(parts, base=rule.value + parts.base)


@_applies_to(SuffixRule)
def _suffix(parts: NameParts, rule: SuffixRule, index: int) -> NameParts:
    if not rule.value:
        return parts
    return replace(parts, base=parts.base + rule.value)


@_applies_to(ReplaceRule)
def _replace(parts: NameParts, rule: ReplaceRule, index: int) -> NameParts:
    if not rule.find:
        return parts
    if rule.use_regex:
        base = regex_replace(parts.base, rule.find, rule.replace, rule.case_sensitive)
    else:
        base = replace_text(parts.base, rule.find, rule.replace, rule.case_sensitive)
    return replace(parts, base=base)


@_applies_to(RemoveCharsRule)
def _remove_chars(parts: NameParts, rule: RemoveCharsRule, index: int) -> NameParts:
    return replace(parts, base=remove_chars(parts.base, rule.chars))


@_applies_to(CaseRule)
def _case(parts: NameParts, rule: CaseRule, index: int) -> NameParts:
    base = parts.base
    if rule.mode == CaseMode.UPPER:
        base = base.upper()
    elif rule.mode == CaseMode.LOWER:
        base = base.lower()
    elif rule.mode == CaseMode.TITLE:
        base = title_case(base)
    elif rule.mode == CaseMode.CAMEL:
        base = camel_case(base)
    elif rule.mode == CaseMode.SNAKE:
        base = join_words(base, "_")
    elif rule.mode == CaseMode.KEBAB:
        base = join_words(base, "-")
    return replace(parts, base=base)


@_applies_to(SequentialRule)
def _sequential(parts: NameParts, rule: SequentialRule, index: int) -> NameParts:
    number = str(rule.start + index).zfill(max(rule.padding, 0))
    return replace(parts, base=place(parts.base, number, rule.position, rule.separator))


@_applies_to(InsertAtRule)
def _insert_at(parts: NameParts, rule: InsertAtRule, index: int) -> NameParts:
    base = parts.base
    if rule.position < 0:
        at = max(0, len(base) + rule.position)
    else:
        at = min(rule.position, len(base))
    return replace(parts, base=base[:at] + rule.value + base[at:])


@_applies_to(RemoveAtRule)
def _remove_at(parts: NameParts, rule: RemoveAtRule, index: int) -> NameParts:
    base = parts.base
    if rule.start < 0:
        start = max(0, len(base) + rule.start)
    else:
        start = min(rule.start, len(base))
    count = max(rule.count, 0)
    return replace(parts, base=base[:start] + base[start + count:])


@_applies_to(FilterExtRule)
def _filter_ext(parts: NameParts, rule: FilterExtRule, index: int) -> NameParts:
    # Consumed by the preview generator
    return parts


@_applies_to(ChangeExtRule)
def _change_ext(parts: NameParts, rule: ChangeExtRule, index: int) -> NameParts:
    value = rule.value
    if value and not value.startswith("."):
        value = "." + value
    return replace(parts, ext=value)


@_applies_to(TrimSpacesRule)
def _trim_spaces(parts: NameParts, rule: TrimSpacesRule, index: int) -> NameParts:
    if rule.mode == TrimMode.SINGLE:
        base = collapse_spaces(parts.base)
    elif rule.mode == TrimMode.REMOVE:
        base = remove_spaces(parts.base)
    else:
        base = parts.base.strip()
    return replace(parts, base=base)


@_applies_to(RemoveSpecialRule)
def _remove_special(parts: NameParts, rule: RemoveSpecialRule, index: int) -> NameParts:
    return replace(parts, base=remove_special(parts.base))


@_applies_to(DateRenameRule)
def _date_rename(parts: NameParts, rule: DateRenameRule, index: int) -> NameParts:
    moment = parts.birthtime if rule.source == DateSource.BIRTHTIME else parts.mtime
    text = format_date(moment, rule.format)
    return replace(parts, base=place(parts.base, text, rule.position, rule.separator))


@_applies_to(RegexRule)
def _regex(parts: NameParts, rule: RegexRule, index: int) -> NameParts:
    if not rule.find:
        return parts
    return replace(parts, base=regex_replace(parts.base, rule.find, rule.replace, rule.case_sensitive))


def apply_rule(parts: NameParts, rule: Rule, index: int = 0) -> NameParts:
    """
    Apply one rule to a filename

    Args:
        parts: Current base/ext and timestamps
        rule: Rule to apply
        index: Sequential index of the file within the batch

    Returns:
        New name parts (timestamps carried over)

    Raises:
        TypeError: Object is not a known rule
    """
    applier = _APPLIERS.get(type(rule))
    if applier is None:
        raise TypeError(f"Unsupported rule: {rule!r}")
    return applier(parts, rule, index)


def apply_rules(parts: NameParts, rules, index: int = 0) -> NameParts:
    """Thread a filename through a list of rules in order"""
    for rule in rules:
        parts = apply_rule(parts, rule, index)
    return parts
