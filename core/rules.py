"""
rules.py - Rename Rule Definitions

Contains:
- One frozen dataclass per rule kind (the rule pipeline is a list of these)
- Option enumerations (case mode, placement, trim mode, date source)
- Conversion to and from plain dictionaries for the UI / JSON boundary
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, ClassVar, Dict, List, Type, Union
import re


class RuleConfigError(ValueError):
    """Rule data that cannot be turned into a rule"""


class CaseMode(Enum):
    """Case conversion mode"""
    UPPER = "upper"
    LOWER = "lower"
    TITLE = "title"
    CAMEL = "camel"
    SNAKE = "snake"
    KEBAB = "kebab"


class Placement(Enum):
    """Where generated text (number / date) goes relative to the base name"""
    PREFIX = "prefix"
    SUFFIX = "suffix"
    REPLACE = "replace"


class TrimMode(Enum):
    """Whitespace handling mode"""
    TRIM = "trim"        # Strip leading/trailing whitespace
    SINGLE = "single"    # Strip and collapse internal runs to one space
    REMOVE = "remove"    # Remove all whitespace


class DateSource(Enum):
    """Which file timestamp a date rule reads"""
    MTIME = "mtime"
    BIRTHTIME = "birthtime"


@dataclass(frozen=True)
class PrefixRule:
    """Add text before the base name"""
    value: str = ""

    type: ClassVar[str] = "prefix"
    label: ClassVar[str] = "Prefix"


@dataclass(frozen=True)
class SuffixRule:
    """Add text after the base name"""
    value: str = ""

    type: ClassVar[str] = "suffix"
    label: ClassVar[str] = "Suffix"


@dataclass(frozen=True)
class ReplaceRule:
    """Find and replace in the base name"""
    find: str = ""
    replace: str = ""
    case_sensitive: bool = False
    use_regex: bool = False

    type: ClassVar[str] = "replace"
    label: ClassVar[str] = "Replace"


@dataclass(frozen=True)
class RemoveCharsRule:
    """Remove every occurrence of the given characters"""
    chars: str = ""

    type: ClassVar[str] = "removeChars"
    label: ClassVar[str] = "Remove Chars"
    aliases: ClassVar[Dict[str, str]] = {"value": "chars"}


@dataclass(frozen=True)
class CaseRule:
    """Change the case of the base name"""
    mode: CaseMode = CaseMode.TITLE

    type: ClassVar[str] = "case"
    label: ClassVar[str] = "Case"
    aliases: ClassVar[Dict[str, str]] = {"value": "mode"}


@dataclass(frozen=True)
class SequentialRule:
    """Number files in batch order"""
    start: int = 1
    padding: int = 3
    separator: str = "_"
    position: Placement = Placement.SUFFIX

    type: ClassVar[str] = "sequential"
    label: ClassVar[str] = "Sequential"


@dataclass(frozen=True)
class InsertAtRule:
    """Insert text at a character index (negative counts from the end)"""
    value: str = ""
    position: int = 0

    type: ClassVar[str] = "insertAt"
    label: ClassVar[str] = "Insert At"


@dataclass(frozen=True)
class RemoveAtRule:
    """Remove a run of characters (negative start counts from the end)"""
    start: int = 0
    count: int = 1

    type: ClassVar[str] = "removeAt"
    label: ClassVar[str] = "Remove At"


@dataclass(frozen=True)
class FilterExtRule:
    """Only rename files with these extensions"""
    extensions: List[str] = field(default_factory=list)

    type: ClassVar[str] = "filterExt"
    label: ClassVar[str] = "Filter Ext"
    aliases: ClassVar[Dict[str, str]] = {"value": "extensions"}


@dataclass(frozen=True)
class ChangeExtRule:
    """Replace the extension (empty value removes it)"""
    value: str = ""

    type: ClassVar[str] = "changeExt"
    label: ClassVar[str] = "Ext Change"


@dataclass(frozen=True)
class TrimSpacesRule:
    """Trim / collapse / remove whitespace"""
    mode: TrimMode = TrimMode.TRIM

    type: ClassVar[str] = "trimSpaces"
    label: ClassVar[str] = "Trim Spaces"
    aliases: ClassVar[Dict[str, str]] = {"value": "mode"}


@dataclass(frozen=True)
class RemoveSpecialRule:
    """Keep only letters, digits, whitespace, hyphens, underscores and dots"""

    type: ClassVar[str] = "removeSpecial"
    label: ClassVar[str] = "Remove Special"


@dataclass(frozen=True)
class DateRenameRule:
    """Add a formatted file date"""
    source: DateSource = DateSource.MTIME
    format: str = "YYYY-MM-DD"
    position: Placement = Placement.PREFIX
    separator: str = "_"

    type: ClassVar[str] = "dateRename"
    label: ClassVar[str] = "Date Rename"


@dataclass(frozen=True)
class RegexRule:
    """Regular expression replace (case-insensitive unless asked otherwise)"""
    find: str = ""
    replace: str = ""
    case_sensitive: bool = False

    type: ClassVar[str] = "regex"
    label: ClassVar[str] = "Regex"


Rule = Union[
    PrefixRule, SuffixRule, ReplaceRule, RemoveCharsRule, CaseRule,
    SequentialRule, InsertAtRule, RemoveAtRule, FilterExtRule, ChangeExtRule,
    TrimSpacesRule, RemoveSpecialRule, DateRenameRule, RegexRule,
]

# Tag -> rule class, in the order offered to users
RULE_TYPES: Dict[str, Type] = {
    cls.type: cls
    for cls in (
        PrefixRule, SuffixRule, ReplaceRule, RemoveCharsRule, CaseRule,
        SequentialRule, InsertAtRule, RemoveAtRule, FilterExtRule,
        ChangeExtRule, TrimSpacesRule, RemoveSpecialRule, DateRenameRule,
        RegexRule,
    )
}


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _to_snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def parse_extensions(value: Any) -> List[str]:
    """
    Normalize an extension list

    Accepts a list or a comma-separated string ("txt, .JPG").

    Returns:
        Lowercase extensions without the leading dot, empty entries dropped
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    result = []
    for item in value:
        ext = str(item).strip().lower()
        if ext.startswith("."):
            ext = ext[1:]
        if ext:
            result.append(ext)
    return result


def _coerce(field_type: Any, value: Any, default: Any, rule_type: str, name: str) -> Any:
    """Convert a raw boundary value into the field's declared type"""
    if isinstance(field_type, type) and issubclass(field_type, Enum):
        if isinstance(value, field_type):
            return value
        try:
            return field_type(value)
        except ValueError:
            choices = ", ".join(m.value for m in field_type)
            raise RuleConfigError(
                f"Invalid {name} for rule '{rule_type}': {value!r} (expected one of: {choices})"
            )
    if field_type is bool:
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if field_type is int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default
    if field_type == List[str]:
        return parse_extensions(value)
    return "" if value is None else str(value)


def new_rule(rule_type: str) -> Rule:
    """Create a rule of the given tag with default settings"""
    try:
        return RULE_TYPES[rule_type]()
    except KeyError:
        raise RuleConfigError(f"Unknown rule type: {rule_type!r}")


def rule_from_dict(data: Dict[str, Any]) -> Rule:
    """
    Build a rule from its dictionary form

    Keys may be camelCase (wire form) or snake_case. Unknown keys are ignored.

    Raises:
        RuleConfigError: Unknown type tag or invalid enum value
    """
    if not isinstance(data, dict):
        raise RuleConfigError(f"Rule must be a mapping, got {type(data).__name__}")

    rule_type = data.get("type")
    cls = RULE_TYPES.get(rule_type)
    if cls is None:
        raise RuleConfigError(f"Unknown rule type: {rule_type!r}")

    aliases = getattr(cls, "aliases", {})
    known = {f.name: f for f in fields(cls)}
    kwargs = {}
    for key, value in data.items():
        if key == "type":
            continue
        name = aliases.get(key, _to_snake(key))
        f = known.get(name)
        if f is None:
            continue
        default = f.default_factory() if callable(f.default_factory) else f.default
        kwargs[name] = _coerce(f.type, value, default, rule_type, name)

    return cls(**kwargs)


def rule_to_dict(rule: Rule) -> Dict[str, Any]:
    """Convert a rule into plain, JSON-compatible data"""
    data: Dict[str, Any] = {"type": rule.type}
    for f in fields(rule):
        value = getattr(rule, f.name)
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, list):
            value = list(value)
        data[_to_camel(f.name)] = value
    return data


def update_rule(rule: Rule, **changes: Any) -> Rule:
    """Return a copy of the rule with some fields changed (values are coerced)"""
    coerced = {}
    for f in fields(rule):
        if f.name in changes:
            default = getattr(rule, f.name)
            coerced[f.name] = _coerce(f.type, changes[f.name], default, rule.type, f.name)
    return replace(rule, **coerced)


def describe_rule(rule: Rule) -> str:
    """One-line summary of a rule for lists and logs"""
    if isinstance(rule, PrefixRule):
        return f'"{rule.value}" + name' if rule.value else "Add prefix"
    if isinstance(rule, SuffixRule):
        return f'name + "{rule.value}"' if rule.value else "Add suffix"
    if isinstance(rule, ReplaceRule):
        if not rule.find:
            return "Find & Replace"
        kind = "regex " if rule.use_regex else ""
        return f'{kind}"{rule.find}" -> "{rule.replace}"'
    if isinstance(rule, RemoveCharsRule):
        return f'Remove: "{rule.chars}"' if rule.chars else "Remove characters"
    if isinstance(rule, CaseRule):
        return f"-> {rule.mode.value}"
    if isinstance(rule, SequentialRule):
        return f"{rule.start}+ pad {rule.padding} ({rule.position.value})"
    if isinstance(rule, InsertAtRule):
        return f'Insert "{rule.value}" at {rule.position}' if rule.value else "Insert at position"
    if isinstance(rule, RemoveAtRule):
        return f"Remove {rule.count} char(s) at {rule.start}"
    if isinstance(rule, FilterExtRule):
        return f"Only: {', '.join(rule.extensions)}" if rule.extensions else "Filter by ext"
    if isinstance(rule, ChangeExtRule):
        return f"-> {rule.value or '(none)'}"
    if isinstance(rule, TrimSpacesRule):
        return rule.mode.value
    if isinstance(rule, RemoveSpecialRule):
        return "Remove special chars"
    if isinstance(rule, DateRenameRule):
        return f"{rule.source.value} -> {rule.format} ({rule.position.value})"
    if isinstance(rule, RegexRule):
        return f'/{rule.find}/ -> "{rule.replace}"' if rule.find else "Regex replace"
    raise TypeError(f"Unsupported rule: {rule!r}")
