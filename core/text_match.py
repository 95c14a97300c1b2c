"""
text_match.py - Text Matching Tools

Provides string replacement, regex substitution and case helpers used by
the rule engine
"""

from typing import Optional, Pattern
import re


def replace_text(text: str, old: str, new: str, case_sensitive: bool = True) -> str:
    """
    Replace every occurrence of a literal string

    Args:
        text: Original text
        old: String to replace
        new: Replacement string (inserted literally)
        case_sensitive: Whether case-sensitive

    Returns:
        Replaced text
    """
    if not old:
        return text

    if case_sensitive:
        return text.replace(old, new)
    else:
        # Case-insensitive replacement
        pattern = re.compile(re.escape(old), re.IGNORECASE)
        return pattern.sub(lambda _m: new, text)


def compile_pattern(pattern: str, case_sensitive: bool = True) -> Optional[Pattern]:
    """
    Compile a user-supplied pattern

    Returns:
        Compiled pattern, or None if the pattern is invalid
    """
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return re.compile(pattern, flags)
    except (re.error, OverflowError):
        return None


_TEMPLATE_TOKEN = re.compile(r"\$(\$|&|\d{1,2})")


def expand_template(template: str, match: "re.Match") -> str:
    """
    Expand a replacement template for one match

    Supported tokens: $& (whole match), $1..$99 (groups, unmatched -> empty),
    $$ (literal dollar). Backslashes have no special meaning.
    """
    def _token(m: "re.Match") -> str:
        token = m.group(1)
        if token == "$":
            return "$"
        if token == "&":
            return match.group(0)
        index = int(token)
        if len(token) == 2 and index > match.re.groups:
            # "$12" with a single group means "$1" followed by "2"
            index, tail = int(token[0]), token[1]
        else:
            tail = ""
        if index == 0 or index > match.re.groups:
            return m.group(0)
        return (match.group(index) or "") + tail

    return _TEMPLATE_TOKEN.sub(_token, template)


def regex_replace(text: str, pattern: str, template: str, case_sensitive: bool = True) -> str:
    """
    Replace all matches of a regex pattern

    An invalid pattern leaves the text unchanged.
    """
    compiled = compile_pattern(pattern, case_sensitive)
    if compiled is None:
        return text
    return compiled.sub(lambda m: expand_template(template, m), text)


def remove_chars(text: str, chars: str) -> str:
    """Remove every occurrence of any character in chars"""
    if not chars:
        return text
    return text.translate({ord(c): None for c in set(chars)})


def title_case(text: str) -> str:
    """Uppercase the first character of each word run, lowercase the rest"""
    return re.sub(r"\w\S*", lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), text)


def camel_case(text: str) -> str:
    """Lowercase, then drop separators and uppercase the character after them"""
    return re.sub(r"[^a-z0-9]+(.)", lambda m: m.group(1).upper(), text.lower())


def join_words(text: str, separator: str) -> str:
    """Lowercase and replace whitespace runs with separator (snake / kebab)"""
    return re.sub(r"\s+", separator, text.lower())


def collapse_spaces(text: str) -> str:
    """Strip ends and collapse internal whitespace runs to a single space"""
    return re.sub(r"\s+", " ", text.strip())


def remove_spaces(text: str) -> str:
    """Remove all whitespace"""
    return re.sub(r"\s+", "", text)


def remove_special(text: str) -> str:
    """Keep ASCII letters, digits, whitespace, hyphens, underscores and dots"""
    return re.sub(r"[^a-zA-Z0-9\s\-_.]", "", text)
