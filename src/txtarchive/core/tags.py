# ============================================================================
# SOURCEFILE: tags.py
# RELPATH: txtarchive/src/txtarchive/core/tags.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Grammar for file-marker tags and comment command links
# ============================================================================

"""
Tag Grammar Module.

A file marker carries its name followed by zero or more bracket tags::

    -- src/app.py[.base64][.snippet#search1:42] --

Recognized tags:

    [.base64]              binary payload
    [.snippet:N]           snippet starting at line N
    [.snippet#HREF:LINE]   snippet tied to command HREF
    [.#HREF:LINE]          shorthand for the above
    [.edit]                body is an edit program
    [.edit#HREF:LINE]      edit program tied to command HREF

Command links live in the archive comment: ``[command: NAME](#HREF)``.

Parsers here return plain tuples; models.py wraps them in dataclasses.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from txtarchive.core.exceptions import (
    InvalidTagError,
    MissingClosingBracketError,
    SnippetParseError,
    TagSyntaxError,
)

BASE64_TAG = "[.base64]"
EDIT_TAG = "[.edit]"

SNIPPET_HREF_PREFIXES = ("[.#", "[.snippet#")
SNIPPET_LINE_PREFIX = "[.snippet:"
EDIT_HREF_PREFIX = "[.edit#"

# "[command: NAME](#HREF)" on a single line
COMMAND_LINK_PATTERN = re.compile(r"\[command:([^\]\n]*)\][ \t]*\(#([^)\n]*)\)")


def _parse_unsigned(text: str) -> Optional[int]:
    text = text.strip()
    if not text.isdigit() or not text.isascii():
        return None
    return int(text)


def parse_snippet_tag(tag: str) -> Tuple[Optional[str], int]:
    """
    Parse ``[.snippet:N]``, ``[.snippet#href:line]`` or ``[.#href:line]``.

    Returns:
        (command_href, line)

    Raises:
        SnippetParseError: With ``kind`` describing the failure
    """
    tag = tag.strip()

    has_href = False
    inner: Optional[str] = None
    for prefix in SNIPPET_HREF_PREFIXES:
        if tag.startswith(prefix):
            inner = tag[len(prefix):]
            has_href = True
            break
    if inner is None:
        if tag.startswith(SNIPPET_LINE_PREFIX):
            inner = tag[len(SNIPPET_LINE_PREFIX):]
        else:
            raise SnippetParseError(tag, "invalid_format")

    if not inner.endswith("]"):
        raise SnippetParseError(tag, "missing_closing_bracket")
    inner = inner[:-1]

    if has_href:
        href, colon, line_str = inner.partition(":")
        if not colon:
            raise SnippetParseError(tag, "missing_colon")
        line = _parse_unsigned(line_str)
        if line is None:
            raise SnippetParseError(tag, "invalid_line_number", line_str)
        return href, line

    line = _parse_unsigned(inner)
    if line is None:
        raise SnippetParseError(tag, "invalid_line_number", inner)
    return None, line


def is_snippet_tag(tag: str) -> bool:
    """True if ``tag`` starts like a snippet tag (valid or not)."""
    return tag.startswith(SNIPPET_HREF_PREFIXES) or tag.startswith(SNIPPET_LINE_PREFIX)


def parse_edit_tag(tag: str) -> Optional[Tuple[Optional[str], Optional[int]]]:
    """
    Parse ``[.edit]`` or ``[.edit#href:line]``.

    Returns:
        (command_href, start_line), or None if the tag is not an edit tag
    """
    if tag == EDIT_TAG:
        return None, None
    if not (tag.startswith(EDIT_HREF_PREFIX) and tag.endswith("]")):
        return None
    inner = tag[len(EDIT_HREF_PREFIX):-1]
    href, colon, line_str = inner.partition(":")
    if not colon:
        return None
    # No surrounding whitespace allowed in the edit line number
    if not line_str.isdigit() or not line_str.isascii():
        return None
    return href, int(line_str)


@dataclass
class MarkerTags:
    """Result of splitting a marker's name-and-tags region."""
    name: str
    is_binary: bool = False
    snippet: Optional[Tuple[Optional[str], int]] = None
    edit: Optional[Tuple[Optional[str], Optional[int]]] = None
    unknown: List[str] = field(default_factory=list)


def parse_name_and_tags(region: str, strict: bool = False) -> MarkerTags:
    """
    Split ``name[.tag][.tag]`` into the base name and recognized tags.

    Tags are scanned left to right; when a kind repeats, the later tag wins.
    In permissive mode unknown or malformed tags are collected in ``unknown``
    and otherwise ignored. In strict mode they raise.

    Raises:
        TagSyntaxError: Empty base name
        InvalidTagError, SnippetParseError, MissingClosingBracketError: strict mode
    """
    bracket = region.find("[")
    if bracket < 0:
        name = region.strip()
        if not name:
            raise TagSyntaxError(region, "File name cannot be empty")
        return MarkerTags(name=name)

    result = MarkerTags(name=region[:bracket].strip())
    if not result.name:
        raise TagSyntaxError(region, "File name cannot be empty")

    rest = region[bracket:]
    while True:
        end = rest.find("]")
        if end < 0:
            break
        tag = rest[:end + 1]
        rest = rest[end + 1:]

        if tag == BASE64_TAG:
            result.is_binary = True
            continue

        if is_snippet_tag(tag):
            try:
                result.snippet = parse_snippet_tag(tag)
            except SnippetParseError:
                if strict:
                    raise
                result.unknown.append(tag)
            continue

        edit = parse_edit_tag(tag)
        if edit is not None:
            result.edit = edit
            continue

        if strict:
            raise InvalidTagError(region, tag)
        result.unknown.append(tag)

    if strict and rest.strip():
        if "[" in rest:
            raise MissingClosingBracketError(region)
        raise TagSyntaxError(region, f"Unexpected text after tags: '{rest.strip()}'")

    return result


def find_command_links(text: str) -> List[Tuple[str, str]]:
    """
    Find every ``[command: NAME](#HREF)`` link in ``text``.

    Returns:
        List of (name, href) in order of appearance. NAME is trimmed, HREF is
        kept verbatim.
    """
    return [(m.group(1).strip(), m.group(2)) for m in COMMAND_LINK_PATTERN.finditer(text)]


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: exceptions.py
# TESTS: tests/unit/test_tags.py
# ============================================================================
