# ============================================================================
# SOURCEFILE: edits.py
# RELPATH: txtarchive/src/txtarchive/core/edits.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: SEARCH/REPLACE edit-block parser and line-based apply engine
# ============================================================================

"""
Edit Program Module.

An ``[.edit]`` file body is a sequence of conflict-style blocks::

    <<<<<<< SEARCH
    old line
    =======
    new line
    >>>>>>> REPLACE

``>>>>>>> DELETE`` directly after the search lines removes them; a block with
an empty SEARCH section inserts its replacement at the top of the file.

Blocks are applied in order, each against the result of the previous one.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from txtarchive.core.detection import split_lines
from txtarchive.core.exceptions import (
    EmptyBlockError,
    EmptyContentError,
    ExpectedSearchStartError,
    MalformedLineError,
    MultipleMatchesError,
    SearchNotFoundError,
    UnterminatedBlockError,
)
from txtarchive.core.models import EditBlock, EditOperation

logger = logging.getLogger(__name__)

SEARCH_START = "<<<<<<< SEARCH"
SEPARATOR = "======="
REPLACE_END = ">>>>>>> REPLACE"
INSERT_END = ">>>>>>> INSERT"
DELETE_END = ">>>>>>> DELETE"
CONFLICT_PREFIX = "<<<<<<<"


class ParserState(Enum):
    START = "start"
    IN_SEARCH = "in_search"
    IN_REPLACE = "in_replace"


class EditParser:
    """
    Line-by-line state machine over an edit body.

    START -> IN_SEARCH -> IN_REPLACE -> START, with ``>>>>>>> DELETE``
    closing a block straight from IN_SEARCH. Markers match by prefix, so
    ``<<<<<<< SEARCH (a.py)`` opens a block. Lines are right-trimmed before
    matching and before being stored.
    """

    def __init__(self):
        self.state = ParserState.START
        self.blocks: List[EditBlock] = []
        self._pending: List[tuple] = []
        self._search: List[str] = []
        self._replacement: List[str] = []
        self._handlers: Dict[ParserState, Callable[[int, str], None]] = {
            ParserState.START: self._handle_start,
            ParserState.IN_SEARCH: self._handle_search,
            ParserState.IN_REPLACE: self._handle_replace,
        }

    def parse(self, content: str) -> List[EditBlock]:
        """
        Parse a whole edit body.

        Raises:
            EditParseError subclass on malformed input
        """
        for line_number, line in enumerate(split_lines(content), start=1):
            self.feed(line_number, line)
        return self.finish()

    def feed(self, line_number: int, line: str) -> None:
        self._handlers[self.state](line_number, line.rstrip())

    def _handle_start(self, line_number: int, line: str) -> None:
        if line.startswith(SEARCH_START):
            self._search = []
            self._replacement = []
            self.state = ParserState.IN_SEARCH
        elif line.startswith(CONFLICT_PREFIX):
            raise MalformedLineError(line_number, line)
        elif line.strip():
            raise ExpectedSearchStartError(line_number)

    def _handle_search(self, line_number: int, line: str) -> None:
        if line.startswith(SEPARATOR):
            self.state = ParserState.IN_REPLACE
        elif line.startswith(DELETE_END):
            self._close(EditOperation.DELETE)
        else:
            self._search.append(line)

    def _handle_replace(self, line_number: int, line: str) -> None:
        if line.startswith((REPLACE_END, INSERT_END)):
            # INSERT is inferred from an empty search in finish()
            self._close(EditOperation.REPLACE)
        else:
            self._replacement.append(line)

    def _close(self, operation: EditOperation) -> None:
        self._pending.append((tuple(self._search), tuple(self._replacement), operation))
        self._search = []
        self._replacement = []
        self.state = ParserState.START

    def finish(self) -> List[EditBlock]:
        """
        Validate the collected blocks and build EditBlock values.

        Raises:
            UnterminatedBlockError: Input ended inside a block
            EmptyBlockError: A block has neither search nor replacement lines
        """
        if self.state is not ParserState.START:
            raise UnterminatedBlockError()

        for search, replacement, operation in self._pending:
            if not search and not replacement:
                raise EmptyBlockError()
            if not search:
                operation = EditOperation.INSERT
            self.blocks.append(EditBlock(search, replacement, operation))
        self._pending = []
        return self.blocks


def parse_edit_blocks(content: str) -> List[EditBlock]:
    """Parse an edit body into an ordered list of EditBlock."""
    return EditParser().parse(content)


def find_search_block(lines: Sequence[str], search: Sequence[str]) -> Optional[int]:
    """Return the index of the first contiguous exact match of ``search``."""
    n = len(search)
    if n == 0 or n > len(lines):
        return None
    search = list(search)
    for i in range(len(lines) - n + 1):
        if list(lines[i:i + n]) == search:
            return i
    return None


def count_matches(lines: Sequence[str], search: Sequence[str]) -> int:
    """Count (possibly overlapping) occurrences of ``search`` in ``lines``."""
    n = len(search)
    if n == 0 or n > len(lines):
        return 0
    search = list(search)
    return sum(1 for i in range(len(lines) - n + 1) if list(lines[i:i + n]) == search)


def apply_edits(content: str,
                edits: Sequence[EditBlock],
                require_unique: bool = False) -> str:
    """
    Apply edit blocks to ``content`` in order.

    Args:
        content: Target text; ``\\n`` and ``\\r\\n`` both end lines
        edits: Ordered blocks
        require_unique: Reject a SEARCH that occurs more than once

    Returns:
        Edited lines joined with ``\\n`` (no trailing newline added)

    Raises:
        EmptyContentError: Empty content and a non-INSERT edit
        SearchNotFoundError: A SEARCH has no exact match
        MultipleMatchesError: ``require_unique`` and a SEARCH is ambiguous
    """
    if not content and any(e.operation is not EditOperation.INSERT for e in edits):
        raise EmptyContentError()

    lines = split_lines(content)

    for block in edits:
        if block.operation is EditOperation.INSERT or not block.search:
            lines = list(block.replacement) + lines
            continue

        if require_unique:
            count = count_matches(lines, block.search)
            if count > 1:
                raise MultipleMatchesError("\n".join(block.search), count)

        pos = find_search_block(lines, block.search)
        if pos is None:
            raise SearchNotFoundError("\n".join(block.search))

        end = pos + len(block.search)
        if block.operation is EditOperation.DELETE:
            lines = lines[:pos] + lines[end:]
        else:
            lines = lines[:pos] + list(block.replacement) + lines[end:]
        logger.debug("Applied %s at line %d", block.operation.value, pos + 1)

    return "\n".join(lines)


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: detection.py, models.py, exceptions.py
# TESTS: tests/unit/test_edits.py
# ============================================================================
