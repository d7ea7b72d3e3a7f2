# ============================================================================
# SOURCEFILE: decoder.py
# RELPATH: txtarchive/src/txtarchive/core/decoder.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Streaming archive decoder (text -> Archive)
# ============================================================================

"""
Archive Decoder.

Wire format::

    <comment lines>

    -- name[.base64][.snippet:N][.edit] --
    <content lines, base64 when [.base64] is present>
    -- next-name --

Streaming algorithm:

- A marker line starts a new file and finalizes the previous one.
- Lines before the first marker form the comment.
- Binary bodies skip blank lines and are base64 decoded on finalize.
- Text bodies keep every line; one trailing newline is dropped on finalize.

After the stream, commands are parsed from the comment, edit targets are
checked against the archive and the filesystem collaborator, and edit bodies
are compiled into edit programs.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

from txtarchive.core.detection import (
    MARKER_PREFIX,
    MARKER_SUFFIX,
    is_marker_line,
    split_lines,
)
from txtarchive.core.edits import parse_edit_blocks
from txtarchive.core.exceptions import (
    ArchiveReadError,
    Base64DecodeError,
    EditBlockDecodeError,
    EditParseError,
    EditTargetNotFoundError,
)
from txtarchive.core.filesystem import FileSystem, LocalFileSystem
from txtarchive.core.models import Archive, EditRef, File, SnippetRef
from txtarchive.core.tags import MarkerTags, parse_name_and_tags

logger = logging.getLogger(__name__)


class DecoderState(Enum):
    COMMENT = "comment"
    TEXT = "text"
    BINARY = "binary"


@dataclass
class _PendingFile:
    tags: MarkerTags
    line_start: int
    lines: List[str] = field(default_factory=list)


class Decoder:
    """
    Decodes archive text into an Archive.

    Args:
        verbose: Verbosity level; advisory warnings are logged when > 0
        strict_tags: Raise on unknown or malformed marker tags
        filesystem: Collaborator for edit-target existence checks;
                    defaults to the current directory
    """

    def __init__(self,
                 verbose: int = 0,
                 strict_tags: bool = False,
                 filesystem: Optional[FileSystem] = None):
        self.verbose = verbose
        self.strict_tags = strict_tags
        self.filesystem = filesystem if filesystem is not None else LocalFileSystem()
        self.diagnostics: List[str] = []

        self._handlers: Dict[DecoderState, Callable[[str], None]] = {
            DecoderState.COMMENT: self._handle_comment,
            DecoderState.TEXT: self._handle_text,
            DecoderState.BINARY: self._handle_binary,
        }
        self._reset()

    def _reset(self) -> None:
        self.state = DecoderState.COMMENT
        self._archive = Archive()
        self._comment_lines: List[str] = []
        self._current: Optional[_PendingFile] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def decode(self, text: str) -> Archive:
        """
        Decode archive text.

        Raises:
            TagSyntaxError: Empty file name, or bad tags in strict mode
            Base64DecodeError: Invalid payload in a [.base64] file
            DuplicateFileError: Two normal files with one name
            EditTargetNotFoundError: Edit file without a target
            InvalidUtf8Error: Edit body is not UTF-8
            EditBlockDecodeError: Edit body is not a valid edit program
        """
        self._reset()
        self.diagnostics = []

        for line_no, line in enumerate(split_lines(text), start=1):
            if is_marker_line(line):
                self._finalize_current()
                self._start_file(line, line_no)
                continue
            self._handlers[self.state](line)

        self._finalize_current()

        archive = self._archive
        archive.comment = self._build_comment()
        archive.parse_commands()
        self._compile_edits(archive)

        logger.debug(
            "Decoded archive: %d files, %d commands",
            archive.get_file_count(), len(archive.commands)
        )
        self._reset()
        return archive

    def decode_file(self, path: Path) -> Archive:
        """
        Read a UTF-8 archive file and decode it.

        Raises:
            ArchiveReadError: If the file cannot be read
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ArchiveReadError(str(path), str(e))
        return self.decode(text)

    # ------------------------------------------------------------------
    # Line handlers
    # ------------------------------------------------------------------

    def _handle_comment(self, line: str) -> None:
        # Leading blank lines never start the comment
        if not self._comment_lines and not line.strip():
            return
        self._comment_lines.append(line)

    def _handle_text(self, line: str) -> None:
        self._current.lines.append(line)

    def _handle_binary(self, line: str) -> None:
        if line.strip():
            self._current.lines.append(line)

    # ------------------------------------------------------------------
    # File boundaries
    # ------------------------------------------------------------------

    def _start_file(self, line: str, line_no: int) -> None:
        trimmed = line.strip()
        region = trimmed[len(MARKER_PREFIX):len(trimmed) - len(MARKER_SUFFIX)]
        tags = parse_name_and_tags(region, strict=self.strict_tags)

        if not tags.is_binary and MARKER_PREFIX in tags.name and MARKER_SUFFIX in tags.name:
            message = (
                f"Filename '{tags.name}' contains txtar marker pattern, "
                f"but is not marked as binary"
            )
            self.diagnostics.append(message)
            if self.verbose > 0:
                logger.warning(message)

        for tag in tags.unknown:
            logger.debug("Ignoring unrecognized tag %s on line %d", tag, line_no)

        self._current = _PendingFile(tags=tags, line_start=line_no)
        self.state = DecoderState.BINARY if tags.is_binary else DecoderState.TEXT

    def _finalize_current(self) -> None:
        pending = self._current
        if pending is None:
            return
        self._current = None
        tags = pending.tags

        if tags.is_binary:
            payload = "".join(pending.lines).replace("\r", "").replace("\n", "")
            try:
                data = base64.b64decode(payload, validate=True)
            except (binascii.Error, ValueError) as e:
                raise Base64DecodeError(tags.name, str(e))
            file = File.with_encoding(tags.name, data, True)
        else:
            body = "".join(line + "\n" for line in pending.lines)
            if body.endswith("\n"):
                body = body[:-1]
            file = File.with_encoding(tags.name, body, False)

        if tags.snippet is not None:
            href, line = tags.snippet
            file.snippet_ref = SnippetRef(command_href=href, line=line)
        if tags.edit is not None:
            href, start_line = tags.edit
            file.edit_ref = EditRef(command_href=href, start_line=start_line)

        self._archive.add_file(file)

    def _build_comment(self) -> str:
        lines = list(self._comment_lines)
        while lines and not lines[-1].strip():
            lines.pop()
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Edit programs
    # ------------------------------------------------------------------

    def _compile_edits(self, archive: Archive) -> None:
        edit_files = archive.edit_files()

        for f in edit_files:
            if archive.get_edit_target(f.name) is None and not self.filesystem.exists(f.name):
                raise EditTargetNotFoundError(f.name)

        for f in edit_files:
            body = f.text()
            try:
                edits = parse_edit_blocks(body)
            except EditParseError as e:
                raise EditBlockDecodeError(f.name, e) from e
            f.edit_ref = f.edit_ref.with_edits(edits)


def decode(text: str, **kwargs) -> Archive:
    """Convenience wrapper: ``Decoder(**kwargs).decode(text)``."""
    return Decoder(**kwargs).decode(text)


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: detection.py, tags.py, edits.py, models.py, filesystem.py
# TESTS: tests/unit/test_decoder.py
# ============================================================================
