# ============================================================================
# SOURCEFILE: models.py
# RELPATH: txtarchive/src/txtarchive/core/models.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Core data models for archives, files, commands and edit programs
# ============================================================================

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from txtarchive.core.detection import (
    BinaryReason,
    EncodingConfig,
    detect_encoding,
)
from txtarchive.core.exceptions import (
    ArchiveReadError,
    DuplicateFileError,
    EditTargetNotFoundError,
    InvalidUtf8Error,
)
from txtarchive.core.tags import BASE64_TAG, find_command_links, parse_snippet_tag

Data = Union[bytes, bytearray, str]


def _as_bytes(data: Data) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


@dataclass(frozen=True)
class Command:
    """
    A command reference declared in the archive comment.

    Format: ``[command: NAME](#HREF)``

    Attributes:
        name: Command name/type (e.g. "rg", "git diff")
        href: Identifier without the leading '#'
    """
    name: str
    href: str

    @classmethod
    def parse(cls, text: str) -> Optional["Command"]:
        """Parse a single command link; None if ``text`` holds none."""
        links = find_command_links(text.strip())
        if not links:
            return None
        name, href = links[0]
        return cls(name=name, href=href)


@dataclass(frozen=True)
class SnippetRef:
    """
    Marks a file as an excerpt starting at ``line``.

    Attributes:
        command_href: Optional command the snippet came from
        line: Line number in the original source
    """
    command_href: Optional[str]
    line: int

    def __post_init__(self) -> None:
        if not isinstance(self.line, int) or self.line < 0:
            raise ValueError(f"Invalid snippet line: {self.line}. Must be non-negative integer")

    @classmethod
    def parse(cls, tag: str) -> "SnippetRef":
        """
        Parse ``[.snippet:N]``, ``[.snippet#href:line]`` or ``[.#href:line]``.

        Raises:
            SnippetParseError: If the tag is malformed
        """
        href, line = parse_snippet_tag(tag)
        return cls(command_href=href, line=line)


class EditOperation(Enum):
    """Kind of change an edit block performs."""
    REPLACE = "replace"
    DELETE = "delete"
    INSERT = "insert"


@dataclass(frozen=True)
class EditBlock:
    """
    One SEARCH/REPLACE unit of an edit program.

    Attributes:
        search: Lines to find (right-trimmed)
        replacement: Lines to put in their place (right-trimmed)
        operation: REPLACE, DELETE or INSERT
    """
    search: Tuple[str, ...]
    replacement: Tuple[str, ...]
    operation: EditOperation = EditOperation.REPLACE

    def __post_init__(self) -> None:
        object.__setattr__(self, "search", tuple(self.search))
        object.__setattr__(self, "replacement", tuple(self.replacement))
        if not self.search and not self.replacement:
            raise ValueError("EditBlock search and replacement cannot both be empty")

    @classmethod
    def replace(cls, search: Sequence[str], replacement: Sequence[str]) -> "EditBlock":
        return cls(tuple(search), tuple(replacement), EditOperation.REPLACE)

    @classmethod
    def delete(cls, search: Sequence[str]) -> "EditBlock":
        return cls(tuple(search), (), EditOperation.DELETE)

    @classmethod
    def insert(cls, lines: Sequence[str]) -> "EditBlock":
        return cls((), tuple(lines), EditOperation.INSERT)


@dataclass(frozen=True)
class EditRef:
    """
    Edit metadata plus the parsed edit program of an ``[.edit]`` file.

    Attributes:
        command_href: Optional command the edit came from
        start_line: Informational starting line; not used when applying
        edits: Ordered edit blocks
    """
    command_href: Optional[str] = None
    start_line: Optional[int] = None
    edits: Tuple[EditBlock, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "edits", tuple(self.edits))

    def with_edits(self, edits: Iterable[EditBlock]) -> "EditRef":
        return dataclasses.replace(self, edits=tuple(edits))

    def apply(self, content: str, require_unique: bool = False) -> str:
        """Apply this program's edits to ``content``. See edits.apply_edits."""
        from txtarchive.core.edits import apply_edits
        return apply_edits(content, self.edits, require_unique=require_unique)


@dataclass
class File:
    """
    A single file within an archive.

    Attributes:
        name: Name of the file, '/'-separated segments allowed
        data: Raw file bytes
        is_binary: True if the file travels base64 encoded
        binary_reason: Why the file is binary; set iff is_binary
        snippet_ref: Snippet metadata, if this file is an excerpt
        edit_ref: Edit metadata, if this file's body is an edit program
    """
    name: str
    data: bytes
    is_binary: bool = False
    binary_reason: Optional[BinaryReason] = None
    snippet_ref: Optional[SnippetRef] = None
    edit_ref: Optional[EditRef] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("File name cannot be empty")
        self.name = self.name.replace("\\", "/")
        self.data = _as_bytes(self.data)

        if self.is_binary and self.binary_reason is None:
            self.binary_reason = BinaryReason.EXPLICIT
        elif not self.is_binary and self.binary_reason is not None:
            raise ValueError(
                f"File '{self.name}' has binary_reason {self.binary_reason} but is not binary"
            )

    @classmethod
    def new(cls, name: str, data: Data, config: Optional[EncodingConfig] = None) -> "File":
        """Create a file, classifying its content with the encoding detector."""
        raw = _as_bytes(data)
        detection = detect_encoding(name, raw, config)
        if detection.is_binary:
            return cls(name=name, data=raw, is_binary=True, binary_reason=detection.reason)
        return cls(name=name, data=raw)

    @classmethod
    def with_encoding(cls, name: str, data: Data, is_binary: bool) -> "File":
        """Create a file with an explicit binary flag (reason EXPLICIT)."""
        return cls(
            name=name,
            data=_as_bytes(data),
            is_binary=is_binary,
            binary_reason=BinaryReason.EXPLICIT if is_binary else None,
        )

    @property
    def is_normal(self) -> bool:
        """True if the file carries neither snippet nor edit metadata."""
        return self.snippet_ref is None and self.edit_ref is None

    def text(self) -> str:
        """
        Return the data decoded as UTF-8.

        Raises:
            InvalidUtf8Error: If the data is not valid UTF-8
        """
        try:
            return self.data.decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidUtf8Error(self.name)

    def archive_name(self) -> str:
        """Name as written in the marker, with ``[.base64]`` for binary files."""
        if self.is_binary:
            return f"{self.name}{BASE64_TAG}"
        return self.name

    @staticmethod
    def parse_archive_name(archive_name: str) -> Tuple[str, bool]:
        """Split a trailing ``[.base64]`` off an archive name."""
        if archive_name.endswith(BASE64_TAG):
            return archive_name[:-len(BASE64_TAG)], True
        return archive_name, False


@dataclass(frozen=True)
class SnippetRefError:
    """A snippet whose command reference does not resolve."""
    file: str
    missing_command: str


class Archive:
    """
    An archive: a free-form comment, command references and ordered files.

    ``commands`` is read-only. The href -> position index behind
    ``get_command`` is rebuilt by every method that writes ``commands``
    (``parse_commands`` and ``set_commands``) and by nothing else.
    """

    def __init__(self, comment: str = "", files: Optional[Iterable[File]] = None):
        self.comment = comment
        self.files: List[File] = []
        self._commands: Tuple[Command, ...] = ()
        self._command_index: Dict[str, int] = {}
        for f in files or ():
            self.add_file(f)

    def __repr__(self) -> str:
        return (
            f"Archive(comment={self.comment!r}, commands={list(self._commands)!r}, "
            f"files={self.files!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Archive):
            return NotImplemented
        return (
            self.comment == other.comment
            and self._commands == other._commands
            and self.files == other.files
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @property
    def commands(self) -> Tuple[Command, ...]:
        return self._commands

    @property
    def command_index(self) -> Dict[str, int]:
        """Copy of the href -> position index."""
        return dict(self._command_index)

    def set_commands(self, commands: Iterable[Command]) -> None:
        """Replace the command list and rebuild the index."""
        self._commands = tuple(commands)
        self._rebuild_command_index()

    def parse_commands(self) -> None:
        """Extract ``[command: NAME](#HREF)`` links from the comment."""
        self.set_commands(Command(name=n, href=h) for n, h in find_command_links(self.comment))

    def _rebuild_command_index(self) -> None:
        self._command_index = {}
        for i, cmd in enumerate(self._commands):
            self._command_index[cmd.href] = i

    def get_command(self, href: str) -> Optional[Command]:
        idx = self._command_index.get(href)
        if idx is None:
            return None
        return self._commands[idx]

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def add_file(self, file: File) -> None:
        """
        Append a file.

        Raises:
            DuplicateFileError: If ``file`` is normal and a normal file with
                                the same name already exists
        """
        if file.is_normal and self.get_file(file.name) is not None:
            raise DuplicateFileError(file.name)
        self.files.append(file)

    def add_file_from_path(self,
                           path: Path,
                           archive_name: Optional[str] = None,
                           config: Optional[EncodingConfig] = None) -> File:
        """
        Read ``path`` and add it, classified by the encoding detector.

        Raises:
            ArchiveReadError: If the file cannot be read
            DuplicateFileError: On a normal-name collision
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ArchiveReadError(str(path), str(e))
        f = File.new(archive_name or path.name, data, config)
        self.add_file(f)
        return f

    def get_file(self, name: str) -> Optional[File]:
        """Return the normal file called ``name``, if any."""
        name = name.replace("\\", "/")
        for f in self.files:
            if f.name == name and f.is_normal:
                return f
        return None

    def get_edit_target(self, name: str) -> Optional[File]:
        """Return the first non-edit file called ``name`` (normal or snippet)."""
        name = name.replace("\\", "/")
        for f in self.files:
            if f.name == name and f.edit_ref is None:
                return f
        return None

    def normal_files(self) -> List[File]:
        return [f for f in self.files if f.is_normal]

    def snippet_files(self) -> List[File]:
        return [f for f in self.files if f.snippet_ref is not None]

    def edit_files(self) -> List[File]:
        return [f for f in self.files if f.edit_ref is not None]

    def get_file_count(self) -> int:
        return len(self.files)

    def get_binary_count(self) -> int:
        return sum(1 for f in self.files if f.is_binary)

    def get_text_count(self) -> int:
        return sum(1 for f in self.files if not f.is_binary)

    def get_total_size_bytes(self) -> int:
        return sum(len(f.data) for f in self.files)

    # ------------------------------------------------------------------
    # Validation / edits
    # ------------------------------------------------------------------

    def validate_snippet_refs(self) -> List[SnippetRefError]:
        """
        Check that every snippet's command reference resolves.

        Returns:
            One SnippetRefError per unresolved reference; empty when all resolve
        """
        errors: List[SnippetRefError] = []
        for f in self.files:
            ref = f.snippet_ref
            if ref is None or ref.command_href is None:
                continue
            if ref.command_href not in self._command_index:
                errors.append(SnippetRefError(file=f.name, missing_command=ref.command_href))
        return errors

    def apply_edits(self, filesystem=None, require_unique: bool = False) -> "Archive":
        """
        Return a new archive with every edit file applied to its target.

        Edit files are applied in archive order. A target is the first
        non-edit file of the same name in the archive, or, if absent, the
        file read from ``filesystem``. Results are re-classified by the
        encoding detector and keep the target's snippet metadata. A target
        read from ``filesystem`` keeps its trailing newline. Edit files do
        not appear in the result; snippet files are kept.

        Raises:
            EditTargetNotFoundError: Target in neither place
            EditApplyError: From the edit engine
        """
        result = Archive(comment=self.comment)
        result.set_commands(self._commands)

        result.files = [f for f in self.files if f.edit_ref is None]
        from_disk = set()

        for f in self.edit_files():
            target = result.get_edit_target(f.name)
            if target is not None:
                content = target.text()
            elif filesystem is not None and filesystem.exists(f.name):
                content = filesystem.read_text(f.name)
                from_disk.add(f.name)
            else:
                raise EditTargetNotFoundError(f.name)

            edited = f.edit_ref.apply(content, require_unique=require_unique)
            if f.name in from_disk and content.endswith("\n") and not edited.endswith("\n"):
                edited += "\n"

            updated = File.new(f.name, edited)
            if target is not None:
                updated.snippet_ref = target.snippet_ref
                result.files[result.files.index(target)] = updated
            else:
                result.files.append(updated)

        return result


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: detection.py, tags.py, exceptions.py
# TESTS: tests/unit/test_models.py
# ============================================================================
