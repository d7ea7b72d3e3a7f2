# ============================================================================
# SOURCEFILE: filesystem.py
# RELPATH: txtarchive/src/txtarchive/core/filesystem.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Filesystem collaborators for edit-target lookups
# ============================================================================

"""
Filesystem collaborators.

The decoder asks ``exists(name)`` to validate edit targets that are not in
the archive; ``Archive.apply_edits`` asks ``read_text(name)`` to load them.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from txtarchive.core.exceptions import (
    ArchiveReadError,
    InvalidUtf8Error,
    PathTraversalError,
)
from txtarchive.core.validators import PathValidator


class FileSystem(ABC):
    """Read-only view of files addressed by archive member names."""

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Return True if a regular file called ``name`` exists."""

    @abstractmethod
    def read_text(self, name: str) -> str:
        """
        Return the UTF-8 contents of ``name``.

        Raises:
            ArchiveReadError: If the file is missing or unreadable
            InvalidUtf8Error: If the bytes are not UTF-8
        """


class LocalFileSystem(FileSystem):
    """Files on disk under ``base_path`` (default: current directory)."""

    def __init__(self, base_path: Optional[Path] = None):
        self.validator = PathValidator(base_path)

    @property
    def base_path(self) -> Path:
        return self.validator.base_path

    def exists(self, name: str) -> bool:
        try:
            return self.validator.validate_path(name).is_file()
        except PathTraversalError:
            return False

    def read_text(self, name: str) -> str:
        path = self.validator.validate_path(name)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ArchiveReadError(str(path), str(e))
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidUtf8Error(name)


class MemoryFileSystem(FileSystem):
    """In-memory files, keyed by '/'-separated name."""

    def __init__(self, files: Optional[Dict[str, Union[str, bytes]]] = None):
        self.files: Dict[str, bytes] = {}
        for name, data in (files or {}).items():
            self.write(name, data)

    @staticmethod
    def _key(name: str) -> str:
        return name.replace("\\", "/")

    def write(self, name: str, data: Union[str, bytes]) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.files[self._key(name)] = bytes(data)

    def exists(self, name: str) -> bool:
        return self._key(name) in self.files

    def read_text(self, name: str) -> str:
        try:
            data = self.files[self._key(name)]
        except KeyError:
            raise ArchiveReadError(name, "No such file")
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidUtf8Error(name)


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: validators.py, exceptions.py
# TESTS: tests/unit/test_filesystem.py
# ============================================================================
