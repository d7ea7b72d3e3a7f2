# ============================================================================
# FILE: validators.py
# RELPATH: txtarchive/src/txtarchive/core/validators.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Archive member path safety, glob filtering and size limits
# ============================================================================

"""
Validators Module.

Safety checks shared by the filesystem collaborator, the extractor and the
creator: archive member names must stay under a base directory, input files
are filtered by allow/deny globs, and oversized inputs are rejected.
"""

from pathlib import Path, PurePosixPath
from typing import List, Optional, Sequence

from txtarchive.core.exceptions import (
    FileSizeError,
    GlobFilterError,
    PathTraversalError,
)


class PathValidator:
    """
    Resolves archive member names against a base directory.

    A member name is rejected when it is absolute (``/x``, ``\\x``, ``C:x``)
    or when it resolves outside ``base_path``.
    """

    def __init__(self, base_path: Optional[Path] = None):
        self.base_path = Path(base_path).resolve() if base_path else Path.cwd().resolve()

    @staticmethod
    def is_absolute_name(name: str) -> bool:
        name = str(name)
        if name.startswith(("/", "\\")):
            return True
        # Drive-qualified names are absolute on Windows, and unsafe everywhere
        return len(name) >= 2 and name[1] == ":" and name[0].isalpha()

    def validate_path(self, path) -> Path:
        """
        Return the resolved location of ``path`` under ``base_path``.

        Raises:
            PathTraversalError: If the path is absolute or escapes the base
        """
        name = str(path).replace("\\", "/")
        if not name.strip():
            raise PathTraversalError(name, "Empty path")
        if self.is_absolute_name(name) or Path(name).is_absolute():
            raise PathTraversalError(name, "Absolute paths not allowed")

        resolved = (self.base_path / PurePosixPath(name)).resolve()
        try:
            resolved.relative_to(self.base_path)
        except ValueError:
            raise PathTraversalError(name, f"Path escapes base directory: {self.base_path}")
        return resolved


class GlobFilter:
    """
    Filters relative paths with allow/deny glob patterns.

    - Deny wins over allow.
    - ``allow_patterns=None`` allows everything; ``[]`` allows nothing.
    - ``**`` matches zero or more directories (``src/**/*.py`` matches
      ``src/main.py``; ``**/*.log`` matches ``x.log``).
    - Paths and patterns are compared in POSIX form.
    """

    ALLOW_ALL = "**/*"

    def __init__(self,
                 allow_patterns: Optional[Sequence[str]] = None,
                 deny_patterns: Optional[Sequence[str]] = None):
        self.allow_patterns = [self.ALLOW_ALL] if allow_patterns is None else list(allow_patterns)
        self.deny_patterns = list(deny_patterns or [])
        for pattern in self.allow_patterns + self.deny_patterns:
            self._validate_pattern(pattern)

    @staticmethod
    def _to_posix(text) -> str:
        return str(text).replace("\\", "/")

    @staticmethod
    def _validate_pattern(pattern: str) -> None:
        if not isinstance(pattern, str) or not pattern.strip():
            raise GlobFilterError(str(pattern), "Empty or invalid glob pattern provided")
        if pattern.count("[") != pattern.count("]"):
            raise GlobFilterError(pattern, "Unmatched brackets in pattern")

    def _variants(self, pattern: str) -> List[str]:
        pattern = self._to_posix(pattern)
        variants = [pattern]
        if "/**/" in pattern:
            variants.append(pattern.replace("/**/", "/"))
        if pattern.startswith("**/"):
            variants.append(pattern[3:])
        return variants

    def matches(self, path: str, patterns: Sequence[str]) -> bool:
        path = self._to_posix(path)
        if not path.strip():
            return False
        candidate = PurePosixPath(path)
        return any(
            candidate.match(variant)
            for pattern in patterns
            for variant in self._variants(pattern)
        )

    def should_include(self, path: str) -> bool:
        if not path or not str(path).strip():
            return False
        if self.deny_patterns and self.matches(path, self.deny_patterns):
            return False
        if self.allow_patterns == [self.ALLOW_ALL]:
            return True
        return self.matches(path, self.allow_patterns)


class FileSizeValidator:
    """Rejects input files larger than ``max_size_mb``."""

    def __init__(self, max_size_mb: float = 10.0):
        self.max_size_mb = max_size_mb
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)

    def validate_size(self, file_path: Path) -> None:
        """
        Raises:
            FileSizeError: If the file exceeds the limit
        """
        size_bytes = Path(file_path).stat().st_size
        if size_bytes > self.max_size_bytes:
            raise FileSizeError(str(file_path), size_bytes / (1024 * 1024), self.max_size_mb)


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: exceptions.py
# TESTS: tests/unit/test_validators.py
# ============================================================================
