# ============================================================================
# FILE: exceptions.py
# RELPATH: txtarchive/src/txtarchive/core/exceptions.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Exception hierarchy for Text Archive Tool v1.0
# ============================================================================

"""
Exception classes for Text Archive Tool v1.0.

This module defines a hierarchical exception structure for all error conditions
in the archive codec, the edit engine and the surrounding tooling, enabling
precise error handling and meaningful user feedback.
"""

from typing import Optional


class TextArchiveError(Exception):
    """Base exception for all Text Archive Tool errors."""
    pass


# ============================================================================
# Decode-Related Exceptions
# ============================================================================

class DecodeError(TextArchiveError):
    """Base exception for structural archive decode errors."""
    pass


class TagSyntaxError(DecodeError):
    """
    Raised when a file marker's name-and-tags region is malformed.

    Attributes:
        marker: The name-and-tags text that failed
        reason: Human-readable explanation of the failure
    """
    def __init__(self, marker: str, reason: str):
        self.marker = marker
        self.reason = reason
        super().__init__(f"Invalid file marker '{marker}': {reason}")


class InvalidTagError(TagSyntaxError):
    """
    Raised in strict mode when a bracket tag matches no known grammar.

    Attributes:
        tag: The unrecognized tag, brackets included
    """
    def __init__(self, marker: str, tag: str):
        self.tag = tag
        super().__init__(
            marker,
            f"Unrecognized tag '{tag}'. Expected [.base64], [.snippet:N], "
            f"[.snippet#href:line], [.#href:line], [.edit] or [.edit#href:line]"
        )


class MissingClosingBracketError(TagSyntaxError):
    """Raised in strict mode when a tag has no closing ']'."""
    def __init__(self, marker: str):
        super().__init__(marker, "Missing closing bracket ']' in tag format")


class SnippetParseError(TagSyntaxError):
    """
    Raised when a snippet tag cannot be parsed.

    Attributes:
        kind: One of 'invalid_format', 'missing_closing_bracket',
              'missing_colon', 'invalid_line_number'
        value: Offending input fragment (for invalid line numbers)
    """

    MESSAGES = {
        "invalid_format": (
            "Invalid snippet format. Expected [.snippet:N], "
            "[.snippet#href:line], or [.#href:line]"
        ),
        "missing_closing_bracket": "Missing closing bracket ']'",
        "missing_colon": "Missing colon ':' in href:line or snippet:N format",
        "invalid_line_number": "Invalid line number: '{value}'",
    }

    def __init__(self, tag: str, kind: str, value: Optional[str] = None):
        self.kind = kind
        self.value = value
        template = self.MESSAGES.get(kind, kind)
        super().__init__(tag, template.format(value=value))


class DuplicateFileError(DecodeError):
    """
    Raised when two normal (non-snippet, non-edit) files share a name.

    Attributes:
        name: The duplicated file name
    """
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Duplicate file: {name}")


class EditTargetNotFoundError(DecodeError):
    """
    Raised when an edit file targets a name found neither in the archive
    nor on the filesystem.

    Attributes:
        name: The missing edit target
    """
    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Edit target file '{name}' not found in archive or filesystem "
            f"(at least one must exist)"
        )


class Base64DecodeError(DecodeError):
    """
    Raised when a [.base64] file body is not valid base64.

    Attributes:
        name: File whose payload failed
        reason: Underlying decoder message
    """
    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Failed to decode base64 for file '{name}': {reason}")


class EditBlockDecodeError(DecodeError):
    """
    Raised when the body of an [.edit] file is not a valid edit program.

    Attributes:
        name: The edit file name
        cause: The underlying EditParseError
    """
    def __init__(self, name: str, cause: "EditParseError"):
        self.name = name
        self.cause = cause
        super().__init__(f"Failed to parse edit blocks in '{name}': {cause}")


# ============================================================================
# Edit Program Exceptions
# ============================================================================

class EditParseError(TextArchiveError):
    """Base exception for edit-block format errors."""
    pass


class UnterminatedBlockError(EditParseError):
    """Raised when input ends inside a SEARCH or REPLACE section."""
    def __init__(self):
        super().__init__("Unterminated edit block (missing >>>>>>> marker)")


class EmptyBlockError(EditParseError):
    """Raised when a block has neither search nor replacement lines."""
    def __init__(self):
        super().__init__("Empty edit block (both search and replacement are empty)")


class MalformedLineError(EditParseError):
    """
    Raised when a conflict-style marker line is not one we understand.

    Attributes:
        line_number: 1-based line number within the edit body
        line: The offending line
    """
    def __init__(self, line_number: int, line: str):
        self.line_number = line_number
        self.line = line
        super().__init__(f"Malformed line at {line_number}: '{line}'")


class ExpectedSearchStartError(EditParseError):
    """
    Raised when text appears outside of a block.

    Attributes:
        line_number: 1-based line number within the edit body
    """
    def __init__(self, line_number: Optional[int] = None):
        self.line_number = line_number
        msg = "Expected <<<<<<< SEARCH marker at the beginning of edit block"
        if line_number is not None:
            msg += f" (line {line_number})"
        super().__init__(msg)


# ============================================================================
# Edit Application Exceptions
# ============================================================================

class EditApplyError(TextArchiveError):
    """Base exception for edit application errors."""
    pass


class SearchNotFoundError(EditApplyError):
    """
    Raised when a SEARCH block has no exact match in the content.

    Attributes:
        search: The search lines joined with newlines
    """
    def __init__(self, search: str):
        self.search = search
        super().__init__(f"Search pattern not found: '{search}'")


class MultipleMatchesError(EditApplyError):
    """
    Raised by the strict apply path when a SEARCH block is ambiguous.

    Attributes:
        search: The search lines joined with newlines
        count: Number of occurrences found
    """
    def __init__(self, search: str, count: int):
        self.search = search
        self.count = count
        super().__init__(f"Search pattern found {count} times (ambiguous): '{search}'")


class EmptyContentError(EditApplyError):
    """Raised when a non-insert edit targets empty content."""
    def __init__(self):
        super().__init__("Cannot apply edit to empty content")


class InvalidUtf8Error(EditApplyError):
    """
    Raised when text was required but the bytes are not valid UTF-8.

    Attributes:
        name: Optional file name for context
    """
    def __init__(self, name: Optional[str] = None):
        self.name = name
        if name:
            super().__init__(f"File '{name}' is not valid UTF-8")
        else:
            super().__init__("File content is not valid UTF-8")


# ============================================================================
# Encode-Related Exceptions
# ============================================================================

class EncodeError(TextArchiveError):
    """
    Raised when an archive cannot be serialized.

    Attributes:
        name: File that could not be encoded
        reason: Explanation of the failure
    """
    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Cannot encode file '{name}': {reason}")


# ============================================================================
# Validation-Related Exceptions
# ============================================================================

class ValidationError(TextArchiveError):
    """Base exception for validation errors."""
    pass


class PathTraversalError(ValidationError):
    """
    Raised when an unsafe path is detected (e.g., path traversal attempt).

    Attributes:
        path: The unsafe path that was detected
        reason: Explanation of why the path is unsafe
    """
    def __init__(self, path: str, reason: str = "Path traversal detected"):
        self.path = path
        self.reason = reason
        super().__init__(f"Unsafe path '{path}': {reason}")


class FileSizeError(ValidationError):
    """
    Raised when a file exceeds the maximum allowed size.

    Attributes:
        path: Path of the oversized file
        size_mb: Actual file size in megabytes
        max_mb: Maximum allowed size in megabytes
    """
    def __init__(self, path: str, size_mb: float, max_mb: float):
        self.path = path
        self.size_mb = size_mb
        self.max_mb = max_mb
        super().__init__(
            f"File '{path}' size ({size_mb:.2f} MB) exceeds limit ({max_mb:.2f} MB)"
        )


class GlobFilterError(ValidationError):
    """
    Raised when a glob pattern is invalid.

    Attributes:
        pattern: The problematic glob pattern
        reason: Explanation of the error
    """
    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid glob pattern '{pattern}': {reason}")


# ============================================================================
# Configuration-Related Exceptions
# ============================================================================

class ConfigError(TextArchiveError):
    """Base exception for configuration-related errors."""
    pass


class ConfigLoadError(ConfigError):
    """
    Raised when configuration file cannot be loaded.

    Attributes:
        config_file: Path to the configuration file
        reason: Explanation of the failure
    """
    def __init__(self, config_file: str, reason: str):
        self.config_file = config_file
        self.reason = reason
        super().__init__(f"Failed to load config '{config_file}': {reason}")


class ConfigValidationError(ConfigError):
    """
    Raised when configuration data fails validation.

    Attributes:
        key: Configuration key that failed validation
        value: The invalid value
        reason: Explanation of why validation failed
    """
    def __init__(self, key: str, value: object, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# ============================================================================
# I/O-Related Exceptions
# ============================================================================

class ArchiveIOError(TextArchiveError):
    """Base exception for I/O errors."""
    pass


class ArchiveReadError(ArchiveIOError):
    """
    Raised when an archive or source file cannot be read.

    Attributes:
        path: Path that failed
        reason: Explanation of the failure
    """
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read '{path}': {reason}")


class ArchiveWriteError(ArchiveIOError):
    """
    Raised when an archive or extracted file cannot be written.

    Attributes:
        path: Path where writing failed
        reason: Explanation of the failure
    """
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write '{path}': {reason}")


# ============================================================================
# Operation-Related Exceptions
# ============================================================================

class OperationError(TextArchiveError):
    """Base exception for operation errors."""
    pass


class OverwriteError(OperationError):
    """
    Raised when attempting to overwrite an existing file without permission.

    Attributes:
        path: Path to the file that would be overwritten
    """
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File '{path}' already exists and overwrite not permitted")


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: None (base exception definitions)
# TESTS: tests/unit/test_exceptions.py
# ============================================================================
