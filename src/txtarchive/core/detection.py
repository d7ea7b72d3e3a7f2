# ============================================================================
# SOURCEFILE: detection.py
# RELPATH: txtarchive/src/txtarchive/core/detection.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Text/binary classification policy for archive file content
# ============================================================================

"""
Encoding Detection Module.

Decides whether a file's bytes can travel through the archive as literal text
or must be base64 encoded. Rules, first match wins:

1. Content is valid UTF-8 and one of its lines looks like a file marker
   (``-- name --``) -> binary, CONTENT_CONFLICT. Such a line would split the
   file when the archive is decoded.
2. Content is not valid UTF-8 -> binary, INVALID_UTF8.
3. Otherwise -> UTF-8 text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

MARKER_PREFIX = "-- "
MARKER_SUFFIX = " --"


class BinaryReason(Enum):
    """Why a file is stored base64 encoded."""
    CONTENT_CONFLICT = "content_conflict"
    INVALID_UTF8 = "invalid_utf8"
    EXPLICIT = "explicit"


class TextEncoding(Enum):
    """Text encodings the archive can carry verbatim."""
    UTF8 = "utf-8"


@dataclass(frozen=True)
class EncodingConfig:
    """
    Detection policy.

    Attributes:
        check_content_markers: Force marker-looking content into binary form
        validate_utf8: Treat non-UTF-8 content as binary
    """
    check_content_markers: bool = True
    validate_utf8: bool = True


@dataclass(frozen=True)
class Text:
    encoding: TextEncoding = TextEncoding.UTF8

    @property
    def is_binary(self) -> bool:
        return False


@dataclass(frozen=True)
class Binary:
    reason: BinaryReason

    @property
    def is_binary(self) -> bool:
        return True


EncodingDetection = Union[Text, Binary]

DEFAULT_CONFIG = EncodingConfig()


def _decode_utf8(data: bytes) -> Optional[str]:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


def split_lines(text: str) -> List[str]:
    """
    Split text into lines the way the archive reader sees them.

    Lines end at ``\\n``; one trailing ``\\r`` is dropped from each line. A
    final line terminator does not produce an empty trailing entry.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def is_marker_line(line: str) -> bool:
    """
    Return True if ``line`` has the shape of a file marker with a non-blank name.

    ``"--   --"`` is not a marker; ``"-- x --"`` is.
    """
    trimmed = line.strip()
    if not (trimmed.startswith(MARKER_PREFIX) and trimmed.endswith(MARKER_SUFFIX)):
        return False
    if len(trimmed) < len(MARKER_PREFIX) + len(MARKER_SUFFIX):
        return False
    inner = trimmed[len(MARKER_PREFIX):len(trimmed) - len(MARKER_SUFFIX)]
    return inner.strip() != ""


def contains_marker_pattern(text: str) -> bool:
    """Check if any line of ``text`` would be read back as a file marker."""
    return any(is_marker_line(line) for line in split_lines(text))


def detect_encoding(name: str,
                    data: bytes,
                    config: Optional[EncodingConfig] = None) -> EncodingDetection:
    """
    Classify file content as text or binary.

    Args:
        name: File name (currently unused by the rules, kept for policy hooks)
        data: Raw file bytes
        config: Detection policy; defaults to all checks enabled

    Returns:
        Text(...) or Binary(reason)
    """
    config = config or DEFAULT_CONFIG
    text = _decode_utf8(data)

    if config.check_content_markers and text is not None:
        if contains_marker_pattern(text):
            return Binary(BinaryReason.CONTENT_CONFLICT)

    if config.validate_utf8 and text is None:
        return Binary(BinaryReason.INVALID_UTF8)

    return Text(TextEncoding.UTF8)


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: Additional TextEncoding members if non-UTF-8 text is required
# DEPENDENCIES: None
# TESTS: tests/unit/test_detection.py
# ============================================================================
