# ============================================================================
# SOURCEFILE: encoder.py
# RELPATH: txtarchive/src/txtarchive/core/encoder.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Archive encoder (Archive -> text)
# ============================================================================

"""
Archive Encoder.

Output layout:

- the comment, plus a newline when it is non-empty and lacks one
- per file: ``-- <archive_name> --`` then the body (base64 for binary files),
  terminated by a newline

Whether a file is binary was decided when the File was built; the encoder
does not re-run detection. Snippet and edit tags are not written.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import List, TextIO

from txtarchive.core.detection import MARKER_PREFIX, MARKER_SUFFIX
from txtarchive.core.exceptions import ArchiveWriteError, EncodeError
from txtarchive.core.models import Archive, File

logger = logging.getLogger(__name__)


class Encoder:
    """Serializes an Archive to the text wire format."""

    def encode(self, archive: Archive) -> str:
        """
        Raises:
            EncodeError: A non-binary file holds bytes that are not UTF-8
        """
        out: List[str] = []

        if archive.comment:
            out.append(archive.comment)
            if not archive.comment.endswith("\n"):
                out.append("\n")

        for f in archive.files:
            out.append(f"{MARKER_PREFIX}{f.archive_name()}{MARKER_SUFFIX}\n")
            body = self._encode_body(f)
            out.append(body)
            if not body.endswith("\n"):
                out.append("\n")

        logger.debug("Encoded archive with %d files", len(archive.files))
        return "".join(out)

    @staticmethod
    def _encode_body(f: File) -> str:
        if f.is_binary:
            return base64.b64encode(f.data).decode("ascii")
        try:
            return f.data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodeError(f.name, f"Text file is not valid UTF-8: {e}")

    def encode_to_stream(self, archive: Archive, stream: TextIO) -> None:
        stream.write(self.encode(archive))

    def encode_to_file(self, archive: Archive, path: Path) -> None:
        """
        Encode and write to ``path`` as UTF-8.

        Raises:
            EncodeError: As for encode()
            ArchiveWriteError: If the file cannot be written
        """
        text = self.encode(archive)
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
        except OSError as e:
            raise ArchiveWriteError(str(path), str(e))


def encode(archive: Archive) -> str:
    """Convenience wrapper: ``Encoder().encode(archive)``."""
    return Encoder().encode(archive)


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: models.py, detection.py, exceptions.py
# TESTS: tests/unit/test_encoder.py
# ============================================================================
