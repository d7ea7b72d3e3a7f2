# ============================================================================
# SOURCEFILE: logging.py
# RELPATH: txtarchive/src/txtarchive/core/logging.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Structured JSON session logging for archive operations
# ============================================================================

"""
Structured Logging Module.

One JSON object per line in ``<log_dir>/txtar_session_<ts>_<id>.json`` for
every CLI operation: start/complete, per-file processing, edit application,
unresolved snippet references, warnings and errors.
"""

from __future__ import annotations

import io
import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


def _ensure_stream_utf8(stream: Optional[io.TextIOBase]) -> Optional[io.TextIOBase]:
    """Make a text stream write UTF-8, reconfiguring or wrapping it."""
    if stream is None:
        return None

    encoding = getattr(stream, "encoding", None)
    if isinstance(encoding, str) and encoding.lower().replace("_", "-") == "utf-8":
        return stream

    reconfigure = getattr(stream, "reconfigure", None)
    if callable(reconfigure):
        try:
            reconfigure(encoding="utf-8", errors="backslashreplace")
            return stream
        except (ValueError, OSError, io.UnsupportedOperation):
            pass

    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        return stream

    stream.flush()
    return io.TextIOWrapper(buffer, encoding="utf-8", errors="backslashreplace")


def configure_utf8_logging(force: bool = False) -> None:
    """
    Reconfigure stdout/stderr and root logger handlers for UTF-8 output.

    Safe to call twice.
    """
    for name in ("stdout", "stderr"):
        stream = getattr(sys, name, None)
        new_stream = _ensure_stream_utf8(stream)
        if new_stream is not None and new_stream is not stream:
            setattr(sys, name, new_stream)

    root = logging.getLogger()
    if force and not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        root.addHandler(handler)

    for handler in root.handlers:
        if not isinstance(handler, logging.StreamHandler):
            continue
        new_stream = _ensure_stream_utf8(handler.stream)
        if new_stream is not None and new_stream is not handler.stream:
            handler.setStream(new_stream)


class LogEvent(Enum):
    """Enumeration of loggable events."""
    OPERATION_START = "operation_start"
    OPERATION_COMPLETE = "operation_complete"
    ERROR = "error"
    WARNING = "warning"
    FILE_PROCESSED = "file_processed"
    EDIT_APPLIED = "edit_applied"
    SNIPPET_REF_MISSING = "snippet_ref_missing"


class StructuredLogger:
    """
    JSON-lines session logger for archive operations.

    Entries go both to the session file and to ``log_buffer``.
    """

    def __init__(self, log_dir: str = "logs", session_id: Optional[str] = None):
        self.log_dir = Path(log_dir)
        self.session_id = session_id or str(uuid.uuid4())
        self.start_time = datetime.now(timezone.utc)

        timestamp = self.start_time.strftime("%Y%m%d_%H%M%S")
        self.log_file = self.log_dir / f"txtar_session_{timestamp}_{self.session_id[:8]}.json"
        self.log_buffer: List[Dict] = []
        self._ensure_log_file_exists()

    def _ensure_log_file_exists(self) -> None:
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file.touch(exist_ok=True)
        except OSError as e:
            print(f"Warning: Cannot create log file {self.log_file}: {e}", file=sys.stderr)

    def log_operation_start(self, operation: str, source: str, destination: str) -> None:
        """
        Args:
            operation: CLI subcommand ("create", "x", "t", "validate", "apply")
            source: Input archive or directory
            destination: Output archive or directory
        """
        self._write_log_entry(self._create_log_entry(
            LogEvent.OPERATION_START,
            {"operation": operation, "source": source, "destination": destination},
        ))

    def log_operation_complete(self,
                               operation: str,
                               source: str,
                               destination: str,
                               processed: int,
                               skipped: int,
                               errors: int,
                               elapsed_ms: int) -> None:
        self._write_log_entry(self._create_log_entry(
            LogEvent.OPERATION_COMPLETE,
            {
                "operation": operation,
                "source": source,
                "destination": destination,
                "counts": {
                    "processed": processed,
                    "skipped": skipped,
                    "errors": errors,
                },
                "elapsedMs": elapsed_ms,
            },
        ))

    def log_error(self,
                  operation: str,
                  source: str,
                  error_message: str,
                  error_type: str,
                  file_name: Optional[str] = None) -> None:
        self._write_log_entry(self._create_log_entry(
            LogEvent.ERROR,
            {
                "operation": operation,
                "source": source,
                "errorMessage": error_message,
                "errorType": error_type,
                "fileName": file_name,
            },
        ))

    def log_warning(self, message: str, context: Optional[Dict] = None) -> None:
        self._write_log_entry(self._create_log_entry(
            LogEvent.WARNING,
            {"message": message, "context": context or {}},
        ))

    def log_file_processed(self,
                           file_name: str,
                           is_binary: bool,
                           size_bytes: int,
                           binary_reason: Optional[str] = None,
                           kind: str = "normal") -> None:
        """
        Args:
            file_name: Archive member name
            is_binary: Whether the member travels base64 encoded
            size_bytes: Decoded size
            binary_reason: BinaryReason value when binary
            kind: "normal", "snippet" or "edit"
        """
        self._write_log_entry(self._create_log_entry(
            LogEvent.FILE_PROCESSED,
            {
                "fileName": file_name,
                "isBinary": is_binary,
                "binaryReason": binary_reason,
                "sizeBytes": size_bytes,
                "kind": kind,
            },
        ))

    def log_edit_applied(self, file_name: str, edit_count: int, source: str) -> None:
        """
        Args:
            file_name: Edit target
            edit_count: Number of blocks applied
            source: "archive" or "filesystem"
        """
        self._write_log_entry(self._create_log_entry(
            LogEvent.EDIT_APPLIED,
            {"fileName": file_name, "editCount": edit_count, "targetSource": source},
        ))

    def log_snippet_ref_missing(self, file_name: str, missing_command: str) -> None:
        self._write_log_entry(self._create_log_entry(
            LogEvent.SNIPPET_REF_MISSING,
            {"fileName": file_name, "missingCommand": missing_command},
        ))

    def _create_log_entry(self, event: LogEvent, details: Dict[str, Any]) -> Dict:
        return {
            "sessionId": self.session_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event.value,
            "details": details,
        }

    def _write_log_entry(self, entry: Dict) -> None:
        self.log_buffer.append(entry)
        try:
            with open(self.log_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(entry, ensure_ascii=False) + '\n')
        except OSError as e:
            print(f"Warning: Failed to write log entry: {e}", file=sys.stderr)

    def get_session_logs(self) -> List[Dict]:
        return list(self.log_buffer)

    def export_session_summary(self) -> Dict:
        """Counts of events by type for this session."""
        summary = {
            "sessionId": self.session_id,
            "startTime": self.start_time.isoformat(),
            "endTime": datetime.now(timezone.utc).isoformat(),
            "totalEvents": len(self.log_buffer),
            "eventCounts": {},
        }
        for entry in self.log_buffer:
            event_type = entry["event"]
            summary["eventCounts"][event_type] = summary["eventCounts"].get(event_type, 0) + 1
        return summary


# ============================================================================
# Global Logger Instance
# ============================================================================

_global_logger: Optional[StructuredLogger] = None


def get_logger(log_dir: str = "logs") -> StructuredLogger:
    """Return the global session logger, creating it on first use."""
    global _global_logger
    if _global_logger is None:
        _global_logger = StructuredLogger(log_dir)
    return _global_logger


def new_session(log_dir: str = "logs") -> StructuredLogger:
    """Start a new global logging session."""
    global _global_logger
    _global_logger = StructuredLogger(log_dir)
    return _global_logger


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: None (standalone logging)
# TESTS: tests/unit/test_logging.py
# ============================================================================
