# ============================================================================
# SOURCEFILE: test_logging.py
# RELPATH: txtarchive/tests/unit/test_logging.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Unit tests for StructuredLogger session logs
# ============================================================================

"""Unit tests for structured JSON session logging."""

import pytest
import io
import json
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src')))

from txtarchive.core.logging import (
    LogEvent,
    StructuredLogger,
    _ensure_stream_utf8,
    get_logger,
    new_session,
)


def _read_lines(logger):
    text = logger.log_file.read_text(encoding='utf-8')
    return [json.loads(line) for line in text.splitlines() if line.strip()]


class TestStructuredLoggerBasics:
    """Tests for basic StructuredLogger operations."""

    def test_log_file_created(self, temp_dir):
        """Test the session file name and location."""
        logger = StructuredLogger(log_dir=str(temp_dir / 'logs'))

        assert logger.log_file.exists()
        assert logger.log_file.parent == temp_dir / 'logs'
        assert logger.log_file.name.startswith('txtar_session_')
        assert logger.session_id[:8] in logger.log_file.name

    def test_custom_session_id(self, temp_dir):
        """Test creating logger with custom session ID."""
        logger = StructuredLogger(log_dir=str(temp_dir), session_id='test-session-123')
        assert logger.session_id == 'test-session-123'


class TestLogEntries:
    """Tests for entry shape and persistence."""

    def test_operation_start(self, temp_dir):
        """Test the common entry fields."""
        logger = StructuredLogger(log_dir=str(temp_dir))
        logger.log_operation_start(operation='x', source='a.txtar', destination='out')

        entry = logger.log_buffer[0]
        assert entry['sessionId'] == logger.session_id
        assert entry['event'] == LogEvent.OPERATION_START.value
        assert entry['details'] == {'operation': 'x', 'source': 'a.txtar', 'destination': 'out'}
        assert 'timestamp' in entry

    def test_entries_written_as_json_lines(self, temp_dir):
        """Test that every entry lands in the file, one per line."""
        logger = StructuredLogger(log_dir=str(temp_dir))
        logger.log_operation_start('create', 'src', 'a.txtar')
        logger.log_file_processed('ünï.txt', False, 12)
        logger.log_operation_complete('create', 'src', 'a.txtar', 1, 0, 0, 5)

        lines = _read_lines(logger)
        assert [e['event'] for e in lines] == [
            'operation_start', 'file_processed', 'operation_complete'
        ]
        assert lines[1]['details']['fileName'] == 'ünï.txt'
        assert lines[2]['details']['counts'] == {'processed': 1, 'skipped': 0, 'errors': 0}
        assert lines[2]['details']['elapsedMs'] == 5

    def test_file_processed_binary(self, temp_dir):
        """Test binary file details."""
        logger = StructuredLogger(log_dir=str(temp_dir))
        logger.log_file_processed('img.png', True, 69, binary_reason='explicit', kind='normal')
        details = logger.log_buffer[0]['details']
        assert details['isBinary'] is True
        assert details['binaryReason'] == 'explicit'
        assert details['sizeBytes'] == 69

    def test_error_and_warning(self, temp_dir):
        """Test error and warning entries."""
        logger = StructuredLogger(log_dir=str(temp_dir))
        logger.log_error('x', 'a.txtar', 'boom', 'ArchiveWriteError', file_name='f.txt')
        logger.log_warning('careful')

        error, warning = logger.log_buffer
        assert error['details']['errorType'] == 'ArchiveWriteError'
        assert error['details']['fileName'] == 'f.txt'
        assert warning['details'] == {'message': 'careful', 'context': {}}

    def test_edit_and_snippet_events(self, temp_dir):
        """Test edit application and missing snippet reference entries."""
        logger = StructuredLogger(log_dir=str(temp_dir))
        logger.log_edit_applied('cfg.txt', 2, 'filesystem')
        logger.log_snippet_ref_missing('a.py', 'search9')

        edit, snippet = logger.log_buffer
        assert edit['details'] == {'fileName': 'cfg.txt', 'editCount': 2, 'targetSource': 'filesystem'}
        assert snippet['event'] == 'snippet_ref_missing'
        assert snippet['details']['missingCommand'] == 'search9'

    def test_session_summary(self, temp_dir):
        """Test event counting in the session summary."""
        logger = StructuredLogger(log_dir=str(temp_dir))
        logger.log_warning('a')
        logger.log_warning('b')
        logger.log_error('t', 'src', 'bad', 'DecodeError')

        summary = logger.export_session_summary()
        assert summary['totalEvents'] == 3
        assert summary['eventCounts'] == {'warning': 2, 'error': 1}
        assert logger.get_session_logs() == logger.log_buffer


class TestLoggingFailurePath:
    """Tests that log write failures do not interrupt operations."""

    def test_unwritable_log_file(self, temp_dir, capsys):
        """Test that a failed write is reported and the entry still buffered."""
        logger = StructuredLogger(log_dir=str(temp_dir))
        logger.log_file.unlink()
        logger.log_file.mkdir()

        logger.log_warning('still here')

        assert len(logger.log_buffer) == 1
        assert 'Failed to write log entry' in capsys.readouterr().err


class TestGlobalLogger:
    """Tests for the module-level session helpers."""

    def test_new_session_replaces_logger(self, temp_dir):
        """Test that new_session() starts a fresh global logger."""
        first = new_session(str(temp_dir))
        assert get_logger() is first
        second = new_session(str(temp_dir))
        assert second is not first
        assert get_logger() is second


class TestUtf8Streams:
    """Tests for the UTF-8 stream helper."""

    def test_utf8_stream_unchanged(self):
        """Test that a UTF-8 stream is returned as-is."""
        stream = io.TextIOWrapper(io.BytesIO(), encoding='utf-8')
        assert _ensure_stream_utf8(stream) is stream

    def test_legacy_stream_reconfigured(self):
        """Test that a non-UTF-8 stream ends up writing UTF-8."""
        raw = io.BytesIO()
        stream = io.TextIOWrapper(raw, encoding='latin-1')
        result = _ensure_stream_utf8(stream)
        result.write('✓')
        result.flush()
        assert raw.getvalue() == '✓'.encode('utf-8')

    def test_none(self):
        """Test that a missing stream stays missing."""
        assert _ensure_stream_utf8(None) is None


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: pytest, logging.py
# TESTS: N/A (this is a test file)
# ============================================================================
