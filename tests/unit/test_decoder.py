# ============================================================================
# FILE: test_decoder.py
# RELPATH: txtarchive/tests/unit/test_decoder.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Unit tests for the archive decoder
# ============================================================================

"""Unit tests for Decoder."""

import logging
import pytest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src')))

from txtarchive.core.decoder import Decoder, DecoderState, decode
from txtarchive.core.detection import BinaryReason
from txtarchive.core.exceptions import (
    ArchiveReadError,
    Base64DecodeError,
    DuplicateFileError,
    EditBlockDecodeError,
    EditTargetNotFoundError,
    InvalidTagError,
    InvalidUtf8Error,
    MissingClosingBracketError,
    SnippetParseError,
    TagSyntaxError,
    UnterminatedBlockError,
)
from txtarchive.core.filesystem import MemoryFileSystem
from txtarchive.core.models import Command, EditBlock, EditOperation, SnippetRef


@pytest.fixture
def decoder():
    """Decoder with an empty in-memory filesystem."""
    return Decoder(filesystem=MemoryFileSystem())


class TestDecodeBasics:
    """Tests for files, comments and binary payloads."""

    def test_single_text_file(self, decoder):
        """Test the basic text file scenario."""
        archive = decoder.decode("-- f.txt --\nhello\n")
        assert archive.comment == ""
        assert len(archive.files) == 1
        f = archive.files[0]
        assert f.name == "f.txt"
        assert f.data == b"hello"
        assert not f.is_binary

    def test_binary_file(self, decoder):
        """Test the base64 scenario: '/9j/' decodes to FF D8 FF."""
        archive = decoder.decode("-- img.jpg[.base64] --\n/9j/\n")
        f = archive.files[0]
        assert f.name == "img.jpg"
        assert f.data == bytes([0xFF, 0xD8, 0xFF])
        assert f.is_binary
        assert f.binary_reason == BinaryReason.EXPLICIT

    def test_binary_split_over_lines(self, decoder):
        """Test that base64 lines are joined and blank lines skipped."""
        archive = decoder.decode("-- b[.base64] --\naGVs\n\nbG8=\r\n")
        assert archive.files[0].data == b"hello"

    def test_empty_binary(self, decoder):
        """Test a binary file with no payload."""
        assert decoder.decode("-- b[.base64] --\n").files[0].data == b""

    def test_invalid_base64(self, decoder):
        """Test that bad base64 raises Base64DecodeError."""
        with pytest.raises(Base64DecodeError) as exc_info:
            decoder.decode("-- b[.base64] --\n!!!not base64!!!\n")
        assert exc_info.value.name == "b"

    def test_text_keeps_inner_blank_lines(self, decoder):
        """Test that text bodies keep blank lines and drop one trailing newline."""
        archive = decoder.decode("-- a --\nx\n\ny\n\n-- b --\nz\n")
        assert archive.files[0].data == b"x\n\ny\n"
        assert archive.files[1].data == b"z"

    def test_empty_text_file(self, decoder):
        """Test a marker directly followed by another marker."""
        archive = decoder.decode("-- a --\n-- b --\nx\n")
        assert archive.files[0].data == b""

    def test_crlf_archive(self, decoder):
        """Test that CRLF archives decode like LF archives."""
        archive = decoder.decode("comment\r\n-- a.txt --\r\nline1\r\nline2\r\n")
        assert archive.comment == "comment"
        assert archive.files[0].data == b"line1\nline2"

    def test_blank_marker_line_is_content(self, decoder):
        """Test that '--   --' inside a text body stays content."""
        archive = decoder.decode("-- a --\nx\n--   --\ny\n")
        assert len(archive.files) == 1
        assert archive.files[0].data == b"x\n--   --\ny"

    def test_duplicate_normal_file(self, decoder):
        """Test the duplicate-name scenario."""
        with pytest.raises(DuplicateFileError):
            decoder.decode("-- a.txt --\n1\n-- a.txt --\n2\n")

    def test_empty_name(self, decoder):
        """Test a marker with only tags."""
        with pytest.raises(TagSyntaxError):
            decoder.decode("-- [.base64] --\n")

    def test_no_files(self, decoder):
        """Test comment-only input."""
        archive = decoder.decode("just a note\n")
        assert archive.files == []
        assert archive.comment == "just a note"

    def test_module_level_decode(self):
        """Test the decode() convenience wrapper."""
        archive = decode("-- a --\nx\n", filesystem=MemoryFileSystem())
        assert archive.files[0].data == b"x"

    def test_decoder_reusable(self, decoder):
        """Test that one decoder can decode twice without leaking state."""
        decoder.decode("note\n-- a --\nx\n")
        archive = decoder.decode("-- b --\ny\n")
        assert [f.name for f in archive.files] == ["b"]
        assert archive.comment == ""
        assert decoder.state is DecoderState.COMMENT


class TestDecodeComment:
    """Tests for comment accumulation and commands."""

    def test_comment_blank_line_rules(self, decoder):
        """Test leading/trailing blanks dropped, inner blanks kept."""
        text = "\n\nfirst\n\nsecond\n\n\n-- a --\nx\n"
        assert decoder.decode(text).comment == "first\n\nsecond"

    def test_commands_parsed(self, decoder):
        """Test command links in the comment."""
        text = "[command: rg foo](#s1)\n[command: ls](#s2)\n-- a --\nx\n"
        archive = decoder.decode(text)
        assert archive.commands == (Command("rg foo", "s1"), Command("ls", "s2"))
        assert archive.get_command("s2") == Command("ls", "s2")


class TestDecodeTags:
    """Tests for snippet, edit and unknown tags."""

    def test_snippet_tags(self, decoder, sample_archive_text):
        """Test snippet tags and uniqueness exemption."""
        archive = decoder.decode(sample_archive_text)
        assert [f.name for f in archive.files] == ["src/main.py", "assets/icon.png", "src/main.py"]
        snippet = archive.snippet_files()[0]
        assert snippet.snippet_ref == SnippetRef("search1", 1)
        assert archive.validate_snippet_refs() == []

    def test_unresolved_snippet_is_not_fatal(self, decoder):
        """Test that an unknown snippet command only shows up in validation."""
        archive = decoder.decode("-- a.py[.snippet#nope:3] --\nx\n")
        errors = archive.validate_snippet_refs()
        assert len(errors) == 1
        assert errors[0].missing_command == "nope"

    def test_unknown_tag_permissive(self, decoder):
        """Test that unknown tags are ignored by default."""
        archive = decoder.decode("-- a.py[.gzip] --\nx\n")
        assert archive.files[0].name == "a.py"
        assert archive.files[0].is_normal

    def test_unknown_tag_strict(self):
        """Test that strict_tags rejects unknown tags."""
        decoder = Decoder(strict_tags=True, filesystem=MemoryFileSystem())
        with pytest.raises(InvalidTagError):
            decoder.decode("-- a.py[.gzip] --\nx\n")

    def test_bad_snippet_strict(self):
        """Test that strict_tags rejects malformed snippet tags."""
        decoder = Decoder(strict_tags=True, filesystem=MemoryFileSystem())
        with pytest.raises(SnippetParseError):
            decoder.decode("-- a.py[.snippet:x] --\nx\n")

    def test_unclosed_tag_strict(self):
        """Test that strict_tags rejects an unclosed tag."""
        decoder = Decoder(strict_tags=True, filesystem=MemoryFileSystem())
        with pytest.raises(MissingClosingBracketError):
            decoder.decode("-- a.py[.edit --\nx\n")

    def test_marker_like_name_warning(self, caplog):
        """Test the advisory warning for marker-looking names."""
        decoder = Decoder(verbose=1, filesystem=MemoryFileSystem())
        with caplog.at_level(logging.WARNING, logger="txtarchive.core.decoder"):
            archive = decoder.decode("-- odd -- name -- --\nx\n")
        assert archive.files[0].name == "odd -- name --"
        assert len(decoder.diagnostics) == 1
        assert "marker pattern" in caplog.text

    def test_marker_like_name_quiet(self, caplog):
        """Test that the warning is recorded but not logged at verbose 0."""
        decoder = Decoder(filesystem=MemoryFileSystem())
        with caplog.at_level(logging.WARNING, logger="txtarchive.core.decoder"):
            decoder.decode("-- odd -- name -- --\nx\n")
        assert len(decoder.diagnostics) == 1
        assert "marker pattern" not in caplog.text


class TestDecodeEdits:
    """Tests for edit files."""

    def test_edit_against_archive_file(self, decoder, sample_edit_archive_text):
        """Test the edit scenario with a target inside the archive."""
        archive = decoder.decode(sample_edit_archive_text)
        edit = archive.edit_files()[0]
        assert edit.edit_ref.edits == (EditBlock(("name = old",), ("name = new",), EditOperation.REPLACE),)
        result = archive.apply_edits()
        assert result.get_file("config.txt").data == b"name = new\nmode = fast"

    def test_edit_old_to_new(self, decoder):
        """Test a one-line old -> new edit."""
        text = (
            "-- a.txt --\nold\n"
            "-- a.txt[.edit] --\n<<<<<<< SEARCH\nold\n=======\nnew\n>>>>>>> REPLACE\n"
        )
        assert decoder.decode(text).apply_edits().get_file("a.txt").data == b"new"

    def test_edit_target_on_filesystem(self, memory_fs):
        """Test a target that only exists on the filesystem collaborator."""
        decoder = Decoder(filesystem=memory_fs)
        archive = decoder.decode(
            "-- disk.txt[.edit#fix:1] --\n<<<<<<< SEARCH\nline two\n>>>>>>> DELETE\n"
        )
        ref = archive.edit_files()[0].edit_ref
        assert ref.command_href == "fix"
        assert ref.start_line == 1
        assert archive.apply_edits(memory_fs).get_file("disk.txt").data == b"line one\n"

    def test_edit_target_is_snippet(self):
        """Test that a snippet member is a valid edit target."""
        decoder = Decoder(filesystem=MemoryFileSystem())
        archive = decoder.decode(
            "-- a.txt[.snippet:1] --\nold\n"
            "-- a.txt[.edit] --\n<<<<<<< SEARCH\nold\n=======\nnew\n>>>>>>> REPLACE\n"
        )
        edited = archive.apply_edits().get_edit_target("a.txt")
        assert edited.data == b"new"
        assert edited.snippet_ref == SnippetRef(None, 1)

    def test_edit_target_missing(self, decoder):
        """Test the missing-target scenario."""
        with pytest.raises(EditTargetNotFoundError) as exc_info:
            decoder.decode("-- ghost.txt[.edit] --\n<<<<<<< SEARCH\n=======\nx\n>>>>>>> INSERT\n")
        assert exc_info.value.name == "ghost.txt"

    def test_edit_target_checked_before_body(self, decoder):
        """Test that target validation runs before edit parsing."""
        with pytest.raises(EditTargetNotFoundError):
            decoder.decode("-- ghost.txt[.edit] --\nnot an edit program\n")

    def test_bad_edit_body(self, decoder):
        """Test that parse errors are wrapped with the file name."""
        with pytest.raises(EditBlockDecodeError) as exc_info:
            decoder.decode("-- a --\nx\n-- a[.edit] --\n<<<<<<< SEARCH\nx\n")
        assert exc_info.value.name == "a"
        assert isinstance(exc_info.value.cause, UnterminatedBlockError)

    def test_binary_edit_body(self, decoder):
        """Test that an edit body must be UTF-8."""
        with pytest.raises(InvalidUtf8Error):
            decoder.decode("-- a --\nx\n-- a[.base64][.edit] --\n/9j/\n")


class TestDecodeFile:
    """Tests for decode_file."""

    def test_decode_file(self, decoder, temp_dir):
        """Test reading an archive from disk."""
        path = temp_dir / "a.txtar"
        path.write_text("-- a --\nx\n", encoding="utf-8")
        assert decoder.decode_file(path).files[0].data == b"x"

    def test_decode_missing_file(self, decoder, temp_dir):
        """Test a missing archive file."""
        with pytest.raises(ArchiveReadError):
            decoder.decode_file(temp_dir / "missing.txtar")


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: pytest, decoder.py
# TESTS: N/A (this is a test file)
# ============================================================================
