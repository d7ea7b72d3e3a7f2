# ============================================================================
# FILE: conftest.py
# RELPATH: txtarchive/tests/conftest.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Pytest fixtures for Text Archive Tool v1.0 test suite
# ============================================================================

"""
Pytest configuration and shared fixtures.

Sample archives, sample binary payloads, temp directories, config paths and
an in-memory filesystem collaborator.
"""

import pytest
import tempfile
import shutil
from pathlib import Path
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from txtarchive.core.filesystem import MemoryFileSystem
from txtarchive.core.models import Archive, File


# ============================================================================
# Sample Data Fixtures
# ============================================================================

JPEG_HEADER = bytes([0xFF, 0xD8, 0xFF, 0xE0, 0x00, 0x10, 0x4A, 0x46, 0x49, 0x46])

PNG_1X1_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAIAAACQd1PeAAAADElEQVR4nGOoPqELAAMyAXHORGq8AAAAAElFTkSuQmCC"
)


@pytest.fixture
def jpeg_bytes():
    """JPEG magic header; not valid UTF-8."""
    return JPEG_HEADER


@pytest.fixture
def sample_archive_text():
    """Archive with a comment, a command, a text file, a binary and a snippet."""
    return (
        "Fix bundle for the parser.\n"
        "\n"
        "[command: rg parse](#search1)\n"
        "\n"
        "-- src/main.py --\n"
        "def main():\n"
        "    print('hello')\n"
        "-- assets/icon.png[.base64] --\n"
        f"{PNG_1X1_BASE64}\n"
        "-- src/main.py[.#search1:1] --\n"
        "def main():\n"
    )


@pytest.fixture
def sample_edit_archive_text():
    """Archive carrying a target file and an edit program for it."""
    return (
        "-- config.txt --\n"
        "name = old\n"
        "mode = fast\n"
        "-- config.txt[.edit] --\n"
        "<<<<<<< SEARCH\n"
        "name = old\n"
        "=======\n"
        "name = new\n"
        ">>>>>>> REPLACE\n"
    )


@pytest.fixture
def sample_archive():
    """Small in-memory archive with one text and one binary file."""
    archive = Archive(comment="sample")
    archive.add_file(File.new("hello.txt", "hello world"))
    archive.add_file(File.new("data.bin", JPEG_HEADER))
    return archive


@pytest.fixture
def memory_fs():
    """In-memory filesystem with a single text file."""
    return MemoryFileSystem({"disk.txt": "line one\nline two\n"})


# ============================================================================
# Temporary Directory Fixtures
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory for test operations."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def temp_config_file(temp_dir):
    """Path for a config file that does not exist yet."""
    return temp_dir / "txtar_config.json"


@pytest.fixture
def sample_tree(temp_dir):
    """Directory tree with text, binary and cache files."""
    root = temp_dir / "project"
    (root / "src").mkdir(parents=True)
    (root / "src" / "app.py").write_text("print('app')\n", encoding="utf-8")
    (root / "README.md").write_text("# Project\n", encoding="utf-8")
    (root / "logo.bin").write_bytes(JPEG_HEADER)
    (root / "__pycache__").mkdir()
    (root / "__pycache__" / "app.cpython-311.pyc").write_bytes(b"\x00\x01")
    return root


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: pytest, txtarchive.core
# TESTS: N/A (fixture module)
# ============================================================================
