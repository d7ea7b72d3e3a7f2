# ============================================================================
# SOURCEFILE: __init__.py
# RELPATH: txtarchive/src/txtarchive/core/__init__.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Public API of the archive codec
# ============================================================================

from txtarchive.core.detection import (
    Binary,
    BinaryReason,
    EncodingConfig,
    Text,
    TextEncoding,
    contains_marker_pattern,
    detect_encoding,
)
from txtarchive.core.models import (
    Archive,
    Command,
    EditBlock,
    EditOperation,
    EditRef,
    File,
    SnippetRef,
    SnippetRefError,
)
from txtarchive.core.edits import (
    EditParser,
    apply_edits,
    count_matches,
    find_search_block,
    parse_edit_blocks,
)
from txtarchive.core.decoder import Decoder
from txtarchive.core.encoder import Encoder
from txtarchive.core.filesystem import FileSystem, LocalFileSystem, MemoryFileSystem

__all__ = [
    "Archive", "Binary", "BinaryReason", "Command", "Decoder", "EditBlock",
    "EditOperation", "EditParser", "EditRef", "Encoder", "EncodingConfig",
    "File", "FileSystem", "LocalFileSystem", "MemoryFileSystem", "SnippetRef",
    "SnippetRefError", "Text", "TextEncoding", "apply_edits",
    "contains_marker_pattern", "count_matches", "detect_encoding",
    "find_search_block", "parse_edit_blocks",
]
