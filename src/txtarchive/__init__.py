# ============================================================================
# SOURCEFILE: __init__.py
# RELPATH: txtarchive/src/txtarchive/__init__.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Package root for Text Archive Tool
# ============================================================================

"""Extended txtar text archives: files, binaries, snippets and edit programs."""

__version__ = "1.0.0"
