# ============================================================================
# SOURCEFILE: writer.py
# RELPATH: txtarchive/src/txtarchive/core/writer.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION:
#   Disk I/O around the codec: ArchiveCreator packs files and directories
#   into an Archive, ArchiveWriter extracts an Archive into a directory.
# ============================================================================

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

from txtarchive.core.detection import EncodingConfig
from txtarchive.core.exceptions import (
    ArchiveReadError,
    ArchiveWriteError,
    OverwriteError,
    PathTraversalError,
)
from txtarchive.core.filesystem import LocalFileSystem
from txtarchive.core.models import Archive, File
from txtarchive.core.validators import FileSizeValidator, GlobFilter, PathValidator


class OverwritePolicy(Enum):
    PROMPT = "prompt"
    SKIP = "skip"
    OVERWRITE = "overwrite"
    RENAME = "rename"


class ArchiveWriter:
    """Extracts archive members into an output directory."""

    def __init__(self,
                 output_dir: Optional[Path] = None,
                 overwrite_policy: Union[str, OverwritePolicy] = OverwritePolicy.PROMPT,
                 dry_run: bool = False,
                 include_snippets: bool = False,
                 apply_edits: bool = False,
                 require_unique: bool = False):
        """
        Args:
            output_dir: Extraction root (defaults to cwd)
            overwrite_policy: prompt, skip, rename or overwrite
            dry_run: Resolve and report without touching the filesystem
            include_snippets: Write snippet files too
            apply_edits: Apply edit files to their targets and write the results
            require_unique: Reject ambiguous SEARCH blocks when applying edits
        """
        self.output_dir = Path(output_dir).resolve() if output_dir else Path.cwd().resolve()

        if isinstance(overwrite_policy, OverwritePolicy):
            policy = overwrite_policy.value
        else:
            policy = str(overwrite_policy).lower()
        if policy not in [p.value for p in OverwritePolicy]:
            raise ValueError(
                f"Unknown overwrite policy '{overwrite_policy}'. "
                f"Expected one of: {', '.join(p.value for p in OverwritePolicy)}"
            )

        self.overwrite_policy = policy
        self.dry_run = dry_run
        self.include_snippets = include_snippets
        self.apply_edits = apply_edits
        self.require_unique = require_unique

        self.files_written: List[Path] = []
        self.files_skipped: List[str] = []
        self.files_renamed: Dict[Path, Path] = {}
        self.pending_writes: Set[Path] = set()

    def _reset(self) -> None:
        self.files_written.clear()
        self.files_skipped.clear()
        self.files_renamed.clear()
        self.pending_writes.clear()

    def extract_archive(self,
                        archive: Archive,
                        output_dir: Optional[Path] = None) -> Dict[str, int]:
        """
        Write archive members under the output directory.

        Edit files are either applied (``apply_edits``) or skipped. Edit
        targets read from disk are rewritten in place regardless of the
        overwrite policy.

        Returns:
            {"processed": int, "skipped": int, "errors": int, "edited": int}

        Raises:
            OverwriteError: Policy is 'prompt' and a target exists
            EditTargetNotFoundError, EditApplyError: While applying edits
        """
        self._reset()
        out_dir = Path(output_dir).resolve() if output_dir else self.output_dir
        stats = {"processed": 0, "skipped": 0, "errors": 0, "edited": 0}

        disk_targets: Set[str] = set()
        if self.apply_edits and archive.edit_files():
            edit_files = archive.edit_files()
            disk_targets = {f.name for f in edit_files if archive.get_edit_target(f.name) is None}
            stats["edited"] = len(edit_files)
            archive = archive.apply_edits(
                LocalFileSystem(out_dir), require_unique=self.require_unique
            )

        if not self.dry_run:
            out_dir.mkdir(parents=True, exist_ok=True)

        validator = PathValidator(out_dir)

        for f in archive.files:
            if f.edit_ref is not None:
                logging.info("Skipping edit file '%s' (edits not applied)", f.name)
                self.files_skipped.append(f.name)
                stats["skipped"] += 1
                continue
            if f.snippet_ref is not None and not self.include_snippets:
                self.files_skipped.append(f.name)
                stats["skipped"] += 1
                continue

            try:
                target = validator.validate_path(f.name)
                status, _ = self.write_file(f, target, force=f.name in disk_targets)
                stats[status] += 1
            except (OverwriteError, PathTraversalError, ArchiveWriteError) as e:
                logging.warning("Error extracting '%s': %s", f.name, e)
                stats["errors"] += 1
                if isinstance(e, OverwriteError) and self.overwrite_policy == OverwritePolicy.PROMPT.value:
                    raise

        return stats

    def write_file(self, file: File, target: Path, force: bool = False) -> Tuple[str, str]:
        """
        Write one member to ``target`` honoring the overwrite policy.

        Returns:
            ("processed" | "skipped", final target path)

        Raises:
            OverwriteError: Policy is 'prompt' and target exists
            ArchiveWriteError: On filesystem failures
        """
        target = Path(target)
        exists = target.exists() or target in self.pending_writes

        if exists and not force:
            if self.overwrite_policy == OverwritePolicy.PROMPT.value:
                raise OverwriteError(str(target))
            elif self.overwrite_policy == OverwritePolicy.SKIP.value:
                self.files_skipped.append(file.name)
                return ("skipped", str(target))
            elif self.overwrite_policy == OverwritePolicy.RENAME.value:
                renamed = self._get_renamed_path(target)
                self.files_renamed[target] = renamed
                target = renamed

        if not self.dry_run:
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(file.data)
            except OSError as e:
                raise ArchiveWriteError(str(target), f"Filesystem write failed: {e}")

        self.files_written.append(target)
        self.pending_writes.add(target)
        return ("processed", str(target))

    def _get_renamed_path(self, original: Path) -> Path:
        """file.txt -> file_1.txt -> file_2.txt, skipping names on disk or pending."""
        counter = 1
        while True:
            candidate = original.parent / f"{original.stem}_{counter}{original.suffix}"
            if not candidate.exists() and candidate not in self.pending_writes:
                return candidate
            counter += 1


class ArchiveCreator:
    """Builds an Archive from files and directories on disk."""

    DEFAULT_DENY_GLOBS: List[str] = [
        "**/.git/**", "**/.svn/**", "**/.hg/**",
        "**/.venv/**", "**/__pycache__/**", "**/*.pyc",
        "**/.pytest_cache/**", "**/.mypy_cache/**",
        "**/.DS_Store", "**/Thumbs.db",
    ]

    def __init__(self,
                 allow_globs: Optional[Sequence[str]] = None,
                 deny_globs: Optional[Sequence[str]] = None,
                 max_file_mb: float = 10.0,
                 encoding_config: Optional[EncodingConfig] = None):
        """
        Args:
            allow_globs: Include patterns; None includes everything
            deny_globs: Exclude patterns; None uses DEFAULT_DENY_GLOBS,
                        a provided list replaces it
            max_file_mb: Per-file size limit
            encoding_config: Detection policy for new files
        """
        if isinstance(max_file_mb, bool) or not isinstance(max_file_mb, (int, float)) or max_file_mb <= 0:
            raise ValueError("max_file_mb must be a positive number.")

        self.allow_globs = None if allow_globs is None else list(allow_globs)
        self.deny_globs = list(self.DEFAULT_DENY_GLOBS if deny_globs is None else deny_globs)
        self.max_file_mb = max_file_mb
        self.encoding_config = encoding_config
        self.glob_filter = GlobFilter(self.allow_globs, self.deny_globs)
        self.size_validator = FileSizeValidator(max_file_mb)

    def discover_files(self, source_path: Path) -> List[Tuple[Path, str]]:
        """
        List (path, archive name) pairs under ``source_path``.

        A directory contributes its files named relative to the directory;
        a single file is named by its file name.

        Raises:
            ArchiveReadError: If source_path does not exist
        """
        source_path = Path(source_path)
        if not source_path.exists():
            raise ArchiveReadError(str(source_path), "Source path does not exist")

        if source_path.is_file():
            name = source_path.name
            return [(source_path, name)] if self.glob_filter.should_include(name) else []

        found: List[Tuple[Path, str]] = []
        for path in sorted(source_path.rglob("*")):
            if not path.is_file():
                continue
            name = path.relative_to(source_path).as_posix()
            if self.glob_filter.should_include(name):
                found.append((path, name))
        return found

    def create_archive(self, inputs: Sequence[Path], comment: str = "") -> Archive:
        """
        Pack ``inputs`` into a new Archive, in input order.

        Raises:
            ArchiveReadError: Missing input or unreadable file
            FileSizeError: A file exceeds max_file_mb
            DuplicateFileError: Two inputs produce the same archive name
        """
        archive = Archive(comment=comment)
        for source in inputs:
            for path, name in self.discover_files(Path(source)):
                self.size_validator.validate_size(path)
                f = archive.add_file_from_path(path, name, self.encoding_config)
                logging.debug("Added '%s' (%s)", name, "binary" if f.is_binary else "text")
        archive.parse_commands()
        return archive


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: models.py, filesystem.py, validators.py, exceptions.py
# TESTS: tests/unit/test_writer.py
# ============================================================================
