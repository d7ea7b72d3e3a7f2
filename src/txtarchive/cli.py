# ============================================================================
# SOURCEFILE: cli.py
# RELPATH: txtarchive/src/txtarchive/cli.py
# PROJECT: Text Archive Tool v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Command-line interface (txtar-tool)
# ============================================================================

"""Command-Line Interface for Text Archive Tool v1.0."""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from txtarchive import __version__
from txtarchive.core.config import OVERWRITE_POLICIES, ConfigManager
from txtarchive.core.decoder import Decoder
from txtarchive.core.encoder import Encoder
from txtarchive.core.exceptions import ArchiveReadError, TextArchiveError
from txtarchive.core.filesystem import LocalFileSystem
from txtarchive.core.logging import StructuredLogger, configure_utf8_logging, new_session
from txtarchive.core.models import Archive
from txtarchive.core.validators import PathValidator
from txtarchive.core.writer import ArchiveCreator, ArchiveWriter


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="txtar-tool",
        description="Text Archive Tool v1.0 - pack, list, extract and patch txtar archives"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=Path("txtar_config.json"),
                        help="Configuration file (created with defaults if missing)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # CREATE
    parser_create = subparsers.add_parser("create", help="Pack files and directories")
    parser_create.add_argument("inputs", type=Path, nargs="+")
    parser_create.add_argument("--output", "-o", type=Path)
    parser_create.add_argument("--comment", default="")
    parser_create.add_argument("--include", action="append")
    parser_create.add_argument("--exclude", action="append")
    parser_create.add_argument("--max-size", type=float)
    parser_create.add_argument("--verbose", "-v", action="count", default=0)

    # EXTRACT
    parser_x = subparsers.add_parser("x", help="Extract an archive")
    parser_x.add_argument("--input", "-i", type=Path)
    parser_x.add_argument("--directory", "-C", type=Path, default=Path("."))
    parser_x.add_argument("--include-snippets", action="store_true")
    parser_x.add_argument("--overwrite", choices=OVERWRITE_POLICIES)
    parser_x.add_argument("--dry-run", action="store_true")
    parser_x.add_argument("--apply-edits", action="store_true")
    parser_x.add_argument("--verbose", "-v", action="count", default=0)

    # LIST
    parser_t = subparsers.add_parser("t", help="List archive members")
    parser_t.add_argument("--input", "-i", type=Path)
    parser_t.add_argument("--verbose", "-v", action="count", default=0)

    # VALIDATE
    parser_validate = subparsers.add_parser("validate", help="Decode and check references")
    parser_validate.add_argument("--input", "-i", type=Path)

    # APPLY
    parser_apply = subparsers.add_parser("apply", help="Apply edit files to files on disk")
    parser_apply.add_argument("--input", "-i", type=Path)
    parser_apply.add_argument("--directory", "-C", type=Path, default=Path("."))
    parser_apply.add_argument("--strict", action="store_true",
                              help="Reject SEARCH blocks that match more than once")

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    configure_utf8_logging()
    session: Optional[StructuredLogger] = None
    args = None

    try:
        parser = build_parser()
        args = parser.parse_args(argv)

        if getattr(args, "verbose", 0):
            logging.basicConfig(
                level=logging.DEBUG if args.verbose > 2 else logging.WARNING,
                format="%(levelname)s: %(message)s",
            )

        config = ConfigManager(str(args.config))
        config.validate()
        session = new_session(config.get("global_settings.log_dir", "logs"))

        handlers = {
            "create": handle_create,
            "x": handle_extract,
            "t": handle_list,
            "validate": handle_validate,
            "apply": handle_apply,
        }
        handler = handlers.get(args.command)
        if handler is None:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            sys.exit(1)

        exit_code = handler(args, config, session)
        sys.exit(exit_code or 0)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(130)

    except TextArchiveError as e:
        if session is not None:
            session.log_error(
                operation=args.command,
                source=str(getattr(args, "input", None) or "<stdin>"),
                error_message=str(e),
                error_type=type(e).__name__,
                file_name=getattr(e, "name", None),
            )
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    except ValueError as e:
        print(f"CRITICAL ERROR: {e}", file=sys.stderr)
        sys.exit(1)


# ============================================================================
# Helpers
# ============================================================================

def _source_label(args) -> str:
    return str(args.input) if getattr(args, "input", None) else "<stdin>"


def _read_archive(args, config: ConfigManager, base_dir: Optional[Path] = None) -> Archive:
    """Decode the archive named by --input, or stdin."""
    options = config.decoder_options()
    options["verbose"] = max(options["verbose"], getattr(args, "verbose", 0))
    decoder = Decoder(filesystem=LocalFileSystem(base_dir), **options)

    if args.input:
        if not args.input.exists():
            raise ArchiveReadError(str(args.input), "File not found")
        return decoder.decode_file(args.input)
    return decoder.decode(sys.stdin.read())


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


# ============================================================================
# Handlers
# ============================================================================

def handle_create(args, config: ConfigManager, session: StructuredLogger) -> int:
    """Handler for create command."""
    start = time.monotonic()
    destination = str(args.output) if args.output else "<stdout>"
    session.log_operation_start("create", ", ".join(str(p) for p in args.inputs), destination)

    for p in args.inputs:
        if not p.exists():
            raise ArchiveReadError(str(p), "Source path not found")

    creator = ArchiveCreator(
        allow_globs=args.include or config.get("create.allow_globs"),
        deny_globs=args.exclude or config.get("create.deny_globs"),
        max_file_mb=args.max_size or config.get("create.max_file_mb", 10),
        encoding_config=config.encoding_config(),
    )
    archive = creator.create_archive(args.inputs, comment=args.comment)

    for f in archive.files:
        session.log_file_processed(
            f.name, f.is_binary, len(f.data),
            f.binary_reason.value if f.binary_reason else None,
        )
        if args.verbose:
            kind = f"binary ({f.binary_reason.value})" if f.is_binary else "text"
            print(f"  {f.name}: {kind}", file=sys.stderr)

    encoder = Encoder()
    if args.output:
        encoder.encode_to_file(archive, args.output)
        print(f"Archive created: {args.output} ({archive.get_file_count()} files)", file=sys.stderr)
    else:
        encoder.encode_to_stream(archive, sys.stdout)

    session.log_operation_complete("create", ", ".join(str(p) for p in args.inputs), destination,
                                   archive.get_file_count(), 0, 0, _elapsed_ms(start))
    return 0


def handle_extract(args, config: ConfigManager, session: StructuredLogger) -> int:
    """Handler for x (extract) command."""
    start = time.monotonic()
    source = _source_label(args)
    session.log_operation_start("x", source, str(args.directory))

    archive = _read_archive(args, config, args.directory)
    for error in archive.validate_snippet_refs():
        session.log_snippet_ref_missing(error.file, error.missing_command)

    writer = ArchiveWriter(
        output_dir=args.directory,
        overwrite_policy=args.overwrite or config.get("extract.overwrite_policy", "prompt"),
        dry_run=args.dry_run,
        include_snippets=args.include_snippets or config.get("extract.include_snippets", False),
        apply_edits=args.apply_edits or config.get("extract.apply_edits", False),
        require_unique=config.get("edits.require_unique", False),
    )

    if args.dry_run:
        print("[DRY RUN MODE - No files will be written]")

    stats = writer.extract_archive(archive)

    if args.verbose:
        for path in writer.files_written:
            print(f"  {path}")
    if stats["edited"]:
        for f in archive.edit_files():
            origin = "archive" if archive.get_edit_target(f.name) else "filesystem"
            session.log_edit_applied(f.name, len(f.edit_ref.edits), origin)

    print("Extraction complete:")
    print(f"  Processed: {stats['processed']}")
    print(f"  Skipped: {stats['skipped']}")
    print(f"  Errors: {stats['errors']}")

    session.log_operation_complete("x", source, str(args.directory), stats["processed"],
                                   stats["skipped"], stats["errors"], _elapsed_ms(start))
    return 1 if stats["errors"] > 0 else 0


def handle_list(args, config: ConfigManager, session: StructuredLogger) -> int:
    """Handler for t (list) command."""
    start = time.monotonic()
    source = _source_label(args)
    session.log_operation_start("t", source, "<stdout>")

    archive = _read_archive(args, config)
    for f in archive.files:
        if args.verbose:
            kind = "binary" if f.is_binary else "text"
            print(f"{f.name}\t{kind}\t{len(f.data)}")
        else:
            print(f.name)

    session.log_operation_complete("t", source, "<stdout>", archive.get_file_count(), 0, 0,
                                   _elapsed_ms(start))
    return 0


def handle_validate(args, config: ConfigManager, session: StructuredLogger) -> int:
    """Handler for validate command. Unresolved snippet references are warnings."""
    start = time.monotonic()
    source = _source_label(args)
    session.log_operation_start("validate", source, "<report>")

    archive = _read_archive(args, config)
    warnings = archive.validate_snippet_refs()

    print("=" * 60)
    print("VALIDATION REPORT")
    print("=" * 60)
    print("Status: VALID")
    print(f"File count: {archive.get_file_count()}")
    print(f"  Normal: {len(archive.normal_files())}")
    print(f"  Snippets: {len(archive.snippet_files())}")
    print(f"  Edits: {len(archive.edit_files())}")
    print(f"  Text: {archive.get_text_count()}")
    print(f"  Binary: {archive.get_binary_count()}")
    print(f"Total size: {archive.get_total_size_bytes()} bytes")
    print(f"Commands: {len(archive.commands)}")

    if warnings:
        print("\nWarnings:")
        for w in warnings:
            message = f"Snippet '{w.file}' references unknown command '#{w.missing_command}'"
            print(f"  - {message}")
            session.log_snippet_ref_missing(w.file, w.missing_command)
    print("=" * 60)

    session.log_operation_complete("validate", source, "<report>", archive.get_file_count(), 0, 0,
                                   _elapsed_ms(start))
    return 0


def handle_apply(args, config: ConfigManager, session: StructuredLogger) -> int:
    """Handler for apply command: rewrite edit targets under --directory."""
    start = time.monotonic()
    source = _source_label(args)
    session.log_operation_start("apply", source, str(args.directory))

    filesystem = LocalFileSystem(args.directory)
    archive = _read_archive(args, config, args.directory)
    require_unique = args.strict or config.get("edits.require_unique", False)
    edited = archive.apply_edits(filesystem, require_unique=require_unique)

    validator = PathValidator(args.directory)
    writer = ArchiveWriter(output_dir=args.directory, overwrite_policy="overwrite")
    targets = []
    for f in archive.edit_files():
        if f.name not in targets:
            targets.append(f.name)

    for name in targets:
        result = edited.get_edit_target(name)
        writer.write_file(result, validator.validate_path(name), force=True)
        edit_count = sum(len(e.edit_ref.edits) for e in archive.edit_files() if e.name == name)
        session.log_edit_applied(name, edit_count,
                                 "archive" if archive.get_edit_target(name) else "filesystem")
        print(f"Patched: {name}")

    session.log_operation_complete("apply", source, str(args.directory), len(targets), 0, 0,
                                   _elapsed_ms(start))
    return 0


if __name__ == "__main__":
    main()


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: core package
# TESTS: tests/integration/test_cli.py
# ============================================================================
