#!/usr/bin/env python3
"""
DupeKeeper CLI — Command line interface for duplicate file detection and removal.
Uses the same ScanCommand as the async handle and the Qt worker.
The original of every group (oldest modification time, then smallest path) is never deleted.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import sys
import os
import time
from pathlib import Path
from typing import List, Optional, NoReturn
import logging

from dupekeeper.core.errors import InvalidInputError
from dupekeeper.core.models import ScanParams, ScanResult
from dupekeeper.core.selector import ordered_files
from dupekeeper.commands import ScanCommand
from dupekeeper.utils.convert_utils import format_file_size, timestamp_to_human
from dupekeeper.services.file_service import FileService
from dupekeeper.services.duplicate_service import DuplicateService

EPILOG_TEXT = """
Examples:
  Find duplicates in the Pictures folder and its subfolders
  %(prog)s -i ~/Pictures

  Only the top level, four hashing threads
  %(prog)s -i ~/Downloads --no-recursive -j 4

  Delete every duplicate except the original of each group (with confirmation prompt)
  %(prog)s -i ~/Pictures --keep-one

  Same as above, moving files to the system trash, without confirmation (for scripts)
  %(prog)s -i ~/Pictures --keep-one --trash --force > ~/report.txt
"""


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse and validate command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="dupekeeper",
            description="DupeKeeper — find identical files and keep the original",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        # Required arguments
        parser.add_argument(
            "--input", "-i",
            required=True,
            type=str,
            help="Input directory to scan for duplicates"
        )

        # Scan options
        parser.add_argument(
            "--no-recursive",
            action="store_false",
            dest="recursive",
            help="Only scan files directly inside the input directory"
        )
        parser.add_argument(
            "--jobs", "-j",
            type=int,
            default=0,
            metavar='',
            help="Number of hashing threads. Default: number of CPUs"
        )
        parser.add_argument(
            "--extensions", "-x",
            nargs="+",
            default=[],
            type=str,
            metavar='',
            help="File extensions (space separated) to include (e.g., .jpg .png)"
        )
        parser.add_argument(
            "--excluded-dirs", '-e',
            nargs="+",
            default=[],
            type=str,
            metavar='',
            dest="excluded_dirs",
            help="Excluded/ignored directories (space separated)"
        )
        parser.add_argument(
            "--no-pixel-hash",
            action="store_false",
            dest="pixel_hashing",
            help="Hash images by file content instead of decoded pixels"
        )

        # Actions
        parser.add_argument(
            "--keep-one",
            action="store_true",
            help="Keep the original of each duplicate group and delete the rest. "
                 "Always shows preview before deletion for safety."
        )
        parser.add_argument(
            "--trash",
            action="store_true",
            help="Move deleted files to the system trash instead of removing them"
        )

        # Output options
        parser.add_argument(
            "--force",
            action="store_true",
            help="Skip confirmation prompt when used with --keep-one (for automation/scripts)"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show progress and log messages"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.force and not args.keep_one:
            self.error_exit("--force can only be used with --keep-one")

        # Prevent interactive confirmation in non-TTY environments
        if args.keep_one and not args.force:
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Cannot request interactive confirmation in non-interactive session.\n"
                    "Use --force flag to proceed without confirmation when piping output or running in scripts."
                )

        root_path = Path(args.input).resolve()
        if not root_path.exists():
            self.error_exit(f"Directory not found: {args.input}")
        if not root_path.is_dir():
            self.error_exit(f"Path is not a directory: {args.input}")

        if args.jobs < 0:
            self.error_exit("Number of jobs cannot be negative")

        # Validate excluded directories
        for excl_dir in args.excluded_dirs:
            excl_path = Path(excl_dir).resolve()
            if not excl_path.exists():
                self.warning(f"Excluded directory not found: {excl_dir}")
            elif not excl_path.is_dir():
                self.warning(f"Excluded path is not a directory: {excl_dir}")

    def create_params(self, args: argparse.Namespace) -> ScanParams:
        """Create ScanParams from CLI arguments."""
        try:
            return ScanParams(
                root_dir=str(Path(args.input).resolve()),
                recursive=args.recursive,
                parallelism=args.jobs or None,
                pixel_hashing=args.pixel_hashing,
                extensions=args.extensions,
                excluded_dirs=[str(Path(d.strip()).resolve()) for d in args.excluded_dirs]
            )
        except InvalidInputError as e:
            self.error_exit(f"Parameter error: {e}")

    def progress_callback(self, processed: int, total: int, message: str) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return
        sys.stderr.write(f"\r  {message}")
        sys.stderr.flush()

    @staticmethod
    def stopped_flag() -> bool:
        """Ctrl+C raises KeyboardInterrupt instead; nothing else stops a CLI scan."""
        return False

    def run_scan(self, params: ScanParams) -> ScanResult:
        """Execute the scan workflow."""
        command = ScanCommand()
        if self.verbose:
            print(f"Finding duplicates with {params.parallelism} thread(s)...")

        try:
            result = command.execute(
                params,
                progress_callback=self.progress_callback if self.verbose else None,
                stopped_flag=self.stopped_flag
            )
        except Exception as e:
            self.error_exit(f"Scan failed: {e}")

        if self.verbose:
            sys.stderr.write("\n")
            print(f"Scanned {result.files_scanned} files in {result.duration:.2f}s")
            for failure in result.failures:
                self.warning(f"Could not hash {failure.record.path}: {failure.details}")
        return result

    def output_results(self, result: ScanResult) -> None:
        """Output duplicate groups as plain text, original first."""
        if self.quiet:
            return

        if not result.groups:
            print("No duplicate groups found.")
            return

        print(f"\nFound {len(result.groups)} duplicate groups ({result.duplicate_file_count} files)")
        print(f"Space used by duplicates: {format_file_size(result.wasted_size)}")

        for idx, resolved in enumerate(result.groups, 1):
            group = resolved.group
            print(f"\n📁 Group {idx} | {group.algorithm.display_name} | Files: {group.duplicate_count}")
            for file in ordered_files(group):
                marker = "[KEEP]" if file is resolved.original else "      "
                print(f"   {marker} {file.path} [{format_file_size(file.size)}, "
                      f"{timestamp_to_human(file.mtime)}]")

    def execute_keep_one(self, result: ScanResult, use_trash: bool = False, force: bool = False) -> None:
        """Delete every non-original file. Always shows preview before deletion."""
        if not result.groups:
            if not self.quiet:
                print("No duplicate groups found.")
            return

        files_to_delete = DuplicateService.files_to_delete(result)
        space_saved_str = format_file_size(result.wasted_size)

        # Always show deletion preview before action (safety first)
        print()
        for idx, resolved in enumerate(result.groups, 1):
            print(f"📁 Group {idx} | Files: {resolved.group.duplicate_count}")
            print("-" * 60)
            original = resolved.original
            print(f"   [KEEP] {original.path}")
            print(f"          Modified: {timestamp_to_human(original.mtime)} (oldest)")
            for file in resolved.duplicates:
                print(f"   [DEL]  {file.path}")
            print()

        action = "move to trash" if use_trash else "permanently delete"
        print("=" * 60)
        print(f"Summary: keep {len(result.groups)} originals, {action} {len(files_to_delete)} files")
        print(f"Total space saved: {space_saved_str}")
        print()

        # Skip confirmation if --force is used
        if force:
            print("⚠️  WARNING: --force flag skips confirmation. Proceeding with deletion...")
        else:
            response = input(f"Are you sure you want to {action} {len(files_to_delete)} files? [y/N]: ")
            if response.strip().lower() not in ("y", "yes"):
                print("Deletion cancelled by user.")
                return

        summary = FileService.delete_files(files_to_delete, use_trash=use_trash)

        if summary.has_failures:
            print(f"\n⚠️  Partial success: {summary.deleted_count}/{len(files_to_delete)} files deleted.")
            print(f"Failed to delete {len(summary.failures)} file(s):")
            for name in summary.failed_names[:5]:  # Show first 5 errors
                print(f"  • {name}")
            if len(summary.failures) > 5:
                print(f"  ...and {len(summary.failures) - 5} more files")
        else:
            print(f"✅ Successfully deleted {summary.deleted_count} files.")
            print(f"Total space saved: {space_saved_str}")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet

        logging.basicConfig(
            level=logging.INFO if self.verbose else logging.ERROR,
            format="%(levelname)-8s | %(name)-30s | %(message)s"
        )

        self.validate_args(args)
        params = self.create_params(args)

        if not self.quiet:
            print(f"Scanning directory: {params.root_dir}")

        result = self.run_scan(params)

        if args.keep_one:
            self.execute_keep_one(result, use_trash=args.trash, force=args.force)
        else:
            self.output_results(result)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
