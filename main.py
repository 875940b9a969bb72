#!/usr/bin/env python3
"""
artist-sorter: sort music files into per-artist folders.

Files named like "Artist - Title.mp3" anywhere under the given directory are
moved to "<directory>/Artist/Artist - Title.mp3".
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Iterable, Optional

from utils.logging_config import setup_logging
from utils.config_loader import load_config, get_config_template
from pipeline.orchestrator import ArtistSortPipeline
from filesystem.file_ops import FileSystemOperations
from utils.exceptions import SorterError


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a whole number, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Sort 'Artist - Title' music files into per-artist folders",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                   # Ask for the folder interactively
  %(prog)s /path/to/music                    # Sort files under /path/to/music
  %(prog)s /path/to/music --dry-run          # Show what would be moved
  %(prog)s /path/to/music --yes              # Do not ask for confirmation
        """
    )

    parser.add_argument(
        "music_directory",
        nargs="?",
        help="Path to the folder to sort (prompted for if omitted)"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a YAML config file"
    )

    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Start sorting without asking for confirmation"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Plan the moves without touching any file"
    )

    parser.add_argument(
        "--limit",
        type=positive_int,
        help="Limit processing to N files (for testing)"
    )

    parser.add_argument(
        "--tag-fallback",
        action="store_true",
        default=None,
        help="Use the artist tag for files whose names cannot be parsed"
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Write sort_plan.csv and sort_summary.json to this directory"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Print a config file template and exit"
    )

    return parser.parse_args(argv)


def normalize_path_input(raw: Optional[str]) -> str:
    """Strip whitespace and one pair of surrounding double quotes."""
    path = (raw or "").strip()
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        path = path[1:-1]
    return path


def is_confirmed(answer: Optional[str], accepted: Iterable[str]) -> bool:
    """Whether a confirmation answer is one of the accepted ones (case-insensitive)."""
    return (answer or "").strip().lower() in {a.strip().lower() for a in accepted}


def prompt(message: str) -> str:
    try:
        return input(message)
    except EOFError:
        return ""


def main(argv=None) -> int:
    """Main entry point."""
    try:
        args = parse_arguments(argv)

        if args.print_config:
            print(get_config_template())
            return 0

        config = load_config(args.config)

        log_config = config['logging']
        log_level = "DEBUG" if args.verbose else log_config['level']
        logger = setup_logging(
            log_level,
            log_file=Path(log_config['file']).expanduser() if log_config.get('file') else None,
            max_file_size=log_config['max_file_size'],
            backup_count=log_config['backup_count'],
            log_format=log_config['format']
        )

        if args.music_directory is not None:
            raw_path = args.music_directory
            print(f"Path from argument: {FileSystemOperations.sanitize_unicode_text(raw_path)}")
        else:
            raw_path = prompt("Enter the path to the music folder: ")

        folder = normalize_path_input(raw_path)
        if not folder:
            print("Error: no path given", file=sys.stderr)
            print(f"Usage: {Path(sys.argv[0]).name} \"/path/to/music\"", file=sys.stderr)
            return 1

        music_dir = Path(os.path.abspath(folder))

        pipeline = ArtistSortPipeline(
            config=config,
            output_dir=args.output_dir,
            tag_fallback=args.tag_fallback
        )

        # Fail on a bad root before asking anything
        music_dir = pipeline.filesystem_ops.validate_root(music_dir)
        print(f"\nFound folder: {FileSystemOperations.sanitize_unicode_text(str(music_dir))}")

        if not args.yes:
            answer = prompt("\nStart sorting files by artist? (y/N): ")
            if not is_confirmed(answer, config['sorting']['confirm_answers']):
                print("Cancelled")
                return 1

        logger.info("Scanning and sorting...")

        summary = pipeline.process_library(
            music_dir=music_dir,
            limit=args.limit,
            execute=not args.dry_run
        )

        if args.dry_run:
            print(f"\nDry run complete. Files that would be moved: {summary.moved}")
        else:
            print(f"\nDone! Files processed: {summary.moved}")

        return 0

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 1
    except SorterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        try:
            error_msg = str(e)
        except (UnicodeDecodeError, UnicodeEncodeError):
            error_msg = repr(e).encode('utf-8', errors='replace').decode('utf-8')

        print(f"Unexpected error: {error_msg}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
