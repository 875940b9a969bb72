"""
Pipeline orchestrator that sorts music files into per-artist folders.

This module drives every discovered file through the four stages and
collects the per-file outcomes into a SortSummary.
"""

import csv
import json
import logging
import time
from pathlib import Path
from typing import Optional, Dict, Any, Set

from models.schemas import SortEvent, SortSummary
from filesystem.file_ops import FileSystemOperations
from pipeline.stages import Stage1Triage, Stage2Classification, Stage3Sanitization, Stage4Relocation
from utils.exceptions import (
    UnparseableFilenameError, UndeterminableArtistError, FilesystemError, OrganizationError
)
from utils.logging_config import log_processing_progress

logger = logging.getLogger(__name__)


class ArtistSortPipeline:
    """
    Main pipeline orchestrator for sorting music files by artist.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        output_dir: Optional[Path] = None,
        tag_fallback: Optional[bool] = None
    ):
        """
        Initialize the sorting pipeline.

        Args:
            config: Configuration dictionary
            output_dir: Directory for the plan and summary files (optional)
            tag_fallback: Overrides sorting.tag_fallback from the config
        """
        self.config = config
        self.output_dir = output_dir

        if tag_fallback is None:
            tag_fallback = config['sorting']['tag_fallback']

        self.filesystem_ops = FileSystemOperations(
            music_extensions=config['filesystem']['music_extensions']
        )

        self.stage1 = Stage1Triage(self.filesystem_ops)
        self.stage2 = Stage2Classification(self.filesystem_ops, tag_fallback=tag_fallback)
        self.stage3 = Stage3Sanitization()
        self.stage4: Optional[Stage4Relocation] = None

    def process_library(
        self,
        music_dir: Path,
        limit: Optional[int] = None,
        execute: bool = True
    ) -> SortSummary:
        """
        Sort every music file under `music_dir` into `music_dir/<artist>/`.

        Args:
            music_dir: Root directory of the music collection
            limit: Optional limit on number of files to process
            execute: Move files when True, only plan when False

        Returns:
            SortSummary with counters and one event per processed file

        Raises:
            FilesystemError: If the root directory cannot be used
        """
        music_dir = self.filesystem_ops.validate_root(music_dir)
        self.stage4 = Stage4Relocation(self.filesystem_ops, music_dir)

        logger.info(f"Scanning for music files in: {music_dir}")
        start_time = time.time()

        summary = SortSummary(root=music_dir, dry_run=not execute)

        # Walk the whole tree before moving anything
        file_paths = []
        for entry in self.filesystem_ops.discover(music_dir):
            if entry.ok:
                file_paths.append(entry.path)
            else:
                summary.unreadable_entries += 1
                logger.debug(f"Skipping unreadable entry {entry.path}: {entry.error}")

        if limit is not None:
            if limit < 1:
                raise ValueError(f"limit must be at least 1, got {limit}")
            file_paths = file_paths[:limit]
            logger.info(f"Limited processing to {limit} files")

        summary.total_files = len(file_paths)
        logger.info(f"Found {len(file_paths)} music files")

        if not file_paths:
            logger.warning("No music files found")
            return summary

        reserved: Set[Path] = set()
        for i, file_path in enumerate(file_paths, 1):
            summary.record(self.process_single_file(file_path, execute, reserved))
            log_processing_progress(i, len(file_paths), logger)

        if self.output_dir:
            self._generate_output_files(summary)

        logger.info(f"Processing completed in {time.time() - start_time:.2f} seconds")
        return summary

    def process_single_file(
        self,
        file_path: Path,
        execute: bool = True,
        reserved: Optional[Set[Path]] = None
    ) -> SortEvent:
        """
        Process a single music file through all pipeline stages.

        Per-file failures are turned into events; nothing is raised.
        """
        if self.stage4 is None:
            raise RuntimeError("process_library() must set the root before files are processed")

        candidate = self.stage1.process(file_path)
        if candidate is None:
            return SortEvent(source_path=file_path, status='unsupported',
                             message="Not a recognized music file")

        artist = None
        try:
            raw_artist = self.stage2.process(candidate)
            artist = self.stage3.process(candidate, raw_artist)

            if self.stage4.is_in_place(candidate, artist):
                logger.info(f"Already in place: {candidate.filename}")
                return SortEvent(source_path=file_path, status='in_place', artist=artist,
                                 destination=file_path)

            destination = self.stage4.process(candidate, artist, execute=execute, reserved=reserved)

        except UnparseableFilenameError as e:
            logger.warning(str(e))
            return SortEvent(source_path=file_path, status='unmatched', message=str(e))
        except UndeterminableArtistError as e:
            logger.warning(str(e))
            return SortEvent(source_path=file_path, status='no_artist', message=str(e))
        except (FilesystemError, OrganizationError) as e:
            logger.error(str(e))
            return SortEvent(source_path=file_path, status='failed', artist=artist, message=str(e))

        if execute:
            logger.info(f"Moved: {candidate.filename} -> {artist}")
            status = 'moved'
        else:
            logger.info(f"[DRY RUN] Would move: {candidate.filename} -> {artist}/{destination.name}")
            status = 'planned'

        return SortEvent(source_path=file_path, status=status, artist=artist, destination=destination)

    def _generate_output_files(self, summary: SortSummary):
        """Write the CSV plan and the JSON summary to the output directory."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._generate_csv_plan(summary)
        self._generate_summary_report(summary)

    def _text(self, value) -> Optional[str]:
        """Report-safe text: undecodable filename bytes become '?'."""
        if value is None:
            return None
        return self.filesystem_ops.sanitize_unicode_text(str(value))

    def _generate_csv_plan(self, summary: SortSummary):
        """Generate CSV file listing every moved (or planned) file."""
        csv_file = self.output_dir / "sort_plan.csv"

        with open(csv_file, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(['Original Path', 'Destination Path', 'Artist', 'Status'])

            for event in summary.events:
                if event.succeeded:
                    writer.writerow([
                        self._text(event.source_path),
                        self._text(event.destination),
                        self._text(event.artist),
                        event.status
                    ])

        logger.info(f"Sort plan saved to: {csv_file}")

    def _generate_summary_report(self, summary: SortSummary):
        """Generate a JSON summary and print it to the console."""
        status_counts: Dict[str, int] = {}
        artist_counts: Dict[str, int] = {}
        for artist, count in summary.artist_counts.items():
            key = self._text(artist)
            artist_counts[key] = artist_counts.get(key, 0) + count
        for event in summary.events:
            status_counts[event.status] = status_counts.get(event.status, 0) + 1

        report = {
            'root': self._text(summary.root),
            'dry_run': summary.dry_run,
            'total_files': summary.total_files,
            'moved': summary.moved,
            'skipped': summary.skipped,
            'failed': summary.failed,
            'unreadable_entries': summary.unreadable_entries,
            'success_rate': f"{summary.success_rate:.1f}%",
            'status_breakdown': status_counts,
            'artist_breakdown': artist_counts,
            'skipped_files': [
                {'path': self._text(e.source_path), 'status': e.status, 'message': self._text(e.message)}
                for e in summary.events if not e.succeeded
            ],
        }

        summary_file = self.output_dir / "sort_summary.json"
        with open(summary_file, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        print(f"\nSORT SUMMARY")
        print(f"Total files: {report['total_files']}")
        print(f"Moved: {report['moved']}")
        print(f"Skipped: {report['skipped']}")
        print(f"Failed: {report['failed']}")
        print(f"\nArtist breakdown:")
        for artist, count in sorted(artist_counts.items()):
            print(f"  {artist}: {count} files")

        logger.info(f"Summary report saved to: {summary_file}")
