"""
Implementation of the four-stage artist sorting pipeline.

Stage 1: Triage
Stage 2: Filename Classification
Stage 3: Artist Name Sanitization
Stage 4: Relocation
"""

import logging
from pathlib import Path
from typing import Optional, Set

from models.schemas import CandidateFile
from filesystem.file_ops import FileSystemOperations
from pipeline.naming import classify_filename, sanitize_artist_name
from utils.exceptions import UnparseableFilenameError, UndeterminableArtistError

logger = logging.getLogger(__name__)


class Stage1Triage:
    """Stage 1: Triage - Turn a discovered path into a CandidateFile."""

    def __init__(self, filesystem_ops: FileSystemOperations):
        self.filesystem_ops = filesystem_ops

    def process(self, file_path: Path) -> Optional[CandidateFile]:
        """
        Returns:
            CandidateFile, or None if the file is not a recognized music file
        """
        if not self.filesystem_ops.is_music_file(file_path):
            logger.debug(f"Stage 1: Not a music file, skipping {file_path}")
            return None

        return CandidateFile.from_path(file_path)


class Stage2Classification:
    """Stage 2: Classification - Extract the raw artist from the filename."""

    def __init__(self, filesystem_ops: FileSystemOperations, tag_fallback: bool = False):
        self.filesystem_ops = filesystem_ops
        self.tag_fallback = tag_fallback

    def process(self, candidate: CandidateFile) -> str:
        """
        Returns:
            The raw (unsanitized) artist name

        Raises:
            UnparseableFilenameError: If the filename does not match and no
                artist tag can be used instead
        """
        result = classify_filename(candidate.filename)
        if result.matched:
            logger.debug(f"Stage 2: '{candidate.filename}' -> raw artist '{result.raw_artist}'")
            return result.raw_artist

        if self.tag_fallback:
            tagged_artist = self.filesystem_ops.read_artist_tag(candidate.path)
            if tagged_artist:
                logger.debug(f"Stage 2: Using artist tag '{tagged_artist}' for {candidate.filename}")
                return tagged_artist

        raise UnparseableFilenameError(str(candidate.path), candidate.filename)


class Stage3Sanitization:
    """Stage 3: Sanitization - Make the artist name safe to use as a folder name."""

    def process(self, candidate: CandidateFile, raw_artist: str) -> str:
        """
        Raises:
            UndeterminableArtistError: If nothing is left after sanitization
        """
        artist = sanitize_artist_name(raw_artist)
        # "." and ".." would resolve outside <root>/<artist>/
        if not artist or artist in ('.', '..'):
            raise UndeterminableArtistError(str(candidate.path), raw_artist)

        if artist != raw_artist:
            logger.debug(f"Stage 3: Sanitized '{raw_artist}' -> '{artist}'")
        return artist


class Stage4Relocation:
    """Stage 4: Relocation - Move the file into <root>/<artist>/."""

    def __init__(self, filesystem_ops: FileSystemOperations, root_dir: Path):
        self.filesystem_ops = filesystem_ops
        self.root_dir = root_dir

    def artist_folder(self, artist: str) -> Path:
        return self.root_dir / artist

    def is_in_place(self, candidate: CandidateFile, artist: str) -> bool:
        """Whether the file already sits at its final location."""
        return candidate.path == self.artist_folder(artist) / candidate.filename

    def process(
        self,
        candidate: CandidateFile,
        artist: str,
        execute: bool = True,
        reserved: Optional[Set[Path]] = None
    ) -> Path:
        """
        Create the artist folder, pick a free destination and move the file.

        With execute=False nothing is created or moved; the chosen destination
        is added to `reserved` so later files in the same run see it as taken.

        Returns:
            The destination path

        Raises:
            FilesystemError: If the artist folder cannot be created
            OrganizationError: If the move fails
        """
        folder = self.artist_folder(artist)

        if execute:
            self.filesystem_ops.ensure_directory(folder)

        destination = self.filesystem_ops.resolve_destination(
            folder, candidate.filename, reserved
        )

        if execute:
            self.filesystem_ops.move_file(candidate.path, destination)
        elif reserved is not None:
            reserved.add(destination)

        return destination
