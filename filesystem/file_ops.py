"""
Filesystem operations for the artist sorter, built on pathlib.

Discovery, destination resolution and moves live here so the pipeline
stages never touch the filesystem directly.
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set

import mutagen

from utils.exceptions import FilesystemError, OrganizationError

logger = logging.getLogger(__name__)


@dataclass
class WalkEntry:
    """A discovered music file, or the error raised while reading an entry."""

    path: Path
    error: Optional[OSError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FileSystemOperations:
    """Handles all filesystem operations with proper error handling."""

    def __init__(self, music_extensions: Iterable[str]):
        """
        Initialize filesystem operations.

        Args:
            music_extensions: Supported music file extensions (with dots)
        """
        self.music_extensions = {ext.lower() for ext in music_extensions}

    def is_music_file(self, path: Path) -> bool:
        return path.suffix.lower() in self.music_extensions

    def validate_root(self, root_dir: Path) -> Path:
        """
        Check that the root directory exists and is readable.

        Returns:
            The absolute root path

        Raises:
            FilesystemError: If the root cannot be used
        """
        root_dir = Path(os.path.abspath(root_dir))

        if not root_dir.exists():
            raise FilesystemError(str(root_dir), "scan", "Directory does not exist")

        if not root_dir.is_dir():
            raise FilesystemError(str(root_dir), "scan", "Path is not a directory")

        if not os.access(root_dir, os.R_OK | os.X_OK):
            raise FilesystemError(str(root_dir), "scan", "Permission denied")

        return root_dir

    def walk_music_files(self, root_dir: Path) -> Iterator[WalkEntry]:
        """
        Lazily walk a directory tree in lexical order.

        Yields a WalkEntry for every music file. Entries that cannot be read
        are yielded with their error attached instead of being raised, so the
        caller decides whether to skip them. Symlinked directories are not
        followed.
        """
        try:
            with os.scandir(root_dir) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            yield WalkEntry(path=Path(root_dir), error=e)
            return

        for entry in entries:
            path = Path(entry.path)
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                yield WalkEntry(path=path, error=e)
                continue

            if is_dir:
                yield from self.walk_music_files(path)
            elif self.is_music_file(path):
                yield WalkEntry(path=path)

    def ensure_directory(self, directory: Path) -> Path:
        """
        Create a directory (and parents) if it does not exist yet.

        Raises:
            FilesystemError: On permission or other OS errors
        """
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise FilesystemError(str(directory), "mkdir", f"Permission denied: {e}")
        except OSError as e:
            raise FilesystemError(str(directory), "mkdir", f"OS error: {e}")
        return directory

    def resolve_destination(
        self,
        directory: Path,
        filename: str,
        reserved: Optional[Set[Path]] = None
    ) -> Path:
        """
        Find a path in `directory` for `filename` that is not taken yet.

        Tries `<directory>/<filename>` first, then `<stem> (1)<ext>`,
        `<stem> (2)<ext>` and so on. Paths in `reserved` count as taken.
        The counter has no upper bound: with every suffix up to N already
        present this checks N + 1 paths.
        """
        reserved = reserved or set()

        def taken(candidate: Path) -> bool:
            return candidate in reserved or os.path.lexists(candidate)

        destination = directory / filename
        if not taken(destination):
            return destination

        stem, suffix = os.path.splitext(filename)
        counter = 1
        while True:
            destination = directory / f"{stem} ({counter}){suffix}"
            if not taken(destination):
                return destination
            counter += 1

    def move_file(self, source: Path, destination: Path) -> Path:
        """
        Rename a file to its destination. Never copies.

        Raises:
            OrganizationError: If the rename fails (missing parent, permissions,
                cross-device move, ...)
        """
        try:
            source.rename(destination)
        except OSError as e:
            raise OrganizationError(str(source), str(destination), str(e))

        logger.debug(f"Moved file: {source} -> {destination}")
        return destination

    def read_artist_tag(self, file_path: Path) -> Optional[str]:
        """
        Read the artist tag from a music file with mutagen.

        Returns:
            The first artist value, or None if the file has no readable tag
        """
        try:
            audio_file = mutagen.File(str(file_path), easy=True)
        except Exception as e:
            logger.debug(f"Mutagen failed to load {file_path}: {e}")
            return None

        if audio_file is None or not audio_file.tags:
            logger.debug(f"No tags found in {file_path}")
            return None

        for key in ('artist', 'albumartist', 'TPE1', 'Author', 'WM/AlbumArtist'):
            try:
                value = audio_file.tags.get(key)
            except (ValueError, KeyError, TypeError) as e:
                logger.debug(f"Error reading tag {key} from {file_path}: {e}")
                continue
            if isinstance(value, list):
                value = value[0] if value else None
            if value and str(value).strip():
                return str(value).strip()

        return None

    @staticmethod
    def sanitize_unicode_text(text: str) -> str:
        """
        Make text safe to encode as UTF-8.

        Filenames whose bytes are not valid UTF-8 come back from the OS with
        surrogate escapes; those characters are replaced with '?'.

        Args:
            text: Input text that may contain problematic Unicode

        Returns:
            Sanitized text safe for UTF-8 encoding
        """
        try:
            text.encode('utf-8')
            return text
        except UnicodeEncodeError:
            logger.debug("Found problematic Unicode characters, sanitizing...")

        sanitized_chars = []
        for char in text:
            try:
                char.encode('utf-8')
                sanitized_chars.append(char)
            except UnicodeEncodeError:
                sanitized_chars.append('?')

        return ''.join(sanitized_chars)

    def discover(self, root_dir: Path) -> List[WalkEntry]:
        """Materialize the walk so later moves cannot affect what is visited."""
        return list(self.walk_music_files(root_dir))
