"""
Custom exception hierarchy for the artist sorter.

This module defines a structured hierarchy of exceptions that allows for
precise error handling and clear separation of different failure modes.
"""


class SorterError(Exception):
    """Base class for all application-specific errors."""
    pass


class ConfigurationError(SorterError):
    """Raised when there are configuration-related issues."""
    pass


class FileProcessingError(SorterError):
    """Base class for per-file errors that cause a file to be skipped."""

    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        super().__init__(message)


class UnparseableFilenameError(FileProcessingError):
    """Raised when a filename does not follow the 'Artist - Title.ext' pattern."""

    def __init__(self, file_path: str, filename: str):
        self.filename = filename
        super().__init__(file_path, f"Invalid filename format: {filename}")


class UndeterminableArtistError(FileProcessingError):
    """Raised when the artist name is empty after sanitization."""

    def __init__(self, file_path: str, raw_artist: str = None):
        self.raw_artist = raw_artist

        message = f"Could not determine artist for file: {file_path}"
        if raw_artist:
            message += f" (raw artist '{raw_artist}')"

        super().__init__(file_path, message)


class FilesystemError(SorterError):
    """Raised when filesystem operations fail."""

    def __init__(self, path: str, operation: str, reason: str = None):
        self.path = path
        self.operation = operation
        self.reason = reason

        message = f"Filesystem error during {operation} on {path}"
        if reason:
            message += f": {reason}"

        super().__init__(message)


class OrganizationError(SorterError):
    """Raised when moving a file into its artist folder fails."""

    def __init__(self, source_path: str, dest_path: str, reason: str = None):
        self.source_path = source_path
        self.dest_path = dest_path
        self.reason = reason

        message = f"Failed to move file from '{source_path}' to '{dest_path}'"
        if reason:
            message += f": {reason}"

        super().__init__(message)
