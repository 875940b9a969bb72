"""
Pydantic schemas for the artist sorting pipeline.

These models define the data structures passed between pipeline stages
and the summary returned to the caller.
"""

from typing import List, Optional, Dict
from pathlib import Path
from pydantic import BaseModel, Field, field_validator


class CandidateFile(BaseModel):
    """Stage 1: A music file found during discovery."""

    path: Path = Field(..., description="Absolute path to the music file")
    filename: str = Field(..., description="Base filename including extension")
    extension: str = Field(..., description="Lowercase file extension with the dot")

    @field_validator('extension')
    @classmethod
    def lowercase_extension(cls, v):
        return v.lower()

    @classmethod
    def from_path(cls, path: Path) -> "CandidateFile":
        return cls(path=path, filename=path.name, extension=path.suffix)


class ParseResult(BaseModel):
    """Stage 2: Outcome of matching a filename against 'Artist - Title.ext'."""

    matched: bool = Field(..., description="Whether the filename matched the pattern")
    raw_artist: Optional[str] = Field(default=None, description="Trimmed artist substring")

    @classmethod
    def match(cls, raw_artist: str) -> "ParseResult":
        return cls(matched=True, raw_artist=raw_artist)

    @classmethod
    def unmatched(cls) -> "ParseResult":
        return cls(matched=False)


class SortEvent(BaseModel):
    """Outcome of processing a single candidate file."""

    source_path: Path
    status: str = Field(
        ...,
        description="One of: moved, planned, in_place, unsupported, unmatched, no_artist, failed"
    )
    artist: Optional[str] = None
    destination: Optional[Path] = None
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status in ('moved', 'planned')


class SortSummary(BaseModel):
    """Result of sorting an entire directory tree."""

    root: Path
    dry_run: bool = False
    total_files: int = 0
    moved: int = Field(default=0, description="Files moved (or planned in a dry run)")
    skipped: int = 0
    failed: int = 0
    unreadable_entries: int = 0
    events: List[SortEvent] = Field(default_factory=list)

    def record(self, event: SortEvent):
        """Append an event and update the counters."""
        self.events.append(event)
        if event.succeeded:
            self.moved += 1
        elif event.status == 'failed':
            self.failed += 1
        else:
            self.skipped += 1

    @property
    def artist_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for event in self.events:
            if event.succeeded and event.artist:
                counts[event.artist] = counts.get(event.artist, 0) + 1
        return counts

    @property
    def success_rate(self) -> float:
        """Calculate success rate as a percentage."""
        if self.total_files == 0:
            return 0.0
        return (self.moved / self.total_files) * 100
