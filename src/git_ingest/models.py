"""Core data models for git-ingest."""

from pathlib import Path
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class FileEntry(BaseModel):
    """A path discovered during traversal."""

    model_config = ConfigDict(frozen=True)

    path: Path  # absolute
    relative_path: str  # posix, relative to the ingestion root
    is_directory: bool = False
    size_bytes: int = 0


class SkipDecision(BaseModel):
    """Outcome of classifying a single file."""

    model_config = ConfigDict(frozen=True)

    skip: bool
    reason: str = ""  # "binary", "too-large(<size>)" or "unreadable(<error>)"
    size_bytes: int = 0

    @property
    def category(self) -> str:
        """Reason without its parenthesised detail."""
        return self.reason.split("(", 1)[0]


class LanguageDetection(BaseModel):
    """Language guess for a path. Derived from the path string alone."""

    model_config = ConfigDict(frozen=True)

    language: str
    confidence: Literal["high", "medium", "low"]
    source: Literal["filename", "extension", "fallback", "unknown"]
    category: str


class LanguageStats(BaseModel):
    """Per-language and per-category counts over a file list."""

    by_language: Dict[str, List[str]] = Field(default_factory=dict)
    by_category: Dict[str, List[str]] = Field(default_factory=dict)
    category_languages: Dict[str, List[str]] = Field(default_factory=dict)
    total: int = 0
    unknown: int = 0


class WalkResult(BaseModel):
    """Files surviving the ignore rules plus the printable tree."""

    model_config = ConfigDict(frozen=True)

    files: List[FileEntry] = Field(default_factory=list)
    tree_lines: List[str] = Field(default_factory=list)
    tree_items: int = 0
    directory_errors: int = 0


class AggregationStats(BaseModel):
    """Run-level counters. Mutated only by the aggregator's writer."""

    files_processed: int = 0
    files_skipped: int = 0
    errors: int = 0
    total_bytes: int = 0

    @property
    def total(self) -> int:
        return self.files_processed + self.files_skipped + self.errors


class IngestResult(BaseModel):
    """Summary returned to callers of a completed run."""

    output_path: Path
    format: Literal["text", "markdown"]
    stats: AggregationStats
    total_files: int
    tree_items: int
    bytes_written: int = 0
    generated_at: Optional[str] = None
