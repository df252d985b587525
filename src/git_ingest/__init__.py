"""git-ingest - Ingest a project directory into one LLM-ready artifact."""

__version__ = "0.1.0"

from .config import IngestConfig, DEFAULT_IGNORE_PATTERNS
from .errors import (
    IngestError,
    DirectoryError,
    ConfigurationError,
    OutputError,
    FileProcessingError,
)
from .models import (
    FileEntry,
    SkipDecision,
    LanguageDetection,
    AggregationStats,
    WalkResult,
    IngestResult,
)
from .ingest import ingest_directory, run_ingest

__all__ = [
    "IngestConfig",
    "DEFAULT_IGNORE_PATTERNS",
    "IngestError",
    "DirectoryError",
    "ConfigurationError",
    "OutputError",
    "FileProcessingError",
    "FileEntry",
    "SkipDecision",
    "LanguageDetection",
    "AggregationStats",
    "WalkResult",
    "IngestResult",
    "ingest_directory",
    "run_ingest",
]
