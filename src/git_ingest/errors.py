"""Error types for git-ingest.

Fatal errors (``DirectoryError``, ``ConfigurationError``, ``OutputError``)
abort a run and reach the caller. ``FileProcessingError`` describes a single
file and is absorbed by the aggregator.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


class IngestError(Exception):
    """Base class for git-ingest errors."""

    def __init__(self, message: str, code: str = "GENERIC_ERROR", details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "timestamp": self.timestamp,
        }


class DirectoryError(IngestError):
    """Raised when the root directory is missing, not a directory, or unreadable."""

    def __init__(self, message: str, path: str, original: Optional[BaseException] = None):
        super().__init__(
            message,
            "DIRECTORY_ERROR",
            {"path": path, "original_error": str(original) if original else None},
        )
        self.path = path
        self.original = original


class ConfigurationError(IngestError):
    """Raised when configuration values are invalid."""

    def __init__(self, message: str, option: Optional[str] = None, value: Any = None):
        super().__init__(message, "CONFIGURATION_ERROR", {"option": option, "value": value})
        self.option = option
        self.value = value


class OutputError(IngestError):
    """Raised when the output artifact cannot be opened or written."""

    def __init__(self, message: str, path: str, original: Optional[BaseException] = None):
        super().__init__(
            message,
            "OUTPUT_ERROR",
            {"path": path, "original_error": str(original) if original else None},
        )
        self.path = path
        self.original = original


class FileProcessingError(IngestError):
    """A single file could not be processed. Never escapes a run."""

    def __init__(self, message: str, file_path: str, original: Optional[BaseException] = None):
        super().__init__(
            message,
            "FILE_PROCESSING_ERROR",
            {"file_path": file_path, "original_error": str(original) if original else None},
        )
        self.file_path = file_path
        self.original = original
