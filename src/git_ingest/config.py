"""Configuration management for git-ingest."""

import os
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError

BYTES_PER_KB = 1024
BYTES_PER_MB = 1024 * 1024

DEFAULT_MAX_FILE_SIZE_MB = 10.0
DEFAULT_TRUNCATE_SIZE_KB = 2048
DEFAULT_CONCURRENCY_LIMIT = 10
MAX_CONCURRENCY_LIMIT = 50
DEFAULT_SEPARATOR_LENGTH = 48
DEFAULT_SEPARATOR_CHAR = "="

OUTPUT_FORMATS = ("text", "markdown")

DEFAULT_IGNORE_PATTERNS = [
    # Generated output files
    "git-ingest-*.txt",
    "git-ingest-*.md",
    # Version control
    ".git/",
    ".svn/",
    ".hg/",
    ".gitignore",
    # Dependencies
    "node_modules/",
    ".npm/",
    "bower_components/",
    "vendor/",
    "venv/",
    ".venv/",
    "__pycache__/",
    ".virtualenv/",
    # Build directories
    "dist/",
    "build/",
    "out/",
    ".next/",
    ".nuxt/",
    "target/",
    "bin/",
    "obj/",
    # IDE and editor files
    ".vscode/",
    ".idea/",
    ".vs/",
    "*.swp",
    "*.swo",
    "*~",
    # OS files
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
    # Log files
    "*.log",
    "logs/",
    # Cache directories
    ".cache/",
    ".tmp/",
    "tmp/",
    "temp/",
    ".pytest_cache/",
    ".mypy_cache/",
    # Binary and media files
    "*.jpg",
    "*.jpeg",
    "*.png",
    "*.gif",
    "*.svg",
    "*.webp",
    "*.ico",
    "*.pdf",
    "*.zip",
    "*.tar",
    "*.gz",
    "*.rar",
    "*.7z",
    "*.mp4",
    "*.avi",
    "*.mov",
    "*.mp3",
    "*.wav",
    "*.exe",
    "*.dll",
    "*.so",
    "*.dylib",
    "*.class",
    "*.jar",
    # Lock files
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "Cargo.lock",
    "composer.lock",
    "Gemfile.lock",
    "Pipfile.lock",
    "poetry.lock",
    "go.sum",
    "mix.lock",
    # Development files
    "coverage/",
    ".nyc_output/",
    ".eslintcache",
    "*.tsbuildinfo",
    ".parcel-cache/",
]


_ENV_OPTIONS = {
    "exclude": "GIT_INGEST_EXCLUDE",
    "include": "GIT_INGEST_INCLUDE",
    "max_file_size_mb": "GIT_INGEST_MAX_FILE_SIZE_MB",
    "truncate_size_kb": "GIT_INGEST_TRUNCATE_SIZE_KB",
    "concurrency_limit": "GIT_INGEST_CONCURRENCY",
    "format": "GIT_INGEST_FORMAT",
}


class IngestConfig(BaseModel):
    """Validated settings for one ingestion run.

    Construction is the single validation pass: any invalid value raises
    ``ConfigurationError`` naming the offending option.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    # Filtering
    exclude: list[str] = Field(default_factory=list)
    include: list[str] = Field(default_factory=list)

    # File processing
    max_file_size_mb: float = Field(default=DEFAULT_MAX_FILE_SIZE_MB, gt=0)
    truncate_size_kb: int = Field(default=DEFAULT_TRUNCATE_SIZE_KB, ge=0)
    large_file_threshold_mb: float = Field(default=1.0, gt=0)
    concurrency_limit: int = Field(default=DEFAULT_CONCURRENCY_LIMIT, ge=1, le=MAX_CONCURRENCY_LIMIT)

    # Output
    format: Literal["text", "markdown"] = "text"
    separator_length: int = Field(default=DEFAULT_SEPARATOR_LENGTH, ge=10)
    separator_char: str = DEFAULT_SEPARATOR_CHAR

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise _configuration_error(exc) from exc

    @field_validator("separator_char")
    @classmethod
    def _single_character(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("separator_char must be exactly one character")
        return value

    @field_validator("exclude", "include")
    @classmethod
    def _strip_patterns(cls, value: list[str]) -> list[str]:
        return [pattern.strip() for pattern in value if pattern and pattern.strip()]

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_mb * BYTES_PER_MB)

    @property
    def truncate_size_bytes(self) -> int:
        return self.truncate_size_kb * BYTES_PER_KB

    @property
    def large_file_threshold_bytes(self) -> int:
        return int(self.large_file_threshold_mb * BYTES_PER_MB)

    @property
    def separator(self) -> str:
        return self.separator_char * self.separator_length

    def merged(self, **overrides: Any) -> "IngestConfig":
        """Return a new config with non-None overrides applied and re-validated."""
        values = self.model_dump()
        values.update({key: value for key, value in overrides.items() if value is not None})
        return type(self)(**values)

    @classmethod
    def from_env(cls) -> "IngestConfig":
        """Load configuration from ``GIT_INGEST_*`` environment variables."""
        load_dotenv()

        def _parse_list(value: str) -> list[str]:
            return [entry.strip() for entry in value.split(",") if entry.strip()]

        values: dict[str, Any] = {}
        for option, variable in _ENV_OPTIONS.items():
            raw = os.getenv(variable, "").strip()
            if not raw:
                continue
            if option in ("exclude", "include"):
                values[option] = _parse_list(raw)
            elif option == "format":
                values[option] = raw.lower()
            else:
                # Left as text so validation reports malformed numbers.
                values[option] = raw
        return cls(**values)

    @classmethod
    def from_file(cls, path: Path, base: Optional["IngestConfig"] = None) -> "IngestConfig":
        """Load configuration from a YAML (or JSON) mapping.

        Args:
            path: Config file to read
            base: Config whose values are used for keys the file does not set

        Raises:
            ConfigurationError: If the file cannot be read, parsed, or validated
        """
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Could not read config file {path}: {exc}", "config", str(path)) from exc

        try:
            data = yaml.safe_load(text) if text.strip() else {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Failed to parse {Path(path).name}: {exc}", "config", str(path)) from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{Path(path).name} must contain a mapping at the root", "config", str(path))

        values = base.model_dump() if base is not None else {}
        values.update({str(key).replace("-", "_"): value for key, value in data.items()})
        return cls(**values)


def _configuration_error(exc: ValidationError) -> ConfigurationError:
    first = exc.errors()[0]
    option = ".".join(str(part) for part in first.get("loc", ())) or None
    value = first.get("input")
    if first.get("type") == "extra_forbidden":
        message = f"Unknown configuration option '{option}'"
    else:
        message = f"Invalid value for '{option}': {first.get('msg')}"
    return ConfigurationError(message, option, value)
