"""Run orchestration: validate, discover, render."""

import asyncio
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from .aggregator import ContentAggregator
from .config import IngestConfig
from .errors import DirectoryError
from .generator import create_renderer
from .models import IngestResult
from .scanner.classifier import FileClassifier
from .scanner.ignore import IgnoreRuleSet
from .scanner.structure import TreeWalker
from .sink import OutputSink

logger = logging.getLogger(__name__)

PathArg = Union[str, Path]


def default_output_name(output_format: str, now: Optional[datetime] = None) -> str:
    """``git-ingest-<unix seconds>.txt`` (or ``.md`` for markdown)."""
    now = now or datetime.now(timezone.utc)
    extension = "md" if output_format == "markdown" else "txt"
    return f"git-ingest-{int(now.timestamp())}.{extension}"


def validate_root(root: PathArg) -> Path:
    """Resolve the root directory or raise ``DirectoryError``."""
    path = Path(root).expanduser()
    if not path.exists():
        raise DirectoryError(f"Directory '{root}' does not exist", str(root))
    if not path.is_dir():
        raise DirectoryError(f"Path '{root}' is not a directory", str(root))
    try:
        with os.scandir(path):
            pass
    except OSError as exc:
        raise DirectoryError(f"Permission denied: Cannot read directory '{root}'", str(root), exc) from exc
    return path.resolve()


async def ingest_directory(
    root: PathArg,
    config: Optional[IngestConfig] = None,
    output_path: Optional[PathArg] = None,
) -> IngestResult:
    """Ingest ``root`` into a single artifact.

    Args:
        root: Project directory to ingest
        config: Run settings (defaults when omitted)
        output_path: Artifact location (``git-ingest-<ts>.<ext>`` in the cwd when omitted)

    Returns:
        IngestResult with the artifact path and aggregation statistics

    Raises:
        DirectoryError: Root missing, not a directory, or unreadable
        OutputError: Artifact cannot be created or written
    """
    config = config or IngestConfig()
    root_path = validate_root(root)

    now = datetime.now(timezone.utc)
    generated_at = now.isoformat(timespec="seconds")
    output = Path(output_path) if output_path else Path.cwd() / default_output_name(config.format, now)

    rules = IgnoreRuleSet.build(root_path, exclude=config.exclude, include=config.include)
    walk = await TreeWalker(rules, config.large_file_threshold_bytes).walk(root_path)
    logger.info("Discovered %d files under %s", len(walk.files), root_path)

    classifier = FileClassifier(config.max_file_size_bytes)
    aggregator = ContentAggregator(classifier, config.concurrency_limit, config.truncate_size_bytes)
    renderer = create_renderer(config, classifier)

    async with OutputSink(output) as sink:
        stats = await renderer.render(root_path, walk, aggregator, sink, generated_at)
    logger.info("Wrote %s (%d bytes)", output, sink.bytes_written)

    return IngestResult(
        output_path=output,
        format=config.format,
        stats=stats,
        total_files=len(walk.files),
        tree_items=walk.tree_items,
        bytes_written=sink.bytes_written,
        generated_at=generated_at,
    )


def run_ingest(
    root: PathArg,
    config: Optional[IngestConfig] = None,
    output_path: Optional[PathArg] = None,
) -> IngestResult:
    """Synchronous wrapper around :func:`ingest_directory`."""
    return asyncio.run(ingest_directory(root, config, output_path))
