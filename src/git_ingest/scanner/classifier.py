"""Per-file classification: include, or skip as unreadable, too large, or binary."""

import asyncio
import logging
import os
import stat
from pathlib import Path
from typing import Union

from ..config import BYTES_PER_KB, BYTES_PER_MB
from ..models import SkipDecision

logger = logging.getLogger(__name__)

SNIFF_BYTES = 8000
CONTROL_BYTE_RATIO = 0.30

# Control bytes that legitimately appear in text: \b \t \n \f \r and ESC.
_TEXT_CONTROL_BYTES = frozenset({0x08, 0x09, 0x0A, 0x0C, 0x0D, 0x1B})

KNOWN_BINARY_EXTENSIONS = frozenset({
    # images
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".ico", ".bmp", ".tiff",
    # video
    ".mp4", ".avi", ".mov", ".wmv", ".flv", ".webm", ".mkv",
    # audio
    ".mp3", ".wav", ".ogg", ".aac", ".flac", ".m4a",
    # archives
    ".zip", ".tar", ".gz", ".rar", ".7z", ".bz2", ".xz",
    # executables and object code
    ".exe", ".dll", ".so", ".dylib", ".class", ".jar", ".bin", ".o", ".a", ".pyc",
    # documents
    ".pdf",
})


def format_file_size(size_bytes: Union[int, float]) -> str:
    """Human-readable size: ``512 B``, ``1.50 KB``, ``1.00 MB``, ``2.00 GB``."""
    if size_bytes < BYTES_PER_KB:
        return f"{int(size_bytes)} B"
    if size_bytes < BYTES_PER_MB:
        return f"{size_bytes / BYTES_PER_KB:.2f} KB"
    if size_bytes < BYTES_PER_MB * 1024:
        return f"{size_bytes / BYTES_PER_MB:.2f} MB"
    return f"{size_bytes / (BYTES_PER_MB * 1024):.2f} GB"


def looks_binary(sample: bytes) -> bool:
    """Null/control-byte heuristic over a file's leading bytes."""
    if not sample:
        return False
    if b"\x00" in sample:
        return True
    control = sum(1 for byte in sample if byte < 0x20 and byte not in _TEXT_CONTROL_BYTES)
    return control / len(sample) > CONTROL_BYTE_RATIO


def _read_sample(path: Path) -> bytes:
    with path.open("rb") as handle:
        return handle.read(SNIFF_BYTES)


class FileClassifier:
    """Decides whether a file's content goes into the artifact."""

    def __init__(self, size_limit_bytes: int):
        """Initialize classifier.

        Args:
            size_limit_bytes: Files strictly larger than this are skipped
        """
        self.size_limit_bytes = size_limit_bytes

    def classify(self, path: Path) -> SkipDecision:
        """Classify one file. Never raises for filesystem problems.

        Checks run in order: stat, regular-file check, size ceiling, known binary extension,
        then a sniff of the leading bytes.
        """
        path = Path(path)
        try:
            stat_result = os.stat(path)
        except OSError as exc:
            return SkipDecision(skip=True, reason=f"unreadable({_describe(exc)})")

        if not stat.S_ISREG(stat_result.st_mode):
            # Reading a FIFO or device can block forever.
            return SkipDecision(skip=True, reason="unreadable(not a regular file)")

        size = stat_result.st_size
        if size > self.size_limit_bytes:
            return SkipDecision(skip=True, reason=f"too-large({format_file_size(size)})", size_bytes=size)

        if path.suffix.lower() in KNOWN_BINARY_EXTENSIONS:
            return SkipDecision(skip=True, reason="binary", size_bytes=size)

        try:
            sample = _read_sample(path)
        except OSError as exc:
            return SkipDecision(skip=True, reason=f"unreadable({_describe(exc)})", size_bytes=size)

        if looks_binary(sample):
            return SkipDecision(skip=True, reason="binary", size_bytes=size)

        return SkipDecision(skip=False, size_bytes=size)

    async def classify_async(self, path: Path) -> SkipDecision:
        return await asyncio.to_thread(self.classify, path)


def _describe(exc: OSError) -> str:
    return exc.strerror or type(exc).__name__
