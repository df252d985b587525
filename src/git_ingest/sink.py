"""Append-only UTF-8 output artifact."""

import asyncio
import logging
from pathlib import Path
from typing import IO, Optional

from .errors import OutputError

logger = logging.getLogger(__name__)


class OutputSink:
    """Serialized async writer over one output file.

    Usage:
        async with OutputSink(path) as sink:
            await sink.write("header\\n")
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.bytes_written = 0
        self._handle: Optional[IO[str]] = None
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    async def open(self) -> "OutputSink":
        """Create (or truncate) the output file.

        Raises:
            OutputError: If the file cannot be opened for writing
        """
        try:
            self._handle = await asyncio.to_thread(self.path.open, "w", encoding="utf-8", newline="")
        except OSError as exc:
            raise OutputError(f"Cannot open output file {self.path}: {exc}", str(self.path), exc) from exc
        logger.debug("Opened output %s", self.path)
        return self

    async def write(self, text: str) -> None:
        if not text:
            return
        async with self._lock:
            if self._handle is None:
                raise OutputError(f"Output file {self.path} is not open", str(self.path))
            try:
                await asyncio.to_thread(self._handle.write, text)
            except OSError as exc:
                raise OutputError(f"Failed writing to {self.path}: {exc}", str(self.path), exc) from exc
            self.bytes_written += len(text.encode("utf-8"))

    async def close(self) -> None:
        async with self._lock:
            if self._handle is None:
                return
            handle, self._handle = self._handle, None
            try:
                await asyncio.to_thread(handle.close)
            except OSError as exc:
                raise OutputError(f"Failed closing {self.path}: {exc}", str(self.path), exc) from exc

    async def discard(self) -> None:
        """Close and delete a partially written artifact."""
        try:
            await self.close()
        except OutputError:
            logger.debug("Close failed while discarding %s", self.path)
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove partial output %s: %s", self.path, exc)

    async def __aenter__(self) -> "OutputSink":
        if self._handle is None:
            await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            await self.close()
        else:
            await self.discard()
