"""Repository structure walker."""

import asyncio
import logging
import os
import stat
from pathlib import Path
from typing import List, Optional, Tuple

from ..config import BYTES_PER_MB
from ..models import FileEntry, WalkResult
from .ignore import IgnoreRuleSet

logger = logging.getLogger(__name__)

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_INDENT = "│   "
SPACE_INDENT = "    "

_Listing = Tuple[List[FileEntry], List[str], int, int]


class TreeWalker:
    """Walks a directory depth-first, applying ignore rules.

    Siblings are ordered directories first, then by name. That order is both
    the printed tree order and the order files are handed to the aggregator.
    """

    def __init__(self, rules: IgnoreRuleSet, large_file_threshold_bytes: int = BYTES_PER_MB):
        """Initialize walker.

        Args:
            rules: Compiled ignore rules for this run
            large_file_threshold_bytes: Files above this size get a size note in the tree
        """
        self.rules = rules
        self.large_file_threshold_bytes = large_file_threshold_bytes

    async def walk(self, root: Path) -> WalkResult:
        """Walk ``root`` and return surviving files plus tree lines.

        Args:
            root: Directory to walk

        Returns:
            WalkResult with files in submission order and the rendered tree
        """
        root = Path(root)
        files, lines, items, errors = await self._walk_directory(root, root, "")
        logger.debug("Walked %s: %d files, %d tree items, %d unreadable directories", root, len(files), items, errors)
        return WalkResult(files=files, tree_lines=lines, tree_items=items, directory_errors=errors)

    async def _walk_directory(self, directory: Path, root: Path, prefix: str) -> _Listing:
        try:
            names = await asyncio.to_thread(os.listdir, directory)
        except OSError as exc:
            reason = exc.strerror or type(exc).__name__
            logger.warning("Cannot read directory %s: %s", directory, reason)
            return [], [f"{prefix}{LAST_BRANCH}[Error reading directory: {reason}]"], 0, 1

        candidates = await asyncio.gather(*(self._entry_for(directory / name, root) for name in names))
        children = [entry for entry in candidates if entry is not None]
        children.sort(key=lambda entry: (not entry.is_directory, entry.path.name))

        files: List[FileEntry] = []
        lines: List[str] = []
        items = 0
        errors = 0

        for index, child in enumerate(children):
            is_last = index == len(children) - 1
            branch = LAST_BRANCH if is_last else BRANCH
            lines.append(f"{prefix}{branch}{self._label(child)}")
            items += 1

            if child.is_directory:
                sub_files, sub_lines, sub_items, sub_errors = await self._walk_directory(
                    child.path, root, prefix + (SPACE_INDENT if is_last else PIPE_INDENT)
                )
                files = files + sub_files
                lines = lines + sub_lines
                items += sub_items
                errors += sub_errors
            else:
                files = files + [child]

        return files, lines, items, errors

    async def _entry_for(self, path: Path, root: Path) -> Optional[FileEntry]:
        """Stat one child and drop it if ignored."""
        try:
            stat_result = await asyncio.to_thread(os.stat, path)
        except OSError:
            try:
                # Broken symlinks and similar still appear; the classifier reports them.
                stat_result = await asyncio.to_thread(os.lstat, path)
            except OSError:
                stat_result = None

        is_directory = stat_result is not None and stat.S_ISDIR(stat_result.st_mode)
        relative_path = path.relative_to(root).as_posix()

        if self.rules.is_ignored(relative_path, is_dir=is_directory):
            return None

        return FileEntry(
            path=path.absolute(),
            relative_path=relative_path,
            is_directory=is_directory,
            size_bytes=0 if (stat_result is None or is_directory) else stat_result.st_size,
        )

    def _label(self, entry: FileEntry) -> str:
        name = entry.path.name
        if entry.is_directory:
            return f"{name}/"
        if entry.size_bytes > self.large_file_threshold_bytes:
            return f"{name} ({entry.size_bytes / BYTES_PER_MB:.2f}MB)"
        return name
