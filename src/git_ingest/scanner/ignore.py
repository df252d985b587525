"""Ignore rules: defaults, caller excludes, .gitignore, and an include allow-list."""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from pathspec import PathSpec
from pathspec.patterns.gitwildmatch import GitWildMatchPattern

from ..config import DEFAULT_IGNORE_PATTERNS

logger = logging.getLogger(__name__)


def parse_gitignore(path: Path) -> List[str]:
    """Read usable pattern lines from a .gitignore file.

    Blank lines and comments are dropped. A missing or unreadable file yields
    no patterns.
    """
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return []
    except OSError as exc:
        logger.debug("Ignoring unreadable .gitignore at %s: %s", path, exc)
        return []

    patterns = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(line)
    return patterns


class IgnoreRuleSet:
    """Compiled matcher deciding which paths a run skips.

    A directory is ignored when a deny pattern matches it. A file is ignored
    when a deny pattern matches it, or when an include list is present and
    none of its patterns match. Include patterns never prune directories, so
    ``include=["*.md"]`` still finds ``docs/guide.md``.
    """

    def __init__(self, deny_patterns: Sequence[str], include_patterns: Sequence[str] = ()):
        self._deny_patterns: Tuple[str, ...] = tuple(deny_patterns)
        self._include_patterns: Tuple[str, ...] = tuple(include_patterns)
        self._deny = PathSpec.from_lines(GitWildMatchPattern, self._deny_patterns)
        self._include: Optional[PathSpec] = (
            PathSpec.from_lines(GitWildMatchPattern, self._include_patterns)
            if self._include_patterns
            else None
        )

    @classmethod
    def build(
        cls,
        root: Path,
        exclude: Iterable[str] = (),
        include: Iterable[str] = (),
        defaults: Iterable[str] = DEFAULT_IGNORE_PATTERNS,
    ) -> "IgnoreRuleSet":
        """Build the rule set for a root directory.

        Order is defaults, then caller excludes, then the root ``.gitignore``,
        so gitignore negations (``!keep.log``) can re-admit defaults.
        """
        deny = list(defaults)
        deny.extend(exclude)

        gitignore = parse_gitignore(Path(root) / ".gitignore")
        if gitignore:
            logger.debug("Loaded %d rules from .gitignore", len(gitignore))
        deny.extend(gitignore)

        return cls(deny, list(include))

    @property
    def deny_patterns(self) -> Tuple[str, ...]:
        return self._deny_patterns

    @property
    def include_patterns(self) -> Tuple[str, ...]:
        return self._include_patterns

    def is_ignored(self, relative_path: str, is_dir: bool = False) -> bool:
        """Return True if the path (posix, relative to root) should be skipped."""
        rel = relative_path.strip("/")
        if not rel:
            return False

        candidate = f"{rel}/" if is_dir else rel
        if self._deny.match_file(candidate):
            return True

        if is_dir or self._include is None:
            return False
        return not self._include.match_file(rel)
