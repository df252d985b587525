"""Plain-text artifact: header, tree, then separator-delimited file blocks."""

from pathlib import Path

from ..aggregator import ContentAggregator, FileOutcome, truncation_notice
from ..config import IngestConfig
from ..models import AggregationStats, WalkResult
from ..sink import OutputSink


class PlainTextRenderer:
    """Renders the ``text`` format."""

    def __init__(self, config: IngestConfig):
        self.separator = config.separator

    def header(self, root: Path, walk: WalkResult, generated_at: str) -> str:
        lines = [
            f"Directory structure for: {root}",
            f"Generated on: {generated_at}",
            f"Total items: {walk.tree_items}",
            "",
            *walk.tree_lines,
        ]
        return "\n".join(lines) + "\n\n"

    def format(self, outcome: FileOutcome) -> str:
        """Separator, ``File: <path>``, separator, blank line, body, blank line."""
        if outcome.error is not None:
            body = f"[Error reading file: {outcome.error.message}]"
        elif outcome.decision.skip:
            body = f"[Skipped: {outcome.decision.reason}]"
        else:
            body = outcome.content or ""
            if outcome.truncated:
                body += "\n\n" + truncation_notice(outcome.bytes_read, outcome.decision.size_bytes)

        return f"{self.separator}\nFile: {outcome.entry.relative_path}\n{self.separator}\n\n{body}\n\n"

    async def render(
        self,
        root: Path,
        walk: WalkResult,
        aggregator: ContentAggregator,
        sink: OutputSink,
        generated_at: str,
    ) -> AggregationStats:
        await sink.write(self.header(root, walk, generated_at))
        return await aggregator.aggregate(walk.files, sink, self)
