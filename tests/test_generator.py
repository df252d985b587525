"""Tests for the plain-text and markdown renderers."""

import asyncio
import pytest
from pathlib import Path
from git_ingest.aggregator import FileOutcome
from git_ingest.config import IngestConfig
from git_ingest.errors import FileProcessingError
from git_ingest.generator import MarkdownRenderer, PlainTextRenderer, create_renderer
from git_ingest.generator.markdown import code_fence, heading_anchor, summarize_project
from git_ingest.models import FileEntry, SkipDecision, WalkResult
from git_ingest.scanner.classifier import FileClassifier

SEPARATOR = "=" * 48


def make_outcome(relative_path: str, content=None, reason="", size=0, truncated=False, error=None) -> FileOutcome:
    entry = FileEntry(path=Path("/project") / relative_path, relative_path=relative_path, size_bytes=size)
    decision = SkipDecision(skip=bool(reason), reason=reason, size_bytes=size)
    return FileOutcome(
        index=0,
        entry=entry,
        decision=decision,
        content=content,
        bytes_read=len(content.encode("utf-8")) if content else 0,
        truncated=truncated,
        error=error,
    )


@pytest.fixture
def classifier() -> FileClassifier:
    return FileClassifier(IngestConfig().max_file_size_bytes)


class TestCreateRenderer:
    def test_picks_by_format(self, classifier):
        """Test renderer selection by format."""
        assert isinstance(create_renderer(IngestConfig(), classifier), PlainTextRenderer)
        assert isinstance(create_renderer(IngestConfig(format="markdown"), classifier), MarkdownRenderer)


class TestPlainTextRenderer:
    def test_processed_block(self):
        """Test the exact layout of a processed file block."""
        renderer = PlainTextRenderer(IngestConfig())

        block = renderer.format(make_outcome("src/a.py", content="print(1)", size=8))

        assert block == f"{SEPARATOR}\nFile: src/a.py\n{SEPARATOR}\n\nprint(1)\n\n"

    def test_skipped_block(self):
        """Test the skip placeholder."""
        block = PlainTextRenderer(IngestConfig()).format(make_outcome("blob.dat", reason="binary"))

        assert "File: blob.dat" in block
        assert "[Skipped: binary]" in block

    def test_error_block(self):
        """Test the read error placeholder."""
        error = FileProcessingError("Permission denied", "secret.txt")
        block = PlainTextRenderer(IngestConfig()).format(make_outcome("secret.txt", error=error))

        assert "[Error reading file: Permission denied]" in block

    def test_truncated_block(self):
        """Test that truncated content carries the notice."""
        outcome = make_outcome("long.txt", content="x" * 10, size=100, truncated=True)

        block = PlainTextRenderer(IngestConfig()).format(outcome)

        assert "x" * 10 + "\n\n[File truncated - showing first 10 B of 100 B total]\n\n" in block

    def test_custom_separator(self):
        """Test a custom separator character and width."""
        renderer = PlainTextRenderer(IngestConfig(separator_char="-", separator_length=10))

        block = renderer.format(make_outcome("a.txt", content="a"))

        assert block.startswith("----------\nFile: a.txt\n----------\n")

    def test_header(self):
        """Test the plain-text header and tree."""
        walk = WalkResult(tree_lines=["├── src/", "│   └── index.js", "└── README.md"], tree_items=3)

        header = PlainTextRenderer(IngestConfig()).header(Path("/project"), walk, "2024-01-01T00:00:00+00:00")

        assert header == (
            "Directory structure for: /project\n"
            "Generated on: 2024-01-01T00:00:00+00:00\n"
            "Total items: 3\n"
            "\n"
            "├── src/\n"
            "│   └── index.js\n"
            "└── README.md\n"
            "\n"
        )


class TestMarkdownHelpers:
    def test_heading_anchor(self):
        """Test GitHub-style heading anchors."""
        assert heading_anchor("📊 Project Overview") == "#-project-overview"
        assert heading_anchor("Backend/Server") == "#backendserver"

    def test_code_fence_outgrows_content(self):
        """Test that fences are longer than any backtick run."""
        assert code_fence("plain") == "```"
        assert code_fence("a ``` b") == "````"
        assert code_fence("`````") == "``````"


class TestMarkdownRenderer:
    def test_processed_block(self, classifier):
        """Test file metadata and the language-tagged code block."""
        renderer = MarkdownRenderer(IngestConfig(format="markdown"), classifier)

        block = renderer.format(make_outcome("src/app.py", content="print(1)\n\n", size=10))

        assert "### 📄 `app.py`" in block
        assert "**Path:** `src/app.py`" in block
        assert "**Language:** python (medium confidence)" in block
        assert "**Category:** Backend/Server" in block
        assert "```python\nprint(1)\n```" in block

    def test_plain_text_has_untagged_fence(self, classifier):
        """Test that plain text gets an untagged fence."""
        renderer = MarkdownRenderer(IngestConfig(format="markdown"), classifier)

        block = renderer.format(make_outcome("NOTES", content="hello"))

        assert "```\nhello\n```" in block

    def test_skipped_block_has_no_code(self, classifier):
        """Test that a skipped file has a notice and no code block."""
        renderer = MarkdownRenderer(IngestConfig(format="markdown"), classifier)

        block = renderer.format(make_outcome("blob.dat", reason="binary", size=5))

        assert "> **⏭️ Skipped:** binary" in block
        assert "```" not in block

    def test_error_block(self, classifier):
        """Test the read error notice."""
        renderer = MarkdownRenderer(IngestConfig(format="markdown"), classifier)
        error = FileProcessingError("Permission denied", "secret.txt")

        block = renderer.format(make_outcome("secret.txt", error=error))

        assert "> **❌ Error:** Could not read file content: Permission denied" in block

    def test_truncated_block(self, classifier):
        """Test the truncation notice quote."""
        renderer = MarkdownRenderer(IngestConfig(format="markdown"), classifier)

        block = renderer.format(make_outcome("long.txt", content="x" * 10, size=100, truncated=True))

        assert "> [File truncated - showing first 10 B of 100 B total]" in block


class TestProjectSummary:
    def test_summary_counts(self, tmp_path: Path):
        """Test the classification pre-pass counts."""
        files = {
            "README.md": b"# Test",
            "index.js": b'console.log("hi")',
            "blob.dat": b"\x00" * 5,
            "big.txt": b"x" * 300,
        }
        entries = []
        for name, data in files.items():
            (tmp_path / name).write_bytes(data)
            entries.append(FileEntry(path=tmp_path / name, relative_path=name, size_bytes=len(data)))

        summary = asyncio.run(summarize_project(entries, FileClassifier(100), concurrency_limit=2))

        assert summary.total_files == 4
        assert summary.total_size_bytes == sum(len(data) for data in files.values())
        assert summary.text_files == 2
        assert summary.binary_files == 1
        assert summary.large_files == 1
        assert summary.unreadable_files == 0
        assert summary.languages.total == 4

    def test_statistics_table(self, tmp_path: Path, classifier):
        """Test the category and language tables."""
        (tmp_path / "README.md").write_text("# Test")
        (tmp_path / "index.js").write_text("x")
        entries = [
            FileEntry(path=tmp_path / "README.md", relative_path="README.md", size_bytes=6),
            FileEntry(path=tmp_path / "index.js", relative_path="src/index.js", size_bytes=1),
        ]
        renderer = MarkdownRenderer(IngestConfig(format="markdown"), classifier)

        summary = asyncio.run(summarize_project(entries, classifier, concurrency_limit=2))
        section = renderer.statistics(summary)

        assert "| Documentation | 1 | 50.0% |" in section
        assert "| Web Frontend | 1 | 50.0% |" in section
        assert "| javascript | 1 | Web Frontend |" in section
