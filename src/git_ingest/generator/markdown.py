"""Structured markdown artifact for LLM consumption."""

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from ..aggregator import ContentAggregator, FileOutcome, truncation_notice
from ..config import IngestConfig
from ..models import AggregationStats, FileEntry, LanguageStats, SkipDecision, WalkResult
from ..scanner.classifier import FileClassifier, format_file_size
from ..scanner.language import detect_language, language_stats
from ..sink import OutputSink

MAX_LANGUAGES_SHOWN = 15

CATEGORY_EMOJIS = {
    "Web Frontend": "🌐",
    "Backend/Server": "⚙️",
    "Systems/Low-level": "🔧",
    "Functional": "🧮",
    "Scripting": "📜",
    "Data/Config": "🗂️",
    "Documentation": "📖",
    "Mobile": "📱",
    "DevOps": "🚀",
    "Other": "📄",
}

OVERVIEW_HEADING = "📊 Project Overview"
STATISTICS_HEADING = "📈 Statistics"
STRUCTURE_HEADING = "🏗️ Directory Structure"
CATEGORIES_HEADING = "📁 Files by Category"
LISTING_HEADING = "📋 Complete File Listing"


def category_emoji(category: str) -> str:
    return CATEGORY_EMOJIS.get(category, "📄")


def heading_anchor(heading: str) -> str:
    """GitHub-style anchor for a heading text."""
    slug = re.sub(r"[^\w\- ]", "", heading.lower())
    return "#" + slug.replace(" ", "-")


def code_fence(content: str) -> str:
    """A backtick fence longer than any backtick run inside ``content``."""
    longest = max((len(run) for run in re.findall(r"`+", content)), default=0)
    return "`" * max(3, longest + 1)


def _ranked(groups: dict) -> List[tuple]:
    return sorted(groups.items(), key=lambda item: (-len(item[1]), item[0]))


def _percent(part: int, whole: int) -> str:
    return f"{(part / whole * 100) if whole else 0:.1f}%"


@dataclass
class ProjectSummary:
    """Whole-project numbers gathered before any content is written."""

    total_files: int
    total_size_bytes: int
    text_files: int
    binary_files: int
    large_files: int
    unreadable_files: int
    languages: LanguageStats


async def summarize_project(
    files: Sequence[FileEntry], classifier: FileClassifier, concurrency_limit: int
) -> ProjectSummary:
    """Classify every file up front (bounded) and compute language statistics."""
    gate = asyncio.Semaphore(concurrency_limit)

    async def classify(entry: FileEntry) -> SkipDecision:
        async with gate:
            return await classifier.classify_async(entry.path)

    decisions = await asyncio.gather(*(classify(entry) for entry in files))
    categories = [decision.category for decision in decisions if decision.skip]

    return ProjectSummary(
        total_files=len(files),
        total_size_bytes=sum(entry.size_bytes for entry in files),
        text_files=sum(1 for decision in decisions if not decision.skip),
        binary_files=categories.count("binary"),
        large_files=categories.count("too-large"),
        unreadable_files=categories.count("unreadable"),
        languages=language_stats(entry.relative_path for entry in files),
    )


class MarkdownRenderer:
    """Renders the ``markdown`` format."""

    def __init__(self, config: IngestConfig, classifier: FileClassifier):
        self.config = config
        self.classifier = classifier

    # -- document sections -------------------------------------------------

    def title(self, root: Path) -> str:
        return "\n".join([
            "# 🚀 Project Analysis Report",
            "",
            f"Directory structure for: {root.name}",
            "",
            "## 🎯 LLM-Optimized Codebase Analysis",
            "",
            "This document provides a structured view of the codebase for Large Language Model ",
            "processing: project statistics, the directory tree, and the content of every text file ",
            "with syntax-highlighted code blocks.",
            "",
        ]) + "\n"

    def table_of_contents(self, summary: ProjectSummary) -> str:
        lines = [
            "## 📑 Table of Contents",
            "",
            f"- [{OVERVIEW_HEADING}]({heading_anchor(OVERVIEW_HEADING)})",
            f"- [{STATISTICS_HEADING}]({heading_anchor(STATISTICS_HEADING)})",
            f"- [{STRUCTURE_HEADING}]({heading_anchor(STRUCTURE_HEADING)})",
            f"- [{CATEGORIES_HEADING}]({heading_anchor(CATEGORIES_HEADING)})",
        ]
        for category, _ in _ranked(summary.languages.by_category):
            heading = f"{category_emoji(category)} {category}"
            lines.append(f"  - [{heading}]({heading_anchor(heading)})")
        lines.append(f"- [{LISTING_HEADING}]({heading_anchor(LISTING_HEADING)})")
        return "\n".join(lines) + "\n\n"

    def overview(self, root: Path, summary: ProjectSummary, generated_at: str) -> str:
        return "\n".join([
            f"## {OVERVIEW_HEADING}",
            "",
            f"**Project:** `{root.name}`  ",
            f"**Path:** `{root}`  ",
            f"**Generated:** {generated_at}  ",
            f"**Total Files:** {summary.total_files}  ",
            f"**Total Size:** {format_file_size(summary.total_size_bytes)}  ",
            "",
        ]) + "\n"

    def statistics(self, summary: ProjectSummary) -> str:
        total = summary.total_files
        lines = [
            f"## {STATISTICS_HEADING}",
            "",
            "### 📊 File Type Distribution",
            "",
            "| Category | Files | Percentage |",
            "| --- | --- | --- |",
        ]
        for category, files in _ranked(summary.languages.by_category):
            lines.append(f"| {category} | {len(files)} | {_percent(len(files), total)} |")

        lines.extend([
            "",
            "### 💻 Programming Languages",
            "",
            "| Language | Files | Primary Category |",
            "| --- | --- | --- |",
        ])
        for language, files in _ranked(summary.languages.by_language)[:MAX_LANGUAGES_SHOWN]:
            lines.append(f"| {language} | {len(files)} | {detect_language(files[0]).category} |")

        average = summary.total_size_bytes / total if total else 0
        lines.extend([
            "",
            "### 📏 Size Analysis",
            "",
            f"- **Total Project Size:** {format_file_size(summary.total_size_bytes)}",
            f"- **Average File Size:** {format_file_size(average)}",
            f"- **Text Files:** {summary.text_files} ({_percent(summary.text_files, total)})",
        ])
        if summary.binary_files:
            lines.append(f"- **Binary Files:** {summary.binary_files} (excluded from content)")
        if summary.large_files:
            lines.append(f"- **Large Files:** {summary.large_files} (over the size limit, excluded from content)")
        if summary.unreadable_files:
            lines.append(f"- **Unreadable Files:** {summary.unreadable_files}")
        return "\n".join(lines) + "\n\n"

    def directory_structure(self, walk: WalkResult) -> str:
        return "\n".join([f"## {STRUCTURE_HEADING}", "", "```", *walk.tree_lines, "```", ""]) + "\n"

    def files_by_category(self, summary: ProjectSummary) -> str:
        lines = [f"## {CATEGORIES_HEADING}", ""]
        for category, files in _ranked(summary.languages.by_category):
            languages = summary.languages.category_languages.get(category, [])
            lines.extend([
                f"### {category_emoji(category)} {category}",
                "",
                f"**Languages:** {', '.join(languages)}  ",
                f"**File Count:** {len(files)}",
                "",
            ])
            lines.extend(f"- `{path}`" for path in files)
            lines.append("")
        return "\n".join(lines) + "\n"

    def listing_intro(self) -> str:
        return "\n".join([
            f"## {LISTING_HEADING}",
            "",
            "The following section contains the content of every text file in the project, ",
            "with language-tagged code blocks and per-file metadata.",
            "",
        ]) + "\n"

    def processing_summary(self, stats: AggregationStats, total_files: int) -> str:
        return "\n".join([
            "---",
            "",
            "### 📊 Processing Summary",
            "",
            f"- **Files Processed:** {stats.files_processed}",
            f"- **Files Skipped:** {stats.files_skipped}",
            f"- **Errors:** {stats.errors}",
            f"- **Total Files:** {total_files}",
            "",
        ])

    # -- per-file blocks ---------------------------------------------------

    def format(self, outcome: FileOutcome) -> str:
        entry = outcome.entry
        detection = detect_language(entry.relative_path)
        size = outcome.decision.size_bytes or entry.size_bytes
        lines = [
            f"### 📄 `{entry.path.name}`",
            "",
            f"**Path:** `{entry.relative_path}`  ",
            f"**Size:** {format_file_size(size)}  ",
            f"**Language:** {detection.language} ({detection.confidence} confidence)  ",
            f"**Category:** {detection.category}  ",
            "",
        ]

        if outcome.error is not None:
            lines.append(f"> **❌ Error:** Could not read file content: {outcome.error.message}")
        elif outcome.decision.skip:
            lines.append(f"> **⏭️ Skipped:** {outcome.decision.reason}")
        else:
            content = (outcome.content or "").rstrip("\n")
            fence = code_fence(content)
            tag = "" if detection.language == "text" else detection.language
            lines.extend([f"{fence}{tag}", content, fence])
            if outcome.truncated:
                lines.extend(["", "> " + truncation_notice(outcome.bytes_read, outcome.decision.size_bytes)])

        lines.append("")
        return "\n".join(lines) + "\n"

    async def render(
        self,
        root: Path,
        walk: WalkResult,
        aggregator: ContentAggregator,
        sink: OutputSink,
        generated_at: str,
    ) -> AggregationStats:
        summary = await summarize_project(walk.files, self.classifier, self.config.concurrency_limit)

        await sink.write(self.title(root))
        await sink.write(self.table_of_contents(summary))
        await sink.write(self.overview(root, summary, generated_at))
        await sink.write(self.statistics(summary))
        await sink.write(self.directory_structure(walk))
        await sink.write(self.files_by_category(summary))
        await sink.write(self.listing_intro())

        stats = await aggregator.aggregate(walk.files, sink, self)

        await sink.write(self.processing_summary(stats, len(walk.files)))
        return stats
