"""Tests for the directory walker."""

import asyncio
import os
import pytest
from pathlib import Path
from git_ingest.models import WalkResult
from git_ingest.scanner.ignore import IgnoreRuleSet
from git_ingest.scanner.structure import TreeWalker


def walk(root: Path, **rule_options) -> WalkResult:
    rules = IgnoreRuleSet.build(root, **rule_options)
    return asyncio.run(TreeWalker(rules).walk(root))


def relative_paths(result: WalkResult) -> list:
    return [entry.relative_path for entry in result.files]


class TestTreeWalker:
    def test_sample_repo(self, temp_repo: Path):
        """Test files and tree lines for the sample project."""
        result = walk(temp_repo)

        # .gitignore is a default exclusion; debug.log matches the project's .gitignore.
        assert relative_paths(result) == ["src/index.js", "README.md"]
        assert result.tree_lines == [
            "├── src/",
            "│   └── index.js",
            "└── README.md",
        ]
        assert result.tree_items == 3
        assert result.directory_errors == 0

    def test_entries(self, temp_repo: Path):
        """Test FileEntry fields."""
        entry = walk(temp_repo).files[0]

        assert entry.path == temp_repo / "src" / "index.js"
        assert entry.path.is_absolute()
        assert entry.size_bytes == len('console.log("hi")')
        assert not entry.is_directory

    def test_directories_first_then_name(self, tmp_path: Path):
        """Test sibling ordering."""
        for name in ("z.txt", "m.txt"):
            (tmp_path / name).write_text(name)
        for directory in ("b", "a"):
            (tmp_path / directory).mkdir()
            (tmp_path / directory / "file.txt").write_text(directory)

        result = walk(tmp_path)

        assert relative_paths(result) == ["a/file.txt", "b/file.txt", "m.txt", "z.txt"]
        assert result.tree_lines == [
            "├── a/",
            "│   └── file.txt",
            "├── b/",
            "│   └── file.txt",
            "├── m.txt",
            "└── z.txt",
        ]

    def test_nested_indentation(self, tmp_path: Path):
        """Test tree indentation for nested directories."""
        (tmp_path / "pkg" / "sub").mkdir(parents=True)
        (tmp_path / "pkg" / "sub" / "deep.py").write_text("")
        (tmp_path / "pkg" / "mod.py").write_text("")

        result = walk(tmp_path)

        assert result.tree_lines == [
            "└── pkg/",
            "    ├── sub/",
            "    │   └── deep.py",
            "    └── mod.py",
        ]

    def test_ignored_directory_pruned(self, temp_repo: Path):
        """Test that ignored directories are not traversed."""
        (temp_repo / "node_modules" / "pkg").mkdir(parents=True)
        (temp_repo / "node_modules" / "pkg" / "index.js").write_text("module.exports = 1")

        result = walk(temp_repo)

        assert not any("node_modules" in line for line in result.tree_lines)
        assert all(not path.startswith("node_modules") for path in relative_paths(result))

    def test_include_keeps_nested_matches(self, tmp_path: Path):
        """Test that include patterns find nested files."""
        (tmp_path / "docs").mkdir()
        (tmp_path / "docs" / "guide.md").write_text("# Guide")
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "index.js").write_text("")
        (tmp_path / "README.md").write_text("# Readme")

        result = walk(tmp_path, include=["*.md"])

        assert relative_paths(result) == ["docs/guide.md", "README.md"]

    def test_large_file_annotation(self, tmp_path: Path):
        """Test the size note on large files."""
        (tmp_path / "big.txt").write_bytes(b"a" * (1024 * 1024 + 512 * 1024))
        (tmp_path / "small.txt").write_text("a")

        result = walk(tmp_path)

        assert result.tree_lines == ["├── big.txt (1.50MB)", "└── small.txt"]

    def test_empty_directory(self, tmp_path: Path):
        """Test walking an empty directory."""
        result = walk(tmp_path)

        assert result.files == []
        assert result.tree_lines == []
        assert result.tree_items == 0

    def test_unreadable_directory_is_reported(self, tmp_path: Path, monkeypatch):
        """Test that an unreadable directory becomes an error line."""
        (tmp_path / "locked").mkdir()
        (tmp_path / "locked" / "secret.txt").write_text("hidden")
        (tmp_path / "open").mkdir()
        (tmp_path / "open" / "file.txt").write_text("visible")
        (tmp_path / "root.txt").write_text("top")

        real_listdir = os.listdir

        def fake_listdir(path):
            if Path(path).name == "locked":
                raise PermissionError(13, "Permission denied")
            return real_listdir(path)

        monkeypatch.setattr(os, "listdir", fake_listdir)

        result = walk(tmp_path)

        assert relative_paths(result) == ["open/file.txt", "root.txt"]
        assert result.tree_lines == [
            "├── locked/",
            "│   └── [Error reading directory: Permission denied]",
            "├── open/",
            "│   └── file.txt",
            "└── root.txt",
        ]
        assert result.directory_errors == 1

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_broken_symlink_listed(self, tmp_path: Path):
        """Test that a broken symlink is still listed."""
        os.symlink(tmp_path / "missing.txt", tmp_path / "dangling.txt")

        result = walk(tmp_path)

        assert relative_paths(result) == ["dangling.txt"]
