"""Discovery and per-file classification."""

from .classifier import FileClassifier, format_file_size, looks_binary
from .ignore import IgnoreRuleSet, parse_gitignore
from .language import LanguageDetector, detect_language, language_stats
from .structure import TreeWalker

__all__ = [
    "FileClassifier",
    "format_file_size",
    "looks_binary",
    "IgnoreRuleSet",
    "parse_gitignore",
    "LanguageDetector",
    "detect_language",
    "language_stats",
    "TreeWalker",
]
