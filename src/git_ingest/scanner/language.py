"""Language detection from file names and extensions.

Detection is a pure function of the path string. The lookup tables are
read-only mappings built once at import time.
"""

from pathlib import PurePath
from types import MappingProxyType
from typing import Iterable, List, Mapping, Tuple, Union

from ..models import LanguageDetection, LanguageStats

PathLike = Union[str, PurePath]

EXTENSION_LANGUAGES: Mapping[str, str] = MappingProxyType({
    # JavaScript/TypeScript ecosystem
    ".js": "javascript", ".jsx": "jsx", ".ts": "typescript", ".tsx": "tsx",
    ".mjs": "javascript", ".cjs": "javascript", ".vue": "vue", ".svelte": "svelte",
    # Web technologies
    ".html": "html", ".htm": "html", ".xml": "xml", ".xhtml": "xhtml",
    ".css": "css", ".scss": "scss", ".sass": "sass", ".less": "less", ".stylus": "stylus",
    # Python
    ".py": "python", ".pyx": "python", ".pyi": "python", ".pyw": "python", ".py3": "python",
    # JVM
    ".java": "java", ".kt": "kotlin", ".kts": "kotlin", ".scala": "scala",
    ".groovy": "groovy", ".gradle": "gradle",
    # C/C++
    ".c": "c", ".h": "c", ".cpp": "cpp", ".cxx": "cpp", ".cc": "cpp",
    ".hpp": "hpp", ".hxx": "hpp", ".hh": "hpp",
    # .NET
    ".cs": "csharp", ".vb": "vb", ".fs": "fsharp",
    ".rs": "rust",
    ".go": "go",
    # PHP
    ".php": "php", ".php3": "php", ".php4": "php", ".php5": "php", ".phtml": "php",
    # Ruby
    ".rb": "ruby", ".rbw": "ruby", ".rake": "ruby", ".gemspec": "ruby",
    ".swift": "swift",
    # Objective-C (.m is claimed here rather than by MATLAB)
    ".m": "objective-c", ".mm": "objective-c",
    # Shell
    ".sh": "bash", ".bash": "bash", ".zsh": "zsh", ".fish": "fish",
    ".ksh": "ksh", ".csh": "csh", ".tcsh": "tcsh",
    ".ps1": "powershell", ".psd1": "powershell", ".psm1": "powershell",
    ".bat": "batch", ".cmd": "batch",
    # SQL
    ".sql": "sql", ".mysql": "sql", ".pgsql": "sql", ".plsql": "plsql",
    ".r": "r",
    ".mlx": "matlab",
    ".pl": "perl", ".pm": "perl", ".t": "perl",
    ".lua": "lua",
    ".hs": "haskell", ".lhs": "haskell",
    ".clj": "clojure", ".cljs": "clojure", ".cljc": "clojure",
    ".erl": "erlang", ".ex": "elixir", ".exs": "elixir",
    ".dart": "dart",
    # Configuration
    ".json": "json", ".json5": "json5", ".jsonl": "jsonl",
    ".yaml": "yaml", ".yml": "yaml", ".toml": "toml",
    ".ini": "ini", ".cfg": "ini", ".conf": "apache", ".config": "xml",
    # Markup
    ".md": "markdown", ".markdown": "markdown", ".mdown": "markdown", ".mkd": "markdown",
    ".rst": "rst", ".tex": "latex", ".bib": "bibtex",
    # Containers and VCS
    ".dockerfile": "dockerfile", ".dockerignore": "ignore",
    ".gitignore": "ignore", ".gitattributes": "ignore",
    # Data
    ".csv": "csv", ".tsv": "tsv", ".log": "log", ".txt": "text",
    # Build files
    ".mk": "makefile", ".cmake": "cmake", ".ninja": "ninja",
    # Package manager artifacts
    ".lock": "text", ".sum": "text",
    # Schemas
    ".graphql": "graphql", ".gql": "graphql", ".prisma": "prisma", ".proto": "protobuf",
})

FILENAME_LANGUAGES: Mapping[str, str] = MappingProxyType({
    "Dockerfile": "dockerfile",
    "Makefile": "makefile",
    "CMakeLists.txt": "cmake",
    "Rakefile": "ruby",
    "Gemfile": "ruby",
    "Guardfile": "ruby",
    "Vagrantfile": "ruby",
    "Jenkinsfile": "groovy",
    ".bashrc": "bash",
    ".zshrc": "zsh",
    ".vimrc": "vim",
    ".gitconfig": "ini",
    ".gitignore": "ignore",
    ".gitattributes": "ignore",
    ".dockerignore": "ignore",
    ".editorconfig": "ini",
    "package.json": "json",
    "tsconfig.json": "json",
    "composer.json": "json",
    "bower.json": "json",
    ".eslintrc": "json",
    ".babelrc": "json",
    ".prettierrc": "json",
    "pyproject.toml": "toml",
    "setup.cfg": "ini",
    "webpack.config.js": "javascript",
    "rollup.config.js": "javascript",
    "vite.config.js": "javascript",
    "jest.config.js": "javascript",
    "tailwind.config.js": "javascript",
    "next.config.js": "javascript",
    "nuxt.config.js": "javascript",
    "vue.config.js": "javascript",
    "svelte.config.js": "javascript",
    "astro.config.js": "javascript",
    "vitest.config.js": "javascript",
    "cypress.config.js": "javascript",
    "playwright.config.js": "javascript",
    "eslint.config.js": "javascript",
    "prettier.config.js": "javascript",
    "babel.config.js": "javascript",
    "postcss.config.js": "javascript",
    "karma.config.js": "javascript",
    "gulpfile.js": "javascript",
    "gruntfile.js": "javascript",
})

# Ordered: a language listed in several groups belongs to the first one.
LANGUAGE_CATEGORIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Web Frontend", (
        "javascript", "typescript", "jsx", "tsx", "html", "css", "scss",
        "sass", "less", "stylus", "vue", "svelte",
    )),
    ("Backend/Server", (
        "python", "java", "csharp", "php", "ruby", "go", "rust", "swift",
        "kotlin", "scala", "groovy",
    )),
    ("Systems/Low-level", ("c", "cpp", "hpp", "zig", "assembly")),
    ("Functional", ("haskell", "clojure", "erlang", "elixir", "fsharp", "ocaml")),
    ("Scripting", ("bash", "zsh", "fish", "ksh", "csh", "tcsh", "powershell", "batch", "perl", "lua")),
    ("Data/Config", ("json", "json5", "jsonl", "yaml", "toml", "xml", "csv", "tsv", "sql", "ini", "graphql", "prisma", "protobuf")),
    ("Documentation", ("markdown", "rst", "latex", "bibtex", "text")),
    ("Mobile", ("dart", "objective-c")),
    ("DevOps", ("dockerfile", "makefile", "cmake", "ninja", "gradle")),
)

_CATEGORY_BY_LANGUAGE: Mapping[str, str] = MappingProxyType({
    language: category
    for category, languages in reversed(LANGUAGE_CATEGORIES)
    for language in languages
})

OTHER_CATEGORY = "Other"


def category_for_language(language: str) -> str:
    return _CATEGORY_BY_LANGUAGE.get(language, OTHER_CATEGORY)


def detect_language(path: PathLike) -> LanguageDetection:
    """Detect the language of a path without touching the filesystem.

    Exact filenames win (high confidence), then the lowercased extension
    (medium). Anything else is plain text with low confidence: ``fallback``
    when there is no extension, ``unknown`` when the extension is unrecognised.
    """
    pure = PurePath(str(path).replace("\\", "/"))
    name = pure.name
    extension = pure.suffix.lower()

    language = FILENAME_LANGUAGES.get(name)
    if language is not None:
        return LanguageDetection(
            language=language,
            confidence="high",
            source="filename",
            category=category_for_language(language),
        )

    language = EXTENSION_LANGUAGES.get(extension)
    if language is not None:
        return LanguageDetection(
            language=language,
            confidence="medium",
            source="extension",
            category=category_for_language(language),
        )

    return LanguageDetection(
        language="text",
        confidence="low",
        source="fallback" if not extension else "unknown",
        category=OTHER_CATEGORY,
    )


class LanguageDetector:
    """Stateless facade over the module tables, injectable where a detector is expected."""

    def detect(self, path: PathLike) -> LanguageDetection:
        return detect_language(path)

    def stats(self, paths: Iterable[PathLike]) -> LanguageStats:
        return language_stats(paths)


def language_stats(paths: Iterable[PathLike]) -> LanguageStats:
    """Group paths by detected language and by category."""
    stats = LanguageStats()
    for path in paths:
        detection = detect_language(path)
        key = str(path)

        stats.by_language.setdefault(detection.language, []).append(key)
        stats.by_category.setdefault(detection.category, []).append(key)

        languages = stats.category_languages.setdefault(detection.category, [])
        if detection.language not in languages:
            languages.append(detection.language)

        stats.total += 1
        if detection.confidence == "low" and detection.source in ("fallback", "unknown"):
            stats.unknown += 1
    return stats


def supported_languages() -> List[str]:
    """All language identifiers the tables can produce, sorted."""
    return sorted(set(EXTENSION_LANGUAGES.values()) | set(FILENAME_LANGUAGES.values()))


def format_detection(detection: LanguageDetection) -> str:
    """Short display form, e.g. ``python ~ (extension)``."""
    marker = {"high": "✓", "medium": "~"}.get(detection.confidence, "?")
    return f"{detection.language} {marker} ({detection.source})"
