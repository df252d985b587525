"""Artifact renderers."""

from typing import Union

from ..config import IngestConfig
from ..scanner.classifier import FileClassifier
from .markdown import MarkdownRenderer
from .plain_text import PlainTextRenderer

Renderer = Union[PlainTextRenderer, MarkdownRenderer]


def create_renderer(config: IngestConfig, classifier: FileClassifier) -> Renderer:
    """Pick the renderer for ``config.format``."""
    if config.format == "markdown":
        return MarkdownRenderer(config, classifier)
    return PlainTextRenderer(config)


__all__ = ["MarkdownRenderer", "PlainTextRenderer", "Renderer", "create_renderer"]
