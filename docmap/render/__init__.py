"""Document renderers."""

from .markdown import MarkdownRenderer, render_markdown

__all__ = ["MarkdownRenderer", "render_markdown"]
