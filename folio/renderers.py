"""Markdown rendering for Folio.

Documents are rendered with mistune. Rendering is a pure function of the
body text and the renderer settings: the same input always yields the same
bytes. Malformed Markdown never raises; mistune degrades the way CommonMark
describes (an unterminated fence runs to the end of the document).

Key classes:
- MarkdownRenderer: Renders a document body into a RenderedContent.
"""

from __future__ import annotations

import mistune

from .content import RenderedContent
from .html_utils import strip_tags, truncate_words

DEFAULT_EXCERPT_LENGTH = 200

PLUGINS = ["strikethrough", "table", "url"]


class MarkdownRenderer:
    """Renders Markdown content to HTML plus a plain-text excerpt.

    Attributes:
        allow_raw_html: Pass raw HTML in the source through unchanged.
            When False, it is escaped. This applies to every document.
        excerpt_length: Maximum excerpt length in characters.
    """

    source_type = "markdown"

    def __init__(
        self,
        allow_raw_html: bool = False,
        excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
    ):
        self.allow_raw_html = allow_raw_html
        self.excerpt_length = excerpt_length

    def render(self, body: str) -> RenderedContent:
        """Render a Markdown body.

        Args:
            body: Markdown source, front-matter already removed.

        Returns:
            RenderedContent with the HTML fragment and excerpt.
        """
        html = self.to_html(body)
        return RenderedContent(html=html, excerpt=self.excerpt(html))

    def to_html(self, body: str) -> str:
        # A fresh parser per call: mistune instances keep per-parse state
        renderer = mistune.HTMLRenderer(escape=not self.allow_raw_html)
        markdown = mistune.create_markdown(renderer=renderer, plugins=PLUGINS)
        return markdown(body)

    def excerpt(self, html: str) -> str:
        """Reduce rendered HTML to a truncated plain-text excerpt."""
        return truncate_words(strip_tags(html), self.excerpt_length)
