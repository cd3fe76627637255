"""HTML utility functions for Folio.

This module provides HTML manipulation utilities including escaping,
tag stripping for plain-text excerpts and URL joining.

Functions:
    escape_html: Escape special HTML characters in a string.
    strip_tags: Reduce an HTML fragment to plain text.
    truncate_words: Truncate text at a word boundary.
    join_root_url: Join a base URL with a path.
"""

from __future__ import annotations

import html
import re

_TAG_RE = re.compile(r"<[^>]+>")
_BLOCK_END_RE = re.compile(
    r"</(?:p|h[1-6]|li|blockquote|pre|tr|td|th|div)>|<br\s*/?>", re.IGNORECASE
)

ELLIPSIS = "…"


def escape_html(text: str) -> str:
    """Escape special HTML characters in a string.

    Args:
        text: The string to escape.

    Returns:
        The escaped string, safe for inclusion in HTML and XML.

    Examples:
        >>> escape_html('<script>alert("XSS")</script>')
        '&lt;script&gt;alert(&quot;XSS&quot;)&lt;/script&gt;'

        >>> escape_html('Tom & Jerry')
        'Tom &amp; Jerry'
    """
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def strip_tags(fragment: str) -> str:
    """Strip all markup from an HTML fragment.

    Block-level closing tags become spaces so adjacent paragraphs do not run
    together, entities are unescaped and whitespace is collapsed.

    Examples:
        >>> strip_tags("<h1>Hi</h1>\\n<p>World &amp; more</p>")
        'Hi World & more'
    """
    text = _BLOCK_END_RE.sub(" ", fragment)
    text = _TAG_RE.sub("", text)
    text = html.unescape(text)
    return " ".join(text.split())


def truncate_words(text: str, limit: int) -> str:
    """Truncate text to at most ``limit`` characters at a word boundary.

    An ellipsis is appended when text was dropped. A single word longer than
    the limit is cut hard.

    Examples:
        >>> truncate_words("one two three", 9)
        'one two…'
    """
    if limit <= 0:
        return ""
    if len(text) <= limit:
        return text
    cut = text[: limit + 1]
    boundary = cut.rfind(" ")
    if boundary > 0:
        head = cut[:boundary]
    else:
        head = text[:limit]
    return head.rstrip(" ,;:.-") + ELLIPSIS


def join_root_url(root_url: str, path: str) -> str:
    """Safely join a root URL and a path, avoiding double slashes.

    Args:
        root_url: Base URL (e.g., https://example.com/blog).
        path: Path beginning with or without a leading slash.

    Returns:
        Combined URL with proper slash handling.

    Examples:
        >>> join_root_url('https://example.com', '/about/')
        'https://example.com/about/'

        >>> join_root_url('https://example.com/', 'about/')
        'https://example.com/about/'
    """
    if not root_url:
        return path
    base = root_url.rstrip("/")
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"
