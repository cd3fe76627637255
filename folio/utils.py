"""Utility functions for Folio.

This module contains small helpers shared by the pipeline stages: slug
generation, source path filtering and date parsing.

Key functions:
    slugify: Convert titles to URL slugs.
    is_hidden_path: Check whether a relative path is hidden or internal.
    is_markdown: Check if a path has one of the Markdown extensions.
    parse_iso_date: Parse an ISO-8601 date string.
    chronological_key: Sort key ordering pages newest first.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable
from datetime import date, datetime
from pathlib import Path
from typing import Any

SLUG_RE = re.compile(r"[^a-z0-9]+")

DEFAULT_EXTENSIONS = (".md", ".markdown")


def slugify(text: str) -> str:
    """Convert a title to a URL-friendly slug.

    Accented characters are folded to ASCII, everything that is not a letter
    or digit becomes a single hyphen.

    Args:
        text: Title or explicit slug.

    Returns:
        Lowercase slug, or ``"untitled"`` if nothing usable remains.

    Examples:
        >>> slugify("Hello, World!")
        'hello-world'

        >>> slugify("Café Crème")
        'cafe-creme'
    """
    folded = unicodedata.normalize("NFKD", text)
    folded = folded.encode("ascii", "ignore").decode("ascii")
    cleaned = SLUG_RE.sub("-", folded.lower()).strip("-")
    return cleaned or "untitled"


def is_hidden_path(rel: Path) -> bool:
    """Check if a relative path is hidden or internal.

    Any component starting with ``.`` or ``_`` hides the whole path.

    Args:
        rel: Path relative to the source root.

    Returns:
        True if the path should be skipped during discovery.
    """
    return any(part.startswith((".", "_")) for part in rel.parts)


def is_markdown(path: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> bool:
    """Check if a path is a Markdown file.

    Args:
        path: Path to check.
        extensions: Accepted suffixes, compared case-insensitively.

    Returns:
        True if the file suffix is one of ``extensions``.
    """
    return path.suffix.lower() in {ext.lower() for ext in extensions}


def parse_iso_date(value: Any) -> date | None:
    """Parse an ISO-8601 date.

    Accepts ``date`` and ``datetime`` objects (as produced by YAML) and
    strings such as ``2024-01-15`` or ``2024-01-15T10:00:00``.

    Args:
        value: Raw front-matter value.

    Returns:
        A ``date``, or None if the value is not an ISO-8601 date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def chronological_key(page: Any) -> tuple[int, str]:
    """Sort key for newest-first ordering.

    Date descending, then source path ascending as a tiebreak.
    """
    return (-page.date.toordinal(), page.source_path)
