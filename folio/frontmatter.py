"""Front-matter parsing and validation for Folio.

A document may start with a YAML block delimited by ``---`` lines. The
block is parsed with ``yaml.safe_load`` and every value is validated into
the closed ``MetaValue`` variant at load time:

- ``str``
- ``datetime.date``
- ``bool``
- ``tuple[str, ...]``

Anything else (numbers, nulls, nested mappings, mixed lists) is rejected.
The recognized keys have stricter types; see ``FIELD_TYPES``.
"""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path
from typing import Any, Union

import yaml

from .errors import MalformedFrontMatterError, MissingRequiredFieldError
from .utils import parse_iso_date

MetaValue = Union[str, date, bool, tuple[str, ...]]
Metadata = dict[str, MetaValue]

FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
EMPTY_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n---[ \t]*(?:\r?\n|\Z)")
OPENING_RE = re.compile(r"\A---[ \t]*\r?\n")

REQUIRED_FIELDS = ("title", "date")

FIELD_TYPES: dict[str, type] = {
    "title": str,
    "date": date,
    "tags": tuple,
    "template": str,
    "draft": bool,
    "slug": str,
}


def split_frontmatter(text: str, source: Path | str) -> tuple[dict[str, Any], str]:
    """Split a leading YAML block from the document body.

    Args:
        text: Decoded file content.
        source: Source path, for error context.

    Returns:
        Tuple of (raw front-matter mapping, remaining body). The mapping is
        empty when the document has no front-matter block.

    Raises:
        MalformedFrontMatterError: The block is not YAML, not a mapping, or
            is never closed.
    """
    empty = EMPTY_FRONTMATTER_RE.match(text)
    if empty:
        return {}, text[empty.end() :]
    match = FRONTMATTER_RE.match(text)
    if not match:
        if OPENING_RE.match(text):
            raise MalformedFrontMatterError(
                source, "Front-matter block is opened with '---' but never closed"
            )
        return {}, text
    try:
        data = yaml.safe_load(match.group(1))
    except (yaml.YAMLError, ValueError) as exc:
        # PyYAML raises ValueError for out-of-range timestamps like 2024-13-45
        raise MalformedFrontMatterError(
            source, f"Front-matter is not valid YAML: {exc}", exc
        ) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedFrontMatterError(
            source,
            f"Front-matter must be a mapping of keys to values, got {type(data).__name__}",
        )
    return data, text[match.end() :]


def validate_metadata(raw: dict[str, Any], source: Path | str) -> Metadata:
    """Validate a raw front-matter mapping into ``Metadata``.

    Args:
        raw: Mapping produced by ``split_frontmatter``.
        source: Source path, for error context.

    Returns:
        Validated metadata. ``draft`` is always present.

    Raises:
        MissingRequiredFieldError: ``title`` or ``date`` is absent.
        MalformedFrontMatterError: A value is outside the allowed types.
    """
    for name in REQUIRED_FIELDS:
        if name not in raw or raw[name] is None:
            raise MissingRequiredFieldError(source, name)

    metadata: Metadata = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            raise MalformedFrontMatterError(
                source, f"Front-matter key {key!r} is not a string"
            )
        if key in FIELD_TYPES:
            metadata[key] = _validate_known(key, value, source)
        else:
            metadata[key] = _validate_value(key, value, source)
    metadata.setdefault("draft", False)
    return metadata


def _validate_known(key: str, value: Any, source: Path | str) -> MetaValue:
    expected = FIELD_TYPES[key]
    if expected is date:
        parsed = parse_iso_date(value)
        if parsed is None:
            raise MalformedFrontMatterError(
                source, f"Field '{key}' must be an ISO-8601 date, got {value!r}"
            )
        return parsed
    if expected is tuple:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise MalformedFrontMatterError(
                source, f"Field '{key}' must be a list of strings, got {value!r}"
            )
        return tuple(dict.fromkeys(v.strip() for v in value if v.strip()))
    if expected is str:
        if not isinstance(value, str) or not value.strip():
            raise MalformedFrontMatterError(
                source, f"Field '{key}' must be a non-empty string, got {value!r}"
            )
        return value.strip()
    if not isinstance(value, bool):
        raise MalformedFrontMatterError(
            source, f"Field '{key}' must be true or false, got {value!r}"
        )
    return value


def _validate_value(key: str, value: Any, source: Path | str) -> MetaValue:
    if isinstance(value, (bool, str)):
        return value
    if isinstance(value, date):
        return parse_iso_date(value)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise MalformedFrontMatterError(
        source,
        f"Field '{key}' has unsupported value {value!r}; expected a string, "
        "date, boolean or list of strings",
    )


def parse_document(text: str, source: Path | str) -> tuple[Metadata, str]:
    """Parse a decoded document into validated metadata and body."""
    raw, body = split_frontmatter(text, source)
    return validate_metadata(raw, source), body
