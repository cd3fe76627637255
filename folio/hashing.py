"""Content hashing and permalink derivation for Folio.

The content hash is a BLAKE2s-256 digest over a canonical byte encoding of
a document's metadata and its rendered HTML. Metadata keys are sorted
before encoding, so the order of keys in the source file never changes the
hash; each value is tagged with its type so that e.g. the string
``"true"`` and the boolean ``true`` encode differently.

Permalinks are slugs of the title (or of an explicit ``slug`` override).
When several pages of one build share a slug, every one of them gets the
first eight hex characters of its content hash appended.
"""

from __future__ import annotations

import base64
import hashlib
import json
from collections import defaultdict
from collections.abc import Iterable
from datetime import date
from typing import Any

from .errors import PermalinkCollisionError
from .frontmatter import Metadata, MetaValue
from .utils import slugify

SHORT_HASH_LENGTH = 8


def _encode_value(value: MetaValue) -> list[Any]:
    if isinstance(value, bool):
        return ["bool", value]
    if isinstance(value, str):
        return ["str", value]
    if isinstance(value, date):
        return ["date", value.isoformat()]
    return ["list", list(value)]


def canonical_bytes(metadata: Metadata, html: str) -> bytes:
    """Encode metadata and rendered HTML into canonical bytes.

    Args:
        metadata: Validated front-matter.
        html: Rendered HTML fragment.

    Returns:
        UTF-8 JSON with sorted keys and compact separators.
    """
    payload = {
        "html": html,
        "metadata": {key: _encode_value(value) for key, value in metadata.items()},
    }
    text = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return text.encode("utf-8")


def content_hash(metadata: Metadata, html: str) -> str:
    """Compute the hex content hash of a document.

    Examples:
        >>> len(content_hash({"title": "Hi"}, "<p>x</p>"))
        64
    """
    return hashlib.blake2s(canonical_bytes(metadata, html)).hexdigest()


def short_hash(digest: str) -> str:
    return digest[:SHORT_HASH_LENGTH]


def output_digest(data: bytes) -> str:
    """URL-safe base64 BLAKE2s-256 digest of final output bytes, unpadded."""
    raw = hashlib.blake2s(data).digest()
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def base_slug(metadata: Metadata) -> str:
    """Slug of the explicit ``slug`` override, or of the title."""
    override = metadata.get("slug")
    if isinstance(override, str) and override.strip():
        parts = [slugify(part) for part in override.strip("/").split("/") if part]
        return "/".join(parts) or slugify(str(metadata["title"]))
    return slugify(str(metadata["title"]))


def derive_permalinks(entries: Iterable[tuple[str, Metadata, str]]) -> dict[str, str]:
    """Assign a unique permalink to every entry.

    Args:
        entries: Tuples of (source path, metadata, content hash).

    Returns:
        Mapping of source path to permalink.

    Raises:
        PermalinkCollisionError: Two entries still share a permalink after
            disambiguation.
    """
    groups: dict[str, list[tuple[str, str]]] = defaultdict(list)
    for source_path, metadata, digest in entries:
        groups[base_slug(metadata)].append((source_path, digest))

    permalinks: dict[str, str] = {}
    owners: dict[str, str] = {}
    for slug in sorted(groups):
        members = sorted(groups[slug])
        for source_path, digest in members:
            if len(members) == 1:
                permalink = slug
            else:
                permalink = f"{slug}-{short_hash(digest)}"
            if permalink in owners:
                raise PermalinkCollisionError(source_path, permalink, owners[permalink])
            owners[permalink] = source_path
            permalinks[source_path] = permalink
    return permalinks
