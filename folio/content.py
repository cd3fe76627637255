"""Content loading for Folio.

This module discovers Markdown documents under a source root and turns each
into an immutable ``SourceDocument`` (front-matter split from body). It also
defines the value types that flow through the rest of the pipeline.

Key classes:
- SourceDocument: One discovered Markdown file, metadata validated.
- RenderedContent: HTML fragment and plain-text excerpt of a document.
- ProcessedDocument: A document after rendering and hashing.
- Page: The unit of output, with its permalink and template.
- DocumentLoader: Lazy, restartable iterable over a source tree.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from .errors import EncodingError
from .frontmatter import Metadata, parse_document
from .utils import DEFAULT_EXTENSIONS, is_hidden_path, is_markdown

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "folio.yaml"


@dataclass(frozen=True)
class SourceDocument:
    """A Markdown source file with validated front-matter.

    Attributes:
        source_path: Path relative to the source root, POSIX style.
        body: Raw Markdown body (front-matter removed).
        metadata: Validated front-matter values.
    """

    source_path: str
    body: str
    metadata: Metadata

    @property
    def title(self) -> str:
        return self.metadata["title"]  # type: ignore[return-value]

    @property
    def date(self) -> date:
        return self.metadata["date"]  # type: ignore[return-value]

    @property
    def tags(self) -> tuple[str, ...]:
        return self.metadata.get("tags", ())  # type: ignore[return-value]

    @property
    def draft(self) -> bool:
        return bool(self.metadata.get("draft", False))


@dataclass(frozen=True)
class RenderedContent:
    """Rendered HTML fragment plus plain-text excerpt."""

    html: str
    excerpt: str


@dataclass(frozen=True)
class ProcessedDocument:
    """A document that has been loaded, rendered and hashed."""

    document: SourceDocument
    rendered: RenderedContent
    content_hash: str

    @property
    def source_path(self) -> str:
        return self.document.source_path


@dataclass(frozen=True)
class Page:
    """Represents a site page ready for templating.

    Attributes:
        permalink: Unique path segment, without leading or trailing slashes.
            The home listing uses the empty string.
        title: Human-readable title.
        date: Publication date (chronological order key).
        tags: Tags of the page.
        kind: "post", "page" or "listing".
        template: Resolved template name.
        source_path: Relative source path, or a synthetic path for listings.
        content: Rendered HTML fragment (empty for listings).
        excerpt: Plain-text excerpt.
        content_hash: Hex digest of the source content (empty for listings).
        metadata: Front-matter values.
        listing: Source paths of the pages a listing shows, in order.
        tag: Tag a listing page is for, if any.
    """

    permalink: str
    title: str
    date: date
    tags: tuple[str, ...]
    kind: str
    template: str
    source_path: str
    content: str = ""
    excerpt: str = ""
    content_hash: str = ""
    metadata: Metadata = field(default_factory=dict)
    listing: tuple[str, ...] = ()
    tag: str | None = None

    @property
    def url(self) -> str:
        """Root-relative URL of the page, with a trailing slash."""
        return f"/{self.permalink}/" if self.permalink else "/"

    @property
    def output_path(self) -> str:
        """Path of the page file relative to the output root."""
        return f"{self.permalink}/index.html" if self.permalink else "index.html"


class DocumentLoader:
    """Discovers and loads Markdown documents from a source root.

    Iterating over a loader walks the tree again each time, so the sequence
    is lazy and restartable. Files are visited in sorted path order.

    Attributes:
        source_root: Directory containing the Markdown sources.
        extensions: Accepted file suffixes.
    """

    def __init__(
        self,
        source_root: Path,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ):
        self.source_root = Path(source_root)
        self.extensions = tuple(extensions)

    def __iter__(self) -> Iterator[SourceDocument]:
        for path in self.iter_paths():
            yield self.load(path)

    def iter_paths(self) -> list[Path]:
        """List every eligible source file.

        Hidden and internal paths (any component starting with ``.`` or
        ``_``) and the site config file are skipped.

        Returns:
            Sorted list of absolute paths.
        """
        paths: list[Path] = []
        for path in self.source_root.rglob("*"):
            if not path.is_file():
                continue
            rel = path.relative_to(self.source_root)
            if is_hidden_path(rel) or rel.as_posix() == CONFIG_FILENAME:
                continue
            if is_markdown(path, self.extensions):
                paths.append(path)
        return sorted(paths, key=lambda p: p.relative_to(self.source_root).as_posix())

    def load(self, path: Path) -> SourceDocument:
        """Load one document.

        Args:
            path: Absolute path of the file, below ``source_root``.

        Returns:
            The parsed document. Drafts are returned like any other document.

        Raises:
            EncodingError: The file is not valid UTF-8.
            MalformedFrontMatterError: The front-matter block is unusable.
            MissingRequiredFieldError: ``title`` or ``date`` is missing.
        """
        rel = path.relative_to(self.source_root).as_posix()
        raw = path.read_bytes()
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise EncodingError(
                rel, f"File is not valid UTF-8 (byte {exc.start})", exc
            ) from exc
        metadata, body = parse_document(text, rel)
        logger.debug("Loaded %s", rel)
        return SourceDocument(source_path=rel, body=body, metadata=metadata)
