"""Site graph construction for Folio.

The SiteBuilder is the aggregation barrier of the pipeline: it needs every
processed document before it can assign permalinks, order pages, group
them by tag and derive the listing pages. It runs on a single thread.

Key classes:
- Site: Immutable aggregate consumed by the template stage.
- SiteBuilder: Builds a Site from processed documents.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from functools import cached_property
from pathlib import PurePosixPath

from .collections import PageCollection, TagCollection
from .config import SiteConfig
from .content import Page, ProcessedDocument
from .errors import PermalinkCollisionError
from .hashing import derive_permalinks
from .utils import slugify

logger = logging.getLogger(__name__)

POST_TEMPLATE = "post"
PAGE_TEMPLATE = "page"
LISTING_TEMPLATE = "listing"
TAGS_PREFIX = "tags"
EPOCH = date(1970, 1, 1)


@dataclass(frozen=True)
class Site:
    """Aggregate of all pages for one build.

    Attributes:
        config: Settings of the build.
        pages: Content pages (posts and pages), newest first.
        posts: Posts only, newest first.
        tags: Tag name to pages with that tag, newest first.
        listings: Synthetic listing pages (home index, one per tag).
        drafts: Source paths of documents skipped as drafts.
    """

    config: SiteConfig
    pages: PageCollection
    posts: PageCollection
    tags: TagCollection
    listings: PageCollection
    drafts: tuple[str, ...] = ()

    @property
    def all_pages(self) -> PageCollection:
        """Content pages followed by listings; everything that gets written."""
        return PageCollection((*self.pages, *self.listings))

    @cached_property
    def _by_source(self) -> dict[str, Page]:
        return {page.source_path: page for page in self.all_pages}

    @cached_property
    def _post_index(self) -> dict[str, int]:
        return {page.source_path: i for i, page in enumerate(self.posts)}

    @cached_property
    def _tag_listings(self) -> dict[str, Page]:
        return {page.tag: page for page in self.listings if page.tag is not None}

    def get(self, source_path: str) -> Page | None:
        return self._by_source.get(source_path)

    def neighbours(self, page: Page) -> tuple[Page | None, Page | None]:
        """Return the (newer, older) posts around a post.

        Pages that are not posts have no neighbours.
        """
        index = self._post_index.get(page.source_path)
        if page.kind != "post" or index is None:
            return None, None
        newer = self.posts[index - 1] if index > 0 else None
        older = self.posts[index + 1] if index + 1 < len(self.posts) else None
        return newer, older

    def tag_listing(self, tag: str) -> Page | None:
        return self._tag_listings.get(tag)


class SiteBuilder:
    """Builds the Site aggregate.

    Attributes:
        config: Build settings (page directories, site title).
    """

    def __init__(self, config: SiteConfig | None = None):
        self.config = config or SiteConfig()

    def build(self, documents: Iterable[ProcessedDocument]) -> Site:
        """Construct the Site from every processed document.

        Args:
            documents: All documents of the build, drafts included.

        Returns:
            The immutable Site.

        Raises:
            PermalinkCollisionError: Two pages (including listings) would be
                written to the same permalink.
        """
        documents = list(documents)
        published = [d for d in documents if not d.document.draft]
        drafts = tuple(sorted(d.source_path for d in documents if d.document.draft))
        if drafts:
            logger.info("Skipping %d draft(s)", len(drafts))

        permalinks = derive_permalinks(
            (d.source_path, d.document.metadata, d.content_hash) for d in published
        )
        pages = PageCollection(
            self._make_page(d, permalinks[d.source_path]) for d in published
        ).sorted()
        posts = pages.of_kind("post")
        tags = TagCollection.from_pages(pages)
        listings = PageCollection(self._make_listings(posts, tags))

        self._check_unique((*pages, *listings))
        logger.debug(
            "Site graph: %d pages, %d tags, %d listings",
            len(pages),
            len(tags),
            len(listings),
        )
        return Site(
            config=self.config,
            pages=pages,
            posts=posts,
            tags=tags,
            listings=listings,
            drafts=drafts,
        )

    def kind_of(self, source_path: str) -> str:
        parts = PurePosixPath(source_path).parts
        if len(parts) > 1 and parts[0] in self.config.page_dirs:
            return "page"
        return "post"

    def _make_page(self, processed: ProcessedDocument, permalink: str) -> Page:
        document = processed.document
        kind = self.kind_of(document.source_path)
        default = POST_TEMPLATE if kind == "post" else PAGE_TEMPLATE
        template = document.metadata.get("template", default)
        return Page(
            permalink=permalink,
            title=document.title,
            date=document.date,
            tags=document.tags,
            kind=kind,
            template=str(template),
            source_path=document.source_path,
            content=processed.rendered.html,
            excerpt=processed.rendered.excerpt,
            content_hash=processed.content_hash,
            metadata=dict(document.metadata),
        )

    def _make_listings(self, posts: PageCollection, tags: TagCollection) -> list[Page]:
        newest = posts[0].date if posts else None
        listings = [
            Page(
                permalink="",
                title=self.config.title,
                date=newest or EPOCH,
                tags=(),
                kind="listing",
                template=LISTING_TEMPLATE,
                source_path="<index>",
                listing=tuple(p.source_path for p in posts),
            )
        ]
        for tag, tagged in tags.items():
            listings.append(
                Page(
                    permalink=f"{TAGS_PREFIX}/{slugify(tag)}",
                    title=tag,
                    date=tagged[0].date,
                    tags=(tag,),
                    kind="listing",
                    template=LISTING_TEMPLATE,
                    source_path=f"<tag:{tag}>",
                    listing=tuple(p.source_path for p in tagged),
                    tag=tag,
                )
            )
        return listings

    @staticmethod
    def _check_unique(pages: Iterable[Page]) -> None:
        owners: dict[str, str] = {}
        for page in pages:
            other = owners.get(page.permalink)
            if other is not None:
                raise PermalinkCollisionError(page.source_path, page.permalink, other)
            owners[page.permalink] = page.source_path
