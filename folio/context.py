"""Template context for Folio.

Templates never see pipeline objects directly. Each page render gets a
``PageContext`` whose fields are enumerated here, and
``PageContext.to_template()`` is the only place where they are turned into
plain dictionaries, lists and strings for Jinja2.

Variables available to every template:

- ``page``: the page being rendered (see ``page_view``)
- ``site``: title, url, description, language, data, recent posts,
  tag cloud, navigation
- ``listing``: pages shown by a listing page (empty otherwise)
- ``previous`` / ``next``: neighbouring posts (newer / older) or None
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from markupsafe import Markup

from .content import Page
from .site import Site


def _meta_value(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, tuple):
        return list(value)
    return value


def page_view(page: Page, site: Site) -> dict[str, Any]:
    """Serialize one page for templates."""
    return {
        "title": page.title,
        "url": page.url,
        "permalink": page.permalink,
        "date": page.date.isoformat(),
        "tags": [
            {"name": tag, "url": _tag_url(site, tag)} for tag in page.tags
        ],
        "kind": page.kind,
        "template": page.template,
        "source_path": page.source_path,
        "content": Markup(page.content),
        "excerpt": page.excerpt,
        "hash": page.content_hash,
        "meta": {key: _meta_value(value) for key, value in page.metadata.items()},
    }


def _tag_url(site: Site, tag: str) -> str:
    listing = site.tag_listing(tag)
    return listing.url if listing else ""


def _link(page: Page | None) -> dict[str, str] | None:
    if page is None:
        return None
    return {"title": page.title, "url": page.url, "date": page.date.isoformat()}


@dataclass(frozen=True)
class PageContext:
    """Everything a template may read while rendering one page."""

    page: Page
    site: Site

    @property
    def listing(self) -> list[Page]:
        pages = (self.site.get(path) for path in self.page.listing)
        return [p for p in pages if p is not None]

    @property
    def previous(self) -> Page | None:
        return self.site.neighbours(self.page)[0]

    @property
    def next(self) -> Page | None:
        return self.site.neighbours(self.page)[1]

    def site_view(self) -> dict[str, Any]:
        site = self.site
        config = site.config
        return {
            "title": config.title,
            "url": config.url,
            "description": config.description,
            "language": config.language,
            "data": dict(config.extra),
            "recent": [
                _link(p) for p in site.posts.latest(config.recent_posts)
            ],
            "tags": [
                {"name": tag, "url": _tag_url(site, tag), "count": len(pages)}
                for tag, pages in site.tags.items()
            ],
            "navigation": [_link(p) for p in site.pages.of_kind("page")],
        }

    def to_template(self) -> dict[str, Any]:
        """Serialize the context into template variables."""
        return {
            "page": page_view(self.page, self.site),
            "site": self.site_view(),
            "listing": [page_view(p, self.site) for p in self.listing],
            "previous": _link(self.previous),
            "next": _link(self.next),
        }
