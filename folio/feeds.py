"""Feed generation for Folio.

This module generates syndication and indexing feeds (RSS 2.0,
sitemap.xml) from the Site. Feeds are only produced when the site config
has a ``url``, because both formats need absolute links.

Output is deterministic: dates come from page front-matter, never from the
clock, so rebuilding unchanged sources yields identical bytes.

Classes:
    FeedGenerator: Base class for feed generators.
    SitemapGenerator: Generates sitemap.xml.
    RSSGenerator: Generates rss.xml.
    FeedRegistry: Runs a set of generators.

Functions:
    create_default_feed_registry: Create a registry with default generators.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from .html_utils import escape_html, join_root_url
from .site import Site

RSS_DATE_FORMAT = "%a, %d %b %Y 00:00:00 +0000"


def _rss_date(value: date) -> str:
    return value.strftime(RSS_DATE_FORMAT)


class FeedGenerator(ABC):
    """Abstract base class for feed generators."""

    @property
    @abstractmethod
    def filename(self) -> str:
        """Return the output filename for this feed."""
        ...

    @abstractmethod
    def generate(self, site: Site) -> str | None:
        """Generate feed content.

        Args:
            site: The complete site.

        Returns:
            Feed content, or None if the feed cannot be generated (e.g.,
            missing base URL).
        """
        ...


class SitemapGenerator(FeedGenerator):
    """Generates sitemap.xml listing every page and listing."""

    @property
    def filename(self) -> str:
        return "sitemap.xml"

    def generate(self, site: Site) -> str | None:
        base_url = site.config.url.rstrip("/")
        if not base_url:
            return None

        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
        ]
        for page in site.all_pages:
            full_url = escape_html(join_root_url(base_url, page.url))
            lastmod = page.date.isoformat()
            lines.append(
                f"  <url><loc>{full_url}</loc><lastmod>{lastmod}</lastmod></url>"
            )
        lines.append("</urlset>")
        return "\n".join(lines) + "\n"


class RSSGenerator(FeedGenerator):
    """Generates an RSS 2.0 feed of posts, newest first.

    Uses ``title`` and ``description`` from the site config for the
    channel, and each post's excerpt as its description.
    """

    @property
    def filename(self) -> str:
        return "rss.xml"

    def generate(self, site: Site) -> str | None:
        config = site.config
        base_url = config.url.rstrip("/")
        if not base_url:
            return None

        items = []
        for page in site.posts:
            link = escape_html(join_root_url(base_url, page.url))
            description = escape_html(page.excerpt or page.title)
            items.append(
                f"<item><title>{escape_html(page.title)}</title><link>{link}</link>"
                f'<guid isPermaLink="true">{link}</guid>'
                f"<description>{description}</description>"
                f"<pubDate>{_rss_date(page.date)}</pubDate></item>"
            )

        rss = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0"><channel>',
            f"<title>{escape_html(config.title)}</title>",
            f"<link>{escape_html(base_url)}/</link>",
            f"<description>{escape_html(config.description or config.title)}</description>",
            f"<language>{escape_html(config.language)}</language>",
        ]
        if site.posts:
            rss.append(f"<lastBuildDate>{_rss_date(site.posts[0].date)}</lastBuildDate>")
        rss.extend(items)
        rss.append("</channel></rss>")
        return "\n".join(rss) + "\n"


class FeedRegistry:
    """Registry for managing feed generators.

    Attributes:
        _generators: List of registered feed generators.
    """

    def __init__(self) -> None:
        self._generators: list[FeedGenerator] = []

    def register(self, generator: FeedGenerator) -> None:
        self._generators.append(generator)

    def generate_all(self, site: Site) -> dict[str, bytes]:
        """Generate all registered feeds.

        Args:
            site: The complete site.

        Returns:
            Mapping of output filename to feed bytes, skipping feeds that
            could not be generated.
        """
        generated: dict[str, bytes] = {}
        for generator in self._generators:
            content = generator.generate(site)
            if content is not None:
                generated[generator.filename] = content.encode("utf-8")
        return generated


def create_default_feed_registry() -> FeedRegistry:
    """Create a registry with the sitemap and RSS generators."""
    registry = FeedRegistry()
    registry.register(SitemapGenerator())
    registry.register(RSSGenerator())
    return registry
