from datetime import date

import pytest

from folio.collections import PageCollection, TagCollection
from folio.config import SiteConfig
from folio.content import Page, ProcessedDocument, RenderedContent, SourceDocument
from folio.errors import PermalinkCollisionError
from folio.hashing import content_hash
from folio.site import SiteBuilder


def processed(source_path, title, day, tags=(), draft=False, html=None, **extra):
    metadata = {"title": title, "date": day, "tags": tuple(tags), "draft": draft, **extra}
    html = html if html is not None else f"<p>{source_path}</p>\n"
    return ProcessedDocument(
        document=SourceDocument(source_path=source_path, body="", metadata=metadata),
        rendered=RenderedContent(html=html, excerpt=source_path),
        content_hash=content_hash(metadata, html),
    )


def page(source_path, day, tags=(), kind="post"):
    return Page(
        permalink=source_path.rsplit(".", 1)[0],
        title=source_path,
        date=day,
        tags=tuple(tags),
        kind=kind,
        template=kind,
        source_path=source_path,
    )


def test_page_collection_queries():
    pages = PageCollection(
        [
            page("a.md", date(2024, 1, 2), tags=["python"]),
            page("b.md", date(2024, 1, 3)),
            page("pages/c.md", date(2024, 1, 1), kind="page"),
        ]
    )
    assert len(pages) == 3
    assert [p.source_path for p in pages.of_kind("post")] == ["a.md", "b.md"]
    assert [p.source_path for p in pages.with_tag("python")] == ["a.md"]
    assert [p.source_path for p in pages.sorted()] == ["b.md", "a.md", "pages/c.md"]
    latest = pages.latest(1)
    assert isinstance(latest, PageCollection)
    assert [p.source_path for p in latest] == ["b.md"]
    assert isinstance(pages[1:], PageCollection)


def test_tag_collection_alphabetical_and_chronological():
    tags = TagCollection.from_pages(
        [
            page("old.md", date(2023, 1, 1), tags=["web", "python"]),
            page("new.md", date(2024, 1, 1), tags=["python"]),
        ]
    )
    assert list(tags) == ["python", "web"]
    assert [p.source_path for p in tags["python"]] == ["new.md", "old.md"]
    assert len(tags["web"]) == 1


def test_site_orders_newest_first_with_path_tiebreak():
    site = SiteBuilder().build(
        [
            processed("c.md", "C", date(2024, 1, 1)),
            processed("a.md", "A", date(2024, 1, 1)),
            processed("b.md", "B", date(2024, 2, 1)),
        ]
    )
    assert [p.source_path for p in site.posts] == ["b.md", "a.md", "c.md"]
    home = site.listings[0]
    assert home.permalink == ""
    assert home.kind == "listing"
    assert home.listing == ("b.md", "a.md", "c.md")
    assert home.date == date(2024, 2, 1)


def test_drafts_are_excluded_and_recorded():
    site = SiteBuilder().build(
        [
            processed("a.md", "A", date(2024, 1, 1)),
            processed("wip.md", "WIP", date(2024, 1, 2), tags=["secret"], draft=True),
        ]
    )
    assert site.drafts == ("wip.md",)
    assert [p.source_path for p in site.all_pages] == ["a.md", "<index>"]
    assert "secret" not in site.tags
    assert site.get("wip.md") is None


def test_pages_kind_and_templates():
    site = SiteBuilder(SiteConfig(page_dirs=("pages",))).build(
        [
            processed("pages/about.md", "About", date(2024, 1, 1)),
            processed("post.md", "Post", date(2024, 1, 1)),
            processed("custom.md", "Custom", date(2023, 1, 1), template="special"),
        ]
    )
    about = site.get("pages/about.md")
    assert about.kind == "page"
    assert about.template == "page"
    assert site.get("post.md").template == "post"
    assert site.get("custom.md").template == "special"
    assert [p.source_path for p in site.posts] == ["post.md", "custom.md"]
    assert site.neighbours(about) == (None, None)


def test_tag_listings_and_neighbours():
    site = SiteBuilder().build(
        [
            processed("one.md", "One", date(2024, 1, 1), tags=["Python"]),
            processed("two.md", "Two", date(2024, 1, 2), tags=["Python", "Web Dev"]),
            processed("three.md", "Three", date(2024, 1, 3)),
        ]
    )
    listing = site.tag_listing("Web Dev")
    assert listing.permalink == "tags/web-dev"
    assert listing.listing == ("two.md",)
    assert site.tag_listing("Python").listing == ("two.md", "one.md")
    two = site.get("two.md")
    newer, older = site.neighbours(two)
    assert newer.source_path == "three.md"
    assert older.source_path == "one.md"
    assert site.neighbours(site.get("three.md"))[0] is None


def test_identical_titles_get_distinct_permalinks():
    site = SiteBuilder().build(
        [
            processed("a.md", "Hello", date(2024, 1, 1), html="<h1>Hi</h1>\n"),
            processed("b.md", "Hello", date(2024, 1, 2), html="<h1>Hi</h1>\n"),
        ]
    )
    permalinks = {p.permalink for p in site.pages}
    assert len(permalinks) == 2
    assert all(p.startswith("hello-") for p in permalinks)


def test_page_clashing_with_listing_is_fatal():
    with pytest.raises(PermalinkCollisionError):
        SiteBuilder().build(
            [
                processed("a.md", "A", date(2024, 1, 1), tags=["news"]),
                processed("b.md", "B", date(2024, 1, 1), slug="tags/news"),
            ]
        )


def test_tags_differing_only_in_case_collide():
    with pytest.raises(PermalinkCollisionError):
        SiteBuilder().build(
            [
                processed("a.md", "A", date(2024, 1, 1), tags=["Python"]),
                processed("b.md", "B", date(2024, 1, 1), tags=["python"]),
            ]
        )
