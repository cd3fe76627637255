"""Template rendering engine for Folio.

This module uses Jinja2 to bind a page and the site-wide context into a
template and produce the final page bytes.

Key class:
- TemplateEngine: Resolves templates and renders pages, in parallel.

Template resolution: a page's ``template`` front-matter value, or the
default for its kind (``post``, ``page``, ``listing``). For a name ``n`` the
files ``n.html.jinja``, ``n.jinja``, ``n.html`` and ``n`` are tried in order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateNotFound,
    TemplateSyntaxError,
    select_autoescape,
)

from .content import Page
from .context import PageContext
from .errors import FolioError, TemplateNotFoundError, TemplateRenderError
from .site import Site

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIXES = (".html.jinja", ".jinja", ".html", "")


@dataclass(frozen=True)
class RenderedPage:
    """Final bytes of one page."""

    page: Page
    data: bytes

    @property
    def output_path(self) -> str:
        return self.page.output_path


RenderOutcome = Union[RenderedPage, FolioError]


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TypeError":
        return f"Type error: {error_msg}"
    if error_type == "AttributeError":
        return f"Attribute error: {error_msg}"

    return f"{error_type}: {error_msg}"


class TemplateEngine:
    """Template rendering engine using Jinja2.

    The environment is shared by all render threads; Jinja2 templates are
    safe to render concurrently once loaded.

    Attributes:
        template_root: Directory containing templates.
        env: Jinja2 environment.
    """

    def __init__(self, template_root: Path, strict_undefined: bool = True):
        """Initialize the template engine.

        Args:
            template_root: Directory with templates.
            strict_undefined: Raise on access to undefined variables instead
                of rendering them as empty strings.
        """
        self.template_root = Path(template_root)
        options = {"undefined": StrictUndefined} if strict_undefined else {}
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_root)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            keep_trailing_newline=True,
            **options,
        )

    def resolve(self, page: Page) -> Template:
        """Find the template for a page.

        Raises:
            TemplateNotFoundError: No candidate file exists.
            TemplateRenderError: The template has a syntax error.
        """
        name = page.template
        for suffix in TEMPLATE_SUFFIXES:
            candidate = f"{name}{suffix}"
            try:
                return self.env.get_template(candidate)
            except TemplateNotFound:
                continue
            except TemplateSyntaxError as exc:
                raise TemplateRenderError(
                    page.source_path,
                    name,
                    f"Template syntax error on line {exc.lineno}: {exc.message}",
                    exc,
                ) from exc
        raise TemplateNotFoundError(page.source_path, name)

    def render_page(self, page: Page, site: Site) -> RenderedPage:
        """Render one page with its template.

        Args:
            page: Page to render.
            site: The complete site, read-only.

        Returns:
            The rendered page bytes (UTF-8).

        Raises:
            TemplateNotFoundError: The page's template (or a template it
                includes) does not exist.
            TemplateRenderError: The template failed while executing.
        """
        template = self.resolve(page)
        context = PageContext(page=page, site=site).to_template()
        try:
            html = template.render(**context)
        except TemplateNotFound as exc:
            raise TemplateNotFoundError(page.source_path, exc.name or page.template, exc) from exc
        except TemplateSyntaxError as exc:
            raise TemplateRenderError(
                page.source_path,
                page.template,
                f"Template syntax error on line {exc.lineno}: {exc.message}",
                exc,
            ) from exc
        except Exception as exc:
            raise TemplateRenderError(
                page.source_path, page.template, _format_error_message(exc), exc
            ) from exc
        logger.debug("Rendered %s with %s", page.source_path, page.template)
        return RenderedPage(page=page, data=html.encode("utf-8"))

    def _render_outcome(self, page: Page, site: Site) -> RenderOutcome:
        try:
            return self.render_page(page, site)
        except FolioError as exc:
            return exc

    def render_pages(
        self,
        site: Site,
        pages: Iterable[Page] | None = None,
        workers: int | None = None,
    ) -> list[RenderOutcome]:
        """Render pages in parallel.

        Args:
            site: The complete site.
            pages: Pages to render; defaults to every page of the site.
            workers: Maximum number of render threads.

        Returns:
            One outcome per page, in input order: a RenderedPage, or the
            FolioError that page failed with.
        """
        targets = list(site.all_pages if pages is None else pages)
        if workers == 1 or len(targets) <= 1:
            return [self._render_outcome(page, site) for page in targets]
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(lambda p: self._render_outcome(p, site), targets))
