"""Site building functionality for Folio.

This module wires the pipeline stages together:

1. Load, render and hash every document (parallel, one task per file).
2. Build the Site graph (single-threaded barrier).
3. Render every page through its template (parallel).
4. Write pages, feeds, archive copies and static assets (atomic swap).

Every stage returns its own ``BuildReport``; reports are merged at the
barriers and handed back in the final ``BuildResult``. Nothing is kept in
module-level state.

Key functions:
- build_site: Main function to build the entire site.
- process_document: Load, render and hash a single source file.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .config import SiteConfig, load_config
from .content import DocumentLoader, ProcessedDocument
from .errors import FolioError
from .feeds import create_default_feed_registry
from .hashing import content_hash, output_digest
from .renderers import MarkdownRenderer
from .site import Site, SiteBuilder
from .templates import RenderedPage, TemplateEngine
from .writer import OutputWriter, WriteSummary, collect_assets

logger = logging.getLogger(__name__)

ARCHIVE_DIR = "permalink"
STATIC_DIR = "static"

DocumentOutcome = Union[ProcessedDocument, FolioError]


@dataclass(frozen=True)
class ErrorRecord:
    """One line of the build summary's error list."""

    source_path: str
    kind: str
    message: str

    @classmethod
    def from_error(cls, error: FolioError) -> ErrorRecord:
        return cls(
            source_path=error.source_path.as_posix(),
            kind=error.kind,
            message=error.message,
        )

    def __str__(self) -> str:
        return f"{self.source_path}: {self.kind}: {self.message}"


@dataclass(frozen=True)
class BuildReport:
    """Counters and collected errors of a build stage.

    Reports are values: ``merge`` returns a new report and never mutates
    either side.
    """

    pages: int = 0
    drafts: int = 0
    unchanged: int = 0
    errors: tuple[ErrorRecord, ...] = ()

    def merge(self, other: BuildReport) -> BuildReport:
        return BuildReport(
            pages=self.pages + other.pages,
            drafts=self.drafts + other.drafts,
            unchanged=self.unchanged + other.unchanged,
            errors=self.errors + other.errors,
        )

    @property
    def ok(self) -> bool:
        return not self.errors

    def count_lines(self) -> list[str]:
        lines = [
            f"{self.pages} page(s) written",
            f"{self.drafts} draft(s) skipped",
        ]
        if self.unchanged:
            lines.append(f"{self.unchanged} page(s) unchanged since the previous build")
        return lines

    def summary_lines(self) -> list[str]:
        return self.count_lines() + [str(error) for error in self.errors]


@dataclass(frozen=True)
class BuildResult:
    """Result of a site build.

    Attributes:
        site: The site graph that was rendered.
        report: Merged report of every stage.
        output: Summary of the write, or None if nothing was written.
    """

    site: Site
    report: BuildReport
    output: WriteSummary | None = None

    @property
    def output_dir(self) -> Path | None:
        return self.output.output_dir if self.output else None


def process_document(
    loader: DocumentLoader, renderer: MarkdownRenderer, path: Path
) -> ProcessedDocument:
    """Load, render and hash one document.

    Raises:
        EncodingError, MalformedFrontMatterError, MissingRequiredFieldError:
            The document cannot be loaded.
    """
    document = loader.load(path)
    rendered = renderer.render(document.body)
    digest = content_hash(document.metadata, rendered.html)
    return ProcessedDocument(document=document, rendered=rendered, content_hash=digest)


def _outcome(
    loader: DocumentLoader, renderer: MarkdownRenderer, path: Path
) -> DocumentOutcome:
    try:
        return process_document(loader, renderer, path)
    except FolioError as exc:
        return exc


def process_documents(
    loader: DocumentLoader,
    renderer: MarkdownRenderer,
    workers: int | None = None,
) -> list[DocumentOutcome]:
    """Fan out per-document work and collect the outcomes in path order."""
    paths = loader.iter_paths()
    if workers == 1 or len(paths) <= 1:
        return [_outcome(loader, renderer, path) for path in paths]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(lambda p: _outcome(loader, renderer, p), paths))


def _collect(outcomes: Iterable, strict: bool) -> tuple[list, BuildReport]:
    """Split outcomes into successes and a report of failures.

    Raises the first error in strict mode, and fatal errors in any mode.
    """
    values = []
    errors: list[ErrorRecord] = []
    for outcome in outcomes:
        if isinstance(outcome, FolioError):
            if strict or outcome.fatal:
                raise outcome
            logger.warning("%s", outcome)
            errors.append(ErrorRecord.from_error(outcome))
        else:
            values.append(outcome)
    return values, BuildReport(errors=tuple(errors))


def build_site(
    source_root: Path,
    template_root: Path,
    output_root: Path,
    *,
    strict: bool | None = None,
    config: SiteConfig | None = None,
    config_path: Path | None = None,
    clean: bool | None = None,
    workers: int | None = None,
) -> BuildResult:
    """Build the entire static site.

    Args:
        source_root: Directory of Markdown sources.
        template_root: Directory of Jinja2 templates (and ``static/``).
        output_root: Directory the site is written to.
        strict: Abort on the first error. Defaults to the config value.
        config: Settings; loaded from ``folio.yaml`` when omitted.
        config_path: Explicit config file, used when ``config`` is omitted.
        clean: Replace instead of merging the previous output. Defaults to
            the config value.
        workers: Thread count for the parallel stages.

    Returns:
        BuildResult with the site, the merged report and the write summary.

    Raises:
        FileNotFoundError: The source or template root does not exist.
        FolioError: In strict mode, the first error; in any mode, fatal
            errors (permalink collisions, write failures). Nothing is
            written when an error is raised.
    """
    source_root = Path(source_root)
    template_root = Path(template_root)
    output_root = Path(output_root)
    for required in (source_root, template_root):
        if not required.is_dir():
            raise FileNotFoundError(f"Expected directory at {required}")

    config = config or load_config(source_root, config_path)
    strict = config.strict if strict is None else strict
    clean = config.clean if clean is None else clean
    workers = workers or config.workers

    loader = DocumentLoader(source_root, config.extensions)
    renderer = MarkdownRenderer(
        allow_raw_html=config.allow_raw_html,
        excerpt_length=config.excerpt_length,
    )
    documents, report = _collect(process_documents(loader, renderer, workers), strict)

    site = SiteBuilder(config).build(documents)
    report = report.merge(BuildReport(drafts=len(site.drafts)))

    engine = TemplateEngine(template_root)
    rendered, render_report = _collect(
        engine.render_pages(site, workers=workers), strict
    )
    report = report.merge(render_report)

    files = _output_files(site, rendered)
    static_dir = template_root / STATIC_DIR
    if config.static_dir:
        static_dir = source_root / config.static_dir
    writer = OutputWriter(
        output_root,
        clean=clean,
        workers=workers,
        protected=(source_root, template_root),
    )
    summary = writer.write(files, collect_assets(static_dir))
    page_paths = {page.output_path for page in rendered}
    report = report.merge(
        BuildReport(
            pages=len(rendered),
            unchanged=len(page_paths.intersection(summary.unchanged)),
        )
    )
    logger.info("Built %d pages into %s", len(rendered), output_root)
    return BuildResult(site=site, report=report, output=summary)


def _output_files(site: Site, rendered: list[RenderedPage]) -> dict[str, bytes]:
    files = {page.output_path: page.data for page in rendered}
    if site.config.feeds:
        files.update(create_default_feed_registry().generate_all(site))
    if site.config.archive:
        for page in rendered:
            files[f"{ARCHIVE_DIR}/{output_digest(page.data)}.html"] = page.data
    return files

