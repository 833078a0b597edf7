"""Pipeline step functions: load, render, and assemble orchestration"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Union

from mdsite.config import Settings
from mdsite.core.assemble import build_index, write_site
from mdsite.core.layouts import load_layouts, resolve_layout
from mdsite.core.load import load_documents
from mdsite.core.models import BuildReport, Document, Layout, RenderedDocument
from mdsite.core.render import render_document
from mdsite.errors import RenderError


logger = logging.getLogger(__name__)


def run_load(settings: Settings, report: BuildReport) -> list[Document]:
    """Load every publishable document; parse failures are recorded on report.

    Raises MissingFileError when the source directory does not exist.
    """
    docs = []
    for doc in load_documents(Path(settings.source_dir), settings.default_layout, report.failures.append):
        if doc.draft and not settings.include_drafts:
            logger.info("Skipping draft %s", doc.path)
            continue
        docs.append(doc)
    logger.info("Loaded %d document(s) from %s", len(docs), settings.source_dir)
    return docs


def _render_one(
    doc: Document,
    layouts: dict[str, Layout],
    parser_config: str,
    site: dict[str, Any],
    ) -> Union[RenderedDocument, RenderError]:
    try:
        layout = resolve_layout(layouts, doc.layout, doc.slug)
        return render_document(doc, layout, parser_config, site)
    except RenderError as e:
        return e


def run_render(
    docs: list[Document],
    layouts: dict[str, Layout],
    settings: Settings,
    report: BuildReport,
    ) -> list[RenderedDocument]:
    """Render docs, in parallel when settings.workers > 1. Output keeps input order."""
    site = settings.site_context()
    args = (layouts, settings.parser_config, site)
    if settings.workers > 1 and len(docs) > 1:
        with ThreadPoolExecutor(max_workers=settings.workers) as pool:
            results = list(pool.map(lambda d: _render_one(d, *args), docs))
    else:
        results = [_render_one(d, *args) for d in docs]

    rendered = []
    for result in results:
        if isinstance(result, RenderError):
            logger.warning("Render failed: %s", result)
            report.failures.append(result)
        else:
            rendered.append(result)
    return rendered


def run_check(settings: Settings) -> tuple[BuildReport, list[RenderedDocument]]:
    """Load and render without writing. The report's index reflects what a build would publish."""
    report = BuildReport()
    layouts = load_layouts(Path(settings.layouts_dir) if settings.layouts_dir else None)
    docs = run_load(settings, report)
    rendered = run_render(docs, layouts, settings, report)
    report.index = build_index(rendered, settings.base_url)
    return report, rendered


def run_build(settings: Settings) -> BuildReport:
    """Run the full pipeline: load -> render -> assemble.

    Per-document failures are collected on the returned report. Only a missing
    source or layouts directory (MissingFileError) or an output root that
    cannot be created (WriteError) raise.
    """
    report = BuildReport()
    layouts = load_layouts(Path(settings.layouts_dir) if settings.layouts_dir else None)
    docs = run_load(settings, report)
    rendered = run_render(docs, layouts, settings, report)
    return write_site(
        rendered,
        Path(settings.output_dir),
        layouts["index"],
        site=settings.site_context(),
        tag_pages=settings.tag_pages,
        report=report,
    )
