"""Write rendered pages, the site index, and optional tag pages to the output directory"""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from markupsafe import Markup

from mdsite.core.layouts import SITE_DEFAULTS, compile_layout, listing_template
from mdsite.core.models import BuildReport, Document, IndexEntry, Layout, RenderedDocument, SiteIndex
from mdsite.core.utils.hashing import file_sha256, sha256
from mdsite.core.utils.slug import slugify
from mdsite.errors import PublishError, RenderError, WriteError


logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"


def destination(doc: Document) -> str:
    """Output path for doc relative to the output root: YYYY/MM/DD/<slug>/index.html."""
    return f"{doc.date:%Y/%m/%d}/{doc.slug}/{INDEX_FILE}"


def page_url(dest: str, base_url: str = "/") -> str:
    """Public URL for a destination path; directory indexes collapse to a trailing slash."""
    path = dest[:-len(INDEX_FILE)] if dest.endswith(INDEX_FILE) else dest
    return f"{base_url.rstrip('/')}/{path}"


def _sort_key(date: datetime) -> float:
    """Comparable timestamp; naive datetimes are read as UTC."""
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return date.timestamp()


def build_index(rendered: Iterable[RenderedDocument], base_url: str = "/") -> SiteIndex:
    """Return one entry per document, newest first; equal dates fall back to slug order."""
    docs = sorted(rendered, key=lambda r: r.slug)
    docs.sort(key=lambda r: _sort_key(r.date), reverse=True)
    return SiteIndex(entries=[
        IndexEntry(title=r.title, date=r.date, slug=r.slug, url=page_url(r.dest, base_url))
        for r in docs
    ])


def render_listing(
    index: SiteIndex,
    layout: Layout,
    title: str,
    site: dict[str, Any] = None,
    ) -> str:
    """Render an index (site-wide or per tag) through the index layout."""
    site = {**SITE_DEFAULTS, **(site or {})}
    listing = listing_template()
    template = compile_layout(layout, INDEX_FILE)
    try:
        content = Markup(listing.render(entries=index.entries))
        return template.render(content=content, entries=index.entries, page={"title": title}, site=site)
    except Exception as e:
        raise RenderError(f"rendering with layout '{layout.name}' failed: {e}", title) from e


def write_file(path: Path, content: str) -> bool:
    """Write content to path unless the file already holds identical bytes. Returns True if written."""
    if file_sha256(path) == sha256(content):
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content.encode("utf-8"))
    return True


def _write(report: BuildReport, output_dir: Path, rel: str, content: str, ident: str) -> bool:
    """Write one artifact, recording the outcome on report. Returns False on failure."""
    path = output_dir / rel
    try:
        changed = write_file(path, content)
    except OSError as e:
        report.failures.append(WriteError(f"cannot write {path}: {e}", ident))
        logger.error("Write failed for %s: %s", ident, e)
        return False
    (report.written if changed else report.skipped).append(path)
    return True


def write_site(
    rendered: Iterable[RenderedDocument],
    output_dir: Path,
    index_layout: Layout,
    site: dict[str, Any] = None,
    tag_pages: bool = False,
    report: BuildReport = None,
    ) -> BuildReport:
    """Write each rendered page, then the index built from the pages that were written.

    Pages left over from earlier runs are removed afterwards.
    Per-document failures are appended to report.failures and do not stop the
    batch. Raises WriteError only when output_dir itself cannot be created.
    """
    site = site or {}
    report = report if report is not None else BuildReport()
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteError(f"cannot create output directory: {e}", output_dir) from e

    claimed: dict[str, str] = {}
    published: list[RenderedDocument] = []
    for doc in rendered:
        if doc.dest in claimed:
            report.failures.append(
                WriteError(f"destination {doc.dest} already written for '{claimed[doc.dest]}'", doc.slug)
            )
            continue
        claimed[doc.dest] = doc.slug
        if _write(report, output_dir, doc.dest, doc.html, doc.slug):
            published.append(doc)

    base_url = site.get("base_url", "/")
    report.index = build_index(published, base_url)
    try:
        html = render_listing(report.index, index_layout, site.get("title", "Index"), site)
    except PublishError as e:
        report.failures.append(e)
    else:
        if _write(report, output_dir, INDEX_FILE, html, INDEX_FILE):
            report.index_path = output_dir / INDEX_FILE

    if tag_pages:
        _write_tag_pages(report, published, output_dir, index_layout, site)

    report.removed = prune_stale(output_dir, set(report.written) | set(report.skipped))

    logger.info(
        "Wrote %d file(s), %d unchanged, %d removed, %d failure(s)",
        len(report.written), len(report.skipped), len(report.removed), len(report.failures),
    )
    return report


def _write_tag_pages(
    report: BuildReport,
    published: list[RenderedDocument],
    output_dir: Path,
    index_layout: Layout,
    site: dict[str, Any],
    ) -> None:
    by_tag: dict[str, list[RenderedDocument]] = defaultdict(list)
    names: dict[str, str] = {}
    for doc in published:
        for tag in sorted(doc.tags):
            key = slugify(tag)
            if not key:
                continue
            names.setdefault(key, tag)
            if doc not in by_tag[key]:
                by_tag[key].append(doc)

    base_url = site.get("base_url", "/")
    for key in sorted(by_tag):
        rel = f"tags/{key}/{INDEX_FILE}"
        try:
            html = render_listing(
                build_index(by_tag[key], base_url), index_layout, f"Tagged '{names[key]}'", site
            )
        except PublishError as e:
            report.failures.append(e)
            continue
        _write(report, output_dir, rel, html, rel)


def prune_stale(output_dir: Path, keep: set[Path]) -> list[Path]:
    """Delete *.html files under output_dir not in keep, then any directories left empty.

    Returns the removed files. A file that cannot be removed is logged and left in place.
    """
    removed = []
    for path in sorted(output_dir.rglob("*.html")):
        if path in keep or not path.is_file():
            continue
        try:
            path.unlink()
        except OSError as e:
            logger.warning("Cannot remove stale page %s: %s", path, e)
            continue
        logger.info("Removed stale page %s", path)
        removed.append(path)

    for folder in sorted((p for p in output_dir.rglob("*") if p.is_dir()), reverse=True):
        if not any(folder.iterdir()):
            try:
                folder.rmdir()
            except OSError as e:
                logger.warning("Cannot remove empty directory %s: %s", folder, e)
    return removed
