"""End-to-end properties of a site build.

The fixture site mixes the cases a real blog run meets:

    content/
        either.md        valid, 2026-02-01, tags fp + errors
        di-pitfalls.html valid HTML source, 2025-11-20
        notes/todo.md    valid, 2026-02-01 (same day as either.md)
        broken.md        malformed date -> ParseError, excluded
"""

import pytest

from mdsite.config import Settings
from mdsite.core.pipeline import run_build
from mdsite.core.render import read_page_meta
from mdsite.errors import ParseError


@pytest.fixture(name="site")
def site_fixture(tmp_path, write_doc):
    write_doc("either.md", title="Errors as Values", date="2026-02-01", tags="[fp, errors]",
              body="Prefer `Either` over exceptions.\n")
    write_doc("di-pitfalls.html", title="DI Pitfalls", date="2025-11-20",
              body="<p>Containers hide <em>coupling</em>.</p>\n")
    write_doc("notes/todo.md", title="Todo", date="2026-02-01")
    write_doc("broken.md", title="Broken", date="2026-02-30x")
    return Settings(source_dir=str(tmp_path / "content"), output_dir=str(tmp_path / "site"), tag_pages=True)


def _snapshot(root):
    return {p.relative_to(root).as_posix(): p.read_bytes() for p in sorted(root.rglob("*")) if p.is_file()}


def test_index_has_one_entry_per_published_doc(site):
    report = run_build(site)
    assert [e.slug for e in report.index.entries] == ["errors-as-values", "todo", "di-pitfalls"]


def test_malformed_date_is_reported_not_fatal(site):
    report = run_build(site)
    assert len(report.failures) == 1
    failure = report.failures[0]
    assert isinstance(failure, ParseError)
    assert failure.ident == "broken.md"
    assert "broken" not in [e.slug for e in report.index.entries]


def test_metadata_survives_rendering(site, tmp_path):
    run_build(site)
    meta = read_page_meta((tmp_path / "site/2026/02/01/errors-as-values/index.html").read_text())
    assert meta["title"] == "Errors as Values"
    assert meta["date"].isoformat() == "2026-02-01T00:00:00"


def test_html_source_passes_through(site, tmp_path):
    run_build(site)
    html = (tmp_path / "site/2025/11/20/di-pitfalls/index.html").read_text()
    assert "<p>Containers hide <em>coupling</em>.</p>" in html


def test_rebuild_is_byte_identical(site, tmp_path):
    run_build(site)
    first = _snapshot(tmp_path / "site")
    report = run_build(site)
    assert _snapshot(tmp_path / "site") == first
    assert report.written == []


def test_empty_source_builds_empty_index(tmp_path):
    (tmp_path / "empty").mkdir()
    report = run_build(Settings(source_dir=str(tmp_path / "empty"), output_dir=str(tmp_path / "site")))
    assert report.ok
    assert len(report.index) == 0
    assert (tmp_path / "site" / "index.html").exists()


def test_failed_document_page_is_removed_on_rebuild(site, tmp_path, write_doc):
    """A document that stops parsing drops out of the index and its old page is deleted."""
    page = tmp_path / "site/2025/11/20/di-pitfalls/index.html"
    run_build(site)
    assert page.exists()

    write_doc("di-pitfalls.html", title="DI Pitfalls", date="2025-11-20x")
    report = run_build(site)
    assert "di-pitfalls" not in [e.slug for e in report.index.entries]
    assert not page.exists()
    assert not (tmp_path / "site/2025").exists()
    assert page in report.removed
