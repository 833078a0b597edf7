"""CLI command implementations"""

from datetime import date
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdsite.config import CONFIG_FILE, Settings, load_config
from mdsite.core.layouts import DEFAULT_LAYOUT, INDEX_LAYOUT
from mdsite.core.models import BuildReport
from mdsite.core.pipeline import run_build, run_check
from mdsite.errors import PublishError
from mdsite.logs import setup_logging


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    setup_logging(settings.log_level)
    return settings


def _echo_failures(report: BuildReport) -> None:
    """Print one line per failed document to stderr."""
    if not report.failures:
        return
    typer.echo(f"{len(report.failures)} failure(s):", err=True)
    for e in report.failures:
        typer.echo(f"  {e.kind}: {e}", err=True)


def build_cmd(
    source: Annotated[Optional[str], typer.Argument(help="Directory of source documents")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    layouts: Annotated[Optional[str], typer.Option("--layouts-dir", help="Directory of *.html layouts")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    workers: Annotated[Optional[int], typer.Option("--workers", help="Render threads")] = None,
    drafts: Annotated[Optional[bool], typer.Option("--drafts/--no-drafts", help="Publish draft documents")] = None,
    tags: Annotated[Optional[bool], typer.Option("--tag-pages/--no-tag-pages", help="Write one page per tag")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log progress at INFO level")] = False,
    ):
    """Run the full pipeline: load -> render -> write pages and index."""
    settings = _settings(overrides={
        "source_dir": source, "output_dir": out, "layouts_dir": layouts, "parser_config": parser,
        "workers": workers,
        "include_drafts": drafts, "tag_pages": tags, "log_level": "INFO" if verbose else None,
    })
    try:
        report = run_build(settings)
    except PublishError as e:
        _fail("Build failed", e)

    for path in report.written:
        typer.echo(f"  wrote {path}")
    typer.echo(
        f"Build complete - "
        f"{len(report.index)} indexed, "
        f"{len(report.written)} written, "
        f"{len(report.skipped)} unchanged, "
        f"{len(report.removed)} removed, "
        f"{len(report.failures)} failed"
    )
    _echo_failures(report)
    if not report.ok:
        raise typer.Exit(1)


def check_cmd(
    source: Annotated[Optional[str], typer.Argument(help="Directory of source documents")] = None,
    layouts: Annotated[Optional[str], typer.Option("--layouts-dir", help="Directory of *.html layouts")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Load and render every document without writing anything."""
    settings = _settings(overrides={"source_dir": source, "layouts_dir": layouts, "parser_config": parser})
    try:
        report, rendered = run_check(settings)
    except PublishError as e:
        _fail("Check failed", e)
    typer.echo(f"{len(rendered)} document(s) render cleanly")
    _echo_failures(report)
    if not report.ok:
        raise typer.Exit(1)


def list_cmd(
    source: Annotated[Optional[str], typer.Argument(help="Directory of source documents")] = None,
    ):
    """List publishable documents in index order (newest first); exits 1 if any fail to load or render."""
    settings = _settings(overrides={"source_dir": source})
    try:
        report, _ = run_check(settings)
    except PublishError as e:
        _fail("List failed", e)
    if not report.index.entries:
        typer.echo("No documents found.")
        raise typer.Exit(1)
    for entry in report.index.entries:
        typer.echo(f"{entry.date:%Y-%m-%d}  {entry.slug}  {entry.title}")
    _echo_failures(report)
    if not report.ok:
        raise typer.Exit(1)


def init_cmd(
    path: Annotated[str, typer.Argument(help="Project directory to scaffold")] = ".",
    ):
    """Create config.yaml, a sample document, and editable copies of the built-in layouts."""
    root = Path(path)
    files = {
        root / CONFIG_FILE: "site_title: My Site\nsource_dir: content\noutput_dir: site\nlayouts_dir: layouts\n",
        root / "content" / "hello-world.md": (
            f"---\ntitle: Hello World\ndate: {date.today().isoformat()}\ntags: [meta]\n---\n\n"
            "First post.\n"
        ),
        root / "layouts" / "default.html": DEFAULT_LAYOUT,
        root / "layouts" / "index.html": INDEX_LAYOUT,
    }
    for file, text in files.items():
        if file.exists():
            typer.echo(f"  exists: {file}")
            continue
        file.parent.mkdir(parents=True, exist_ok=True)
        file.write_text(text, encoding="utf-8")
        typer.echo(f"  created: {file}")
    typer.echo(f"Site initialized at: {root}")
