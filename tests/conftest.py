"""Root test configuration: environment isolation and source-document helpers"""

import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop MDSITE_* variables so a developer's shell cannot leak into settings."""
    for name in list(os.environ):
        if name.startswith("MDSITE_"):
            monkeypatch.delenv(name)


@pytest.fixture(name="write_doc")
def write_doc_fixture(tmp_path):
    """Return a helper that writes a front-matter document under tmp_path/content."""
    content = tmp_path / "content"

    def _write(name: str, title: str = None, date: str = "2026-01-15", body: str = "Body.\n", **extra) -> Path:
        lines = ["---"]
        if title is not None:
            lines.append(f"title: {title}")
        if date is not None:
            lines.append(f"date: {date}")
        lines.extend(f"{k}: {v}" for k, v in extra.items())
        lines.append("---")
        path = content / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n\n" + body, encoding="utf-8")
        return path

    content.mkdir(exist_ok=True)
    return _write
