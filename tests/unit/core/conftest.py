"""Shared fixtures for core unit tests"""

from datetime import datetime

import pytest

from mdsite.core.models import Document


@pytest.fixture(name="make_doc")
def make_doc_fixture():
    """Return a factory for in-memory Documents with sensible defaults."""
    def _make(slug="hello", title="Hello", date=datetime(2026, 1, 15), **kwargs) -> Document:
        kwargs.setdefault("body", "# Hello\n\nWorld.\n")
        kwargs.setdefault("path", f"{slug}.md")
        return Document(slug=slug, title=title, date=date, **kwargs)
    return _make
