"""Data models passed between the load, render, and assemble stages"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from mdsite.errors import PublishError


class Document(BaseModel):
    """A loaded source document; immutable once built."""
    model_config = ConfigDict(frozen=True)

    slug:    str
    title:   str
    date:    datetime
    tags:    frozenset[str] = frozenset()
    body:    str
    layout:  str = "default"
    path:    str                            # relative to the source root
    fmt:     str = Field(default="markdown", pattern="^(markdown|html)$")
    draft:   bool = False
    summary: Optional[str] = None
    extra:   dict[str, Any] = {}            # front-matter keys not modelled above


class RenderedDocument(BaseModel):
    """Final HTML for one document plus the fields the index needs."""
    model_config = ConfigDict(frozen=True)

    slug:    str
    title:   str
    date:    datetime
    tags:    frozenset[str] = frozenset()
    summary: Optional[str] = None
    dest:    str                            # relative to the output root, posix separators
    html:    str


class IndexEntry(BaseModel):
    title: str
    date:  datetime
    slug:  str
    url:   str


class SiteIndex(BaseModel):
    """Document summaries ordered newest first."""
    entries: list[IndexEntry] = []

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class Layout:
    """A named template source; `content` is its insertion point."""
    name:   str
    source: str
    path:   Optional[Path] = None           # None for built-in layouts


@dataclass
class BuildReport:
    """Outcome of a pipeline run; failures never abort the remaining batch."""
    written:  list[Path] = field(default_factory=list)
    skipped:  list[Path] = field(default_factory=list)      # unchanged on disk
    removed:  list[Path] = field(default_factory=list)      # stale pages from earlier runs
    failures: list[PublishError] = field(default_factory=list)
    index:    SiteIndex = field(default_factory=SiteIndex)
    index_path: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return not self.failures
