"""File discovery, frontmatter extraction, and Document construction"""

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

import yaml

from mdsite.core.models import Document
from mdsite.core.utils.slug import slugify
from mdsite.errors import MissingFileError, ParseError, PublishError


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r'^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)', re.DOTALL)
FORMATS = {'.md': 'markdown', '.markdown': 'markdown', '.html': 'html'}
KNOWN_KEYS = {'title', 'date', 'slug', 'tags', 'layout', 'draft', 'summary'}


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with the YAML header removed.

    Raises ValueError for invalid YAML or a header that is not a mapping.
    """
    m = FRONTMATTER_RE.match(text)
    if not m:
        return {}, text
    try:
        fm = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML frontmatter: {e}") from e
    if not isinstance(fm, dict):
        raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
    return fm, text[m.end():].lstrip('\n')


def parse_date(value: Any) -> datetime:
    """Coerce a YAML date, datetime, or ISO-8601 string to a datetime."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        return datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    raise ValueError(f"unsupported date value {value!r}")


def _parse_tags(value: Any) -> frozenset[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        items = value.split(',')
    elif isinstance(value, (list, tuple, set)):
        items = list(value)
    else:
        raise ValueError(f"tags must be a list or comma-separated string, got {type(value).__name__}")
    tags = set()
    for item in items:
        if not isinstance(item, str):
            raise ValueError(f"tag {item!r} is not a string")
        if item.strip():
            tags.add(item.strip())
    return frozenset(tags)


def discover_files(path: Path) -> list[Path]:
    """Return sorted supported files under path, or [path] if a single supported file."""
    if not path.exists():
        raise MissingFileError("source location does not exist", path)
    if path.is_file():
        return [path] if path.suffix.lower() in FORMATS else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix.lower() in FORMATS)


def parse_document(path: Path, root: Path, default_layout: str = 'default') -> Document:
    """Read a single source file into a Document.

    Raises MissingFileError when the file cannot be read and ParseError when
    its frontmatter is malformed or lacks a title or a valid date.
    """
    rel = path.relative_to(root).as_posix()
    try:
        raw = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise MissingFileError(f"cannot read file: {e}", rel) from e

    try:
        fm, body = split_frontmatter(raw)
    except ValueError as e:
        raise ParseError(str(e), rel) from e

    title = fm.get('title')
    if not isinstance(title, str) or not title.strip():
        raise ParseError("missing required field 'title'", rel)
    if fm.get('date') is None:
        raise ParseError("missing required field 'date'", rel)
    try:
        published = parse_date(fm['date'])
    except ValueError as e:
        raise ParseError(f"malformed date: {e}", rel) from e
    try:
        tags = _parse_tags(fm.get('tags'))
    except ValueError as e:
        raise ParseError(str(e), rel) from e

    draft = fm.get('draft', False)
    if not isinstance(draft, bool):
        raise ParseError(f"draft must be true or false, got {draft!r}", rel)

    slug = slugify(str(fm.get('slug') or title))
    if not slug:
        raise ParseError(f"cannot derive a slug from title {title!r}", rel)

    return Document(
        slug=slug,
        title=title.strip(),
        date=published,
        tags=tags,
        body=body,
        layout=str(fm.get('layout') or default_layout),
        path=rel,
        fmt=FORMATS[path.suffix.lower()],
        draft=draft,
        summary=str(fm['summary']) if fm.get('summary') is not None else None,
        extra={k: v for k, v in fm.items() if k not in KNOWN_KEYS},
    )


def load_documents(
    root: Path,
    default_layout: str = 'default',
    on_error: Optional[Callable[[PublishError], None]] = None,
    ) -> Iterator[Document]:
    """Lazily yield Documents under root.

    A missing root always raises MissingFileError. Per-document ParseError and
    MissingFileError are passed to on_error when given, otherwise raised.
    """
    base = root if root.is_dir() else root.parent
    for path in discover_files(root):
        try:
            doc = parse_document(path, base, default_layout)
        except (ParseError, MissingFileError) as e:
            if on_error is None:
                raise
            logger.warning("Skipping %s", e)
            on_error(e)
            continue
        logger.debug("Loaded %s as %s", doc.path, doc.slug)
        yield doc
