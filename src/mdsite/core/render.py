"""Merge a Document body into its Layout and embed page metadata"""

import json
import re
from datetime import datetime
from functools import lru_cache
from typing import Any

from markdown_it import MarkdownIt
from markupsafe import Markup

from mdsite.core.assemble import destination, page_url
from mdsite.core.layouts import SITE_DEFAULTS, compile_layout
from mdsite.core.models import Document, Layout, RenderedDocument
from mdsite.errors import RenderError


META_ID = "page-meta"
META_RE = re.compile(
    r'<script type="application/json" id="' + META_ID + r'">(.*?)</script>', re.DOTALL
)
HEAD_CLOSE_RE = re.compile(r'</head\s*>', re.IGNORECASE)


@lru_cache(maxsize=8)
def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def body_html(doc: Document, parser_config: str = "gfm-like") -> str:
    """Return the document body as HTML; html sources pass through untouched."""
    if doc.fmt == "html":
        return doc.body
    return _make_parser(parser_config).render(doc.body)


def page_meta(doc: Document) -> dict[str, Any]:
    return {
        "slug": doc.slug,
        "title": doc.title,
        "date": doc.date.isoformat(),
        "tags": sorted(doc.tags),
    }


def embed_meta(html: str, meta: dict[str, Any]) -> str:
    """Insert meta as a JSON script element before </head>, or at the top."""
    payload = json.dumps(meta, ensure_ascii=False, sort_keys=True)
    # keep the payload from closing the script element early
    payload = payload.replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")
    element = f'<script type="application/json" id="{META_ID}">{payload}</script>\n'
    m = HEAD_CLOSE_RE.search(html)
    if m:
        return html[:m.start()] + element + html[m.start():]
    return element + html


def read_page_meta(html: str) -> dict[str, Any]:
    """Recover the metadata embedded by render_document; date is parsed back to a datetime."""
    m = META_RE.search(html)
    if not m:
        raise ValueError(f"no {META_ID} element found")
    data = json.loads(m.group(1))
    data["date"] = datetime.fromisoformat(data["date"])
    return data


def render_document(
    doc: Document,
    layout: Layout,
    parser_config: str = "gfm-like",
    site: dict[str, Any] = None,
    ) -> RenderedDocument:
    """Render doc through layout. Pure: the result depends only on the arguments."""
    site = {**SITE_DEFAULTS, **(site or {})}
    template = compile_layout(layout, doc.slug)
    dest = destination(doc)
    page = {
        "slug": doc.slug,
        "title": doc.title,
        "date": doc.date,
        "tags": sorted(doc.tags),
        "summary": doc.summary,
        "url": page_url(dest, site["base_url"]),
        "extra": doc.extra,
    }
    try:
        content = Markup(body_html(doc, parser_config))
        html = template.render(content=content, page=page, site=site)
    except Exception as e:
        raise RenderError(f"rendering with layout '{layout.name}' failed: {e}", doc.slug) from e

    return RenderedDocument(
        slug=doc.slug,
        title=doc.title,
        date=doc.date,
        tags=doc.tags,
        summary=doc.summary,
        dest=dest,
        html=embed_meta(html, page_meta(doc)),
    )
