"""Layout discovery and compilation; `content` is the single insertion point"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from jinja2 import Environment, StrictUndefined, Template, TemplateSyntaxError, meta

from mdsite.core.models import Layout
from mdsite.errors import MissingFileError, RenderError


logger = logging.getLogger(__name__)

INSERTION_POINT = "content"
SITE_DEFAULTS = {"title": "", "base_url": "/"}

DEFAULT_LAYOUT = """\
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ page.title }} | {{ site.title }}</title>
</head>
<body>
<article>
<h1>{{ page.title }}</h1>
<p><time datetime="{{ page.date.isoformat() }}">{{ page.date.strftime('%Y-%m-%d') }}</time></p>
{{ content }}
{% if page.tags %}<ul class="tags">{% for tag in page.tags %}<li>{{ tag }}</li>{% endfor %}</ul>{% endif %}
</article>
</body>
</html>
"""

INDEX_LAYOUT = """\
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ page.title }}</title>
</head>
<body>
<h1>{{ page.title }}</h1>
{{ content }}
</body>
</html>
"""

# Rendered into the index layout's insertion point.
LISTING = """\
<ul class="index">
{% for entry in entries %}<li><time datetime="{{ entry.date.isoformat() }}">{{ entry.date.strftime('%Y-%m-%d') }}</time> <a href="{{ entry.url }}">{{ entry.title }}</a></li>
{% endfor %}</ul>
"""

BUILTIN_LAYOUTS = {"default": DEFAULT_LAYOUT, "index": INDEX_LAYOUT}


def _environment() -> Environment:
    return Environment(
        autoescape=True,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


@lru_cache(maxsize=64)
def _compile(source: str) -> tuple[Template, frozenset[str]]:
    env = _environment()
    names = frozenset(meta.find_undeclared_variables(env.parse(source)))
    return env.from_string(source), names


def listing_template() -> Template:
    """Compiled fragment rendered into the index layout's insertion point."""
    return _compile(LISTING)[0]


def compile_layout(layout: Layout, ident: Optional[str] = None) -> Template:
    """Return the compiled template for layout.

    Raises RenderError, naming ident (default: the layout name), when the
    template is invalid or never references the insertion point.
    """
    ident = ident or layout.name
    try:
        template, names = _compile(layout.source)
    except TemplateSyntaxError as e:
        raise RenderError(f"layout '{layout.name}' is not a valid template: {e}", ident) from e
    if INSERTION_POINT not in names:
        raise RenderError(
            f"layout '{layout.name}' has no '{{{{ {INSERTION_POINT} }}}}' insertion point", ident
        )
    return template


def load_layouts(layouts_dir: Optional[Path] = None) -> dict[str, Layout]:
    """Return built-in layouts overlaid with *.html files from layouts_dir, keyed by stem."""
    layouts = {name: Layout(name=name, source=source) for name, source in BUILTIN_LAYOUTS.items()}
    if layouts_dir is None:
        return layouts
    if not layouts_dir.is_dir():
        raise MissingFileError("layouts directory does not exist", layouts_dir)

    for path in sorted(layouts_dir.glob("*.html")):
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise MissingFileError(f"cannot read layout: {e}", path) from e
        layouts[path.stem] = Layout(name=path.stem, source=source, path=path)
        logger.debug("Loaded layout %s from %s", path.stem, path)
    return layouts


def resolve_layout(layouts: dict[str, Layout], name: str, ident: str) -> Layout:
    """Return the one layout a document names; RenderError if it is unknown."""
    try:
        return layouts[name]
    except KeyError:
        raise RenderError(f"unknown layout '{name}'", ident) from None
