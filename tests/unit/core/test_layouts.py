"""Unit tests for core/layouts.py"""

import pytest

from mdsite.core.layouts import BUILTIN_LAYOUTS, compile_layout, load_layouts, resolve_layout
from mdsite.core.models import Layout
from mdsite.errors import MissingFileError, RenderError


def test_load_layouts_builtins_only():
    layouts = load_layouts()
    assert set(layouts) == {"default", "index"}
    assert all(layout.path is None for layout in layouts.values())


def test_load_layouts_overlays_directory(tmp_path):
    """Files in layouts_dir add new layouts and replace built-ins by stem."""
    (tmp_path / "default.html").write_text("<main>{{ content }}</main>")
    (tmp_path / "wide.html").write_text("<div class=wide>{{ content }}</div>")
    (tmp_path / "notes.txt").write_text("ignored")
    layouts = load_layouts(tmp_path)
    assert set(layouts) == {"default", "index", "wide"}
    assert layouts["default"].source == "<main>{{ content }}</main>"
    assert layouts["index"].source == BUILTIN_LAYOUTS["index"]


def test_load_layouts_missing_dir(tmp_path):
    with pytest.raises(MissingFileError):
        load_layouts(tmp_path / "nope")


@pytest.mark.parametrize("name", sorted(BUILTIN_LAYOUTS))
def test_builtin_layouts_compile(name):
    assert compile_layout(Layout(name=name, source=BUILTIN_LAYOUTS[name])) is not None


def test_compile_layout_without_insertion_point():
    """A layout that never references content is rejected."""
    with pytest.raises(RenderError, match="insertion point") as exc:
        compile_layout(Layout(name="bare", source="<p>{{ page.title }}</p>"), "some-doc")
    assert exc.value.ident == "some-doc"


def test_compile_layout_syntax_error():
    with pytest.raises(RenderError, match="not a valid template") as exc:
        compile_layout(Layout(name="broken", source="{{ content }}{% if %}"))
    assert exc.value.ident == "broken"


def test_resolve_layout_unknown():
    with pytest.raises(RenderError, match="unknown layout 'nope'") as exc:
        resolve_layout(load_layouts(), "nope", "doc-1")
    assert exc.value.ident == "doc-1"
