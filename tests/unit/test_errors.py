"""Unit tests for errors.py"""

from mdsite.errors import MissingFileError, ParseError, PublishError, RenderError, WriteError


def test_error_str_includes_ident():
    """Errors render as '<ident>: <message>' when an identifier is given."""
    assert str(ParseError("missing date", "posts/a.md")) == "posts/a.md: missing date"


def test_error_str_without_ident():
    assert str(WriteError("disk full")) == "disk full"


def test_error_kinds_share_base():
    for cls, kind in [(ParseError, "parse"), (MissingFileError, "missing"),
                      (RenderError, "render"), (WriteError, "write")]:
        err = cls("x", "id")
        assert isinstance(err, PublishError)
        assert err.kind == kind
        assert err.ident == "id"
