"""Publishing error hierarchy; every error names the document it concerns"""

from pathlib import Path
from typing import Optional, Union


class PublishError(Exception):
    """Base class for pipeline failures tied to a single document or path."""

    kind = "error"

    def __init__(self, message: str, ident: Optional[Union[str, Path]] = None):
        self.ident = str(ident) if ident is not None else None
        super().__init__(message)

    def __str__(self) -> str:
        msg = super().__str__()
        return f"{self.ident}: {msg}" if self.ident else msg


class ParseError(PublishError):
    """Front-matter is malformed or a required field is missing."""
    kind = "parse"


class MissingFileError(PublishError):
    """A source location does not exist or cannot be read."""
    kind = "missing"


class RenderError(PublishError):
    """A layout cannot be applied to a document."""
    kind = "render"


class WriteError(PublishError):
    """An output file could not be written."""
    kind = "write"
