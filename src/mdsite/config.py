"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    site_title:     str = "mdsite"
    base_url:       str = Field(default="/",       description="Prefix for links in the generated index")
    source_dir:     str = Field(default="content", description="Directory of front-matter documents")
    output_dir:     str = Field(default="site",    description="Directory for rendered pages and the index")
    layouts_dir:    Optional[str] = Field(default=None, description="Directory of *.html layouts; built-ins if unset")
    default_layout: str = Field(default="default", description="Layout used when a document names none")
    parser_config:  str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    workers:        int = Field(default=1, ge=1, description="Threads used to render documents")
    include_drafts: bool = Field(default=False, description="Publish documents marked draft: true")
    tag_pages:      bool = Field(default=False, description="Write one listing page per tag")
    log_level:      str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")

    def site_context(self) -> dict[str, Any]:
        """Values exposed to layouts as `site`."""
        return {"title": self.site_title, "base_url": self.base_url}


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDSITE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"MDSITE_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
