"""Application configuration: settings schema and config.yaml loader"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:       str = "mdpost"
    content_root:   str = Field(default="content",   description="Directory holding one subdirectory per post")
    entry_filename: str = Field(default="index.mdx", description="Entry document name inside each post directory")
    light_theme:    str = Field(default="assets/light-colorblind.json", description="Light colour theme JSON")
    dark_theme:     str = Field(default="assets/dark-default.json",     description="Dark colour theme JSON")
    tsconfig:       Optional[str] = Field(default=None, description="tsconfig JSON used for import path aliases")
    parser_config:  str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    loaders:        dict[str, str] = Field(
        default_factory=lambda: {".js": "jsx"},
        description="Extension -> loader overrides for bundled modules",
    )
    log_level:      str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


def _coerce(name: str, val: str) -> Any:
    """Decode JSON for mapping fields set from the environment."""
    if name == "loaders":
        try:
            return json.loads(val)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid MDPOST_LOADERS: {e}") from e
    return val


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDPOST_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"MDPOST_{name.upper()}"):
            data[name] = _coerce(name, val)

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
