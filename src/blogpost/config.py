"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "BLOG_"


class Settings(BaseModel):
    root_dir:       str = Field(default=".", description="Directory holding the YYYY/MM/slug post tree")
    pexels_api_key: Optional[str] = Field(default=None, description="API key for header image search")
    pexels_url:     str = Field(default="https://api.pexels.com/v1", description="Pexels API base URL")
    fetch_timeout:  float = Field(default=10.0, gt=0, description="Seconds before an image fetch gives up")
    output_dir:     str = Field(default="dist", description="Build output directory inside each post")
    parser_config:  str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    log_level:      str = Field(
        default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", description="Console log level"
    )


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then .env / BLOG_<FIELD> env vars, then non-None CLI overrides.

    PEXELS_API_KEY is accepted alongside BLOG_PEXELS_API_KEY, which wins.
    """
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    load_dotenv(find_dotenv(usecwd=True))

    if val := os.getenv("PEXELS_API_KEY"):
        data["pexels_api_key"] = val
    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
