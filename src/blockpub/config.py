"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "BLOCKPUB_"


class Settings(BaseModel):
    app_name:         str = "blockpub"
    db_url:           str = "sqlite:///blockpub.db"
    upload_url:       str = Field(default="http://localhost:5000/api/blog-images/upload",
                                  description="Endpoint returning a signed uploadURL")
    upload_prefix:    str = Field(default="blog-images", description="Object storage path prefix for images")
    upload_token:     Optional[str] = Field(default=None, description="Bearer token sent to upload_url")
    upload_timeout:   float = Field(default=30.0, gt=0, description="Per-request upload timeout in seconds")
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, ge=1, description="Largest accepted image")
    output_dir:       str = Field(default="dist", description="Directory for exported HTML + JSON files")
    log_level:        str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR)$")
    log_file:         str = Field(default=".blockpub/logs/blockpub.log", description="JSON log file path")


def _file_values(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid {path.name}: expected a mapping of settings")
    return data


def _env_values() -> dict[str, str]:
    """Settings given as BLOCKPUB_<FIELD> environment variables (empty values ignored)."""
    values = {}
    for name in Settings.model_fields:
        raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if raw:
            values[name] = raw
    return values


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Layer config.yaml, then BLOCKPUB_<FIELD> env vars, then non-None CLI overrides."""
    data = {**_file_values(Path(CONFIG_FILE)), **_env_values()}
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
