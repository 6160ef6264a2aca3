"""Unified configuration loaded from .postrank.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".postrank.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
    Path.home() / ".config" / "postrank",
]


class StoreSectionConfig(BaseModel):
    """[store] section."""

    data_dir: str = "./data"


class SearchSectionConfig(BaseModel):
    """[search] section."""

    default_limit: int | None = Field(default=None, ge=1)
    public_only: bool = True


class RelatedSectionConfig(BaseModel):
    """[related] section."""

    default_limit: int = Field(default=5, ge=1)
    max_limit: int = Field(default=20, ge=1)


class PostrankConfig(BaseModel):
    """Top-level configuration model."""

    store: StoreSectionConfig = Field(default_factory=StoreSectionConfig)
    search: SearchSectionConfig = Field(default_factory=SearchSectionConfig)
    related: RelatedSectionConfig = Field(default_factory=RelatedSectionConfig)

    @property
    def data_path(self) -> Path:
        return Path(self.store.data_dir).expanduser()


def load_config(path: str | Path | None = None) -> PostrankConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .postrank.toml in CWD
    3. ~/.config/postrank/config.toml

    Then overlay environment variables.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        global_config = Path.home() / ".config" / "postrank" / "config.toml"
        if not data and global_config.exists():
            data = _load_toml(global_config)
            logger.info("Loaded config from %s", global_config)

    config = PostrankConfig.model_validate(data) if data else PostrankConfig()
    return _apply_env_vars(config)


def merge_cli_overrides(config: PostrankConfig, **cli_kwargs: object) -> PostrankConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only values that are not None override the config.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "data_dir": ("store", "data_dir"),
        "search_limit": ("search", "default_limit"),
        "related_limit": ("related", "default_limit"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = str(value) if isinstance(value, Path) else value

    return PostrankConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: PostrankConfig) -> PostrankConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "POSTRANK_DATA_DIR": ("store", "data_dir"),
        "POSTRANK_SEARCH_LIMIT": ("search", "default_limit"),
        "POSTRANK_RELATED_LIMIT": ("related", "default_limit"),
        "POSTRANK_RELATED_MAX_LIMIT": ("related", "max_limit"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    public_raw = os.environ.get("POSTRANK_PUBLIC_ONLY")
    if public_raw is not None:
        data["search"]["public_only"] = public_raw.lower() in ("true", "1", "yes")

    return PostrankConfig.model_validate(data)
