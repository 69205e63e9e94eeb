"""Unified configuration loaded from .storehub.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".storehub.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "storehub" / "config.toml"

MIB = 1024 * 1024


class Provider(StrEnum):
    """Text-generation backends for augmentation."""

    GEMINI = "gemini"
    ANTHROPIC = "anthropic"


class StorageConfig(BaseModel):
    """[storage] section."""

    directory: str = "./hub-data"
    capacity_bytes: int = 5 * MIB  # 0 disables the quota


class ImagesConfig(BaseModel):
    """[images] section."""

    max_bytes: int = 2 * MIB


class AugmentConfig(BaseModel):
    """[augment] section."""

    provider: Provider = Provider.GEMINI
    model: str | None = None
    timeout: float = 20.0


class SiteConfig(BaseModel):
    """[site] section — defaults for the editable site identity."""

    name: str = "Alfamart Citaringgul X450"
    tagline: str = "Digital Memories Album"


class HubConfig(BaseModel):
    """Top-level configuration model for the content hub."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    images: ImagesConfig = Field(default_factory=ImagesConfig)
    augment: AugmentConfig = Field(default_factory=AugmentConfig)
    site: SiteConfig = Field(default_factory=SiteConfig)

    @property
    def data_dir(self) -> Path:
        return Path(self.storage.directory).expanduser()


def load_config(path: str | Path | None = None) -> HubConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .storehub.toml in CWD
    3. ~/.config/storehub/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged HubConfig.
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
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = HubConfig.model_validate(data) if data else HubConfig()
    return _apply_env_vars(config)


def merge_cli_overrides(config: HubConfig, **cli_kwargs: object) -> HubConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "data_dir": ("storage", "directory"),
        "provider": ("augment", "provider"),
        "model": ("augment", "model"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = str(value) if isinstance(value, Path) else value

    return HubConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: HubConfig) -> HubConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "STOREHUB_DATA_DIR": ("storage", "directory"),
        "STOREHUB_PROVIDER": ("augment", "provider"),
        "STOREHUB_MODEL": ("augment", "model"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    capacity_raw = os.environ.get("STOREHUB_CAPACITY_BYTES")
    if capacity_raw is not None:
        data["storage"]["capacity_bytes"] = int(capacity_raw)

    return HubConfig.model_validate(data)
