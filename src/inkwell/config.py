"""Unified configuration loaded from .inkwell.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import re
import tomllib
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from inkwell.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".inkwell.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
    Path.home() / ".config" / "inkwell",
]

HANGUL_SYLLABLES = "가-힣"


class StoreBackend(StrEnum):
    """Which document store implementation to open."""

    LOCAL = "local"
    SUPABASE = "supabase"


class StoreSectionConfig(BaseModel):
    """[store] section."""

    backend: StoreBackend = StoreBackend.LOCAL
    path: str = ".inkwell-store.json"
    timeout: float = 10.0


class SupabaseConfig(BaseModel):
    """[supabase] section — hosted REST endpoint credentials."""

    url: str = ""
    key: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)

    @classmethod
    def from_env(cls) -> SupabaseConfig:
        """Create config from environment variables."""
        return cls(
            url=os.environ.get("SUPABASE_URL", ""),
            key=os.environ.get("SUPABASE_KEY", ""),
        )


class DraftsSectionConfig(BaseModel):
    """[drafts] section."""

    list_limit: int = 10
    autosave_interval: float = 60.0


class SlugSectionConfig(BaseModel):
    """[slug] section.

    ``extra_letters`` is a regex character-class fragment of letters kept
    verbatim in slugs alongside ``a-z0-9``.
    """

    extra_letters: str = HANGUL_SYLLABLES
    max_attempts: int = 10

    @field_validator("extra_letters")
    @classmethod
    def _check_character_class(cls, value: str) -> str:
        if "[" in value or "]" in value or value.endswith("\\"):
            raise ValueError(f"extra_letters must be a bare character-class fragment: {value!r}")
        try:
            re.compile(f"[^a-z0-9{value}]")
        except re.error as exc:
            raise ValueError(f"extra_letters is not a valid character class: {exc}") from exc
        return value


class InkwellConfig(BaseModel):
    """Top-level configuration model."""

    store: StoreSectionConfig = Field(default_factory=StoreSectionConfig)
    supabase: SupabaseConfig = Field(default_factory=SupabaseConfig)
    drafts: DraftsSectionConfig = Field(default_factory=DraftsSectionConfig)
    slug: SlugSectionConfig = Field(default_factory=SlugSectionConfig)


def load_config(path: str | Path | None = None) -> InkwellConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .inkwell.toml in CWD
    3. ~/.config/inkwell/.inkwell.toml
    4. ~/.config/inkwell/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged InkwellConfig.
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

        global_config = Path.home() / ".config" / "inkwell" / "config.toml"
        if not data and global_config.exists():
            data = _load_toml(global_config)
            logger.info("Loaded config from %s", global_config)

    config = _validate(data, "config file")
    return _apply_env_vars(config)


def merge_cli_overrides(config: InkwellConfig, **cli_kwargs: object) -> InkwellConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "store_backend": ("store", "backend"),
        "store_path": ("store", "path"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return _validate(data, "command-line options")


def _validate(data: dict[str, object], source: str) -> InkwellConfig:
    try:
        return InkwellConfig.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigError(f"Invalid {source}: {exc}") from exc


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: InkwellConfig) -> InkwellConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "SUPABASE_URL": ("supabase", "url"),
        "SUPABASE_KEY": ("supabase", "key"),
        "INKWELL_STORE_BACKEND": ("store", "backend"),
        "INKWELL_STORE_PATH": ("store", "path"),
        "INKWELL_AUTOSAVE_INTERVAL": ("drafts", "autosave_interval"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value:
            data[section][field] = value

    return _validate(data, "environment variables")
