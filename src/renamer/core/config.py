"""Configuration loading for renamer.

Settings live in ``config.toml`` inside a per-user config directory. The
only setting today is the editor command; it can also be supplied through
the environment or on the command line.
"""

from __future__ import annotations

import os
import sys
import tomllib
from pathlib import Path

from pydantic import BaseModel, ValidationError, field_validator

from renamer.core.constants import (
    APP_NAME,
    CONFIG_DIR_ENV_VAR,
    CONFIG_FILENAME,
    DEFAULT_EDITOR,
    EDITOR_ENV_VAR,
)
from renamer.core.errors import ConfigError

__all__ = ["RenamerConfig", "load_config", "resolve_config_dir", "resolve_editor"]


class RenamerConfig(BaseModel):
    """User settings read from ``config.toml``."""

    editor: str | None = None

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("editor")
    @classmethod
    def validate_editor(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("editor must not be empty")
        return v


def resolve_config_dir() -> Path:
    """Resolve the per-user configuration directory.

    ``$RENAMER_CONFIG_DIR`` wins; otherwise the platform convention is used.
    """
    override = os.getenv(CONFIG_DIR_ENV_VAR)
    if override:
        return Path(override).expanduser()

    if sys.platform == "win32":
        base = os.getenv("APPDATA")
        if base:
            return Path(base) / APP_NAME
        return Path.home() / "AppData" / "Roaming" / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME

    xdg = os.getenv("XDG_CONFIG_HOME")
    base_dir = Path(xdg) if xdg else Path.home() / ".config"
    return base_dir / APP_NAME


def load_config(config_dir: Path | None = None) -> RenamerConfig:
    """Load ``config.toml``, falling back to defaults when it is missing.

    Raises:
        ConfigError: If the file is unreadable, not TOML, or has bad values
    """
    config_path = (config_dir or resolve_config_dir()) / CONFIG_FILENAME
    if not config_path.exists():
        return RenamerConfig()

    try:
        with config_path.open("rb") as handle:
            payload = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(config_path, str(e)) from e

    try:
        return RenamerConfig.model_validate(payload)
    except ValidationError as e:
        raise ConfigError(config_path, str(e)) from e


def resolve_editor(
    cli_editor: str | None = None, config: RenamerConfig | None = None
) -> str:
    """Pick the editor command.

    Precedence: command line, ``$RENAMER_EDITOR``, config file, ``$VISUAL``,
    ``$EDITOR``, then the built-in default.
    """
    candidates = (
        cli_editor,
        os.getenv(EDITOR_ENV_VAR),
        config.editor if config is not None else None,
        os.getenv("VISUAL"),
        os.getenv("EDITOR"),
    )
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate
    return DEFAULT_EDITOR
