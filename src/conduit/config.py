"""Configuration management for Conduit.

Server settings and the signed-in session live in one YAML file.
Config discovery (first match wins):
  1. ``--config`` flag
  2. ``./conduit.yaml``
  3. ``~/.conduit/conduit.yaml``
  4. Built-in defaults
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

_logger = logging.getLogger(__name__)


class ServerSettings(BaseModel):
    base_url: str = "http://localhost:3000"
    api_key: str = ""
    selected_model: str = ""
    timeout: float = 120.0


class AuthSession(BaseModel):
    token: str = ""  # empty = not signed in
    email: str = ""

    @property
    def is_signed_in(self) -> bool:
        return bool(self.token)

    def sign_out(self) -> None:
        self.token = ""


class ConduitConfig(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    auth: AuthSession = Field(default_factory=AuthSession)


CONFIG_FILENAME = "conduit.yaml"
DEFAULT_CONFIG_PATH = Path.home() / ".conduit" / CONFIG_FILENAME


def _search_paths() -> list[Path]:
    return [Path.cwd() / CONFIG_FILENAME, DEFAULT_CONFIG_PATH]


def load_config(
    config_path: str | Path | None = None,
) -> tuple[ConduitConfig, Path | None]:
    """Load configuration from YAML file.

    Returns (config, resolved_path).  *resolved_path* is ``None`` when
    no file was found and built-in defaults are used.
    """
    if config_path is not None:
        resolved = Path(config_path).expanduser()
        if not resolved.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        resolved = next((p for p in _search_paths() if p.exists()), None)

    if resolved is None:
        _logger.info("No config file found, using defaults")
        return ConduitConfig(), None

    _logger.info("Loading config from %s", resolved)
    with open(resolved) as f:
        raw: dict[str, Any] = yaml.safe_load(f) or {}
    return ConduitConfig.model_validate(raw), resolved.resolve()


def save_config(config: ConduitConfig, config_path: str | Path | None = None) -> Path:
    """Write *config* as YAML and return the path written."""
    path = Path(config_path).expanduser() if config_path else DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(config.model_dump(), f, sort_keys=False)
    _logger.debug("Saved config to %s", path)
    return path
