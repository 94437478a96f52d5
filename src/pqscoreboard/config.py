"""
PQScoreboard Configuration Management

Loads settings from ~/.config/pqscoreboard/config.json (or a given file)
with environment variable overrides.
"""

import os
import json
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional


DEFAULT_CONFIG_PATH = Path.home() / ".config" / "pqscoreboard" / "config.json"


def _env_flag(name: str) -> bool:
    return os.environ[name].lower() in ("true", "1", "yes")


@dataclass
class RevealConfig:
    inter_step_delay: float = 2.0  # seconds between steps
    show_running_totals: bool = False
    default_surface: str = "browser"


@dataclass
class WebConfig:
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False


@dataclass
class CasparConfig:
    host: str = "127.0.0.1"
    port: int = 5250
    channel: int = 1
    layer: int = 10
    template: str = "pqscoreboard/reveal"
    enabled: bool = False


@dataclass
class OBSConfig:
    host: str = "localhost"
    port: int = 4455
    password: str = ""
    source_name: str = "PQScoreboard Reveal"
    enabled: bool = False


@dataclass
class Config:
    reveal: RevealConfig = field(default_factory=RevealConfig)
    web: WebConfig = field(default_factory=WebConfig)
    caspar: CasparConfig = field(default_factory=CasparConfig)
    obs: OBSConfig = field(default_factory=OBSConfig)
    debug: bool = False


def _apply_section(section, data: dict) -> None:
    """Copy known keys from a JSON object onto a config section."""
    for key, value in data.items():
        if hasattr(section, key):
            setattr(section, key, value)


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from JSON file with environment variable overrides.

    Priority (highest to lowest):
    1. Environment variables (PQS_*)
    2. Config file values
    3. Default values
    """
    config = Config()

    # Determine config file path
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    else:
        config_path = Path(config_path)

    # Load from JSON if exists
    if config_path.exists():
        with open(config_path, "r") as f:
            data = json.load(f)

        if "reveal" in data:
            _apply_section(config.reveal, data["reveal"])
        if "web" in data:
            _apply_section(config.web, data["web"])
        if "caspar" in data:
            _apply_section(config.caspar, data["caspar"])
        if "obs" in data:
            _apply_section(config.obs, data["obs"])

        config.debug = data.get("debug", config.debug)

    # Environment variable overrides
    if os.environ.get("PQS_WEB_HOST"):
        config.web.host = os.environ["PQS_WEB_HOST"]
    if os.environ.get("PQS_WEB_PORT"):
        config.web.port = int(os.environ["PQS_WEB_PORT"])
    if os.environ.get("PQS_REVEAL_DELAY"):
        config.reveal.inter_step_delay = float(os.environ["PQS_REVEAL_DELAY"])
    if os.environ.get("PQS_RUNNING_TOTALS"):
        config.reveal.show_running_totals = _env_flag("PQS_RUNNING_TOTALS")
    if os.environ.get("PQS_CASPAR_HOST"):
        config.caspar.host = os.environ["PQS_CASPAR_HOST"]
    if os.environ.get("PQS_CASPAR_PORT"):
        config.caspar.port = int(os.environ["PQS_CASPAR_PORT"])
    if os.environ.get("PQS_CASPAR_ENABLED"):
        config.caspar.enabled = _env_flag("PQS_CASPAR_ENABLED")
    if os.environ.get("PQS_OBS_ENABLED"):
        config.obs.enabled = _env_flag("PQS_OBS_ENABLED")
    if os.environ.get("PQS_DEBUG"):
        config.debug = _env_flag("PQS_DEBUG")

    return config


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global config instance, loading it if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Config) -> None:
    """Set the global config instance."""
    global _config
    _config = config
