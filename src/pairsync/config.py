"""Configuration management for pairsync."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import yaml


DEFAULT_SESSION_ENDPOINT = "http://localhost:8000/api/sync"


@dataclass
class DisplayConfig:
    """Terminal display configuration."""

    qr: bool = True  # Render pairing codes as QR codes
    invert: bool = True  # Invert QR colors for dark terminals


@dataclass
class Config:
    """Client configuration."""

    session_endpoint: str = DEFAULT_SESSION_ENDPOINT
    url_field: str = "syncURL"
    request_timeout: float = 10.0  # seconds
    session_timeout: float | None = None  # seconds, None = wait indefinitely
    strict_frames: bool = False
    log_level: str = "INFO"
    log_file: str | None = None
    display: DisplayConfig = field(default_factory=DisplayConfig)


def get_config_path(custom_path: Path | None = None) -> Path:
    """Get the configuration file path.

    Args:
        custom_path: Override path. If None, returns default.

    Returns:
        Path to config file.
    """
    if custom_path is not None:
        return custom_path
    return Path.home() / ".config" / "pairsync" / "config.yaml"


def _default_file_reader(path: Path) -> dict[str, Any] | None:
    """Default file reader that loads YAML from disk."""
    if not path.exists():
        return None
    try:
        content = path.read_text()
        if not content.strip():
            return None
        data = yaml.safe_load(content)
    except yaml.YAMLError:
        return None
    return data if isinstance(data, dict) else None


def load_config(
    path: Path | None = None,
    file_reader: Callable[[Path], dict[str, Any] | None] | None = None,
) -> Config:
    """Load configuration from file.

    Args:
        path: Path to config file. If None, uses default path.
        file_reader: Injectable file reader for testing.

    Returns:
        Config object with values from file or defaults.
    """
    config_path = get_config_path(path)
    reader = file_reader or _default_file_reader

    data = reader(config_path)

    if data is None:
        return Config()

    display_data = data.get("display") or {}
    display_config = DisplayConfig(
        qr=display_data.get("qr", DisplayConfig.qr),
        invert=display_data.get("invert", DisplayConfig.invert),
    )

    session_timeout = data.get("session_timeout", Config.session_timeout)

    return Config(
        session_endpoint=data.get("session_endpoint", Config.session_endpoint),
        url_field=data.get("url_field", Config.url_field),
        request_timeout=float(data.get("request_timeout", Config.request_timeout)),
        session_timeout=float(session_timeout) if session_timeout is not None else None,
        strict_frames=data.get("strict_frames", Config.strict_frames),
        log_level=data.get("log_level", Config.log_level),
        log_file=data.get("log_file", Config.log_file),
        display=display_config,
    )
