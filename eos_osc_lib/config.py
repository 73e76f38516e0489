"""
Configuration Persistence

Save/load console connection settings to a YAML file.
"""

import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .connection import DEFAULT_CONNECT_TIMEOUT, DEFAULT_PORT

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "eos_osc_lib" / "config.yaml"


@dataclass(frozen=True)
class ConsoleConfig:
    """
    Console connection settings.

    Attributes:
        host: Console host name or IP address
        port: Console OSC TCP port
        connect_timeout: Seconds to wait for the connection and the
            initial version request
        user: Console user to switch to after connecting
        request_timeout: Seconds to wait for each request, None to wait
            forever
    """
    host: str = "localhost"
    port: int = DEFAULT_PORT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    user: Optional[int] = None
    request_timeout: Optional[float] = None

    def with_overrides(self, **overrides: Any) -> "ConsoleConfig":
        """Copy with every override that is not None applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def save_config(config: ConsoleConfig, path: Optional[Path] = None) -> bool:
    """
    Save console settings to YAML file.

    Args:
        config: Settings to save
        path: File path (default: ~/.config/eos_osc_lib/config.yaml)

    Returns:
        True if saved successfully
    """
    path = path or DEFAULT_CONFIG_PATH

    try:
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.safe_dump({"console": asdict(config)}, f, default_flow_style=False)

        logger.info(f"Saved console config to {path}")
        return True

    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to save config: {e}")
        return False


def load_config(path: Optional[Path] = None) -> ConsoleConfig:
    """
    Load console settings from YAML file.

    Unknown keys are ignored. A missing or unreadable file yields the
    defaults.

    Args:
        path: File path (default: ~/.config/eos_osc_lib/config.yaml)
    """
    path = path or DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.info(f"No config file at {path}")
        return ConsoleConfig()

    try:
        with open(path) as f:
            data = yaml.safe_load(f)

        if not data or not isinstance(data.get("console"), dict):
            return ConsoleConfig()

        known = {f.name for f in fields(ConsoleConfig)}
        values: Dict[str, Any] = {
            key: value for key, value in data["console"].items() if key in known
        }
        config = ConsoleConfig(**values)

        logger.info(f"Loaded console config from {path}")
        return config

    except (OSError, yaml.YAMLError, AttributeError, TypeError) as e:
        logger.error(f"Failed to load config: {e}")
        return ConsoleConfig()
