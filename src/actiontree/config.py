"""Configuration management for actiontree."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .core.ordering import DEFAULT_STRIDE
from .core.repeat import RepeatMode
from .core.sorting import SortMode

logger = logging.getLogger(__name__)

ACTIONTREE_HOME = Path(os.environ.get("ACTIONTREE_HOME", Path.home() / "actiontree"))
CONFIG_FILE = ACTIONTREE_HOME / "config" / "actiontree.conf"
DATA_DIR = ACTIONTREE_HOME / "data"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Config:
    """actiontree configuration."""

    actions_file: str = ""
    default_sort: SortMode = SortMode.MANUAL
    show_completed: bool = False
    show_deferred: bool = False
    position_stride: int = DEFAULT_STRIDE
    repeat_mode: RepeatMode = RepeatMode.FIXED

    @property
    def actions_path(self) -> Path:
        """Resolved actions file, defaulting to the data directory."""
        if self.actions_file:
            return Path(self.actions_file).expanduser()
        return DATA_DIR / "actions.json"


def _parse_bool(key: str, value: str, default: bool) -> bool:
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    logger.warning(f"Invalid boolean for {key.upper()}: {value!r}")
    return default


def _strip_value(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from actiontree.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _strip_value(value.strip())

        match key:
            case "actions_file":
                config.actions_file = value
            case "default_sort":
                try:
                    config.default_sort = SortMode.parse(value)
                except ValueError:
                    logger.warning(f"Unknown DEFAULT_SORT: {value!r}")
            case "show_completed":
                config.show_completed = _parse_bool(key, value, config.show_completed)
            case "show_deferred":
                config.show_deferred = _parse_bool(key, value, config.show_deferred)
            case "position_stride":
                try:
                    stride = int(value)
                except ValueError:
                    stride = 0
                if stride >= 2:
                    config.position_stride = stride
                else:
                    logger.warning(f"POSITION_STRIDE must be an integer >= 2, got {value!r}")
            case "repeat_mode":
                try:
                    config.repeat_mode = RepeatMode(value.lower())
                except ValueError:
                    logger.warning(f"Unknown REPEAT_MODE: {value!r}")

    return config
