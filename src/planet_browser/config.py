"""Configuration persistence — load and save ``BrowserConfig``."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from planet_browser.models import (
    CONFIG_APP_NAME,
    DEFAULT_DEBOUNCE_INTERVAL_MS,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SEARCH_LATENCY_MS,
    DEFAULT_TIMEOUT_SECONDS,
    MAX_DEBOUNCE_INTERVAL_MS,
    MAX_PAGE_SIZE,
    SEARCH_BACKENDS,
    SWAPI_DEFAULT_BASE_URL,
    BrowserConfig,
)

logger = logging.getLogger(__name__)

# Validation contract — _dict_to_config() guarantees valid output for any input:
#
#   Field                        Rule                       Fallback
#   ───────────────────────────  ─────────────────────────  ────────────────
#   page_size                    1 ≤ x ≤ MAX_PAGE_SIZE      clamped
#   debounce_interval_ms         0 ≤ x ≤ 5000               clamped
#   search_latency_ms            0 ≤ x ≤ 5000               clamped
#   timeout_seconds              x ≥ 1                      default
#   search_backend               in SEARCH_BACKENDS         "local"
#   scalar fields                type-checked (_safe_get)   default
#
CONFIG_FILENAME = "config.json"


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/planet-browser/config.json
    - macOS: ~/Library/Application Support/planet-browser/config.json
    - Windows: %APPDATA%/planet-browser/config.json
    """
    return Path(user_config_dir(CONFIG_APP_NAME)) / CONFIG_FILENAME


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    # bool is an int subclass; never accept it where a number is expected
    if expected_type is int and isinstance(value, bool):
        return default
    if not isinstance(value, expected_type):
        return default
    return value


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _dict_to_config(data: dict[str, Any]) -> BrowserConfig:
    """Deserialize a dictionary to BrowserConfig with type validation."""
    search_backend = _safe_get(data, "search_backend", "local", str)
    if search_backend not in SEARCH_BACKENDS:
        logger.warning("Invalid search_backend %r, defaulting to 'local'", search_backend)
        search_backend = "local"

    timeout_seconds = _safe_get(data, "timeout_seconds", DEFAULT_TIMEOUT_SECONDS, int)
    if timeout_seconds < 1:
        timeout_seconds = DEFAULT_TIMEOUT_SECONDS

    return BrowserConfig(
        page_size=_clamp(_safe_get(data, "page_size", DEFAULT_PAGE_SIZE, int), 1, MAX_PAGE_SIZE),
        debounce_interval_ms=_clamp(
            _safe_get(data, "debounce_interval_ms", DEFAULT_DEBOUNCE_INTERVAL_MS, int),
            0,
            MAX_DEBOUNCE_INTERVAL_MS,
        ),
        background_backfill_enabled=_safe_get(data, "background_backfill_enabled", False, bool),
        search_backend=search_backend,
        base_url=_safe_get(data, "base_url", SWAPI_DEFAULT_BASE_URL, str) or SWAPI_DEFAULT_BASE_URL,
        timeout_seconds=timeout_seconds,
        search_latency_ms=_clamp(
            _safe_get(data, "search_latency_ms", DEFAULT_SEARCH_LATENCY_MS, int),
            0,
            MAX_DEBOUNCE_INTERVAL_MS,
        ),
        version=_safe_get(data, "version", 1, int),
    )


def _config_to_dict(config: BrowserConfig) -> dict[str, Any]:
    """Serialize BrowserConfig to a JSON-compatible dictionary."""
    return asdict(config)


def load_config() -> BrowserConfig:
    """Load configuration from disk.

    Returns default config if file doesn't exist or is corrupted.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return BrowserConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
        return BrowserConfig()
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
        return BrowserConfig()

    if not isinstance(data, dict):
        logger.warning("Config root is %s, not an object; using defaults", type(data).__name__)
        return BrowserConfig()
    return _dict_to_config(data)


def save_config(config: BrowserConfig) -> bool:
    """Save configuration to disk atomically.

    Uses write-to-tempfile + os.replace() so an interrupted write never
    leaves a truncated config behind. Returns True on success.
    """
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        json_str = json.dumps(_config_to_dict(config), indent=2, ensure_ascii=False)
        fd, tmp_path = tempfile.mkstemp(dir=config_path.parent, suffix=".tmp", prefix=".config-")
        closed = False
        try:
            os.write(fd, json_str.encode("utf-8"))
            os.close(fd)
            closed = True
            os.replace(tmp_path, config_path)
        except BaseException:
            if not closed:
                os.close(fd)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        return True
    except OSError as e:
        logger.error("Failed to save config: %s", e)
        return False


__all__ = [
    "CONFIG_FILENAME",
    "get_config_path",
    "load_config",
    "save_config",
]
