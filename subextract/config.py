"""Configuration loading and validation."""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .toolkit import DEFAULT_PROBE_LIMIT, ToolkitConfig

CONFIG_FILENAME = ".subextract.yaml"

# Valid configuration keys and their expected Python types.
_VALID_KEYS: Dict[str, type] = {
    "ffmpeg_path": str,
    "ffprobe_path": str,
    "output_dir": str,
    "probe_limit": int,
}


def validate_config(config: Dict[str, Any]) -> None:
    """Validate *config* dict against known keys and types.

    Calls ``sys.exit(1)`` after printing every problem found so that the
    user sees all of them at once.
    """
    errors = []

    for key, value in config.items():
        if key not in _VALID_KEYS:
            errors.append(
                f"Unknown key '{key}'. Valid keys: {', '.join(sorted(_VALID_KEYS))}"
            )
            continue

        expected = _VALID_KEYS[key]
        # bool is an int subclass; reject it explicitly.
        if not isinstance(value, expected) or isinstance(value, bool):
            errors.append(
                f"'{key}' must be {expected.__name__}, got {type(value).__name__}"
            )

    probe_limit = config.get("probe_limit")
    if isinstance(probe_limit, int) and not isinstance(probe_limit, bool) and probe_limit < 1:
        errors.append(f"'probe_limit' must be >= 1, got {probe_limit}")

    output_dir = config.get("output_dir")
    if isinstance(output_dir, str):
        p = Path(output_dir).expanduser()
        if p.exists() and not p.is_dir():
            errors.append(
                f"'output_dir' exists but is not a directory: {output_dir}"
            )

    for key in ("ffmpeg_path", "ffprobe_path"):
        value = config.get(key)
        if isinstance(value, str) and not value.strip():
            errors.append(f"'{key}' must not be empty")

    if errors:
        print("Configuration error(s):", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        sys.exit(1)


def load_config() -> Dict[str, Any]:
    """Load and validate configuration from the first existing config file.

    Searches:
      1. ``~/.subextract.yaml``
      2. ``.subextract.yaml`` (current working directory)

    Returns an empty dict when no config file is found.
    """
    config_locations = [
        Path.home() / CONFIG_FILENAME,
        Path(CONFIG_FILENAME),
    ]

    for config_file in config_locations:
        if not config_file.exists():
            continue

        try:
            with open(config_file) as fh:
                config = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            logging.warning(f"Could not load config from {config_file}: {exc}")
            break

        if not isinstance(config, dict):
            logging.warning(f"Ignoring {config_file}: expected a mapping at top level")
            break

        validate_config(config)  # exits on error
        logging.debug(f"Loaded configuration from: {config_file}")
        return config

    return {}


def toolkit_from(
    config: Dict[str, Any],
    ffmpeg_path: Optional[str] = None,
    ffprobe_path: Optional[str] = None,
    probe_limit: Optional[int] = None,
) -> ToolkitConfig:
    """Build a :class:`ToolkitConfig`; explicit arguments win over *config*."""
    return ToolkitConfig(
        ffmpeg_path=ffmpeg_path or config.get("ffmpeg_path", "ffmpeg"),
        ffprobe_path=ffprobe_path or config.get("ffprobe_path", "ffprobe"),
        probe_limit=probe_limit or config.get("probe_limit", DEFAULT_PROBE_LIMIT),
    )
