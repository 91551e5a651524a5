"""Reading and writing ``daemon.yaml``.

Values come from three layers, later ones winning:

1. Field defaults on the config models
2. ``$TAIOS_HOME/config/daemon.yaml``
3. ``TAIOSD_<SECTION>_<KEY>`` environment variables, e.g.
   ``TAIOSD_DAEMON_PORT=9000`` or
   ``TAIOSD_DAEMON_CORS_ORIGINS=http://localhost:3000,https://admin.example.com``
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from taios_library.storage.paths import get_config_dir

from .models import Config

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "daemon.yaml"

# Fields given as comma-separated lists in the environment
_LIST_FIELDS = {("daemon", "cors_origins")}

_EXAMPLE_HEADER = """\
# taiosd Daemon Configuration
#
# Every option is listed with its default value. Copy to daemon.yaml to use.
# TAIOSD_<SECTION>_<KEY> environment variables override anything set here.

"""


def get_config_path() -> Path:
    """Location of ``daemon.yaml`` (the file itself may be absent)."""
    return get_config_dir() / CONFIG_FILENAME


def read_config_file(path: Path) -> Config:
    """Parse and validate a YAML config file.

    Args:
        path: File to read

    Returns:
        Validated configuration

    Raises:
        ValueError: If the file is not YAML or does not validate
    """
    try:
        data = yaml.safe_load(path.read_text()) or {}
        return Config.model_validate(data)
    except yaml.YAMLError as e:
        raise ValueError(f"{path} is not valid YAML: {e}") from e
    except Exception as e:
        raise ValueError(f"{path} is not a valid taiosd config: {e}") from e


def write_config_file(config: Config, path: Path, header: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    body = yaml.safe_dump(config.model_dump(mode="json"), default_flow_style=False, sort_keys=False)
    path.write_text(header + body)


def load_config(config_path: Path | None = None) -> Config:
    """Build the effective daemon configuration.

    A file that fails to parse is reported and ignored so the daemon still
    starts on defaults.

    Args:
        config_path: File to read (default: ``get_config_path()``)

    Returns:
        Configuration with environment overrides applied
    """
    path = config_path or get_config_path()

    config = Config()
    if path.exists():
        logger.info(f"Loading configuration from {path}")
        try:
            config = read_config_file(path)
        except ValueError as e:
            logger.error(f"Ignoring configuration file: {e}")
    else:
        logger.debug(f"No configuration file at {path}, using defaults")

    return _apply_env_overrides(config)


def _env_overrides(section: str, keys: list[str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for key in keys:
        raw = os.environ.get(f"TAIOSD_{section.upper()}_{key.upper()}")
        if raw is None:
            continue
        if (section, key) in _LIST_FIELDS:
            overrides[key] = [item.strip() for item in raw.split(",") if item.strip()]
        else:
            overrides[key] = raw
        logger.info(f"Environment override: {section}.{key} = {overrides[key]}")
    return overrides


def _apply_env_overrides(config: Config) -> Config:
    """Merge ``TAIOSD_*`` variables into ``config``.

    Raw strings are coerced by model validation.

    Raises:
        pydantic.ValidationError: If an override is out of range or mistyped
    """
    merged = config.model_dump()
    for section, values in merged.items():
        values.update(_env_overrides(section, list(values)))
    return Config.model_validate(merged)


def save_example_config(path: Path | None = None) -> Path:
    """Write every option with its default to an example file.

    Args:
        path: Destination (default: ``daemon.example.yaml`` next to the config)

    Returns:
        Path written
    """
    path = path or get_config_path().with_suffix(".example.yaml")
    write_config_file(Config(), path, header=_EXAMPLE_HEADER)
    logger.info(f"Saved example configuration to {path}")
    return path
