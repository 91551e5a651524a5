"""Path resolution for taios storage locations.

This module provides path resolution based on TAIOS_HOME environment variable,
following XDG-like directory structure within that root.

Contract:
- Inputs: Environment variables (TAIOS_HOME, TAIOS_CONFIG_DIR, TAIOS_LOG_DIR)
- Outputs: Resolved Path objects
- Side Effects: Creates directories if they don't exist
"""

import os
from pathlib import Path


def get_home_dir() -> Path:
    """Get TAIOS_HOME from environment.

    Returns:
        Path to root directory (default: .taios)
    """
    root = os.environ.get("TAIOS_HOME", ".taios")
    return Path(root).resolve()


def get_config_dir() -> Path:
    """Get configuration directory.

    Returns:
        Path to config directory ($TAIOS_HOME/config)
    """
    config_dir: Path = get_home_dir() / "config"

    env_override: str | None = os.environ.get("TAIOS_CONFIG_DIR")
    if env_override is not None:
        config_dir = Path(env_override).resolve()

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_log_dir() -> Path:
    """Get log directory.

    Returns:
        Path to log directory ($TAIOS_HOME/logs/taiosd)
    """
    log_dir: Path = get_home_dir() / "logs" / "taiosd"

    env_override: str | None = os.environ.get("TAIOS_LOG_DIR")
    if env_override is not None:
        log_dir = Path(env_override).resolve()

    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir
