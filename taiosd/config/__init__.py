"""Daemon configuration for taiosd."""

from .loader import get_config_path
from .loader import load_config
from .loader import read_config_file
from .loader import save_example_config
from .loader import write_config_file
from .models import Config
from .models import DaemonConfig
from .models import StreamConfig

__all__ = [
    "Config",
    "DaemonConfig",
    "StreamConfig",
    "get_config_path",
    "load_config",
    "read_config_file",
    "save_example_config",
    "write_config_file",
]
