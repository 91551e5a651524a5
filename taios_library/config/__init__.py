"""Client configuration for taios_library.

Public Interface:
    - ClientSettings: Settings model
"""

from .settings import ClientSettings

__all__ = ["ClientSettings"]
