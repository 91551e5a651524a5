"""taios_library - admin notification pipeline for Trust TAI OS.

Shared models and framing used by the taiosd stream server, plus the
reconnecting notification client consumed by admin UIs.
"""

__version__ = "0.1.0"
