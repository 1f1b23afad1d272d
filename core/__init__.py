"""Core configuration and metadata store interfaces."""

from .config import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
