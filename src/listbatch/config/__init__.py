"""
Module: config
Description: Package initialization for library configuration.
"""

from .settings import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
