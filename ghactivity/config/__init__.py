"""Configuration package."""

from ghactivity.config.settings import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
