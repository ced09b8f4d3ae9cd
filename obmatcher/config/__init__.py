"""
Configuration module for the matching agent.

This module provides configuration management and settings
for the order book matching agent.
"""

from .settings import Settings, get_settings, reload_settings

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
]
