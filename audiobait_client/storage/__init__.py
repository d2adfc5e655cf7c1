"""
Storage Layer.

This package handles persistence of the application's configuration and
device credentials.
"""

from .config_manager import ConfigManager

__all__ = ["ConfigManager"]
