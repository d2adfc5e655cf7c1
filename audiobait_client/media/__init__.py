"""
Media Transfer Layer.

This package is responsible for moving audio file content from the API server
to local storage.
"""

from .downloader import Downloader

__all__ = ["Downloader"]
