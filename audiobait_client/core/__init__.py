"""
Core operations built on top of the API layer.
"""

from .event_reporter import EventReporter
from .resource_fetcher import ResourceFetcher

__all__ = ["EventReporter", "ResourceFetcher"]
