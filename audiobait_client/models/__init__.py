"""
Data Models Layer.

This package contains the Pydantic models and dataclasses that define the core
data structures used throughout the application, such as the audio schedule,
event reports and configuration.
"""

from .config import ClientConfig
from .events import EventReport
from .schedule import Combo, Schedule

__all__ = ["ClientConfig", "Combo", "EventReport", "Schedule"]
