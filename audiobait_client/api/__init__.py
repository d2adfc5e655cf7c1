"""
Device API Layer.

This package handles all communication with the device-management API and
owns the session state used to authorize it.
"""

from .auth import DeviceAuthenticator, authenticate
from .client import DeviceAPIClient
from .session import DeviceIdentity, Session, TokenCell

__all__ = [
    "DeviceAPIClient",
    "DeviceAuthenticator",
    "DeviceIdentity",
    "Session",
    "TokenCell",
    "authenticate",
]
