"""
audiobait-client: device client for fetching audio lure schedules and sound
files and reporting playback events.
"""

__version__ = "0.1.0"
