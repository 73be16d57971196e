"""Data structure definitions for the Yahoo Weather integration.

This module defines TypedDict classes for the structures passed between the
handler, the sensor platform and the diagnostics platform.
"""

from typing import TypedDict, Optional, Tuple


class WeatherReading(TypedDict, total=False):
    """Values parsed from one forecast response."""
    temperature: Optional[float]  # Celsius
    humidity: Optional[float]  # percentage (0-100)
    pressure: Optional[float]  # hPa


class ConfigStatusMessage(TypedDict):
    """A configuration problem attributed to one config parameter."""
    parameter: str  # config key, e.g. "location"
    type: str  # error, warning, information
    message_key: str  # e.g. "location-not-found"
    arguments: Tuple[str, ...]


class HandlerStatus(TypedDict, total=False):
    """Snapshot of the handler state used for diagnostics."""
    available: bool
    status_detail: Optional[str]
    location: int
    refresh: int
    last_update: Optional[str]  # ISO format datetime string
    reading: WeatherReading
