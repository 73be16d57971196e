"""Field extraction from Yahoo Weather response bodies.

The responses are treated as text: a field is the quoted value following
``param":"`` somewhere after the first occurrence of its enclosing element
name. This mirrors the shape of the YQL JSON output, e.g.
``"atmosphere":{"humidity":"80","pressure":"1015.0",...}``.
"""

from __future__ import annotations

import logging
from typing import Optional

from .const import PRESSURE_CORRECTION_FACTOR, PRESSURE_CORRECTION_THRESHOLD
from .data_schema import WeatherReading

_LOGGER = logging.getLogger(__name__)

NO_RESULTS_MARKER = '"results":null'


def get_value(data: Optional[str], element: str, param: str) -> Optional[str]:
    """Return the quoted value of ``param`` following ``element``, or None."""
    if not data:
        return None
    idx = data.find(element)
    if idx < 0:
        return None
    tail = data[idx + len(element):]

    opening = f'{param}":"'
    start = tail.find(opening)
    if start < 0:
        return None
    start += len(opening)
    end = tail.find('"', start)
    if end < 0:
        return None
    return tail[start:end]


def has_no_results(data: str) -> bool:
    return NO_RESULTS_MARKER in data


def _to_float(raw: Optional[str], field_name: str) -> Optional[float]:
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        _LOGGER.debug("Non-numeric %s value in response: %s", field_name, raw)
        return None


def parse_temperature(data: Optional[str]) -> Optional[float]:
    """Temperature in °C (the forecast query requests metric units)."""
    return _to_float(get_value(data, "condition", "temp"), "temperature")


def parse_humidity(data: Optional[str]) -> Optional[float]:
    """Relative humidity in %."""
    return _to_float(get_value(data, "atmosphere", "humidity"), "humidity")


def parse_pressure(data: Optional[str]) -> Optional[float]:
    """Pressure in hPa.

    Some locations report mbar * 33.86 instead of mbar; values above the
    threshold are scaled back.
    """
    pressure = _to_float(get_value(data, "atmosphere", "pressure"), "pressure")
    if pressure is None:
        return None
    if pressure > PRESSURE_CORRECTION_THRESHOLD:
        return pressure / PRESSURE_CORRECTION_FACTOR
    return pressure


def parse_city(data: Optional[str]) -> Optional[str]:
    return get_value(data, "location", "city")


def parse_reading(data: Optional[str]) -> WeatherReading:
    return {
        "temperature": parse_temperature(data),
        "humidity": parse_humidity(data),
        "pressure": parse_pressure(data),
    }
