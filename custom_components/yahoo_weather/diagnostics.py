"""Diagnostics support for Yahoo Weather."""
from __future__ import annotations

from typing import Any, Dict

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import DOMAIN
from .handler import YahooWeatherHandler


async def async_get_config_entry_diagnostics(hass: HomeAssistant, entry: ConfigEntry) -> Dict[str, Any]:
    """Return entry configuration, handler status and configuration problems."""
    handler: YahooWeatherHandler = hass.data[DOMAIN][entry.entry_id]
    return {
        "entry": {
            "data": dict(entry.data),
            "options": dict(entry.options),
        },
        "status": handler.as_status(),
        "config_status": await handler.async_get_config_status(),
    }
