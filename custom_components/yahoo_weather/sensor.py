"""Sensor platform for Yahoo Weather."""
from homeassistant.core import HomeAssistant, callback
from homeassistant.config_entries import ConfigEntry
from homeassistant.components.sensor import SensorDeviceClass, SensorEntity, SensorStateClass
from homeassistant.const import PERCENTAGE, UnitOfPressure, UnitOfTemperature
import logging
from typing import Optional

from .const import (
    DOMAIN,
    DEFAULT_NAME,
    CHANNEL_TEMPERATURE,
    CHANNEL_HUMIDITY,
    CHANNEL_PRESSURE,
)
from .handler import YahooWeatherHandler

_LOGGER = logging.getLogger(__name__)

# channel -> (friendly suffix, device class, unit, icon)
CHANNEL_DEFINITIONS = {
    CHANNEL_TEMPERATURE: ("Temperature", SensorDeviceClass.TEMPERATURE, UnitOfTemperature.CELSIUS, "mdi:thermometer"),
    CHANNEL_HUMIDITY: ("Humidity", SensorDeviceClass.HUMIDITY, PERCENTAGE, "mdi:water-percent"),
    CHANNEL_PRESSURE: ("Pressure", SensorDeviceClass.PRESSURE, UnitOfPressure.HPA, "mdi:gauge"),
}


async def async_setup_entry(hass: HomeAssistant, config_entry: ConfigEntry, async_add_entities):
    """Set up one sensor per weather channel."""
    handler: YahooWeatherHandler = hass.data[DOMAIN][config_entry.entry_id]
    name = config_entry.title or DEFAULT_NAME

    async_add_entities(
        YahooWeatherSensor(handler, name, channel, config_entry.entry_id)
        for channel in CHANNEL_DEFINITIONS
    )


class YahooWeatherSensor(SensorEntity):
    """A weather value published by the handler on one channel."""

    should_poll = False

    def __init__(self, handler: YahooWeatherHandler, name: str, channel: str, config_entry_id: str):
        self._handler = handler
        self._channel = channel
        self._config_entry_id = config_entry_id
        self._location_name = name
        self._state: Optional[float] = None

        label, device_class, unit, icon = CHANNEL_DEFINITIONS[channel]
        self._friendly_name = f"{name} {label}"
        self._device_class = device_class
        self._unit = unit
        self._icon = icon

    @property
    def name(self):
        return self._friendly_name

    @property
    def unique_id(self):
        return f"{self._handler.location}_{self._channel}"

    @property
    def device_class(self):
        return self._device_class

    @property
    def state_class(self):
        return SensorStateClass.MEASUREMENT

    @property
    def icon(self):
        return self._icon

    @property
    def native_value(self):
        return self._state

    @property
    def native_unit_of_measurement(self):
        return self._unit

    @property
    def available(self):
        return self._handler.available

    @property
    def extra_state_attributes(self):
        return {
            "location": self._handler.location,
            "status_detail": self._handler.status_detail,
        }

    @property
    def device_info(self):
        return {
            "identifiers": {(DOMAIN, str(self._handler.location))},
            "name": self._location_name,
            "manufacturer": "Yahoo",
            "model": "Weather",
            "entry_type": "service",
        }

    async def async_added_to_hass(self):
        """Subscribe to the handler and pick up any value already fetched."""
        self.async_on_remove(self._handler.async_add_listener(self._channel, self._handle_value))
        self._state = self._handler.get_channel_value(self._channel)

    async def async_update(self):
        """Refresh this channel when an update is requested."""
        await self._handler.async_handle_refresh(self._channel)

    @callback
    def _handle_value(self, value: Optional[float]) -> None:
        self._state = value
        self.async_write_ha_state()
