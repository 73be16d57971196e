"""Polling handler for the Yahoo Weather integration.

The handler owns the response cache, polls the forecast on a fixed delay,
keeps the last good payload and publishes parsed values to the channels the
sensor entities listen on.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.helpers.event import async_call_later
from homeassistant.util import dt as dt_util

from .api import QueryProducer, YahooWeatherClient, forecast_query, location_query
from .cache import ExpiringCacheMap
from .const import (
    CACHE_EXPIRY,
    CACHE_KEY_CONFIG,
    CACHE_KEY_WEATHER,
    CHANNEL_HUMIDITY,
    CHANNEL_PRESSURE,
    CHANNEL_TEMPERATURE,
    CHANNELS,
    CONF_LOCATION,
    DEFAULT_REFRESH,
    MAX_DATA_AGE,
    MESSAGE_LOCATION_NOT_FOUND,
    STATUS_COMMUNICATION_ERROR,
    STATUS_LOCATION_NOT_FOUND,
    STATUS_NO_DATA,
)
from .data_schema import ConfigStatusMessage, HandlerStatus
from .parser import (
    has_no_results,
    parse_city,
    parse_humidity,
    parse_pressure,
    parse_reading,
    parse_temperature,
)

_LOGGER = logging.getLogger(__name__)

_CHANNEL_PARSERS: Dict[str, Callable[[Optional[str]], Optional[float]]] = {
    CHANNEL_TEMPERATURE: parse_temperature,
    CHANNEL_HUMIDITY: parse_humidity,
    CHANNEL_PRESSURE: parse_pressure,
}

ChannelListener = Callable[[Optional[float]], None]


class YahooWeatherHandler:
    """Polls one Yahoo Weather location and publishes its readings."""

    def __init__(
        self,
        hass: HomeAssistant,
        client: YahooWeatherClient,
        location: int,
        refresh: int = DEFAULT_REFRESH,
        clock: Callable[[], datetime] = dt_util.utcnow,
    ) -> None:
        self.hass = hass
        self.location = int(location)
        self.refresh = int(refresh)
        self._clock = clock

        self.cache = ExpiringCacheMap(timedelta(seconds=CACHE_EXPIRY), clock=clock)
        self.cache.put(CACHE_KEY_CONFIG, QueryProducer(client, location_query(self.location)))
        self.cache.put(CACHE_KEY_WEATHER, QueryProducer(client, forecast_query(self.location)))

        self._update_lock = asyncio.Lock()
        self._weather_data: Optional[str] = None
        self._last_update: Optional[datetime] = None

        self.available = False
        self.status_detail: Optional[str] = None

        self._listeners: Dict[str, List[ChannelListener]] = {}
        self._unsub_refresh: Optional[CALLBACK_TYPE] = None
        self._stopped = True

    # -----------------------
    # Lifecycle
    # -----------------------
    async def async_start(self) -> None:
        """Run the first refresh now and keep refreshing with a fixed delay."""
        _LOGGER.debug("Starting Yahoo Weather polling for %s every %ss", self.location, self.refresh)
        self._stopped = False
        await self._async_refresh()

    @callback
    def async_stop(self) -> None:
        self._stopped = True
        if self._unsub_refresh is not None:
            self._unsub_refresh()
            self._unsub_refresh = None

    async def _async_scheduled_refresh(self, _now: datetime) -> None:
        self._unsub_refresh = None
        await self._async_refresh()

    async def _async_refresh(self) -> None:
        try:
            if await self.async_update_weather_data():
                for channel in CHANNELS:
                    self._publish(channel, self.get_channel_value(channel))
        except Exception as exc:
            _LOGGER.debug("Exception occurred during refresh: %s", exc, exc_info=True)
            self._set_status(False, STATUS_COMMUNICATION_ERROR)
        finally:
            if not self._stopped:
                self._unsub_refresh = async_call_later(
                    self.hass, self.refresh, self._async_scheduled_refresh
                )

    # -----------------------
    # Data
    # -----------------------
    async def async_update_weather_data(self) -> bool:
        """Read the forecast through the cache; return True if new data arrived."""
        async with self._update_lock:
            data = await self.cache.get(CACHE_KEY_WEATHER)
            if data is None:
                self._weather_data = None
                self._set_status(False, STATUS_LOCATION_NOT_FOUND)
                return False

            if has_no_results(data):
                if self.is_current_data_expired():
                    _LOGGER.debug(
                        "Yahoo Weather returned no data; dropping the old result because it became too old"
                    )
                    self._weather_data = None
                    self._set_status(False, STATUS_NO_DATA)
                else:
                    _LOGGER.debug("Yahoo Weather returned no data; keeping the old result")
                return False

            self._last_update = self._clock()
            self._weather_data = data
            self._set_status(True)
            return True

    def is_current_data_expired(self) -> bool:
        if self._last_update is None:
            return True
        return self._last_update + timedelta(seconds=MAX_DATA_AGE) < self._clock()

    def get_channel_value(self, channel: str) -> Optional[float]:
        return _CHANNEL_PARSERS[channel](self._weather_data)

    @property
    def temperature(self) -> Optional[float]:
        return parse_temperature(self._weather_data)

    @property
    def humidity(self) -> Optional[float]:
        return parse_humidity(self._weather_data)

    @property
    def pressure(self) -> Optional[float]:
        return parse_pressure(self._weather_data)

    # -----------------------
    # Commands
    # -----------------------
    async def async_handle_refresh(self, channel: str) -> None:
        """Refresh one channel on request."""
        if channel not in _CHANNEL_PARSERS:
            _LOGGER.debug("Refresh received for an unknown channel: %s", channel)
            return
        if await self.async_update_weather_data():
            self._publish(channel, self.get_channel_value(channel))

    async def async_get_config_status(self) -> List[ConfigStatusMessage]:
        """Report configuration problems, currently an unknown location."""
        messages: List[ConfigStatusMessage] = []

        location_data = await self.cache.get(CACHE_KEY_CONFIG)
        if location_data is not None and parse_city(location_data) is None:
            messages.append(
                {
                    "parameter": CONF_LOCATION,
                    "type": "error",
                    "message_key": MESSAGE_LOCATION_NOT_FOUND,
                    "arguments": (str(self.location),),
                }
            )
        return messages

    def as_status(self) -> HandlerStatus:
        return {
            "available": self.available,
            "status_detail": self.status_detail,
            "location": self.location,
            "refresh": self.refresh,
            "last_update": self._last_update.isoformat() if self._last_update else None,
            "reading": parse_reading(self._weather_data),
        }

    # -----------------------
    # Channel bus
    # -----------------------
    @callback
    def async_add_listener(self, channel: str, update_callback: ChannelListener) -> CALLBACK_TYPE:
        """Subscribe to values published on ``channel``; returns the unsubscribe callable."""
        listeners = self._listeners.setdefault(channel, [])
        listeners.append(update_callback)

        @callback
        def remove_listener() -> None:
            if update_callback in listeners:
                listeners.remove(update_callback)

        return remove_listener

    def _publish(self, channel: str, value: Optional[float]) -> None:
        for update_callback in list(self._listeners.get(channel, ())):
            update_callback(value)

    def _set_status(self, available: bool, detail: Optional[str] = None) -> None:
        if self.available != available or self.status_detail != detail:
            if available:
                _LOGGER.debug("Yahoo Weather location %s is online", self.location)
            else:
                _LOGGER.warning("Yahoo Weather location %s is offline: %s", self.location, detail)
        self.available = available
        self.status_detail = detail

        if not available:
            # Entities read availability when they write their state
            for channel in CHANNELS:
                self._publish(channel, None)
