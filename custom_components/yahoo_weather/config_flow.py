"""Config flow for Yahoo Weather integration."""
from __future__ import annotations
import logging
from typing import Any
import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import HomeAssistant, callback
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from .api import YahooWeatherClient, YahooWeatherConnectionError, location_query
from .const import (
    DOMAIN,
    DEFAULT_NAME,
    CONF_LOCATION,
    CONF_REFRESH,
    DEFAULT_REFRESH,
    MIN_REFRESH,
)
from .parser import parse_city

_LOGGER = logging.getLogger(__name__)


class LocationNotFound(Exception):
    """The WOEID did not resolve to a city."""


async def validate_location(hass: HomeAssistant, location: int) -> str:
    """Return the city name for ``location``.

    Raises YahooWeatherConnectionError if the API cannot be reached and
    LocationNotFound if the response names no city.
    """
    client = YahooWeatherClient(session=async_get_clientsession(hass))
    data = await client.async_get_response_from_query(location_query(location))
    city = parse_city(data)
    if city is None:
        raise LocationNotFound(str(location))
    return city


def _refresh_validator():
    return vol.All(vol.Coerce(int), vol.Range(min=MIN_REFRESH))


class YahooWeatherConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Yahoo Weather."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Ask for the location (WOEID) and refresh interval."""
        errors = {}

        if user_input is not None:
            location = user_input[CONF_LOCATION]
            await self.async_set_unique_id(str(location))
            self._abort_if_unique_id_configured()

            try:
                city = await validate_location(self.hass, location)
            except YahooWeatherConnectionError as err:
                _LOGGER.error("Error connecting to Yahoo Weather: %s", err)
                errors["base"] = "cannot_connect"
            except LocationNotFound:
                _LOGGER.warning("Yahoo Weather location %s not found", location)
                errors[CONF_LOCATION] = "location_not_found"
            else:
                return self.async_create_entry(
                    title=city or DEFAULT_NAME,
                    data={
                        CONF_LOCATION: location,
                        CONF_REFRESH: user_input.get(CONF_REFRESH, DEFAULT_REFRESH),
                    },
                )

        return self.async_show_form(
            step_id="user",
            data_schema=self._get_user_schema(user_input),
            errors=errors,
        )

    def _get_user_schema(self, user_input: dict[str, Any] | None = None) -> vol.Schema:
        user_input = user_input or {}
        return vol.Schema({
            vol.Required(CONF_LOCATION, default=user_input.get(CONF_LOCATION, vol.UNDEFINED)): vol.All(
                vol.Coerce(int), vol.Range(min=1)
            ),
            vol.Optional(CONF_REFRESH, default=user_input.get(CONF_REFRESH, DEFAULT_REFRESH)): _refresh_validator(),
        })

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        return YahooWeatherOptionsFlow(config_entry)


class YahooWeatherOptionsFlow(config_entries.OptionsFlow):
    """Change the refresh interval of an existing entry."""

    def __init__(self, config_entry):
        self._entry = config_entry

    async def async_step_init(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        current = self._entry.options.get(
            CONF_REFRESH, self._entry.data.get(CONF_REFRESH, DEFAULT_REFRESH)
        )
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema({
                vol.Required(CONF_REFRESH, default=current): _refresh_validator(),
            }),
        )
