import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .api import YahooWeatherClient
from .const import CONF_LOCATION, CONF_REFRESH, DEFAULT_REFRESH, DOMAIN, PLATFORMS
from .handler import YahooWeatherHandler

_LOGGER = logging.getLogger(__name__)

CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Yahoo Weather from a config entry."""
    _LOGGER.debug("Setting up entry: %s", entry.entry_id)

    refresh = entry.options.get(CONF_REFRESH, entry.data.get(CONF_REFRESH, DEFAULT_REFRESH))
    client = YahooWeatherClient(session=async_get_clientsession(hass))
    handler = YahooWeatherHandler(hass, client, entry.data[CONF_LOCATION], refresh=refresh)

    hass.data.setdefault(DOMAIN, {})
    hass.data[DOMAIN][entry.entry_id] = handler

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    await handler.async_start()

    entry.async_on_unload(entry.add_update_listener(_async_update_listener))
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    _LOGGER.debug("Unloading entry: %s", entry.entry_id)
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unload_ok:
        handler: YahooWeatherHandler = hass.data[DOMAIN].pop(entry.entry_id)
        handler.async_stop()

    return unload_ok


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry when its options change."""
    await hass.config_entries.async_reload(entry.entry_id)
