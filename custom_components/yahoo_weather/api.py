"""Yahoo Weather YQL client for the Yahoo Weather integration.

Provides:
- YahooWeatherClient: async YQL query returning the raw response body.
- QueryProducer: cache producer running one YQL query per invocation.
- location_query / forecast_query: the two queries the integration issues.

The response body is returned as text; callers pick fields out of it with
the helpers in parser.py.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

import aiohttp
from homeassistant.exceptions import HomeAssistantError

from .cache import Producer
from .const import REQUEST_TIMEOUT, YQL_URL

_LOGGER = logging.getLogger(__name__)


class YahooWeatherConnectionError(HomeAssistantError):
    """Raised when the YQL endpoint cannot be reached or answers with an error."""


def location_query(woeid: Union[int, str]) -> str:
    return f"SELECT location FROM weather.forecast WHERE woeid = {woeid}"


def forecast_query(woeid: Union[int, str]) -> str:
    # u = 'c' requests metric units
    return f"SELECT * FROM weather.forecast WHERE u = 'c' AND woeid = {woeid}"


class YahooWeatherClient:
    """Async client issuing YQL queries against the Yahoo public endpoint."""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: str = YQL_URL,
    ) -> None:
        # If a session is supplied, we won't close it.
        self._session = session
        self._base_url = base_url

    async def async_get_response_from_query(self, query: str) -> str:
        """Run ``query`` and return the raw response body.

        Raises YahooWeatherConnectionError for transport failures and non-200
        responses.
        """
        params = {"q": query, "format": "json"}

        session = self._session or aiohttp.ClientSession()
        close_session = self._session is None

        _LOGGER.debug("YQL request to %s query=%s", self._base_url, query)
        try:
            timeout = aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)
            async with session.get(self._base_url, params=params, timeout=timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    _LOGGER.debug(
                        "YQL non-200 response: status=%s body=%s", resp.status, (text or "")[:1000]
                    )
                    raise YahooWeatherConnectionError(f"Yahoo Weather returned status {resp.status}")
                return text
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise YahooWeatherConnectionError(f"Error communicating with Yahoo Weather: {exc}") from exc
        finally:
            if close_session:
                try:
                    await session.close()
                except Exception:
                    _LOGGER.debug("Error closing temporary aiohttp session", exc_info=True)


class QueryProducer(Producer):
    """Produces the raw body of one YQL query."""

    def __init__(self, client: YahooWeatherClient, query: str) -> None:
        self._client = client
        self.query = query

    async def async_produce(self) -> str:
        return await self._client.async_get_response_from_query(self.query)

    def __repr__(self) -> str:
        return f"QueryProducer({self.query!r})"
