"""
Fixtures for the Yahoo Weather tests.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from custom_components.yahoo_weather.cache import Producer

LOCATION = 12345

LOCATION_BODY = (
    '{"query":{"count":1,"results":{"channel":{"location":'
    '{"city":"Berlin","country":"Germany","region":" BE"}}}}}'
)
UNKNOWN_LOCATION_BODY = '{"query":{"count":1,"results":{"channel":{"location":{}}}}}'
NO_RESULTS_BODY = '{"query":{"count":0,"created":"2018-01-01T00:00:00Z","lang":"en-US","results":null}}'


def forecast_body(temp="21", humidity="80", pressure="1015.0"):
    return (
        '{"query":{"count":1,"results":{"channel":{'
        '"units":{"distance":"km","pressure":"mb","speed":"km/h","temperature":"C"},'
        '"location":{"city":"Berlin"},'
        f'"atmosphere":{{"humidity":"{humidity}","pressure":"{pressure}","rising":"0","visibility":"25.6"}},'
        f'"item":{{"condition":{{"code":"28","date":"Mon, 01 Jan 2018 10:00 AM CET","temp":"{temp}","text":"Mostly Cloudy"}}}}'
        '}}}}'
    )


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


class StubProducer(Producer):
    """Producer returning queued results; exceptions in the queue are raised."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    async def async_produce(self):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def hass():
    """A minimal stand-in for the Home Assistant core object."""
    mock = MagicMock()
    mock.data = {}
    return mock


@pytest.fixture
def client():
    """A Yahoo Weather client answering each query with a canned body."""
    mock = MagicMock()
    mock.bodies = {"location": LOCATION_BODY, "forecast": forecast_body()}

    async def _respond(query):
        body = mock.bodies["location"] if query.startswith("SELECT location") else mock.bodies["forecast"]
        if isinstance(body, Exception):
            raise body
        return body

    mock.async_get_response_from_query = AsyncMock(side_effect=_respond)
    return mock
