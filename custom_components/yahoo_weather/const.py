DOMAIN = "yahoo_weather"
DEFAULT_NAME = "Yahoo Weather"

PLATFORMS = ["sensor"]

# Configuration keys
CONF_LOCATION = "location"
CONF_REFRESH = "refresh"

DEFAULT_REFRESH = 60  # seconds
MIN_REFRESH = 10  # seconds

# YQL endpoint
YQL_URL = "https://query.yahooapis.com/v1/public/yql"
REQUEST_TIMEOUT = 15  # seconds

# Cache settings
CACHE_EXPIRY = 10  # seconds
CACHE_KEY_CONFIG = "CONFIG_STATUS"
CACHE_KEY_WEATHER = "WEATHER"

# Payloads older than this are dropped when the API stops returning results
MAX_DATA_AGE = 3 * 60 * 60  # seconds

# Channels
CHANNEL_TEMPERATURE = "temperature"
CHANNEL_HUMIDITY = "humidity"
CHANNEL_PRESSURE = "pressure"

CHANNELS = (CHANNEL_TEMPERATURE, CHANNEL_HUMIDITY, CHANNEL_PRESSURE)

# The API reports pressure as mbar * 33.86 (inHg * 1000) for some locations
PRESSURE_CORRECTION_THRESHOLD = 10000
PRESSURE_CORRECTION_FACTOR = 33.86

# Status details
STATUS_COMMUNICATION_ERROR = "communication_error"
STATUS_NO_DATA = "no_data"
STATUS_LOCATION_NOT_FOUND = "location_not_found"

# Config status message keys
MESSAGE_LOCATION_NOT_FOUND = "location-not-found"
