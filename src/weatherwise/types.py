"""Types and constants for the WeatherWise client.

This module defines enumerations and configuration constants used
throughout the package: provider endpoints, cache lifetimes, list
capacities and the persisted key layout.

Example:
    Using the Units enum::

        from weatherwise import Units

        store.set_units_preference(Units.FAHRENHEIT)
        if store.units_preference() is Units.CELSIUS:
            ...
"""

from enum import Enum


class Units(str, Enum):
    """Temperature unit preference.

    Attributes:
        CELSIUS: Degrees Celsius (the provider's native unit, default).
        FAHRENHEIT: Degrees Fahrenheit, converted for display only.

    Example:
        >>> Units("fahrenheit")
        <Units.FAHRENHEIT: 'fahrenheit'>
    """

    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"


class RequestCategory(str, Enum):
    """Single-flight cancellation granularity.

    Starting a request in a category cancels the outstanding request
    of the same category.

    Attributes:
        GEOCODE: Name search and reverse geocoding.
        WEATHER: Forecast retrieval.
    """

    GEOCODE = "geocode"
    WEATHER = "weather"


class BannerKind(str, Enum):
    """Visual severity of a banner message."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Outcome(str, Enum):
    """Result of a user action as seen by the presentation layer.

    Attributes:
        FRESH: Forecast fetched, rendered and persisted (case D).
        PRECONDITION_FALLBACK: Geolocation failed, cached data shown
            under a warning banner (case A).
        FETCH_FALLBACK: Provider call failed or found nothing, cached
            data shown under a warning banner (case B).
        BLOCKING_ERROR: Nothing usable to show, error screen (case C).
        SUPERSEDED: A newer request of the same category replaced this
            one; nothing was rendered.
        UNCHANGED: Local-only action, no state transition.
    """

    FRESH = "fresh"
    PRECONDITION_FALLBACK = "precondition_fallback"
    FETCH_FALLBACK = "fetch_fallback"
    BLOCKING_ERROR = "blocking_error"
    SUPERSEDED = "superseded"
    UNCHANGED = "unchanged"


GEOCODING_SEARCH_URL = "https://geocoding-api.open-meteo.com/v1/search"
"""str: Open-Meteo geocoding endpoint for searching places by name."""

GEOCODING_REVERSE_URL = "https://geocoding-api.open-meteo.com/v1/reverse"
"""str: Open-Meteo geocoding endpoint for resolving coordinates to a place."""

FORECAST_BASE_URL = "https://api.open-meteo.com/v1/forecast"
"""str: Base URL for the OpenMeteo Forecast API.

Used for current conditions and the daily forecast.
"""

CURRENT_VARIABLES = [
    "temperature_2m",
    "apparent_temperature",
    "weather_code",
    "wind_speed_10m",
    "wind_direction_10m",
    "relative_humidity_2m",
    "is_day",
]
"""list[str]: Current-conditions variables requested with every forecast."""

DAILY_VARIABLES = [
    "weather_code",
    "temperature_2m_max",
    "temperature_2m_min",
]
"""list[str]: Daily variables requested with every forecast."""

SEARCH_RESULT_COUNT = 5
"""int: Maximum number of candidates requested from the geocoding search."""

SEARCH_LANGUAGE = "en"
"""str: Language for place names returned by the geocoding API."""

MIN_QUERY_LENGTH = 2
"""int: Shortest search query that is sent to the provider.

Shorter queries resolve to an empty candidate list without a request.
"""

DEFAULT_TTL_MINUTES = 30
"""int: How long a cached weather snapshot stays usable, in minutes."""

MAX_RECENT_SEARCHES = 5
"""int: Capacity of the recent-searches list (most recent first)."""

DEFAULT_TIMEOUT_SECONDS = None
"""Optional[float]: Default HTTP transport timeout in seconds.

None waits until the transport settles or the request is cancelled.
"""

GEOLOCATION_TIMEOUT_SECONDS = 10.0
"""float: Upper bound on the wait for device coordinates."""

BANNER_AUTO_DISMISS_SECONDS = 8
"""int: Display window for banners shown with auto_dismiss=True."""

DEFAULT_LOCATION = {
    "name": "London",
    "country": "United Kingdom",
    "latitude": 51.5074,
    "longitude": -0.1278,
}
"""dict: Starting location used when nothing has been fetched before."""

STORAGE_KEYS = {
    "weather_data": "weatherwise_weather_data",
    "location": "weatherwise_location",
    "units": "weatherwise_units",
    "last_updated": "weatherwise_last_updated",
    "recent_searches": "weatherwise_recent_searches",
    "favorites": "weatherwise_favorites",
}
"""dict: Persisted key layout of the local key-value store."""
