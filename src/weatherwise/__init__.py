"""WeatherWise: offline-tolerant weather lookup on top of Open-Meteo.

Given a place name or device coordinates, WeatherWise resolves a
location, fetches current conditions and a daily forecast, and hands
the result to a presentation layer. When the network fails it falls
back to the last good result for up to 30 minutes.

Key features:
    - Place search and reverse geocoding via the Open-Meteo geocoding API
    - Current conditions and 7-day daily forecast, no API key required
    - Single-flight cancellation: a newer request of the same category
      (geocode or weather) discards the older one
    - Local cache of the last good result with lazy TTL expiry
    - Recent searches, favorites and a persisted units preference
    - A fixed set of outcomes: fresh, cached with warning, blocking error

Components:
    - **CacheStore**: last known good state and user lists over a
      KeyValueStore (MemoryStore or JsonFileStore)
    - **RequestCoordinator**: async httpx client with per-category
      CancellationToken slots
    - **WeatherEngine**: turns user actions into presenter commands

Example:
    Show weather for a searched city::

        import asyncio
        from pathlib import Path
        from weatherwise import (
            CacheStore,
            ConsolePresenter,
            JsonFileStore,
            RequestCoordinator,
            WeatherEngine,
        )

        async def main():
            cache = CacheStore(JsonFileStore(Path("./storage.json")))
            async with RequestCoordinator() as coordinator:
                engine = WeatherEngine(cache, coordinator, ConsolePresenter())
                await engine.search("Paris")

        asyncio.run(main())

See Also:
    - Open-Meteo API docs: https://open-meteo.com/en/docs
"""

from .cache import CacheStore
from .client import CancellationToken, RequestCoordinator
from .engine import WeatherEngine
from .exceptions import (
    GeolocationError,
    GeolocationPermissionDenied,
    GeolocationTimeout,
    GeolocationUnavailable,
    LocationNotFoundError,
    ProviderConnectionError,
    ProviderError,
    ProviderHTTPError,
    ProviderResponseError,
    RequestCancelledError,
    StorageError,
    WeatherWiseError,
    WeatherWiseValidationError,
)
from .geolocation import GeolocationProvider, StaticGeolocationProvider
from .models import (
    CacheEntry,
    Coordinates,
    CurrentConditions,
    DailyForecast,
    Location,
    RecentSearch,
    WeatherSnapshot,
)
from .presentation import ConsolePresenter, Presenter
from .storage import JsonFileStore, KeyValueStore, MemoryStore
from .types import (
    DEFAULT_TTL_MINUTES,
    MAX_RECENT_SEARCHES,
    BannerKind,
    Outcome,
    RequestCategory,
    Units,
)

__all__ = [
    "WeatherEngine",
    "CacheStore",
    "RequestCoordinator",
    "CancellationToken",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "GeolocationProvider",
    "StaticGeolocationProvider",
    "Presenter",
    "ConsolePresenter",
    "Location",
    "Coordinates",
    "RecentSearch",
    "CacheEntry",
    "WeatherSnapshot",
    "CurrentConditions",
    "DailyForecast",
    "Units",
    "RequestCategory",
    "BannerKind",
    "Outcome",
    "WeatherWiseError",
    "WeatherWiseValidationError",
    "RequestCancelledError",
    "ProviderError",
    "ProviderHTTPError",
    "ProviderConnectionError",
    "ProviderResponseError",
    "LocationNotFoundError",
    "GeolocationError",
    "GeolocationPermissionDenied",
    "GeolocationUnavailable",
    "GeolocationTimeout",
    "StorageError",
    "DEFAULT_TTL_MINUTES",
    "MAX_RECENT_SEARCHES",
]
