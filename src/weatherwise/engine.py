"""Orchestration engine: user actions in, presentation outcomes out.

WeatherEngine sequences coordinator calls, consults the cache store and
collapses {request outcome, cache presence, connectivity flag} into
exactly one presentation outcome per action:

    ======  =====================================  ==========================
    Case    Condition                              Outcome
    ======  =====================================  ==========================
    A       geolocation failed, cache valid        cached result + warning
    B       provider call failed, cache valid      cached result + warning
    C       provider call failed, no cache         blocking error screen
    D       forecast fetched                       fresh result, persisted
    ======  =====================================  ==========================

A search that finds nothing follows B/C with "not found" wording rather
than network wording. A request superseded by a newer one of the same
category ends silently with Outcome.SUPERSEDED.

Example:
    Wiring the engine::

        async with RequestCoordinator() as coordinator:
            engine = WeatherEngine(
                CacheStore(JsonFileStore(path)),
                coordinator,
                ConsolePresenter(),
            )
            await engine.start()
            await engine.search("Paris")
"""

import logging
from typing import Optional

from .cache import CacheStore
from .client import RequestCoordinator
from .exceptions import (
    GeolocationError,
    GeolocationPermissionDenied,
    GeolocationUnavailable,
    LocationNotFoundError,
    ProviderResponseError,
    RequestCancelledError,
    WeatherWiseError,
)
from .geolocation import GeolocationProvider
from .models import Location, WeatherSnapshot
from .presentation import Presenter
from .types import DEFAULT_LOCATION, BannerKind, Outcome, RequestCategory, Units

logger = logging.getLogger(__name__)

OFFLINE_CACHED_MESSAGE = "You are offline. Showing cached data."
UNREACHABLE_CACHED_MESSAGE = "Can't reach Open-Meteo right now. Showing cached data."
OFFLINE_ERROR_MESSAGE = "You are offline. Please check your connection and try again."
UNREACHABLE_ERROR_MESSAGE = "Can't reach Open-Meteo right now. Please try again later."
OFFLINE_NO_CACHE_MESSAGE = "You are offline. No cached data available."


class WeatherEngine:
    """Decision core of the weather client.

    Owns no global state: the cache store, coordinator, presenter and
    geolocation provider are injected.

    Args:
        cache: Cache store for the last known good state and user lists.
        coordinator: Request coordinator for provider lookups.
        presenter: Receives render commands.
        geolocation: Device position source for use_my_location().
            Without one, locating always fails as unavailable.
        default_location: Starting location when nothing was fetched
            before. Defaults to London.
        is_online: Initial connectivity flag. Defaults to True.

    Attributes:
        is_online: Current connectivity flag.
        current_location: Last location a forecast was requested for.
    """

    def __init__(
        self,
        cache: CacheStore,
        coordinator: RequestCoordinator,
        presenter: Presenter,
        geolocation: Optional[GeolocationProvider] = None,
        *,
        default_location: Optional[Location] = None,
        is_online: bool = True,
    ) -> None:
        self._cache = cache
        self._coordinator = coordinator
        self._presenter = presenter
        self._geolocation = geolocation
        self._default_location = default_location or Location(**DEFAULT_LOCATION)
        self.is_online = is_online
        self.current_location: Optional[Location] = None
        self._displayed: Optional[tuple[Location, WeatherSnapshot, bool]] = None

        self._presenter.set_units(self._cache.units_preference())

    @property
    def displayed_location(self) -> Optional[Location]:
        return self._displayed[0] if self._displayed else None

    def _enter_loading(self) -> None:
        self._presenter.hide_banner()
        self._presenter.show_loading()

    def _render(self, location: Location, snapshot: WeatherSnapshot, is_cached: bool) -> None:
        self._displayed = (location, snapshot, is_cached)
        self._presenter.render_result(location, snapshot, is_cached)

    def _blocking_error(self, title: str, message: str) -> Outcome:
        self._presenter.hide_loading()
        self._presenter.show_error(title, message)
        logger.info(f"Blocking error: {title}: {message}")
        return Outcome.BLOCKING_ERROR

    def _fall_back(self, message: str, outcome: Outcome) -> Optional[Outcome]:
        """Render the cached entry under a warning banner, if there is one."""
        entry = self._cache.get()
        if entry is None:
            return None
        self._render(entry.location, entry.snapshot, True)
        self._presenter.show_banner(BannerKind.WARNING, message, True)
        logger.info(f"Showing cached {entry.location.display_name}: {message}")
        return outcome

    def _superseded(self, action: str) -> Outcome:
        logger.debug(f"{action} superseded by a newer request")
        return Outcome.SUPERSEDED

    def _fetch_failed(self, error: WeatherWiseError) -> Outcome:
        """Cases B and C: a provider call failed."""
        logger.warning(f"Weather lookup failed: {error}")
        offline = not self.is_online
        outcome = self._fall_back(
            OFFLINE_CACHED_MESSAGE if offline else UNREACHABLE_CACHED_MESSAGE,
            Outcome.FETCH_FALLBACK,
        )
        if outcome is not None:
            return outcome
        return self._blocking_error(
            "Network Error",
            OFFLINE_ERROR_MESSAGE if offline else UNREACHABLE_ERROR_MESSAGE,
        )

    def _not_found(self, error: LocationNotFoundError) -> Outcome:
        outcome = self._fall_back(
            f'No results found for "{error.query}". Showing cached data.',
            Outcome.FETCH_FALLBACK,
        )
        if outcome is not None:
            return outcome
        return self._blocking_error("Location Not Found", str(error))

    def _precondition_failed(self, error: GeolocationError) -> Outcome:
        """Case A: geolocation failed before any forecast attempt."""
        logger.warning(f"Geolocation failed: {error}")
        if isinstance(error, GeolocationPermissionDenied):
            message = f"{error.message} Search a city or allow location and try again."
        else:
            message = f"{error.message} Search a city or try again."

        outcome = self._fall_back(message, Outcome.PRECONDITION_FALLBACK)
        if outcome is not None:
            return outcome
        return self._blocking_error("Location Error", message)

    # User actions

    async def start(self) -> Outcome:
        """Load weather for the last location, or the default one."""
        location = self._cache.last_location() or self._default_location
        return await self.select_location(location)

    async def search(self, query: str) -> Outcome:
        """Search a place by name and show its weather.

        The first candidate wins. Zero candidates is a "not found"
        result, never an offline one.
        """
        query = query.strip()
        if not query:
            return self._blocking_error("Search Error", "Please enter a city name")

        self._enter_loading()
        token = self._coordinator.begin(RequestCategory.GEOCODE)
        try:
            candidates = await self._coordinator.search_by_name(query, token)
            if not candidates:
                raise LocationNotFoundError(query)
        except RequestCancelledError:
            return self._superseded("search")
        except LocationNotFoundError as e:
            if not self._coordinator.is_current(token):
                return self._superseded("search")
            return self._not_found(e)
        except WeatherWiseError as e:
            if not self._coordinator.is_current(token):
                return self._superseded("search")
            return self._fetch_failed(e)

        return await self.select_location(candidates[0])

    async def use_my_location(self) -> Outcome:
        """Show weather for the device position.

        A geolocation failure ends the action without a forecast
        attempt. Otherwise the position is reverse geocoded first.
        """
        self._enter_loading()
        try:
            if self._geolocation is None:
                raise GeolocationUnavailable()
            coordinates = await self._geolocation.locate()
        except GeolocationError as e:
            return self._precondition_failed(e)

        token = self._coordinator.begin(RequestCategory.GEOCODE)
        try:
            location = await self._coordinator.reverse_geocode(
                coordinates.latitude, coordinates.longitude, token
            )
            if location is None:
                raise ProviderResponseError("Could not determine location name")
        except RequestCancelledError:
            return self._superseded("use_my_location")
        except WeatherWiseError as e:
            if not self._coordinator.is_current(token):
                return self._superseded("use_my_location")
            return self._fetch_failed(e)

        return await self.select_location(location)

    async def select_location(self, location: Location) -> Outcome:
        """Fetch and show weather for an already resolved location."""
        self._enter_loading()
        self.current_location = location

        token = self._coordinator.begin(RequestCategory.WEATHER)
        try:
            snapshot = await self._coordinator.fetch_forecast(
                location.latitude, location.longitude, token
            )
            if snapshot is None:
                raise ProviderResponseError("No weather data received")
        except RequestCancelledError:
            return self._superseded("forecast")
        except WeatherWiseError as e:
            if not self._coordinator.is_current(token):
                return self._superseded("forecast")
            return self._fetch_failed(e)

        if not self._coordinator.is_current(token):
            return self._superseded("forecast")

        if not self._cache.put(location, snapshot):
            logger.warning(f"Showing {location.display_name} without caching it")
        self._render(location, snapshot, False)
        self._presenter.hide_banner()
        logger.info(f"Showing fresh weather for {location.display_name}")
        return Outcome.FRESH

    async def retry(self) -> Outcome:
        """Replay the last requested location, or bootstrap again."""
        if self.current_location is not None:
            return await self.select_location(self.current_location)
        return await self.start()

    async def suggest(self, query: str) -> list[Location]:
        """Type-ahead candidates for ``query``.

        Failures and superseded lookups yield an empty list; nothing is
        shown to the user.
        """
        token = self._coordinator.begin(RequestCategory.GEOCODE)
        try:
            return await self._coordinator.search_by_name(query, token)
        except RequestCancelledError:
            return []
        except WeatherWiseError as e:
            logger.debug(f"Suggestions for {query!r} failed: {e}")
            return []

    # Local actions

    def _rerender(self) -> None:
        if self._displayed is not None:
            self._presenter.render_result(*self._displayed)

    def change_units(self, units: Units) -> Outcome:
        """Persist the units preference and re-render what is shown."""
        units = Units(units)
        if not self._cache.set_units_preference(units):
            logger.warning(f"Units preference {units.value} applies to this session only")
        self._presenter.set_units(units)
        self._rerender()
        return Outcome.UNCHANGED

    def toggle_favorite(self) -> bool:
        """Toggle the shown (or last requested) location as a favorite.

        Returns:
            True if the location is a favorite afterwards.
        """
        location = self.displayed_location or self.current_location
        if location is None:
            return False
        added = self._cache.toggle_favorite(location)
        self._rerender()
        return added

    def set_online(self, online: bool) -> Outcome:
        """Apply a connectivity change.

        Going offline shows the cached entry under a persistent warning,
        or an error banner when there is none. Coming back online only
        clears the banner; the next user action fetches.
        """
        if online == self.is_online:
            return Outcome.UNCHANGED
        self.is_online = online

        if online:
            logger.info("Application is online")
            self._presenter.hide_banner()
            return Outcome.UNCHANGED

        logger.info("Application is offline")
        entry = self._cache.get()
        if entry is not None:
            self._render(entry.location, entry.snapshot, True)
            self._presenter.show_banner(BannerKind.WARNING, OFFLINE_CACHED_MESSAGE, False)
            return Outcome.FETCH_FALLBACK
        self._presenter.show_banner(BannerKind.ERROR, OFFLINE_NO_CACHE_MESSAGE, False)
        return Outcome.BLOCKING_ERROR

    def clear_cache(self) -> bool:
        """Hard reset of stored user data, keeping the units preference."""
        if not self._cache.clear_all(keep_units=True):
            self._presenter.show_banner(
                BannerKind.ERROR, "Failed to clear cache. Please try again.", True
            )
            return False

        self._coordinator.abort_all()
        self.current_location = None
        self._displayed = None
        self._presenter.show_banner(BannerKind.SUCCESS, "Cache cleared.", False)
        logger.info("Cleared cached weather and user lists")
        return True
