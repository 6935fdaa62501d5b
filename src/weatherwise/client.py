"""Async request coordinator for the Open-Meteo geocoding and forecast APIs.

This module provides RequestCoordinator, which issues the three lookups
the application needs and enforces single-flight cancellation per
request category:

    - ``geocode``: search_by_name() and reverse_geocode()
    - ``weather``: fetch_forecast()

Starting a request cancels the still-pending request of the same
category. Every call carries a CancellationToken; a call whose token
fires raises RequestCancelledError, both while waiting on the transport
and when a response arrives after the token was cancelled. Nothing is
retried.

Example:
    Type-ahead search where only the last query counts::

        import asyncio
        from weatherwise import RequestCoordinator

        async def main():
            async with RequestCoordinator() as coordinator:
                first = asyncio.create_task(coordinator.search_by_name("Par"))
                second = asyncio.create_task(coordinator.search_by_name("Paris"))
                results = await second   # first raises RequestCancelledError
                forecast = await coordinator.fetch_forecast(
                    results[0].latitude, results[0].longitude
                )

        asyncio.run(main())
"""

import asyncio
import logging
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .exceptions import (
    ProviderConnectionError,
    ProviderHTTPError,
    ProviderResponseError,
    RequestCancelledError,
    WeatherWiseValidationError,
)
from .models import ErrorResponse, GeocodingResponse, Location, WeatherSnapshot
from .types import (
    CURRENT_VARIABLES,
    DAILY_VARIABLES,
    DEFAULT_TIMEOUT_SECONDS,
    FORECAST_BASE_URL,
    GEOCODING_REVERSE_URL,
    GEOCODING_SEARCH_URL,
    MIN_QUERY_LENGTH,
    SEARCH_LANGUAGE,
    SEARCH_RESULT_COUNT,
    RequestCategory,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class CancellationToken:
    """Cooperative cancellation signal for one request.

    Args:
        category: Category of the request the token belongs to.

    Example:
        >>> token = coordinator.begin(RequestCategory.WEATHER)
        >>> token.cancel()
        >>> token.cancelled
        True
    """

    def __init__(self, category: RequestCategory) -> None:
        self.category = category
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise RequestCancelledError(self.category.value)


def _error_reason(response: httpx.Response) -> str:
    try:
        return ErrorResponse(**response.json()).reason
    except (ValueError, TypeError):
        return response.reason_phrase


class RequestCoordinator:
    """Async client for Open-Meteo with single-flight cancellation.

    Keeps one slot per RequestCategory holding the token of the most
    recently issued request. ``begin()`` cancels the slot's token and
    installs a fresh one; the public lookups call it themselves when
    no token is passed.

    Args:
        timeout: HTTP request timeout in seconds. Defaults to None, which
            waits until the transport settles or the token fires.
        transport: Optional httpx transport for the underlying client
            (e.g., httpx.MockTransport in tests).

    Attributes:
        _timeout: HTTP timeout in seconds, or None.
        _client: Lazy-initialized httpx.AsyncClient.
        _slots: Active token per request category.

    Example:
        Using as async context manager (recommended)::

            async with RequestCoordinator() as coordinator:
                places = await coordinator.search_by_name("Paris")

        Manual resource management::

            coordinator = RequestCoordinator()
            try:
                snapshot = await coordinator.fetch_forecast(48.85, 2.35)
            finally:
                await coordinator.close()
    """

    def __init__(
        self,
        *,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._slots: dict[RequestCategory, CancellationToken] = {}

    async def __aenter__(self) -> "RequestCoordinator":
        await self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Lazily create the httpx.AsyncClient."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            )
        return self._client

    async def close(self) -> None:
        """Abort outstanding requests and close the HTTP client.

        Safe to call multiple times.
        """
        self.abort_all()
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def begin(self, category: RequestCategory) -> CancellationToken:
        """Start a new request slot for ``category``.

        Cancels the previous token of the category, if any, so its
        request can never resolve into application state.

        Args:
            category: Request category.

        Returns:
            The freshly installed token.
        """
        previous = self._slots.get(category)
        if previous is not None and not previous.cancelled:
            logger.debug(f"Superseding pending {category.value} request")
            previous.cancel()
        token = CancellationToken(category)
        self._slots[category] = token
        return token

    def abort(self, category: RequestCategory) -> None:
        """Cancel the outstanding request of ``category`` without replacing it."""
        token = self._slots.pop(category, None)
        if token is not None:
            token.cancel()

    def abort_all(self) -> None:
        for category in list(self._slots):
            self.abort(category)

    def is_current(self, token: CancellationToken) -> bool:
        """Whether ``token`` is still the live token of its category."""
        return self._slots.get(token.category) is token and not token.cancelled

    def _validate_coordinates(self, latitude: float, longitude: float) -> None:
        """Validate geographic coordinates.

        Raises:
            WeatherWiseValidationError: If latitude not in [-90, 90] or
                longitude not in [-180, 180].
        """
        if not -90.0 <= latitude <= 90.0:
            raise WeatherWiseValidationError(
                f"Latitude must be in range [-90.0, 90.0], got {latitude}"
            )
        if not -180.0 <= longitude <= 180.0:
            raise WeatherWiseValidationError(
                f"Longitude must be in range [-180.0, 180.0], got {longitude}"
            )

    async def _fetch(
        self, url: str, params: dict[str, Any], token: CancellationToken
    ) -> Any:
        """Fetch JSON from the API, racing the request against ``token``.

        Args:
            url: API URL to fetch from.
            params: Query parameters.
            token: Cancellation token of the request.

        Returns:
            Parsed JSON body.

        Raises:
            RequestCancelledError: If the token fired before or while the
                request was in flight.
            ProviderHTTPError: If the API answered with a non-2xx status.
            ProviderConnectionError: If no response could be obtained.
            ProviderResponseError: If the body is not valid JSON.
        """
        token.raise_if_cancelled()
        client = await self._ensure_client()

        request = asyncio.ensure_future(client.get(url, params=params))
        waiter = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait(
                {request, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            waiter.cancel()
            if not request.done():
                request.cancel()

        if request not in done:
            logger.debug(f"{token.category.value} request to {url} cancelled")
            raise RequestCancelledError(token.category.value)

        # The transport may settle after cancellation; drop the late
        # outcome, failures included.
        token.raise_if_cancelled()

        try:
            response = request.result()
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderHTTPError(
                e.response.status_code, _error_reason(e.response)
            ) from e
        except httpx.RequestError as e:
            raise ProviderConnectionError(f"Request error: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderResponseError(f"Invalid JSON from {url}: {e}") from e

        if isinstance(data, dict) and data.get("error"):
            raise ProviderResponseError(str(data.get("reason", "unknown error")))
        return data

    def _parse(self, model: type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ProviderResponseError(
                f"Unexpected {model.__name__} payload: {e}"
            ) from e

    async def search_by_name(
        self, query: str, token: Optional[CancellationToken] = None
    ) -> list[Location]:
        """Search places by name.

        Args:
            query: Free-text place name. Queries shorter than two
                characters return an empty list without a request.
            token: Cancellation token from ``begin(GEOCODE)``. A new one
                is issued when omitted.

        Returns:
            Up to five candidate locations, best match first.

        Raises:
            RequestCancelledError: If superseded by another geocode request.
            ProviderError: If the lookup failed.
        """
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []

        token = token or self.begin(RequestCategory.GEOCODE)
        logger.debug(f"Searching places for {query!r}")
        params = {
            "name": query,
            "count": SEARCH_RESULT_COUNT,
            "language": SEARCH_LANGUAGE,
            "format": "json",
        }
        data = await self._fetch(GEOCODING_SEARCH_URL, params, token)
        response = self._parse(GeocodingResponse, data or {})

        locations = []
        for result in response.results or []:
            if result.latitude is None or result.longitude is None:
                logger.debug(f"Skipping candidate without coordinates: {result.name}")
                continue
            locations.append(result.to_location())
        return locations

    async def reverse_geocode(
        self,
        latitude: float,
        longitude: float,
        token: Optional[CancellationToken] = None,
    ) -> Optional[Location]:
        """Resolve coordinates to a named place.

        The returned location keeps the queried coordinates.

        Args:
            latitude: Latitude in decimal degrees (-90 to 90).
            longitude: Longitude in decimal degrees (-180 to 180).
            token: Cancellation token from ``begin(GEOCODE)``.

        Returns:
            The nearest named place, or None if the API knows none.

        Raises:
            WeatherWiseValidationError: If coordinates are invalid.
            RequestCancelledError: If superseded by another geocode request.
            ProviderError: If the lookup failed.
        """
        self._validate_coordinates(latitude, longitude)
        token = token or self.begin(RequestCategory.GEOCODE)

        params = {
            "latitude": latitude,
            "longitude": longitude,
            "language": SEARCH_LANGUAGE,
        }
        data = await self._fetch(GEOCODING_REVERSE_URL, params, token)
        response = self._parse(GeocodingResponse, data or {})
        if not response.results:
            return None
        return response.results[0].to_location(latitude, longitude)

    async def fetch_forecast(
        self,
        latitude: float,
        longitude: float,
        token: Optional[CancellationToken] = None,
    ) -> Optional[WeatherSnapshot]:
        """Fetch current conditions and the daily forecast.

        Args:
            latitude: Latitude in decimal degrees (-90 to 90).
            longitude: Longitude in decimal degrees (-180 to 180).
            token: Cancellation token from ``begin(WEATHER)``.

        Returns:
            The snapshot, or None if the API returned an empty body.

        Raises:
            WeatherWiseValidationError: If coordinates are invalid.
            RequestCancelledError: If superseded by another forecast request.
            ProviderError: If the fetch failed.

        Example:
            >>> async with RequestCoordinator() as coordinator:
            ...     snapshot = await coordinator.fetch_forecast(51.5074, -0.1278)
            ...     print(f"{snapshot.current.temperature_2m}°C")
        """
        self._validate_coordinates(latitude, longitude)
        token = token or self.begin(RequestCategory.WEATHER)

        logger.debug(f"Fetching forecast for ({latitude}, {longitude})")
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": ",".join(CURRENT_VARIABLES),
            "daily": ",".join(DAILY_VARIABLES),
            "timezone": "auto",
        }
        data = await self._fetch(FORECAST_BASE_URL, params, token)
        if not data:
            return None
        return self._parse(WeatherSnapshot, data)
