"""Exceptions for the WeatherWise client.

All exceptions inherit from WeatherWiseError for easy catching. The
orchestration engine converts every provider and geolocation error into
a presentation outcome, so these rarely escape to application code;
they are public for callers that use the coordinator directly.

Example:
    Catching provider failures::

        from weatherwise import ProviderError, RequestCancelledError

        try:
            results = await coordinator.search_by_name("Paris")
        except RequestCancelledError:
            pass  # a newer search replaced this one
        except ProviderError as e:
            print(f"Lookup failed: {e}")
"""


class WeatherWiseError(Exception):
    """Base exception for all WeatherWise errors."""

    pass


class WeatherWiseValidationError(WeatherWiseError):
    """Exception raised when input validation fails.

    This occurs when coordinates are out of range before a request is
    issued.

    Example:
        >>> await coordinator.fetch_forecast(999.0, 0.0)
        Traceback (most recent call last):
        WeatherWiseValidationError: Latitude must be in range [-90.0, 90.0], got 999.0
    """

    pass


class RequestCancelledError(WeatherWiseError):
    """Exception raised when a request was superseded or aborted.

    Cancellation is expected: a newer request of the same category
    replaced this one. Callers treat it as a silent no-op, never as a
    user-visible failure.

    Args:
        category: Category value of the cancelled request.
    """

    def __init__(self, category: str) -> None:
        self.category = category
        super().__init__(f"{category} request cancelled")


class ProviderError(WeatherWiseError):
    """Base exception for failures talking to the data provider."""

    pass


class ProviderHTTPError(ProviderError):
    """Exception raised when the provider answers with a non-2xx status.

    Args:
        status_code: HTTP status code of the response.
        reason: Error reason reported by the API, if any.

    Attributes:
        status_code: HTTP status code of the response.
        reason: Error reason reported by the API, or the status phrase.

    Example:
        >>> raise ProviderHTTPError(400, "Latitude must be in range of -90 to 90°.")
        ProviderHTTPError: HTTP 400: Latitude must be in range of -90 to 90°.
    """

    def __init__(self, status_code: int, reason: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"HTTP {status_code}: {reason}" if reason else f"HTTP {status_code}")


class ProviderConnectionError(ProviderError):
    """Exception raised when the provider cannot be reached.

    Covers DNS failures, refused connections, timeouts and being
    offline. Wraps underlying httpx exceptions.
    """

    pass


class ProviderResponseError(ProviderError):
    """Exception raised when a response body cannot be parsed."""

    pass


class LocationNotFoundError(WeatherWiseError):
    """Exception raised when a place search yields no candidates.

    Args:
        query: The search text.
    """

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f'No results found for "{query}"')


class GeolocationError(WeatherWiseError):
    """Base exception for device geolocation failures.

    Attributes:
        message: User-facing description of the failure.
    """

    message = "Unable to retrieve your location."

    def __init__(self, message: str = "") -> None:
        if message:
            self.message = message
        super().__init__(self.message)


class GeolocationPermissionDenied(GeolocationError):
    """The user or platform refused access to the device position."""

    message = "Location permission denied."


class GeolocationUnavailable(GeolocationError):
    """No position could be determined."""

    message = "Location information is unavailable."


class GeolocationTimeout(GeolocationError):
    """The position was not obtained within the allowed wait."""

    message = "Location request timed out."


class StorageError(WeatherWiseError):
    """Exception raised when the local key-value store fails.

    This occurs when the backing file cannot be read or written (e.g.,
    permission errors, disk full). The cache store contains these and
    reports failure through its boolean results.
    """

    pass
