"""Pydantic models for WeatherWise state and OpenMeteo API responses.

Key model groups:
    1. **Places**: Location, Coordinates, RecentSearch
    2. **Provider payloads**: GeocodingResult, GeocodingResponse,
       CurrentConditions, DailyForecast, WeatherSnapshot, ErrorResponse
    3. **Persisted state**: CacheEntry

Note:
    The engine treats WeatherSnapshot as opaque. Only the cache store
    looks at the envelope (CacheEntry.stored_at_ms) and only the
    presentation layer reads the weather fields.

Example:
    Building a location from a geocoding candidate::

        result = GeocodingResult(**payload["results"][0])
        location = result.to_location()
        print(location.key)  # ('Paris', 'France')
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class Coordinates(BaseModel):
    """A device position in decimal degrees."""

    latitude: float
    longitude: float


class Location(BaseModel):
    """A resolved place.

    Two locations are the same place when their ``key`` matches; the
    coordinates are not part of identity because geocoding results for
    one place are stable in name and country but not in coordinates.

    Attributes:
        name: Place name (e.g., "Paris").
        country: Country name (e.g., "France").
        admin1: First-level administrative area, if known.
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.

    Example:
        >>> a = Location(name="Paris", country="France", latitude=48.85, longitude=2.35)
        >>> b = Location(name="Paris", country="France", latitude=48.86, longitude=2.34)
        >>> a.same_place(b)
        True
    """

    model_config = ConfigDict(frozen=True)

    name: str
    country: str
    admin1: Optional[str] = None
    latitude: float
    longitude: float

    @property
    def key(self) -> tuple[str, str]:
        return (self.name, self.country)

    def same_place(self, other: "Location") -> bool:
        return self.key == other.key

    @property
    def display_name(self) -> str:
        """Human-readable label, e.g. "Springfield, Illinois, United States"."""
        parts = [self.name]
        if self.admin1 and self.admin1 != self.name:
            parts.append(self.admin1)
        if self.country:
            parts.append(self.country)
        return ", ".join(parts)


class RecentSearch(Location):
    """A location in the recent-searches list.

    Attributes:
        timestamp: When the location was last fetched, epoch milliseconds.
    """

    timestamp: int


class GeocodingResult(BaseModel):
    """One candidate from the geocoding API.

    The API returns many more fields (elevation, timezone, population,
    postcodes, ...); they are kept but unused.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    country: str = ""
    admin1: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def to_location(
        self, latitude: Optional[float] = None, longitude: Optional[float] = None
    ) -> Location:
        """Convert to a Location.

        Args:
            latitude: Override for the candidate's latitude. Reverse
                geocoding keeps the queried position.
            longitude: Override for the candidate's longitude.

        Returns:
            Location for this candidate.
        """
        return Location(
            name=self.name,
            country=self.country,
            admin1=self.admin1,
            latitude=self.latitude if latitude is None else latitude,
            longitude=self.longitude if longitude is None else longitude,
        )


class GeocodingResponse(BaseModel):
    """Response envelope of the geocoding search and reverse endpoints.

    ``results`` is omitted by the API when nothing matches.
    """

    model_config = ConfigDict(extra="allow")

    results: Optional[list[GeocodingResult]] = None


class CurrentConditions(BaseModel):
    """Current weather conditions.

    Attributes:
        time: ISO8601 datetime string of the measurement.
        interval: Measurement interval in seconds.
        temperature_2m: Temperature at 2m in °C.
        apparent_temperature: "Feels like" temperature in °C.
        weather_code: WMO weather code (0-99).
        wind_speed_10m: Wind speed at 10m in km/h.
        wind_direction_10m: Wind direction at 10m in degrees.
        relative_humidity_2m: Relative humidity at 2m in %.
        is_day: Day/night indicator (1=day, 0=night).
    """

    model_config = ConfigDict(extra="allow")

    time: Optional[str] = None
    interval: Optional[int] = None
    temperature_2m: Optional[float] = None
    apparent_temperature: Optional[float] = None
    weather_code: Optional[int] = None
    wind_speed_10m: Optional[float] = None
    wind_direction_10m: Optional[int] = None
    relative_humidity_2m: Optional[int] = None
    is_day: Optional[int] = None


class DailyForecast(BaseModel):
    """Daily forecast as parallel lists indexed like ``time``.

    Attributes:
        time: List of ISO8601 date strings (e.g., "2024-01-15").
        weather_code: Dominant WMO weather code per day.
        temperature_2m_max: Maximum daily temperature at 2m in °C.
        temperature_2m_min: Minimum daily temperature at 2m in °C.
    """

    model_config = ConfigDict(extra="allow")

    time: list[str]
    weather_code: Optional[list[Optional[int]]] = None
    temperature_2m_max: Optional[list[Optional[float]]] = None
    temperature_2m_min: Optional[list[Optional[float]]] = None


class WeatherSnapshot(BaseModel):
    """Forecast response for one location.

    Unknown provider fields (units blocks, elevation, generation time)
    are preserved so a cached snapshot round-trips unchanged.

    Example:
        >>> snapshot = await coordinator.fetch_forecast(51.5074, -0.1278)
        >>> print(f"Now: {snapshot.current.temperature_2m}°C")
        >>> for day, high in zip(snapshot.daily.time, snapshot.daily.temperature_2m_max):
        ...     print(day, high)
    """

    model_config = ConfigDict(extra="allow")

    latitude: float
    longitude: float
    timezone: str = "GMT"
    utc_offset_seconds: int = 0
    current: CurrentConditions
    daily: DailyForecast


class CacheEntry(BaseModel):
    """The last known good (location, snapshot) pair.

    Attributes:
        location: Location the snapshot belongs to.
        snapshot: The forecast as received.
        stored_at_ms: When the pair was stored, epoch milliseconds.
    """

    location: Location
    snapshot: WeatherSnapshot
    stored_at_ms: int

    def is_valid(self, now_ms: int, ttl_ms: int) -> bool:
        return now_ms - self.stored_at_ms <= ttl_ms


class ErrorResponse(BaseModel):
    """Error response from the OpenMeteo API.

    Attributes:
        error: Always True for error responses.
        reason: Human-readable error description.

    Example:
        >>> # This is what an error response looks like
        >>> {"error": True, "reason": "Latitude must be in range of -90 to 90°."}
    """

    error: bool
    reason: str
