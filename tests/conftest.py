import pytest

from weatherwise import CacheStore, Location, MemoryStore, WeatherSnapshot


FORECAST_PAYLOAD = {
    "latitude": 51.5,
    "longitude": -0.12,
    "generationtime_ms": 0.08,
    "utc_offset_seconds": 0,
    "timezone": "Europe/London",
    "timezone_abbreviation": "GMT",
    "elevation": 23.0,
    "current_units": {"time": "iso8601", "temperature_2m": "°C"},
    "current": {
        "time": "2024-01-15T12:00",
        "interval": 900,
        "temperature_2m": 8.5,
        "apparent_temperature": 6.1,
        "weather_code": 3,
        "wind_speed_10m": 14.2,
        "wind_direction_10m": 225,
        "relative_humidity_2m": 81,
        "is_day": 1,
    },
    "daily_units": {"time": "iso8601"},
    "daily": {
        "time": ["2024-01-15", "2024-01-16", "2024-01-17"],
        "weather_code": [3, 61, 0],
        "temperature_2m_max": [9.1, 10.4, 7.0],
        "temperature_2m_min": [4.2, 6.0, 1.5],
    },
}


class FakeClock:
    def __init__(self, now: int = 1_705_320_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, minutes: float) -> None:
        self.now += int(minutes * 60_000)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return CacheStore(MemoryStore(), clock=clock)


@pytest.fixture
def snapshot():
    return WeatherSnapshot(**FORECAST_PAYLOAD)


@pytest.fixture
def london():
    return Location(
        name="London", country="United Kingdom", admin1="England",
        latitude=51.5085, longitude=-0.1257,
    )


@pytest.fixture
def paris():
    return Location(
        name="Paris", country="France", admin1="Île-de-France",
        latitude=48.8534, longitude=2.3488,
    )
