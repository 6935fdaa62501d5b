"""Formatting helpers for presenting weather snapshots.

WMO weather-code labels, unit conversions and relative time strings.
Pure functions; nothing here touches the network or the cache.
"""

from datetime import date, datetime, timedelta
from datetime import timezone as dt_timezone
from typing import Optional

from .types import Units

WEATHER_CODE_LABELS = {
    0: "Clear Sky",
    1: "Mainly Clear",
    2: "Partly Cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Depositing Rime Fog",
    51: "Light Drizzle",
    53: "Moderate Drizzle",
    55: "Dense Drizzle",
    56: "Light Freezing Drizzle",
    57: "Dense Freezing Drizzle",
    61: "Slight Rain",
    63: "Moderate Rain",
    65: "Heavy Rain",
    66: "Light Freezing Rain",
    67: "Heavy Freezing Rain",
    71: "Slight Snowfall",
    73: "Moderate Snowfall",
    75: "Heavy Snowfall",
    77: "Snow Grains",
    80: "Slight Rain Showers",
    81: "Moderate Rain Showers",
    82: "Violent Rain Showers",
    85: "Slight Snow Showers",
    86: "Heavy Snow Showers",
    95: "Thunderstorm",
    96: "Thunderstorm with Slight Hail",
    99: "Thunderstorm with Heavy Hail",
}
"""dict[int, str]: WMO weather interpretation codes used by Open-Meteo."""

_COMPASS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]


def weather_label(code: Optional[int]) -> str:
    """Return the label for a WMO code, or "Unknown".

    Example:
        >>> weather_label(63)
        'Moderate Rain'
    """
    if code is None:
        return "Unknown"
    return WEATHER_CODE_LABELS.get(code, "Unknown")


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def kmh_to_mph(kmh: float) -> float:
    return kmh * 0.621371


def format_temperature(celsius: Optional[float], units: Units) -> str:
    """Format a Celsius reading in the preferred units, rounded.

    Example:
        >>> format_temperature(20.0, Units.FAHRENHEIT)
        '68°F'
    """
    if celsius is None:
        return "--"
    if units is Units.FAHRENHEIT:
        return f"{round(celsius_to_fahrenheit(celsius))}°F"
    return f"{round(celsius)}°C"


def format_wind_speed(kmh: Optional[float], units: Units) -> str:
    if kmh is None:
        return "--"
    if units is Units.FAHRENHEIT:
        return f"{round(kmh_to_mph(kmh))} mph"
    return f"{round(kmh)} km/h"


def wind_direction(degrees: Optional[float]) -> str:
    """Convert a bearing in degrees to a 16-point compass direction.

    Example:
        >>> wind_direction(225)
        'SW'
    """
    if degrees is None:
        return "--"
    return _COMPASS[round(degrees / 22.5) % 16]


def format_last_updated(timestamp_ms: Optional[int], now_ms: Optional[int] = None) -> str:
    """Describe how long ago ``timestamp_ms`` was.

    Args:
        timestamp_ms: Epoch milliseconds, or None.
        now_ms: Current epoch milliseconds. Defaults to the system clock.

    Returns:
        "just now", "N min ago", "N hour(s) ago", or for anything older
        than a day the date and time (e.g., "Oct 17, 02:30 PM").
    """
    if not timestamp_ms:
        return "unknown time"
    if now_ms is None:
        now_ms = int(datetime.now(tz=dt_timezone.utc).timestamp() * 1000)

    diff = now_ms - timestamp_ms
    if diff < 60_000:
        return "just now"
    if diff < 3_600_000:
        return f"{diff // 60_000} min ago"
    if diff < 86_400_000:
        hours = diff // 3_600_000
        return f"{hours} hour{'s' if hours != 1 else ''} ago"

    dt = datetime.fromtimestamp(timestamp_ms / 1000)
    return f"{dt:%b} {dt.day}, {dt:%I:%M %p}"


def format_day(day: str, today: Optional[date] = None) -> str:
    """Name a forecast day: "Today", "Tomorrow" or the weekday.

    Args:
        day: ISO date string (e.g., "2024-01-15").
        today: Reference date. Defaults to the local date.
    """
    today = today or date.today()
    d = date.fromisoformat(day)
    if d == today:
        return "Today"
    if d == today + timedelta(days=1):
        return "Tomorrow"
    return d.strftime("%A")
