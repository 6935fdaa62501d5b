"""Presentation interface driven by the orchestration engine.

The engine never formats output itself; it issues render commands to a
Presenter. ConsolePresenter is the text implementation used by the
command-line front end.
"""

import asyncio
import sys
from abc import ABC, abstractmethod
from typing import Callable, Optional, TextIO

from .display import (
    format_day,
    format_last_updated,
    format_temperature,
    format_wind_speed,
    weather_label,
    wind_direction,
)
from .models import Location, WeatherSnapshot
from .types import BANNER_AUTO_DISMISS_SECONDS, BannerKind, Units


class Presenter(ABC):
    """Render commands consumed from the orchestration engine."""

    units: Units = Units.CELSIUS

    @abstractmethod
    def show_loading(self) -> None:
        """Enter the loading state."""

    @abstractmethod
    def hide_loading(self) -> None:
        """Leave the loading state without rendering anything."""

    @abstractmethod
    def show_error(self, title: str, message: str) -> None:
        """Show a blocking error screen with a retry action."""

    @abstractmethod
    def render_result(
        self, location: Location, snapshot: WeatherSnapshot, is_cached: bool
    ) -> None:
        """Render weather for ``location``; ``is_cached`` marks stale data."""

    @abstractmethod
    def show_banner(self, kind: BannerKind, message: str, auto_dismiss: bool) -> None:
        """Show a dismissible banner.

        With ``auto_dismiss`` the banner disappears after
        BANNER_AUTO_DISMISS_SECONDS.
        """

    @abstractmethod
    def hide_banner(self) -> None:
        """Remove any banner."""

    def set_units(self, units: Units) -> None:
        self.units = units


class ConsolePresenter(Presenter):
    """Writes results, errors and banners as plain text.

    Args:
        stream: Output stream. Defaults to sys.stdout.
        last_updated: Returns the epoch milliseconds of the last cached
            fetch, shown next to results.
        favorite_check: Returns whether a location is a favorite, shown
            as a star next to its name.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        *,
        last_updated: Optional[Callable[[], Optional[int]]] = None,
        favorite_check: Optional[Callable[[Location], bool]] = None,
    ) -> None:
        self._stream = stream or sys.stdout
        self._last_updated = last_updated
        self._favorite_check = favorite_check
        self._dismiss_handle: Optional[asyncio.TimerHandle] = None
        self.banner: Optional[tuple[BannerKind, str]] = None
        self.loading = False

    def _write(self, text: str) -> None:
        print(text, file=self._stream)

    def show_loading(self) -> None:
        self.loading = True

    def hide_loading(self) -> None:
        self.loading = False

    def show_error(self, title: str, message: str) -> None:
        self.loading = False
        self._write(f"{title}: {message}")

    def render_result(
        self, location: Location, snapshot: WeatherSnapshot, is_cached: bool
    ) -> None:
        self.loading = False
        current = snapshot.current
        star = " *" if self._favorite_check and self._favorite_check(location) else ""
        self._write(f"{location.display_name}{star}")

        if self._last_updated is not None:
            when = format_last_updated(self._last_updated())
            self._write(f"{'Cached data' if is_cached else 'Updated'}: {when}")

        self._write(
            f"{format_temperature(current.temperature_2m, self.units)} "
            f"{weather_label(current.weather_code)}, feels like "
            f"{format_temperature(current.apparent_temperature, self.units)}"
        )
        self._write(
            f"Wind {format_wind_speed(current.wind_speed_10m, self.units)} "
            f"{wind_direction(current.wind_direction_10m)}, "
            f"humidity {current.relative_humidity_2m if current.relative_humidity_2m is not None else '--'}%"
        )

        daily = snapshot.daily
        for i, day in enumerate(daily.time):
            code = daily.weather_code[i] if daily.weather_code else None
            high = daily.temperature_2m_max[i] if daily.temperature_2m_max else None
            low = daily.temperature_2m_min[i] if daily.temperature_2m_min else None
            self._write(
                f"  {format_day(day):<10} {weather_label(code):<30} "
                f"{format_temperature(low, self.units)} / "
                f"{format_temperature(high, self.units)}"
            )

    def show_banner(self, kind: BannerKind, message: str, auto_dismiss: bool) -> None:
        self._cancel_dismiss()
        self.banner = (kind, message)
        self._write(f"[{kind.value}] {message}")
        if not auto_dismiss:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._dismiss_handle = loop.call_later(
            BANNER_AUTO_DISMISS_SECONDS, self.hide_banner
        )

    def hide_banner(self) -> None:
        self._cancel_dismiss()
        self.banner = None

    def _cancel_dismiss(self) -> None:
        if self._dismiss_handle is not None:
            self._dismiss_handle.cancel()
            self._dismiss_handle = None
