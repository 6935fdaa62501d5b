"""Cache store for the last known good weather state.

This module keeps, on top of a KeyValueStore:

1. **The cache entry**: the single most recent successful
   (location, snapshot) pair.
   - TTL-based validity (30 minutes by default)
   - Lazy expiry: an expired entry is removed on the read that finds it
   - The last location is kept separately and survives expiry, so it
     can seed a fresh fetch

2. **User lists**: recent searches (5 most recent, deduplicated by
   name and country) and favorites (insertion order, unbounded).

3. **Units preference**: persisted independently of weather data.

No operation raises. Substrate faults and corrupt values are logged and
degrade to "no data"; mutators report success through their boolean
result and apply all of their key changes in one atomic batch.

Example:
    >>> store = CacheStore(MemoryStore())
    >>> store.put(location, snapshot)
    True
    >>> entry = store.get()
    >>> entry.location == location
    True
"""

import logging
from datetime import datetime, timedelta
from datetime import timezone as dt_timezone
from typing import Any, Callable, Optional

from pydantic import TypeAdapter, ValidationError

from .exceptions import StorageError
from .models import CacheEntry, Location, RecentSearch, WeatherSnapshot
from .storage import KeyValueStore
from .types import DEFAULT_TTL_MINUTES, MAX_RECENT_SEARCHES, STORAGE_KEYS, Units

logger = logging.getLogger(__name__)

_RECENT_ADAPTER = TypeAdapter(list[RecentSearch])
_FAVORITES_ADAPTER = TypeAdapter(list[Location])


def _now_ms() -> int:
    return int(datetime.now(tz=dt_timezone.utc).timestamp() * 1000)


def _plain(location: Location) -> Location:
    """Strip subclass fields (e.g. a RecentSearch timestamp) from a location."""
    return Location(**location.model_dump(include=set(Location.model_fields)))


def _without(items: list[Any], location: Location) -> list[Any]:
    """Return ``items`` minus entries naming the same place as ``location``."""
    return [item for item in items if not item.same_place(location)]


class CacheStore:
    """TTL-bounded store of the last successful weather lookup.

    Args:
        store: Key-value substrate holding the serialized records.
        ttl_minutes: Validity window of the cache entry. Defaults to 30.
        clock: Returns the current time in epoch milliseconds. Defaults
            to the system clock.

    Example:
        >>> cache = CacheStore(JsonFileStore(Path("./storage.json")))
        >>> if cache.toggle_favorite(location):
        ...     print("Added to favorites")
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        ttl_minutes: int = DEFAULT_TTL_MINUTES,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self._store = store
        self._ttl_ms = int(timedelta(minutes=ttl_minutes).total_seconds() * 1000)
        self._clock = clock or _now_ms

    def _read(self, name: str) -> Optional[str]:
        try:
            return self._store.get_item(STORAGE_KEYS[name])
        except StorageError as e:
            logger.warning(f"Failed to read {name}: {e}")
            return None

    def _commit(self, changes: dict[str, Optional[str]], action: str) -> bool:
        try:
            self._store.apply({STORAGE_KEYS[k]: v for k, v in changes.items()})
        except StorageError as e:
            logger.error(f"Failed to {action}: {e}")
            return False
        return True

    # Cache entry

    def put(self, location: Location, snapshot: WeatherSnapshot) -> bool:
        """Store a successful lookup as the new cache entry.

        Also records ``location`` as the last location and moves it to
        the front of the recent searches.

        Args:
            location: Resolved location.
            snapshot: Forecast fetched for it.

        Returns:
            True if everything was written, False if nothing was.
        """
        location = _plain(location)
        now = self._clock()
        entry = CacheEntry(location=location, snapshot=snapshot, stored_at_ms=now)

        recent = _without(self.recent_searches(), location)
        recent.insert(0, RecentSearch(**location.model_dump(), timestamp=now))
        recent = recent[:MAX_RECENT_SEARCHES]

        ok = self._commit(
            {
                "weather_data": entry.model_dump_json(),
                "last_updated": str(now),
                "location": location.model_dump_json(),
                "recent_searches": _RECENT_ADAPTER.dump_json(recent).decode(),
            },
            "save weather data",
        )
        if ok:
            logger.debug(f"Cached weather for {location.display_name}")
        return ok

    def get(self) -> Optional[CacheEntry]:
        """Return the cache entry if it is still within the TTL.

        An expired entry is removed as a side effect; the last location
        is left in place.

        Returns:
            The entry, or None if absent, expired or unreadable.
        """
        raw = self._read("weather_data")
        if raw is None:
            return None
        try:
            entry = CacheEntry.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable cache entry: {e}")
            return None

        if not entry.is_valid(self._clock(), self._ttl_ms):
            logger.debug("Cache entry expired")
            self.clear_snapshot()
            return None
        return entry

    def has_valid_cache(self) -> bool:
        return self.get() is not None

    def last_location(self) -> Optional[Location]:
        raw = self._read("location")
        if raw is None:
            return None
        try:
            return Location.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable last location: {e}")
            return None

    def last_updated(self) -> Optional[int]:
        """Epoch milliseconds of the last successful put, if known."""
        raw = self._read("last_updated")
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Discarding unreadable last-updated value {raw!r}")
            return None

    def cache_status(self) -> str:
        """Short status line for the cached data.

        Returns:
            "No cached data available", or the time of the last update
            formatted like "Oct 19, 02:30 PM" (local time).
        """
        last_updated = self.last_updated()
        if not self.has_valid_cache() or last_updated is None:
            return "No cached data available"
        dt = datetime.fromtimestamp(last_updated / 1000)
        return f"{dt:%b} {dt.day}, {dt:%I:%M %p}"

    def clear_snapshot(self) -> bool:
        """Remove the cache entry only."""
        return self._commit(
            {"weather_data": None, "last_updated": None}, "clear weather data"
        )

    def clear_all(self, keep_units: bool = True) -> bool:
        """Remove all stored user data.

        Args:
            keep_units: Keep the units preference. Defaults to True.

        Returns:
            True on success.
        """
        changes: dict[str, Optional[str]] = {
            "weather_data": None,
            "last_updated": None,
            "location": None,
            "recent_searches": None,
            "favorites": None,
        }
        if not keep_units:
            changes["units"] = None
        return self._commit(changes, "clear user data")

    # Recent searches

    def recent_searches(self) -> list[RecentSearch]:
        """Recent searches, most recent first."""
        raw = self._read("recent_searches")
        if raw is None:
            return []
        try:
            return _RECENT_ADAPTER.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable recent searches: {e}")
            return []

    def remove_recent_search(self, location: Location) -> bool:
        remaining = _without(self.recent_searches(), location)
        return self._commit(
            {"recent_searches": _RECENT_ADAPTER.dump_json(remaining).decode()},
            "remove recent search",
        )

    def clear_recent_searches(self) -> bool:
        return self._commit({"recent_searches": None}, "clear recent searches")

    # Favorites

    def favorites(self) -> list[Location]:
        raw = self._read("favorites")
        if raw is None:
            return []
        try:
            return _FAVORITES_ADAPTER.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable favorites: {e}")
            return []

    def is_favorite(self, location: Location) -> bool:
        return any(item.same_place(location) for item in self.favorites())

    def toggle_favorite(self, location: Location) -> bool:
        """Add ``location`` to favorites, or remove it if present.

        Returns:
            True if the location is a favorite afterwards. False if it
            was removed or the write failed.
        """
        favorites = self.favorites()
        remaining = _without(favorites, location)
        added = len(remaining) == len(favorites)
        if added:
            remaining.append(_plain(location))

        ok = self._commit(
            {"favorites": _FAVORITES_ADAPTER.dump_json(remaining).decode()},
            "toggle favorite",
        )
        return ok and added

    def remove_favorite(self, location: Location) -> bool:
        remaining = _without(self.favorites(), location)
        return self._commit(
            {"favorites": _FAVORITES_ADAPTER.dump_json(remaining).decode()},
            "remove favorite",
        )

    # Units

    def units_preference(self) -> Units:
        """Stored units preference; Celsius when unset or unreadable."""
        raw = self._read("units")
        if raw == Units.FAHRENHEIT.value:
            return Units.FAHRENHEIT
        return Units.CELSIUS

    def set_units_preference(self, units: Units) -> bool:
        return self._commit({"units": Units(units).value}, "save units preference")
