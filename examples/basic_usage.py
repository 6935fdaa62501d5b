"""Basic usage examples for WeatherWise."""

import asyncio
import tempfile
from pathlib import Path

from weatherwise import (
    CacheStore,
    ConsolePresenter,
    JsonFileStore,
    RequestCoordinator,
    Units,
    WeatherEngine,
)


async def coordinator_example() -> None:
    """Search a place and fetch its forecast directly."""
    async with RequestCoordinator() as coordinator:
        places = await coordinator.search_by_name("Paris")

        print("=== Search Results ===")
        for place in places:
            print(f"{place.display_name} ({place.latitude}, {place.longitude})")

        snapshot = await coordinator.fetch_forecast(places[0].latitude, places[0].longitude)

        print("\n=== Current Weather ===")
        c = snapshot.current
        print(f"Temperature: {c.temperature_2m}°C")
        print(f"Feels like: {c.apparent_temperature}°C")
        print(f"Wind: {c.wind_speed_10m} km/h")


async def superseded_search_example() -> None:
    """Only the newest search of a burst completes."""
    async with RequestCoordinator() as coordinator:
        tasks = [
            asyncio.create_task(coordinator.search_by_name(q))
            for q in ("Ber", "Berl", "Berlin")
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        print("\n=== Type-ahead ===")
        for query, result in zip(("Ber", "Berl", "Berlin"), results):
            if isinstance(result, Exception):
                print(f"{query}: {type(result).__name__}")
            else:
                print(f"{query}: {[r.display_name for r in result]}")


async def engine_example(storage: Path) -> None:
    """Full flow with cache and offline fallback."""
    cache = CacheStore(JsonFileStore(storage))
    presenter = ConsolePresenter(last_updated=cache.last_updated)

    async with RequestCoordinator() as coordinator:
        engine = WeatherEngine(cache, coordinator, presenter)

        print("\n=== Search ===")
        await engine.search("London")

        print("\n=== Offline ===")
        engine.set_online(False)

        print("\n=== Fahrenheit ===")
        engine.change_units(Units.FAHRENHEIT)


async def main() -> None:
    await coordinator_example()
    await superseded_search_example()
    with tempfile.TemporaryDirectory() as tmpdir:
        await engine_example(Path(tmpdir) / "storage.json")


if __name__ == "__main__":
    asyncio.run(main())
