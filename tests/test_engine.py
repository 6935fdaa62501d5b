import asyncio
from typing import Mapping, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from weatherwise import (
    BannerKind,
    CacheStore,
    Coordinates,
    GeolocationPermissionDenied,
    GeolocationProvider,
    GeolocationTimeout,
    GeolocationUnavailable,
    Location,
    MemoryStore,
    Outcome,
    Presenter,
    ProviderConnectionError,
    ProviderHTTPError,
    RequestCancelledError,
    RequestCategory,
    RequestCoordinator,
    StaticGeolocationProvider,
    StorageError,
    Units,
    WeatherEngine,
)
from weatherwise.engine import (
    OFFLINE_CACHED_MESSAGE,
    OFFLINE_ERROR_MESSAGE,
    OFFLINE_NO_CACHE_MESSAGE,
    UNREACHABLE_CACHED_MESSAGE,
    UNREACHABLE_ERROR_MESSAGE,
)

from conftest import FORECAST_PAYLOAD


class ReadOnlyStore(MemoryStore):
    def apply(self, changes: Mapping[str, Optional[str]]) -> None:
        raise StorageError("read-only")


class SlowGeolocation(GeolocationProvider):
    async def _acquire(self) -> Coordinates:
        await asyncio.sleep(10)
        return Coordinates(latitude=0.0, longitude=0.0)


def _engine(cache, coordinator=None, geolocation=None, **kwargs):
    presenter = MagicMock(spec=Presenter)
    engine = WeatherEngine(
        cache, coordinator or RequestCoordinator(), presenter, geolocation, **kwargs
    )
    return engine, presenter


class TestFreshResult:
    @pytest.mark.asyncio
    async def test_search_renders_and_caches(self, cache, clock, london, snapshot):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(
            coordinator, "search_by_name", AsyncMock(return_value=[london])
        ), patch.object(
            coordinator, "fetch_forecast", AsyncMock(return_value=snapshot)
        ) as mock_fetch:
            outcome = await engine.search("London")

        assert outcome is Outcome.FRESH
        mock_fetch.assert_awaited_once()
        assert mock_fetch.call_args[0][:2] == (london.latitude, london.longitude)
        presenter.show_loading.assert_called()
        presenter.render_result.assert_called_once_with(london, snapshot, False)
        presenter.show_error.assert_not_called()

        entry = cache.get()
        assert entry.location == london
        assert entry.stored_at_ms == clock.now
        assert engine.current_location == london
        assert engine.displayed_location == london

    @pytest.mark.asyncio
    async def test_first_candidate_wins(self, cache, london, paris, snapshot):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(
            coordinator, "search_by_name", AsyncMock(return_value=[paris, london])
        ), patch.object(coordinator, "fetch_forecast", AsyncMock(return_value=snapshot)):
            await engine.search("Par")

        assert cache.get().location == paris

    @pytest.mark.asyncio
    async def test_fresh_result_clears_banner(self, cache, london, snapshot):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(coordinator, "fetch_forecast", AsyncMock(return_value=snapshot)):
            await engine.select_location(london)

        assert presenter.hide_banner.called
        presenter.show_banner.assert_not_called()

    @pytest.mark.asyncio
    async def test_storage_failure_still_renders(self, clock, london, snapshot):
        cache = CacheStore(ReadOnlyStore(), clock=clock)
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(coordinator, "fetch_forecast", AsyncMock(return_value=snapshot)):
            outcome = await engine.select_location(london)

        assert outcome is Outcome.FRESH
        presenter.render_result.assert_called_once_with(london, snapshot, False)
        assert cache.get() is None

    @pytest.mark.asyncio
    async def test_start_uses_default_location(self, cache, snapshot):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(
            coordinator, "fetch_forecast", AsyncMock(return_value=snapshot)
        ) as mock_fetch:
            await engine.start()

        assert mock_fetch.call_args[0][:2] == (51.5074, -0.1278)
        assert engine.current_location.name == "London"

    @pytest.mark.asyncio
    async def test_start_uses_last_location_after_expiry(self, cache, clock, paris, snapshot):
        cache.put(paris, snapshot)
        clock.advance(45)
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(
            coordinator, "fetch_forecast", AsyncMock(return_value=snapshot)
        ) as mock_fetch:
            await engine.start()

        assert mock_fetch.call_args[0][:2] == (paris.latitude, paris.longitude)

    @pytest.mark.asyncio
    async def test_use_my_location(self, cache, snapshot):
        coordinator = RequestCoordinator()
        geolocation = StaticGeolocationProvider(Coordinates(latitude=48.8566, longitude=2.3522))
        engine, presenter = _engine(cache, coordinator, geolocation)
        paris = Location(name="Paris", country="France", latitude=48.8566, longitude=2.3522)

        with patch.object(
            coordinator, "reverse_geocode", AsyncMock(return_value=paris)
        ) as mock_reverse, patch.object(
            coordinator, "fetch_forecast", AsyncMock(return_value=snapshot)
        ):
            outcome = await engine.use_my_location()

        assert outcome is Outcome.FRESH
        assert mock_reverse.call_args[0][:2] == (48.8566, 2.3522)
        assert cache.get().location == paris


class TestFallback:
    @pytest.mark.asyncio
    async def test_not_found_with_cache(self, cache, paris, snapshot):
        cache.put(paris, snapshot)
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(
            coordinator, "search_by_name", AsyncMock(return_value=[])
        ), patch.object(coordinator, "fetch_forecast", AsyncMock()) as mock_fetch:
            outcome = await engine.search("Nowhereville")

        assert outcome is Outcome.FETCH_FALLBACK
        mock_fetch.assert_not_called()
        presenter.render_result.assert_called_once_with(paris, snapshot, True)
        presenter.show_banner.assert_called_once_with(
            BannerKind.WARNING,
            'No results found for "Nowhereville". Showing cached data.',
            True,
        )

    @pytest.mark.asyncio
    async def test_not_found_without_cache(self, cache):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(coordinator, "search_by_name", AsyncMock(return_value=[])):
            outcome = await engine.search("Nowhereville")

        assert outcome is Outcome.BLOCKING_ERROR
        presenter.show_error.assert_called_once_with(
            "Location Not Found", 'No results found for "Nowhereville"'
        )

    @pytest.mark.asyncio
    async def test_offline_fetch_failure_with_cache(self, cache, london, paris, snapshot):
        cache.put(paris, snapshot)
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator, is_online=False)

        with patch.object(
            coordinator,
            "fetch_forecast",
            AsyncMock(side_effect=ProviderConnectionError("unreachable")),
        ):
            outcome = await engine.select_location(london)

        assert outcome is Outcome.FETCH_FALLBACK
        presenter.render_result.assert_called_once_with(paris, snapshot, True)
        presenter.show_banner.assert_called_once_with(
            BannerKind.WARNING, OFFLINE_CACHED_MESSAGE, True
        )
        assert engine.current_location == london

    @pytest.mark.asyncio
    async def test_online_fetch_failure_with_cache(self, cache, paris, snapshot):
        cache.put(paris, snapshot)
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(
            coordinator,
            "search_by_name",
            AsyncMock(side_effect=ProviderHTTPError(500, "Internal Server Error")),
        ):
            outcome = await engine.search("Berlin")

        assert outcome is Outcome.FETCH_FALLBACK
        presenter.show_banner.assert_called_once_with(
            BannerKind.WARNING, UNREACHABLE_CACHED_MESSAGE, True
        )

    @pytest.mark.asyncio
    async def test_fetch_failure_without_cache(self, cache, london):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(
            coordinator, "fetch_forecast", AsyncMock(side_effect=ProviderHTTPError(500))
        ):
            outcome = await engine.select_location(london)

        assert outcome is Outcome.BLOCKING_ERROR
        presenter.hide_loading.assert_called()
        presenter.show_error.assert_called_once_with("Network Error", UNREACHABLE_ERROR_MESSAGE)
        presenter.render_result.assert_not_called()

    @pytest.mark.asyncio
    async def test_offline_failure_without_cache(self, cache, london):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator, is_online=False)

        with patch.object(
            coordinator,
            "fetch_forecast",
            AsyncMock(side_effect=ProviderConnectionError("offline")),
        ):
            await engine.select_location(london)

        presenter.show_error.assert_called_once_with("Network Error", OFFLINE_ERROR_MESSAGE)

    @pytest.mark.asyncio
    async def test_expired_cache_is_not_used(self, cache, clock, paris, london, snapshot):
        cache.put(paris, snapshot)
        clock.advance(31)
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(
            coordinator,
            "fetch_forecast",
            AsyncMock(side_effect=ProviderConnectionError("offline")),
        ):
            outcome = await engine.select_location(london)

        assert outcome is Outcome.BLOCKING_ERROR
        presenter.render_result.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_forecast_is_a_failure(self, cache, london):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(coordinator, "fetch_forecast", AsyncMock(return_value=None)):
            outcome = await engine.select_location(london)

        assert outcome is Outcome.BLOCKING_ERROR
        assert cache.get() is None

    @pytest.mark.asyncio
    async def test_unknown_position_is_a_failure(self, cache):
        coordinator = RequestCoordinator()
        geolocation = StaticGeolocationProvider(Coordinates(latitude=0.0, longitude=-160.0))
        engine, presenter = _engine(cache, coordinator, geolocation)

        with patch.object(
            coordinator, "reverse_geocode", AsyncMock(return_value=None)
        ), patch.object(coordinator, "fetch_forecast", AsyncMock()) as mock_fetch:
            outcome = await engine.use_my_location()

        assert outcome is Outcome.BLOCKING_ERROR
        mock_fetch.assert_not_called()


class TestGeolocation:
    @pytest.mark.asyncio
    async def test_denied_without_cache(self, cache):
        coordinator = RequestCoordinator()
        geolocation = MagicMock(spec=GeolocationProvider)
        geolocation.locate = AsyncMock(side_effect=GeolocationPermissionDenied())
        engine, presenter = _engine(cache, coordinator, geolocation)

        with patch.object(
            coordinator, "reverse_geocode", AsyncMock()
        ) as mock_reverse, patch.object(
            coordinator, "fetch_forecast", AsyncMock()
        ) as mock_fetch:
            outcome = await engine.use_my_location()

        assert outcome is Outcome.BLOCKING_ERROR
        mock_reverse.assert_not_called()
        mock_fetch.assert_not_called()
        title, message = presenter.show_error.call_args[0]
        assert title == "Location Error"
        assert "permission denied" in message
        assert "allow location" in message

    @pytest.mark.asyncio
    async def test_denied_with_cache(self, cache, paris, snapshot):
        cache.put(paris, snapshot)
        geolocation = MagicMock(spec=GeolocationProvider)
        geolocation.locate = AsyncMock(side_effect=GeolocationPermissionDenied())
        engine, presenter = _engine(cache, geolocation=geolocation)

        outcome = await engine.use_my_location()

        assert outcome is Outcome.PRECONDITION_FALLBACK
        presenter.render_result.assert_called_once_with(paris, snapshot, True)
        kind, message, auto_dismiss = presenter.show_banner.call_args[0]
        assert kind is BannerKind.WARNING
        assert "permission denied" in message
        assert auto_dismiss is True

    @pytest.mark.asyncio
    async def test_no_provider_is_unavailable(self, cache):
        engine, presenter = _engine(cache)

        outcome = await engine.use_my_location()

        assert outcome is Outcome.BLOCKING_ERROR
        assert GeolocationUnavailable.message in presenter.show_error.call_args[0][1]

    @pytest.mark.asyncio
    async def test_timeout(self, cache):
        engine, presenter = _engine(cache, geolocation=SlowGeolocation(timeout=0.01))

        outcome = await engine.use_my_location()

        assert outcome is Outcome.BLOCKING_ERROR
        assert "timed out" in presenter.show_error.call_args[0][1]

    @pytest.mark.asyncio
    async def test_provider_timeout_error(self):
        with pytest.raises(GeolocationTimeout):
            await SlowGeolocation(timeout=0.01).locate()

    @pytest.mark.asyncio
    async def test_static_provider_without_position(self):
        with pytest.raises(GeolocationUnavailable):
            await StaticGeolocationProvider().locate()

    def test_static_provider_timeout(self):
        assert StaticGeolocationProvider().timeout == 10.0
        assert StaticGeolocationProvider(timeout=2.5).timeout == 2.5


class TestSuperseded:
    @pytest.mark.asyncio
    async def test_cancelled_fetch_is_silent(self, cache, paris, london, snapshot):
        cache.put(paris, snapshot)
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(
            coordinator,
            "fetch_forecast",
            AsyncMock(side_effect=RequestCancelledError("weather")),
        ):
            outcome = await engine.select_location(london)

        assert outcome is Outcome.SUPERSEDED
        presenter.render_result.assert_not_called()
        presenter.show_error.assert_not_called()
        presenter.show_banner.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancelled_search_is_silent(self, cache):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(
            coordinator,
            "search_by_name",
            AsyncMock(side_effect=RequestCancelledError("geocode")),
        ):
            outcome = await engine.search("Paris")

        assert outcome is Outcome.SUPERSEDED
        presenter.show_error.assert_not_called()

    @pytest.mark.asyncio
    async def test_result_of_replaced_request_is_dropped(self, cache, london, snapshot):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        async def fetch_then_replaced(latitude, longitude, token):
            coordinator.begin(RequestCategory.WEATHER)
            return snapshot

        with patch.object(coordinator, "fetch_forecast", side_effect=fetch_then_replaced):
            outcome = await engine.select_location(london)

        assert outcome is Outcome.SUPERSEDED
        assert cache.get() is None
        presenter.render_result.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_of_replaced_forecast_is_silent(self, cache, paris, london, snapshot):
        cache.put(paris, snapshot)
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        async def fail_after_replaced(latitude, longitude, token):
            coordinator.begin(RequestCategory.WEATHER)
            raise ProviderHTTPError(503)

        with patch.object(coordinator, "fetch_forecast", side_effect=fail_after_replaced):
            outcome = await engine.select_location(london)

        assert outcome is Outcome.SUPERSEDED
        presenter.render_result.assert_not_called()
        presenter.show_error.assert_not_called()
        presenter.show_banner.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_of_replaced_search_is_silent(self, cache):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        async def fail_after_replaced(query, token):
            coordinator.begin(RequestCategory.GEOCODE)
            raise ProviderConnectionError("Connection reset")

        with patch.object(coordinator, "search_by_name", side_effect=fail_after_replaced):
            outcome = await engine.search("Paris")

        assert outcome is Outcome.SUPERSEDED
        presenter.show_error.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_result_of_replaced_search_is_silent(self, cache):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        async def empty_after_replaced(query, token):
            coordinator.begin(RequestCategory.GEOCODE)
            return []

        with patch.object(coordinator, "search_by_name", side_effect=empty_after_replaced):
            outcome = await engine.search("Nowhereville")

        assert outcome is Outcome.SUPERSEDED
        presenter.show_error.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_of_replaced_reverse_geocode_is_silent(self, cache):
        coordinator = RequestCoordinator()
        geolocation = StaticGeolocationProvider(Coordinates(latitude=48.85, longitude=2.35))
        engine, presenter = _engine(cache, coordinator, geolocation)

        async def fail_after_replaced(latitude, longitude, token):
            coordinator.begin(RequestCategory.GEOCODE)
            raise ProviderHTTPError(502)

        with patch.object(coordinator, "reverse_geocode", side_effect=fail_after_replaced):
            outcome = await engine.use_my_location()

        assert outcome is Outcome.SUPERSEDED
        presenter.show_error.assert_not_called()

    @pytest.mark.asyncio
    async def test_late_http_error_of_superseded_selection(self, cache, london, paris):
        async def handler(request):
            if request.url.params["latitude"] == str(london.latitude):
                await asyncio.sleep(0.05)
                return httpx.Response(503)
            return httpx.Response(200, json=FORECAST_PAYLOAD)

        async with RequestCoordinator(transport=httpx.MockTransport(handler)) as coordinator:
            engine, presenter = _engine(cache, coordinator)

            first = asyncio.create_task(engine.select_location(london))
            await asyncio.sleep(0)
            second = await engine.select_location(paris)

            assert await first is Outcome.SUPERSEDED

        assert second is Outcome.FRESH
        presenter.show_error.assert_not_called()
        presenter.show_banner.assert_not_called()

    @pytest.mark.asyncio
    async def test_only_latest_selection_is_shown(self, cache, london, paris):
        async def handler(request):
            if request.url.params["latitude"] == str(london.latitude):
                await asyncio.sleep(10)
            return httpx.Response(200, json=FORECAST_PAYLOAD)

        async with RequestCoordinator(transport=httpx.MockTransport(handler)) as coordinator:
            engine, presenter = _engine(cache, coordinator)

            first = asyncio.create_task(engine.select_location(london))
            await asyncio.sleep(0)
            second = await engine.select_location(paris)

            assert await first is Outcome.SUPERSEDED

        assert second is Outcome.FRESH
        assert cache.get().location == paris
        presenter.render_result.assert_called_once()
        assert presenter.render_result.call_args[0][0] == paris


class TestRetry:
    @pytest.mark.asyncio
    async def test_retry_replays_current_location(self, cache, london, snapshot):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(
            coordinator,
            "fetch_forecast",
            AsyncMock(side_effect=[ProviderConnectionError("offline"), snapshot]),
        ) as mock_fetch:
            assert await engine.select_location(london) is Outcome.BLOCKING_ERROR
            assert await engine.retry() is Outcome.FRESH

        assert mock_fetch.await_count == 2
        assert mock_fetch.call_args[0][:2] == (london.latitude, london.longitude)

    @pytest.mark.asyncio
    async def test_retry_without_history_starts_over(self, cache, snapshot):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(
            coordinator, "fetch_forecast", AsyncMock(return_value=snapshot)
        ) as mock_fetch:
            await engine.retry()

        assert mock_fetch.call_args[0][:2] == (51.5074, -0.1278)


class TestSearchInput:
    @pytest.mark.asyncio
    async def test_blank_query(self, cache):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(coordinator, "search_by_name", AsyncMock()) as mock_search:
            outcome = await engine.search("   ")

        assert outcome is Outcome.BLOCKING_ERROR
        mock_search.assert_not_called()
        presenter.show_error.assert_called_once_with("Search Error", "Please enter a city name")

    @pytest.mark.asyncio
    async def test_suggest_returns_candidates(self, cache, paris):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(coordinator, "search_by_name", AsyncMock(return_value=[paris])):
            assert await engine.suggest("Par") == [paris]

        presenter.show_loading.assert_not_called()

    @pytest.mark.asyncio
    async def test_suggest_swallows_failures(self, cache):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)

        with patch.object(
            coordinator,
            "search_by_name",
            AsyncMock(side_effect=ProviderConnectionError("offline")),
        ):
            assert await engine.suggest("Par") == []

        presenter.show_error.assert_not_called()
        presenter.show_banner.assert_not_called()


class TestLocalActions:
    def test_units_preference_applied_on_construction(self, cache):
        cache.set_units_preference(Units.FAHRENHEIT)
        engine, presenter = _engine(cache)
        presenter.set_units.assert_called_once_with(Units.FAHRENHEIT)

    @pytest.mark.asyncio
    async def test_change_units_rerenders(self, cache, london, snapshot):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)
        with patch.object(coordinator, "fetch_forecast", AsyncMock(return_value=snapshot)):
            await engine.select_location(london)

        outcome = engine.change_units(Units.FAHRENHEIT)

        assert outcome is Outcome.UNCHANGED
        assert cache.units_preference() is Units.FAHRENHEIT
        presenter.set_units.assert_called_with(Units.FAHRENHEIT)
        assert presenter.render_result.call_count == 2

    def test_change_units_with_nothing_shown(self, cache):
        engine, presenter = _engine(cache)
        engine.change_units(Units.FAHRENHEIT)
        presenter.render_result.assert_not_called()

    @pytest.mark.asyncio
    async def test_toggle_favorite(self, cache, london, snapshot):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)
        with patch.object(coordinator, "fetch_forecast", AsyncMock(return_value=snapshot)):
            await engine.select_location(london)

        assert engine.toggle_favorite() is True
        assert cache.is_favorite(london)
        assert engine.toggle_favorite() is False
        assert cache.favorites() == []

    def test_toggle_favorite_with_nothing_shown(self, cache):
        engine, presenter = _engine(cache)
        assert engine.toggle_favorite() is False
        assert cache.favorites() == []

    @pytest.mark.asyncio
    async def test_clear_cache(self, cache, london, snapshot):
        coordinator = RequestCoordinator()
        engine, presenter = _engine(cache, coordinator)
        cache.set_units_preference(Units.FAHRENHEIT)
        with patch.object(coordinator, "fetch_forecast", AsyncMock(return_value=snapshot)):
            await engine.select_location(london)
        token = coordinator.begin(RequestCategory.GEOCODE)

        assert engine.clear_cache() is True

        assert token.cancelled is True
        assert cache.get() is None
        assert cache.recent_searches() == []
        assert cache.units_preference() is Units.FAHRENHEIT
        assert engine.current_location is None
        presenter.show_banner.assert_called_with(BannerKind.SUCCESS, "Cache cleared.", False)

    def test_clear_cache_failure(self, clock):
        cache = CacheStore(ReadOnlyStore(), clock=clock)
        engine, presenter = _engine(cache)

        assert engine.clear_cache() is False

        presenter.show_banner.assert_called_once_with(
            BannerKind.ERROR, "Failed to clear cache. Please try again.", True
        )


class TestConnectivity:
    def test_going_offline_with_cache(self, cache, paris, snapshot):
        cache.put(paris, snapshot)
        engine, presenter = _engine(cache)

        outcome = engine.set_online(False)

        assert outcome is Outcome.FETCH_FALLBACK
        assert engine.is_online is False
        presenter.render_result.assert_called_once_with(paris, snapshot, True)
        presenter.show_banner.assert_called_once_with(
            BannerKind.WARNING, OFFLINE_CACHED_MESSAGE, False
        )

    def test_going_offline_without_cache(self, cache):
        engine, presenter = _engine(cache)

        outcome = engine.set_online(False)

        assert outcome is Outcome.BLOCKING_ERROR
        presenter.show_banner.assert_called_once_with(
            BannerKind.ERROR, OFFLINE_NO_CACHE_MESSAGE, False
        )

    def test_back_online_clears_banner(self, cache):
        engine, presenter = _engine(cache, is_online=False)

        assert engine.set_online(True) is Outcome.UNCHANGED

        assert engine.is_online is True
        presenter.hide_banner.assert_called_once()
        presenter.render_result.assert_not_called()

    def test_repeated_state_is_ignored(self, cache):
        engine, presenter = _engine(cache)

        assert engine.set_online(True) is Outcome.UNCHANGED

        presenter.hide_banner.assert_not_called()
        presenter.show_banner.assert_not_called()
