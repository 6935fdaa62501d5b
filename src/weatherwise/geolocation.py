"""Device geolocation collaborator.

Geolocation is best effort with a bounded wait. Providers implement
``_acquire()``; ``locate()`` applies the timeout and normalizes the
outcome to Coordinates or one of:

    - GeolocationPermissionDenied
    - GeolocationUnavailable
    - GeolocationTimeout
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

from .exceptions import GeolocationTimeout, GeolocationUnavailable
from .models import Coordinates
from .types import GEOLOCATION_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class GeolocationProvider(ABC):
    """Abstract source of the device position.

    Args:
        timeout: Maximum wait for a position in seconds. Defaults to 10.
    """

    def __init__(self, *, timeout: float = GEOLOCATION_TIMEOUT_SECONDS) -> None:
        self.timeout = timeout

    @abstractmethod
    async def _acquire(self) -> Coordinates:
        """Obtain the position.

        Raises:
            GeolocationError: If the position cannot be obtained.
        """

    async def locate(self) -> Coordinates:
        """Return the device position within ``timeout`` seconds.

        Raises:
            GeolocationPermissionDenied: If access was refused.
            GeolocationUnavailable: If no position could be determined.
            GeolocationTimeout: If the wait ran out.
        """
        try:
            coordinates = await asyncio.wait_for(self._acquire(), self.timeout)
        except asyncio.TimeoutError as e:
            raise GeolocationTimeout() from e
        logger.debug(
            f"Located device at ({coordinates.latitude}, {coordinates.longitude})"
        )
        return coordinates


class StaticGeolocationProvider(GeolocationProvider):
    """Provider returning a fixed, configured position.

    Used by the command-line front end, where the "device" position is
    given as arguments. Without a position it reports the location as
    unavailable.

    Args:
        coordinates: The position to report, or None.
        timeout: Maximum wait for a position in seconds. Defaults to 10.
    """

    def __init__(
        self,
        coordinates: Optional[Coordinates] = None,
        *,
        timeout: float = GEOLOCATION_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(timeout=timeout)
        self._coordinates = coordinates

    async def _acquire(self) -> Coordinates:
        if self._coordinates is None:
            raise GeolocationUnavailable()
        return self._coordinates
