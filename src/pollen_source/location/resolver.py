from __future__ import annotations

import logging

from ..adapters.base import GeocodingClient, InvalidLocationError

LOGGER = logging.getLogger(__name__)


class LocationResolver:
    """Resolve coordinates to an administrative (INSEE commune) code.

    The geocoder orders candidates by relevance and the first one is taken
    as is. Results are not cached here; callers store them as location
    parameters.
    """

    def __init__(self, geocoder: GeocodingClient) -> None:
        self._geocoder = geocoder

    async def resolve(self, longitude: float, latitude: float) -> str:
        candidates = await self._geocoder.get_communes(longitude, latitude)
        if not candidates:
            raise InvalidLocationError(
                f"No administrative area found for lon={longitude}, lat={latitude}"
            )

        match = candidates[0]
        LOGGER.debug(
            "Resolved lon=%s lat=%s to commune %s (%s), %d candidate(s)",
            longitude,
            latitude,
            match.code,
            match.nom,
            len(candidates),
        )
        return match.code
