from __future__ import annotations

import httpx
from pydantic import TypeAdapter, ValidationError

from ...domain.models import Commune
from ..base import UpstreamTransportError
from ..http import fetch_json, normalize_base_url

GEO_BASE_URL = "https://geo.api.gouv.fr/"

_COMMUNE_LIST = TypeAdapter(list[Commune])


class GeoApiClient:
    """Reverse geocoding against the French government ``geo.api.gouv.fr`` API."""

    def __init__(self, client: httpx.AsyncClient, *, base_url: str = GEO_BASE_URL) -> None:
        self._client = client
        self._base_url = normalize_base_url(base_url)

    async def get_communes(self, longitude: float, latitude: float) -> list[Commune]:
        payload = await fetch_json(
            self._client,
            f"{self._base_url}communes",
            params={"lon": str(longitude), "lat": str(latitude)},
            service_name="geo.api.gouv.fr",
        )
        if not isinstance(payload, list):
            raise UpstreamTransportError("Unexpected geo.api.gouv.fr response shape")
        try:
            return _COMMUNE_LIST.validate_python(payload)
        except ValidationError as exc:
            raise UpstreamTransportError("geo.api.gouv.fr returned malformed communes") from exc
