from __future__ import annotations

import httpx
from pydantic import ValidationError

from ...domain.models import RecosanteResult
from ..base import UpstreamTransportError
from ..http import fetch_json, normalize_base_url

RECOSANTE_BASE_URL = "https://api.recosante.beta.gouv.fr/"


class RecosanteApiClient:
    def __init__(self, client: httpx.AsyncClient, *, base_url: str = RECOSANTE_BASE_URL) -> None:
        self._client = client
        self._base_url = normalize_base_url(base_url)

    async def get_data(self, show_raep: bool, insee: str) -> RecosanteResult:
        payload = await fetch_json(
            self._client,
            f"{self._base_url}v1/",
            params={"show_raep": "true" if show_raep else "false", "insee": insee},
            service_name="Recosanté",
        )
        if not isinstance(payload, dict):
            raise UpstreamTransportError("Unexpected Recosanté response shape")
        try:
            return RecosanteResult.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamTransportError("Recosanté returned a malformed pollen payload") from exc
