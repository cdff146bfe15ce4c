from __future__ import annotations

from typing import Any

import httpx

from .base import UpstreamTransportError

DEFAULT_TIMEOUT_SECONDS = 10
DEFAULT_USER_AGENT = "recosante-pollen/0.1"


def build_http_client(
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout_seconds,
        headers={"User-Agent": user_agent, "Accept": "application/json"},
        follow_redirects=True,
    )


def normalize_base_url(base_url: str) -> str:
    text = base_url.strip()
    if not text.endswith("/"):
        text = f"{text}/"
    return text


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, str],
    service_name: str,
) -> Any:
    try:
        response = await client.get(url, params=params)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise UpstreamTransportError(f"Failed to fetch data from {service_name}") from exc

    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamTransportError(f"{service_name} returned a body that is not JSON") from exc
