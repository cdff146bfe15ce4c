from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from pollen_source.adapters.base import InvalidLocationError, UpstreamTransportError
from pollen_source.domain.models import Commune
from pollen_source.location.resolver import LocationResolver


def test_resolve_returns_first_candidate():
    geocoder = AsyncMock()
    geocoder.get_communes.return_value = [Commune(code="75056"), Commune(code="75057")]

    code = asyncio.run(LocationResolver(geocoder).resolve(2.3522, 48.8566))

    assert code == "75056"
    geocoder.get_communes.assert_awaited_once_with(2.3522, 48.8566)


def test_resolve_without_candidates_raises_invalid_location():
    geocoder = AsyncMock()
    geocoder.get_communes.return_value = []

    with pytest.raises(InvalidLocationError):
        asyncio.run(LocationResolver(geocoder).resolve(-70.0, 10.0))


def test_resolve_propagates_transport_errors_unchanged():
    failure = UpstreamTransportError("geo.api.gouv.fr unavailable")
    geocoder = AsyncMock()
    geocoder.get_communes.side_effect = failure

    with pytest.raises(UpstreamTransportError) as excinfo:
        asyncio.run(LocationResolver(geocoder).resolve(2.35, 48.85))
    assert excinfo.value is failure
