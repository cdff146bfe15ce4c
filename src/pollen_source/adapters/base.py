from __future__ import annotations

from typing import Protocol, Sequence

from ..domain.models import (
    Commune,
    Location,
    RecosanteResult,
    SecondaryWeatherFeature,
    SecondaryWeatherWrapper,
)


class SecondaryWeatherSourceError(RuntimeError):
    """Base class for failures raised by secondary weather sources."""


class InvalidLocationError(SecondaryWeatherSourceError):
    """Raised when coordinates do not map to any area the source covers."""


class FeatureUnsupportedForLocationError(SecondaryWeatherSourceError):
    def __init__(self, feature: SecondaryWeatherFeature, country_code: str | None) -> None:
        super().__init__(f"Feature '{feature.value}' is not supported for country {country_code!r}")
        self.feature = feature
        self.country_code = country_code


class MissingLocationParameterError(SecondaryWeatherSourceError):
    def __init__(self, source_id: str, key: str) -> None:
        super().__init__(f"Location parameter '{source_id}.{key}' is missing; refresh parameters first")
        self.source_id = source_id
        self.key = key


class UpstreamTransportError(SecondaryWeatherSourceError):
    """Raised when an upstream service request fails or returns an unexpected shape."""


class GeocodingClient(Protocol):
    async def get_communes(self, longitude: float, latitude: float) -> list[Commune]:
        """Return candidate communes for the coordinates, best match first."""


class PollenDataClient(Protocol):
    async def get_data(self, show_raep: bool, insee: str) -> RecosanteResult:
        """Fetch the pollen payload for an INSEE commune code."""


class SecondaryWeatherSource(Protocol):
    id: str
    name: str
    supported_features: tuple[SecondaryWeatherFeature, ...]

    def is_feature_supported_for_location(
        self, feature: SecondaryWeatherFeature, location: Location
    ) -> bool: ...

    async def request_data(
        self,
        location: Location,
        requested_features: Sequence[SecondaryWeatherFeature] = ...,
    ) -> SecondaryWeatherWrapper: ...


class LocationParametersSource(Protocol):
    id: str

    def needs_location_parameters_refresh(
        self,
        location: Location,
        coordinates_changed: bool,
        features: Sequence[SecondaryWeatherFeature],
    ) -> bool: ...

    async def request_location_parameters(self, location: Location) -> dict[str, str]: ...
