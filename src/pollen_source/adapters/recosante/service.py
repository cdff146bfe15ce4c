from __future__ import annotations

import logging
from typing import Sequence

from ...domain.models import (
    Location,
    RecosanteParameters,
    SecondaryWeatherFeature,
    SecondaryWeatherWrapper,
)
from ...location.resolver import LocationResolver
from ..base import (
    FeatureUnsupportedForLocationError,
    GeocodingClient,
    MissingLocationParameterError,
    PollenDataClient,
)
from .converter import convert

LOGGER = logging.getLogger(__name__)

SUPPORTED_COUNTRY_CODE = "FR"
PARAMETER_CODE_KEY = "code"


class RecosanteService:
    """Recosanté pollen source for locations in France.

    Data requests need the INSEE commune code cached under
    ``location.parameters[self.id]``. Hosts obtain it beforehand through
    ``request_location_parameters`` whenever
    ``needs_location_parameters_refresh`` says so.
    """

    id = "recosante"
    name = "Recosanté"
    privacy_policy_url = "https://recosante.beta.gouv.fr/donnees-personnelles/"

    supported_features: tuple[SecondaryWeatherFeature, ...] = (SecondaryWeatherFeature.POLLEN,)

    air_quality_attribution: str | None = None
    pollen_attribution: str | None = (
        "Recosanté, Le Réseau national de surveillance aérobiologique (RNSA) https://www.pollens.fr/"
    )
    minutely_attribution: str | None = None
    alert_attribution: str | None = None
    normals_attribution: str | None = None

    def __init__(
        self,
        geo_api: GeocodingClient,
        pollen_api: PollenDataClient,
        *,
        resolver: LocationResolver | None = None,
    ) -> None:
        self._pollen_api = pollen_api
        self._resolver = resolver or LocationResolver(geo_api)

    @classmethod
    def attribution_for(cls, feature: SecondaryWeatherFeature) -> str | None:
        return {
            SecondaryWeatherFeature.AIR_QUALITY: cls.air_quality_attribution,
            SecondaryWeatherFeature.POLLEN: cls.pollen_attribution,
            SecondaryWeatherFeature.MINUTELY: cls.minutely_attribution,
            SecondaryWeatherFeature.ALERT: cls.alert_attribution,
            SecondaryWeatherFeature.NORMALS: cls.normals_attribution,
        }[feature]

    def is_feature_supported_for_location(
        self, feature: SecondaryWeatherFeature, location: Location
    ) -> bool:
        if feature not in self.supported_features:
            return False
        return (location.country_code or "").upper() == SUPPORTED_COUNTRY_CODE

    def _cached_code(self, location: Location) -> str | None:
        parameters = RecosanteParameters.from_location(location, self.id)
        if parameters is None:
            return None
        return parameters.code

    async def request_data(
        self,
        location: Location,
        requested_features: Sequence[SecondaryWeatherFeature] = (SecondaryWeatherFeature.POLLEN,),
    ) -> SecondaryWeatherWrapper:
        for feature in requested_features or (SecondaryWeatherFeature.POLLEN,):
            if not self.is_feature_supported_for_location(feature, location):
                raise FeatureUnsupportedForLocationError(feature, location.country_code)

        code = self._cached_code(location)
        if code is None:
            raise MissingLocationParameterError(self.id, PARAMETER_CODE_KEY)

        LOGGER.debug("Fetching Recosanté pollen data for '%s' (INSEE %s)", location.name, code)
        result = await self._pollen_api.get_data(True, code)
        return convert(location.zone, result)

    def needs_location_parameters_refresh(
        self,
        location: Location,
        coordinates_changed: bool,
        features: Sequence[SecondaryWeatherFeature],
    ) -> bool:
        if coordinates_changed:
            return True
        return self._cached_code(location) is None

    async def request_location_parameters(self, location: Location) -> dict[str, str]:
        code = await self._resolver.resolve(location.longitude, location.latitude)
        LOGGER.info("Resolved location '%s' to INSEE code %s", location.name, code)
        return RecosanteParameters(code=code).as_parameters()
