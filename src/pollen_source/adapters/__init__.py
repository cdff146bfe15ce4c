from .base import (
    FeatureUnsupportedForLocationError,
    InvalidLocationError,
    MissingLocationParameterError,
    SecondaryWeatherSourceError,
    UpstreamTransportError,
)

__all__ = [
    "FeatureUnsupportedForLocationError",
    "InvalidLocationError",
    "MissingLocationParameterError",
    "SecondaryWeatherSourceError",
    "UpstreamTransportError",
]
