from .converter import convert
from .geo_api import GEO_BASE_URL, GeoApiClient
from .pollen_api import RECOSANTE_BASE_URL, RecosanteApiClient
from .service import RecosanteService

__all__ = [
    "GEO_BASE_URL",
    "RECOSANTE_BASE_URL",
    "GeoApiClient",
    "RecosanteApiClient",
    "RecosanteService",
    "convert",
]
