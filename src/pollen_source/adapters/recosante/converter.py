from __future__ import annotations

import logging
import unicodedata
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

from ...domain.models import (
    PollenReading,
    PollenType,
    RecosanteRaep,
    RecosanteResult,
    SecondaryWeatherWrapper,
)

LOGGER = logging.getLogger(__name__)

# Keys are accent-free, lower-cased RNSA taxon labels.
POLLEN_LABELS: dict[str, PollenType] = {
    "aulne": PollenType.ALDER,
    "frene": PollenType.ASH,
    "bouleau": PollenType.BIRCH,
    "chataignier": PollenType.CHESTNUT,
    "cupressacees": PollenType.CYPRESS,
    "cupressacees/taxacees": PollenType.CYPRESS,
    "graminees": PollenType.GRASS,
    "noisetier": PollenType.HAZEL,
    "charme": PollenType.HORNBEAM,
    "tilleul": PollenType.LINDEN,
    "armoise": PollenType.MUGWORT,
    "armoises": PollenType.MUGWORT,
    "chene": PollenType.OAK,
    "olivier": PollenType.OLIVE,
    "platane": PollenType.PLANE,
    "plantain": PollenType.PLANTAIN,
    "peuplier": PollenType.POPLAR,
    "ambroisie": PollenType.RAGWEED,
    "ambroisies": PollenType.RAGWEED,
    "oseille": PollenType.SORREL,
    "rumex": PollenType.SORREL,
    "urticacees": PollenType.URTICACEAE,
    "saule": PollenType.WILLOW,
}


def _normalize_label(label: str) -> str:
    decomposed = unicodedata.normalize("NFKD", label.strip().lower())
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def pollen_type_for_label(label: str) -> PollenType | None:
    return POLLEN_LABELS.get(_normalize_label(label))


def _in_zone(value: datetime, zone: tzinfo) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value.astimezone(zone)


def _convert_raep(raep: RecosanteRaep, zone: tzinfo) -> PollenReading:
    levels: dict[PollenType, int] = {}
    overall: int | None = None
    if raep.indice is not None:
        overall = raep.indice.value
        for detail in raep.indice.details:
            pollen_type = pollen_type_for_label(detail.label)
            if pollen_type is None:
                LOGGER.debug("Ignoring unknown Recosanté pollen label '%s'", detail.label)
                continue
            if detail.indice.value is None:
                continue
            levels[pollen_type] = detail.indice.value

    return PollenReading(
        date=_in_zone(raep.validity.start, zone),
        levels=levels,
        overall=overall,
    )


def convert(time_zone: ZoneInfo | str, result: RecosanteResult) -> SecondaryWeatherWrapper:
    """Normalize a Recosanté payload into a wrapper anchored in ``time_zone``.

    One reading is produced per RAEP bulletin, in payload order. Naive
    validity timestamps are taken as local to ``time_zone``.
    """
    zone = ZoneInfo(time_zone) if isinstance(time_zone, str) else time_zone
    return SecondaryWeatherWrapper(
        time_zone=str(zone.key),
        pollen=[_convert_raep(raep, zone) for raep in result.raep],
    )
