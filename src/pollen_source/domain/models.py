from __future__ import annotations

from datetime import datetime
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class SecondaryWeatherFeature(str, Enum):
    AIR_QUALITY = "air_quality"
    POLLEN = "pollen"
    MINUTELY = "minutely"
    ALERT = "alert"
    NORMALS = "normals"


class PollenType(str, Enum):
    ALDER = "alder"
    ASH = "ash"
    BIRCH = "birch"
    CHESTNUT = "chestnut"
    CYPRESS = "cypress"
    GRASS = "grass"
    HAZEL = "hazel"
    HORNBEAM = "hornbeam"
    LINDEN = "linden"
    MUGWORT = "mugwort"
    OAK = "oak"
    OLIVE = "olive"
    PLANE = "plane"
    PLANTAIN = "plantain"
    POPLAR = "poplar"
    RAGWEED = "ragweed"
    SORREL = "sorrel"
    URTICACEAE = "urticaceae"
    WILLOW = "willow"


class Location(BaseModel):
    """A host-owned location.

    ``parameters`` maps a source id to that source's cached string values.
    Sources must only read and write their own namespace.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    latitude: float
    longitude: float
    country_code: str | None = None
    timezone: str = "UTC"
    parameters: dict[str, dict[str, str]] = Field(default_factory=dict)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class RecosanteParameters(BaseModel):
    """Typed view of the Recosanté entry in ``Location.parameters``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    code: str | None = None

    @field_validator("code")
    @classmethod
    def validate_code(cls, value: str | None) -> str | None:
        return value or None

    @classmethod
    def from_location(cls, location: Location, source_id: str) -> RecosanteParameters | None:
        raw = location.parameters.get(source_id)
        if not isinstance(raw, dict):
            return None
        try:
            parameters = cls.model_validate(raw)
        except ValidationError:
            return None
        if parameters.code is None:
            return None
        return parameters

    def as_parameters(self) -> dict[str, str]:
        if self.code is None:
            return {}
        return {"code": self.code}


class Commune(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str
    nom: str | None = None
    code_departement: str | None = Field(default=None, alias="codeDepartement")
    code_region: str | None = Field(default=None, alias="codeRegion")
    codes_postaux: list[str] = Field(default_factory=list, alias="codesPostaux")
    population: int | None = None


class RecosanteIndice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    value: int | None = None
    label: str | None = None


class RecosanteIndiceDetail(BaseModel):
    model_config = ConfigDict(extra="ignore")

    label: str
    indice: RecosanteIndice = Field(default_factory=RecosanteIndice)


class RecosanteRaepIndice(RecosanteIndice):
    details: list[RecosanteIndiceDetail] = Field(default_factory=list)


class RecosanteValidity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    start: datetime
    end: datetime | None = None


class RecosanteRaep(BaseModel):
    model_config = ConfigDict(extra="ignore")

    indice: RecosanteRaepIndice | None = None
    validity: RecosanteValidity


class RecosanteResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    raep: list[RecosanteRaep] = Field(default_factory=list)

    @field_validator("raep", mode="before")
    @classmethod
    def wrap_single_forecast(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, dict):
            return [value]
        return value


class PollenReading(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: datetime
    levels: dict[PollenType, int] = Field(default_factory=dict)
    overall: int | None = None


class SecondaryWeatherWrapper(BaseModel):
    model_config = ConfigDict(frozen=True)

    time_zone: str
    pollen: list[PollenReading] = Field(default_factory=list)
