from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .adapters.http import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from .adapters.recosante import GEO_BASE_URL, RECOSANTE_BASE_URL
from .domain.models import Location

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _validate_timezone_name(value: str) -> str:
    try:
        ZoneInfo(value)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"Unknown timezone: {value}") from exc
    return value


class RefreshSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    interval_minutes: int = Field(default=180, ge=1, le=720)
    jitter_seconds: int = Field(default=30, ge=0, le=600)


class HttpSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0, le=120)
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("user_agent")
    @classmethod
    def validate_user_agent(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("http.user_agent must not be empty")
        return text


class RecosanteSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    geo_base_url: str = GEO_BASE_URL
    api_base_url: str = RECOSANTE_BASE_URL

    @field_validator("geo_base_url", "api_base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        text = value.strip()
        parsed = urlparse(text)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("recosante base URLs must be absolute http(s) URLs")
        if not text.endswith("/"):
            text = f"{text}/"
        return text


class LocationSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    country_code: str | None = None
    timezone: str = "Europe/Paris"

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("locations[].name must not be empty")
        return text

    @field_validator("country_code")
    @classmethod
    def validate_country_code(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip().upper()
        return text or None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        return _validate_timezone_name(value)

    def to_location(self) -> Location:
        return Location(
            name=self.name,
            latitude=self.latitude,
            longitude=self.longitude,
            country_code=self.country_code,
            timezone=self.timezone,
        )


class PollenYamlSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    refresh: RefreshSettings = Field(default_factory=RefreshSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    recosante: RecosanteSettings = Field(default_factory=RecosanteSettings)
    locations: list[LocationSettings] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_location_names(self) -> PollenYamlSettings:
        names = [location.name for location in self.locations]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"locations[].name must be unique, duplicated: {', '.join(duplicates)}")
        return self


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    pollen_env: Literal["dev", "test", "prod"] = "dev"
    pollen_timezone: str = "Europe/Paris"
    pollen_config_path: Path = Path("config/pollen.yaml")
    pollen_db_path: Path = Path("data/pollen.db")

    @field_validator("pollen_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        return _validate_timezone_name(value)


class AppSettings(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    env: EnvSettings
    yaml: PollenYamlSettings
    project_root: Path
    config_path: Path
    db_path: Path
    timezone: ZoneInfo


def _resolve_project_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (PROJECT_ROOT / path).resolve()


def load_yaml_settings(path: Path) -> PollenYamlSettings:
    if not path.exists():
        raise FileNotFoundError(f"Pollen config file not found: {path}")

    raw_config = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ValueError("Pollen config must be a YAML mapping/object at the top level")
    return PollenYamlSettings.model_validate(raw_config)


def build_settings(env: EnvSettings) -> AppSettings:
    config_path = _resolve_project_path(env.pollen_config_path)
    return AppSettings(
        env=env,
        yaml=load_yaml_settings(config_path),
        project_root=PROJECT_ROOT,
        config_path=config_path,
        db_path=_resolve_project_path(env.pollen_db_path),
        timezone=ZoneInfo(env.pollen_timezone),
    )


@lru_cache(maxsize=1)
def load_settings() -> AppSettings:
    return build_settings(EnvSettings())
