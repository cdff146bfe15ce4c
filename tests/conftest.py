from __future__ import annotations

from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from pollen_source.domain.models import Location
from pollen_source.settings import AppSettings, EnvSettings, PollenYamlSettings


@pytest.fixture
def paris() -> Location:
    return Location(
        name="paris",
        latitude=48.8566,
        longitude=2.3522,
        country_code="FR",
        timezone="Europe/Paris",
    )


@pytest.fixture
def paris_with_code(paris: Location) -> Location:
    return paris.model_copy(update={"parameters": {"recosante": {"code": "75056"}}})


@pytest.fixture
def make_settings(tmp_path: Path):
    def _make(raw_yaml: dict | None = None) -> AppSettings:
        return AppSettings(
            env=EnvSettings(pollen_env="test", pollen_timezone="Europe/Paris"),
            yaml=PollenYamlSettings.model_validate(raw_yaml or {}),
            project_root=tmp_path,
            config_path=tmp_path / "pollen.yaml",
            db_path=tmp_path / "data" / "pollen.db",
            timezone=ZoneInfo("Europe/Paris"),
        )

    return _make
