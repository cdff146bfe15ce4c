from __future__ import annotations

import pytest
from pydantic import ValidationError

from pollen_source.settings import EnvSettings, build_settings, load_yaml_settings

CONFIG = """
refresh:
  interval_minutes: 60
recosante:
  geo_base_url: "https://geo.example.org"
locations:
  - name: " paris "
    latitude: 48.8566
    longitude: 2.3522
    country_code: fr
"""


def test_load_yaml_settings(tmp_path):
    config_path = tmp_path / "pollen.yaml"
    config_path.write_text(CONFIG, encoding="utf-8")

    settings = load_yaml_settings(config_path)

    assert settings.refresh.interval_minutes == 60
    assert settings.recosante.geo_base_url == "https://geo.example.org/"
    assert settings.recosante.api_base_url == "https://api.recosante.beta.gouv.fr/"
    location = settings.locations[0].to_location()
    assert location.name == "paris"
    assert location.country_code == "FR"
    assert location.timezone == "Europe/Paris"
    assert location.parameters == {}


def test_empty_yaml_uses_defaults(tmp_path):
    config_path = tmp_path / "pollen.yaml"
    config_path.write_text("", encoding="utf-8")

    settings = load_yaml_settings(config_path)

    assert settings.locations == []
    assert settings.http.timeout_seconds == 10


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml_settings(tmp_path / "missing.yaml")


def test_non_mapping_config_is_rejected(tmp_path):
    config_path = tmp_path / "pollen.yaml"
    config_path.write_text("- paris\n- lyon\n", encoding="utf-8")

    with pytest.raises(ValueError, match="YAML mapping"):
        load_yaml_settings(config_path)


@pytest.mark.parametrize(
    "snippet, message",
    [
        ("locations:\n  - {name: a, latitude: 91, longitude: 0}\n", "less than or equal"),
        ("locations:\n  - {name: a, latitude: 0, longitude: 0, timezone: Nowhere/City}\n", "Unknown timezone"),
        (
            "locations:\n  - {name: a, latitude: 0, longitude: 0}\n  - {name: a, latitude: 1, longitude: 1}\n",
            "must be unique",
        ),
        ("recosante:\n  api_base_url: ftp://example.org\n", "absolute http"),
    ],
)
def test_invalid_config_is_rejected(tmp_path, snippet, message):
    config_path = tmp_path / "pollen.yaml"
    config_path.write_text(snippet, encoding="utf-8")

    with pytest.raises(ValidationError, match=message):
        load_yaml_settings(config_path)


def test_build_settings_uses_absolute_paths(tmp_path):
    config_path = tmp_path / "pollen.yaml"
    config_path.write_text(CONFIG, encoding="utf-8")
    env = EnvSettings(
        pollen_config_path=config_path,
        pollen_db_path=tmp_path / "pollen.db",
        pollen_timezone="Europe/Paris",
    )

    settings = build_settings(env)

    assert settings.config_path == config_path
    assert settings.db_path == tmp_path / "pollen.db"
    assert settings.timezone.key == "Europe/Paris"
    assert settings.yaml.locations[0].name == "paris"


def test_env_settings_reject_unknown_timezone():
    with pytest.raises(ValidationError, match="Unknown timezone"):
        EnvSettings(pollen_timezone="Atlantis/Capital")
