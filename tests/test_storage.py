from __future__ import annotations

from datetime import datetime, timedelta, timezone

from pollen_source.adapters.recosante.converter import convert
from pollen_source.domain.models import PollenType, RecosanteResult
from pollen_source.storage.db import open_db
from pollen_source.storage.parameters import (
    coordinates_changed,
    load_location_parameters,
    save_location_parameters,
    with_stored_parameters,
)
from pollen_source.storage.snapshots import (
    get_pollen_snapshot,
    list_pollen_snapshots,
    prune_expired_snapshots,
    set_pollen_snapshot,
)

from .payloads import RECOSANTE_PAYLOAD


def test_location_parameters_round_trip(tmp_path, paris):
    db_path = tmp_path / "pollen.db"
    save_location_parameters(db_path, paris, "recosante", {"code": "75056"})

    stored = load_location_parameters(db_path, "paris", "recosante")

    assert stored is not None
    assert stored.parameters == {"code": "75056"}
    assert stored.latitude == paris.latitude
    assert load_location_parameters(db_path, "paris", "other-source") is None
    assert load_location_parameters(db_path, "lyon", "recosante") is None


def test_location_parameters_upsert_replaces_previous_value(tmp_path, paris):
    db_path = tmp_path / "pollen.db"
    save_location_parameters(db_path, paris, "recosante", {"code": "75056"})
    moved = paris.model_copy(update={"latitude": 45.764, "longitude": 4.8357})
    save_location_parameters(db_path, moved, "recosante", {"code": "69123"})

    stored = load_location_parameters(db_path, "paris", "recosante")

    assert stored.parameters == {"code": "69123"}
    assert stored.longitude == 4.8357


def test_corrupt_location_parameters_are_treated_as_absent(tmp_path, paris):
    db_path = tmp_path / "pollen.db"
    save_location_parameters(db_path, paris, "recosante", {"code": "75056"})
    with open_db(db_path) as connection:
        connection.execute("UPDATE location_parameters SET json = ?", ('{"code": 75056',))
        connection.commit()

    assert load_location_parameters(db_path, "paris", "recosante") is None

    with open_db(db_path) as connection:
        connection.execute("UPDATE location_parameters SET json = ?", ('{"code": 75056}',))
        connection.commit()

    assert load_location_parameters(db_path, "paris", "recosante") is None


def test_coordinates_changed(tmp_path, paris):
    db_path = tmp_path / "pollen.db"
    save_location_parameters(db_path, paris, "recosante", {"code": "75056"})
    stored = load_location_parameters(db_path, "paris", "recosante")

    assert coordinates_changed(None, paris.latitude, paris.longitude) is True
    assert coordinates_changed(stored, paris.latitude, paris.longitude) is False
    assert coordinates_changed(stored, paris.latitude + 0.00001, paris.longitude) is False
    assert coordinates_changed(stored, paris.latitude + 0.01, paris.longitude) is True


def test_with_stored_parameters_merges_namespace(tmp_path, paris):
    db_path = tmp_path / "pollen.db"
    location = paris.model_copy(update={"parameters": {"other": {"id": "x"}}})
    save_location_parameters(db_path, location, "recosante", {"code": "75056"})

    merged = with_stored_parameters(location, load_location_parameters(db_path, "paris", "recosante"))

    assert merged.parameters == {"other": {"id": "x"}, "recosante": {"code": "75056"}}
    assert location.parameters == {"other": {"id": "x"}}
    assert with_stored_parameters(location, None) is location


def test_pollen_snapshot_round_trip(tmp_path):
    db_path = tmp_path / "pollen.db"
    wrapper = convert("Europe/Paris", RecosanteResult.model_validate(RECOSANTE_PAYLOAD))
    set_pollen_snapshot(db_path, "paris", wrapper, ttl_seconds=3600)

    snapshot = get_pollen_snapshot(db_path, "paris")

    assert snapshot is not None
    assert snapshot.wrapper.time_zone == "Europe/Paris"
    assert snapshot.wrapper.pollen[0].levels[PollenType.GRASS] == 2
    assert snapshot.wrapper.pollen[0].date == wrapper.pollen[0].date
    assert [s.location_name for s in list_pollen_snapshots(db_path)] == ["paris"]


def test_stale_pollen_snapshots_are_hidden_and_pruned(tmp_path):
    db_path = tmp_path / "pollen.db"
    wrapper = convert("Europe/Paris", RecosanteResult.model_validate(RECOSANTE_PAYLOAD))
    fetched_at = datetime.now(timezone.utc) - timedelta(hours=2)
    set_pollen_snapshot(db_path, "paris", wrapper, ttl_seconds=60, fetched_at=fetched_at)
    set_pollen_snapshot(db_path, "lyon", wrapper, ttl_seconds=3600)

    assert get_pollen_snapshot(db_path, "paris") is None
    assert get_pollen_snapshot(db_path, "paris", allow_stale=True) is not None
    assert prune_expired_snapshots(db_path) == 1
    assert [s.location_name for s in list_pollen_snapshots(db_path)] == ["lyon"]
