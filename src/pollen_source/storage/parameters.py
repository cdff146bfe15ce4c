from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from ..domain.models import Location
from .db import open_db

COORDINATE_TOLERANCE_DEGREES = 1e-4


@dataclass(slots=True)
class StoredParameters:
    location_name: str
    source_id: str
    parameters: dict[str, str]
    latitude: float
    longitude: float
    updated_at: datetime


def _decode_parameters(raw_json: str) -> dict[str, str] | None:
    try:
        payload = json.loads(raw_json)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    if not all(isinstance(key, str) and isinstance(value, str) for key, value in payload.items()):
        return None
    return payload


def save_location_parameters(
    db_path: Path,
    location: Location,
    source_id: str,
    parameters: dict[str, str],
    *,
    updated_at: datetime | None = None,
) -> None:
    record_time = updated_at or datetime.now(timezone.utc)
    with open_db(db_path) as connection:
        connection.execute(
            """
            INSERT INTO location_parameters
                (location_name, source_id, json, latitude, longitude, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(location_name, source_id) DO UPDATE SET
                json=excluded.json,
                latitude=excluded.latitude,
                longitude=excluded.longitude,
                updated_at=excluded.updated_at
            """,
            (
                location.name,
                source_id,
                json.dumps(parameters, ensure_ascii=True, separators=(",", ":")),
                location.latitude,
                location.longitude,
                record_time.isoformat(),
            ),
        )
        connection.commit()


def load_location_parameters(db_path: Path, location_name: str, source_id: str) -> StoredParameters | None:
    with open_db(db_path) as connection:
        row = connection.execute(
            """
            SELECT location_name, source_id, json, latitude, longitude, updated_at
            FROM location_parameters
            WHERE location_name = ? AND source_id = ?
            """,
            (location_name, source_id),
        ).fetchone()

    if row is None:
        return None

    parameters = _decode_parameters(row["json"])
    if parameters is None:
        return None

    return StoredParameters(
        location_name=row["location_name"],
        source_id=row["source_id"],
        parameters=parameters,
        latitude=float(row["latitude"]),
        longitude=float(row["longitude"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def coordinates_changed(stored: StoredParameters | None, latitude: float, longitude: float) -> bool:
    if stored is None:
        return True
    return (
        abs(stored.latitude - latitude) > COORDINATE_TOLERANCE_DEGREES
        or abs(stored.longitude - longitude) > COORDINATE_TOLERANCE_DEGREES
    )


def with_stored_parameters(location: Location, stored: StoredParameters | None) -> Location:
    if stored is None:
        return location
    merged = dict(location.parameters)
    merged[stored.source_id] = dict(stored.parameters)
    return location.model_copy(update={"parameters": merged})
