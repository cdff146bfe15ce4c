from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from ..domain.models import SecondaryWeatherWrapper
from .db import open_db


@dataclass(slots=True)
class PollenSnapshot:
    location_name: str
    wrapper: SecondaryWeatherWrapper
    fetched_at: datetime
    ttl_seconds: int

    def is_stale(self, now: datetime | None = None) -> bool:
        reference = now or datetime.now(timezone.utc)
        return (reference - self.fetched_at).total_seconds() > self.ttl_seconds


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_datetime(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _snapshot_from_row(row) -> PollenSnapshot:
    return PollenSnapshot(
        location_name=row["location_name"],
        wrapper=SecondaryWeatherWrapper.model_validate(json.loads(row["json"])),
        fetched_at=_normalize_datetime(datetime.fromisoformat(row["fetched_at"])),
        ttl_seconds=int(row["ttl_seconds"]),
    )


def set_pollen_snapshot(
    db_path: Path,
    location_name: str,
    wrapper: SecondaryWeatherWrapper,
    ttl_seconds: int,
    *,
    fetched_at: datetime | None = None,
) -> None:
    if ttl_seconds < 0:
        raise ValueError("ttl_seconds must be >= 0")

    record_time = _normalize_datetime(fetched_at) if fetched_at is not None else _utc_now()
    with open_db(db_path) as connection:
        connection.execute(
            """
            INSERT INTO pollen_snapshots (location_name, json, fetched_at, ttl_seconds)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(location_name) DO UPDATE SET
                json=excluded.json,
                fetched_at=excluded.fetched_at,
                ttl_seconds=excluded.ttl_seconds
            """,
            (location_name, wrapper.model_dump_json(), record_time.isoformat(), ttl_seconds),
        )
        connection.commit()


def get_pollen_snapshot(
    db_path: Path, location_name: str, *, allow_stale: bool = False
) -> PollenSnapshot | None:
    with open_db(db_path) as connection:
        row = connection.execute(
            """
            SELECT location_name, json, fetched_at, ttl_seconds
            FROM pollen_snapshots WHERE location_name = ?
            """,
            (location_name,),
        ).fetchone()

    if row is None:
        return None
    snapshot = _snapshot_from_row(row)
    if not allow_stale and snapshot.is_stale():
        return None
    return snapshot


def list_pollen_snapshots(db_path: Path) -> list[PollenSnapshot]:
    with open_db(db_path) as connection:
        rows = connection.execute(
            "SELECT location_name, json, fetched_at, ttl_seconds FROM pollen_snapshots "
            "ORDER BY location_name ASC"
        ).fetchall()
    return [_snapshot_from_row(row) for row in rows]


def prune_expired_snapshots(db_path: Path, *, now: datetime | None = None) -> int:
    reference = _normalize_datetime(now) if now is not None else _utc_now()
    deleted = 0

    with open_db(db_path) as connection:
        rows = connection.execute(
            "SELECT location_name, fetched_at, ttl_seconds FROM pollen_snapshots"
        ).fetchall()
        for row in rows:
            fetched_at = _normalize_datetime(datetime.fromisoformat(row["fetched_at"]))
            if (reference - fetched_at).total_seconds() > int(row["ttl_seconds"]):
                connection.execute(
                    "DELETE FROM pollen_snapshots WHERE location_name = ?", (row["location_name"],)
                )
                deleted += 1
        connection.commit()

    return deleted
