from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from .adapters.recosante import RecosanteService
from .domain.models import SecondaryWeatherFeature
from .scheduler import build_scheduler, refresh_all_locations
from .settings import AppSettings, load_settings
from .storage.db import initialize_database
from .storage.snapshots import PollenSnapshot, get_pollen_snapshot, list_pollen_snapshots

LOGGER = logging.getLogger(__name__)


def _get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def _snapshot_payload(snapshot: PollenSnapshot) -> dict[str, Any]:
    return {
        "location": snapshot.location_name,
        "fetched_at_utc": snapshot.fetched_at.isoformat(),
        "stale": snapshot.is_stale(),
        "data": snapshot.wrapper.model_dump(mode="json"),
    }


def source_capabilities() -> dict[str, Any]:
    return {
        "id": RecosanteService.id,
        "name": RecosanteService.name,
        "privacy_policy_url": RecosanteService.privacy_policy_url,
        "supported_features": [feature.value for feature in RecosanteService.supported_features],
        "attributions": {
            feature.value: RecosanteService.attribution_for(feature)
            for feature in SecondaryWeatherFeature
        },
    }


@asynccontextmanager
async def lifespan(application: FastAPI):
    settings = load_settings()
    initialize_database(settings.db_path)
    try:
        errors = await refresh_all_locations(settings)
    except Exception:
        LOGGER.exception("Initial pollen refresh failed")
    else:
        if errors:
            LOGGER.warning("Initial pollen refresh reported %d error(s)", len(errors))
    scheduler = build_scheduler(settings)
    scheduler.start()

    application.state.settings = settings
    application.state.scheduler = scheduler
    application.state.started_at_utc = datetime.now(timezone.utc)

    try:
        yield
    finally:
        if scheduler.running:
            scheduler.shutdown(wait=False)


app = FastAPI(title="Recosanté pollen source", version="0.1.0", lifespan=lifespan)


@app.get("/health", response_class=JSONResponse)
async def health(request: Request) -> JSONResponse:
    settings = _get_settings(request)
    return JSONResponse(
        {
            "status": "ok",
            "service": "recosante-pollen",
            "environment": settings.env.pollen_env,
            "timezone": settings.env.pollen_timezone,
            "scheduler_running": request.app.state.scheduler.running,
            "locations": [location.name for location in settings.yaml.locations],
            "started_at_utc": request.app.state.started_at_utc.isoformat(),
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        }
    )


@app.get("/api/source", response_class=JSONResponse)
async def source() -> JSONResponse:
    return JSONResponse(source_capabilities())


@app.get("/api/pollen", response_class=JSONResponse)
async def pollen_snapshots(request: Request) -> JSONResponse:
    settings = _get_settings(request)
    snapshots = list_pollen_snapshots(settings.db_path)
    return JSONResponse({"count": len(snapshots), "items": [_snapshot_payload(s) for s in snapshots]})


@app.get("/api/pollen/{location_name}", response_class=JSONResponse)
async def pollen_snapshot(request: Request, location_name: str) -> JSONResponse:
    settings = _get_settings(request)
    snapshot = get_pollen_snapshot(settings.db_path, location_name, allow_stale=True)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"No pollen data for location '{location_name}'")
    return JSONResponse(_snapshot_payload(snapshot))
