from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

import httpx
from apscheduler.schedulers.background import BackgroundScheduler

from .adapters.base import SecondaryWeatherSourceError
from .adapters.http import build_http_client
from .adapters.recosante import GeoApiClient, RecosanteApiClient, RecosanteService
from .domain.models import SecondaryWeatherFeature, SecondaryWeatherWrapper
from .settings import AppSettings, LocationSettings
from .storage.parameters import (
    coordinates_changed,
    load_location_parameters,
    save_location_parameters,
    with_stored_parameters,
)
from .storage.snapshots import prune_expired_snapshots, set_pollen_snapshot

LOGGER = logging.getLogger(__name__)

REQUESTED_FEATURES = (SecondaryWeatherFeature.POLLEN,)
SNAPSHOT_MIN_TTL_SECONDS = 3600


def build_recosante_service(settings: AppSettings, client: httpx.AsyncClient) -> RecosanteService:
    return RecosanteService(
        GeoApiClient(client, base_url=settings.yaml.recosante.geo_base_url),
        RecosanteApiClient(client, base_url=settings.yaml.recosante.api_base_url),
    )


def _snapshot_ttl_seconds(settings: AppSettings) -> int:
    return max(settings.yaml.refresh.interval_minutes * 120, SNAPSHOT_MIN_TTL_SECONDS)


async def refresh_location(
    settings: AppSettings,
    service: RecosanteService,
    location_settings: LocationSettings,
) -> SecondaryWeatherWrapper | None:
    location = location_settings.to_location()
    if not service.is_feature_supported_for_location(SecondaryWeatherFeature.POLLEN, location):
        LOGGER.info(
            "Skipping '%s': %s pollen data is not available for country %r",
            location.name,
            service.name,
            location.country_code,
        )
        return None

    stored = load_location_parameters(settings.db_path, location.name, service.id)
    location = with_stored_parameters(location, stored)
    changed = coordinates_changed(stored, location.latitude, location.longitude)

    if service.needs_location_parameters_refresh(location, changed, REQUESTED_FEATURES):
        parameters = await service.request_location_parameters(location)
        save_location_parameters(settings.db_path, location, service.id, parameters)
        merged = {**location.parameters, service.id: parameters}
        location = location.model_copy(update={"parameters": merged})
        LOGGER.info("Refreshed %s parameters for '%s'", service.id, location.name)

    wrapper = await service.request_data(location, REQUESTED_FEATURES)
    refreshed_at = datetime.now(timezone.utc)
    set_pollen_snapshot(
        settings.db_path,
        location.name,
        wrapper,
        ttl_seconds=_snapshot_ttl_seconds(settings),
        fetched_at=refreshed_at,
    )
    LOGGER.info(
        "Pollen refresh updated '%s' with %d reading(s) at %s",
        location.name,
        len(wrapper.pollen),
        refreshed_at,
    )
    return wrapper


async def refresh_all_locations(
    settings: AppSettings,
    *,
    client: httpx.AsyncClient | None = None,
) -> list[str]:
    """Refresh every configured location and return the per-location errors."""
    errors: list[str] = []
    owns_client = client is None
    http_client = client or build_http_client(
        timeout_seconds=settings.yaml.http.timeout_seconds,
        user_agent=settings.yaml.http.user_agent,
    )
    try:
        service = build_recosante_service(settings, http_client)
        for location_settings in settings.yaml.locations:
            try:
                await refresh_location(settings, service, location_settings)
            except SecondaryWeatherSourceError as exc:
                LOGGER.warning("Pollen refresh for '%s' failed: %s", location_settings.name, exc)
                errors.append(f"{location_settings.name}: {exc}")
    finally:
        if owns_client:
            await http_client.aclose()
    return errors


def run_pollen_refresh_job(settings: AppSettings) -> None:
    try:
        errors = asyncio.run(refresh_all_locations(settings))
    except Exception:  # pragma: no cover - keeps the scheduler thread alive
        LOGGER.exception("Pollen refresh job failed")
        return

    pruned = prune_expired_snapshots(settings.db_path)
    LOGGER.info(
        "Pollen refresh job finished for %d location(s), %d error(s), %d expired snapshot(s) pruned",
        len(settings.yaml.locations),
        len(errors),
        pruned,
    )


def build_scheduler(settings: AppSettings) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone=settings.timezone)
    scheduler.add_job(
        run_pollen_refresh_job,
        "interval",
        kwargs={"settings": settings},
        minutes=settings.yaml.refresh.interval_minutes,
        jitter=settings.yaml.refresh.jitter_seconds,
        id="pollen_refresh_job",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=300,
    )
    return scheduler
