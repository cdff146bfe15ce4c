from .db import initialize_database
from .parameters import (
    StoredParameters,
    coordinates_changed,
    load_location_parameters,
    save_location_parameters,
    with_stored_parameters,
)
from .snapshots import (
    PollenSnapshot,
    get_pollen_snapshot,
    list_pollen_snapshots,
    prune_expired_snapshots,
    set_pollen_snapshot,
)

__all__ = [
    "PollenSnapshot",
    "StoredParameters",
    "coordinates_changed",
    "get_pollen_snapshot",
    "initialize_database",
    "list_pollen_snapshots",
    "load_location_parameters",
    "prune_expired_snapshots",
    "save_location_parameters",
    "set_pollen_snapshot",
    "with_stored_parameters",
]
