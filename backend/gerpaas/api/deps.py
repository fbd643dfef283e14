"""FastAPI dependency injection: per-request configuration and stores."""
from pathlib import Path

from gerpaas import config
from gerpaas.services.accessory_log import AccessoryLog
from gerpaas.services.family_map import FamilyMap, SpecSelection, load_family_map, load_selection


# Reloaded on every request: the mapping file is edited while the service runs
def get_family_map() -> FamilyMap:
    return load_family_map(config.family_map_path())


def get_selection() -> SpecSelection:
    return load_selection(config.family_map_path())


def get_catalog_path() -> Path:
    """The route opens the catalog itself so the connection lives in one thread."""
    return config.catalog_db_path()


def get_accessory_log() -> AccessoryLog:
    return AccessoryLog(config.accessory_log_path())
