"""
Database Layer - SQLite catalog engine.

The catalog is reference data shipped next to the mapping file; the sync
engine only ever reads it, so engines are opened in SQLite read-only URI
mode unless a writer (seeding, tests) asks otherwise.
"""
import logging
from pathlib import Path
from typing import Union
from urllib.parse import quote

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger("gerpaas-db")


class Base(DeclarativeBase):
    pass


def catalog_url(path: Union[str, Path], read_only: bool = True) -> str:
    posix = Path(path).resolve().as_posix()
    if read_only:
        return f"sqlite:///file:{quote(posix)}?mode=ro&uri=true"
    return f"sqlite:///{posix}"


def create_catalog_engine(path: Union[str, Path], read_only: bool = True) -> Engine:
    """Engine for the catalog store at `path`."""
    engine = create_engine(catalog_url(path, read_only), echo=False)
    logger.debug("Catalog engine created for %s (read_only=%s)", path, read_only)
    return engine


def init_catalog(path: Union[str, Path]) -> Engine:
    """Create the catalog tables in a writable database (used for seeding)."""
    from gerpaas.models import orm_models  # noqa: F401
    engine = create_catalog_engine(path, read_only=False)
    Base.metadata.create_all(engine)
    logger.info("Catalog tables initialized at %s", path)
    return engine
