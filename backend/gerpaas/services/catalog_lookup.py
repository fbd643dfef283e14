"""
Catalog Lookup: exact-match, read-only queries against catalog_raw.

One connection is opened on first use and held until close(); a run opens the
catalog once and queries it per element. A missing store or a failing
connection/query is logged a single time, after which the lookup is degraded
and every call answers "not found".
"""
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from sqlalchemy import func, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from gerpaas.db import create_catalog_engine
from gerpaas.models.catalog_schema import CatalogEntry
from gerpaas.models.orm_models import CatalogItem

logger = logging.getLogger("gerpaas-catalog")

LookupResult = Tuple[int, Optional[CatalogEntry]]


class CatalogLookup:

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)
        self._engine: Optional[Engine] = None
        self._conn: Optional[Connection] = None
        self._degraded = False

    @property
    def degraded(self) -> bool:
        return self._degraded

    def _degrade(self, reason: str) -> None:
        if not self._degraded:
            logger.error("Catalog unavailable (%s): %s", self.db_path, reason)
        self._degraded = True
        self.close()

    def _connection(self) -> Optional[Connection]:
        if self._degraded:
            return None
        if self._conn is not None:
            return self._conn
        if not self.db_path.exists():
            self._degrade("database file not found")
            return None
        try:
            self._engine = create_catalog_engine(self.db_path, read_only=True)
            self._conn = self._engine.connect()
        except SQLAlchemyError as e:
            self._degrade(str(e))
            return None
        logger.info("Catalog opened: %s", self.db_path)
        return self._conn

    def find_exact(self, article: str) -> LookupResult:
        """
        Look up an article by exact string equality.

        Returns:
            (0, None) when not found, (1, entry) on a unique match and
            (N, None) when N > 1 rows share the article.
        """
        if not article:
            return 0, None
        conn = self._connection()
        if conn is None:
            return 0, None

        try:
            count = conn.execute(
                select(func.count()).select_from(CatalogItem).where(CatalogItem.spec_article == article)
            ).scalar_one()
            if count != 1:
                return count, None
            row = conn.execute(
                select(CatalogItem.spec_article, CatalogItem.spec_description, CatalogItem.kg_per_unit)
                .where(CatalogItem.spec_article == article)
            ).one()
        except SQLAlchemyError as e:
            self._degrade(str(e))
            return 0, None

        return 1, CatalogEntry(
            article=row.spec_article,
            description=row.spec_description or "",
            mass_per_unit=row.kg_per_unit,
        )

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def __enter__(self) -> "CatalogLookup":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
