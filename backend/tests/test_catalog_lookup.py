"""
test_catalog_lookup.py: Unit tests for exact-match catalog lookups.

Tests cover:
  - unique / missing / duplicated articles
  - a missing store degrades the lookup and logs once
  - the store is opened read-only and held across lookups
"""

import logging
import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from gerpaas.db import create_catalog_engine
from gerpaas.services.catalog_lookup import CatalogLookup


class TestFindExact:

    def test_unique_match(self, catalog):
        count, entry = catalog.find_exact("GE-KT2-20-A100-1,2-PG")
        assert count == 1
        assert entry.article == "GE-KT2-20-A100-1,2-PG"
        assert entry.description == "Лоток перфорований 200x100, 1,2 мм"
        assert entry.mass_per_unit == pytest.approx(2.5)

    def test_no_match(self, catalog):
        assert catalog.find_exact("GE-KT2-99-A100-1,2-PG") == (0, None)

    def test_exact_equality_only(self, catalog):
        """No prefix or case-insensitive matching."""
        assert catalog.find_exact("GE-KT2-20-A100-1,2")[0] == 0
        assert catalog.find_exact("ge-kt2-20-a100-1,2-pg")[0] == 0

    def test_duplicates_are_reported_not_resolved(self, catalog):
        assert catalog.find_exact("GE-YDE-100-2,0-PG") == (2, None)

    def test_null_mass(self, catalog):
        count, entry = catalog.find_exact("GE-KT2-RR-10-20-A100-2,0-PG")
        assert count == 1
        assert entry.mass_per_unit is None

    def test_empty_article(self, catalog):
        assert catalog.find_exact("") == (0, None)


class TestDegradedCatalog:

    def test_missing_file_logged_once(self, tmp_path, caplog):
        lookup = CatalogLookup(tmp_path / "absent.db")
        with caplog.at_level(logging.ERROR, logger="gerpaas-catalog"):
            assert lookup.find_exact("GE-KT2-20-A100-1,2-PG") == (0, None)
            assert lookup.find_exact("GE-D90-20-A100-1,2-PG") == (0, None)
        assert lookup.degraded
        assert len([r for r in caplog.records if r.name == "gerpaas-catalog"]) == 1

    def test_missing_table_degrades(self, tmp_path):
        """A database without catalog_raw fails the query once, then answers 'not found'."""
        path = tmp_path / "empty.db"
        engine = create_catalog_engine(path, read_only=False)
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE other (x INTEGER)"))
        engine.dispose()

        with CatalogLookup(path) as lookup:
            assert lookup.find_exact("GE-KT2-20-A100-1,2-PG") == (0, None)
            assert lookup.degraded


class TestConnection:

    def test_connection_held_between_lookups(self, catalog):
        catalog.find_exact("GE-KT2-20-A100-1,2-PG")
        first = catalog._conn
        catalog.find_exact("GE-D90-20-A100-1,2-PG")
        assert catalog._conn is first

    def test_close_via_context_manager(self, catalog_path):
        with CatalogLookup(catalog_path) as lookup:
            lookup.find_exact("GE-KT2-20-A100-1,2-PG")
        assert lookup._conn is None

    def test_read_only(self, catalog_path):
        engine = create_catalog_engine(catalog_path, read_only=True)
        with pytest.raises(OperationalError):
            with engine.begin() as conn:
                conn.execute(text("DELETE FROM catalog_raw"))
        engine.dispose()
