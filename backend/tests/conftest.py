"""
conftest.py: Shared pytest fixtures for the GERPAAS spec-sync test suite.

Stores are built per test in tmp_path: a GERP_param_map.ini with a small
family map and user selection, and a SQLite catalog created through the ORM
metadata. Documents are plain in-memory ModelDocuments.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``gerpaas.*`` imports resolve correctly regardless of where pytest is invoked.
"""

import sys
import os
import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any gerpaas imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


FAMILY_MAP_INI = """\
; GERPAAS parameter map used by the tests
[Combobocks_Setting]
ThkSet = 1,0 мм | 1,2 мм | 1,5 мм | 2,0 мм
ThkCur = 1,2 мм
CoatCur = Сендзимір

[FamilyMap]
# FamilyName = BaseArticle | GE_Категорія | GE_Додаткові
S5_Sheet_Perforated tray = GE-KT2- | 1. Кабельні лотки | -
S5_Tray Cover = GE-KTK1- | 1. Кабельні лотки | -
470_DKC_S5_Horizontal Bend = GE-D- | 2. З'єднувальні деталі | -
470_DKC_S5_Horizontal Bend Cover = - | 2. З'єднувальні деталі | -
470_DKC_S5_Int Vertical Bend_1-89 = - | 2. З'єднувальні деталі | IBF
S5_Uncategorized = GE-KT2- | - | -
S5_Broken = - | 2. З'єднувальні деталі | -

[Other]
S5_Ignored = GE-XX- | 9. Nope | -
"""

# (spec_article, spec_description, kg_per_unit)
CATALOG_ROWS = [
    ("GE-KT2-20-A100-1,2-PG", "Лоток перфорований 200x100, 1,2 мм", 2.5),
    ("GE-KTK1-20-1,2-PG", "Кришка лотка 200, 1,2 мм", 1.0),
    ("GE-D90-20-A100-1,2-PG", "Кут горизонтальний 90° 200x100", 1.1),
    ("GE-D-90-20-A100-1,2-PG", "Кут горизонтальний 90° 200x100 (шаблон GE-D-)", 1.1),
    ("GE-KT2-RR-10-20-A100-2,0-PG", "Редукція права 100/200", None),
    ("GE-YDE-100-2,0-PG", "З'єднувач YDE 100 (партія 1)", 0.3),
    ("GE-YDE-100-2,0-PG", "З'єднувач YDE 100 (партія 2)", 0.3),
]


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def family_map_path(tmp_path):
    path = tmp_path / "GERP_param_map.ini"
    path.write_text(FAMILY_MAP_INI, encoding="utf-8")
    return path


@pytest.fixture
def catalog_path(tmp_path):
    """SQLite catalog with CATALOG_ROWS; note GE-YDE-100-2,0-PG is duplicated."""
    from sqlalchemy.orm import Session
    from gerpaas.db import init_catalog
    from gerpaas.models.orm_models import CatalogItem

    path = tmp_path / "gerpaas.db"
    engine = init_catalog(path)
    with Session(engine) as session:
        session.add_all(
            CatalogItem(spec_article=a, spec_description=d, kg_per_unit=kg)
            for a, d, kg in CATALOG_ROWS
        )
        session.commit()
    engine.dispose()
    return path


@pytest.fixture
def family_map(family_map_path):
    from gerpaas.services.family_map import load_family_map
    return load_family_map(family_map_path)


@pytest.fixture
def selection():
    """Sendzimir coating, 1.2 mm sheet (same as the ini file)."""
    from gerpaas.services.family_map import SpecSelection
    return SpecSelection(thickness_mm=1.2, coating="Сендзимір")


@pytest.fixture
def catalog(catalog_path):
    from gerpaas.services.catalog_lookup import CatalogLookup
    lookup = CatalogLookup(catalog_path)
    yield lookup
    lookup.close()


@pytest.fixture
def synchronizer(family_map, catalog, selection, tmp_path):
    from gerpaas.services.accessory_log import AccessoryLog
    from gerpaas.services.spec_synchronizer import SpecSynchronizer
    return SpecSynchronizer(
        family_map, catalog, selection, AccessoryLog(tmp_path / "accessories_raw.ini")
    )


# ---------------------------------------------------------------------------
# Element factory
# ---------------------------------------------------------------------------

@pytest.fixture
def make_element():
    """
    Build a ModelElement. width/height fill the DKC size parameters, params
    adds any others and remaining keywords are ModelElement fields:
    make_element("1", "S5_Sheet_Perforated tray", 200, 100, type_name="Bolt").
    """
    from gerpaas.config import CATEGORY_CABLE_TRAY, PARAM_HEIGHT, PARAM_WIDTH
    from gerpaas.services.host_model import ModelElement

    def _make(element_id, family_name, width=None, height=None,
              category=CATEGORY_CABLE_TRAY, params=None, **fields):
        parameters = dict(params or {})
        if width is not None:
            parameters[PARAM_WIDTH] = width
        if height is not None:
            parameters[PARAM_HEIGHT] = height
        return ModelElement(
            element_id=element_id,
            category=category,
            family_name=family_name,
            parameters=parameters,
            **fields,
        )

    return _make
