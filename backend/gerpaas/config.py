"""
Specification sync configuration: single source of truth for host parameter
names, category labels, family markers, thresholds and defaults.

Import from here in all services rather than hardcoding values.
"""
from __future__ import annotations

import os
from pathlib import Path

# ── File locations ─────────────────────────────────────────────────────────────
# Overridable per deployment; the API reads them at request time so a changed
# env var takes effect without a restart.
_BACKEND_DIR = Path(__file__).resolve().parent.parent


def data_dir() -> Path:
    return Path(os.getenv("GERPAAS_DATA_DIR", str(_BACKEND_DIR / "data")))


def family_map_path() -> Path:
    return Path(os.getenv("GERPAAS_FAMILY_MAP_PATH", str(data_dir() / "GERP_param_map.ini")))


def catalog_db_path() -> Path:
    return Path(os.getenv("GERPAAS_CATALOG_DB_PATH", str(data_dir() / "gerpaas.db")))


def accessory_log_path() -> Path:
    return Path(os.getenv("GERPAAS_ACCESSORY_LOG_PATH", str(data_dir() / "accessories_raw.ini")))


# ── Mapping file sections ──────────────────────────────────────────────────────
FAMILY_MAP_SECTION = "FamilyMap"
SELECTION_SECTION = "Combobocks_Setting"    # spelling as written by the ribbon UI
SELECTION_THICKNESS_KEY = "ThkCur"
SELECTION_COATING_KEY = "CoatCur"
EMPTY_FIELD_MARKER = "-"

# ── User selection defaults ────────────────────────────────────────────────────
DEFAULT_THICKNESS_MM: float = 0.8
DEFAULT_COATING: str = "Сендзимір"

# ── Host element categories ────────────────────────────────────────────────────
CATEGORY_CABLE_TRAY = "OST_CableTray"
CATEGORY_CABLE_TRAY_FITTING = "OST_CableTrayFitting"
CANDIDATE_CATEGORIES: tuple[str, ...] = (CATEGORY_CABLE_TRAY, CATEGORY_CABLE_TRAY_FITTING)

SYNC_TRANSACTION_NAME = "SPECIFIC-GERPAAS: sync"

# ── Host parameters consumed ───────────────────────────────────────────────────
PARAM_WIDTH = "DKC_ШиринаЛотка"
PARAM_WIDTH_2 = "DKC_ШиринаЛотка2"          # reducer outlet width
PARAM_HEIGHT = "DKC_ВысотаЛотка"
PARAM_SIZE = "Размер"
PARAM_ANGLE = "DKC_Angle"
PARAM_VARIANT = "GE_Варіант"                # filled by the user, never cleared
PARAM_LEFT = "Left"
PARAM_RIGHT = "Right"
PARAM_MATERIAL = "Material"
PARAM_COMMENT = "Комментарии"
PARAM_LEVEL = "Уровень"
PARAM_FACT_LENGTH = "DKC_ДлинаФакт"         # present on linear (per-metre) families

# ── Host parameters produced ───────────────────────────────────────────────────
PARAM_ARTICLE = "GE_Артикул"
PARAM_DESCRIPTION = "GE_Найменування"
PARAM_CATEGORY = "GE_Категорія"
PARAM_QUANTITY = "GE_Кількість"
PARAM_UNIT = "DKC_Единица измерения"
PARAM_ADDITIONAL = "GE_Додаткові"
PARAM_MASS_PER_METRE = "DKC_Масса погонного метра"
PARAM_MASS = "DKC_Масса"

# Cleared at the start of every element so nothing carries over between runs.
DERIVED_PARAMS: tuple[str, ...] = (
    PARAM_ARTICLE,
    PARAM_DESCRIPTION,
    PARAM_CATEGORY,
    PARAM_QUANTITY,
    PARAM_UNIT,
    PARAM_ADDITIONAL,
)

# Written only where the family carries them, so cleared only where present.
MASS_PARAMS: tuple[str, ...] = (PARAM_MASS, PARAM_MASS_PER_METRE)

# ── Categories ─────────────────────────────────────────────────────────────────
CATEGORY_TRAYS = "1. Кабельні лотки"
CATEGORY_CONNECTING_PARTS = "2. З'єднувальні деталі"
CATEGORY_INSTALLATION = "3. Монтажні вироби"
CATEGORY_OTHER = "4. Інші"

# Summary buckets keyed by category prefix digit
CATEGORY_BUCKET_LABELS: dict[str, str] = {
    "1": "1. Кабельні лотки + кришки",
    "2": "2. З'єднувальні деталі",
    "3": "3. Монтажні вироби",
    "4": "4. Інші",
}

UNIT_METRES = "м"
UNIT_PIECES = "шт."

# ── Special families ───────────────────────────────────────────────────────────
ACCESSORY_FAMILIES: tuple[str, ...] = ("999_DKC_Accessories",)
ACCESSORY_ARTICLE = "GE-AX-"
ACCESSORY_TYPE_NAMES: dict[str, str] = {
    "bolt": "Болт",
    "nut": "Гайка",
    "plate": "Пластина",
    "plain": "Пластина",
    "holder": "Тримач",
}

REDUCER_FAMILY = "470_DKC_S5_Lightweight Reducer"
REDUCER_REQUIRED_HEIGHT_MM = 100
REDUCER_MIN_OUTLET_WIDTH_MM = 100           # outlet width must be strictly greater
REDUCER_INLET_WIDTH_CM = 10                 # inlet is always 100 mm
REDUCER_THICKNESS = "2,0"

HORIZONTAL_BEND_CONNECTOR_FAMILY = "470_DKC_S5_Horizontal Bend_CPO0-45"
VERTICAL_BEND_CONNECTOR_FAMILIES: tuple[str, ...] = (
    "470_DKC_S5_Int Vertical Bend_1-89",
    "470_DKC_S5_Ext Vertical Bend_1-89",
)
CONNECTOR_THICKNESS_BY_HEIGHT: dict[int, str] = {50: "1,5", 100: "2,0"}
SDE_VARIANT = "SDE"
