"""
Family-to-rule mapping table and the user's coating/thickness selection.

Both live in GERP_param_map.ini:

    [FamilyMap]
    # FamilyName = BaseArticle | GE_Категорія | GE_Додаткові
    S5_Sheet_Perforated tray = GE-KT2- | 1. Кабельні лотки | -

    [Combobocks_Setting]
    ThkCur = 1,2 мм
    CoatCur = Сендзимір

The table is loaded once per run and handed to the synchronizer; nothing
here is cached between runs.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Union

from gerpaas.config import (
    DEFAULT_COATING,
    DEFAULT_THICKNESS_MM,
    EMPTY_FIELD_MARKER,
    FAMILY_MAP_SECTION,
    SELECTION_COATING_KEY,
    SELECTION_SECTION,
    SELECTION_THICKNESS_KEY,
)
from gerpaas.models.catalog_schema import FamilyMapRow
from gerpaas.services.article_format import ArticleFormatError, parse_float
from gerpaas.services.ini_file import IniFile

logger = logging.getLogger("gerpaas-familymap")


class FamilyMap(Mapping[str, FamilyMapRow]):
    """Read-only mapping of family name to FamilyMapRow, case-insensitive on the key."""

    def __init__(self, rows: Optional[Mapping[str, FamilyMapRow]] = None):
        self._rows: Dict[str, FamilyMapRow] = {}
        for name, row in (rows or {}).items():
            self._rows[name.casefold()] = row

    def __getitem__(self, family_name: str) -> FamilyMapRow:
        return self._rows[family_name.casefold()]

    def __iter__(self) -> Iterator[str]:
        return (row.family_name for row in self._rows.values())

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, family_name) -> bool:
        return isinstance(family_name, str) and family_name.casefold() in self._rows

    def __repr__(self) -> str:
        return f"FamilyMap({len(self)} rows)"


def _field(value: str) -> str:
    value = value.strip()
    return "" if value == EMPTY_FIELD_MARKER else value


def parse_row(family_name: str, value: str) -> FamilyMapRow:
    """`GE-KT2- | 1. Кабельні лотки | -` -> FamilyMapRow. Missing fields are empty."""
    parts = value.split("|")
    base, category, additional = (parts + ["", "", ""])[:3]
    return FamilyMapRow(
        family_name=family_name.strip(),
        base_article=_field(base),
        category=_field(category),
        additional=_field(additional),
    )


def family_map_from_ini(ini: IniFile) -> FamilyMap:
    rows = {}
    for family_name, value in ini.section(FAMILY_MAP_SECTION).items():
        rows[family_name] = parse_row(family_name, value)
    return FamilyMap(rows)


def load_family_map(path: Union[str, Path]) -> FamilyMap:
    """
    Load the [FamilyMap] section.

    A missing or unreadable file is logged and yields an empty map so the run
    can still go ahead (every element is then reported as unmapped).
    """
    path = Path(path)
    if not path.exists():
        logger.error("Family map file not found: %s", path)
        return FamilyMap()
    try:
        family_map = family_map_from_ini(IniFile.load(path))
    except (OSError, UnicodeError) as e:
        logger.error("Family map could not be read from %s: %s", path, e)
        return FamilyMap()
    logger.info("Family map loaded: %d rows from %s", len(family_map), path)
    return family_map


# ── User selection ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SpecSelection:
    thickness_mm: float = DEFAULT_THICKNESS_MM
    coating: str = DEFAULT_COATING


def parse_thickness(raw: Optional[str]) -> float:
    """'1,2 мм' -> 1.2; blank or unreadable falls back to the default thickness."""
    if raw is None or not raw.strip():
        return DEFAULT_THICKNESS_MM
    try:
        return parse_float(raw)
    except ArticleFormatError:
        logger.warning("Invalid thickness '%s', using %s", raw, DEFAULT_THICKNESS_MM)
        return DEFAULT_THICKNESS_MM


def selection_from_ini(ini: IniFile) -> SpecSelection:
    thickness = ini.read(SELECTION_THICKNESS_KEY, SELECTION_SECTION)
    coating = (ini.read(SELECTION_COATING_KEY, SELECTION_SECTION) or "").strip()
    return SpecSelection(
        thickness_mm=parse_thickness(thickness),
        coating=coating or DEFAULT_COATING,
    )


def load_selection(path: Union[str, Path]) -> SpecSelection:
    path = Path(path)
    if not path.exists():
        logger.warning("Settings file not found: %s, using defaults", path)
        return SpecSelection()
    try:
        selection = selection_from_ini(IniFile.load(path))
    except (OSError, UnicodeError) as e:
        logger.error("Settings could not be read from %s: %s", path, e)
        return SpecSelection()
    logger.info(
        "User selection: thickness=%s mm, coating='%s'",
        selection.thickness_mm, selection.coating,
    )
    return selection
