"""
Specification Synchronizer: writes GERPAAS specification fields onto every
cable tray and cable-tray fitting of a model document.

Per element, inside one document transaction:
    1. clear the derived fields (re-running never keeps stale values)
    2. classify the family: accessory / reducer / bend connector / default
    3. build the article code (bespoke rule or mapping row + ArticleBuilder)
    4. quantity & unit from the category prefix (1.* -> 0 м, otherwise 1 шт.)
    5. description (and unit mass) from the catalog on a unique match
    6. count the element under its category

Per-element failures never abort the batch. Precondition failures (missing
parameter, unreadable number, value outside the catalog range) and unexpected
exceptions are counted as errors and the element keeps its cleared fields.
Unmapped families are only warned about.
"""
import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from gerpaas.config import (
    ACCESSORY_ARTICLE,
    ACCESSORY_FAMILIES,
    ACCESSORY_TYPE_NAMES,
    CATEGORY_BUCKET_LABELS,
    CATEGORY_CONNECTING_PARTS,
    CATEGORY_INSTALLATION,
    CATEGORY_OTHER,
    CONNECTOR_THICKNESS_BY_HEIGHT,
    DERIVED_PARAMS,
    EMPTY_FIELD_MARKER,
    HORIZONTAL_BEND_CONNECTOR_FAMILY,
    MASS_PARAMS,
    PARAM_ADDITIONAL,
    PARAM_ARTICLE,
    PARAM_CATEGORY,
    PARAM_DESCRIPTION,
    PARAM_FACT_LENGTH,
    PARAM_HEIGHT,
    PARAM_LEFT,
    PARAM_MASS,
    PARAM_MASS_PER_METRE,
    PARAM_QUANTITY,
    PARAM_RIGHT,
    PARAM_UNIT,
    PARAM_VARIANT,
    PARAM_WIDTH_2,
    REDUCER_FAMILY,
    REDUCER_INLET_WIDTH_CM,
    REDUCER_MIN_OUTLET_WIDTH_MM,
    REDUCER_REQUIRED_HEIGHT_MM,
    REDUCER_THICKNESS,
    SDE_VARIANT,
    SYNC_TRANSACTION_NAME,
    UNIT_METRES,
    UNIT_PIECES,
    VERTICAL_BEND_CONNECTOR_FAMILIES,
)
from gerpaas.services.accessory_log import AccessoryLog
from gerpaas.services.article_builder import build_article, build_bend_article
from gerpaas.services.article_format import ArticleFormatError, coating_code, height_token, parse_int
from gerpaas.services.catalog_lookup import CatalogLookup
from gerpaas.services.dimension_extractor import get_width_height_and_angle
from gerpaas.services.family_map import FamilyMap, SpecSelection
from gerpaas.services.host_model import ModelDocument, ModelElement, ParameterMissingError

logger = logging.getLogger("gerpaas-sync")


class PreconditionError(ValueError):
    """An element does not satisfy the rule selected for its family."""


class ElementKind(str, Enum):
    ACCESSORY = "accessory"
    REDUCER = "reducer"
    HORIZONTAL_BEND_CONNECTOR = "horizontal_bend_connector"
    VERTICAL_BEND_CONNECTOR = "vertical_bend_connector"
    DEFAULT = "default"


def _family_key(name: str) -> str:
    return (name or "").strip().casefold()


_KIND_BY_FAMILY: Dict[str, ElementKind] = {
    **{_family_key(f): ElementKind.ACCESSORY for f in ACCESSORY_FAMILIES},
    _family_key(REDUCER_FAMILY): ElementKind.REDUCER,
    _family_key(HORIZONTAL_BEND_CONNECTOR_FAMILY): ElementKind.HORIZONTAL_BEND_CONNECTOR,
    **{_family_key(f): ElementKind.VERTICAL_BEND_CONNECTOR for f in VERTICAL_BEND_CONNECTOR_FAMILIES},
}


def classify_element(family_name: str) -> ElementKind:
    return _KIND_BY_FAMILY.get(_family_key(family_name), ElementKind.DEFAULT)


def quantity_and_unit(category: str) -> Tuple[str, str]:
    """Linear stock (1.*) is counted in metres by the schedule; everything else per piece."""
    if (category or "").startswith("1."):
        return "0", UNIT_METRES
    return "1", UNIT_PIECES


def category_bucket(category: str) -> Optional[str]:
    """'1'..'4' summary bucket for a category label; None for a blank label."""
    if not category or not category.strip():
        return None
    for key in ("1", "2", "3"):
        if category.startswith(f"{key}."):
            return key
    return "4"


def translate_accessory_type(type_name: Optional[str]) -> str:
    if not type_name or not type_name.strip():
        return "Невідомий"
    name = type_name.strip()
    return ACCESSORY_TYPE_NAMES.get(name.lower(), name)


# ── Run statistics ───────────────────────────────────────────────────────────

@dataclass
class RunSummary:
    processed: int
    per_category: Dict[str, int]         # bucket label -> count
    error_count: int
    errors: List[str]
    unmapped_families: List[str] = field(default_factory=list)
    run_id: str = ""
    duration_ms: float = 0.0

    def format_text(self) -> str:
        lines = [f"Оброблено елементів: {self.processed}"]
        lines += [f"  {label}: {count}" for label, count in self.per_category.items()]
        lines.append(f"Помилки: {self.error_count}")
        return "\n".join(lines)


@dataclass
class RunStatistics:
    """Mutable accumulator threaded through one run."""
    processed: int = 0
    per_category: Dict[str, int] = field(
        default_factory=lambda: {key: 0 for key in CATEGORY_BUCKET_LABELS}
    )
    error_count: int = 0
    errors: List[str] = field(default_factory=list)
    unmapped_families: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.error_count += 1
        self.errors.append(message)

    def count_category(self, category: str) -> None:
        bucket = category_bucket(category)
        if bucket is not None:
            self.per_category[bucket] += 1

    def add_unmapped(self, family_name: str) -> None:
        if family_name not in self.unmapped_families:
            self.unmapped_families.append(family_name)

    def summary(self, run_id: str = "", duration_ms: float = 0.0) -> RunSummary:
        return RunSummary(
            processed=self.processed,
            per_category={CATEGORY_BUCKET_LABELS[k]: v for k, v in self.per_category.items()},
            error_count=self.error_count,
            errors=list(self.errors),
            unmapped_families=list(self.unmapped_families),
            run_id=run_id,
            duration_ms=duration_ms,
        )


# ── Synchronizer ─────────────────────────────────────────────────────────────

class SpecSynchronizer:

    def __init__(
        self,
        family_map: FamilyMap,
        catalog: CatalogLookup,
        selection: Optional[SpecSelection] = None,
        accessory_log: Optional[AccessoryLog] = None,
    ):
        self.family_map = family_map
        self.catalog = catalog
        self.selection = selection or SpecSelection()
        self.accessory_log = accessory_log or AccessoryLog(None)

    # ── Run ──────────────────────────────────────────────────────────────────

    def run(self, document: ModelDocument) -> RunSummary:
        """Synchronize every candidate element of `document` in one transaction."""
        run_id = uuid.uuid4().hex[:12]
        stats = RunStatistics()
        started = time.perf_counter()
        logger.info(
            "Sync started: thickness=%s mm, coating='%s'",
            self.selection.thickness_mm, self.selection.coating,
            extra={"run_id": run_id},
        )

        seen: Set[str] = set()
        with document.transaction(SYNC_TRANSACTION_NAME):
            for element in document.candidates():
                if element.element_id in seen:
                    continue
                seen.add(element.element_id)
                self.process_element(element, stats, run_id)

        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        summary = stats.summary(run_id, duration_ms)
        logger.info(
            "Sync finished\n%s", summary.format_text(),
            extra={"run_id": run_id, "duration_ms": duration_ms},
        )
        return summary

    def process_element(self, element: ModelElement, stats: RunStatistics, run_id: str = "") -> None:
        """Process one element; never raises."""
        extra = {"run_id": run_id, "element_id": element.element_id}
        try:
            self._process(element, stats)
        except (PreconditionError, ParameterMissingError) as e:
            logger.error("%s", e, extra=extra)
            self._clear(element)
            stats.add_error(str(e))
        except Exception as e:
            logger.exception("Unexpected failure while processing element", extra=extra)
            self._clear(element)
            stats.add_error(f"{type(e).__name__}: {e} (ElementId={element.element_id})")

    def _process(self, element: ModelElement, stats: RunStatistics) -> None:
        self._clear(element)
        family = (element.family_name or "").strip()
        kind = classify_element(family)

        if kind is ElementKind.ACCESSORY:
            self._process_accessory(element, stats)
            return
        if kind is ElementKind.REDUCER:
            self._process_reducer(element, stats)
            return
        if kind is ElementKind.HORIZONTAL_BEND_CONNECTOR:
            self._process_connector(element, stats, "GE-YDE")
            return
        if kind is ElementKind.VERTICAL_BEND_CONNECTOR and self._is_sde(element):
            self._process_connector(element, stats, f"GE-{SDE_VARIANT}")
            return
        self._process_default(element, family, stats)

    # ── Special families ─────────────────────────────────────────────────────

    def _process_accessory(self, element: ModelElement, stats: RunStatistics) -> None:
        self.accessory_log.record(element)
        type_ua = translate_accessory_type(element.type_name)
        quantity, unit = quantity_and_unit(CATEGORY_INSTALLATION)
        element.set_param(PARAM_ARTICLE, ACCESSORY_ARTICLE)
        element.set_param(PARAM_CATEGORY, CATEGORY_INSTALLATION)
        element.set_param(PARAM_DESCRIPTION, f"Аксесуар ({type_ua})")
        element.set_param(PARAM_QUANTITY, quantity)
        element.set_param(PARAM_UNIT, unit)
        stats.count_category(CATEGORY_INSTALLATION)
        stats.processed += 1

    def _process_reducer(self, element: ModelElement, stats: RunStatistics) -> None:
        height = self._int_param(element, PARAM_HEIGHT)
        if height != REDUCER_REQUIRED_HEIGHT_MM:
            raise PreconditionError(
                f"Reducer: height {height} mm is not in the catalog "
                f"(only {REDUCER_REQUIRED_HEIGHT_MM} allowed) (ElementId={element.element_id})"
            )
        outlet = self._int_param(element, PARAM_WIDTH_2)
        if outlet <= REDUCER_MIN_OUTLET_WIDTH_MM:
            raise PreconditionError(
                f"Reducer: second width {outlet} mm is not allowed "
                f"(must be > {REDUCER_MIN_OUTLET_WIDTH_MM} mm) (ElementId={element.element_id})"
            )

        direction = "R"
        if self._flag(element, PARAM_LEFT):
            direction = "RL"
        if self._flag(element, PARAM_RIGHT):
            direction = "RR"

        article = "-".join([
            "GE-KT2",
            direction,
            str(REDUCER_INLET_WIDTH_CM),
            str(outlet // 10),
            height_token(REDUCER_REQUIRED_HEIGHT_MM),
            REDUCER_THICKNESS,
            coating_code(self.selection.coating),
        ])
        self._write(element, article, CATEGORY_CONNECTING_PARTS, stats)

    def _process_connector(self, element: ModelElement, stats: RunStatistics, prefix: str) -> None:
        height = self._int_param(element, PARAM_HEIGHT)
        thickness = CONNECTOR_THICKNESS_BY_HEIGHT.get(height)
        if thickness is None:
            raise PreconditionError(
                f"Connector {element.family_name}: height {height} mm is not in the catalog "
                f"(ElementId={element.element_id})"
            )
        # Thickness follows the height; the user's selection does not apply
        article = f"{prefix}-{height}-{thickness}-{coating_code(self.selection.coating)}"
        self._write(element, article, CATEGORY_CONNECTING_PARTS, stats)

    # ── Default path ─────────────────────────────────────────────────────────

    def _process_default(self, element: ModelElement, family: str, stats: RunStatistics) -> None:
        row = self.family_map.get(family)
        if row is None:
            logger.warning(
                "No mapping for family '%s'", family,
                extra={"element_id": element.element_id},
            )
            stats.add_unmapped(family)
            return

        category = row.category.strip()
        if not category or category == EMPTY_FIELD_MARKER:
            category = CATEGORY_OTHER

        width, height, angle = get_width_height_and_angle(element)
        thickness, coating = self.selection.thickness_mm, self.selection.coating
        if row.base_article:
            article = build_article(row.base_article, width, height, thickness, coating, angle)
        else:
            article = build_bend_article(family, width, height, thickness, coating, angle)

        if not article:
            raise PreconditionError(
                f"Cannot build an article for family '{family}' (ElementId={element.element_id})"
            )
        self._write(element, article, category, stats, additional=row.additional)

    # ── Field writes ─────────────────────────────────────────────────────────

    def _clear(self, element: ModelElement) -> None:
        for name in DERIVED_PARAMS:
            element.set_param(name, "")
        for name in MASS_PARAMS:
            if element.has(name):
                element.set_param(name, "")

    def _write(
        self,
        element: ModelElement,
        article: str,
        category: str,
        stats: RunStatistics,
        additional: str = "",
    ) -> None:
        quantity, unit = quantity_and_unit(category)
        element.set_param(PARAM_ARTICLE, article)
        element.set_param(PARAM_CATEGORY, category)
        element.set_param(PARAM_QUANTITY, quantity)
        element.set_param(PARAM_UNIT, unit)
        if additional:
            element.set_param(PARAM_ADDITIONAL, additional)
        self._describe(element, article)
        stats.count_category(category)
        stats.processed += 1

    def _describe(self, element: ModelElement, article: str) -> None:
        """Description and unit mass from the catalog, on a unique match only."""
        found, entry = self.catalog.find_exact(article)
        extra = {"element_id": element.element_id}
        if found == 0:
            logger.warning("Not found in catalog: %s", article, extra=extra)
            return
        if found > 1 or entry is None:
            logger.warning("Catalog has %d rows for %s", found, article, extra=extra)
            return

        element.set_param(PARAM_DESCRIPTION, entry.description)
        if entry.mass_per_unit is not None:
            # Linear families carry the fact length and take mass per metre
            target = PARAM_MASS_PER_METRE if element.has(PARAM_FACT_LENGTH) else PARAM_MASS
            element.set_param(target, entry.mass_per_unit)

    # ── Parameter readers ────────────────────────────────────────────────────

    def _int_param(self, element: ModelElement, name: str) -> int:
        raw = element.lookup(name)
        if raw is None:
            raise ParameterMissingError(element.element_id, name)
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return int(round(raw))
        try:
            return parse_int(raw)
        except ArticleFormatError as e:
            raise PreconditionError(f"'{name}': {e} (ElementId={element.element_id})") from e

    def _flag(self, element: ModelElement, name: str) -> bool:
        raw = element.lookup(name)
        if raw is None:
            return False
        if isinstance(raw, bool):
            return raw
        try:
            return parse_int(raw) == 1
        except ArticleFormatError:
            return False

    def _is_sde(self, element: ModelElement) -> bool:
        variant = element.lookup(PARAM_VARIANT)
        return isinstance(variant, str) and variant.strip().upper() == SDE_VARIANT
