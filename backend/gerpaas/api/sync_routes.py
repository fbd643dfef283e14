"""Spec sync API routes: synchronize elements, build one article, list the family map."""
import logging
from dataclasses import replace
from pathlib import Path
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from gerpaas.api.deps import get_accessory_log, get_catalog_path, get_family_map, get_selection
from gerpaas.models.catalog_schema import FamilyMapRow
from gerpaas.models.sync_models import (
    ArticleRequest,
    ArticleResponse,
    ElementResult,
    RunSummaryPayload,
    SyncRequest,
    SyncResponse,
)
from gerpaas.services.accessory_log import AccessoryLog
from gerpaas.services.article_builder import build_article, build_bend_article, classify_template
from gerpaas.services.catalog_lookup import CatalogLookup
from gerpaas.services.family_map import FamilyMap, SpecSelection
from gerpaas.services.host_model import ModelDocument
from gerpaas.services.spec_synchronizer import SpecSynchronizer

router = APIRouter(prefix="/api/spec", tags=["Spec"])
logger = logging.getLogger("gerpaas-api")


def _apply_overrides(selection: SpecSelection, coating, thickness_mm) -> SpecSelection:
    if coating and coating.strip():
        selection = replace(selection, coating=coating.strip())
    if thickness_mm is not None:
        selection = replace(selection, thickness_mm=thickness_mm)
    return selection


@router.post("/sync", response_model=SyncResponse)
def sync_elements(
    request: SyncRequest,
    http_request: Request,
    family_map: FamilyMap = Depends(get_family_map),
    selection: SpecSelection = Depends(get_selection),
    catalog_path: Path = Depends(get_catalog_path),
    accessory_log: AccessoryLog = Depends(get_accessory_log),
):
    """Run one synchronization over the posted elements and return their parameters."""
    ids = [e.element_id for e in request.elements]
    if len(ids) != len(set(ids)):
        raise HTTPException(status_code=422, detail="Duplicate element_id in request")

    document = ModelDocument([e.to_element() for e in request.elements])
    selection = _apply_overrides(selection, request.coating, request.thickness_mm)

    with CatalogLookup(catalog_path) as catalog:
        summary = SpecSynchronizer(family_map, catalog, selection, accessory_log).run(document)
    logger.info(
        "Sync request: %d elements -> run %s", len(ids), summary.run_id,
        extra={"request_id": getattr(http_request.state, "request_id", "")},
    )

    return SyncResponse(
        elements=[
            ElementResult(element_id=e.element_id, parameters=e.parameters)
            for e in document.elements
        ],
        summary=RunSummaryPayload(
            run_id=summary.run_id,
            processed=summary.processed,
            per_category=summary.per_category,
            error_count=summary.error_count,
            errors=summary.errors,
            unmapped_families=summary.unmapped_families,
            duration_ms=summary.duration_ms,
            report=summary.format_text(),
        ),
    )


@router.post("/article", response_model=ArticleResponse)
def build_single_article(
    request: ArticleRequest,
    selection: SpecSelection = Depends(get_selection),
    catalog_path: Path = Depends(get_catalog_path),
):
    """Build one article code and look it up in the catalog."""
    if not request.base_article.strip() and not request.family_name.strip():
        raise HTTPException(status_code=422, detail="base_article or family_name is required")

    selection = _apply_overrides(selection, request.coating, request.thickness_mm)
    args = (request.width, request.height, selection.thickness_mm, selection.coating, request.angle)

    if request.base_article.strip():
        shape = classify_template(request.base_article).value
        article = build_article(request.base_article, *args)
    else:
        shape = "bend"
        article = build_bend_article(request.family_name, *args)
        if not article:
            raise HTTPException(
                status_code=404, detail=f"'{request.family_name}' is not a known bend family"
            )

    with CatalogLookup(catalog_path) as catalog:
        found, entry = catalog.find_exact(article)

    return ArticleResponse(
        article=article,
        shape=shape,
        match_count=found,
        description=entry.description if entry else "",
        mass_per_unit=entry.mass_per_unit if entry else None,
    )


@router.get("/family-map", response_model=List[FamilyMapRow])
def list_family_map(family_map: FamilyMap = Depends(get_family_map)):
    return sorted(family_map.values(), key=lambda row: row.family_name.casefold())
