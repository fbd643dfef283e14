"""
Request / response payloads of the /api/spec routes.

Elements travel as plain parameter dictionaries; the API rebuilds a
ModelDocument from them, runs the synchronizer and returns every element's
parameters as they stand after the run.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from gerpaas.config import CATEGORY_CABLE_TRAY
from gerpaas.services.host_model import ModelElement


class ElementPayload(BaseModel):
    element_id: str
    category: str = CATEGORY_CABLE_TRAY     # OST_CableTray | OST_CableTrayFitting
    family_name: str = ""
    type_name: str = ""
    parameters: Dict[str, Any] = {}
    read_only: List[str] = []
    bounding_box: Optional[List[List[float]]] = None   # [[x, y, z], [x, y, z]]
    location: Optional[List[float]] = None
    host_name: Optional[str] = None

    def to_element(self) -> ModelElement:
        bbox = None
        if self.bounding_box and len(self.bounding_box) == 2:
            bbox = (tuple(self.bounding_box[0]), tuple(self.bounding_box[1]))
        return ModelElement(
            element_id=self.element_id,
            category=self.category,
            family_name=self.family_name,
            type_name=self.type_name,
            parameters=dict(self.parameters),
            read_only=set(self.read_only),
            bounding_box=bbox,
            location=tuple(self.location) if self.location else None,
            host_name=self.host_name,
        )


class SyncRequest(BaseModel):
    elements: List[ElementPayload]
    # Override the selection stored in [Combobocks_Setting]
    coating: Optional[str] = None
    thickness_mm: Optional[float] = Field(None, gt=0)


class ElementResult(BaseModel):
    element_id: str
    parameters: Dict[str, Any]


class RunSummaryPayload(BaseModel):
    run_id: str
    processed: int
    per_category: Dict[str, int]
    error_count: int
    errors: List[str] = []
    unmapped_families: List[str] = []
    duration_ms: float = 0.0
    report: str = ""


class SyncResponse(BaseModel):
    elements: List[ElementResult]
    summary: RunSummaryPayload


class ArticleRequest(BaseModel):
    """Either a base article (general builder) or a bend family name (bend builder)."""
    base_article: str = ""
    family_name: str = ""
    width: int = Field(..., description="mm")
    height: int = Field(0, description="mm; ignored for covers")
    angle: Optional[float] = Field(None, description="degrees")
    thickness_mm: Optional[float] = Field(None, gt=0)
    coating: Optional[str] = None


class ArticleResponse(BaseModel):
    article: str
    shape: Optional[str] = None     # tray | cover | fitting | bend
    match_count: int = 0
    description: str = ""
    mass_per_unit: Optional[float] = None
