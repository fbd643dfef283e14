from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class FamilyMapRow(BaseModel):
    """
    One [FamilyMap] entry: how a host family turns into a specification line.
    Empty strings stand for fields marked "-" in the mapping file.
    """
    model_config = ConfigDict(frozen=True)

    family_name: str = Field(..., description="e.g., S5_Sheet_Perforated tray")
    base_article: str = Field("", description="Article template, e.g., GE-KT2-")
    category: str = Field("", description="e.g., 1. Кабельні лотки")
    additional: str = Field("", description="Free-form data copied to GE_Додаткові")


class CatalogEntry(BaseModel):
    """A catalog_raw row addressed by its exact article code."""
    model_config = ConfigDict(frozen=True)

    article: str
    description: str = ""
    mass_per_unit: Optional[float] = Field(None, description="kg per metre (trays) or per piece")

# SQL Schema of the catalog store:
# CREATE TABLE catalog_raw (
#     id INTEGER PRIMARY KEY AUTOINCREMENT,
#     spec_article TEXT NOT NULL,
#     spec_description TEXT,
#     kg_per_unit REAL
# );
