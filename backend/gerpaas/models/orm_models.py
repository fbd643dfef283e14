"""ORM Models for the GERPAAS catalog store (SQLAlchemy 2.0)"""
from typing import Optional
from sqlalchemy import Float, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column
from gerpaas.db import Base


# ── CATALOG ───────────────────────────────────────────────────────────────────
class CatalogItem(Base):
    __tablename__ = "catalog_raw"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Not unique: duplicated articles are a data error reported at lookup time
    spec_article: Mapped[str] = mapped_column(Text, nullable=False)
    spec_description: Mapped[Optional[str]] = mapped_column(Text)
    kg_per_unit: Mapped[Optional[float]] = mapped_column(Float)
    __table_args__ = (Index("ix_catalog_raw_spec_article", "spec_article"),)
