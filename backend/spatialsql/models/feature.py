"""
SQLAlchemy ORM model for stored geometries.

Geometries are kept as WKT text together with their EPSG code, so the
registered SQL functions can reproject and aggregate them in place::

    SELECT SpatialExtent(TransformWkt(wkt, srid, 4326))
      FROM features
     WHERE layer = 'parcels'
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from spatialsql.models.database import Base


# ── Features (spatial) ───────────────────────────────────────────
class Feature(Base):
    __tablename__ = "features"
    __table_args__ = (
        Index("idx_features_layer", "layer"),
        CheckConstraint("srid >= 0", name="ck_features_srid_non_negative"),
    )

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    layer: Mapped[str] = mapped_column(Text, nullable=False)
    # EPSG code of the stored coordinates
    srid: Mapped[int] = mapped_column(Integer, nullable=False)
    wkt: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
