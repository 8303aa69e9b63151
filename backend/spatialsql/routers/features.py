"""
Feature Layer Endpoints
=======================
Store WKT geometries and query them through the SQL host functions.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from spatialsql.config import get_settings
from spatialsql.exceptions import SpatialError
from spatialsql.models.database import get_db
from spatialsql.schemas.spatial import (
    FeatureCreateRequest,
    FeatureCreateResponse,
    LayerExtentResponse,
    LayerFeaturesResponse,
)
from spatialsql.services.spatial import SpatialQueryService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/features", tags=["Features"])
settings = get_settings()


# ── Insert ────────────────────────────────────────────────────────
@router.post("", response_model=FeatureCreateResponse, status_code=201)
def create_features(
    req: FeatureCreateRequest,
    db: Session = Depends(get_db),
):
    """Validate and store a batch of geometries in one layer."""
    svc = SpatialQueryService(db)
    try:
        inserted = svc.add_features(req.layer, req.srid, req.geometries)
    except SpatialError as exc:
        raise HTTPException(422, exc.message) from exc
    db.commit()
    return FeatureCreateResponse(layer=req.layer, inserted=inserted)


# ── List (optionally reprojected) ─────────────────────────────────
@router.get("/{layer}", response_model=LayerFeaturesResponse)
def list_features(
    layer: str,
    srid: int | None = Query(default=None, ge=0),
    db: Session = Depends(get_db),
):
    """All features of a layer, reprojected to ``srid`` when given."""
    svc = SpatialQueryService(db)
    try:
        if srid is None:
            features = svc.list_features(layer)
        else:
            features = svc.transform_layer(layer, srid)
    except SpatialError as exc:
        raise HTTPException(422, exc.message) from exc
    return LayerFeaturesResponse(layer=layer, features=features)


# ── Extent ────────────────────────────────────────────────────────
@router.get("/{layer}/extent", response_model=LayerExtentResponse)
def layer_extent(
    layer: str,
    srid: int | None = Query(default=None, ge=0),
    partitions: int | None = Query(default=None, ge=1, le=64),
    db: Session = Depends(get_db),
):
    """
    Extent of a layer via ``SpatialExtent`` in SQL.  With
    ``partitions`` > 1 the layer is aggregated in buckets and the
    partial states merged.
    """
    partitions = partitions or settings.default_partitions
    svc = SpatialQueryService(db)
    try:
        if partitions == 1:
            box = svc.layer_extent(layer, srid)
        else:
            box = svc.layer_extent_partitioned(layer, partitions, srid).finalize()
    except SpatialError as exc:
        raise HTTPException(422, exc.message) from exc
    return LayerExtentResponse(layer=layer, srid=srid, partitions=partitions, box=box)
