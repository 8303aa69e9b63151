"""
Reprojection Endpoints
======================
WKT in, WKT out.  Thin HTTP wrapper over ``transform_wkt``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from spatialsql.exceptions import SpatialError
from spatialsql.schemas.spatial import TransformRequest, TransformResponse
from spatialsql.spatial.walker import transform_wkt

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/transform", tags=["Reprojection"])


@router.post("", response_model=TransformResponse)
async def transform(req: TransformRequest):
    """
    Reproject a geometry from ``source_srid`` to ``target_srid``.

    Blank input returns ``wkt: null``.  Unknown EPSG codes, unparseable
    WKT and unsupported geometry types are reported as 422.
    """
    kwargs = {"precision": None} if req.full_precision else {}
    try:
        wkt = transform_wkt(req.wkt, req.source_srid, req.target_srid, **kwargs)
    except SpatialError as exc:
        raise HTTPException(422, exc.message) from exc
    return TransformResponse(wkt=wkt, srid=req.target_srid)
