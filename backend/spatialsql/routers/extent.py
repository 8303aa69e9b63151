"""
Extent Aggregate Endpoints
==========================
Stateless access to the mergeable extent aggregate.  Partial states are
exchanged as base64 of the 33-byte serialized payload, so a client can
aggregate shards independently and merge them later.
"""

from __future__ import annotations

import base64
import binascii
import logging

from fastapi import APIRouter, HTTPException

from spatialsql.exceptions import SerializationError
from spatialsql.schemas.spatial import (
    ExtentMergeRequest,
    ExtentRequest,
    ExtentResponse,
)
from spatialsql.services.spatial import aggregate_extent, merge_states

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/extent", tags=["Extent"])


def _encode(payload: bytes) -> str:
    return base64.b64encode(payload).decode("ascii")


# ── Aggregate a batch ─────────────────────────────────────────────
@router.post("", response_model=ExtentResponse)
async def extent(req: ExtentRequest):
    """
    Bounding box of a batch of WKT geometries.  Null, empty, invalid
    and unparseable rows are skipped, never reported.
    """
    agg, contributed = aggregate_extent(req.geometries, req.partitions)
    return ExtentResponse(
        box=agg.finalize(),
        state=_encode(agg.serialize()),
        contributed=contributed,
    )


# ── Merge partial states ──────────────────────────────────────────
@router.post("/merge", response_model=ExtentResponse)
async def merge(req: ExtentMergeRequest):
    """Merge partial states produced by ``POST /extent``."""
    try:
        payloads = [base64.b64decode(s, validate=True) for s in req.states]
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(400, f"Invalid base64 state: {exc}") from exc

    try:
        agg = merge_states(payloads)
    except SerializationError as exc:
        raise HTTPException(400, exc.message) from exc

    return ExtentResponse(box=agg.finalize(), state=_encode(agg.serialize()))
