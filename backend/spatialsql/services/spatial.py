"""
Spatial Query Service
=====================
Reprojection and extent queries against the ``features`` table.

All spatial work runs inside SQLite through the registered functions
(``TransformWkt``, ``SpatialExtent``, ``SpatialExtentState``), the same
way a host engine would invoke them per row.  Partitioned extents show
the partial-aggregation model: one ``SpatialExtentState`` per bucket,
merged afterwards in Python.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from spatialsql.models.feature import Feature
from spatialsql.schemas.spatial import FeatureOut
from spatialsql.spatial.crs import get_crs_resolver
from spatialsql.spatial.extent import SpatialExtent
from spatialsql.spatial.walker import load_wkt

logger = logging.getLogger(__name__)


# ── In-memory aggregation ─────────────────────────────────────────

def aggregate_extent(
    wkts: Sequence[str | None], partitions: int = 1
) -> tuple[SpatialExtent, int]:
    """
    Aggregate a batch of WKT strings.

    Rows are dealt round-robin into ``partitions`` independent
    aggregates which are then merged, exercising the same path a
    parallel host takes.

    Returns
    -------
    (merged aggregate, number of rows that contributed)
    """
    partitions = max(1, partitions)
    partials = [SpatialExtent() for _ in range(partitions)]
    contributed = 0
    for i, wkt in enumerate(wkts):
        if partials[i % partitions].accumulate_wkt(wkt):
            contributed += 1

    result = SpatialExtent()
    for partial in partials:
        result.merge(partial)
    return result, contributed


def merge_states(payloads: Iterable[bytes]) -> SpatialExtent:
    """Merge serialized partial states; raises ``SerializationError``."""
    result = SpatialExtent()
    for payload in payloads:
        result.merge(SpatialExtent.deserialize(payload))
    return result


# ── SQL-backed queries ────────────────────────────────────────────

class SpatialQueryService:
    """
    Executes spatial queries against the SQLite feature store.
    Uses the injected ``Session``; callers own the transaction.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    # ── Inserts ───────────────────────────────────────────────

    def add_features(self, layer: str, srid: int, wkts: Sequence[str]) -> int:
        """
        Validate and insert geometries into ``layer``.

        Raises
        ------
        UnknownProjection
            ``srid`` cannot be resolved.
        InvalidGeometry
            Any WKT fails to parse; nothing is inserted.
        """
        get_crs_resolver().resolve(srid)
        for wkt in wkts:
            load_wkt(wkt, srid)

        self.session.add_all(
            [Feature(layer=layer, srid=srid, wkt=wkt.strip()) for wkt in wkts]
        )
        self.session.flush()
        logger.info("Inserted %d features into layer %r (EPSG:%d)", len(wkts), layer, srid)
        return len(wkts)

    # ── Reprojection ──────────────────────────────────────────

    def transform_layer(self, layer: str, target_srid: int) -> list[FeatureOut]:
        """Every feature of ``layer`` reprojected to ``target_srid``."""
        get_crs_resolver().resolve(target_srid)

        stmt = (
            select(
                Feature.id,
                func.TransformWkt(Feature.wkt, Feature.srid, target_srid).label("wkt"),
            )
            .where(Feature.layer == layer)
            .order_by(Feature.id)
        )
        rows = self.session.execute(stmt).all()
        return [FeatureOut(id=row.id, wkt=row.wkt, srid=target_srid) for row in rows]

    def list_features(self, layer: str) -> list[FeatureOut]:
        stmt = select(Feature).where(Feature.layer == layer).order_by(Feature.id)
        return [FeatureOut.model_validate(f) for f in self.session.scalars(stmt)]

    # ── Extent ────────────────────────────────────────────────

    def _geometry_column(self, target_srid: int | None):
        if target_srid is None:
            return Feature.wkt
        get_crs_resolver().resolve(target_srid)
        return func.TransformWkt(Feature.wkt, Feature.srid, target_srid)

    def layer_extent(self, layer: str, target_srid: int | None = None) -> str | None:
        """
        ``SELECT SpatialExtent(...)`` over one layer.

        Without ``target_srid`` the stored coordinates are aggregated
        as-is, which is only meaningful for single-SRID layers.
        """
        geom = self._geometry_column(target_srid)
        stmt = select(func.SpatialExtent(geom)).where(Feature.layer == layer)
        return self.session.execute(stmt).scalar()

    def layer_extent_partitioned(
        self,
        layer: str,
        partitions: int,
        target_srid: int | None = None,
    ) -> SpatialExtent:
        """
        Aggregate ``layer`` in ``partitions`` buckets (``id % n``), ship
        each bucket's state as the 33-byte payload, and merge them.
        """
        geom = self._geometry_column(target_srid)
        stmt = (
            select(func.SpatialExtentState(geom))
            .where(Feature.layer == layer)
            .group_by(Feature.id % partitions)
        )
        states = self.session.execute(stmt).scalars().all()
        logger.debug("Merging %d partial extents for layer %r", len(states), layer)
        return merge_states(bytes(s) for s in states)
