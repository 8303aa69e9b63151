"""
SQL Host Functions
==================
Adapters that expose the spatial primitives to SQLite as user-defined
functions and aggregates.

=========================  ========================================
SQL name                   Python object
=========================  ========================================
``TransformWkt(w, s, d)``  ``sql_transform_wkt`` (deterministic)
``SpatialExtent(w)``       ``SqlSpatialExtent``  → ``BOX(...)`` text
``SpatialExtentState(w)``  ``SqlSpatialExtentState`` → 33-byte blob
``SpatialExtentMerge(b)``  ``SqlSpatialExtentMerge`` → ``BOX(...)``
=========================  ========================================

SQLite drives aggregates with ``__init__`` / ``step`` / ``finalize``,
which map onto ``initialize`` / ``accumulate`` / ``finalize``.  It never
runs aggregates in parallel, so partial states are produced explicitly
with ``SpatialExtentState`` (one per ``GROUP BY`` bucket) and combined
with ``SpatialExtentMerge`` or ``SpatialExtent.merge`` in Python.

Exceptions raised inside a UDF are replaced by SQLite with a generic
``OperationalError``, so failures are logged here before re-raising.
"""

from __future__ import annotations

import logging

from spatialsql.exceptions import SpatialError
from spatialsql.spatial.extent import SpatialExtent
from spatialsql.spatial.walker import transform_wkt

logger = logging.getLogger(__name__)


def sql_transform_wkt(wkt: str | None, src: int | None, dst: int | None) -> str | None:
    """``TransformWkt(wkt, src, dst)``; NULL in any argument yields NULL."""
    if wkt is None or src is None or dst is None:
        return None
    try:
        return transform_wkt(wkt, int(src), int(dst))
    except SpatialError as exc:
        logger.warning("TransformWkt(%s -> %s) failed: %s", src, dst, exc.message)
        raise


class SqlSpatialExtent:
    """``SpatialExtent(wkt)`` aggregate returning ``BOX(...)`` text."""

    def __init__(self) -> None:
        self._agg = SpatialExtent()

    def step(self, wkt: str | None) -> None:
        self._agg.accumulate_wkt(wkt)

    def finalize(self) -> str | None:
        return self._agg.finalize()


class SqlSpatialExtentState(SqlSpatialExtent):
    """``SpatialExtentState(wkt)`` aggregate returning the partial state blob."""

    def finalize(self) -> bytes:
        return self._agg.serialize()


class SqlSpatialExtentMerge:
    """``SpatialExtentMerge(state)`` aggregate combining partial state blobs."""

    def __init__(self) -> None:
        self._agg = SpatialExtent()

    def step(self, state: bytes | None) -> None:
        if state is None:
            return
        try:
            self._agg.merge(SpatialExtent.deserialize(bytes(state)))
        except SpatialError as exc:
            logger.warning("SpatialExtentMerge rejected a state: %s", exc.message)
            raise

    def finalize(self) -> str | None:
        return self._agg.finalize()


def register_spatial_functions(dbapi_connection) -> None:
    """Register every spatial UDF and aggregate on a ``sqlite3`` connection."""
    dbapi_connection.create_function(
        "TransformWkt", 3, sql_transform_wkt, deterministic=True
    )
    dbapi_connection.create_aggregate("SpatialExtent", 1, SqlSpatialExtent)
    dbapi_connection.create_aggregate("SpatialExtentState", 1, SqlSpatialExtentState)
    dbapi_connection.create_aggregate("SpatialExtentMerge", 1, SqlSpatialExtentMerge)
    logger.debug("Registered spatial SQL functions on %r", dbapi_connection)
