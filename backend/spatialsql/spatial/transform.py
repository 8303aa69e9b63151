"""
Coordinate Transformation Engine
=================================
Reprojects a single (x, y) pair between two EPSG codes.

The engine is split along two narrow capabilities so the geometry
walker is a pure function of them:

1. **Resolver**    — ``resolve(code) -> CRS``  (see ``spatial.crs``).
2. **Reprojector** — ``reproject(x, y, src_crs, dst_crs) -> (x', y')``.

The default reprojector is PROJ via ``pyproj.Transformer`` with
``always_xy=True`` so geographic CRSs are always (lon, lat).  Tests
substitute fake reprojectors (identity, affine) through the same
interface.
"""

from __future__ import annotations

import logging
import math
import threading
from functools import lru_cache
from typing import Any, Protocol

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from spatialsql.exceptions import ProjectionError
from spatialsql.spatial.crs import get_crs_resolver

logger = logging.getLogger(__name__)


# ── Capability interfaces ─────────────────────────────────────────
class CRSResolverProtocol(Protocol):
    def resolve(self, code: int) -> Any: ...


class PointReprojector(Protocol):
    def reproject(
        self, x: float, y: float, src_crs: Any, dst_crs: Any
    ) -> tuple[float, float]: ...


# ── PROJ-backed reprojector ───────────────────────────────────────
class PyprojReprojector:
    """
    Reprojects points with ``pyproj``.

    One ``Transformer`` is cached per (source, destination) CRS pair.
    The lock guards the cache dict only; the transform call itself runs
    outside it (pyproj transformers are thread-safe since 3.1).
    """

    def __init__(self) -> None:
        self._transformers: dict[tuple[int, int], tuple[CRS, CRS, Transformer]] = {}
        self._lock = threading.Lock()

    def get_transformer(self, src_crs: CRS, dst_crs: CRS) -> Transformer:
        key = (id(src_crs), id(dst_crs))
        with self._lock:
            entry = self._transformers.get(key)
        # The entry holds references to both CRS objects, so a matching id
        # can only belong to the same live objects.
        if entry is not None and entry[0] is src_crs and entry[1] is dst_crs:
            return entry[2]

        try:
            transformer = Transformer.from_crs(src_crs, dst_crs, always_xy=True)
        except CRSError as exc:
            raise ProjectionError(
                _epsg_of(src_crs), _epsg_of(dst_crs), str(exc)
            ) from exc
        logger.debug("Created transformer %s -> %s", src_crs.name, dst_crs.name)

        with self._lock:
            self._transformers[key] = (src_crs, dst_crs, transformer)
        return transformer

    def reproject(
        self, x: float, y: float, src_crs: CRS, dst_crs: CRS
    ) -> tuple[float, float]:
        transformer = self.get_transformer(src_crs, dst_crs)
        try:
            tx, ty = transformer.transform(x, y, errcheck=True)
        except ProjError as exc:
            raise ProjectionError(
                _epsg_of(src_crs), _epsg_of(dst_crs), str(exc)
            ) from exc
        return tx, ty

    def cache_stats(self) -> dict[str, int]:
        with self._lock:
            return {"cached_transformers": len(self._transformers)}


def _epsg_of(crs: CRS) -> int:
    return crs.to_epsg() or 0


# ── Coordinate Transformer ───────────────────────────────────────
class CoordinateTransformer:
    """
    Transforms coordinate pairs between EPSG codes.

    Parameters
    ----------
    resolver : CRSResolverProtocol, optional
        Maps EPSG codes to CRS definitions.  Defaults to the shared
        process-wide ``CRSResolver``.
    reprojector : PointReprojector, optional
        Performs the per-point math.  Defaults to ``PyprojReprojector``.
    """

    def __init__(
        self,
        resolver: CRSResolverProtocol | None = None,
        reprojector: PointReprojector | None = None,
    ) -> None:
        self.resolver = resolver or get_crs_resolver()
        self.reprojector = reprojector or PyprojReprojector()

    def transform(
        self, x: float, y: float, src_code: int, dst_code: int
    ) -> tuple[float, float]:
        """
        Reproject one pair from ``src_code`` to ``dst_code``.

        Same-code calls return the input untouched without touching the
        resolver or the projection engine, so no floating-point error is
        introduced by a no-op transform.

        Raises
        ------
        UnknownProjection
            Either code cannot be resolved.
        ProjectionError
            The engine failed or produced a non-finite result.
        """
        if src_code == dst_code:
            return x, y

        src_crs = self.resolver.resolve(src_code)
        dst_crs = self.resolver.resolve(dst_code)
        tx, ty = self.reprojector.reproject(x, y, src_crs, dst_crs)

        if not (math.isfinite(tx) and math.isfinite(ty)):
            raise ProjectionError(
                src_code, dst_code, f"non-finite result for ({x}, {y})"
            )
        return tx, ty


@lru_cache(maxsize=1)
def get_coordinate_transformer() -> CoordinateTransformer:
    """Shared transformer wired to the default resolver and PROJ."""
    return CoordinateTransformer()
