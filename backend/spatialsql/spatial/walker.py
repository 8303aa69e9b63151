"""
Geometry Walker
===============
Recursively reprojects every coordinate of a shapely geometry.

Dispatch is a closed ``singledispatch`` registry over the seven
supported variants::

    Point, LineString, Polygon,
    MultiPoint, MultiLineString, MultiPolygon,
    GeometryCollection

Anything else (``LinearRing``, foreign objects) raises
``UnsupportedGeometryType``.  The walk is depth-first and
order-preserving: ring count, point count per ring and member count
are identical before and after; only coordinate values change.

The SRID travels on the geometry itself (``shapely.get_srid`` /
``shapely.set_srid``).
"""

from __future__ import annotations

import logging
from functools import singledispatch
from typing import Callable

import shapely
import shapely.wkt
from shapely.errors import ShapelyError
from shapely.geometry import (
    GeometryCollection,
    LinearRing,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)
from shapely.geometry.base import BaseGeometry

from spatialsql.config import get_settings
from spatialsql.exceptions import InvalidGeometry, UnsupportedGeometryType
from spatialsql.spatial.formatting import to_wkt
from spatialsql.spatial.transform import (
    CoordinateTransformer,
    get_coordinate_transformer,
)

logger = logging.getLogger(__name__)

# (x, y) -> (x', y') bound to one source/destination pair.
ProjectFn = Callable[[float, float], tuple[float, float]]

_UNSET = object()


def _coords(coords, project: ProjectFn) -> list[tuple[float, ...]]:
    """Transform a coordinate sequence in order; Z is carried through."""
    return [(*project(c[0], c[1]), *c[2:]) for c in coords]


# ── Per-variant handlers ──────────────────────────────────────────
@singledispatch
def _reproject(geom, project: ProjectFn) -> BaseGeometry:
    raise UnsupportedGeometryType(getattr(geom, "geom_type", type(geom).__name__))


@_reproject.register
def _(geom: LinearRing, project: ProjectFn) -> BaseGeometry:
    # Subclass of LineString, but not a standalone variant.
    raise UnsupportedGeometryType(geom.geom_type)


@_reproject.register
def _(geom: Point, project: ProjectFn) -> BaseGeometry:
    if geom.is_empty:
        return geom
    return Point(_coords(geom.coords, project)[0])


@_reproject.register
def _(geom: LineString, project: ProjectFn) -> BaseGeometry:
    if geom.is_empty:
        return geom
    return LineString(_coords(geom.coords, project))


@_reproject.register
def _(geom: Polygon, project: ProjectFn) -> BaseGeometry:
    if geom.is_empty:
        return geom
    # Closing points are transformed like any other, so rings stay closed.
    shell = _coords(geom.exterior.coords, project)
    holes = [_coords(ring.coords, project) for ring in geom.interiors]
    return Polygon(shell, holes)


@_reproject.register
def _(geom: MultiPoint, project: ProjectFn) -> BaseGeometry:
    if geom.is_empty:
        return geom
    # shapely.multi* keep EMPTY members in position.
    return shapely.multipoints([_reproject(p, project) for p in geom.geoms])


@_reproject.register
def _(geom: MultiLineString, project: ProjectFn) -> BaseGeometry:
    if geom.is_empty:
        return geom
    return shapely.multilinestrings([_reproject(line, project) for line in geom.geoms])


@_reproject.register
def _(geom: MultiPolygon, project: ProjectFn) -> BaseGeometry:
    if geom.is_empty:
        return geom
    return shapely.multipolygons([_reproject(poly, project) for poly in geom.geoms])


@_reproject.register
def _(geom: GeometryCollection, project: ProjectFn) -> BaseGeometry:
    if geom.is_empty:
        return geom
    return GeometryCollection([_reproject(member, project) for member in geom.geoms])


# ── Public entry points ───────────────────────────────────────────
def transform_geometry(
    geom: BaseGeometry | None,
    dst_code: int,
    *,
    transformer: CoordinateTransformer | None = None,
    strict: bool = False,
) -> BaseGeometry | None:
    """
    Reproject ``geom`` from its own SRID to ``dst_code``.

    Parameters
    ----------
    geom : BaseGeometry or None
        Source geometry; its SRID is the source CRS.
    dst_code : int
        Destination EPSG code.
    transformer : CoordinateTransformer, optional
        Defaults to the shared PROJ-backed transformer.
    strict : bool
        Raise ``InvalidGeometry`` for a null input instead of
        returning None.

    Returns
    -------
    The reprojected geometry tagged with ``dst_code``, the input object
    itself when its SRID already equals ``dst_code``, or None for a
    null input.
    """
    if geom is None:
        if strict:
            raise InvalidGeometry("geometry is null")
        return None
    if not isinstance(geom, BaseGeometry):
        raise UnsupportedGeometryType(type(geom).__name__)

    src_code = int(shapely.get_srid(geom))
    if src_code == dst_code:
        return geom

    transformer = transformer or get_coordinate_transformer()

    def project(x: float, y: float) -> tuple[float, float]:
        return transformer.transform(x, y, src_code, dst_code)

    result = _reproject(geom, project)
    return shapely.set_srid(result, dst_code)


def load_wkt(text: str, srid: int = 0) -> BaseGeometry:
    """Parse WKT and tag it with ``srid``; raises ``InvalidGeometry``."""
    try:
        geom = shapely.wkt.loads(text)
    except (ShapelyError, TypeError, ValueError) as exc:
        raise InvalidGeometry(f"cannot parse WKT: {exc}") from exc
    return shapely.set_srid(geom, srid)


def transform_wkt(
    text: str | None,
    src_code: int,
    dst_code: int,
    *,
    transformer: CoordinateTransformer | None = None,
    precision: int | None | object = _UNSET,
) -> str | None:
    """
    Text sibling of ``transform_geometry``.

    Blank or missing input yields None.  ``precision`` defaults to
    ``settings.coordinate_precision``; pass None for full precision.
    """
    if text is None or not text.strip():
        return None
    if precision is _UNSET:
        precision = get_settings().coordinate_precision

    geom = load_wkt(text, src_code)
    result = transform_geometry(geom, dst_code, transformer=transformer)
    return to_wkt(result, precision)
