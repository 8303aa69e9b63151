"""
Coordinate formatting and WKT rendering.

Numbers are written with the shortest representation that re-parses to
the same double (``repr``), never a locale-sensitive or truncated
format.  Integral values drop the trailing ``.0`` so ``BOX(-3 0, 10 20)``
reads the way SQL hosts print it.
"""

from __future__ import annotations

import math
from functools import singledispatch
from typing import Sequence

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

from spatialsql.exceptions import UnsupportedGeometryType

# Integral doubles below this magnitude print exactly as integers.
_INT_SAFE = 2.0 ** 53


def format_coordinate(value: float, precision: int | None = None) -> str:
    """
    Render one ordinate.

    Parameters
    ----------
    value : float
    precision : int, optional
        Decimal places to round to first.  None keeps full precision.
    """
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Cannot format non-finite coordinate: {value}")
    if precision is not None:
        value = round(value, precision)
    if value == 0:
        return "0"  # also folds -0.0
    if value.is_integer() and abs(value) < _INT_SAFE:
        return str(int(value))
    return repr(value)


def format_pair(x: float, y: float, precision: int | None = None) -> str:
    return f"{format_coordinate(x, precision)} {format_coordinate(y, precision)}"


def _coord(c: Sequence[float], precision: int | None) -> str:
    return " ".join(format_coordinate(v, precision) for v in c)


def _coord_list(coords, precision: int | None) -> str:
    return "(" + ", ".join(_coord(c, precision) for c in coords) + ")"


# ── WKT body per variant ──────────────────────────────────────────
@singledispatch
def _body(geom, precision: int | None) -> str:
    raise UnsupportedGeometryType(getattr(geom, "geom_type", type(geom).__name__))


@_body.register
def _(geom: LinearRing, precision: int | None) -> str:
    raise UnsupportedGeometryType(geom.geom_type)


@_body.register
def _(geom: Point, precision: int | None) -> str:
    return _coord_list(geom.coords, precision)


@_body.register
def _(geom: LineString, precision: int | None) -> str:
    return _coord_list(geom.coords, precision)


@_body.register
def _(geom: Polygon, precision: int | None) -> str:
    rings = [geom.exterior, *geom.interiors]
    return "(" + ", ".join(_coord_list(r.coords, precision) for r in rings) + ")"


@_body.register(MultiPoint)
@_body.register(MultiLineString)
@_body.register(MultiPolygon)
def _(geom, precision: int | None) -> str:
    parts = [
        "EMPTY" if member.is_empty else _body(member, precision)
        for member in geom.geoms
    ]
    return "(" + ", ".join(parts) + ")"


@_body.register
def _(geom: GeometryCollection, precision: int | None) -> str:
    return "(" + ", ".join(to_wkt(member, precision) for member in geom.geoms) + ")"


def to_wkt(geom: BaseGeometry, precision: int | None = None) -> str:
    """
    Render a geometry as WKT.

    Produces ``POINT (x y)``, ``MULTIPOINT ((x y), ...)``,
    ``GEOMETRYCOLLECTION (POINT (x y), ...)`` and so on, with ``EMPTY``
    for empty geometries and a ``Z`` tag when a third ordinate is present.
    """
    tag = geom.geom_type.upper()
    if geom.is_empty:
        # LinearRing is still rejected when empty.
        if isinstance(geom, LinearRing):
            raise UnsupportedGeometryType(geom.geom_type)
        return f"{tag} EMPTY"
    if geom.has_z:
        tag += " Z"
    return f"{tag} {_body(geom, precision)}"
