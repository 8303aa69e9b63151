"""
Shared fixtures for the spatialsql test suite.

This conftest provides:
- An in-memory SQLite host with the spatial functions registered
- Fake projection engines (affine) for walker / transformer tests
- Reusable sample geometries
"""
from __future__ import annotations

import os

# Keep the module-level engine off disk for the whole test session.
os.environ.setdefault("SPATIALSQL_DATABASE_URL", "sqlite://")

import pytest
import shapely
from shapely import wkt as shapely_wkt

from spatialsql.exceptions import UnknownProjection
from spatialsql.spatial.transform import CoordinateTransformer


# ---------------------------------------------------------------------------
# Sample geometries
# ---------------------------------------------------------------------------
SAMPLE_WKT = {
    "Point": "POINT (1 2)",
    "LineString": "LINESTRING (0 0, 1 1, 2 0)",
    "Polygon": (
        "POLYGON ((0 0, 10 0, 10 10, 0 10, 0 0), "
        "(2 2, 4 2, 4 4, 2 4, 2 2), (6 6, 8 6, 8 8, 6 8, 6 6))"
    ),
    "MultiPoint": "MULTIPOINT ((0 0), (1 1), (2 2))",
    "MultiLineString": "MULTILINESTRING ((0 0, 1 1), (2 2, 3 3, 4 4))",
    "MultiPolygon": (
        "MULTIPOLYGON (((0 0, 1 0, 1 1, 0 1, 0 0)), "
        "((5 5, 9 5, 9 9, 5 9, 5 5), (6 6, 7 6, 7 7, 6 7, 6 6)))"
    ),
    "GeometryCollection": (
        "GEOMETRYCOLLECTION (POINT (1 1), LINESTRING (0 0, 2 2), "
        "GEOMETRYCOLLECTION (POLYGON ((0 0, 1 0, 1 1, 0 0)), "
        "GEOMETRYCOLLECTION (MULTIPOINT ((3 3), (4 4)))))"
    ),
}

NYC_LON = -74.0060
NYC_LAT = 40.7128


def make_geom(kind: str, srid: int = 4326):
    """Parse one of ``SAMPLE_WKT`` and tag it with ``srid``."""
    return shapely.set_srid(shapely_wkt.loads(SAMPLE_WKT[kind]), srid)


# ---------------------------------------------------------------------------
# Fake projection engine
# ---------------------------------------------------------------------------
# Each fake code is an affine frame: world = (local - offset) / scale.
FAKE_FRAMES = {
    1: (1.0, 0.0),
    2: (2.0, 100.0),
    3: (0.5, -7.0),
}


class FakeResolver:
    """Resolves fake codes to themselves; anything else is unknown."""

    def __init__(self) -> None:
        self.calls: list[int] = []

    def resolve(self, code: int) -> int:
        self.calls.append(code)
        if code not in FAKE_FRAMES:
            raise UnknownProjection(code)
        return code


class AffineReprojector:
    """Exactly invertible affine 'projection' between fake frames."""

    def __init__(self) -> None:
        self.calls = 0

    def reproject(self, x: float, y: float, src_crs: int, dst_crs: int):
        self.calls += 1
        s_scale, s_off = FAKE_FRAMES[src_crs]
        d_scale, d_off = FAKE_FRAMES[dst_crs]
        wx, wy = (x - s_off) / s_scale, (y - s_off) / s_scale
        return wx * d_scale + d_off, wy * d_scale + d_off


@pytest.fixture()
def fake_resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture()
def fake_reprojector() -> AffineReprojector:
    return AffineReprojector()


@pytest.fixture()
def fake_transformer(fake_resolver, fake_reprojector) -> CoordinateTransformer:
    return CoordinateTransformer(resolver=fake_resolver, reprojector=fake_reprojector)


# ---------------------------------------------------------------------------
# SQLite host
# ---------------------------------------------------------------------------
@pytest.fixture()
def memory_engine():
    from spatialsql.models import feature  # noqa: F401  (registers the table)
    from spatialsql.models.database import build_engine, init_models

    engine = build_engine("sqlite://")
    init_models(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(memory_engine):
    from sqlalchemy.orm import Session

    with Session(memory_engine, expire_on_commit=False) as session:
        yield session
