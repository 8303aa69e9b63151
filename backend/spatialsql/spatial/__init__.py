"""Spatial subpackage — CRS resolution, reprojection and extent aggregation."""

from spatialsql.spatial.crs import CRSResolver, get_crs_resolver
from spatialsql.spatial.extent import BoundingBox, SpatialExtent
from spatialsql.spatial.formatting import format_coordinate, format_pair, to_wkt
from spatialsql.spatial.transform import (
    CoordinateTransformer,
    PyprojReprojector,
    get_coordinate_transformer,
)
from spatialsql.spatial.walker import load_wkt, transform_geometry, transform_wkt

__all__ = [
    "BoundingBox",
    "CRSResolver",
    "CoordinateTransformer",
    "PyprojReprojector",
    "SpatialExtent",
    "format_coordinate",
    "format_pair",
    "get_coordinate_transformer",
    "get_crs_resolver",
    "load_wkt",
    "to_wkt",
    "transform_geometry",
    "transform_wkt",
]
