"""Services subpackage — query logic on top of the spatial primitives."""

from spatialsql.services.spatial import (
    SpatialQueryService,
    aggregate_extent,
    merge_states,
)

__all__ = [
    "SpatialQueryService",
    "aggregate_extent",
    "merge_states",
]
