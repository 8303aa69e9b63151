"""Models subpackage — SQL host engine, registered functions and ORM models."""

from spatialsql.models.database import (
    Base,
    build_engine,
    engine,
    get_db,
    init_models,
    session_factory,
)
from spatialsql.models.feature import Feature
from spatialsql.models.sql_functions import (
    SqlSpatialExtent,
    SqlSpatialExtentMerge,
    SqlSpatialExtentState,
    register_spatial_functions,
    sql_transform_wkt,
)

__all__ = [
    "Base",
    "build_engine",
    "engine",
    "get_db",
    "init_models",
    "session_factory",
    "Feature",
    "SqlSpatialExtent",
    "SqlSpatialExtentMerge",
    "SqlSpatialExtentState",
    "register_spatial_functions",
    "sql_transform_wkt",
]
