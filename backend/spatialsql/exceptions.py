"""
Exception hierarchy for the spatial primitives.

None of these represent transient conditions: they are either
configuration gaps (unsupported CRS or geometry type) or caller input
errors, so nothing in the package retries on them.
"""

from __future__ import annotations


class SpatialError(Exception):
    """Base exception for all reprojection / extent errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownProjection(SpatialError):
    """Raised when an SRID cannot be resolved to a CRS definition."""

    def __init__(self, code: object, reason: str | None = None) -> None:
        message = f"Unsupported EPSG code: {code}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.code = code


class UnsupportedGeometryType(SpatialError):
    """Raised when the walker meets a geometry variant it does not handle."""

    def __init__(self, geom_type: str) -> None:
        super().__init__(f"Unsupported geometry type: {geom_type}")
        self.geom_type = geom_type


class InvalidGeometry(SpatialError):
    """Raised for unparseable WKT or a missing geometry in strict mode."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid geometry: {reason}")
        self.reason = reason


class SerializationError(SpatialError):
    """Raised when a persisted aggregate state cannot be decoded."""

    def __init__(self, reason: str, size: int | None = None) -> None:
        super().__init__(f"Invalid aggregate state: {reason}")
        self.reason = reason
        self.size = size


class ProjectionError(SpatialError):
    """Raised when the projection engine fails for a coordinate pair."""

    def __init__(self, src_code: int, dst_code: int, reason: str) -> None:
        super().__init__(
            f"Projection EPSG:{src_code} -> EPSG:{dst_code} failed: {reason}"
        )
        self.src_code = src_code
        self.dst_code = dst_code
        self.reason = reason
