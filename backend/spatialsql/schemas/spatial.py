"""
Pydantic schemas for API request/response serialization.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from spatialsql.config import get_settings


def _check_batch_size(values: list) -> list:
    limit = get_settings().max_geometries_per_request
    if len(values) > limit:
        raise ValueError(f"At most {limit} items per request")
    return values


# ═══════════════════════════════════════════════════════════════════
# Reprojection
# ═══════════════════════════════════════════════════════════════════
class TransformRequest(BaseModel):
    """Reproject one WKT geometry."""

    wkt: str | None = Field(description="Source geometry as WKT; blank yields null")
    source_srid: int = Field(ge=0, description="EPSG code of the input")
    target_srid: int = Field(ge=0, description="EPSG code of the output")
    full_precision: bool = Field(
        default=False,
        description="Skip rounding to the configured coordinate precision",
    )


class TransformResponse(BaseModel):
    wkt: str | None
    srid: int


# ═══════════════════════════════════════════════════════════════════
# Extent aggregate
# ═══════════════════════════════════════════════════════════════════
class ExtentRequest(BaseModel):
    """
    Compute the extent of a batch of geometries.  The batch is split
    round-robin into ``partitions`` groups that are aggregated
    separately and then merged.
    """

    geometries: list[str | None]
    partitions: int = Field(default=1, ge=1, le=64)

    @field_validator("geometries")
    @classmethod
    def batch_size(cls, v: list[str | None]) -> list[str | None]:
        return _check_batch_size(v)


class ExtentMergeRequest(BaseModel):
    """Merge serialized partial states (base64 of the 33-byte payload)."""

    states: list[str]

    @field_validator("states")
    @classmethod
    def batch_size(cls, v: list[str]) -> list[str]:
        return _check_batch_size(v)


class ExtentResponse(BaseModel):
    box: str | None = Field(description="BOX(minX minY, maxX maxY) or null")
    state: str = Field(description="Base64 of the serialized aggregate state")
    contributed: int = Field(
        default=0, description="Rows that passed validation and were folded in"
    )


# ═══════════════════════════════════════════════════════════════════
# Feature layers
# ═══════════════════════════════════════════════════════════════════
class FeatureCreateRequest(BaseModel):
    layer: str = Field(min_length=1)
    srid: int = Field(ge=0)
    geometries: list[str] = Field(min_length=1)

    @field_validator("geometries")
    @classmethod
    def batch_size(cls, v: list[str]) -> list[str]:
        return _check_batch_size(v)


class FeatureCreateResponse(BaseModel):
    layer: str
    inserted: int


class FeatureOut(BaseModel):
    id: int
    wkt: str | None
    srid: int

    model_config = {"from_attributes": True}


class LayerFeaturesResponse(BaseModel):
    layer: str
    features: list[FeatureOut]


class LayerExtentResponse(BaseModel):
    layer: str
    srid: int | None = Field(description="Target EPSG code, null for stored coordinates")
    partitions: int
    box: str | None
