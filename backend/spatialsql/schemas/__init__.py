"""Schemas subpackage — Pydantic request/response models."""

from spatialsql.schemas.spatial import (
    ExtentMergeRequest,
    ExtentRequest,
    ExtentResponse,
    FeatureCreateRequest,
    FeatureCreateResponse,
    FeatureOut,
    LayerExtentResponse,
    LayerFeaturesResponse,
    TransformRequest,
    TransformResponse,
)

__all__ = [
    "ExtentMergeRequest",
    "ExtentRequest",
    "ExtentResponse",
    "FeatureCreateRequest",
    "FeatureCreateResponse",
    "FeatureOut",
    "LayerExtentResponse",
    "LayerFeaturesResponse",
    "TransformRequest",
    "TransformResponse",
]
