"""Routers subpackage — HTTP layer for all API endpoints."""

from spatialsql.routers import extent, features, transform

__all__ = ["extent", "features", "transform"]
