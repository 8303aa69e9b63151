"""
spatialsql — Configuration via pydantic-settings.

Environment variables override defaults.  ``coordinate_precision`` is the
numeric policy applied when reprojected coordinates are rendered back to
WKT; ``None`` keeps full double precision.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import ClassVar, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    env_path: ClassVar[str] = str(Path(__file__).resolve().parents[2] / ".env")
    model_config = SettingsConfigDict(
        env_file=env_path,
        env_file_encoding="utf-8",
        env_prefix="SPATIALSQL_",
        extra="ignore",
    )

    # ── Application ────────────────────────────────────────────────
    app_name: str = "spatialsql"
    debug: bool = False

    # ── SQL host ───────────────────────────────────────────────────
    # SQLite is the host engine; the spatial functions and aggregates
    # are registered on every new DBAPI connection.
    database_url: str = "sqlite:///spatialsql.db"

    # ── Reprojection ───────────────────────────────────────────────
    # Decimal places kept when rendering coordinates to text.
    # None keeps the full double precision.
    coordinate_precision: int | None = 10
    # Consult the PROJ/EPSG database before the built-in table of
    # WGS84 / Web Mercator / UTM definitions.
    use_authority_database: bool = True

    # ── Extent aggregate ───────────────────────────────────────────
    # "strict": not null, not empty, geometrically valid, finite envelope.
    # "lenient": as strict, minus the geometric validity check.
    extent_validation: Literal["strict", "lenient"] = "strict"
    # Number of partial-aggregate groups for partitioned extent queries.
    default_partitions: int = 4

    # ── Request limits ─────────────────────────────────────────────
    max_geometries_per_request: int = 10_000

    # ── CORS ───────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse the comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
