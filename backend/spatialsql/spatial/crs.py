"""
CRS Resolver
============
Maps an integer EPSG code to an immutable ``pyproj.CRS`` definition.

Resolution order:

1. The PROJ/EPSG authority database (when ``use_authority_database``).
2. A built-in table of PROJ strings for WGS84 (4326), Web Mercator
   (3857) and the 120 WGS84 UTM zones (32601–32660, 32701–32760).

Anything else raises ``UnknownProjection``; there is no silent fallback.

Resolved definitions are cached.  The cache lock only guards the dict
itself and is never held while a CRS is being built.
"""

from __future__ import annotations

import logging
import threading
from functools import lru_cache

from pyproj import CRS
from pyproj.exceptions import CRSError

from spatialsql.config import get_settings
from spatialsql.exceptions import UnknownProjection

logger = logging.getLogger(__name__)

WGS84 = 4326
WEB_MERCATOR = 3857


def _builtin_definitions() -> dict[int, str]:
    table = {
        WGS84: "+proj=longlat +datum=WGS84 +no_defs",
        WEB_MERCATOR: (
            "+proj=merc +a=6378137 +b=6378137 +lat_ts=0 +lon_0=0 "
            "+x_0=0 +y_0=0 +k=1 +units=m +nadgrids=@null +wktext +no_defs"
        ),
    }
    for zone in range(1, 61):
        table[32600 + zone] = f"+proj=utm +zone={zone} +datum=WGS84 +units=m +no_defs"
        table[32700 + zone] = (
            f"+proj=utm +zone={zone} +south +datum=WGS84 +units=m +no_defs"
        )
    return table


BUILTIN_DEFINITIONS: dict[int, str] = _builtin_definitions()


class CRSResolver:
    """
    Resolve EPSG codes to ``pyproj.CRS`` objects.

    Parameters
    ----------
    use_authority_database : bool
        Consult PROJ's EPSG database first.  When False only the
        built-in table is used.
    """

    def __init__(self, use_authority_database: bool = True) -> None:
        self.use_authority_database = use_authority_database
        self._cache: dict[int, CRS] = {}
        self._lock = threading.Lock()

    def resolve(self, code: int) -> CRS:
        """Return the CRS for ``code`` or raise ``UnknownProjection``."""
        if isinstance(code, bool) or not isinstance(code, int) or code < 0:
            raise UnknownProjection(code)

        with self._lock:
            crs = self._cache.get(code)
        if crs is not None:
            return crs

        crs = self._load(code)
        with self._lock:
            # Another thread may have raced us; keep the first one stored.
            return self._cache.setdefault(code, crs)

    def _load(self, code: int) -> CRS:
        if self.use_authority_database:
            try:
                crs = CRS.from_epsg(code)
                logger.debug("Resolved EPSG:%d from the authority database", code)
                return crs
            except CRSError:
                logger.debug("EPSG:%d not in the authority database", code)

        definition = BUILTIN_DEFINITIONS.get(code)
        if definition is None:
            raise UnknownProjection(code)
        try:
            crs = CRS.from_proj4(definition)
        except CRSError as exc:
            raise UnknownProjection(code, str(exc)) from exc
        logger.debug("Resolved EPSG:%d from the built-in table", code)
        return crs

    def is_supported(self, code: int) -> bool:
        try:
            self.resolve(code)
        except UnknownProjection:
            return False
        return True

    @staticmethod
    def supported_codes() -> list[int]:
        """Codes guaranteed to resolve regardless of the authority database."""
        return sorted(BUILTIN_DEFINITIONS)

    def cache_stats(self) -> dict[str, object]:
        """Cache statistics for monitoring."""
        with self._lock:
            codes = sorted(self._cache)
        return {"cached_crs": len(codes), "codes": codes}


@lru_cache(maxsize=1)
def get_crs_resolver() -> CRSResolver:
    """Process-wide resolver configured from settings."""
    settings = get_settings()
    return CRSResolver(use_authority_database=settings.use_authority_database)
