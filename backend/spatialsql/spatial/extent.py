"""
Spatial Extent Aggregate
========================
A mergeable running bounding box over a column of geometries.

Lifecycle (driven by the SQL host or any parallel aggregation engine)::

    agg = SpatialExtent()          # initialize()
    agg.accumulate(geom)           # once per row
    agg.merge(other)               # once per partial aggregate
    agg.finalize()                 # -> "BOX(minX minY, maxX maxY)" | None

The fold is a coordinate-wise min/max, so accumulate and merge are
commutative and associative: any partitioning of the rows, aggregated
separately and merged in any order, gives the same box.

Partial states travel as a fixed 33-byte payload::

    <d min_x> <d min_y> <d max_x> <d max_y> <B has_value>

little-endian IEEE-754 doubles followed by one flag byte.
"""

from __future__ import annotations

import logging
import math
import struct
from dataclasses import dataclass

from shapely.geometry import Polygon, box
from shapely.geometry.base import BaseGeometry

from spatialsql.config import get_settings
from spatialsql.exceptions import InvalidGeometry, SerializationError
from spatialsql.spatial.formatting import format_pair
from spatialsql.spatial.walker import load_wkt

logger = logging.getLogger(__name__)

_STATE = struct.Struct("<ddddB")
STATE_SIZE = _STATE.size  # 33

VALIDATION_POLICIES = ("strict", "lenient")


# ── Bounding Box (aggregate state) ───────────────────────────────
@dataclass(frozen=True, slots=True)
class BoundingBox:
    """
    Running envelope.  When ``has_value`` is False the four bounds are
    meaningless and kept at 0.0 so that equal states compare equal.
    """

    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0
    has_value: bool = False

    @classmethod
    def from_bounds(
        cls, min_x: float, min_y: float, max_x: float, max_y: float
    ) -> BoundingBox:
        return cls(float(min_x), float(min_y), float(max_x), float(max_y), True)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def fold(self, other: BoundingBox) -> BoundingBox:
        """Coordinate-wise min/max of two states."""
        if not other.has_value:
            return self
        if not self.has_value:
            return other
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
            True,
        )

    def to_shapely(self) -> Polygon:
        """Return a Shapely box for use with spatial predicates."""
        return box(self.min_x, self.min_y, self.max_x, self.max_y)

    def to_text(self) -> str | None:
        if not self.has_value:
            return None
        return (
            f"BOX({format_pair(self.min_x, self.min_y)}, "
            f"{format_pair(self.max_x, self.max_y)})"
        )


# ── Aggregate ────────────────────────────────────────────────────
class SpatialExtent:
    """
    Streaming, mergeable extent aggregate.

    Parameters
    ----------
    validation : {"strict", "lenient"}, optional
        Row filter applied by ``accumulate``.  Defaults to
        ``settings.extent_validation``.

        - strict:  not null, not empty, ``is_valid``, finite envelope.
        - lenient: not null, not empty, finite envelope.

    Rows failing the filter are ignored rather than raised, so one
    malformed row never poisons a group's extent.
    """

    def __init__(self, validation: str | None = None) -> None:
        validation = validation or get_settings().extent_validation
        if validation not in VALIDATION_POLICIES:
            raise ValueError(
                f"validation must be one of {VALIDATION_POLICIES}, got {validation!r}"
            )
        self.validation = validation
        self._state = BoundingBox()

    # ── Lifecycle ─────────────────────────────────────────────

    def initialize(self) -> None:
        self._state = BoundingBox()

    def accumulate(self, geom: BaseGeometry | None) -> bool:
        """
        Fold one geometry's envelope into the running state.

        Returns True when the geometry contributed.
        """
        if not self._accepts(geom):
            logger.debug("Ignoring geometry in extent aggregate: %r", geom)
            return False
        self._state = self._state.fold(BoundingBox.from_bounds(*geom.bounds))
        return True

    def accumulate_wkt(self, text: str | None) -> bool:
        """Parse and accumulate WKT; unparseable or blank rows are ignored."""
        if text is None or not text.strip():
            return False
        try:
            geom = load_wkt(text)
        except InvalidGeometry:
            logger.debug("Ignoring unparseable WKT in extent aggregate")
            return False
        return self.accumulate(geom)

    def merge(self, other: SpatialExtent) -> None:
        """Fold another partial aggregate into this one."""
        self._state = self._state.fold(other._state)

    def finalize(self) -> str | None:
        """``BOX(minX minY, maxX maxY)``, or None if nothing contributed."""
        return self._state.to_text()

    # ── State ─────────────────────────────────────────────────

    @property
    def state(self) -> BoundingBox:
        return self._state

    @property
    def has_value(self) -> bool:
        return self._state.has_value

    def serialize(self) -> bytes:
        s = self._state
        return _STATE.pack(s.min_x, s.min_y, s.max_x, s.max_y, int(s.has_value))

    @classmethod
    def deserialize(
        cls, payload: bytes, validation: str | None = None
    ) -> SpatialExtent:
        """
        Restore an aggregate from ``serialize()`` output.

        Raises
        ------
        SerializationError
            Payload is not exactly 33 bytes, the flag byte is not 0/1,
            or a populated state has non-finite or inverted bounds.
        """
        size = len(payload)
        if size != STATE_SIZE:
            raise SerializationError(
                f"expected {STATE_SIZE} bytes, got {size}", size=size
            )
        min_x, min_y, max_x, max_y, flag = _STATE.unpack(payload)
        if flag not in (0, 1):
            raise SerializationError(f"invalid has_value flag {flag}", size=size)

        agg = cls(validation)
        if flag:
            if not all(math.isfinite(v) for v in (min_x, min_y, max_x, max_y)):
                raise SerializationError("bounds are not finite", size=size)
            if min_x > max_x or min_y > max_y:
                raise SerializationError("bounds are inverted", size=size)
            agg._state = BoundingBox(min_x, min_y, max_x, max_y, True)
        return agg

    # ── Internals ─────────────────────────────────────────────

    def _accepts(self, geom) -> bool:
        if geom is None or not isinstance(geom, BaseGeometry):
            return False
        if geom.is_empty:
            return False
        if not all(math.isfinite(v) for v in geom.bounds):
            return False
        return self.validation == "lenient" or geom.is_valid

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SpatialExtent):
            return NotImplemented
        return self._state == other._state

    def __repr__(self) -> str:
        return f"SpatialExtent({self._state!r})"
