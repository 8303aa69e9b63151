"""
Tests for spatialsql.services.spatial — in-memory aggregation helpers and
SpatialQueryService against an in-memory SQLite host.
"""
from __future__ import annotations

import pytest
from shapely import wkt as shapely_wkt

from spatialsql.exceptions import InvalidGeometry, SerializationError, UnknownProjection
from spatialsql.models.feature import Feature
from spatialsql.services.spatial import SpatialQueryService, aggregate_extent, merge_states
from spatialsql.spatial.extent import SpatialExtent
from tests.conftest import NYC_LAT, NYC_LON


# ═══════════════════════════════════════════════════════════════════
# aggregate_extent / merge_states
# ═══════════════════════════════════════════════════════════════════
class TestAggregateExtent:
    ROWS = ["POINT (0 0)", "POINT (10 5)", "POINT (-3 20)", None, "", "junk"]

    @pytest.mark.parametrize("partitions", [1, 2, 3, 6, 10])
    def test_partitioning_does_not_change_result(self, partitions):
        agg, contributed = aggregate_extent(self.ROWS, partitions)
        assert agg.finalize() == "BOX(-3 0, 10 20)"
        assert contributed == 3

    def test_zero_partitions_treated_as_one(self):
        agg, _ = aggregate_extent(["POINT (1 1)"], 0)
        assert agg.finalize() == "BOX(1 1, 1 1)"

    def test_empty_batch(self):
        agg, contributed = aggregate_extent([])
        assert agg.finalize() is None
        assert contributed == 0


class TestMergeStates:
    def test_merges(self):
        a = SpatialExtent()
        a.accumulate_wkt("POINT (0 0)")
        b = SpatialExtent()
        b.accumulate_wkt("POINT (4 -1)")
        merged = merge_states([a.serialize(), b.serialize(), SpatialExtent().serialize()])
        assert merged.finalize() == "BOX(0 -1, 4 0)"

    def test_no_states(self):
        assert merge_states([]).finalize() is None

    def test_bad_state(self):
        with pytest.raises(SerializationError):
            merge_states([b"\x00" * 10])


# ═══════════════════════════════════════════════════════════════════
# SpatialQueryService
# ═══════════════════════════════════════════════════════════════════
@pytest.fixture()
def svc(db_session) -> SpatialQueryService:
    return SpatialQueryService(db_session)


@pytest.fixture()
def seeded(svc, db_session) -> SpatialQueryService:
    svc.add_features("pts", 4326, [
        f"POINT ({NYC_LON} {NYC_LAT})",
        "POINT (0 0)",
        "LINESTRING (-10 -5, 10 5)",
    ])
    svc.add_features("merc", 3857, ["POINT (0 0)", "POINT (111319.49079327357 0)"])
    db_session.commit()
    return svc


class TestAddFeatures:
    def test_inserts(self, svc, db_session):
        assert svc.add_features("a", 4326, ["POINT (1 1)", " POINT (2 2) "]) == 2
        rows = db_session.query(Feature).order_by(Feature.id).all()
        assert [r.wkt for r in rows] == ["POINT (1 1)", "POINT (2 2)"]
        assert {r.srid for r in rows} == {4326}

    def test_unknown_srid_rejected(self, svc, db_session):
        with pytest.raises(UnknownProjection):
            svc.add_features("a", 999999, ["POINT (1 1)"])
        assert db_session.query(Feature).count() == 0

    def test_bad_wkt_rejects_whole_batch(self, svc, db_session):
        with pytest.raises(InvalidGeometry):
            svc.add_features("a", 4326, ["POINT (1 1)", "POINT (oops)"])
        assert db_session.query(Feature).count() == 0


class TestTransformLayer:
    def test_reprojects_in_sql(self, seeded):
        out = seeded.transform_layer("pts", 3857)
        assert [f.srid for f in out] == [3857, 3857, 3857]
        nyc = shapely_wkt.loads(out[0].wkt)
        assert nyc.x == pytest.approx(-8238310.24, abs=1.0)
        assert out[1].wkt == "POINT (0 0)"

    def test_ordered_by_id(self, seeded):
        out = seeded.transform_layer("pts", 4326)
        assert [f.id for f in out] == sorted(f.id for f in out)

    def test_unknown_target(self, seeded):
        with pytest.raises(UnknownProjection):
            seeded.transform_layer("pts", 999999)

    def test_missing_layer(self, seeded):
        assert seeded.transform_layer("nope", 3857) == []

    def test_list_features_keeps_stored_srid(self, seeded):
        out = seeded.list_features("merc")
        assert [f.srid for f in out] == [3857, 3857]
        assert out[0].wkt == "POINT (0 0)"


class TestLayerExtent:
    def test_stored_coordinates(self, seeded):
        assert seeded.layer_extent("pts") == "BOX(-74.006 -5, 10 40.7128)"

    def test_reprojected(self, seeded):
        assert seeded.layer_extent("merc", 4326) == "BOX(0 0, 1 0)"

    def test_missing_layer_is_none(self, seeded):
        assert seeded.layer_extent("nope") is None

    @pytest.mark.parametrize("partitions", [1, 2, 3, 8])
    def test_partitioned_matches_direct(self, seeded, partitions):
        direct = seeded.layer_extent("pts")
        merged = seeded.layer_extent_partitioned("pts", partitions)
        assert merged.finalize() == direct

    def test_partitioned_reprojected(self, seeded):
        assert seeded.layer_extent_partitioned("merc", 2, 4326).finalize() == "BOX(0 0, 1 0)"

    def test_partitioned_missing_layer(self, seeded):
        assert seeded.layer_extent_partitioned("nope", 4).finalize() is None

    def test_unknown_target(self, seeded):
        with pytest.raises(UnknownProjection):
            seeded.layer_extent("pts", 999999)
