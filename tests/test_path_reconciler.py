"""
Path Reconciler Tests

Tests for trajectory reconciliation, connection checks and observation ordering.

Author: RoadWatch Project
License: AGPL-3.0
"""

from datetime import datetime, timedelta, timezone

import pytest

from roadwatch.models.road_network import Observation
from roadwatch.services.path_reconciler import (
    order_observations,
    reconcile_path,
    roads_are_connected,
    to_path_features,
)
from roadwatch.services.snapping import RoadSnapper


class TestRoadsAreConnected:
    """Test roads_are_connected()."""

    def test_shared_endpoint(self, grid_roads):
        a, b, _ = grid_roads
        assert roads_are_connected(a, b)

    def test_distant_roads(self, grid_roads):
        a, _, c = grid_roads
        assert not roads_are_connected(a, c)

    def test_threshold_is_respected(self, make_road):
        # End of first and start of second are about 90 m apart
        first = make_road("1", [(139.750, 35.700), (139.760, 35.700)])
        second = make_road("2", [(139.761, 35.700), (139.770, 35.700)])
        assert not roads_are_connected(first, second, threshold_m=50.0)
        assert roads_are_connected(first, second, threshold_m=100.0)


class TestReconcilePath:
    """Test reconcile_path()."""

    def test_points_on_one_road_yield_one_road(self, make_road):
        road = make_road("only", [(139.750, 35.700), (139.760, 35.700)])
        points = [(139.751, 35.7001), (139.755, 35.7001), (139.759, 35.7001)]
        path = reconcile_path(points, [road], damage_scores=[1.0, 2.0, 3.0])

        assert len(path) == 1
        assert path[0].road is road
        assert path[0].gap_before is False
        assert path[0].damage_score == pytest.approx(2.0)

    def test_later_points_raise_the_aggregate(self, make_road):
        road = make_road("only", [(139.750, 35.700), (139.760, 35.700)])
        points = [(139.751, 35.7001), (139.755, 35.7001), (139.759, 35.7001)]
        path = reconcile_path(points, [road], damage_scores=[1.0, 1.0, 5.0])
        assert path[0].damage_score == pytest.approx(7.0 / 3.0)

    def test_entered_road_uses_all_its_points(self, grid_roads):
        points = [(139.752, 35.7001), (139.7601, 35.704), (139.7601, 35.708)]
        path = reconcile_path(points, grid_roads, damage_scores=[1.0, 0.0, 5.0])

        assert [(item.road.id, item.damage_score) for item in path] == [("A", 1.0), ("B", 2.5)]

    def test_revisited_road_keeps_first_position(self, grid_roads):
        points = [(139.752, 35.7001), (139.7601, 35.704), (139.755, 35.7001)]
        path = reconcile_path(points, grid_roads, damage_scores=[1.0, 2.0, 5.0])

        assert [item.road.id for item in path] == ["A", "B"]
        assert path[0].damage_score == pytest.approx(3.0)
        assert path[1].gap_before is False

    def test_connected_roads_have_no_gap(self, grid_roads):
        points = [(139.752, 35.7001), (139.758, 35.7001), (139.7601, 35.704)]
        path = reconcile_path(points, grid_roads, damage_scores=[1.0, 1.0, 4.0])

        assert [item.road.id for item in path] == ["A", "B"]
        assert [item.gap_before for item in path] == [False, False]
        assert path[1].damage_score == 4.0

    def test_unconnected_roads_are_flagged(self, grid_roads):
        points = [(139.752, 35.7001), (139.785, 35.7201)]
        path = reconcile_path(points, grid_roads)

        assert [item.road.id for item in path] == ["A", "C"]
        assert path[1].gap_before is True
        assert path[0].damage_score is None

    def test_revisited_road_is_not_repeated(self, grid_roads):
        points = [(139.752, 35.7001), (139.7601, 35.704), (139.755, 35.7001)]
        path = reconcile_path(points, grid_roads)
        assert [item.road.id for item in path] == ["A", "B"]

    def test_single_point_yields_nothing(self, grid_roads):
        assert reconcile_path([(139.752, 35.7001)], grid_roads) == []

    def test_empty_network_yields_nothing(self):
        assert reconcile_path([(139.752, 35.7001), (139.753, 35.7001)], []) == []

    def test_score_length_mismatch(self, grid_roads):
        with pytest.raises(ValueError):
            reconcile_path([(139.752, 35.7001), (139.753, 35.7001)], grid_roads, damage_scores=[1.0])

    def test_snapper_and_sequence_agree(self, grid_roads):
        points = [(139.752, 35.7001), (139.7601, 35.704), (139.785, 35.7201)]
        from_sequence = reconcile_path(points, grid_roads)
        from_snapper = reconcile_path(points, RoadSnapper(grid_roads))
        assert from_sequence == from_snapper

    def test_path_features(self, grid_roads):
        path = reconcile_path([(139.752, 35.7001), (139.785, 35.7201)], grid_roads)
        features = to_path_features(path)

        assert [f["properties"]["order"] for f in features] == [0, 1]
        assert features[1]["properties"]["gapBefore"] is True
        assert features[0]["properties"]["roadId"] == "A"
        assert features[0]["geometry"]["type"] == "LineString"


class TestOrderObservations:
    """Test order_observations()."""

    def test_sorted_by_timestamp_missing_last(self):
        t0 = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
        late = Observation((139.75, 35.70), 1.0, timestamp=t0 + timedelta(minutes=5))
        early = Observation((139.76, 35.70), 2.0, timestamp=t0)
        undated = Observation((139.77, 35.70), 3.0)

        assert order_observations([undated, late, early]) == [early, late, undated]

    def test_naive_timestamps_are_utc(self):
        aware = Observation((139.75, 35.70), 1.0, timestamp=datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc))
        naive = Observation((139.76, 35.70), 2.0, timestamp=datetime(2026, 10, 19, 8, 0))
        assert order_observations([aware, naive]) == [naive, aware]
