"""
Road Snapper Tests

Tests for the exhaustive snapper and the STRtree-indexed RoadSnapper.

Test Classes:
- TestSnapToNearestRoad: exhaustive scan contract
- TestSearchBounds: search box construction
- TestRoadSnapper: indexed snapper equals the exhaustive scan

Author: RoadWatch Project
License: AGPL-3.0
"""

import random

import pytest

from roadwatch.core.exceptions import InvalidCoordinateError
from roadwatch.models.road_network import Coordinate
from roadwatch.services.geometry import great_circle_distance
from roadwatch.services.snapping import RoadSnapper, resolve_snap, search_bounds, snap_to_nearest_road


class TestSnapToNearestRoad:
    """Test snap_to_nearest_road()."""

    def test_empty_network_returns_none(self):
        assert snap_to_nearest_road((139.75, 35.70), []) is None

    def test_single_segment_road(self, make_road):
        road = make_road("R1", [(139.750, 35.700), (139.760, 35.700)])
        result = snap_to_nearest_road((139.755, 35.7001), [road])

        assert result.road is road
        assert result.segment_index == 0
        assert result.point.lon == pytest.approx(139.755)
        assert result.point.lat == pytest.approx(35.700)
        assert result.distance_m == pytest.approx(11.1, abs=0.1)

    def test_diagonal_segment_midpoint(self, make_road):
        road = make_road("diag", [(139.75, 35.70), (139.76, 35.71)])
        result = snap_to_nearest_road((139.755, 35.705), [road])
        assert result.road is road
        assert result.segment_index == 0
        # The midpoint lies on the segment in lon/lat space, so the distance may
        # be 0; test_diagonal_segment_off_line covers a positive distance
        assert 0.0 <= result.distance_m < 100.0

    def test_diagonal_segment_off_line(self, make_road):
        road = make_road("diag", [(139.75, 35.70), (139.76, 35.71)])
        result = snap_to_nearest_road((139.755, 35.7055), [road])
        assert result.segment_index == 0
        assert 0.0 < result.distance_m < 100.0

    def test_deterministic(self, grid_roads):
        point = (139.7583, 35.7042)
        assert snap_to_nearest_road(point, grid_roads) == snap_to_nearest_road(point, grid_roads)

    def test_picks_nearest_road(self, grid_roads):
        a, b, c = grid_roads
        assert snap_to_nearest_road((139.785, 35.7201), grid_roads).road is c
        assert snap_to_nearest_road((139.7601, 35.705), grid_roads).road is b
        assert snap_to_nearest_road((139.752, 35.6995), grid_roads).road is a

    def test_segment_index_within_bounds(self, make_road):
        road = make_road("R", [(139.75, 35.70), (139.76, 35.70), (139.76, 35.71), (139.77, 35.71)])
        for point in [(139.74, 35.69), (139.765, 35.705), (139.78, 35.72), (139.7605, 35.706)]:
            result = snap_to_nearest_road(point, [road])
            assert 0 <= result.segment_index <= len(road.coordinates) - 2

    def test_point_on_vertex_is_zero_distance(self, make_road):
        road = make_road("R", [(139.75, 35.70), (139.76, 35.70), (139.76, 35.71)])
        result = snap_to_nearest_road((139.76, 35.70), [road])
        assert result.distance_m == pytest.approx(0.0, abs=1e-6)

    def test_tie_goes_to_first_road(self, make_road):
        first = make_road("first", [(139.750, 35.700), (139.760, 35.700)])
        duplicate = make_road("duplicate", [(139.750, 35.700), (139.760, 35.700)])
        assert snap_to_nearest_road((139.755, 35.701), [first, duplicate]).road is first
        assert snap_to_nearest_road((139.755, 35.701), [duplicate, first]).road is duplicate

    def test_distance_is_minimal(self, grid_roads):
        point = (139.771, 35.713)
        result = snap_to_nearest_road(point, grid_roads)
        for road in grid_roads:
            assert result.distance_m <= snap_to_nearest_road(point, [road]).distance_m

    def test_degenerate_road_is_snapped(self, make_road):
        stub = make_road("stub", [(139.75, 35.70), (139.75, 35.70)])
        result = snap_to_nearest_road((139.751, 35.70), [stub])
        assert result.point == Coordinate(139.75, 35.70)
        assert result.distance_m == pytest.approx(great_circle_distance((139.751, 35.70), (139.75, 35.70)))

    def test_rejects_out_of_range_coordinates(self, grid_roads):
        with pytest.raises(InvalidCoordinateError):
            snap_to_nearest_road((200.0, 35.7), grid_roads)

    def test_result_serializes(self, grid_roads):
        data = snap_to_nearest_road((139.752, 35.6995), grid_roads).to_dict()
        assert data["road_id"] == "A"
        assert data["road_name"] == "Road A"
        assert data["segment_index"] == 0
        assert len(data["point"]) == 2


class TestSearchBounds:
    """Test search_bounds()."""

    def test_box_contains_radius(self):
        center = Coordinate(139.75, 35.70)
        min_lon, min_lat, max_lon, max_lat = search_bounds(center, 500.0)
        # Points exactly 500 m away along the axes must be inside the box
        assert great_circle_distance(center, (center.lon, max_lat)) >= 500.0
        assert great_circle_distance(center, (max_lon, center.lat)) >= 500.0
        assert min_lon < center.lon < max_lon
        assert min_lat < center.lat < max_lat

    def test_polar_box_is_none(self):
        assert search_bounds(Coordinate(0.0, 89.999), 1000.0) is None

    def test_antimeridian_box_is_none(self):
        assert search_bounds(Coordinate(179.9999, 0.0), 1000.0) is None


class TestRoadSnapper:
    """Test the STRtree-indexed snapper."""

    def test_empty_network(self):
        snapper = RoadSnapper([])
        assert len(snapper) == 0
        assert snapper.snap((139.75, 35.70)) is None

    def test_invalid_radius(self, grid_roads):
        with pytest.raises(ValueError):
            RoadSnapper(grid_roads, initial_radius_m=0)

    def test_far_point_widens_search(self, grid_roads):
        snapper = RoadSnapper(grid_roads, initial_radius_m=10.0)
        point = (139.60, 35.60)
        expected = snap_to_nearest_road(point, grid_roads)
        result = snapper.snap(point)
        assert result.road is expected.road
        assert result.distance_m == pytest.approx(expected.distance_m)

    def test_matches_exhaustive_scan(self, sample_roads):
        snapper = RoadSnapper(sample_roads, initial_radius_m=50.0)
        rng = random.Random(20261019)
        for _ in range(300):
            point = (rng.uniform(139.72, 139.79), rng.uniform(35.69, 35.73))
            expected = snap_to_nearest_road(point, sample_roads)
            result = snapper.snap(point)
            assert result.road.id == expected.road.id
            assert result.segment_index == expected.segment_index
            assert result.distance_m == expected.distance_m
            assert result.point == expected.point

    def test_tie_breaking_matches_exhaustive_scan(self, make_road):
        roads = [
            make_road("first", [(139.750, 35.700), (139.760, 35.700)]),
            make_road("second", [(139.750, 35.700), (139.760, 35.700)]),
        ]
        assert RoadSnapper(roads).snap((139.755, 35.701)).road.id == "first"

    def test_snap_many(self, grid_roads):
        results = RoadSnapper(grid_roads).snap_many([(139.752, 35.6995), (139.785, 35.7201)])
        assert [r.road.id for r in results] == ["A", "C"]

    def test_resolve_snap_accepts_both_forms(self, grid_roads):
        point = (139.7601, 35.705)
        from_sequence = resolve_snap(list(grid_roads))(point)
        from_snapper = resolve_snap(RoadSnapper(grid_roads))(point)
        assert from_sequence.road.id == from_snapper.road.id == "B"
