"""
Road Grouping Tests

Tests for grouping observations by road, representative selection and the
map-layer renderings (colored roads, intersection markers).

Author: RoadWatch Project
License: AGPL-3.0
"""

import random

import pytest

from roadwatch.models.road_network import Observation
from roadwatch.services.grouping import (
    describe_damage_class,
    group_by_road,
    select_representative,
    to_colored_road_features,
    to_intersection_markers,
)
from roadwatch.services.snapping import RoadSnapper
from tests.conftest import FIXED_NOW

ON_A = (139.752, 35.7001)
ON_B = (139.7601, 35.704)
ON_C = (139.785, 35.7201)


class TestSelectRepresentative:
    """Test select_representative()."""

    def test_empty_group(self):
        assert select_representative([]) is None

    def test_highest_damage_wins_regardless_of_confidence(self, fixed_clock):
        low = Observation(ON_A, 2.0, "D10", confidence=0.9)
        high = Observation(ON_A, 5.0, "D20", confidence=0.4)

        rep = select_representative([low, high], clock=fixed_clock)

        assert rep.damage_score == 5.0
        assert rep.damage_class == "D20"
        assert rep.confidence == 0.4
        assert rep.last_updated == FIXED_NOW

    def test_confidence_breaks_ties(self):
        first = Observation(ON_A, 3.0, "D40", confidence=0.5)
        second = Observation(ON_B, 3.0, "D43", confidence=0.8)
        assert select_representative([first, second]).damage_class == "D43"

    def test_missing_confidence_counts_as_zero(self):
        unknown = Observation(ON_A, 3.0, "D40")
        known = Observation(ON_B, 3.0, "D43", confidence=0.1)
        assert select_representative([unknown, known]).damage_class == "D43"

    def test_first_occurrence_wins_full_ties(self):
        first = Observation(ON_A, 3.0, "D40", confidence=0.5)
        second = Observation(ON_B, 3.0, "D43", confidence=0.5)
        assert select_representative([first, second]).coordinates == first.coordinates

    def test_dominates_every_member(self):
        rng = random.Random(7)
        observations = [
            Observation(ON_A, rng.choice([0.0, 1.0, 2.5, 4.0, 5.0]), confidence=rng.choice([None, 0.2, 0.7]))
            for _ in range(50)
        ]
        rep = select_representative(observations)
        assert all(rep.damage_score >= o.damage_score for o in observations)
        top = [o for o in observations if o.damage_score == rep.damage_score]
        assert (rep.confidence or 0.0) == max(o.confidence or 0.0 for o in top)


class TestGroupByRoad:
    """Test group_by_road()."""

    def test_two_observations_on_one_road(self, grid_roads, fixed_clock):
        observations = [
            Observation(ON_A, 2.0, "D10", confidence=0.9),
            Observation((139.758, 35.7001), 5.0, "D20", confidence=0.4),
        ]
        groups = group_by_road(observations, grid_roads, clock=fixed_clock)

        assert len(groups) == 1
        assert groups[0].road_id == "A"
        assert len(groups[0].observations) == 2
        assert groups[0].representative.damage_score == 5.0

    def test_groups_in_first_seen_order(self, grid_roads):
        observations = [
            Observation(ON_C, 1.0),
            Observation(ON_A, 2.0),
            Observation(ON_C, 3.0),
        ]
        groups = group_by_road(observations, RoadSnapper(grid_roads))
        assert [g.road_id for g in groups] == ["C", "A"]
        assert [len(g.observations) for g in groups] == [2, 1]

    def test_empty_inputs(self, grid_roads):
        assert group_by_road([], grid_roads) == []
        assert group_by_road([Observation(ON_A, 1.0)], []) == []


class TestRenderings:
    """Test colored road features and intersection markers."""

    @pytest.fixture
    def groups(self, grid_roads, fixed_clock):
        observations = [
            Observation(ON_A, 2.0, "D10", confidence=0.9),
            Observation(ON_B, 4.5, "D44", confidence=0.7),
        ]
        return group_by_road(observations, grid_roads, clock=fixed_clock)

    def test_colored_roads(self, groups):
        features = to_colored_road_features(groups)

        assert [f["properties"]["roadId"] for f in features] == ["A", "B"]
        props = features[1]["properties"]
        assert props["damageScore"] == 4.5
        assert props["damageClass"] == "D44"
        assert props["damageClassDescription"] == "Subsidence"
        assert props["damageBand"] == "severe"
        assert props["observationCount"] == 1
        assert props["lastUpdated"] == FIXED_NOW.isoformat()

    def test_markers_deduplicate_shared_endpoints(self, groups):
        markers = to_intersection_markers(groups)
        keys = [m["properties"]["intersectionId"] for m in markers]

        # A and B share (139.76, 35.7): 3 distinct endpoints
        assert len(markers) == 3
        assert len(set(keys)) == 3
        assert "intersection-139.76,35.7" in keys

    def test_shared_marker_takes_first_group(self, groups):
        shared = next(m for m in to_intersection_markers(groups)
                      if m["properties"]["intersectionId"] == "intersection-139.76,35.7")
        assert shared["properties"]["damageScore"] == 2.0
        assert shared["geometry"] == {"type": "Point", "coordinates": [139.76, 35.7]}


def test_describe_damage_class():
    assert describe_damage_class("D20") == "Pothole"
    assert describe_damage_class("X99") == "Unknown damage"
    assert describe_damage_class(None) == ""
