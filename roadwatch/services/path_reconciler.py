"""
@file path_reconciler.py
@brief Turn an ordered GPS trajectory into the roads it traversed

@details
Every point is snapped to the network; consecutive snapped points are then
walked pairwise:

- both on the same road: the road is emitted once;
- on different roads: each road is emitted once and the pair is checked for
  a direct connection (any endpoint pairing within the bridging
  threshold). Unconnected pairs are flagged with gap_before on the second
  road. The gap is never filled: there is no routing over intermediate
  roads.

Each emitted road carries the mean damage of every point snapped to it
during the call, however the road was entered.

Roads are deduplicated by identifier across the whole call. Points that do
not snap (empty network) are skipped; an empty result means "nothing to
render", not an error.

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0

@see services.snapping for the snap contract
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from roadwatch.models.road_network import Observation, RoadSegment, TraversedRoad
from roadwatch.services.geometry import great_circle_distance
from roadwatch.services.snapping import SnapSource, resolve_snap

logger = logging.getLogger(__name__)

## @brief Endpoints closer than this (meters) count as directly connected
DEFAULT_BRIDGE_THRESHOLD_M = 50.0


def roads_are_connected(road_a: RoadSegment, road_b: RoadSegment,
                        threshold_m: float = DEFAULT_BRIDGE_THRESHOLD_M) -> bool:
    """
    @brief True when any endpoint pairing of the two roads is within threshold_m
    @details Pairings checked: start-start, start-end, end-start, end-end.
    """
    for a in (road_a.start, road_a.end):
        for b in (road_b.start, road_b.end):
            if great_circle_distance(a, b) < threshold_m:
                return True
    return False


def order_observations(observations: Sequence[Observation]) -> List[Observation]:
    """
    @brief Sort observations into a trajectory by timestamp
    @details Stable; observations without a timestamp keep their relative order at the end.
    """
    def sort_key(obs: Observation):
        if obs.timestamp is None:
            return (1, datetime.min.replace(tzinfo=timezone.utc))
        ts = obs.timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return (0, ts)

    return sorted(observations, key=sort_key)


def _mean(values: Sequence[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum(present) / len(present)


def reconcile_path(ordered_points: Sequence, roads_or_snapper: SnapSource,
                   damage_scores: Optional[Sequence[float]] = None,
                   bridge_threshold_m: float = DEFAULT_BRIDGE_THRESHOLD_M) -> List[TraversedRoad]:
    """
    @brief Ordered, de-duplicated roads traversed by a trajectory

    @param ordered_points (lon, lat) coordinates in travel order
    @param roads_or_snapper Road sequence or a prebuilt RoadSnapper
    @param damage_scores Optional per-point damage, same length as ordered_points
    @param bridge_threshold_m Endpoint distance treated as a direct connection

    @return List of TraversedRoad in first-traversal order

    @throws ValueError If damage_scores does not match ordered_points in length
    """
    if damage_scores is not None and len(damage_scores) != len(ordered_points):
        raise ValueError(
            f"damage_scores has {len(damage_scores)} entries for {len(ordered_points)} points"
        )

    snap = resolve_snap(roads_or_snapper)
    snapped = []
    for i, point in enumerate(ordered_points):
        result = snap(point)
        if result is None:
            continue
        score = damage_scores[i] if damage_scores is not None else None
        snapped.append((result, score))

    if len(snapped) < len(ordered_points):
        logger.debug(f"Skipped {len(ordered_points) - len(snapped)} points that did not snap")

    # Every snapped point contributes to its road's aggregate
    road_scores: Dict[str, List[Optional[float]]] = {}
    for result, score in snapped:
        road_scores.setdefault(result.road.id, []).append(score)

    order: List[RoadSegment] = []
    gaps: Dict[str, bool] = {}

    def visit(road: RoadSegment, gap_before: bool = False):
        if road.id in gaps:
            return
        gaps[road.id] = gap_before
        order.append(road)

    for (current, _), (following, _) in zip(snapped, snapped[1:]):
        visit(current.road)
        if current.road.id == following.road.id:
            continue

        connected = roads_are_connected(current.road, following.road, bridge_threshold_m)
        if not connected:
            logger.debug(f"No direct connection between roads {current.road.id} and {following.road.id}")
        visit(following.road, gap_before=not connected)

    return [
        TraversedRoad(road=road, damage_score=_mean(road_scores[road.id]), gap_before=gaps[road.id])
        for road in order
    ]


def to_path_features(path: Sequence[TraversedRoad]) -> List[Dict[str, Any]]:
    """
    @brief GeoJSON LineString Features for a reconciled path
    @details Adds roadId, damageScore, gapBefore and the traversal order.
    """
    return [
        item.road.to_feature(
            roadId=item.road.id,
            damageScore=item.damage_score,
            gapBefore=item.gap_before,
            order=position,
        )
        for position, item in enumerate(path)
    ]
