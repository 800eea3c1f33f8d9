"""
@file grouping.py
@brief Group observations by road and pick a worst-case representative

@details
Independent observations (photos, video frames) are snapped to the network
and clustered by road identifier. Each road is then characterised by one
representative observation: the greatest damage score, ties broken by the
greater detector confidence (missing confidence counts as 0), remaining ties
by first occurrence.

The groups are rendered two ways for the map layer:
- colored road features: the road geometry with representative attributes;
- intersection markers: Point features at road endpoints. "Intersection"
  here means "segment endpoint"; whether endpoints really coincide depends
  on the network data (see services.topology).

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from roadwatch.models.road_network import Observation, RepresentativePoint, RoadGroup
from roadwatch.services.snapping import SnapSource, resolve_snap
from roadwatch.services.statistics import damage_band

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

## @brief Human-readable names of detector damage classes
DAMAGE_CLASS_DESCRIPTIONS = {
    "D00": "Linear crack",
    "D01": "Linear crack",
    "D10": "Alligator crack",
    "D11": "Alligator crack",
    "D20": "Pothole",
    "D40": "Longitudinal crack",
    "D43": "Step / bump",
    "D44": "Subsidence",
    "D50": "Shoulder damage",
}

UNKNOWN_DAMAGE_DESCRIPTION = "Unknown damage"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def describe_damage_class(damage_class: Optional[str]) -> str:
    """Description of a damage class code; empty string when there is no class."""
    if not damage_class:
        return ""
    return DAMAGE_CLASS_DESCRIPTIONS.get(damage_class, UNKNOWN_DAMAGE_DESCRIPTION)


def select_representative(observations: Sequence[Observation],
                          clock: Optional[Clock] = None) -> Optional[RepresentativePoint]:
    """
    @brief Worst-case observation of a group

    @details
    Lexicographic maximum on (damage_score, confidence or 0). Only a strictly
    greater key replaces the current choice, so the first occurrence wins ties.

    @return RepresentativePoint, or None for an empty group
    """
    if not observations:
        return None

    chosen = observations[0]
    for candidate in observations[1:]:
        if (candidate.damage_score, candidate.confidence or 0.0) > (chosen.damage_score, chosen.confidence or 0.0):
            chosen = candidate

    return RepresentativePoint(
        coordinates=chosen.coordinates,
        damage_score=chosen.damage_score,
        damage_class=chosen.damage_class,
        confidence=chosen.confidence,
        last_updated=(clock or _utc_now)(),
    )


def group_by_road(observations: Sequence[Observation], roads_or_snapper: SnapSource,
                  clock: Optional[Clock] = None) -> List[RoadGroup]:
    """
    @brief Cluster observations by the road they snap to

    @param observations Observations of one upload batch
    @param roads_or_snapper Road sequence or a prebuilt RoadSnapper
    @param clock Source of the representative last_updated stamp

    @return Groups in first-seen road order, each with its representative.
            Observations that do not snap are dropped.
    """
    snap = resolve_snap(roads_or_snapper)
    groups: Dict[str, RoadGroup] = {}
    dropped = 0

    for observation in observations:
        result = snap(observation.coordinates)
        if result is None:
            dropped += 1
            continue
        group = groups.get(result.road.id)
        if group is None:
            group = groups[result.road.id] = RoadGroup(road=result.road)
        group.observations.append(observation)

    if dropped:
        logger.debug(f"Dropped {dropped} observations that did not snap to any road")

    for group in groups.values():
        group.representative = select_representative(group.observations, clock)

    return list(groups.values())


def _representative_properties(representative: RepresentativePoint) -> Dict[str, Any]:
    return {
        "damageScore": representative.damage_score,
        "damageClass": representative.damage_class or "",
        "damageClassDescription": describe_damage_class(representative.damage_class),
        "confidence": representative.confidence or 0,
        "damageBand": damage_band(representative.damage_score),
        "lastUpdated": representative.last_updated.isoformat(),
    }


def to_colored_road_features(groups: Sequence[RoadGroup]) -> List[Dict[str, Any]]:
    """
    @brief Road LineStrings recolored with their representative damage
    @details Groups without a representative are skipped.
    """
    features = []
    for group in groups:
        if group.representative is None:
            continue
        features.append(group.road.to_feature(
            roadId=group.road_id,
            observationCount=len(group.observations),
            **_representative_properties(group.representative),
        ))
    return features


def to_intersection_markers(groups: Sequence[RoadGroup]) -> List[Dict[str, Any]]:
    """
    @brief Point markers at road endpoints, deduplicated by "lon,lat" key
    @details The first group reaching an endpoint supplies its attributes.
    """
    markers = []
    seen = set()
    for group in groups:
        if group.representative is None:
            continue
        properties = _representative_properties(group.representative)
        for endpoint in (group.road.start, group.road.end):
            key = endpoint.key()
            if key in seen:
                continue
            seen.add(key)
            markers.append({
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": list(endpoint)},
                "properties": {"intersectionId": f"intersection-{key}", **properties},
            })
    return markers
