"""
@file routes.py
@brief FastAPI API endpoint definitions for RoadWatch backend

@details
Provides RESTful endpoints for:
- Road network export with AHP priority scores (GeoJSON)
- Snapping of single coordinates
- Trajectory reconciliation into traversed roads
- Observation grouping with representative selection
- Damage and priority statistics
- Network topology diagnostics and reload

Endpoints read the NetworkRegistry built at startup or by a reload; observations live
only in the request that carries them. Endpoints that run the CPU-bound core
are plain `def` so FastAPI executes them in its threadpool.

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0

@see core.registry for the loaded network
@see services for the algorithms
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool
import logging

from roadwatch.core.cache import cache, make_key
from roadwatch.core.config import get_settings
from roadwatch.core.registry import NetworkRegistry, get_registry, set_registry
from roadwatch.models.schemas import ObservationBatch, ReconcileRequest, SnapRequest
from roadwatch.services.ahp import normalize_road_attributes
from roadwatch.services.grouping import group_by_road, to_colored_road_features, to_intersection_markers
from roadwatch.services.path_reconciler import order_observations, reconcile_path, to_path_features
from roadwatch.services.statistics import priority_band, summarize_damage_scores, summarize_priority_scores
from roadwatch.services.topology import summarize_topology

## @brief FastAPI router instance for API endpoints
router = APIRouter()

## @brief Module-level logger for request/response debugging
logger = logging.getLogger(__name__)


def feature_collection(features: List[Dict[str, Any]], **members) -> Dict[str, Any]:
    """Wrap features in a GeoJSON FeatureCollection, with optional foreign members."""
    return {"type": "FeatureCollection", "features": features, **members}


def scored_road_features(registry: NetworkRegistry) -> List[Dict[str, Any]]:
    """Road Features with roadId, priorityScore and priorityBand properties."""
    return [
        road.to_feature(
            roadId=road.id,
            priorityScore=registry.scores[road.id],
            priorityBand=priority_band(registry.scores[road.id]),
        )
        for road in registry.roads
    ]


@router.get("/roads")
async def get_roads(registry: NetworkRegistry = Depends(get_registry)):
    """
    @brief Retrieve the road network as a scored GeoJSON FeatureCollection

    @details
    Cached in Redis; the key embeds the network fingerprint, so a reloaded
    network or a new judgment matrix never serves stale scores.
    """
    cache_key = make_key("roads", registry.fingerprint)
    cached = await cache.get(cache_key)
    if cached:
        return cached

    result = feature_collection(scored_road_features(registry))
    await cache.set(cache_key, result, ttl=registry.settings.cache_ttl_seconds)
    return result


@router.get("/roads/scores")
def get_road_scores(registry: NetworkRegistry = Depends(get_registry)):
    """
    @brief Priority score of every road, in network order

    @return {"scores": [{index, id, score}], "summary": band counts}
    """
    scores = [
        {"index": index, "id": road.id, "score": registry.scores[road.id]}
        for index, road in enumerate(registry.roads)
    ]
    return {"scores": scores, "summary": summarize_priority_scores(registry.scores)}


@router.get("/roads/by-id/{road_id}")
def get_road_report(road_id: str, registry: NetworkRegistry = Depends(get_registry)):
    """
    @brief Score breakdown of one road

    @details
    Returns the road Feature with its priority score, the normalized
    criterion scores and the criterion weights, i.e. everything needed to
    explain the score in a report.

    @throws HTTPException(404): Unknown road id
    """
    road = registry.road_by_id(road_id)
    if road is None:
        raise HTTPException(status_code=404, detail=f"Road {road_id!r} not found")

    score = registry.scores[road.id]
    return {
        "road": road.to_feature(roadId=road.id, priorityScore=score, priorityBand=priority_band(score)),
        "criteria": normalize_road_attributes(road.properties),
        "weights": registry.model.weights_by_criterion(),
    }


@router.get("/ahp/model")
def get_ahp_model(registry: NetworkRegistry = Depends(get_registry)):
    """
    @brief Criteria, weights and consistency figures of the active AHP model
    """
    return registry.model.to_dict()


@router.post("/snap")
def snap_point(request: SnapRequest, registry: NetworkRegistry = Depends(get_registry)):
    """
    @brief Snap one [lon, lat] coordinate onto the nearest road

    @throws HTTPException(404): The loaded network is empty
    """
    result = registry.snapper.snap(request.point)
    if result is None:
        raise HTTPException(status_code=404, detail="Road network is empty; nothing to snap to")
    return result.to_dict()


@router.post("/paths/reconcile")
def reconcile(request: ReconcileRequest, registry: NetworkRegistry = Depends(get_registry)):
    """
    @brief Ordered, de-duplicated roads traversed by a trajectory

    @details
    Accepts either points already in travel order (with optional parallel
    damage scores) or observations, which are ordered by timestamp first.
    Roads reached without a direct endpoint connection carry gapBefore=true.

    @return FeatureCollection of traversed roads plus gap_count
    """
    if request.observations is not None:
        ordered = order_observations([o.to_observation() for o in request.observations])
        points = [o.coordinates for o in ordered]
        damage_scores = [o.damage_score for o in ordered]
    else:
        points = request.points
        damage_scores = request.damage_scores

    threshold = request.bridge_threshold_m or registry.settings.bridge_threshold_m
    path = reconcile_path(points, registry.snapper, damage_scores, threshold)
    logger.info(f"Reconciled {len(points)} points into {len(path)} roads")

    return feature_collection(
        to_path_features(path),
        gap_count=sum(1 for item in path if item.gap_before),
    )


@router.post("/observations/group")
def group_observations(batch: ObservationBatch, registry: NetworkRegistry = Depends(get_registry)):
    """
    @brief Group observations by road and color roads by their worst case

    @return {"roads": FeatureCollection, "intersections": FeatureCollection,
             "groups": int, "dropped": int}
    """
    observations = batch.to_observations()
    groups = group_by_road(observations, registry.snapper)
    grouped = sum(len(g.observations) for g in groups)

    return {
        "roads": feature_collection(to_colored_road_features(groups)),
        "intersections": feature_collection(to_intersection_markers(groups)),
        "groups": len(groups),
        "dropped": len(observations) - grouped,
    }


@router.post("/observations/statistics")
def observation_statistics(batch: ObservationBatch):
    """
    @brief Damage band counts for a batch of observations
    """
    return summarize_damage_scores([o.damage_score for o in batch.observations])


@router.get("/statistics")
async def get_statistics(registry: NetworkRegistry = Depends(get_registry)):
    """
    @brief AHP priority band counts over the whole network
    @details Cached per network fingerprint.
    """
    cache_key = make_key("statistics", registry.fingerprint)
    cached = await cache.get(cache_key)
    if cached:
        return cached

    result = summarize_priority_scores(registry.scores)
    await cache.set(cache_key, result, ttl=registry.settings.cache_ttl_seconds)
    return result


@router.get("/network/topology")
async def get_topology(registry: NetworkRegistry = Depends(get_registry)):
    """
    @brief Endpoint connectivity diagnostics of the loaded network

    @details
    Shows whether roads meet at shared endpoints within the bridging
    threshold, which is what the gap flags of reconciled paths depend on.
    Computed off the event loop and cached per network fingerprint.
    """
    threshold = registry.settings.bridge_threshold_m
    cache_key = make_key("topology", registry.fingerprint, threshold)
    cached = await cache.get(cache_key)
    if cached:
        return cached

    result = await run_in_threadpool(summarize_topology, registry.roads, threshold)
    await cache.set(cache_key, result, ttl=registry.settings.cache_ttl_seconds)
    return result


@router.post("/network/reload")
def reload_network():
    """
    @brief Re-read the road network file and install a fresh registry

    @details
    Does not require a loaded registry, so it also recovers a service that
    started in maintenance mode. On failure the current registry (if any)
    stays installed.

    @throws RoadNetworkError: File missing or invalid; answered with 503 by
            NetworkUnavailableMiddleware
    """
    registry = NetworkRegistry.build(get_settings())
    set_registry(registry)
    logger.info(f"Road network reloaded: {len(registry.roads)} roads")
    return {
        "road_count": len(registry.roads),
        "fingerprint": registry.fingerprint,
        "loaded_at": registry.loaded_at.isoformat(),
    }
