"""
@file registry.py
@brief Process-wide holder of the loaded road network and scoring model

@details
The NetworkRegistry bundles everything built once at startup:
- the immutable road tuple loaded by etl.load_network
- the RoadSnapper spatial index over those roads
- the validated AHPModel
- the per-road priority scores (deterministic, so computed once)
- a fingerprint of roads and model, used in cache keys

The registry is never mutated after construction; a reload builds a new one
and swaps it in with set_registry().

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0
"""

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from fastapi import HTTPException

from roadwatch.core.config import Settings
from roadwatch.etl.load_network import load_road_network
from roadwatch.models.road_network import RoadSegment
from roadwatch.services.ahp import AHPModel, score_all_roads
from roadwatch.services.snapping import RoadSnapper

logger = logging.getLogger(__name__)


def network_fingerprint(roads: Tuple[RoadSegment, ...], model: Optional[AHPModel] = None) -> str:
    """
    @brief Short sha256 digest of road ids, coordinates and model matrix
    @details Two registries with equal fingerprints produce identical API payloads.
    """
    digest = hashlib.sha256()
    for road in roads:
        digest.update(road.id.encode("utf-8"))
        for lon, lat in road.coordinates:
            digest.update(f"{lon!r},{lat!r};".encode("ascii"))
        digest.update(repr(sorted(road.properties.items(), key=lambda kv: kv[0])).encode("utf-8"))
    if model is not None:
        digest.update(model.matrix.tobytes())
    return digest.hexdigest()[:16]


@dataclass(frozen=True)
class NetworkRegistry:
    """Loaded network, spatial index and scoring model."""
    settings: Settings
    roads: Tuple[RoadSegment, ...]
    snapper: RoadSnapper
    model: AHPModel
    scores: Dict[str, float]
    fingerprint: str
    loaded_at: datetime

    @classmethod
    def build(cls, settings: Settings, roads: Optional[Tuple[RoadSegment, ...]] = None,
              model: Optional[AHPModel] = None) -> "NetworkRegistry":
        """
        @brief Load (or accept) roads and model and derive everything else

        @param settings Runtime settings
        @param roads Preloaded roads; read from settings.road_network_path when None
        @param model Prebuilt model; default judgments when None

        @throws RoadNetworkError If the network file is unusable
        @throws AHPMatrixError If the judgment matrix is invalid or inconsistent
        """
        if roads is None:
            roads = load_road_network(settings.road_network_path, settings.road_id_property)
        roads = tuple(roads)
        if model is None:
            model = AHPModel.from_matrix(max_consistency_ratio=settings.ahp_max_consistency_ratio)

        snapper = RoadSnapper(roads, initial_radius_m=settings.snap_initial_radius_m)
        scores = score_all_roads(roads, model)
        registry = cls(
            settings=settings,
            roads=roads,
            snapper=snapper,
            model=model,
            scores=scores,
            fingerprint=network_fingerprint(roads, model),
            loaded_at=datetime.now(timezone.utc),
        )
        logger.info(f"Network registry built: {len(roads)} roads, fingerprint {registry.fingerprint}")
        return registry

    def road_by_id(self, road_id: str) -> Optional[RoadSegment]:
        return next((road for road in self.roads if road.id == road_id), None)


_registry: Optional[NetworkRegistry] = None


def set_registry(registry: Optional[NetworkRegistry]):
    """Install (or clear, with None) the process-wide registry."""
    global _registry
    _registry = registry


def get_registry() -> NetworkRegistry:
    """
    @brief FastAPI dependency returning the loaded registry
    @throws HTTPException(503) If the network has not been loaded
    """
    if _registry is None:
        raise HTTPException(
            status_code=503,
            detail="Road network is not loaded. System is in maintenance mode."
        )
    return _registry


def peek_registry() -> Optional[NetworkRegistry]:
    """Registry or None, for health checks that must not raise."""
    return _registry
