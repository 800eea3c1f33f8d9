"""
@file config.py
@brief Environment-driven application settings

@details
All tunables are read from environment variables with local defaults
suitable for development. Values are resolved once at startup.

| Variable | Default |
|----------|---------|
| ROAD_NETWORK_PATH | bundled data/sample_roads.geojson |
| ROAD_ID_PROPERTY | id |
| BRIDGE_THRESHOLD_M | 50 |
| SNAP_INITIAL_RADIUS_M | 200 |
| AHP_MAX_CONSISTENCY_RATIO | 0.1 |
| REDIS_URL | redis://localhost:6379/0 |
| CACHE_TTL_SECONDS | 86400 |

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0
"""

import os
from dataclasses import dataclass
from pathlib import Path

## @brief Road network shipped with the package (Bunkyo ward sample)
DEFAULT_ROAD_NETWORK_PATH = str(Path(__file__).parent.parent / "data" / "sample_roads.geojson")


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""
    road_network_path: str
    road_id_property: str
    bridge_threshold_m: float
    snap_initial_radius_m: float
    ahp_max_consistency_ratio: float
    redis_url: str
    cache_ttl_seconds: int


def get_settings() -> Settings:
    """
    @brief Read settings from the environment
    @details Called at startup; values are not re-read per request.
    """
    return Settings(
        road_network_path=os.getenv("ROAD_NETWORK_PATH", DEFAULT_ROAD_NETWORK_PATH),
        road_id_property=os.getenv("ROAD_ID_PROPERTY", "id"),
        bridge_threshold_m=float(os.getenv("BRIDGE_THRESHOLD_M", "50")),
        snap_initial_radius_m=float(os.getenv("SNAP_INITIAL_RADIUS_M", "200")),
        ahp_max_consistency_ratio=float(os.getenv("AHP_MAX_CONSISTENCY_RATIO", "0.1")),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        cache_ttl_seconds=int(os.getenv("CACHE_TTL_SECONDS", "86400")),
    )
