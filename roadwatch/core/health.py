"""
@file health.py
@brief System health checks and status monitoring

@details
Provides health check endpoints and status monitoring for:
- Road network registry (critical: nothing can be snapped or scored without it)
- AHP model consistency
- Redis cache connectivity (optional: degraded mode only)

Returns appropriate HTTP status codes and messages for system maintenance scenarios.

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0
"""

import logging
from typing import Dict, Any
from roadwatch.core.cache import cache
from roadwatch.core.registry import peek_registry

logger = logging.getLogger(__name__)


class HealthStatus:
    """Health status indicator for system components"""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


async def check_network() -> Dict[str, Any]:
    """
    @brief Check that the road network is loaded

    @return Dict with status, message and road count
    @details
    An unloaded registry is UNHEALTHY; a loaded but empty network is
    DEGRADED, since every snap then returns no match.
    """
    registry = peek_registry()
    if registry is None:
        return {
            "status": HealthStatus.UNHEALTHY,
            "message": "Road network is not loaded",
            "component": "network"
        }
    if not registry.roads:
        return {
            "status": HealthStatus.DEGRADED,
            "message": "Road network is empty",
            "component": "network",
            "road_count": 0
        }
    return {
        "status": HealthStatus.HEALTHY,
        "message": "Road network is loaded",
        "component": "network",
        "road_count": len(registry.roads),
        "fingerprint": registry.fingerprint
    }


async def check_model() -> Dict[str, Any]:
    """
    @brief Report the AHP model consistency ratio
    @return Dict with status and CR; UNHEALTHY when no model is loaded
    """
    registry = peek_registry()
    if registry is None:
        return {
            "status": HealthStatus.UNHEALTHY,
            "message": "AHP model is not loaded",
            "component": "ahp_model"
        }
    return {
        "status": HealthStatus.HEALTHY,
        "message": "AHP model is consistent",
        "component": "ahp_model",
        "consistency_ratio": round(registry.model.consistency_ratio, 4)
    }


async def check_cache() -> Dict[str, Any]:
    """
    @brief Check Redis cache connectivity

    @return Dict with status, message
    @details
    Attempts a PING to Redis to verify connectivity.
    Redis is optional - degraded status if unavailable.
    """
    try:
        if not cache.client:
            return {
                "status": HealthStatus.DEGRADED,
                "message": "Redis cache is not initialized (running in degraded mode)",
                "component": "cache"
            }

        await cache.client.ping()
        return {
            "status": HealthStatus.HEALTHY,
            "message": "Redis cache is healthy",
            "component": "cache"
        }
    except Exception as e:
        logger.warning(f"Cache health check failed: {e}")
        return {
            "status": HealthStatus.DEGRADED,
            "message": "Redis cache is unavailable (running in degraded mode)",
            "component": "cache",
            "error": str(e)
        }


async def get_system_health() -> Dict[str, Any]:
    """
    @brief Get comprehensive system health status

    @return Dict with overall status and component details
    @details
    - HEALTHY: All components operational
    - DEGRADED: Network loaded, cache issues or empty network
    - UNHEALTHY: Network or model unavailable (critical failure)
    """
    network_status = await check_network()
    model_status = await check_model()
    cache_status = await check_cache()
    statuses = [network_status["status"], model_status["status"], cache_status["status"]]

    if network_status["status"] == HealthStatus.UNHEALTHY or \
       model_status["status"] == HealthStatus.UNHEALTHY:
        overall_status = HealthStatus.UNHEALTHY
    elif HealthStatus.DEGRADED in statuses:
        overall_status = HealthStatus.DEGRADED
    else:
        overall_status = HealthStatus.HEALTHY

    return {
        "status": overall_status,
        "components": {
            "network": network_status,
            "ahp_model": model_status,
            "cache": cache_status
        },
        "message": get_status_message(overall_status)
    }


def get_status_message(status: str) -> str:
    """Get human-readable status message"""
    messages = {
        HealthStatus.HEALTHY: "System is operational",
        HealthStatus.DEGRADED: "System is running with reduced functionality (non-critical services unavailable)",
        HealthStatus.UNHEALTHY: "System is in maintenance mode (critical services unavailable)"
    }
    return messages.get(status, "Unknown status")
