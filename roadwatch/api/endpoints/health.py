"""
@file health.py
@brief Health check API endpoints
@details
Provides endpoints for monitoring system status, readiness, and liveness.
Includes maintenance mode support when the road network is not loaded.
Redis is optional: a missing cache degrades the status but keeps the
service ready, since every cached payload can be recomputed.

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from roadwatch.core.health import get_system_health, HealthStatus

router = APIRouter(tags=["Health"])

@router.get("/health")
async def health_check():
    """
    @brief Get system health status

    @details
    Provides comprehensive health information about:
    - Road network registry (critical)
    - AHP model consistency (critical)
    - Cache status (optional)

    Returns 503 only in maintenance mode (network or model unavailable).
    """
    health = await get_system_health()

    if health["status"] == HealthStatus.UNHEALTHY:
        return JSONResponse(
            status_code=503,
            content={
                "status": health["status"],
                "message": health["message"],
                "components": health["components"],
                "note": "System is in maintenance mode. Road network is unavailable."
            }
        )

    content = {
        "status": health["status"],
        "message": health["message"],
        "components": health["components"]
    }
    if health["status"] == HealthStatus.DEGRADED:
        content["note"] = "System is running with reduced functionality."
    return content

@router.get("/health/ready")
async def readiness_check():
    """
    @brief Kubernetes readiness probe
    @details Returns 200 once the road network and AHP model are loaded.
    """
    health = await get_system_health()

    if health["status"] != HealthStatus.UNHEALTHY:
        return {"ready": True, "status": "System is ready", "health": health["status"]}
    return JSONResponse(
        status_code=503,
        content={
            "ready": False,
            "status": "System is not ready",
            "reason": health["message"]
        }
    )

@router.get("/health/live")
async def liveness_check():
    """
    @brief Kubernetes liveness probe
    @details Returns 200 as long as application is running.
    """
    return {"alive": True, "status": "Application is running"}
