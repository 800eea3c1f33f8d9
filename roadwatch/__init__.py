"""
@file __init__.py
@brief RoadWatch backend application package initialization

@details
Package defining the FastAPI application and supporting modules for road
damage reconciliation and AHP-based repair prioritization.

**Package Structure:**
- api/: FastAPI route handlers and endpoint definitions
- core/: Configuration, logging, errors, cache, health, network registry
- models/: Domain dataclasses and API request schemas
- services/: Geometry, snapping, path reconciliation, grouping, AHP scoring
- etl/: GeoJSON road network loader
- data/: Bundled sample road network

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0

@see main for FastAPI application setup
@see api.routes for endpoint documentation
@see models.road_network for data model definitions
"""
