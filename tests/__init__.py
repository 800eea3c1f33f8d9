"""
Test Suite for RoadWatch Backend

Unit and API tests for the road damage prioritization service: snapping,
path reconciliation, grouping, AHP scoring and the HTTP layer.

Test Categories:
- test_geometry, test_snapping: distance kernel and nearest-road search
- test_path_reconciler, test_grouping: trajectory and observation handling
- test_ahp, test_statistics, test_topology: scoring and diagnostics
- test_etl: GeoJSON road network loader
- test_api, test_cache, test_resilience: FastAPI endpoints, Redis, health
- conftest.py: Shared fixtures and test configuration

Running Tests:
    pytest              # Run all tests
    pytest -m unit      # Core algorithms only
    pytest tests/test_ahp.py -v  # Run specific test file
    pytest --cov=roadwatch       # With coverage report

Author: RoadWatch Project
License: AGPL-3.0
"""
