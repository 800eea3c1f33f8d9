"""
Test Configuration and Shared Fixtures

This module provides shared pytest fixtures and configuration for the test suite.
Includes a small synthetic road network, the bundled sample network and
testing utilities.

Fixtures:
- make_road: factory for RoadSegments with AHP attributes
- grid_roads: three roads near Bunkyo (two connected, one isolated)
- sample_roads: bundled sample network loaded through the ETL
- fixed_clock: deterministic clock for last_updated stamps
- feature_collection: GeoJSON input for ETL tests

Author: RoadWatch Project
License: AGPL-3.0
"""

import pytest
import logging
from datetime import datetime, timezone

from roadwatch.etl.load_network import load_road_network
from roadwatch.models.road_network import RoadSegment

# Configure logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

FIXED_NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


# Mark test categories for selective running
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "slow: Slow-running tests")
    config.addinivalue_line("markers", "api: API endpoint tests")
    config.addinivalue_line("markers", "etl: ETL pipeline tests")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if "test_api" in str(item.fspath):
            item.add_marker(pytest.mark.api)
        elif "test_etl" in str(item.fspath):
            item.add_marker(pytest.mark.etl)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def make_road():
    """
    Factory for RoadSegments.

    Returns:
        callable: make_road(id, coordinates, **properties) -> RoadSegment
    """
    def _make(road_id, coordinates, name=None, **properties):
        return RoadSegment(id=road_id, coordinates=coordinates, properties=properties, name=name)
    return _make


@pytest.fixture
def grid_roads(make_road):
    """
    Three roads at Tokyo latitude.

    A runs east along lat 35.700, B runs north from A's east end, C is an
    isolated road about 3 km to the north-east.

    Returns:
        tuple: (A, B, C)
    """
    return (
        make_road("A", [(139.750, 35.700), (139.760, 35.700)], name="Road A"),
        make_road("B", [(139.760, 35.700), (139.760, 35.710)], name="Road B"),
        make_road("C", [(139.780, 35.720), (139.790, 35.720)], name="Road C"),
    )


@pytest.fixture(scope="session")
def sample_roads():
    """
    Bundled sample network, loaded once per session.

    Returns:
        tuple: RoadSegments of the Bunkyo sample
    """
    return load_road_network()


@pytest.fixture
def fixed_clock():
    """Clock returning a constant UTC timestamp."""
    return lambda: FIXED_NOW


@pytest.fixture
def feature_collection():
    """
    GeoJSON FeatureCollection with one LineString and one MultiLineString.

    Returns:
        dict: FeatureCollection
    """
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"id": "r1", "name": "First", "Traffic Volume": "high"},
                "geometry": {"type": "LineString", "coordinates": [[139.75, 35.70], [139.76, 35.70]]},
            },
            {
                "type": "Feature",
                "properties": {"id": "r2", "name": "Split"},
                "geometry": {
                    "type": "MultiLineString",
                    "coordinates": [
                        [[139.77, 35.70], [139.78, 35.70]],
                        [[139.79, 35.70], [139.80, 35.70]],
                    ],
                },
            },
        ],
    }
