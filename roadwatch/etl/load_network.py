"""
Road Network ETL (Extract, Transform, Load) Module

This module turns a GeoJSON road network into the immutable tuple of
RoadSegments served by the API. The pipeline:

1. EXTRACT: Reads a GeoJSON file (or an in-memory FeatureCollection) with geopandas
2. TRANSFORM: Reprojects to WGS84, drops unusable geometries, explodes
   MultiLineStrings into their parts
3. LOAD: Validates identifiers and builds RoadSegment objects

Identifier Rules:
- Every feature must carry an identifier in the configured property
  (default "id"); a feature-level GeoJSON "id" is used when the property is absent
- Identifiers must be unique across the file
- Parts of an exploded MultiLineString get "<id>#<part>" identifiers

Missing or duplicate identifiers abort the load with RoadNetworkError. The
network is never silently re-keyed, because downstream grouping and scoring
are keyed by identifier.

Author: RoadWatch Project
License: AGPL-3.0
"""

import logging
import math
import os
import sys
from typing import Any, Dict, Mapping, Optional, Tuple

import geopandas as gpd
import pandas as pd

from roadwatch.core.config import DEFAULT_ROAD_NETWORK_PATH
from roadwatch.core.exceptions import RoadNetworkError
from roadwatch.models.road_network import RoadSegment

# Configure logging
logger = logging.getLogger(__name__)

WGS84 = "EPSG:4326"

# Internal bookkeeping columns added while exploding multi-part roads
_SOURCE_ROW = "_source_row"
_PART = "_part"
_PART_COUNT = "_part_count"
ROAD_ID_COLUMN = "road_id"

# Property names consulted, in order, for the display name
NAME_PROPERTIES = ("name", "roadName", "road_name")


def load_geojson(path: str) -> gpd.GeoDataFrame:
    """
    Load a GeoJSON road network from disk.

    Args:
        path (str): Path to a GeoJSON file

    Returns:
        gpd.GeoDataFrame: Raw features

    Raises:
        RoadNetworkError: If the file is missing or unreadable
    """
    if not os.path.exists(path):
        raise RoadNetworkError(f"Road network file not found: {path}")

    logger.info(f"Loading road network: {path}")
    try:
        gdf = gpd.read_file(path)
    except Exception as e:
        raise RoadNetworkError(f"Error reading road network {path}: {e}") from e

    logger.info(f"  → Loaded {len(gdf)} features")
    return gdf


def from_feature_collection(feature_collection: Mapping[str, Any],
                            id_property: str = "id") -> gpd.GeoDataFrame:
    """
    Build a GeoDataFrame from an in-memory GeoJSON FeatureCollection.

    Feature-level "id" members are copied into id_property when the
    properties do not already carry it.

    Args:
        feature_collection (Mapping): GeoJSON FeatureCollection
        id_property (str): Property that holds the road identifier

    Returns:
        gpd.GeoDataFrame: Raw features in WGS84

    Raises:
        RoadNetworkError: If the input is not a FeatureCollection
    """
    if feature_collection.get("type") != "FeatureCollection":
        raise RoadNetworkError(
            f"Expected a FeatureCollection, got {feature_collection.get('type')!r}"
        )

    features = []
    for feature in feature_collection.get("features") or []:
        properties = dict(feature.get("properties") or {})
        if id_property not in properties and feature.get("id") is not None:
            properties[id_property] = feature["id"]
        features.append({**feature, "properties": properties})

    if not features:
        return gpd.GeoDataFrame(
            {id_property: pd.Series([], dtype=object)},
            geometry=gpd.GeoSeries([], crs=WGS84),
        )
    return gpd.GeoDataFrame.from_features(features, crs=WGS84)


def reproject_and_clean(roads: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """
    Reproject to WGS84 and keep only LineString geometries.

    A missing CRS is taken as WGS84 (the GeoJSON default). Null and empty
    geometries are dropped, MultiLineStrings are exploded into one row per
    part, and any remaining non-LineString geometry is dropped.

    Args:
        roads (gpd.GeoDataFrame): Raw features

    Returns:
        gpd.GeoDataFrame: LineString rows in WGS84 with part bookkeeping columns
    """
    logger.info("Reprojecting and cleaning geometry...")

    if roads.crs is None:
        roads = roads.set_crs(WGS84)
    elif roads.crs.to_epsg() != 4326:
        logger.info(f"  → Reprojecting from {roads.crs} to {WGS84}")
        roads = roads.to_crs(WGS84)

    initial_count = len(roads)
    roads = roads[roads.geometry.notnull() & ~roads.geometry.is_empty]
    removed = initial_count - len(roads)
    if removed > 0:
        logger.warning(f"  → Removed {removed} features with null or empty geometry")

    roads = roads.copy()
    roads[_SOURCE_ROW] = range(len(roads))
    multi_count = int((roads.geom_type == "MultiLineString").sum())
    before_explode = len(roads)
    roads = roads.explode(index_parts=False, ignore_index=True)
    if multi_count:
        parts = len(roads) - before_explode + multi_count
        logger.info(f"  → Exploded {multi_count} MultiLineStrings into {parts} parts")

    roads[_PART] = roads.groupby(_SOURCE_ROW).cumcount()
    roads[_PART_COUNT] = roads.groupby(_SOURCE_ROW)[_SOURCE_ROW].transform("size")

    non_lines = roads.geom_type != "LineString"
    if non_lines.any():
        logger.warning(f"  → Dropped {int(non_lines.sum())} non-LineString geometries")
        roads = roads[~non_lines]

    return roads


def _identifier(value) -> Optional[str]:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    text = str(value).strip()
    return text or None


def assign_identifiers(roads: gpd.GeoDataFrame, id_property: str = "id") -> gpd.GeoDataFrame:
    """
    Validate source identifiers and derive the final road_id column.

    Args:
        roads (gpd.GeoDataFrame): Cleaned roads (see reproject_and_clean)
        id_property (str): Property that holds the road identifier

    Returns:
        gpd.GeoDataFrame: Roads with a unique road_id column

    Raises:
        RoadNetworkError: If identifiers are absent, empty or duplicated
    """
    logger.info("Assigning road identifiers...")

    if roads.empty:
        roads = roads.copy()
        roads[ROAD_ID_COLUMN] = pd.Series([], dtype=object)
        return roads

    if id_property not in roads.columns:
        raise RoadNetworkError(f"Road network has no '{id_property}' identifier property")

    roads = roads.copy()
    base_ids = roads[id_property].map(_identifier)
    missing = base_ids.isna()
    if missing.any():
        raise RoadNetworkError(f"{int(missing.sum())} roads have no '{id_property}' identifier")

    part = roads[_PART] if _PART in roads.columns else pd.Series(0, index=roads.index)
    part_count = roads[_PART_COUNT] if _PART_COUNT in roads.columns else pd.Series(1, index=roads.index)

    source_ids = base_ids[part == 0]
    duplicated = source_ids[source_ids.duplicated()].unique().tolist()
    if duplicated:
        raise RoadNetworkError(f"Duplicate road identifiers: {sorted(duplicated)[:10]}")

    roads[ROAD_ID_COLUMN] = [
        f"{base}#{p}" if count > 1 else base
        for base, p, count in zip(base_ids, part, part_count)
    ]

    exploded = int((part_count > 1).sum())
    if exploded:
        logger.info(f"  → {exploded} parts received '<id>#<part>' identifiers")
    return roads


def _plain(value):
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if hasattr(value, "item"):
        return value.item()
    return value


def to_road_segments(roads: gpd.GeoDataFrame) -> Tuple[RoadSegment, ...]:
    """
    Convert identified rows into RoadSegments.

    Args:
        roads (gpd.GeoDataFrame): Output of assign_identifiers

    Returns:
        tuple: RoadSegments in file order
    """
    internal = [_SOURCE_ROW, _PART, _PART_COUNT, ROAD_ID_COLUMN, roads.geometry.name]
    attributes = roads.drop(columns=[c for c in internal if c in roads.columns])

    segments = []
    for road_id, geometry, record in zip(roads[ROAD_ID_COLUMN], roads.geometry,
                                         attributes.to_dict("records")):
        properties: Dict[str, Any] = {k: _plain(v) for k, v in record.items()}
        name = next((properties[k] for k in NAME_PROPERTIES if properties.get(k)), None)
        segments.append(RoadSegment(
            id=road_id,
            coordinates=tuple(geometry.coords),
            properties=properties,
            name=name,
        ))
    return tuple(segments)


def roads_from_feature_collection(feature_collection: Mapping[str, Any],
                                  id_property: str = "id") -> Tuple[RoadSegment, ...]:
    """
    Run the transform and load steps on an in-memory FeatureCollection.

    Raises:
        RoadNetworkError: On malformed input or identifier problems
    """
    roads = from_feature_collection(feature_collection, id_property)
    roads = reproject_and_clean(roads)
    roads = assign_identifiers(roads, id_property)
    return to_road_segments(roads)


def load_road_network(path: Optional[str] = None, id_property: str = "id") -> Tuple[RoadSegment, ...]:
    """
    Execute the complete road network pipeline.

    Args:
        path (str): GeoJSON file; defaults to the bundled sample network
        id_property (str): Property that holds the road identifier

    Returns:
        tuple: Immutable RoadSegments in file order

    Raises:
        RoadNetworkError: If the file is unusable or identifiers are invalid
    """
    path = path or DEFAULT_ROAD_NETWORK_PATH
    roads = load_geojson(path)
    roads = reproject_and_clean(roads)
    roads = assign_identifiers(roads, id_property)
    segments = to_road_segments(roads)
    logger.info(f"  → {len(segments)} road segments ready")
    return segments


if __name__ == "__main__":
    # Standalone validation of a network file before deployment
    from roadwatch.services.topology import summarize_topology

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    try:
        network = load_road_network(sys.argv[1] if len(sys.argv) > 1 else None)
    except RoadNetworkError as e:
        logger.critical(f"Road network rejected: {e}")
        sys.exit(1)
    logger.info(f"Topology: {summarize_topology(network)}")
    sys.exit(0)
