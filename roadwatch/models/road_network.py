"""
Road Network Data Model

This module defines the in-memory domain model shared by every RoadWatch
service. The reference road network is loaded once at startup and never
mutated; observations arrive with each request and are discarded with it.

Entities:
- Coordinate: (lon, lat) pair in WGS84, GeoJSON order
- RoadSegment: immutable polyline of the reference network with static attributes
- Observation: one geotagged damage measurement (photo or video frame)
- SnapResult: projection of a coordinate onto the nearest road sub-segment
- RepresentativePoint: worst-case observation chosen for a road
- RoadGroup: observations that snapped to one road
- TraversedRoad: one road of a reconciled trajectory

Coordinate order is the main hazard at module boundaries: everything inside
the package is (lon, lat). Use as_coordinate() to accept external input.

Author: RoadWatch Project
License: AGPL-3.0
"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, NamedTuple, Optional, Tuple

from roadwatch.core.exceptions import InvalidCoordinateError


class Coordinate(NamedTuple):
    """WGS84 position in decimal degrees, longitude first."""
    lon: float
    lat: float

    def key(self) -> str:
        """String key used to deduplicate markers ("lon,lat")."""
        return f"{self.lon},{self.lat}"


_LON_KEYS = ("lon", "lng", "longitude")
_LAT_KEYS = ("lat", "latitude")


def as_coordinate(value: Any) -> Coordinate:
    """
    Convert external input into a Coordinate.

    Accepts a Coordinate, a (lon, lat) sequence (GeoJSON order) or a mapping
    with explicit longitude/latitude keys. Mappings are the only unambiguous
    form, so producers that hold (lat, lon) pairs should pass a mapping.

    Args:
        value: Coordinate-like input

    Returns:
        Coordinate: Validated coordinate

    Raises:
        InvalidCoordinateError: If the value is malformed or out of range
    """
    if isinstance(value, Coordinate):
        lon, lat = value
    elif isinstance(value, Mapping):
        lon = next((value[k] for k in _LON_KEYS if k in value), None)
        lat = next((value[k] for k in _LAT_KEYS if k in value), None)
        if lon is None or lat is None:
            raise InvalidCoordinateError(f"Mapping lacks longitude/latitude keys: {dict(value)}")
    else:
        try:
            lon, lat = value[0], value[1]
        except (TypeError, IndexError, KeyError):
            raise InvalidCoordinateError(f"Not a (lon, lat) pair: {value!r}")
        if len(value) > 3:
            raise InvalidCoordinateError(f"Too many ordinates for a coordinate: {value!r}")

    try:
        lon, lat = float(lon), float(lat)
    except (TypeError, ValueError):
        raise InvalidCoordinateError(f"Non-numeric coordinate: {value!r}")

    if not (-180.0 <= lon <= 180.0):
        raise InvalidCoordinateError(f"lon out of range [-180,180]: {lon}")
    if not (-90.0 <= lat <= 90.0):
        raise InvalidCoordinateError(f"lat out of range [-90,90]: {lat}")
    return Coordinate(lon, lat)


@dataclass(frozen=True)
class RoadSegment:
    """
    Immutable road of the reference network.

    Attributes:
        id (str): Globally unique, stable identifier assigned at load time
        coordinates (tuple): Polyline vertices, at least two
        properties (Mapping): Read-only bag of static attributes (AHP inputs, name)
        name (str): Display name for popups and reports
    """
    id: str
    coordinates: Tuple[Coordinate, ...]
    properties: Mapping[str, Any] = field(default_factory=dict)
    name: Optional[str] = None

    def __post_init__(self):
        coords = tuple(as_coordinate(c) for c in self.coordinates)
        if len(coords) < 2:
            raise ValueError(f"Road {self.id!r} needs at least 2 coordinates, got {len(coords)}")
        object.__setattr__(self, "coordinates", coords)
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @property
    def start(self) -> Coordinate:
        return self.coordinates[0]

    @property
    def end(self) -> Coordinate:
        return self.coordinates[-1]

    def sub_segments(self) -> Iterator[Tuple[int, Coordinate, Coordinate]]:
        """Yield (index, start, end) for each consecutive vertex pair."""
        for i in range(len(self.coordinates) - 1):
            yield i, self.coordinates[i], self.coordinates[i + 1]

    def to_feature(self, **extra_properties) -> Dict[str, Any]:
        """GeoJSON LineString Feature with the road properties plus overrides."""
        properties = dict(self.properties)
        properties.update(extra_properties)
        return {
            "type": "Feature",
            "id": self.id,
            "geometry": {
                "type": "LineString",
                "coordinates": [list(c) for c in self.coordinates],
            },
            "properties": properties,
        }


@dataclass(frozen=True)
class Observation:
    """One geotagged damage measurement."""
    coordinates: Coordinate
    damage_score: float
    damage_class: Optional[str] = None
    confidence: Optional[float] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "coordinates", as_coordinate(self.coordinates))


@dataclass(frozen=True)
class SnapResult:
    """
    Projection of a coordinate onto the network.

    segment_index is always within [0, len(road.coordinates) - 2].
    """
    point: Coordinate
    road: RoadSegment
    segment_index: int
    distance_m: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "point": list(self.point),
            "road_id": self.road.id,
            "road_name": self.road.name,
            "segment_index": self.segment_index,
            "distance_m": self.distance_m,
        }


@dataclass(frozen=True)
class RepresentativePoint:
    """Worst-case observation of a road group."""
    coordinates: Coordinate
    damage_score: float
    damage_class: Optional[str]
    confidence: Optional[float]
    last_updated: datetime


@dataclass
class RoadGroup:
    """Observations that snapped to one road, with their representative."""
    road: RoadSegment
    observations: List[Observation] = field(default_factory=list)
    representative: Optional[RepresentativePoint] = None

    @property
    def road_id(self) -> str:
        return self.road.id


@dataclass(frozen=True)
class TraversedRoad:
    """
    One road of a reconciled trajectory.

    Attributes:
        road (RoadSegment): Road reached by the trajectory
        damage_score (float or None): Aggregate damage of the traversal
        gap_before (bool): True when reached from a different road whose
            endpoints are not within the bridging threshold
    """
    road: RoadSegment
    damage_score: Optional[float] = None
    gap_before: bool = False
