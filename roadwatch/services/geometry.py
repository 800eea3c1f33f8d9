"""
@file geometry.py
@brief Geometry kernel: great-circle distance and point-to-segment projection

@details
Pure functions over (lon, lat) Coordinates.

**Precision bound:** the projection parameter t is computed from raw
longitude/latitude differences (planar parametrization), not geodesic arc
length. This is valid at the scale of a single city district (a few km).
Because raw degrees ignore the shrinking of a longitude degree with latitude,
the planar foot point can be marginally farther (in meters) than one of the
segment endpoints; the endpoints are therefore also considered, so the
distance to a segment never exceeds the distance to either endpoint.

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0
"""

import math
from typing import Tuple

from roadwatch.models.road_network import Coordinate

## @brief Mean Earth radius in meters (haversine)
EARTH_RADIUS_M = 6371000.0


def great_circle_distance(a: Coordinate, b: Coordinate) -> float:
    """
    @brief Haversine distance between two WGS84 points in meters
    @details Antipodal points lose precision; acceptable at city scale.
    """
    a_lon, a_lat = a
    b_lon, b_lat = b
    phi1 = math.radians(a_lat)
    phi2 = math.radians(b_lat)
    dphi = math.radians(b_lat - a_lat)
    dlmb = math.radians(b_lon - a_lon)

    s = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    s = min(1.0, s)
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(s), math.sqrt(1 - s))


def _closest_point(point: Coordinate, seg_start: Coordinate, seg_end: Coordinate) -> Tuple[Coordinate, float]:
    lon, lat = point
    lon1, lat1 = seg_start
    lon2, lat2 = seg_end

    to_start = great_circle_distance(point, seg_start)

    length_squared = (lon2 - lon1) ** 2 + (lat2 - lat1) ** 2
    if length_squared == 0:
        return Coordinate(lon1, lat1), to_start

    # t = 0 -> start, t = 1 -> end
    t = ((lon - lon1) * (lon2 - lon1) + (lat - lat1) * (lat2 - lat1)) / length_squared
    t = max(0.0, min(1.0, t))
    projection = Coordinate(lon1 + t * (lon2 - lon1), lat1 + t * (lat2 - lat1))

    best, best_distance = projection, great_circle_distance(point, projection)
    if to_start < best_distance:
        best, best_distance = Coordinate(lon1, lat1), to_start
    to_end = great_circle_distance(point, seg_end)
    if to_end < best_distance:
        best, best_distance = Coordinate(lon2, lat2), to_end
    return best, best_distance


def distance_point_to_segment(point: Coordinate, seg_start: Coordinate, seg_end: Coordinate) -> float:
    """
    @brief Distance in meters from a point to a segment
    @details
    Clamped planar projection, measured with the haversine formula.
    A zero-length segment (start == end) yields the direct distance.
    """
    return _closest_point(point, seg_start, seg_end)[1]


def project_point_on_segment(point: Coordinate, seg_start: Coordinate, seg_end: Coordinate) -> Coordinate:
    """
    @brief Point of the segment closest to point
    @details Same parametrization as distance_point_to_segment().
    """
    return _closest_point(point, seg_start, seg_end)[0]


def closest_point_on_segment(point: Coordinate, seg_start: Coordinate, seg_end: Coordinate) -> Tuple[Coordinate, float]:
    """
    @brief Projected point and its distance in one pass
    @return (Coordinate, meters)
    """
    return _closest_point(point, seg_start, seg_end)
