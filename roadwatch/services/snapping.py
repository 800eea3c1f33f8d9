"""
@file snapping.py
@brief Road snapper: nearest road sub-segment for a coordinate

@details
Two implementations with the same contract:

- snap_to_nearest_road(): exhaustive scan over every sub-segment of every
  road, O(R*S) per call. Ties on the minimal distance go to the first
  sub-segment encountered in road order.
- RoadSnapper: built once per loaded network over a shapely STRtree of
  sub-segments. Each query inspects only the sub-segments whose bounding box
  meets a search box that provably contains every point within r meters,
  evaluates them in the same order as the exhaustive scan, and widens r
  until the best candidate lies inside it. Results are identical to the
  exhaustive scan, tie-breaking included.

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0

@see services.geometry for the distance model
"""

import logging
import math
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from shapely.geometry import LineString, Point, box
from shapely.strtree import STRtree

from roadwatch.models.road_network import Coordinate, RoadSegment, SnapResult, as_coordinate
from roadwatch.services.geometry import EARTH_RADIUS_M, closest_point_on_segment

logger = logging.getLogger(__name__)

## @brief Box padding in degrees against floating-point edge effects
_BOX_PAD_DEG = 1e-9


def snap_to_nearest_road(point, roads: Iterable[RoadSegment]) -> Optional[SnapResult]:
    """
    @brief Snap a coordinate onto the nearest road by exhaustive scan

    @param point (lon, lat) coordinate
    @param roads Reference roads in a fixed iteration order
    @return SnapResult, or None when roads is empty
    """
    point = as_coordinate(point)
    best = None
    for road in roads:
        for index, start, end in road.sub_segments():
            projected, distance = closest_point_on_segment(point, start, end)
            if best is None or distance < best[3]:
                best = (projected, road, index, distance)

    if best is None:
        return None
    return SnapResult(point=best[0], road=best[1], segment_index=best[2], distance_m=best[3])


def search_bounds(point: Coordinate, radius_m: float) -> Optional[Tuple[float, float, float, float]]:
    """
    @brief Lon/lat box containing every point within radius_m of point

    @details
    Latitude: great-circle distance is at least R*|dphi|.
    Longitude: hav(d/R) >= cos(phi1)*cos(phi2)*hav(dlambda), bounded with the
    smallest cosine inside the latitude band.

    @return (min_lon, min_lat, max_lon, max_lat), or None when the box would
            reach a pole or cross the antimeridian
    """
    dlat = math.degrees(radius_m / EARTH_RADIUS_M)
    min_lat, max_lat = point.lat - dlat, point.lat + dlat
    if min_lat <= -90.0 or max_lat >= 90.0:
        return None

    cos_min = math.cos(math.radians(max(abs(min_lat), abs(max_lat))))
    ratio = math.sin(radius_m / (2 * EARTH_RADIUS_M)) / cos_min
    if ratio >= 1.0:
        return None
    dlon = math.degrees(2 * math.asin(ratio))
    min_lon, max_lon = point.lon - dlon, point.lon + dlon
    if min_lon < -180.0 or max_lon > 180.0:
        return None

    return (
        min_lon - _BOX_PAD_DEG,
        min_lat - _BOX_PAD_DEG,
        max_lon + _BOX_PAD_DEG,
        max_lat + _BOX_PAD_DEG,
    )


class RoadSnapper:
    """
    @brief Spatially indexed snapper over an immutable road list

    @details
    Build once at load time and share; queries do not mutate the index.

    @code{.python}
    snapper = RoadSnapper(roads)
    result = snapper.snap((139.755, 35.705))
    @endcode
    """

    def __init__(self, roads: Iterable[RoadSegment], initial_radius_m: float = 200.0):
        """
        @param roads Reference roads; their order defines tie-breaking
        @param initial_radius_m First search radius, doubled until a match is proven
        """
        if initial_radius_m <= 0:
            raise ValueError("initial_radius_m must be positive")
        self.roads: Tuple[RoadSegment, ...] = tuple(roads)
        self.initial_radius_m = initial_radius_m

        # Entries in exhaustive-scan order: (road, sub-segment index, start, end)
        self._entries: List[Tuple[RoadSegment, int, Coordinate, Coordinate]] = []
        geometries = []
        for road in self.roads:
            for index, start, end in road.sub_segments():
                self._entries.append((road, index, start, end))
                geometries.append(Point(start) if start == end else LineString([start, end]))

        self._tree = STRtree(geometries) if geometries else None
        logger.debug(f"Indexed {len(self._entries)} sub-segments of {len(self.roads)} roads")

    def __len__(self) -> int:
        return len(self.roads)

    def _scan(self, point: Coordinate, entry_ids: Iterable[int]) -> Optional[SnapResult]:
        best = None
        for entry_id in entry_ids:
            road, index, start, end = self._entries[entry_id]
            projected, distance = closest_point_on_segment(point, start, end)
            if best is None or distance < best[3]:
                best = (projected, road, index, distance)
        if best is None:
            return None
        return SnapResult(point=best[0], road=best[1], segment_index=best[2], distance_m=best[3])

    def snap(self, point) -> Optional[SnapResult]:
        """
        @brief Snap a coordinate onto the nearest road

        @return SnapResult identical to snap_to_nearest_road(point, roads),
                or None when the network is empty
        """
        point = as_coordinate(point)
        if self._tree is None:
            return None

        radius = self.initial_radius_m
        while True:
            bounds = search_bounds(point, radius)
            if bounds is None:
                return self._scan(point, range(len(self._entries)))

            candidates = sorted(int(i) for i in self._tree.query(box(*bounds)))
            best = self._scan(point, candidates)
            if best is not None and best.distance_m <= radius:
                return best
            radius *= 2

    def snap_many(self, points: Iterable) -> List[Optional[SnapResult]]:
        """Snap each point independently."""
        return [self.snap(p) for p in points]


SnapSource = Union[RoadSnapper, Sequence[RoadSegment]]


def resolve_snap(roads_or_snapper: SnapSource) -> Callable[[Coordinate], Optional[SnapResult]]:
    """
    @brief Snap callable for either a RoadSnapper or a plain road sequence
    @details Plain sequences use the exhaustive scan.
    """
    if isinstance(roads_or_snapper, RoadSnapper):
        return roads_or_snapper.snap
    roads = tuple(roads_or_snapper)
    return lambda point: snap_to_nearest_road(point, roads)
