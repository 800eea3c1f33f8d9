"""
API Request Schemas

Pydantic models validating the JSON bodies accepted by the RoadWatch API.
Coordinates travel as [lon, lat] pairs (GeoJSON order) and are range-checked
here, before they reach the geometry code.

Schemas:
- SnapRequest: one coordinate to snap
- ObservationIn: one damage observation (score 0-5, confidence 0-1)
- ObservationBatch: observations of one upload
- ReconcileRequest: a trajectory, as ordered points or as timestamped observations

Author: RoadWatch Project
License: AGPL-3.0
"""

from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from roadwatch.models.road_network import Coordinate, Observation

LonLat = Tuple[float, float]


def _check_lon_lat(lon: float, lat: float):
    if not (-180.0 <= lon <= 180.0):
        raise ValueError(f"lon out of range [-180,180]: {lon}")
    if not (-90.0 <= lat <= 90.0):
        raise ValueError(f"lat out of range [-90,90]: {lat}")


class SnapRequest(BaseModel):
    point: LonLat

    @field_validator("point")
    @classmethod
    def validate_point(cls, point: LonLat):
        _check_lon_lat(*point)
        return point


class ObservationIn(BaseModel):
    coordinates: LonLat
    damage_score: float = Field(ge=0, le=5)
    damage_class: Optional[str] = Field(default=None, max_length=16)
    confidence: Optional[float] = Field(default=None, ge=0, le=1)
    timestamp: Optional[datetime] = None

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, coordinates: LonLat):
        _check_lon_lat(*coordinates)
        return coordinates

    def to_observation(self) -> Observation:
        return Observation(
            coordinates=Coordinate(*self.coordinates),
            damage_score=self.damage_score,
            damage_class=self.damage_class,
            confidence=self.confidence,
            timestamp=self.timestamp,
        )


class ObservationBatch(BaseModel):
    observations: List[ObservationIn]

    def to_observations(self) -> List[Observation]:
        return [o.to_observation() for o in self.observations]


class ReconcileRequest(BaseModel):
    """
    Trajectory to reconcile.

    Either `points` (already in travel order, optional parallel
    `damage_scores`) or `observations` (ordered here by timestamp) must be
    given, not both.
    """
    points: Optional[List[LonLat]] = None
    damage_scores: Optional[List[float]] = None
    observations: Optional[List[ObservationIn]] = None
    bridge_threshold_m: Optional[float] = Field(default=None, gt=0)

    @field_validator("points")
    @classmethod
    def validate_points(cls, points: Optional[List[LonLat]]):
        for lon, lat in points or []:
            _check_lon_lat(lon, lat)
        return points

    @model_validator(mode="after")
    def validate_source(self):
        if (self.points is None) == (self.observations is None):
            raise ValueError("Provide exactly one of 'points' or 'observations'")
        if self.damage_scores is not None:
            if self.points is None:
                raise ValueError("'damage_scores' accompanies 'points' only")
            if len(self.damage_scores) != len(self.points):
                raise ValueError(
                    f"'damage_scores' has {len(self.damage_scores)} entries for {len(self.points)} points"
                )
        return self
