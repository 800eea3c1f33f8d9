"""
@file ahp.py
@brief AHP (Analytic Hierarchy Process) priority scoring of road segments

@details
Each road is scored on 9 risk criteria. Criterion weights come from a
Saaty-scale pairwise comparison matrix (1 = equal, 3 = moderately more
important, 5 = strongly, 7 = very strongly, 9 = extremely):

1. Weights: normalize every column by its sum, average every row.
2. Consistency: lambda_max is the principal eigenvalue,
   CI = (lambda_max - n) / (n - 1), CR = CI / RI(n). A matrix with CR above
   the threshold (0.1) is rejected at model construction.
3. Each road attribute is mapped to [0, 1] by a lookup table or a capped
   linear scale (normalize_road_attributes()).
4. The priority score is the weighted sum, rounded to 3 decimals.

The AHPModel is built once at startup and passed to every scoring call.

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from roadwatch.core.exceptions import AHPMatrixError, InconsistentMatrixError
from roadwatch.models.road_network import RoadSegment

logger = logging.getLogger(__name__)

CRITERIA: Tuple[str, ...] = (
    "damage", "confidence", "pavement", "repair", "age",
    "water_pipe", "gas_pipe", "traffic", "drainage",
)

## @brief Default judgments; damage severity dominates (row 1)
DEFAULT_COMPARISON_MATRIX = (
    (1,     3,     5,     5,     5,     7,     7,     3,     5),
    (1 / 3, 1,     3,     3,     3,     5,     5,     3,     3),
    (1 / 5, 1 / 3, 1,     1,     1,     3,     3,     1,     3),
    (1 / 5, 1 / 3, 1,     1,     1,     3,     3,     1,     3),
    (1 / 5, 1 / 3, 1,     1,     1,     3,     3,     1,     3),
    (1 / 7, 1 / 5, 1 / 3, 1 / 3, 1 / 3, 1,     1,     1 / 3, 1),
    (1 / 7, 1 / 5, 1 / 3, 1 / 3, 1 / 3, 1,     1,     1 / 3, 1),
    (1 / 3, 1 / 3, 1,     1,     1,     3,     3,     1,     3),
    (1 / 5, 1 / 3, 1 / 3, 1 / 3, 1 / 3, 1,     1,     1 / 3, 1),
)

## @brief Saaty random consistency index by matrix order
RANDOM_INDEX = {
    1: 0.0, 2: 0.0, 3: 0.58, 4: 0.90, 5: 1.12, 6: 1.24, 7: 1.32, 8: 1.41,
    9: 1.45, 10: 1.49, 11: 1.51, 12: 1.48, 13: 1.56, 14: 1.57, 15: 1.59,
}

## @brief Road property key feeding each criterion
PROPERTY_KEYS = {
    "damage": "Damage Severity",
    "confidence": "Confidence Level",
    "pavement": "Type of Pavement",
    "repair": "Road Repair History",
    "age": "Year of Construction",
    "water_pipe": "Presence of Water Pipe",
    "gas_pipe": "Presence of Gas Pipe",
    "traffic": "Traffic Volume",
    "drainage": "Drainage Performance",
}

DAMAGE_SEVERITY = {
    "D50": 0.5, "D40": 0.4, "D20": 0.2, "D43": 0.43, "D44": 0.44, "D10": 0.2, "S00": 0.0,
}

# English labels are matched case-insensitively; the Japanese labels come
# from the municipal source dataset.
PAVEMENT_TYPE = {
    "asphalt": 1.0, "concrete": 0.8, "other": 0.5,
    "アスファルト": 1.0, "コンクリート": 0.8, "その他": 0.5,
}
TRAFFIC_VOLUME = {
    "low": 0.2, "medium": 0.5, "high": 1.0,
    "少": 0.2, "中": 0.5, "多": 1.0,
}
DRAINAGE_PERFORMANCE = {
    "good": 1.0, "fair": 0.5, "poor": 0.0,
    "良": 1.0, "普通": 0.5, "不良": 0.0,
}

UNMAPPED_DAMAGE = 0.0
UNMAPPED_PAVEMENT = 0.1
UNMAPPED_TRAFFIC = 0.5
UNMAPPED_DRAINAGE = 0.5

REPAIR_HORIZON_YEARS = 30.0
AGE_HORIZON_YEARS = 50.0
PIPE_HORIZON_YEARS = 100.0


def _as_square_matrix(matrix) -> np.ndarray:
    try:
        arr = np.array(matrix, dtype=float)
    except (TypeError, ValueError) as e:
        raise AHPMatrixError(f"Comparison matrix is not numeric or is ragged: {e}")
    if arr.ndim != 2 or arr.shape[0] != arr.shape[1] or arr.shape[0] == 0:
        raise AHPMatrixError(f"Comparison matrix must be square and non-empty, got shape {arr.shape}")
    return arr


def derive_weights(matrix) -> np.ndarray:
    """
    @brief Criterion weights from a pairwise comparison matrix
    @details Column-normalize, then average rows. Only squareness is checked here;
             AHPModel.from_matrix() performs the full validation.
    @return 1-D array of weights summing to 1
    """
    arr = _as_square_matrix(matrix)
    normalized = arr / arr.sum(axis=0)
    return normalized.mean(axis=1)


def validate_comparison_matrix(matrix, reciprocity_tolerance: float = 1e-2) -> np.ndarray:
    """
    @brief Check that a matrix is square, finite, strictly positive and reciprocal
    @throws AHPMatrixError On the first violated condition
    """
    arr = _as_square_matrix(matrix)
    if not np.all(np.isfinite(arr)):
        raise AHPMatrixError("Comparison matrix contains non-finite values")
    if np.any(arr <= 0):
        raise AHPMatrixError("Comparison matrix entries must be strictly positive")
    if not np.allclose(arr * arr.T, 1.0, rtol=0.0, atol=reciprocity_tolerance):
        i, j = np.unravel_index(np.argmax(np.abs(arr * arr.T - 1.0)), arr.shape)
        raise AHPMatrixError(
            f"Comparison matrix is not reciprocal at ({i}, {j}): "
            f"{arr[i, j]:.4g} * {arr[j, i]:.4g} != 1"
        )
    return arr


def consistency(matrix) -> Tuple[float, float, float]:
    """
    @brief Principal eigenvalue, consistency index and consistency ratio
    @return (lambda_max, CI, CR); CI and CR are 0 for matrices of order <= 2
    """
    arr = _as_square_matrix(matrix)
    n = arr.shape[0]
    lambda_max = float(np.max(np.linalg.eigvals(arr).real))
    if n <= 2:
        return lambda_max, 0.0, 0.0
    ci = (lambda_max - n) / (n - 1)
    ri = RANDOM_INDEX.get(n, RANDOM_INDEX[15])
    return lambda_max, ci, ci / ri


@dataclass(frozen=True, eq=False)
class AHPModel:
    """
    Validated AHP judgment model.

    Attributes:
        criteria (tuple): Criterion names, in matrix order
        matrix (np.ndarray): Read-only comparison matrix
        weights (np.ndarray): Read-only weights, nonnegative, summing to 1
        lambda_max (float): Principal eigenvalue
        consistency_index (float): CI
        consistency_ratio (float): CR
    """
    criteria: Tuple[str, ...]
    matrix: np.ndarray
    weights: np.ndarray
    lambda_max: float
    consistency_index: float
    consistency_ratio: float

    @classmethod
    def from_matrix(cls, matrix=DEFAULT_COMPARISON_MATRIX,
                    criteria: Sequence[str] = CRITERIA,
                    max_consistency_ratio: float = 0.1,
                    reciprocity_tolerance: float = 1e-2) -> "AHPModel":
        """
        Build a model, failing fast on invalid or incoherent judgments.

        Raises:
            AHPMatrixError: If the matrix is malformed or criteria do not match it
            InconsistentMatrixError: If CR exceeds max_consistency_ratio
        """
        arr = validate_comparison_matrix(matrix, reciprocity_tolerance)
        criteria = tuple(criteria)
        if len(criteria) != arr.shape[0]:
            raise AHPMatrixError(
                f"{len(criteria)} criteria given for a {arr.shape[0]}x{arr.shape[0]} matrix"
            )
        unknown = [c for c in criteria if c not in PROPERTY_KEYS]
        if unknown:
            raise AHPMatrixError(f"Unknown criteria: {unknown}")

        lambda_max, ci, cr = consistency(arr)
        if cr > max_consistency_ratio:
            raise InconsistentMatrixError(cr, max_consistency_ratio)

        weights = derive_weights(arr)
        arr.setflags(write=False)
        weights.setflags(write=False)
        logger.info(f"AHP model ready: {len(criteria)} criteria, lambda_max={lambda_max:.4f}, CR={cr:.4f}")
        return cls(
            criteria=criteria,
            matrix=arr,
            weights=weights,
            lambda_max=lambda_max,
            consistency_index=ci,
            consistency_ratio=cr,
        )

    def weights_by_criterion(self) -> Dict[str, float]:
        return {c: float(w) for c, w in zip(self.criteria, self.weights)}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "criteria": list(self.criteria),
            "weights": self.weights_by_criterion(),
            "lambda_max": self.lambda_max,
            "consistency_index": self.consistency_index,
            "consistency_ratio": self.consistency_ratio,
            "matrix": self.matrix.tolist(),
        }


def _number(value) -> float:
    if value is None or value == "":
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Non-numeric attribute value {value!r} treated as 0")
        return 0.0
    return 0.0 if math.isnan(number) else number


def _lookup(table: Mapping[str, float], value, default: float) -> float:
    if value is None:
        return default
    label = str(value).strip()
    if label.lower() in table:
        return table[label.lower()]
    return table.get(label, default)


def _pipe_score(years: float) -> float:
    # Presence alone floors the score at 0.5
    if years <= 0:
        return 0.0
    return 0.5 + min(years / PIPE_HORIZON_YEARS, 0.5)


def normalize_road_attributes(properties: Mapping[str, Any]) -> Dict[str, float]:
    """
    @brief Map the 9 raw road attributes to [0, 1] criterion scores

    @details
    | Criterion | Rule |
    |-----------|------|
    | damage | severity code lookup, unmapped 0 |
    | confidence | as-is, missing 0 |
    | pavement | asphalt 1.0, concrete 0.8, other 0.5, unmapped 0.1 |
    | repair | min(years / 30, 1) |
    | age | min(years / 50, 1) |
    | water_pipe, gas_pipe | 0 if absent, else 0.5 + min(years / 100, 0.5) |
    | traffic | low 0.2, medium 0.5, high 1.0, unmapped 0.5 |
    | drainage | good 1.0, fair 0.5, poor 0.0, unmapped 0.5 |
    """
    p = properties
    damage_code = p.get(PROPERTY_KEYS["damage"])
    return {
        "damage": DAMAGE_SEVERITY.get(str(damage_code).strip().upper(), UNMAPPED_DAMAGE)
        if damage_code is not None else UNMAPPED_DAMAGE,
        "confidence": _number(p.get(PROPERTY_KEYS["confidence"])),
        "pavement": _lookup(PAVEMENT_TYPE, p.get(PROPERTY_KEYS["pavement"]), UNMAPPED_PAVEMENT),
        "repair": max(0.0, min(_number(p.get(PROPERTY_KEYS["repair"])) / REPAIR_HORIZON_YEARS, 1.0)),
        "age": max(0.0, min(_number(p.get(PROPERTY_KEYS["age"])) / AGE_HORIZON_YEARS, 1.0)),
        "water_pipe": _pipe_score(_number(p.get(PROPERTY_KEYS["water_pipe"]))),
        "gas_pipe": _pipe_score(_number(p.get(PROPERTY_KEYS["gas_pipe"]))),
        "traffic": _lookup(TRAFFIC_VOLUME, p.get(PROPERTY_KEYS["traffic"]), UNMAPPED_TRAFFIC),
        "drainage": _lookup(DRAINAGE_PERFORMANCE, p.get(PROPERTY_KEYS["drainage"]), UNMAPPED_DRAINAGE),
    }


def score_road(road: Union[RoadSegment, Mapping[str, Any]], model: AHPModel) -> float:
    """
    @brief Weighted AHP priority score of one road, rounded to 3 decimals
    @param road RoadSegment or a bare properties mapping
    """
    properties = road.properties if isinstance(road, RoadSegment) else road
    scores = normalize_road_attributes(properties)
    total = sum(float(w) * scores[c] for c, w in zip(model.criteria, model.weights))
    return round(total, 3)


def score_all_roads(roads: Iterable[RoadSegment], model: AHPModel) -> Dict[str, float]:
    """
    @brief Priority score per road identifier
    @details Insertion order follows the road iteration order.
    """
    return {road.id: score_road(road, model) for road in roads}
