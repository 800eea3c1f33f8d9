"""
@file statistics.py
@brief Damage and priority banding for map colors and dashboard statistics

@details
Two band scales are used by the dashboard:

| Band | Observation damage score (0-5) | AHP priority score (0-1) |
|------|-------------------------------|--------------------------|
| none | <= 0 | < 0.2 |
| minor | <= 2 | < 0.5 |
| moderate | <= 4 | < 0.7 |
| severe | > 4 | >= 0.7 |

Scalar helpers classify a single value; the summaries bin whole score
collections with pandas.

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import numpy as np
import pandas as pd

BANDS = ["none", "minor", "moderate", "severe"]

## @brief Upper edges (inclusive) of the damage-score bands
DAMAGE_BAND_EDGES = (0.0, 2.0, 4.0)

## @brief Lower edges (inclusive) of the minor/moderate/severe priority bands
PRIORITY_BAND_EDGES = (0.2, 0.5, 0.7)


def damage_band(score: Optional[float]) -> str:
    """Band of one observation damage score (missing counts as 0)."""
    score = score or 0.0
    if score <= DAMAGE_BAND_EDGES[0]:
        return "none"
    if score <= DAMAGE_BAND_EDGES[1]:
        return "minor"
    if score <= DAMAGE_BAND_EDGES[2]:
        return "moderate"
    return "severe"


def priority_band(score: Optional[float]) -> str:
    """Band of one AHP priority score (missing counts as 0)."""
    score = score or 0.0
    if score >= PRIORITY_BAND_EDGES[2]:
        return "severe"
    if score >= PRIORITY_BAND_EDGES[1]:
        return "moderate"
    if score >= PRIORITY_BAND_EDGES[0]:
        return "minor"
    return "none"


def _summarize(scores: Union[Iterable[float], Mapping[Any, float]], edges, right: bool,
               now: Optional[datetime]) -> Dict[str, Any]:
    if isinstance(scores, Mapping):
        scores = scores.values()
    series = pd.Series(list(scores), dtype="float64").fillna(0.0)

    bands = pd.cut(series, bins=[-np.inf, *edges, np.inf], labels=BANDS, right=right)
    counts = bands.value_counts().reindex(BANDS, fill_value=0)

    summary: Dict[str, Any] = {band: int(counts[band]) for band in BANDS}
    summary["total"] = int(len(series))
    summary["last_updated"] = (now or datetime.now(timezone.utc)).isoformat()
    return summary


def summarize_damage_scores(scores, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    @brief Count observation damage scores per band
    @param scores Iterable of scores, or a mapping whose values are scores
    @return Dict with one count per band, total and last_updated
    """
    return _summarize(scores, DAMAGE_BAND_EDGES, right=True, now=now)


def summarize_priority_scores(scores, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    @brief Count AHP priority scores per band
    @param scores Iterable of scores, or a mapping whose values are scores
    @return Dict with one count per band, total and last_updated
    """
    return _summarize(scores, PRIORITY_BAND_EDGES, right=False, now=now)
