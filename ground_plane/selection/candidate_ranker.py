"""
Candidate Filtering and Ranking

Selection rules that turn planar region candidates into a single ground plane.
"""

from typing import List, Optional, Sequence, Tuple
import logging

import numpy as np

from ..data_models import PlaneCandidate


logger = logging.getLogger(__name__)

# Sensor axis that points along height. Depth sensor frames use y.
UP_AXIS = 1

# Candidates are ranked from the largest centroid coordinate on UP_AXIS down.
# With a y-down optical frame this puts the lowest physical surface first.
HEIGHT_DESCENDING = True

# Minimum |normal[UP_AXIS]| for a plane to count as horizontal (about 45 deg tilt).
MIN_VERTICAL_COMPONENT = 0.70


def plane_height_comparator(first: PlaneCandidate, second: PlaneCandidate) -> bool:
    """True if the first candidate's centroid is higher on the y axis than the second's."""
    return first.centroid[1] > second.centroid[1]


def sort_by_height(candidates: Sequence[PlaneCandidate],
                   up_axis: int = UP_AXIS,
                   descending: bool = HEIGHT_DESCENDING) -> List[PlaneCandidate]:
    """Order candidates by centroid height; equal heights keep their order."""
    return sorted(candidates, key=lambda c: c.centroid[up_axis], reverse=descending)


def filter_horizontal(candidates: Sequence[PlaneCandidate],
                      min_vertical_component: float = MIN_VERTICAL_COMPONENT,
                      up_axis: int = UP_AXIS) -> List[PlaneCandidate]:
    """
    Drop candidates not compatible with a leveled sensor.

    A candidate survives when the up component of its normal is at least
    min_vertical_component in magnitude.
    """
    kept = []
    for candidate in candidates:
        if abs(candidate.normal[up_axis]) < min_vertical_component:
            logger.debug(f"Rejected tilted plane {candidate.equation_string}")
            continue
        kept.append(candidate)
    return kept


def nearest_candidate(candidates: Sequence[PlaneCandidate],
                      point: Sequence[float]) -> Tuple[Optional[int], float]:
    """
    Find the candidate plane closest to a point.

    Returns:
        (index, distance) of the first candidate with minimal point-to-plane
        distance, or (None, inf) when there are no candidates
    """
    best_index = None
    min_distance = float('inf')

    for i, candidate in enumerate(candidates):
        distance = candidate.distance_to_point(point)
        if distance < min_distance:
            min_distance = distance
            best_index = i

    return best_index, min_distance


def fit_plane_from_points(p1: np.ndarray, p2: np.ndarray, p3: np.ndarray) -> np.ndarray:
    """
    Fit a plane through three 3D points.

    Returns:
        [a, b, c, d] with a unit normal

    Raises:
        ValueError: if the points are collinear
    """
    p1, p2, p3 = (np.asarray(p, dtype=np.float64) for p in (p1, p2, p3))

    normal = np.cross(p2 - p1, p3 - p1)

    norm = np.linalg.norm(normal)
    if norm < 1e-10:
        raise ValueError("Points are collinear")

    normal = normal / norm
    d = -np.dot(normal, p1)

    return np.append(normal, d)
