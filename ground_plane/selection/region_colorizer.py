"""
Region coloring for the operator-facing views.
"""

from typing import Optional, Sequence

import numpy as np

from ..data_models import PointCloudFrame, PlaneCandidate


DEFAULT_VOXEL_SIZE = 0.06
BASE_GRAY = (0.6, 0.6, 0.6)
HIGHLIGHT_RED = (1.0, 0.0, 0.0)


def color_regions(frame: PointCloudFrame,
                  candidates: Sequence[PlaneCandidate],
                  highlight_index: int = -1,
                  voxel_size: float = DEFAULT_VOXEL_SIZE,
                  rng: Optional[np.random.Generator] = None) -> PointCloudFrame:
    """
    Paint every candidate region of a frame with its own random color.

    Points within voxel_size of a candidate plane take that candidate's color;
    later candidates overwrite earlier ones. If highlight_index is non-negative
    the corresponding candidate is painted red afterwards.

    Args:
        frame: Frame to color. It is not modified.
        candidates: Planar region candidates
        highlight_index: Candidate to paint red, or -1 for none
        voxel_size: Distance from a plane within which points are painted
        rng: Random generator for region colors

    Returns:
        New frame with the same points and the region colors
    """
    rng = rng or np.random.default_rng()

    if frame.has_colors:
        colors = frame.rgb.copy()
    else:
        colors = np.tile(np.asarray(BASE_GRAY), (frame.size, 1))

    xyz = frame.xyz
    for candidate in candidates:
        mask = _points_near_plane(xyz, candidate, voxel_size)
        colors[mask] = rng.integers(0, 256, size=3) / 255.0

    if highlight_index >= 0 and len(candidates) > 0:
        mask = _points_near_plane(xyz, candidates[highlight_index], voxel_size)
        colors[mask] = HIGHLIGHT_RED

    return frame.with_colors(colors)


def _points_near_plane(xyz: np.ndarray, candidate: PlaneCandidate, distance: float) -> np.ndarray:
    with np.errstate(invalid='ignore'):
        return candidate.distances_to_points(xyz) <= distance
