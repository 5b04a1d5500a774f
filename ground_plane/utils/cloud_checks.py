"""
Input frame validation helpers.
"""

import logging

import numpy as np

from ..data_models import PointCloudFrame


logger = logging.getLogger(__name__)


def count_invalid_points(cloud) -> int:
    """Number of points with a non-finite x, y or z coordinate."""
    frame = PointCloudFrame.from_any(cloud)
    return int(np.count_nonzero(~frame.finite_mask()))


def too_many_nan(cloud, max_ratio: float) -> bool:
    """
    Check whether a frame holds too many invalid points to be used.

    Args:
        cloud: PointCloudFrame, Open3D point cloud or (N, 3) / (H, W, 3) array
        max_ratio: Maximum tolerated fraction of invalid points

    Returns:
        True if the fraction of points with a non-finite coordinate is strictly
        greater than max_ratio. Empty clouds are always rejected.
    """
    frame = PointCloudFrame.from_any(cloud)
    total = frame.size

    if total == 0:
        logger.warning("Empty point cloud, frame rejected")
        return True

    nan_count = count_invalid_points(frame)
    ratio = nan_count / total

    logger.debug(f"Invalid points: {nan_count}/{total} ({ratio:.3f}), max ratio {max_ratio}")

    return ratio > max_ratio
