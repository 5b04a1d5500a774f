"""
Surface Normal Estimator

Estimates per-point surface normals with Open3D for plane segmentation.
"""

import numpy as np
import open3d as o3d
from typing import Optional
import logging

from ..data_models import PointCloudFrame
from ..utils.config_manager import ConfigManager


class NormalEstimator:
    """Per-point normal estimation using a hybrid KD-tree neighbourhood search."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """
        Initialize normal estimator.

        Args:
            config_manager: Configuration manager instance
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        normal_config = self.config.get_normal_params()

        self.search_radius = float(normal_config.get('search_radius', 0.1))
        self.max_nn = int(normal_config.get('max_nn', 30))
        self.camera_location = np.asarray(normal_config.get('camera_location', [0.0, 0.0, 0.0]),
                                          dtype=np.float64)

        self.logger.info(f"Normal estimator initialized: radius={self.search_radius}, "
                         f"max_nn={self.max_nn}")

    def estimate(self, frame: PointCloudFrame) -> np.ndarray:
        """
        Estimate normals for every point of the frame.

        Args:
            frame: Input point cloud frame

        Returns:
            (N, 3) array aligned with frame.xyz; rows of non-finite points are NaN
        """
        mask = frame.finite_mask()
        normals = np.full((frame.size, 3), np.nan)

        if not np.any(mask):
            self.logger.warning("No finite points, normals not estimated")
            return normals

        pcd = o3d.geometry.PointCloud()
        pcd.points = o3d.utility.Vector3dVector(frame.xyz[mask])
        pcd.estimate_normals(
            search_param=o3d.geometry.KDTreeSearchParamHybrid(
                radius=self.search_radius,
                max_nn=self.max_nn
            )
        )
        # Face the sensor so normals of one surface share a sign
        pcd.orient_normals_towards_camera_location(camera_location=self.camera_location)

        normals[mask] = np.asarray(pcd.normals)

        self.logger.debug(f"Estimated normals for {int(np.sum(mask))} points")

        return normals
