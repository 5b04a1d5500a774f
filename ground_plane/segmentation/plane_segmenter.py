"""
Multi-Plane Segmenter

Extracts planar region candidates from a point cloud frame using repeated
Open3D RANSAC plane fitting, normal consistency checks and coplanar merging.
"""

import numpy as np
import open3d as o3d
from typing import List, Optional
import logging

from ..data_models import PointCloudFrame, PlaneCandidate
from ..utils.config_manager import ConfigManager


class MultiPlaneSegmenter:
    """Segments a frame into planar region candidates."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """
        Initialize multi-plane segmenter.

        Args:
            config_manager: Configuration manager instance
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        seg_config = self.config.get_segmentation_params()

        self.min_inliers = int(seg_config.get('min_inliers', 500))
        self.angular_threshold = np.deg2rad(float(seg_config.get('angular_threshold_deg', 2.0)))
        self.distance_threshold = float(seg_config.get('distance_threshold', 0.2))
        self.normal_agreement = np.deg2rad(float(seg_config.get('normal_agreement_deg', 15.0)))
        self.ransac_n = int(seg_config.get('ransac_n', 3))
        self.num_iterations = int(seg_config.get('num_iterations', 1000))
        self.max_planes = int(seg_config.get('max_planes', 10))
        self.random_seed = seg_config.get('random_seed')

        self.viewpoint = np.asarray(self.config.get('normals.camera_location', [0.0, 0.0, 0.0]),
                                    dtype=np.float64)

        self.logger.info(f"Multi-plane segmenter initialized: min_inliers={self.min_inliers}, "
                         f"angular_threshold={self.angular_threshold:.4f} rad, "
                         f"distance_threshold={self.distance_threshold}")

    def segment(self, frame: PointCloudFrame,
                normals: Optional[np.ndarray] = None) -> List[PlaneCandidate]:
        """
        Find planar regions in a frame.

        Args:
            frame: Input point cloud frame
            normals: Optional (N, 3) per-point normals aligned with frame.xyz.
                     When given, RANSAC inliers whose normal disagrees with the
                     plane are left out of the region.

        Returns:
            Planar region candidates in discovery order (largest first)
        """
        xyz = frame.xyz
        remaining = np.flatnonzero(frame.finite_mask())

        if self.random_seed is not None:
            o3d.utility.random.seed(int(self.random_seed))

        regions = []
        while remaining.size >= self.min_inliers and len(regions) < self.max_planes:
            pcd = o3d.geometry.PointCloud()
            pcd.points = o3d.utility.Vector3dVector(xyz[remaining])

            try:
                plane_model, inliers = pcd.segment_plane(
                    distance_threshold=self.distance_threshold,
                    ransac_n=self.ransac_n,
                    num_iterations=self.num_iterations
                )
            except RuntimeError as e:
                self.logger.debug(f"RANSAC stopped: {e}")
                break

            members = remaining[np.asarray(inliers, dtype=np.int64)]

            if normals is not None:
                members = self._filter_by_normal(members, normals, np.asarray(plane_model[:3]))

            if members.size < self.min_inliers:
                self.logger.debug(f"Region with {members.size} inliers below minimum, stopping")
                break

            regions.append(self._fit_region(xyz, members))
            remaining = np.setdiff1d(remaining, members, assume_unique=True)

        candidates = self._merge_coplanar(xyz, regions)

        self.logger.info(f"Found {len(candidates)} planar regions")
        for i, candidate in enumerate(candidates):
            self.logger.debug(f"Region {i}: {candidate.equation_string}, "
                              f"{candidate.inlier_count} inliers, centroid {candidate.centroid}")

        return candidates

    def _filter_by_normal(self, members: np.ndarray, normals: np.ndarray,
                          plane_normal: np.ndarray) -> np.ndarray:
        """Keep inliers whose estimated normal is close to the plane normal."""
        plane_normal = plane_normal / np.linalg.norm(plane_normal)
        with np.errstate(invalid='ignore'):
            alignment = np.abs(normals[members] @ plane_normal)
            keep = alignment >= np.cos(self.normal_agreement)
        return members[keep]

    def _fit_region(self, xyz: np.ndarray, members: np.ndarray) -> PlaneCandidate:
        """Least-squares plane through a region's inliers, normal facing the viewpoint."""
        points = xyz[members]
        centroid = points.mean(axis=0)

        # Smallest singular vector of the centered points is the plane normal
        _, _, vh = np.linalg.svd(points - centroid, full_matrices=False)
        normal = vh[-1]
        if np.dot(normal, self.viewpoint - centroid) < 0:
            normal = -normal

        d = -float(np.dot(normal, centroid))

        return PlaneCandidate(
            coefficients=np.append(normal, d),
            centroid=centroid,
            inlier_indices=np.sort(members)
        )

    def _are_coplanar(self, first: PlaneCandidate, second: PlaneCandidate) -> bool:
        cos_angle = np.clip(np.dot(first.normal, second.normal), -1.0, 1.0)
        angle = np.arccos(cos_angle)
        return (angle < self.angular_threshold and
                abs(first.offset - second.offset) < self.distance_threshold)

    def _merge_coplanar(self, xyz: np.ndarray,
                        candidates: List[PlaneCandidate]) -> List[PlaneCandidate]:
        """Merge regions that lie on the same plane."""
        candidates = list(candidates)

        merged = True
        while merged:
            merged = False
            for i in range(len(candidates)):
                for j in range(i + 1, len(candidates)):
                    if self._are_coplanar(candidates[i], candidates[j]):
                        members = np.concatenate([candidates[i].inlier_indices,
                                                  candidates[j].inlier_indices])
                        candidates[i] = self._fit_region(xyz, members)
                        del candidates[j]
                        merged = True
                        break
                if merged:
                    break

        return candidates
