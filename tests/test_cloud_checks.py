"""
Tests for the invalid point ratio guard.
"""

import logging

import pytest
import numpy as np
import open3d as o3d
from hypothesis import given, settings, strategies as st

from ground_plane.data_models import PointCloudFrame
from ground_plane.estimation import GroundPlaneEstimator
from ground_plane.utils.cloud_checks import too_many_nan, count_invalid_points


def _cloud_with_invalid(total: int, invalid: int) -> np.ndarray:
    points = np.random.rand(total, 3)
    points[:invalid, 0] = np.nan
    return points


class TestTooManyNaN:
    """Test suite for too_many_nan."""

    def test_ratio_above_threshold(self):
        points = _cloud_with_invalid(10, 3)

        assert too_many_nan(points, 0.2) is True

    def test_ratio_equal_to_threshold(self):
        # 3/10 is not strictly greater than 0.3
        points = _cloud_with_invalid(10, 3)

        assert too_many_nan(points, 0.3) is False

    def test_any_coordinate_counts(self):
        points = np.random.rand(4, 3)
        points[0, 0] = np.nan
        points[1, 1] = np.nan
        points[2, 2] = np.inf

        assert count_invalid_points(points) == 3
        assert too_many_nan(points, 0.7) is True
        assert too_many_nan(points, 0.75) is False

    def test_organized_frame(self):
        points = np.random.rand(4, 5, 3)
        points[0, :, 2] = np.nan
        frame = PointCloudFrame(points=points)

        assert count_invalid_points(frame) == 5
        assert too_many_nan(frame, 0.3) is False
        assert too_many_nan(frame, 0.2) is True

    def test_open3d_cloud(self):
        pcd = o3d.geometry.PointCloud()
        pcd.points = o3d.utility.Vector3dVector(np.random.rand(10, 3))

        assert too_many_nan(pcd, 0.0) is False

    def test_empty_cloud_rejected(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert too_many_nan(np.empty((0, 3)), 1.0) is True
        assert "Empty point cloud" in caplog.text

    def test_estimator_static_method(self):
        points = _cloud_with_invalid(10, 3)

        assert GroundPlaneEstimator.too_many_nan(points, 0.2) is True
        assert GroundPlaneEstimator.too_many_nan(points, 0.3) is False

    @pytest.mark.property
    @settings(max_examples=50)
    @given(
        total=st.integers(min_value=1, max_value=200),
        fraction=st.floats(min_value=0.0, max_value=1.0),
        max_ratio=st.floats(min_value=0.0, max_value=1.0)
    )
    def test_property_strict_ratio(self, total, fraction, max_ratio):
        """Property test: the guard fires exactly when invalid/total > max_ratio."""
        invalid = int(round(fraction * total))
        points = _cloud_with_invalid(total, invalid)

        assert too_many_nan(points, max_ratio) == (invalid / total > max_ratio)
