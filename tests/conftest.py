"""
Pytest configuration and fixtures for ground plane estimation tests.
"""

import queue

import pytest
import numpy as np

from ground_plane.data_models import PointCloudFrame, PlaneCandidate, PickEvent
from ground_plane.utils.config_manager import ConfigManager


def pytest_configure(config):
    config.addinivalue_line("markers", "property: property-based tests")


def make_grid_plane(axis: int, value: float, ranges, step: float = 0.05) -> np.ndarray:
    """Regular grid of points on the plane where coordinate ``axis`` equals ``value``."""
    (lo0, hi0), (lo1, hi1) = ranges
    u = np.arange(lo0, hi0 + step / 2, step)
    v = np.arange(lo1, hi1 + step / 2, step)
    uu, vv = np.meshgrid(u, v)
    other_axes = [a for a in range(3) if a != axis]

    points = np.zeros((uu.size, 3))
    points[:, axis] = value
    points[:, other_axes[0]] = uu.ravel()
    points[:, other_axes[1]] = vv.ravel()
    return points


def make_candidate(coefficients, centroid, inliers=600) -> PlaneCandidate:
    return PlaneCandidate(
        coefficients=np.asarray(coefficients, dtype=float),
        centroid=np.asarray(centroid, dtype=float),
        inlier_indices=np.arange(inliers)
    )


class ScriptedViewer:
    """Viewer stand-in that publishes a fixed list of picks when spun."""

    def __init__(self, window_name, picks=()):
        self.window_name = window_name
        self.pick_events = queue.Queue()
        self.frames = []
        self.camera = None
        self.spin_count = 0
        self._picks = [np.asarray(p, dtype=float) for p in picks]

    def add_cloud(self, frame):
        self.frames.append(frame)

    def set_camera_pose(self, front, lookat, up, zoom):
        self.camera = (front, lookat, up, zoom)

    def spin(self):
        self.spin_count += 1
        for i, point in enumerate(self._picks):
            self.pick_events.put(PickEvent(index=i, point=point))


class FixedSegmenter:
    """Segmenter stand-in returning predefined candidates."""

    def __init__(self, candidates):
        self.candidates = list(candidates)
        self.calls = 0

    def segment(self, frame, normals=None):
        self.calls += 1
        return list(self.candidates)


class NullNormalEstimator:
    def estimate(self, frame):
        return None


@pytest.fixture
def config_manager():
    """Fixture providing a configuration manager instance."""
    return ConfigManager()


@pytest.fixture
def seeded_config():
    """Configuration with deterministic RANSAC and region colors."""
    config = ConfigManager()
    config.set('segmentation.random_seed', 42)
    config.set('visualization.color_seed', 7)
    return config


@pytest.fixture
def viewer_factory():
    """
    Fixture returning ``make(picks)``, which builds a viewer factory.

    Every viewer created by the factory is appended to ``make.created``.
    """
    created = []

    def make(picks=()):
        def factory(window_name):
            viewer = ScriptedViewer(window_name, picks)
            created.append(viewer)
            return viewer
        return factory

    make.created = created
    return make


@pytest.fixture
def small_frame():
    """Small finite frame for tests that replace segmentation."""
    points = make_grid_plane(1, 1.0, [(-0.5, 0.5), (1.0, 2.0)], step=0.1)
    return PointCloudFrame(points=points)


@pytest.fixture
def floor_and_wall_points():
    """Floor at y = 1 (y-down sensor frame) and a wall at z = 3.5."""
    floor = make_grid_plane(1, 1.0, [(-1.0, 1.0), (1.0, 3.0)])
    wall = make_grid_plane(2, 3.5, [(-1.0, 1.0), (-1.0, 0.4)])
    return np.vstack([floor, wall])


@pytest.fixture
def floor_and_table_points():
    """Floor at y = 1 and a large table top at y = 0.5."""
    floor = make_grid_plane(1, 1.0, [(-1.0, 1.0), (1.0, 3.0)])
    table = make_grid_plane(1, 0.5, [(-1.0, 1.0), (1.0, 2.0)])
    return np.vstack([floor, table])
