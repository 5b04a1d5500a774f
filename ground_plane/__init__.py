"""
Ground Plane Estimation for Person and Object Tracking

Estimates the floor plane (ax + by + cz + d = 0) of a single depth-sensor point
cloud frame, so that a tracking pipeline can separate floor from foreground.

This package implements:
- Surface normal estimation and multi-plane segmentation with Open3D
- Orientation filtering and height ranking of planar region candidates
- Manual, semi-automatic and automatic ground plane selection
- Interactive point picking and region coloring for operator confirmation
"""

__version__ = "1.0.0"
__author__ = "Ground Plane Estimation Team"

from .estimation import GroundPlaneEstimator
from .segmentation import NormalEstimator, MultiPlaneSegmenter
from .selection import plane_height_comparator, color_regions
from .visualization import PickingViewer
from .utils import ConfigManager, too_many_nan
from .data_models import (
    PointCloudFrame, PlaneCandidate, PickEvent, GroundPlaneResult,
    GroundEstimationMode, EstimationStatus, GroundPlaneNotFoundError
)

__all__ = [
    # Estimation
    'GroundPlaneEstimator',
    # Segmentation
    'NormalEstimator', 'MultiPlaneSegmenter',
    # Selection
    'plane_height_comparator', 'color_regions',
    # Visualization
    'PickingViewer',
    # Utilities
    'ConfigManager', 'too_many_nan',
    # Data Models
    'PointCloudFrame', 'PlaneCandidate', 'PickEvent', 'GroundPlaneResult',
    'GroundEstimationMode', 'EstimationStatus', 'GroundPlaneNotFoundError'
]
