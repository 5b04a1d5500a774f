"""
Ground Plane Estimation Module

Implements the mode-driven ground plane estimator.
"""

from .ground_plane_estimator import GroundPlaneEstimator

__all__ = ['GroundPlaneEstimator']
