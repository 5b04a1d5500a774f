"""
Planar Region Segmentation Module

Implements normal estimation and multi-plane segmentation on point cloud frames.
"""

from .normal_estimator import NormalEstimator
from .plane_segmenter import MultiPlaneSegmenter

__all__ = ['NormalEstimator', 'MultiPlaneSegmenter']
