"""
Ground Plane Selection Module

Implements candidate filtering, height ranking, pick-based selection and region coloring.
"""

from .candidate_ranker import (
    UP_AXIS, HEIGHT_DESCENDING, MIN_VERTICAL_COMPONENT,
    plane_height_comparator, sort_by_height, filter_horizontal,
    nearest_candidate, fit_plane_from_points
)
from .region_colorizer import color_regions

__all__ = [
    'UP_AXIS', 'HEIGHT_DESCENDING', 'MIN_VERTICAL_COMPONENT',
    'plane_height_comparator', 'sort_by_height', 'filter_horizontal',
    'nearest_candidate', 'fit_plane_from_points', 'color_regions'
]
