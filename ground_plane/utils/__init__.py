"""
Utility Functions and Helpers

Common utilities for ground plane estimation.
"""

from .config_manager import ConfigManager
from .cloud_checks import too_many_nan, count_invalid_points

__all__ = ['ConfigManager', 'too_many_nan', 'count_invalid_points']
