"""
Interactive Visualization Module

Implements the blocking point picking viewer used by the operator-facing modes.
"""

from .picking_viewer import PickingViewer

__all__ = ['PickingViewer']
