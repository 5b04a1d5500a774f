"""
Interactive Point Picking Viewer

Wraps the Open3D editing visualizer used by the operator-facing modes.
"""

import queue
from typing import Optional, Sequence
import logging

import numpy as np
import open3d as o3d

from ..data_models import PointCloudFrame, PickEvent
from ..utils.config_manager import ConfigManager


class PickingViewer:
    """
    Blocking point cloud viewer that reports picked points.

    Picks are published as PickEvent objects on ``pick_events`` once the
    operator closes the window. Shift + left click picks a point, Q closes.
    """

    def __init__(self, window_name: str = "Ground Plane Estimation",
                 config_manager: Optional[ConfigManager] = None):
        """
        Initialize picking viewer.

        Args:
            window_name: Title of the viewer window
            config_manager: Configuration manager instance
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)
        self.window_name = window_name

        vis_config = self.config.get_visualization_params()
        camera = vis_config.get('camera', {})

        self.point_size = float(vis_config.get('point_size', 2.0))
        self.set_camera_pose(
            front=camera.get('front', [0.0, 0.0, -1.0]),
            lookat=camera.get('lookat', [0.0, 0.0, 0.0]),
            up=camera.get('up', [0.0, -1.0, 0.0]),
            zoom=camera.get('zoom', 0.5)
        )

        self.pick_events: "queue.Queue[PickEvent]" = queue.Queue()
        self._geometry: Optional[o3d.geometry.PointCloud] = None
        self._points = np.empty((0, 3))

    def add_cloud(self, frame: PointCloudFrame) -> None:
        """Set the cloud to render, replacing any previous one."""
        self._geometry = frame.to_open3d()
        self._points = np.asarray(self._geometry.points)

    def set_camera_pose(self, front: Sequence[float], lookat: Sequence[float],
                        up: Sequence[float], zoom: float) -> None:
        self.camera_front = np.asarray(front, dtype=np.float64)
        self.camera_lookat = np.asarray(lookat, dtype=np.float64)
        self.camera_up = np.asarray(up, dtype=np.float64)
        self.camera_zoom = float(zoom)

    def spin(self) -> None:
        """Show the window and block until the operator closes it."""
        if self._geometry is None:
            raise ValueError("No cloud added to the viewer")

        vis = o3d.visualization.VisualizerWithEditing()
        vis.create_window(window_name=self.window_name)
        vis.add_geometry(self._geometry)

        render_option = vis.get_render_option()
        if render_option is not None:
            render_option.point_size = self.point_size

        view_control = vis.get_view_control()
        view_control.set_front(self.camera_front)
        view_control.set_lookat(self.camera_lookat)
        view_control.set_up(self.camera_up)
        view_control.set_zoom(self.camera_zoom)

        vis.run()
        vis.destroy_window()

        picked_indices = vis.get_picked_points()
        for index in picked_indices:
            point = self._points[index].copy()
            self.logger.info(f"Picked point: {point[0]:.4f} {point[1]:.4f} {point[2]:.4f}")
            self.pick_events.put(PickEvent(index=int(index), point=point))

        self.logger.debug(f"Viewer '{self.window_name}' closed with {len(picked_indices)} picks")
