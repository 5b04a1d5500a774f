"""
Ground Plane Estimator

Selects the ground plane of a single point cloud frame in one of four modes:
manual picking, semi-automatic region picking, and automatic selection with
or without a confirmation view.
"""

import queue
from collections import deque
from typing import Callable, List, Optional
import logging

import numpy as np

from ..data_models import (
    PointCloudFrame, PlaneCandidate, PickEvent, GroundPlaneResult,
    GroundEstimationMode, EstimationStatus
)
from ..segmentation import NormalEstimator, MultiPlaneSegmenter
from ..selection import (
    UP_AXIS, HEIGHT_DESCENDING, MIN_VERTICAL_COMPONENT,
    filter_horizontal, sort_by_height, nearest_candidate, fit_plane_from_points,
    color_regions
)
from ..selection.region_colorizer import DEFAULT_VOXEL_SIZE
from ..utils.config_manager import ConfigManager
from ..utils.cloud_checks import too_many_nan
from ..visualization import PickingViewer


MANUAL_PICK_COUNT = 3


class GroundPlaneEstimator:
    """Estimates ground plane coefficients from one point cloud frame."""

    def __init__(self,
                 mode: Optional[int] = None,
                 config_manager: Optional[ConfigManager] = None,
                 segmenter: Optional[MultiPlaneSegmenter] = None,
                 normal_estimator: Optional[NormalEstimator] = None,
                 viewer_factory: Optional[Callable[[str], PickingViewer]] = None,
                 rng: Optional[np.random.Generator] = None):
        """
        Initialize ground plane estimator.

        Args:
            mode: Estimation mode (0-3). Out-of-range values select manual mode.
                  If None, the configured mode is used.
            config_manager: Configuration manager instance
            segmenter: Planar region producer, defaults to MultiPlaneSegmenter
            normal_estimator: Normal producer, defaults to NormalEstimator
            viewer_factory: Callable building a viewer from a window title
            rng: Random generator for region colors
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        if mode is None:
            mode = self.config.get('ground_estimation.mode', 0)
        self.mode = GroundEstimationMode.from_value(mode)

        self.normal_estimator = normal_estimator or NormalEstimator(self.config)
        self.segmenter = segmenter or MultiPlaneSegmenter(self.config)
        self.viewer_factory = viewer_factory or self._default_viewer

        sel_config = self.config.get_selection_params()
        self.min_vertical_component = float(sel_config.get('min_vertical_component',
                                                           MIN_VERTICAL_COMPONENT))
        self.up_axis = int(sel_config.get('up_axis', UP_AXIS))
        self.height_descending = bool(sel_config.get('height_descending', HEIGHT_DESCENDING))

        vis_config = self.config.get_visualization_params()
        self.colorize_regions = bool(vis_config.get('colorize_regions', True))
        self.region_voxel_size = float(vis_config.get('region_voxel_size', DEFAULT_VOXEL_SIZE))
        self.camera = vis_config.get('camera', {})
        self.rng = rng or np.random.default_rng(vis_config.get('color_seed'))

        self._cloud: Optional[PointCloudFrame] = None

        self.logger.info(f"Ground plane estimator initialized: mode={self.mode.name}")

    def _default_viewer(self, window_name: str) -> PickingViewer:
        return PickingViewer(window_name, self.config)

    def set_input_cloud(self, cloud) -> None:
        """
        Set the frame used by the next compute() call.

        The cloud is borrowed and must not be modified until compute() returns.
        """
        self._cloud = PointCloudFrame.from_any(cloud)

    @staticmethod
    def too_many_nan(cloud, max_ratio: float) -> bool:
        """True if more than max_ratio of the cloud's points are invalid."""
        return too_many_nan(cloud, max_ratio)

    def compute(self) -> GroundPlaneResult:
        """
        Estimate the ground plane of the current input cloud.

        Returns:
            GroundPlaneResult; check ``success`` before using the coefficients

        Raises:
            ValueError: if no input cloud has been set
        """
        if self._cloud is None:
            raise ValueError("Input cloud not set, call set_input_cloud() first")

        frame = self._cloud
        if frame.size == 0 or not np.any(frame.finite_mask()):
            return self._failure(EstimationStatus.INVALID_INPUT,
                                 "Input cloud has no valid points")

        if self.mode is GroundEstimationMode.MANUAL:
            return self._compute_manual(frame)
        if self.mode is GroundEstimationMode.SEMI_AUTOMATIC:
            return self._compute_semi_automatic(frame)
        return self._compute_automatic(frame)

    def _compute_manual(self, frame: PointCloudFrame) -> GroundPlaneResult:
        self.logger.info("Manual mode for ground plane estimation")
        self.logger.info("Shift+click on three floor points, then press 'Q'...")

        viewer = self._show(frame, "Pick 3 points")

        # Only the most recent picks are kept
        points = deque(maxlen=MANUAL_PICK_COUNT)
        for event in self._drain_picks(viewer):
            points.append(event.point)

        if len(points) < MANUAL_PICK_COUNT:
            return self._failure(EstimationStatus.INSUFFICIENT_POINTS,
                                 f"{MANUAL_PICK_COUNT} points are needed, {len(points)} picked")

        try:
            coefficients = fit_plane_from_points(*points)
        except ValueError as e:
            return self._failure(EstimationStatus.DEGENERATE_POINTS, f"Picked points rejected: {e}")

        return self._success(coefficients)

    def _compute_semi_automatic(self, frame: PointCloudFrame) -> GroundPlaneResult:
        self.logger.info("Semi-automatic mode for ground plane estimation")

        candidates = self._segment(frame)
        if not candidates:
            return self._failure(EstimationStatus.NO_CANDIDATES, "No planar regions found",
                                 level=logging.ERROR)

        view = frame
        if self.colorize_regions:
            view = color_regions(frame, candidates, voxel_size=self.region_voxel_size, rng=self.rng)

        self.logger.info("Shift+click on a floor point, then press 'Q'...")
        viewer = self._show(view, "Select ground plane")

        picks = self._drain_picks(viewer)
        if not picks:
            return self._failure(EstimationStatus.NO_POINT_PICKED, "No point was picked",
                                 num_candidates=len(candidates))

        picked_point = picks[-1].point
        index, distance = nearest_candidate(candidates, picked_point)
        self.logger.debug(f"Picked point {picked_point} is {distance:.4f} from region {index}")

        return self._success(candidates[index].coefficients, candidates[index], len(candidates))

    def _compute_automatic(self, frame: PointCloudFrame) -> GroundPlaneResult:
        self.logger.info("Automatic mode for ground plane estimation")

        candidates = self._segment(frame)
        horizontal = filter_horizontal(candidates, self.min_vertical_component, self.up_axis)
        ranked = sort_by_height(horizontal, self.up_axis, self.height_descending)

        self.logger.debug(f"{len(ranked)} of {len(candidates)} regions compatible with a leveled sensor")

        if not ranked:
            return self._failure(EstimationStatus.NO_CANDIDATES, "No valid ground plane found",
                                 num_candidates=len(candidates), level=logging.ERROR)

        chosen = ranked[0]

        if self.mode is GroundEstimationMode.AUTOMATIC_VISUALIZED:
            view = frame
            if self.colorize_regions:
                view = color_regions(frame, ranked, highlight_index=0,
                                     voxel_size=self.region_voxel_size, rng=self.rng)
            self.logger.info("Ground plane shown in red, press 'Q' to continue...")
            self._show(view, "Ground plane")

        return self._success(chosen.coefficients, chosen, len(candidates))

    def _segment(self, frame: PointCloudFrame) -> List[PlaneCandidate]:
        normals = self.normal_estimator.estimate(frame)
        return self.segmenter.segment(frame, normals)

    def _show(self, frame: PointCloudFrame, window_name: str) -> PickingViewer:
        """Render a frame and block until the viewer is dismissed."""
        viewer = self.viewer_factory(window_name)
        viewer.add_cloud(frame)
        if self.camera:
            viewer.set_camera_pose(
                front=self.camera.get('front', [0.0, 0.0, -1.0]),
                lookat=self.camera.get('lookat', [0.0, 0.0, 0.0]),
                up=self.camera.get('up', [0.0, -1.0, 0.0]),
                zoom=self.camera.get('zoom', 0.5)
            )
        viewer.spin()
        return viewer

    @staticmethod
    def _drain_picks(viewer: PickingViewer) -> List[PickEvent]:
        picks = []
        while True:
            try:
                picks.append(viewer.pick_events.get_nowait())
            except queue.Empty:
                return picks

    def _success(self, coefficients: np.ndarray,
                 candidate: Optional[PlaneCandidate] = None,
                 num_candidates: int = 0) -> GroundPlaneResult:
        coefficients = np.asarray(coefficients, dtype=np.float64).copy()
        a, b, c, d = coefficients
        self.logger.info(f"Ground plane coefficients: {a}, {b}, {c}, {d}")

        return GroundPlaneResult(
            status=EstimationStatus.SUCCESS,
            mode=self.mode,
            coefficients=coefficients,
            candidate=candidate,
            num_candidates=num_candidates,
            message="Ground plane found"
        )

    def _failure(self, status: EstimationStatus, message: str,
                 num_candidates: int = 0, level: int = logging.WARNING) -> GroundPlaneResult:
        self.logger.log(level, message)

        return GroundPlaneResult(
            status=status,
            mode=self.mode,
            num_candidates=num_candidates,
            message=message
        )
