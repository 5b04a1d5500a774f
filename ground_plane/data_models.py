"""
Data Models for Ground Plane Estimation

Defines all data structures used throughout the system.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional, Sequence
import logging

import numpy as np
import open3d as o3d


logger = logging.getLogger(__name__)


class GroundPlaneNotFoundError(RuntimeError):
    """Raised when ground plane coefficients are requested from a failed estimation."""


class GroundEstimationMode(IntEnum):
    """Operating modes of the ground plane estimator."""
    MANUAL = 0
    SEMI_AUTOMATIC = 1
    AUTOMATIC_VISUALIZED = 2
    AUTOMATIC_SILENT = 3

    @classmethod
    def from_value(cls, value: int) -> "GroundEstimationMode":
        """Coerce an integer to a mode, falling back to MANUAL when out of range."""
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            logger.warning(f"Invalid mode {value!r} for ground plane estimation, "
                           f"manual mode selected")
            return cls.MANUAL

    @property
    def is_automatic(self) -> bool:
        return self in (GroundEstimationMode.AUTOMATIC_VISUALIZED,
                        GroundEstimationMode.AUTOMATIC_SILENT)


class EstimationStatus(Enum):
    """Outcome of a single ground plane estimation."""
    SUCCESS = "success"
    NO_CANDIDATES = "no_candidates"
    NO_POINT_PICKED = "no_point_picked"
    INSUFFICIENT_POINTS = "insufficient_points"
    DEGENERATE_POINTS = "degenerate_points"
    INVALID_INPUT = "invalid_input"


@dataclass(eq=False)
class PointCloudFrame:
    """
    A single point cloud frame with positions and optional colors.

    Points may be organized (H x W x 3, as delivered by depth sensors) or a
    flat N x 3 array. Invalid measurements are stored as NaN.
    """
    points: np.ndarray  # (N, 3) or (H, W, 3)
    colors: Optional[np.ndarray] = None  # same leading shape, RGB in [0, 1]

    def __post_init__(self):
        self.points = np.asarray(self.points, dtype=np.float64)
        if self.points.ndim not in (2, 3) or self.points.shape[-1] != 3:
            raise ValueError(f"Points must have shape (N, 3) or (H, W, 3), got {self.points.shape}")

        if self.colors is not None:
            self.colors = np.asarray(self.colors, dtype=np.float64)
            if self.colors.shape != self.points.shape:
                raise ValueError("Colors must have the same shape as points")

    @property
    def xyz(self) -> np.ndarray:
        """Flattened (N, 3) view of the point positions."""
        return self.points.reshape(-1, 3)

    @property
    def rgb(self) -> Optional[np.ndarray]:
        """Flattened (N, 3) view of the colors, if any."""
        return None if self.colors is None else self.colors.reshape(-1, 3)

    @property
    def has_colors(self) -> bool:
        return self.colors is not None

    @property
    def is_organized(self) -> bool:
        return self.points.ndim == 3

    @property
    def size(self) -> int:
        return self.xyz.shape[0]

    def finite_mask(self) -> np.ndarray:
        """Boolean mask of points whose x, y and z are all finite."""
        return np.all(np.isfinite(self.xyz), axis=1)

    def with_colors(self, colors: np.ndarray) -> "PointCloudFrame":
        """Return a copy of this frame carrying the given flattened colors."""
        colors = np.asarray(colors, dtype=np.float64).reshape(self.points.shape)
        return PointCloudFrame(points=self.points.copy(), colors=colors)

    def to_open3d(self) -> o3d.geometry.PointCloud:
        """Convert the finite points to an Open3D point cloud."""
        mask = self.finite_mask()
        pcd = o3d.geometry.PointCloud()
        pcd.points = o3d.utility.Vector3dVector(self.xyz[mask])
        if self.has_colors:
            pcd.colors = o3d.utility.Vector3dVector(np.clip(self.rgb[mask], 0.0, 1.0))
        return pcd

    @classmethod
    def from_open3d(cls, pcd: o3d.geometry.PointCloud) -> "PointCloudFrame":
        points = np.asarray(pcd.points)
        colors = np.asarray(pcd.colors) if pcd.has_colors() else None
        return cls(points=points, colors=colors)

    @classmethod
    def from_any(cls, cloud) -> "PointCloudFrame":
        """Wrap a frame, an Open3D point cloud or a point array."""
        if isinstance(cloud, cls):
            return cloud
        if isinstance(cloud, o3d.geometry.PointCloud):
            return cls.from_open3d(cloud)
        return cls(points=np.asarray(cloud))


@dataclass(eq=False)
class PlaneCandidate:
    """Planar region found by multi-plane segmentation."""
    coefficients: np.ndarray  # [a, b, c, d] for aX + bY + cZ + d = 0
    centroid: np.ndarray  # mean of the region's inliers
    inlier_indices: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.int64))

    def __post_init__(self):
        self.coefficients = np.asarray(self.coefficients, dtype=np.float64).reshape(4)
        self.centroid = np.asarray(self.centroid, dtype=np.float64).reshape(3)
        self.inlier_indices = np.asarray(self.inlier_indices, dtype=np.int64)

    @property
    def normal(self) -> np.ndarray:
        return self.coefficients[:3]

    @property
    def offset(self) -> float:
        return float(self.coefficients[3])

    @property
    def inlier_count(self) -> int:
        return int(self.inlier_indices.size)

    def distance_to_point(self, point: Sequence[float]) -> float:
        """Perpendicular distance from a 3D point to the candidate plane."""
        point = np.asarray(point, dtype=np.float64)
        return float(abs(np.dot(self.normal, point) + self.offset) / np.linalg.norm(self.normal))

    def distances_to_points(self, points: np.ndarray) -> np.ndarray:
        """Perpendicular distances for an (N, 3) array; NaN points give NaN."""
        return np.abs(points @ self.normal + self.offset) / np.linalg.norm(self.normal)

    @property
    def equation_string(self) -> str:
        a, b, c, d = self.coefficients
        return f"{a:.4f}x + {b:.4f}y + {c:.4f}z + {d:.4f} = 0"


@dataclass
class PickEvent:
    """Point picked by the operator in an interactive viewer."""
    index: int  # index into the rendered points
    point: np.ndarray  # picked 3D coordinates


@dataclass
class GroundPlaneResult:
    """Results from ground plane estimation."""
    status: EstimationStatus
    mode: GroundEstimationMode
    coefficients: Optional[np.ndarray] = None  # [a, b, c, d], set only on success
    candidate: Optional[PlaneCandidate] = None
    num_candidates: int = 0
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status is EstimationStatus.SUCCESS

    def as_array(self) -> np.ndarray:
        """Return the plane coefficients or raise if no ground plane was found."""
        if not self.success or self.coefficients is None:
            raise GroundPlaneNotFoundError(
                f"No ground plane available ({self.status.value}): {self.message}"
            )
        return self.coefficients

    def to_dict(self) -> dict:
        return {
            'status': self.status.value,
            'mode': int(self.mode),
            'coefficients': None if self.coefficients is None else [float(v) for v in self.coefficients],
            'num_candidates': self.num_candidates,
            'message': self.message,
        }
