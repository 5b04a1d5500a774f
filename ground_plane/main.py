"""
Main entry point for Ground Plane Estimation

Estimates the ground plane of a single point cloud file and optionally writes
the coefficients to a YAML file.
"""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np
import open3d as o3d
import yaml

from ground_plane.data_models import PointCloudFrame
from ground_plane.estimation import GroundPlaneEstimator
from ground_plane.utils.config_manager import ConfigManager


def load_frame(path: Path) -> PointCloudFrame:
    """Load a point cloud from a .npy array or any format Open3D reads."""
    if path.suffix == ".npy":
        return PointCloudFrame(points=np.load(path))

    pcd = o3d.io.read_point_cloud(str(path), remove_nan_points=False, remove_infinite_points=False)
    return PointCloudFrame.from_open3d(pcd)


def main(argv=None):
    """Main entry point for ground plane estimation."""
    parser = argparse.ArgumentParser(
        description="Ground plane estimation from a single point cloud frame"
    )

    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Point cloud file (.pcd, .ply, .npy, ...)"
    )

    parser.add_argument(
        "--mode",
        type=int,
        help="0 = manual, 1 = semi-automatic, 2 = automatic with view, 3 = automatic"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file"
    )

    parser.add_argument(
        "--max-nan-ratio",
        type=float,
        help="Reject the frame if more than this fraction of points is invalid"
    )

    parser.add_argument(
        "--output",
        type=str,
        help="YAML file to write the estimated coefficients to"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    # Load configuration
    try:
        config = ConfigManager(args.config)
        print(f"Loaded configuration from: {config.config_path}")
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading configuration: {e}")
        return 1

    # Load input frame
    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Input file does not exist: {args.input}")
        return 1

    frame = load_frame(input_path)
    print(f"Loaded {frame.size} points from: {args.input}")

    max_nan_ratio = args.max_nan_ratio
    if max_nan_ratio is None:
        max_nan_ratio = config.get('validation.max_nan_ratio', 0.9)

    estimator = GroundPlaneEstimator(mode=args.mode, config_manager=config)

    if estimator.too_many_nan(frame, max_nan_ratio):
        print(f"Frame rejected: more than {max_nan_ratio:.0%} of points are invalid")
        return 1

    estimator.set_input_cloud(frame)
    result = estimator.compute()

    if args.output:
        with open(args.output, 'w') as file:
            yaml.dump(result.to_dict(), file, default_flow_style=False, indent=2)

    if not result.success:
        print(f"No ground plane found: {result.message}")
        return 1

    a, b, c, d = result.coefficients
    print(f"Ground plane coefficients: {a:.6f}, {b:.6f}, {c:.6f}, {d:.6f}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
