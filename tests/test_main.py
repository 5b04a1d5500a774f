"""
Tests for the command line entry point.
"""

import numpy as np
import yaml

from ground_plane.main import main, load_frame


class TestMain:
    """Test suite for the CLI."""

    def test_automatic_estimation(self, tmp_path, floor_and_wall_points):
        input_path = tmp_path / "frame.npy"
        output_path = tmp_path / "ground.yaml"
        np.save(input_path, floor_and_wall_points)

        exit_code = main(["--input", str(input_path), "--mode", "3", "--output", str(output_path)])

        assert exit_code == 0
        saved = yaml.safe_load(output_path.read_text())
        assert saved['status'] == "success"
        assert saved['mode'] == 3
        np.testing.assert_allclose(saved['coefficients'], [0.0, -1.0, 0.0, 1.0], atol=1e-6)

    def test_no_ground_plane(self, tmp_path, floor_and_wall_points):
        input_path = tmp_path / "wall.npy"
        output_path = tmp_path / "ground.yaml"
        np.save(input_path, floor_and_wall_points[1681:])

        exit_code = main(["--input", str(input_path), "--mode", "3", "--output", str(output_path)])

        assert exit_code == 1
        saved = yaml.safe_load(output_path.read_text())
        assert saved['status'] == "no_candidates"
        assert saved['coefficients'] is None

    def test_too_many_invalid_points(self, tmp_path, floor_and_wall_points):
        points = floor_and_wall_points.copy()
        points[:2000] = np.nan
        input_path = tmp_path / "noisy.npy"
        np.save(input_path, points)

        exit_code = main(["--input", str(input_path), "--mode", "3", "--max-nan-ratio", "0.5"])

        assert exit_code == 1

    def test_missing_input(self, tmp_path):
        assert main(["--input", str(tmp_path / "missing.pcd")]) == 1

    def test_missing_config(self, tmp_path):
        input_path = tmp_path / "frame.npy"
        np.save(input_path, np.zeros((3, 3)))

        assert main(["--input", str(input_path), "--config", str(tmp_path / "none.yaml")]) == 1

    def test_load_ply(self, tmp_path):
        import open3d as o3d

        pcd = o3d.geometry.PointCloud()
        pcd.points = o3d.utility.Vector3dVector(np.random.rand(50, 3))
        path = tmp_path / "frame.ply"
        o3d.io.write_point_cloud(str(path), pcd)

        frame = load_frame(path)

        assert frame.size == 50
