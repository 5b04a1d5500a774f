"""
Configuration Management System

Handles loading, validation, and management of ground plane estimation parameters.
"""

import yaml
from typing import Dict, Any, Optional
from pathlib import Path


class ConfigManager:
    """Manages configuration parameters for ground plane estimation."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to configuration file. If None, uses default config.
        """
        self.config_path = config_path or self._get_default_config_path()
        self.config = self._load_config()
        self._validate_config()

    def _get_default_config_path(self) -> str:
        """Get path to default configuration file."""
        package_dir = Path(__file__).parent.parent
        return str(package_dir / "config" / "default_config.yaml")

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        try:
            with open(self.config_path, 'r') as file:
                config = yaml.safe_load(file)
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing configuration file: {e}")
        return config or {}

    def _validate_config(self) -> None:
        """Validate configuration parameters for consistency and feasibility."""
        # Segmentation parameters
        seg = self.config.get('segmentation', {})
        if int(seg.get('min_inliers', 500)) < 3:
            raise ValueError("segmentation.min_inliers must be at least 3")
        if float(seg.get('distance_threshold', 0.2)) <= 0:
            raise ValueError("segmentation.distance_threshold must be positive")
        if float(seg.get('angular_threshold_deg', 2.0)) <= 0:
            raise ValueError("segmentation.angular_threshold_deg must be positive")

        # Normal estimation
        normals = self.config.get('normals', {})
        if float(normals.get('search_radius', 0.1)) <= 0:
            raise ValueError("normals.search_radius must be positive")

        # Candidate selection
        sel = self.config.get('selection', {})
        min_vertical = float(sel.get('min_vertical_component', 0.70))
        if not 0.0 <= min_vertical <= 1.0:
            raise ValueError("selection.min_vertical_component must be within [0, 1]")
        if sel.get('up_axis', 1) not in (0, 1, 2):
            raise ValueError("selection.up_axis must be 0, 1 or 2")

        # Visualization
        vis = self.config.get('visualization', {})
        if float(vis.get('region_voxel_size', 0.06)) <= 0:
            raise ValueError("visualization.region_voxel_size must be positive")

        # Frame validation
        val = self.config.get('validation', {})
        max_nan_ratio = float(val.get('max_nan_ratio', 0.9))
        if not 0.0 <= max_nan_ratio <= 1.0:
            raise ValueError("validation.max_nan_ratio must be within [0, 1]")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'segmentation.min_inliers')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'segmentation.min_inliers')
            value: Value to set
        """
        keys = key.split('.')
        config_ref = self.config

        for k in keys[:-1]:
            if k not in config_ref:
                config_ref[k] = {}
            config_ref = config_ref[k]

        config_ref[keys[-1]] = value
        self._validate_config()

    def save(self, output_path: Optional[str] = None) -> None:
        """
        Save current configuration to file.

        Args:
            output_path: Path to save configuration. If None, overwrites current file.
        """
        save_path = output_path or self.config_path

        with open(save_path, 'w') as file:
            yaml.dump(self.config, file, default_flow_style=False, indent=2)

    def get_estimation_params(self) -> Dict[str, Any]:
        """Get mode selection parameters as a dictionary."""
        return self.config.get('ground_estimation', {})

    def get_normal_params(self) -> Dict[str, Any]:
        """Get normal estimation parameters as a dictionary."""
        return self.config.get('normals', {})

    def get_segmentation_params(self) -> Dict[str, Any]:
        """Get multi-plane segmentation parameters as a dictionary."""
        return self.config.get('segmentation', {})

    def get_selection_params(self) -> Dict[str, Any]:
        """Get candidate filtering and ranking parameters as a dictionary."""
        return self.config.get('selection', {})

    def get_visualization_params(self) -> Dict[str, Any]:
        """Get viewer and region coloring parameters as a dictionary."""
        return self.config.get('visualization', {})

    def get_validation_params(self) -> Dict[str, Any]:
        """Get input frame validation parameters as a dictionary."""
        return self.config.get('validation', {})
