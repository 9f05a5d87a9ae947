"""
Configuration management for mincurv.

This module provides:
- MinCurvatureConfig: Typed configuration dataclass
- ConfigManager: Configuration loading with YAML file and environment support
- create_default_config: Factory function for the default configuration
- load_config: Load configuration from YAML files
"""

from __future__ import annotations

import math
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from mincurv.exceptions import ConfigNotFoundError, ConfigValidationError


@dataclass
class MinCurvatureConfig:
    """
    Configuration parameters for the minimum curvature optimizer.

    Attributes:
        # System matrix
        num_control_points: Control point count used to pre-build the system
            inverse when the system matrix is constant
        constant_system_matrix: Reuse the system inverse while the control
            point count is unchanged

        # Solver parameters
        max_iterations: Maximum OSQP iterations
        warm_start: Start the solver from the previous solution
        verbose: Solver output and timing reports at INFO level
        eps_abs: OSQP absolute tolerance
        eps_rel: OSQP relative tolerance

        # Boundary distance estimation
        num_points_evaluate: Samples taken along each boundary spline
        kdtree_leaf_size: Leaf size of the boundary k-d trees
        num_nearest_neighbors: Boundary samples examined per control point
        shrink_margin: Safety margin subtracted from the lateral freedom [m]

        # Geometry
        normal_epsilon: Tangents shorter than this are treated as degenerate
    """
    # System matrix
    num_control_points: int = 20
    constant_system_matrix: bool = False

    # Solver parameters
    max_iterations: int = 4000
    warm_start: bool = True
    verbose: bool = False
    eps_abs: float = 1e-6
    eps_rel: float = 1e-6

    # Boundary distance estimation
    num_points_evaluate: int = 1000
    kdtree_leaf_size: int = 10
    num_nearest_neighbors: int = 3
    shrink_margin: float = 0.0

    # Geometry
    normal_epsilon: float = 1e-9

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.num_control_points < 2:
            raise ConfigValidationError(
                "num_control_points", "must be >= 2", self.num_control_points
            )
        if self.max_iterations < 1:
            raise ConfigValidationError("max_iterations", "must be >= 1", self.max_iterations)
        if self.eps_abs < 0 or self.eps_rel < 0:
            raise ConfigValidationError(
                "eps_abs/eps_rel", "must be >= 0", (self.eps_abs, self.eps_rel)
            )
        if self.num_points_evaluate < 2:
            raise ConfigValidationError(
                "num_points_evaluate", "must be >= 2", self.num_points_evaluate
            )
        if self.kdtree_leaf_size < 1:
            raise ConfigValidationError("kdtree_leaf_size", "must be >= 1", self.kdtree_leaf_size)
        if not 1 <= self.num_nearest_neighbors <= self.num_points_evaluate:
            raise ConfigValidationError(
                "num_nearest_neighbors",
                "must be in [1, num_points_evaluate]",
                self.num_nearest_neighbors,
            )
        if not math.isfinite(self.shrink_margin) or self.shrink_margin < 0:
            raise ConfigValidationError("shrink_margin", "must be finite and >= 0", self.shrink_margin)
        if not self.normal_epsilon > 0:
            raise ConfigValidationError("normal_epsilon", "must be > 0", self.normal_epsilon)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MinCurvatureConfig":
        """Create config from dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                raise ConfigValidationError(key, "unknown configuration key")
        return cls(**data)


# =============================================================================
# Configuration Manager
# =============================================================================


class ConfigManager:
    """Configuration loading with environment variable support.

    Environment variables take precedence over config files.
    Config files take precedence over defaults.

    Environment variable format: MINCURV_<KEY>
    Example: MINCURV_SHRINK_MARGIN=0.2
    """

    ENV_PREFIX = "MINCURV"
    # Logging variables share the prefix but are not optimizer settings
    RESERVED_ENV_KEYS = {"log_level", "log_format", "log_file"}

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional path to YAML configuration file.
        """
        self._config: Optional[MinCurvatureConfig] = None
        self._config_path = Path(config_path) if config_path else None
        self._raw_config: Dict[str, Any] = {}

    def load(self, validate: bool = True) -> MinCurvatureConfig:
        """Load and return configuration.

        Args:
            validate: Whether to validate configuration after loading.

        Returns:
            Loaded MinCurvatureConfig instance.
        """
        self._raw_config = create_default_config()

        if self._config_path:
            self._load_from_file(self._config_path)

        self._load_from_env()

        self._config = MinCurvatureConfig.from_dict(self._raw_config)

        if validate:
            self._config.validate()

        return self._config

    def _load_from_file(self, path: Path) -> None:
        """Load configuration from YAML file."""
        if not path.exists():
            raise ConfigNotFoundError(str(path))

        with open(path, "r") as f:
            file_config = yaml.safe_load(f)

        if file_config:
            if not isinstance(file_config, dict):
                raise ConfigValidationError(str(path), "top level must be a mapping")
            self._raw_config.update(file_config)

    def _load_from_env(self) -> None:
        """Load configuration from environment variables."""
        prefix = f"{self.ENV_PREFIX}_"
        for key, value in os.environ.items():
            if not key.startswith(prefix):
                continue
            config_key = key[len(prefix):].lower()
            if config_key in self.RESERVED_ENV_KEYS:
                continue
            self._raw_config[config_key] = self._parse_value(value)

    @staticmethod
    def _parse_value(value: str) -> Any:
        """Parse string value to appropriate Python type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    @property
    def config(self) -> MinCurvatureConfig:
        """Get current configuration (loads if not already loaded)."""
        if self._config is None:
            self.load()
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """Get a raw configuration value by key."""
        return self._raw_config.get(key, default)


def create_default_config() -> Dict[str, Any]:
    """Create the default configuration dictionary."""
    return MinCurvatureConfig().to_dict()


def load_config(path: Union[str, Path], validate: bool = True) -> MinCurvatureConfig:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML configuration file.
        validate: Whether to validate configuration.

    Returns:
        Loaded configuration.
    """
    return ConfigManager(path).load(validate=validate)
