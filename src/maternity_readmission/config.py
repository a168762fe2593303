"""
Simulation configuration.

Defaults reproduce the reference run: 500 patients, learning rate 0.5,
2000 iterations, 10-point bias threshold, unseeded randomness.
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass, asdict, fields, replace
import logging
import os

import yaml

from maternity_readmission.exceptions import InvalidInputError

logger = logging.getLogger(__name__)


def _require_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{name} must be an integer, got {value!r}")


def _require_number(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")


@dataclass
class SimulationConfig:
    """Parameters for one simulation run."""
    cohort_size: int = 500
    seed: Optional[int] = None
    learning_rate: float = 0.5
    iterations: int = 2000
    bias_threshold: float = 10.0

    def __post_init__(self):
        _require_int('cohort_size', self.cohort_size)
        _require_int('iterations', self.iterations)
        _require_number('learning_rate', self.learning_rate)
        _require_number('bias_threshold', self.bias_threshold)
        if self.seed is not None:
            _require_int('seed', self.seed)

        if self.cohort_size <= 0:
            raise InvalidInputError(f"cohort_size must be positive, got {self.cohort_size}")
        if self.seed is not None and self.seed < 0:
            raise InvalidInputError(f"seed must be non-negative, got {self.seed}")
        if self.learning_rate <= 0:
            raise InvalidInputError(f"learning_rate must be positive, got {self.learning_rate}")
        if self.iterations < 0:
            raise InvalidInputError(f"iterations must be non-negative, got {self.iterations}")
        if self.bias_threshold < 0:
            raise InvalidInputError(f"bias_threshold must be non-negative, got {self.bias_threshold}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def with_overrides(self, **overrides: Any) -> "SimulationConfig":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def config_from_dict(data: Dict[str, Any]) -> SimulationConfig:
    """Build a config from a mapping, rejecting unknown keys."""
    known = {f.name for f in fields(SimulationConfig)}
    unknown = set(data) - known
    if unknown:
        raise InvalidInputError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
    return SimulationConfig(**data)


def load_config(config_path: str) -> SimulationConfig:
    """
    Load a SimulationConfig from a YAML file.

    Keys not present in the file keep their defaults. An empty file yields
    the default configuration.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidInputError(f"Config file {config_path} must contain a mapping")

    config = config_from_dict(data)
    logger.info(f"Loaded configuration from {config_path}")
    return config
