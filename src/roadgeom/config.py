"""Tolerances and discretisation settings shared across the geometry core."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class GeometryConfig:
    """Numeric settings threaded explicitly through geometry construction."""

    number_tolerance: float = 1e-7
    distance_tolerance: float = 1e-7
    angle_tolerance: float = 1e-7
    deviation_warning_tolerance: float = 0.5
    discretization_step_size: float = 0.7
    circle_slices: int = 16

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{f.name} must be a number, got {value!r}")
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{f.name} must be a positive finite number, got {value!r}")
        if not isinstance(self.circle_slices, int) or self.circle_slices < 3:
            raise ValueError("circle_slices must be an integer of at least 3")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GeometryConfig":
        """Build a config from a mapping, rejecting unknown keys."""

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown geometry config keys: {', '.join(unknown)}")
        return cls(**dict(data))

    def with_overrides(self, **overrides: Any) -> "GeometryConfig":
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_CONFIG = GeometryConfig()


def load_config(path: Path | str) -> GeometryConfig:
    """Load a YAML geometry config and return the resulting ``GeometryConfig``.

    The file may nest the settings under a top-level ``geometry`` key.
    """

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"geometry config not found: {config_path}")
    import yaml

    with config_path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError(f"geometry config must be a mapping, got {type(data)!r}")
    if "geometry" in data:
        data = data["geometry"] or {}
        if not isinstance(data, dict):
            raise ValueError("geometry section must be a mapping")
    return GeometryConfig.from_mapping(data)


__all__ = ["GeometryConfig", "DEFAULT_CONFIG", "load_config"]
