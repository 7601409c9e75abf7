"""Numeric tolerances used by the geometry kernel."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

import yaml


@dataclass(frozen=True)
class GeometryConfig:
    """Tolerances and iteration caps for the numeric parts of the kernel.

    Parameters
    ----------
    projection_samples:
        Number of intervals used to seed the closest point search on curves
        without a closed form projection.
    projection_xtol:
        Absolute arc length tolerance of the bounded minimisation.
    projection_max_iter:
        Iteration cap of the bounded minimisation.
    bbox_samples:
        Number of intervals sampled for the spiral bounding box.
    arclength_intervals:
        Number of Gauss-Legendre intervals of the parametric arc length table.
    integration_tolerance:
        Absolute and relative tolerance of the clothoid quadrature.
    newton_max_iter:
        Iteration cap of the arc length inversion.
    """

    projection_samples: int = 32
    projection_xtol: float = 1e-10
    projection_max_iter: int = 200
    bbox_samples: int = 64
    arclength_intervals: int = 256
    integration_tolerance: float = 1e-10
    newton_max_iter: int = 16

    def __post_init__(self) -> None:
        for name in ("projection_samples", "bbox_samples", "arclength_intervals"):
            if getattr(self, name) < 2:
                raise ValueError(f"geometry.{name} must be at least 2")
        for name in ("projection_max_iter", "newton_max_iter"):
            if getattr(self, name) < 1:
                raise ValueError(f"geometry.{name} must be positive")
        for name in ("projection_xtol", "integration_tolerance"):
            if not getattr(self, name) > 0.0:
                raise ValueError(f"geometry.{name} must be positive")

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> "GeometryConfig":
        if mapping is None:
            return cls()
        if not isinstance(mapping, Mapping):
            raise TypeError("geometry configuration must be a mapping if provided")

        values = {}
        for field in fields(cls):
            if field.name not in mapping:
                continue
            raw = mapping[field.name]
            if isinstance(raw, bool):
                raise TypeError(f"geometry.{field.name} must be a number")
            try:
                number = float(raw)
            except (TypeError, ValueError) as exc:
                raise TypeError(f"geometry.{field.name} must be a number") from exc
            if field.type in (int, "int"):
                if not number.is_integer():
                    raise TypeError(f"geometry.{field.name} must be a whole number")
                values[field.name] = int(number)
            else:
                values[field.name] = number
        return cls(**values)


DEFAULT_CONFIG = GeometryConfig()


def load_config(config_path: str) -> GeometryConfig:
    """Read the ``geometry`` section of a YAML file into a :class:`GeometryConfig`."""

    with open(config_path, encoding="utf-8") as fh:
        cfg = yaml.safe_load(fh) or {}
    if not isinstance(cfg, dict):
        raise TypeError("configuration root must be a mapping")
    return GeometryConfig.from_mapping(cfg.get("geometry"))
