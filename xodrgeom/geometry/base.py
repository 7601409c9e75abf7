"""Shared contract of the reference line segments."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Tuple

import numpy as np
from scipy.optimize import minimize_scalar

from xodrgeom.config import DEFAULT_CONFIG, GeometryConfig
from xodrgeom.vectors import Box2D, Vec2D

logger = logging.getLogger(__name__)

# candidates closer than this (in squared metres) count as a tie
TIE_TOLERANCE = 1e-12


class GeometryType(Enum):
    LINE = "line"
    ARC = "arc"
    SPIRAL = "spiral"
    POLY3 = "poly3"
    PARAM_POLY3 = "paramPoly3"


@dataclass
class RoadGeometry:
    """One segment of a reference line, valid on ``[s0, s0 + length)``.

    Subclasses implement ``point``, ``gradient``, ``bounding_box`` and
    ``project``.  ``kind`` tags the concrete variant.
    """

    kind: ClassVar[GeometryType]

    s0: float
    x0: float
    y0: float
    hdg0: float
    length: float
    config: GeometryConfig = field(
        default=DEFAULT_CONFIG, repr=False, compare=False, kw_only=True
    )

    def __post_init__(self) -> None:
        for name in ("s0", "x0", "y0", "hdg0", "length"):
            value = float(getattr(self, name))
            if not math.isfinite(value):
                raise ValueError(f"{self.kind.value}: {name} must be finite, got {value!r}")
            setattr(self, name, value)
        if self.s0 < 0.0:
            raise ValueError(f"{self.kind.value}: s0 must not be negative, got {self.s0}")
        if self.length <= 0.0:
            raise ValueError(f"{self.kind.value}: length must be positive, got {self.length}")

    @property
    def s_end(self) -> float:
        return self.s0 + self.length

    def point(self, s: float, t: float = 0.0) -> Vec2D:
        raise NotImplementedError

    def gradient(self, s: float) -> Vec2D:
        raise NotImplementedError

    def bounding_box(self) -> Box2D:
        raise NotImplementedError

    def project(self, x: float, y: float) -> float:
        raise NotImplementedError

    def distance_sq(self, s: float, x: float, y: float) -> float:
        px, py = self.point(s)
        return (px - x) ** 2 + (py - y) ** 2

    def _offset(self, x: float, y: float, hdg: float, t: float) -> Vec2D:
        if t == 0.0:
            return x, y
        return x - t * math.sin(hdg), y + t * math.cos(hdg)

    def _project_numerically(self, x: float, y: float) -> float:
        """Closest point search for curves without a closed form projection.

        The segment is sampled to find every local minimum of the squared
        distance, each bracket is refined by a bounded Brent search and the
        best candidate wins; equal distances resolve to the smallest ``s``.
        """

        cfg = self.config
        s_samples = np.linspace(self.s0, self.s_end, cfg.projection_samples + 1)
        dist = np.array([self.distance_sq(float(s), x, y) for s in s_samples])

        candidates: List[Tuple[float, float]] = []
        last = len(s_samples) - 1
        for idx in range(len(s_samples)):
            left = dist[idx - 1] if idx > 0 else math.inf
            right = dist[idx + 1] if idx < last else math.inf
            if dist[idx] > left or dist[idx] > right:
                continue

            candidates.append((float(dist[idx]), float(s_samples[idx])))
            lo = float(s_samples[max(idx - 1, 0)])
            hi = float(s_samples[min(idx + 1, last)])
            if hi - lo <= cfg.projection_xtol:
                continue
            result = minimize_scalar(
                lambda s: self.distance_sq(s, x, y),
                bounds=(lo, hi),
                method="bounded",
                options={"xatol": cfg.projection_xtol, "maxiter": cfg.projection_max_iter},
            )
            if not result.success:
                logger.debug(
                    "%s at s0=%.3f: projection did not converge (%s), keeping best candidate",
                    self.kind.value,
                    self.s0,
                    result.message,
                )
            s_opt = min(max(float(result.x), self.s0), self.s_end)
            candidates.append((self.distance_sq(s_opt, x, y), s_opt))

        best_dist = min(d for d, _ in candidates)
        return min(s for d, s in candidates if d <= best_dist + TIE_TOLERANCE)
