"""Line and arc segments with closed form evaluation and projection."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List

from xodrgeom.geometry.base import GeometryType, RoadGeometry
from xodrgeom.vectors import Box2D, Vec2D


@dataclass
class Line(RoadGeometry):
    kind = GeometryType.LINE

    def point(self, s: float, t: float = 0.0) -> Vec2D:
        ds = s - self.s0
        x = self.x0 + ds * math.cos(self.hdg0)
        y = self.y0 + ds * math.sin(self.hdg0)
        return self._offset(x, y, self.hdg0, t)

    def gradient(self, s: float) -> Vec2D:
        return math.cos(self.hdg0), math.sin(self.hdg0)

    def bounding_box(self) -> Box2D:
        return Box2D.from_points([self.point(self.s0), self.point(self.s_end)])

    def project(self, x: float, y: float) -> float:
        along = (x - self.x0) * math.cos(self.hdg0) + (y - self.y0) * math.sin(self.hdg0)
        return self.s0 + min(max(along, 0.0), self.length)


@dataclass
class Arc(RoadGeometry):
    kind = GeometryType.ARC

    curvature: float

    def __post_init__(self) -> None:
        super().__post_init__()
        self.curvature = float(self.curvature)
        if not math.isfinite(self.curvature) or self.curvature == 0.0:
            raise ValueError(
                f"arc at s0={self.s0}: curvature must be finite and non-zero, got {self.curvature!r}"
            )

    @property
    def radius(self) -> float:
        return 1.0 / abs(self.curvature)

    @property
    def center(self) -> Vec2D:
        return (
            self.x0 - math.sin(self.hdg0) / self.curvature,
            self.y0 + math.cos(self.hdg0) / self.curvature,
        )

    def heading(self, s: float) -> float:
        return self.hdg0 + self.curvature * (s - self.s0)

    def _point_at_heading(self, hdg: float) -> Vec2D:
        cx, cy = self.center
        return cx + math.sin(hdg) / self.curvature, cy - math.cos(hdg) / self.curvature

    def point(self, s: float, t: float = 0.0) -> Vec2D:
        hdg = self.heading(s)
        x = self.x0 + (math.sin(hdg) - math.sin(self.hdg0)) / self.curvature
        y = self.y0 + (math.cos(self.hdg0) - math.cos(hdg)) / self.curvature
        return self._offset(x, y, hdg, t)

    def gradient(self, s: float) -> Vec2D:
        hdg = self.heading(s)
        return math.cos(hdg), math.sin(hdg)

    def bounding_box(self) -> Box2D:
        hdg_start = self.hdg0
        hdg_end = self.heading(self.s_end)
        lo, hi = min(hdg_start, hdg_end), max(hdg_start, hdg_end)

        points: List[Vec2D] = [self.point(self.s0), self.point(self.s_end)]
        # axis extrema sit at headings that are multiples of pi/2
        quarter = math.pi / 2.0
        k = math.ceil(lo / quarter)
        while k * quarter <= hi:
            points.append(self._point_at_heading(k * quarter))
            k += 1
        return Box2D.from_points(points)

    def project(self, x: float, y: float) -> float:
        cx, cy = self.center
        dx = x - cx
        dy = y - cy
        if math.hypot(dx, dy) <= 1e-12:
            return self.s0

        if self.curvature > 0.0:
            hdg = math.atan2(dx, -dy)
        else:
            hdg = math.atan2(-dx, dy)

        swept = math.copysign(1.0, self.curvature) * (hdg - self.hdg0)
        ds = math.fmod(swept, 2.0 * math.pi)
        if ds < 0.0:
            ds += 2.0 * math.pi
        ds /= abs(self.curvature)
        if ds <= self.length:
            return self.s0 + ds

        # the radial foot point lies outside the arc, so an end point is closest
        d_start = self.distance_sq(self.s0, x, y)
        d_end = self.distance_sq(self.s_end, x, y)
        return self.s0 if d_start <= d_end else self.s_end
