"""クロソイド（螺旋）区間の評価。

曲率は区間内で ``curv_start`` から ``curv_end`` まで線形に変化する。
方位角は曲率の積分（局所弧長の二次式）となり、座標はその余弦・正弦を
数値積分して求める。
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np
from scipy.integrate import quad

from xodrgeom.geometry.base import GeometryType, RoadGeometry
from xodrgeom.vectors import Box2D, Vec2D


@dataclass
class Spiral(RoadGeometry):
    kind = GeometryType.SPIRAL

    curv_start: float
    curv_end: float
    c_dot: float = field(init=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        self.curv_start = float(self.curv_start)
        self.curv_end = float(self.curv_end)
        if not (math.isfinite(self.curv_start) and math.isfinite(self.curv_end)):
            raise ValueError(f"spiral at s0={self.s0}: curvatures must be finite")
        self.c_dot = (self.curv_end - self.curv_start) / self.length

    def curvature(self, s: float) -> float:
        return self.curv_start + self.c_dot * (s - self.s0)

    def _local_heading(self, ds: float) -> float:
        return ds * (self.curv_start + 0.5 * self.c_dot * ds)

    def heading(self, s: float) -> float:
        return self.hdg0 + self._local_heading(s - self.s0)

    def _integrate(self, ds: float) -> Vec2D:
        """Displacement from the segment start after ``ds`` metres."""

        if ds == 0.0:
            return 0.0, 0.0

        if self.c_dot == 0.0:
            # 曲率変化率ゼロは円弧（または直線）として閉形式で扱う
            k = self.curv_start
            if k == 0.0:
                return ds * math.cos(self.hdg0), ds * math.sin(self.hdg0)
            hdg = self.hdg0 + k * ds
            return (
                (math.sin(hdg) - math.sin(self.hdg0)) / k,
                (math.cos(self.hdg0) - math.cos(hdg)) / k,
            )

        tol = self.config.integration_tolerance
        dx, _ = quad(
            lambda u: math.cos(self.hdg0 + self._local_heading(u)),
            0.0,
            ds,
            epsabs=tol,
            epsrel=tol,
            limit=200,
        )
        dy, _ = quad(
            lambda u: math.sin(self.hdg0 + self._local_heading(u)),
            0.0,
            ds,
            epsabs=tol,
            epsrel=tol,
            limit=200,
        )
        return dx, dy

    def point(self, s: float, t: float = 0.0) -> Vec2D:
        dx, dy = self._integrate(s - self.s0)
        return self._offset(self.x0 + dx, self.y0 + dy, self.heading(s), t)

    def gradient(self, s: float) -> Vec2D:
        hdg = self.heading(s)
        return math.cos(hdg), math.sin(hdg)

    def bounding_box(self) -> Box2D:
        count = self.config.bbox_samples
        s_samples = np.linspace(self.s0, self.s_end, count + 1)
        box = Box2D.from_points(self.point(float(s)) for s in s_samples)

        # サンプル間の弦から曲線が外れる量（サジッタ）の上限で膨らませる
        step = self.length / count
        max_curv = max(abs(self.curv_start), abs(self.curv_end))
        return box.padded(max_curv * step * step / 8.0)

    def project(self, x: float, y: float) -> float:
        return self._project_numerically(x, y)
