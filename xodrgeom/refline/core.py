"""参照線（planView）の評価。

区間は開始弧長 ``s0`` をキーに順序付けて保持し、問い合わせは ``s`` 以下で
最大のキーを持つ区間へ委譲する。範囲外の ``s`` は例外にせず端へ丸める。
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from xodrgeom.geometry.base import TIE_TOLERANCE, RoadGeometry
from xodrgeom.profile.core import CubicProfile, StepFunction
from xodrgeom.vectors import Box2D, Vec2D, Vec3D

logger = logging.getLogger(__name__)


class RefLine:
    """Reference line made of ordered geometry segments plus an elevation profile."""

    def __init__(
        self,
        road_id: str,
        geometries: Iterable[RoadGeometry],
        elevation_profile: Optional[CubicProfile] = None,
    ):
        self.road_id = road_id
        ordered = list(geometries)
        if not ordered:
            raise ValueError(f"road #{road_id}: reference line needs at least one geometry")

        self.s0_to_geometry: StepFunction[RoadGeometry] = StepFunction(
            (geom.s0, geom) for geom in ordered
        )
        self.elevation_profile = elevation_profile if elevation_profile is not None else CubicProfile()
        self.s_start = self.s0_to_geometry.keys()[0]
        self.length = max(geom.s_end for geom in ordered)
        logger.debug(
            "road #%s: reference line with %d geometries, length %.3f",
            road_id,
            len(ordered),
            self.length,
        )

    def get_geometries(self) -> List[RoadGeometry]:
        return self.s0_to_geometry.values()

    def _clamp(self, s: float) -> float:
        return min(max(s, self.s_start), self.length)

    def get_geometry(self, s: float) -> RoadGeometry:
        _, geometry = self.s0_to_geometry.find(self._clamp(s))
        return geometry

    def get_geometry_s0(self, s: float) -> float:
        return self.get_geometry(s).s0

    def get_xy(self, s: float, t: float = 0.0) -> Vec2D:
        s = self._clamp(s)
        return self.get_geometry(s).point(s, t)

    def get_xyz(self, s: float) -> Vec3D:
        s = self._clamp(s)
        x, y = self.get_geometry(s).point(s)
        return x, y, self.elevation_profile.get(s)

    def get_grad(self, s: float) -> Vec3D:
        s = self._clamp(s)
        dx, dy = self.get_geometry(s).gradient(s)
        return dx, dy, self.elevation_profile.get_grad(s)

    def get_bbox(self) -> Box2D:
        boxes = [geom.bounding_box() for geom in self.get_geometries()]
        box = boxes[0]
        for other in boxes[1:]:
            box = box.union(other)
        return box

    def project(self, x: float, y: float) -> float:
        """Arc length of the reference line point closest to ``(x, y)``."""

        best_s = 0.0
        best_dist = None
        for geom in self.get_geometries():
            s = geom.project(x, y)
            dist = geom.distance_sq(s, x, y)
            # 同距離の場合は ``s`` の小さい候補を優先する（区間は昇順）
            if best_dist is None or dist < best_dist - TIE_TOLERANCE:
                best_s = s
                best_dist = dist
        return best_s
