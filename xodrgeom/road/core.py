"""Road level composition of the reference line, tracks and lanes into 3D points."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional

from xodrgeom.lanes.core import Lane, LaneSection
from xodrgeom.profile.core import CubicProfile, Crossfall, StepFunction
from xodrgeom.refline.core import RefLine
from xodrgeom.vectors import (
    Mat3D,
    Vec3D,
    cross_product,
    mat_vec_multiplication,
    normalize,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SurfacePoint:
    """Result of a surface query together with what was used to build it.

    ``diagnostic`` is set when lane data was missing and the point fell back
    to the flat reference line surface.
    """

    xyz: Vec3D
    lanesection_s0: Optional[float] = None
    lane_id: Optional[int] = None
    diagnostic: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.diagnostic is not None


class Road:
    def __init__(
        self,
        road_id: str,
        ref_line: RefLine,
        lanesections: Iterable[LaneSection] = (),
        superelevation: Optional[CubicProfile] = None,
        crossfall: Optional[Crossfall] = None,
        length: Optional[float] = None,
    ):
        self.id = road_id
        self.ref_line = ref_line
        self.superelevation = superelevation if superelevation is not None else CubicProfile()
        self.crossfall = crossfall if crossfall is not None else Crossfall()
        self.length = float(length) if length is not None else ref_line.length
        if not self.length > 0.0:
            raise ValueError(f"road #{road_id}: length must be positive, got {self.length}")

        sections = sorted(lanesections, key=lambda section: section.s0)
        self.s_to_lanesection: StepFunction[LaneSection] = StepFunction(
            (section.s0, section) for section in sections
        )

    def __repr__(self) -> str:
        return f"Road(id={self.id!r}, length={self.length}, lanesections={len(self.s_to_lanesection)})"

    def get_lanesections(self) -> List[LaneSection]:
        return self.s_to_lanesection.values()

    def get_lanesection(self, s: float) -> Optional[LaneSection]:
        entry = self.s_to_lanesection.find(s)
        return entry[1] if entry is not None else None

    def get_lanesection_s0(self, s: float) -> Optional[float]:
        entry = self.s_to_lanesection.find(s)
        return entry[0] if entry is not None else None

    def get_lanesection_end(self, lanesection: LaneSection) -> float:
        next_s0 = self.s_to_lanesection.key_after(lanesection.s0)
        return next_s0 if next_s0 is not None else self.length

    def get_transformation_matrix(self, s: float) -> Mat3D:
        """Frame at ``s`` with columns ``[e_t, e_h, origin]``.

        ``e_t`` is the lateral axis tilted out of plane by the
        superelevation, ``e_h`` the surface normal.
        """

        s_vec = self.ref_line.get_grad(s)
        superelevation = self.superelevation.get(s)

        e_t = normalize((-s_vec[1], s_vec[0], math.tan(superelevation) * abs(s_vec[1])))
        e_h = normalize(cross_product(s_vec, e_t))
        p0 = self.ref_line.get_xyz(s)

        return (
            (e_t[0], e_h[0], p0[0]),
            (e_t[1], e_h[1], p0[1]),
            (e_t[2], e_h[2], p0[2]),
        )

    def get_xyz(self, s: float, t: float, h: float = 0.0) -> Vec3D:
        return mat_vec_multiplication(self.get_transformation_matrix(s), (t, h, 1.0))

    def _lane_height(self, lane: Lane, s: float, t: float) -> float:
        t_inner = lane.inner_border.get(s)
        crossfall = self.crossfall.get_crossfall(s, lane.on_left_side)

        if lane.level:
            # cancel the superelevation tilt of the frame on this lane
            h_inner = -math.tan(crossfall) * abs(t_inner)
            h_t = h_inner + math.tan(self.superelevation.get(s)) * (t - t_inner)
        else:
            h_t = -math.tan(crossfall) * abs(t)

        found = lane.s_to_height_offset.find_with_next(s)
        if found is None:
            return h_t

        (key, offset), following = found
        t_outer = lane.outer_border.get(s)
        p_t = (t - t_inner) / (t_outer - t_inner) if t_outer != t_inner else 0.0
        h_t += p_t * (offset.outer - offset.inner) + offset.inner

        if following is not None:
            next_key, next_offset = following
            ratio = (s - key) / (next_key - key)
            dh_inner = (next_offset.inner - offset.inner) * ratio
            dh_outer = (next_offset.outer - offset.outer) * ratio
            h_t += p_t * (dh_outer - dh_inner) + dh_inner

        return h_t

    def query_surface_pt(self, s: float, t: float) -> SurfacePoint:
        lanesection = self.get_lanesection(s)
        if lanesection is None:
            return SurfacePoint(
                xyz=self.get_xyz(s, t, 0.0),
                diagnostic=f"road #{self.id} - could not get lane section for s: {s:.2f}",
            )

        lane = lanesection.get_lane(s, t)
        if lane is None:
            return SurfacePoint(
                xyz=self.get_xyz(s, t, 0.0),
                lanesection_s0=lanesection.s0,
                diagnostic=(
                    f"road #{self.id} - lane section s0={lanesection.s0:.2f} has no lane "
                    f"for s: {s:.2f}, t: {t:.2f}"
                ),
            )

        return SurfacePoint(
            xyz=self.get_xyz(s, t, self._lane_height(lane, s, t)),
            lanesection_s0=lanesection.s0,
            lane_id=lane.id,
        )

    def get_surface_pt(self, s: float, t: float) -> Vec3D:
        result = self.query_surface_pt(s, t)
        if result.diagnostic is not None:
            logger.debug(result.diagnostic)
        return result.xyz
