"""Lanes and lane sections.

Lane ids follow the OpenDRIVE sign convention: positive ids lie left of the
reference line, negative ids right of it and ``0`` is the centre lane.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from xodrgeom.profile.core import CubicProfile, HeightOffset, StepFunction


@dataclass
class Lane:
    id: int
    inner_border: CubicProfile = field(default_factory=CubicProfile)
    outer_border: CubicProfile = field(default_factory=CubicProfile)
    level: bool = False
    s_to_height_offset: StepFunction[HeightOffset] = field(default_factory=StepFunction)

    @property
    def on_left_side(self) -> bool:
        return self.id > 0

    def get_borders(self, s: float):
        return self.inner_border.get(s), self.outer_border.get(s)


class LaneSection:
    """Lanes valid from ``s0`` up to the start of the next section.

    ``road_id`` names the owning road without holding a reference to it.
    """

    def __init__(self, road_id: str, s0: float, lanes: Iterable[Lane] = ()):
        self.road_id = road_id
        self.s0 = float(s0)
        self.id_to_lane: Dict[int, Lane] = {}
        for lane in lanes:
            if lane.id in self.id_to_lane:
                raise ValueError(
                    f"road #{road_id}: duplicate lane id {lane.id} in lane section s0={self.s0}"
                )
            self.id_to_lane[lane.id] = lane

    def __repr__(self) -> str:
        return f"LaneSection(road_id={self.road_id!r}, s0={self.s0}, lanes={sorted(self.id_to_lane)})"

    def get_lanes(self) -> List[Lane]:
        return [self.id_to_lane[lane_id] for lane_id in sorted(self.id_to_lane)]

    def get_lane_by_id(self, lane_id: int) -> Optional[Lane]:
        return self.id_to_lane.get(lane_id)

    def get_lane(self, s: float, t: float) -> Optional[Lane]:
        """Lane covering the lateral offset ``t`` at ``s``.

        A lane covers the closed interval between its borders.  On a shared
        border the lane nearer the reference line wins; outside every lane the
        nearest one is returned.  The centre lane is only returned when the
        section has no other lane.
        """

        candidates = [lane for lane in self.id_to_lane.values() if lane.id != 0]
        if not candidates:
            return self.id_to_lane.get(0)

        best: Optional[Lane] = None
        best_key = None
        for lane in candidates:
            inner, outer = lane.get_borders(s)
            lo, hi = min(inner, outer), max(inner, outer)
            if t < lo:
                gap = lo - t
            elif t > hi:
                gap = t - hi
            else:
                gap = 0.0
            key = (gap, abs(lane.id), lane.id)
            if best_key is None or key < best_key:
                best = lane
                best_key = key
        return best
