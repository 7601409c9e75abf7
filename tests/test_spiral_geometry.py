import math

import pytest
from scipy.special import fresnel

from xodrgeom.config import GeometryConfig
from xodrgeom.geometry.base import GeometryType
from xodrgeom.geometry.primitives import Arc, Line
from xodrgeom.geometry.spiral import Spiral


@pytest.mark.parametrize("curvature", [0.05, -0.03])
def test_constant_curvature_spiral_matches_arc(curvature):
    length = 40.0
    spiral = Spiral(2.0, 10.0, -5.0, 0.4, length, curvature, curvature)
    arc = Arc(2.0, 10.0, -5.0, 0.4, length, curvature)

    assert spiral.kind is GeometryType.SPIRAL
    assert spiral.c_dot == 0.0
    for s in (2.0, 9.5, 25.0, 42.0):
        for t in (0.0, 1.5, -2.0):
            assert spiral.point(s, t) == pytest.approx(arc.point(s, t), abs=1e-6 * length)
        assert spiral.gradient(s) == pytest.approx(arc.gradient(s))


def test_zero_curvature_spiral_is_a_line():
    spiral = Spiral(0.0, 1.0, 1.0, 0.25, 20.0, 0.0, 0.0)
    line = Line(0.0, 1.0, 1.0, 0.25, 20.0)

    for s in (0.0, 7.0, 20.0):
        assert spiral.point(s, 0.5) == pytest.approx(line.point(s, 0.5))


def test_spiral_from_zero_curvature_matches_fresnel_integrals():
    length = 50.0
    curv_end = 0.02
    spiral = Spiral(0.0, 0.0, 0.0, 0.0, length, 0.0, curv_end)

    c_dot = curv_end / length
    a = math.sqrt(math.pi / c_dot)
    for s in (10.0, 30.0, 50.0):
        fs, fc = fresnel(s / a)
        assert spiral.point(s) == pytest.approx((a * fc, a * fs), abs=1e-6 * length)


def test_spiral_heading_and_curvature_vary_linearly():
    spiral = Spiral(5.0, 0.0, 0.0, 0.3, 20.0, 0.0, 0.1)

    assert spiral.c_dot == pytest.approx(0.005)
    assert spiral.curvature(15.0) == pytest.approx(0.05)
    end_hdg = 0.3 + 0.5 * (0.0 + 0.1) * 20.0
    assert spiral.heading(25.0) == pytest.approx(end_hdg)
    assert spiral.gradient(25.0) == pytest.approx((math.cos(end_hdg), math.sin(end_hdg)))
    assert spiral.point(5.0) == (0.0, 0.0)


@pytest.mark.parametrize("fraction", [0.0, 0.1, 0.5, 0.8, 1.0])
def test_spiral_projection_round_trip(fraction):
    spiral = Spiral(10.0, 3.0, 4.0, -0.6, 30.0, -0.04, 0.06)
    s = spiral.s0 + fraction * spiral.length

    assert spiral.project(*spiral.point(s)) == pytest.approx(s, abs=1e-6)
    assert spiral.project(*spiral.point(s, 0.8)) == pytest.approx(s, abs=1e-6)


def test_spiral_projection_clamps_to_domain():
    spiral = Spiral(0.0, 0.0, 0.0, 0.0, 10.0, 0.0, 0.05)

    assert spiral.project(-20.0, 0.0) == pytest.approx(0.0)
    end_x, end_y = spiral.point(10.0)
    dx, dy = spiral.gradient(10.0)
    assert spiral.project(end_x + 5.0 * dx, end_y + 5.0 * dy) == pytest.approx(10.0)


def test_spiral_bounding_box_respects_config():
    coarse = Spiral(
        0.0, 0.0, 0.0, 0.0, 60.0, 0.0, 0.08, config=GeometryConfig(bbox_samples=4)
    )
    box = coarse.bounding_box()

    for idx in range(201):
        x, y = coarse.point(60.0 * idx / 200.0)
        assert box.contains(x, y)


def test_spiral_rejects_non_finite_curvature():
    with pytest.raises(ValueError):
        Spiral(0.0, 0.0, 0.0, 0.0, 10.0, float("nan"), 0.1)
