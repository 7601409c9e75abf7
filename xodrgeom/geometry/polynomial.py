"""Cubic polynomial segments (``<poly3>`` and ``<paramPoly3>``).

Both variants are evaluated in the local frame of the start pose, where the
curve is ``(u(p), v(p))`` for a parameter ``p``.  The public arc length
``s`` is mapped to ``p`` by inverting the curve's arc length, which is
tabulated with Gauss-Legendre quadrature and refined with Newton steps.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List

import numpy as np
from scipy.optimize import brentq

from xodrgeom.geometry.base import GeometryType, RoadGeometry
from xodrgeom.profile.core import CubicPoly
from xodrgeom.vectors import Box2D, Vec2D

logger = logging.getLogger(__name__)

_GAUSS_NODES, _GAUSS_WEIGHTS = np.polynomial.legendre.leggauss(5)


class _LocalCubicCurve:
    """``(u(p), v(p))`` with an arc length table over ``[0, p_max]``."""

    def __init__(self, u_poly: CubicPoly, v_poly: CubicPoly, p_max: float, intervals: int):
        self.u_poly = u_poly
        self.v_poly = v_poly
        self.p_max = float(p_max)

        self._p_knots = np.linspace(0.0, self.p_max, intervals + 1)
        pieces = self._gauss(self._p_knots[:-1], self._p_knots[1:])
        self._s_knots = np.concatenate(([0.0], np.cumsum(pieces)))

    @property
    def total_length(self) -> float:
        return float(self._s_knots[-1])

    def xy(self, p: float) -> Vec2D:
        return self.u_poly.get(p), self.v_poly.get(p)

    def derivative(self, p: float) -> Vec2D:
        return self.u_poly.get_grad(p), self.v_poly.get_grad(p)

    def speed(self, p):
        return np.hypot(self.u_poly.get_grad(p), self.v_poly.get_grad(p))

    def _gauss(self, lo, hi):
        half = (np.asarray(hi) - np.asarray(lo)) / 2.0
        mid = (np.asarray(hi) + np.asarray(lo)) / 2.0
        nodes = mid[..., None] + half[..., None] * _GAUSS_NODES
        return half * (self.speed(nodes) @ _GAUSS_WEIGHTS)

    def arc_length(self, p: float) -> float:
        idx = int(np.searchsorted(self._p_knots, p, side="right")) - 1
        idx = min(max(idx, 0), len(self._p_knots) - 2)
        base = float(self._s_knots[idx])
        return base + float(self._gauss(np.array(self._p_knots[idx]), np.array(p)))

    def param_at(self, ds: float, max_iter: int) -> float:
        p = float(np.interp(ds, self._s_knots, self._p_knots))
        for _ in range(max_iter):
            speed = float(self.speed(p))
            if speed <= 1e-12:
                break
            step = (self.arc_length(p) - ds) / speed
            p -= step
            if abs(step) <= 1e-14 * max(1.0, self.p_max):
                break
        return p


@dataclass
class _CubicGeometry(RoadGeometry):
    """Common evaluation of both polynomial variants."""

    _curve: _LocalCubicCurve = field(init=False, repr=False, compare=False)
    _s_scale: float = field(init=False, repr=False, compare=False, default=1.0)

    def _build_curve(self, u_poly: CubicPoly, v_poly: CubicPoly, p_max: float) -> None:
        self._curve = _LocalCubicCurve(u_poly, v_poly, p_max, self.config.arclength_intervals)
        # the declared length spans the whole curve, so s_end always lands on p_max
        self._s_scale = self._curve.total_length / self.length

    def _param(self, s: float) -> float:
        ds = (s - self.s0) * self._s_scale
        return self._curve.param_at(ds, self.config.newton_max_iter)

    def _to_world(self, u: float, v: float) -> Vec2D:
        cos_h = math.cos(self.hdg0)
        sin_h = math.sin(self.hdg0)
        return self.x0 + cos_h * u - sin_h * v, self.y0 + sin_h * u + cos_h * v

    def heading(self, s: float) -> float:
        du, dv = self._curve.derivative(self._param(s))
        if du == 0.0 and dv == 0.0:
            return self.hdg0
        return self.hdg0 + math.atan2(dv, du)

    def point(self, s: float, t: float = 0.0) -> Vec2D:
        p = self._param(s)
        x, y = self._to_world(*self._curve.xy(p))
        if t == 0.0:
            return x, y
        return self._offset(x, y, self.heading(s), t)

    def gradient(self, s: float) -> Vec2D:
        hdg = self.heading(s)
        return math.cos(hdg), math.sin(hdg)

    def bounding_box(self) -> Box2D:
        p_end = self._param(self.s_end)
        lo, hi = min(0.0, p_end), max(0.0, p_end)
        u_poly = self._curve.u_poly
        v_poly = self._curve.v_poly
        cos_h = math.cos(self.hdg0)
        sin_h = math.sin(self.hdg0)

        # world x(p) and y(p) are cubics; their extrema are roots of the derivative
        params: List[float] = [lo, hi]
        for cu, cv in ((cos_h, -sin_h), (sin_h, cos_h)):
            b = cu * u_poly.b + cv * v_poly.b
            c = cu * u_poly.c + cv * v_poly.c
            d = cu * u_poly.d + cv * v_poly.d
            for root in np.roots([3.0 * d, 2.0 * c, b]):
                if abs(root.imag) <= 1e-12 and lo <= root.real <= hi:
                    params.append(float(root.real))

        return Box2D.from_points(self._to_world(*self._curve.xy(p)) for p in params)

    def project(self, x: float, y: float) -> float:
        return self._project_numerically(x, y)


@dataclass
class ParamPoly3(_CubicGeometry):
    kind = GeometryType.PARAM_POLY3

    aU: float = 0.0
    bU: float = 1.0
    cU: float = 0.0
    dU: float = 0.0
    aV: float = 0.0
    bV: float = 0.0
    cV: float = 0.0
    dV: float = 0.0
    p_range_normalized: bool = True

    def __post_init__(self) -> None:
        super().__post_init__()
        coeffs = (self.aU, self.bU, self.cU, self.dU, self.aV, self.bV, self.cV, self.dV)
        if not all(math.isfinite(float(c)) for c in coeffs):
            raise ValueError(f"paramPoly3 at s0={self.s0}: coefficients must be finite")

        p_max = 1.0 if self.p_range_normalized else self.length
        self._build_curve(
            CubicPoly(float(self.aU), float(self.bU), float(self.cU), float(self.dU)),
            CubicPoly(float(self.aV), float(self.bV), float(self.cV), float(self.dV)),
            p_max,
        )
        if self._curve.total_length <= 0.0:
            raise ValueError(f"paramPoly3 at s0={self.s0}: curve has zero arc length")
        if abs(self._curve.total_length - self.length) > 1e-3 * self.length:
            logger.debug(
                "paramPoly3 at s0=%.3f: declared length %.6f differs from curve length %.6f, "
                "rescaling s onto the curve",
                self.s0,
                self.length,
                self._curve.total_length,
            )


@dataclass
class Poly3(_CubicGeometry):
    """``v = a + b*u + c*u**2 + d*u**3`` with ``u`` along the start heading."""

    kind = GeometryType.POLY3

    a: float = 0.0
    b: float = 0.0
    c: float = 0.0
    d: float = 0.0
    u_end: float = field(init=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        if not all(math.isfinite(float(c)) for c in (self.a, self.b, self.c, self.d)):
            raise ValueError(f"poly3 at s0={self.s0}: coefficients must be finite")

        u_poly = CubicPoly(0.0, 1.0, 0.0, 0.0)
        v_poly = CubicPoly(float(self.a), float(self.b), float(self.c), float(self.d))

        # arc length >= u, so the end parameter lies within [0, length]
        full_range = _LocalCubicCurve(u_poly, v_poly, self.length, self.config.arclength_intervals)
        if full_range.total_length <= self.length:
            self.u_end = self.length
        else:
            self.u_end = brentq(lambda u: full_range.arc_length(u) - self.length, 0.0, self.length)

        self._build_curve(u_poly, v_poly, self.u_end)
