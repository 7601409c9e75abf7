"""Small tuple based vector helpers shared by the geometry modules."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Tuple

Vec2D = Tuple[float, float]
Vec3D = Tuple[float, float, float]
Mat3D = Tuple[Vec3D, Vec3D, Vec3D]


@dataclass(frozen=True)
class Box2D:
    """Axis aligned box in the XY plane."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_points(cls, points: Iterable[Vec2D]) -> "Box2D":
        xs = []
        ys = []
        for x, y in points:
            xs.append(float(x))
            ys.append(float(y))
        if not xs:
            raise ValueError("cannot build a bounding box without points")
        return cls(min(xs), min(ys), max(xs), max(ys))

    def union(self, other: "Box2D") -> "Box2D":
        return Box2D(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def padded(self, margin: float) -> "Box2D":
        return Box2D(
            self.min_x - margin,
            self.min_y - margin,
            self.max_x + margin,
            self.max_y + margin,
        )

    def contains(self, x: float, y: float, tol: float = 0.0) -> bool:
        return (
            self.min_x - tol <= x <= self.max_x + tol
            and self.min_y - tol <= y <= self.max_y + tol
        )


def dot(a: Tuple[float, ...], b: Tuple[float, ...]) -> float:
    return sum(x * y for x, y in zip(a, b))


def norm(v: Tuple[float, ...]) -> float:
    return math.sqrt(dot(v, v))


def normalize(v: Tuple[float, ...]) -> Tuple[float, ...]:
    """Return *v* scaled to unit length (a zero vector is returned unchanged)."""

    length = norm(v)
    if length <= 0.0 or not math.isfinite(length):
        return tuple(float(x) for x in v)
    return tuple(x / length for x in v)


def cross_product(a: Vec3D, b: Vec3D) -> Vec3D:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def mat_vec_multiplication(mat: Mat3D, vec: Vec3D) -> Vec3D:
    return (
        mat[0][0] * vec[0] + mat[0][1] * vec[1] + mat[0][2] * vec[2],
        mat[1][0] * vec[0] + mat[1][1] * vec[1] + mat[1][2] * vec[2],
        mat[2][0] * vec[0] + mat[2][1] * vec[1] + mat[2][2] * vec[2],
    )


def column(mat: Mat3D, index: int) -> Vec3D:
    return (mat[0][index], mat[1][index], mat[2][index])
