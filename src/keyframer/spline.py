"""Interpolation curves for keyframe transitions.

A :class:`Spline` remaps the linear blend factor of a transition onto a
smoother curve.  It is a natural cubic spline through a handful of control
points, fitted with scipy when the points are set and reused until they
change.
"""

from __future__ import annotations

import struct
from typing import Iterable, Self

from scipy.interpolate import CubicSpline

_POINT = struct.Struct("<dd")

Point = tuple[float, float]


class Spline:

    def __init__(self, points: Iterable[Point]) -> None:
        self.points = points

    @property
    def points(self) -> tuple[Point, ...]:
        return self._points

    @points.setter
    def points(self, points: Iterable[Point]) -> None:
        points = tuple((float(x), float(y)) for x, y in points)
        if len(points) < 2:
            raise ValueError(f"A spline needs at least 2 control points, got {len(points)}")
        for (x0, _), (x1, _) in zip(points, points[1:]):
            if not x1 > x0:
                raise ValueError(f"Control point x values must increase, got {x0} then {x1}")
        self._points = points
        xs, ys = zip(*points)
        self._curve = CubicSpline(xs, ys, bc_type="natural")

    @classmethod
    def smooth(cls) -> Self:
        """Ease-in/ease-out template used for new keyframes."""
        return cls(SMOOTH_POINTS)

    @classmethod
    def linear(cls) -> Self:
        return cls(LINEAR_POINTS)

    def copy(self) -> Self:
        return type(self)(self._points)

    def evaluate(self, t: float) -> float:
        """Curve output at *t*, clamped to the control point x range."""
        (x_first, y_first), (x_last, y_last) = self._points[0], self._points[-1]
        if t <= x_first:
            return y_first
        if t >= x_last:
            return y_last
        return float(self._curve(t))

    def serialize(self) -> bytes:
        return b"".join(_POINT.pack(x, y) for x, y in self._points)

    @classmethod
    def deserialize(cls, data: bytes) -> Self:
        if len(data) % _POINT.size:
            raise ValueError(
                f"Spline data must be a multiple of {_POINT.size} bytes, got {len(data)}"
            )
        return cls(_POINT.iter_unpack(data))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Spline):
            return NotImplemented
        return self._points == other._points

    def __repr__(self) -> str:
        return f"Spline({list(self._points)!r})"


SMOOTH_POINTS: tuple[Point, ...] = ((0.0, 0.0), (0.25, 0.1), (0.75, 0.9), (1.0, 1.0))
LINEAR_POINTS: tuple[Point, ...] = ((0.0, 0.0), (1.0, 1.0))


def evaluate(curve: Spline, t: float) -> float:
    return curve.evaluate(t)


def serialize(curve: Spline) -> bytes:
    return curve.serialize()


def deserialize(data: bytes) -> Spline:
    return Spline.deserialize(data)
