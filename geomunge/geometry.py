"""Planar geometry types used throughout the package."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Point:
    """A point with x (longitude) and y (latitude)."""

    x: float
    y: float

    def to_radians(self) -> "Point":
        return Point(math.radians(self.x), math.radians(self.y))


@dataclass(frozen=True)
class LineString:
    """An ordered sequence of points."""

    points: tuple = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))

    def __iter__(self):
        return iter(self.points)

    def __len__(self) -> int:
        return len(self.points)

    def to_radians(self) -> "LineString":
        return LineString(tuple(p.to_radians() for p in self.points))


@dataclass(frozen=True)
class Polygon:
    """A polygon with an exterior ring and optional interior rings."""

    exterior: LineString
    interiors: tuple = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "interiors", tuple(self.interiors))

    def to_radians(self) -> "Polygon":
        return Polygon(
            self.exterior.to_radians(),
            tuple(ring.to_radians() for ring in self.interiors),
        )


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle; corners are normalised to min/max."""

    min: Point
    max: Point

    def __post_init__(self) -> None:
        a, b = self.min, self.max
        object.__setattr__(self, "min", Point(min(a.x, b.x), min(a.y, b.y)))
        object.__setattr__(self, "max", Point(max(a.x, b.x), max(a.y, b.y)))

    def to_radians(self) -> "Rect":
        return Rect(self.min.to_radians(), self.max.to_radians())


Geometry = Union[Point, LineString, Polygon]