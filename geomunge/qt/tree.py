"""Spatial index over geometries with great-circle distance search.

All coordinates are in radians; distances are angles on the unit sphere.
"""

from __future__ import annotations

import heapq
import itertools
import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Protocol, Tuple

from ..errors import (
    FindError,
    InsertFailed,
    InsertFailedRequiresPoint,
    QuadtreeError,
    QuadtreeErrorKind,
)
from ..geometry import Geometry, LineString, Point, Polygon, Rect

DEFAULT_DEPTH = 10
DEFAULT_MAX_CHILDREN = 10

_EPSILON = 1e-12


class FieldSource(Protocol):
    """Anything that can render a metadata field as text."""

    def field_value(self, field: str) -> str: ...


@dataclass
class QtData:
    """Options for building a quadtree."""

    is_point_qt: bool
    bounds: Rect
    depth: Optional[int] = DEFAULT_DEPTH
    max_children: Optional[int] = DEFAULT_MAX_CHILDREN

    def __post_init__(self) -> None:
        if self.depth is None:
            self.depth = DEFAULT_DEPTH
        if self.max_children is None:
            self.max_children = DEFAULT_MAX_CHILDREN


@dataclass
class Datum:
    """A stored geometry with its load-order index and its source metadata."""

    geom: Geometry
    meta: Optional[FieldSource]
    index: int

    def meta_iter(self, fields) -> Iterator[str]:
        """Yield the text of each requested field; nothing if no fields are given."""
        if fields is None:
            return
        for name in fields:
            yield "" if self.meta is None else self.meta.field_value(name)


@dataclass
class ParsedRecord:
    """A comparison point read from the input stream."""

    index: int
    record: list
    point: Point
    id: Optional[str] = None


SearchResult = Tuple[Datum, float]


def _vertices(geom: Geometry) -> List[Point]:
    if isinstance(geom, Point):
        return [geom]
    if isinstance(geom, LineString):
        return list(geom.points)
    if isinstance(geom, Polygon):
        rings = (geom.exterior, *geom.interiors)
        return [p for ring in rings for p in ring.points]
    raise QuadtreeError(QuadtreeErrorKind.CANNOT_MAKE_BBOX)


def _bbox(geom: Geometry) -> Rect:
    points = _vertices(geom)
    if not points:
        raise QuadtreeError(QuadtreeErrorKind.CANNOT_MAKE_BBOX)
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return Rect(Point(min(xs), min(ys)), Point(max(xs), max(ys)))


def _contains(outer: Rect, inner: Rect) -> bool:
    return (
        outer.min.x <= inner.min.x
        and inner.max.x <= outer.max.x
        and outer.min.y <= inner.min.y
        and inner.max.y <= outer.max.y
    )


def _intersects(a: Rect, b: Rect) -> bool:
    return (
        a.min.x <= b.max.x
        and b.min.x <= a.max.x
        and a.min.y <= b.max.y
        and b.min.y <= a.max.y
    )


def _unit(p: Point) -> Tuple[float, float, float]:
    cos_lat = math.cos(p.y)
    return (cos_lat * math.cos(p.x), cos_lat * math.sin(p.x), math.sin(p.y))


def _cross(a, b):
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _dot(a, b) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _haversine(a: Point, b: Point) -> float:
    h = (
        math.sin((b.y - a.y) / 2) ** 2
        + math.cos(a.y) * math.cos(b.y) * math.sin((b.x - a.x) / 2) ** 2
    )
    return 2 * math.asin(min(1.0, math.sqrt(h)))


def _segment_distance(p: Point, a: Point, b: Point) -> float:
    pv, av, bv = _unit(p), _unit(a), _unit(b)
    normal = _cross(av, bv)
    norm = math.sqrt(_dot(normal, normal))
    if norm < 1e-15:
        return min(_haversine(p, a), _haversine(p, b))
    normal = tuple(c / norm for c in normal)
    offset = _dot(pv, normal)
    projected = tuple(pc - offset * nc for pc, nc in zip(pv, normal))
    if (
        _dot(_cross(av, projected), normal) >= 0
        and _dot(_cross(projected, bv), normal) >= 0
    ):
        return math.asin(min(1.0, abs(offset)))
    return min(_haversine(p, a), _haversine(p, b))


def _line_distance(p: Point, points) -> float:
    points = list(points)
    if not points:
        raise QuadtreeError(QuadtreeErrorKind.INVALID_DISTANCE)
    if len(points) == 1:
        return _haversine(p, points[0])
    return min(_segment_distance(p, a, b) for a, b in zip(points, points[1:]))


def _closed(points) -> list:
    points = list(points)
    if points and points[0] != points[-1]:
        points.append(points[0])
    return points


def _in_ring(p: Point, points) -> bool:
    points = list(points)
    inside = False
    for a, b in zip(points, points[1:] + points[:1]):
        if (a.y > p.y) != (b.y > p.y):
            crossing = a.x + (p.y - a.y) * (b.x - a.x) / (b.y - a.y)
            if p.x < crossing:
                inside = not inside
    return inside


def _distance(p: Point, geom: Geometry) -> float:
    if isinstance(geom, Point):
        return _haversine(p, geom)
    if isinstance(geom, LineString):
        return _line_distance(p, geom.points)
    if isinstance(geom, Polygon):
        if _in_ring(p, geom.exterior.points) and not any(
            _in_ring(p, ring.points) for ring in geom.interiors
        ):
            return 0.0
        rings = (geom.exterior, *geom.interiors)
        return min(_line_distance(p, _closed(ring.points)) for ring in rings)
    raise QuadtreeError(QuadtreeErrorKind.INVALID_DISTANCE)


def _rect_lower_bound(p: Point, rect: Rect) -> float:
    """A lower bound on the angular distance from a point to anything in a rect."""
    bound = max(0.0, rect.min.y - p.y, p.y - rect.max.y)
    outside_lon = not (rect.min.x <= p.x <= rect.max.x)
    if outside_lon and rect.max.x - rect.min.x <= math.pi:
        cos_lat = math.cos(p.y)
        meridian = min(
            math.asin(min(1.0, abs(cos_lat * math.sin(p.x - m))))
            for m in (rect.min.x, rect.max.x)
        )
        bound = max(bound, meridian)
    return max(0.0, bound - _EPSILON)


class _Node:
    __slots__ = ("bounds", "depth", "items", "children")

    def __init__(self, bounds: Rect, depth: int) -> None:
        self.bounds = bounds
        self.depth = depth
        self.items: list = []
        self.children: Optional[List[_Node]] = None

    def _quadrants(self) -> List[Rect]:
        lo, hi = self.bounds.min, self.bounds.max
        mx, my = (lo.x + hi.x) / 2, (lo.y + hi.y) / 2
        return [
            Rect(Point(lo.x, my), Point(mx, hi.y)),
            Rect(Point(mx, my), Point(hi.x, hi.y)),
            Rect(Point(lo.x, lo.y), Point(mx, my)),
            Rect(Point(mx, lo.y), Point(hi.x, my)),
        ]

    def _child_for(self, bbox: Rect) -> Optional["_Node"]:
        return next((c for c in self.children if _contains(c.bounds, bbox)), None)

    def insert(self, entry, max_depth: int, max_children: int) -> None:
        node = self
        while node.children is not None:
            child = node._child_for(entry[0])
            if child is None:
                node.items.append(entry)
                return
            node = child
        node.items.append(entry)
        if len(node.items) > max_children and node.depth < max_depth:
            node._split(max_depth, max_children)

    def _split(self, max_depth: int, max_children: int) -> None:
        self.children = [_Node(r, self.depth + 1) for r in self._quadrants()]
        entries, self.items = self.items, []
        for entry in entries:
            child = self._child_for(entry[0])
            (self.items if child is None else child.items).append(entry)
        for child in self.children:
            if len(child.items) > max_children and child.depth < max_depth:
                child._split(max_depth, max_children)

    def walk(self) -> Iterator["_Node"]:
        yield self
        for child in self.children or ():
            yield from child.walk()


class Quadtree:
    """A quadtree that stores points only, or any bounded geometry."""

    def __init__(self, opts: QtData) -> None:
        self.is_point_qt = opts.is_point_qt
        self.bounds = opts.bounds
        self.depth = opts.depth
        self.max_children = opts.max_children
        self._root = _Node(opts.bounds, 0)
        self._size = 0
        self._sequence = itertools.count()

    def __len__(self) -> int:
        return self._size

    def insert(self, datum: Datum) -> None:
        """Store a datum, raising if it cannot be placed in this tree."""
        if self.is_point_qt and not isinstance(datum.geom, Point):
            raise InsertFailedRequiresPoint(datum.index)
        try:
            bbox = _bbox(datum.geom)
        except QuadtreeError as err:
            raise InsertFailed(datum.index, err) from None
        if not _contains(self.bounds, bbox):
            raise InsertFailed(
                datum.index, QuadtreeError(QuadtreeErrorKind.OUT_OF_BOUNDS)
            )
        self._root.insert(
            (bbox, next(self._sequence), datum), self.depth, self.max_children
        )
        self._size += 1

    def retrieve(self, datum: Datum) -> Iterator[Datum]:
        """Yield the stored data held in nodes overlapping the datum's extent."""
        bbox = _bbox(datum.geom)
        stack = [self._root]
        while stack:
            node = stack.pop()
            if not _intersects(node.bounds, bbox):
                continue
            for _, _, item in node.items:
                yield item
            stack.extend(node.children or ())

    def _search(self, point: Point, radius: float, k: int) -> List[SearchResult]:
        counter = itertools.count()
        heap = [(_rect_lower_bound(point, self._root.bounds), 1, next(counter), self._root)]
        found: List[SearchResult] = []
        while heap and len(found) < k:
            dist, kind, _, obj = heapq.heappop(heap)
            if dist > radius:
                break
            if kind == 0:
                found.append((obj, dist))
                continue
            for _, seq, datum in obj.items:
                heapq.heappush(heap, (_distance(point, datum.geom), 0, seq, datum))
            for child in obj.children or ():
                heapq.heappush(
                    heap,
                    (_rect_lower_bound(point, child.bounds), 1, next(counter), child),
                )
        return found

    def find(self, record: ParsedRecord, r: Optional[float]) -> SearchResult:
        """Return the nearest datum within radius r (unbounded if None)."""
        return self.knn(record, 1, r)[0]

    def knn(self, record: ParsedRecord, k: int, r: Optional[float]) -> List[SearchResult]:
        """Return up to k nearest data within radius r, nearest first."""
        radius = math.inf if r is None else r
        if self._size == 0:
            raise FindError(record.index, QuadtreeError(QuadtreeErrorKind.EMPTY))
        results = self._search(record.point, radius, k)
        if not results and k > 0:
            raise FindError(
                record.index, QuadtreeError(QuadtreeErrorKind.NONE_IN_RADIUS)
            )
        return results

    def __str__(self) -> str:
        kind = "Point" if self.is_point_qt else "Bounds"
        lines = [
            f"{kind}QuadTree: size={self._size}, depth={self.depth}, "
            f"max_children={self.max_children}"
        ]
        for node in self._root.walk():
            b = node.bounds
            lines.append(
                f"{'  ' * node.depth}[{b.min.x:.6f}, {b.min.y:.6f}, "
                f"{b.max.x:.6f}, {b.max.y:.6f}] items={len(node.items)}"
            )
        return "\n".join(lines)