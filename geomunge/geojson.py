"""Reading GeoJSON and converting its geometries."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator

from .errors import CannotParseFile, CannotReadFile
from .geometry import Geometry, LineString, Point, Polygon

_GEOMETRY_TYPES = {
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
    "GeometryCollection",
}


def _valid(obj) -> bool:
    if not isinstance(obj, dict):
        return False
    kind = obj.get("type")
    if kind == "FeatureCollection":
        features = obj.get("features")
        return isinstance(features, list) and all(
            isinstance(f, dict) and f.get("type") == "Feature" and "geometry" in f
            for f in features
        )
    if kind == "Feature":
        return "geometry" in obj
    if kind == "GeometryCollection":
        return isinstance(obj.get("geometries"), list)
    return kind in _GEOMETRY_TYPES and "coordinates" in obj


def read_geojson(path) -> dict:
    """Load and validate a GeoJSON document from a file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        raise CannotReadFile(path) from None
    try:
        obj = json.loads(text)
    except json.JSONDecodeError:
        raise CannotParseFile(path) from None
    if not _valid(obj):
        raise CannotParseFile(path)
    return obj


def _point(position) -> Point:
    if not isinstance(position, (list, tuple)) or len(position) < 2:
        raise ValueError(f"invalid position: {position!r}")
    x, y = position[0], position[1]
    if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in (x, y)):
        raise ValueError(f"invalid position: {position!r}")
    return Point(float(x), float(y))


def _line(positions) -> LineString:
    if not isinstance(positions, list):
        raise ValueError("expected a list of positions")
    return LineString(_point(p) for p in positions)


def _polygon(rings) -> Polygon:
    if not isinstance(rings, list):
        raise ValueError("expected a list of rings")
    lines = [_line(r) for r in rings]
    exterior = lines[0] if lines else LineString()
    return Polygon(exterior, lines[1:])


def _as_list(coords) -> list:
    if not isinstance(coords, list):
        raise ValueError("expected a list of coordinates")
    return coords


def convert_geom(geometry: dict) -> Iterator[Geometry]:
    """Yield radian geometries, flattening multi-geometries.

    Raises ValueError for malformed or unsupported geometries.
    """
    kind = geometry.get("type")
    coords = geometry.get("coordinates")
    if kind == "Point":
        yield _point(coords).to_radians()
    elif kind == "Polygon":
        yield _polygon(coords).to_radians()
    elif kind == "LineString":
        yield _line(coords).to_radians()
    elif kind == "MultiPoint":
        points = [_point(p) for p in _as_list(coords)]
        for p in points:
            yield p.to_radians()
    elif kind == "MultiPolygon":
        polys = [_polygon(p) for p in _as_list(coords)]
        for p in polys:
            yield p.to_radians()
    elif kind == "MultiLineString":
        lines = [_line(line) for line in _as_list(coords)]
        for line in lines:
            yield line.to_radians()
    elif kind == "GeometryCollection":
        raise ValueError("expected not GeometryCollection, found GeometryCollection")
    else:
        raise ValueError(f"unknown geometry type: {kind!r}")