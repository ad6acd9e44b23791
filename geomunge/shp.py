"""Conversion of shapefile shapes and dBase values."""

from __future__ import annotations

import datetime as _dt
import math
import struct
from decimal import Decimal
from typing import Iterator, Optional

from .errors import UnsupportedGeometry, UnsupportedGeoType
from .geometry import Geometry, LineString, Point, Polygon
from .shapefile_io import FieldValue, Shape, ShapeType


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return format(Decimal(int(value)), "f")
    return format(Decimal(repr(value)), "f")


def _format_f32(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        return _format_float(value)
    single = struct.unpack("<f", struct.pack("<f", value))[0]
    for precision in range(1, 10):
        text = f"{single:.{precision}g}"
        if struct.unpack("<f", struct.pack("<f", float(text)))[0] == single:
            return _format_float(float(text))
    return _format_float(single)


def convert_dbase_field(value: FieldValue) -> str:
    """Render a dBase value as text for csv output."""
    kind, v = value.kind, value.value
    if kind == "C":
        return v or ""
    if kind == "M":
        return v
    if kind == "I":
        return str(v)
    if kind == "N":
        return _format_float(math.nan if v is None else v)
    if kind in ("O", "Y"):
        return _format_float(v)
    if kind == "F":
        return _format_f32(math.nan if v is None else v)
    if kind == "L":
        return "" if v is None else ("true" if v else "false")
    if kind == "D":
        return "" if v is None else v.isoformat()
    if kind == "T":
        d: _dt.datetime = v
        return (
            f"{d.year:4}-{d.month:2}-{d.day:2} "
            f"{d.hour:2}:{d.minute:2}:{d.second:2}"
        )
    return "" if v is None else str(v)


def convert_dbase_field_opt(value: Optional[FieldValue]) -> str:
    return "" if value is None else convert_dbase_field(value)


def _ring_area(points) -> float:
    return sum(
        x1 * y2 - x2 * y1 for (x1, y1), (x2, y2) in zip(points, points[1:])
    ) / 2.0


def _parts(shape: Shape) -> list:
    bounds = list(shape.parts) + [len(shape.points)]
    return [
        [Point(x, y) for x, y in shape.points[start:end]]
        for start, end in zip(bounds, bounds[1:])
    ]


def _polygons(shape: Shape) -> list:
    polygons = []
    for ring in _parts(shape):
        coords = [(p.x, p.y) for p in ring]
        is_outer = _ring_area(coords) <= 0
        if is_outer or not polygons:
            polygons.append((LineString(ring), []))
        else:
            polygons[-1][1].append(LineString(ring))
    return [Polygon(ext, ints) for ext, ints in polygons]


def convert_shape(shape: Shape) -> Iterator[Geometry]:
    """Yield radian geometries for a shape, flattening multi-part shapes."""
    kind = shape.shape_type
    if kind in (ShapeType.POINT, ShapeType.POINTM, ShapeType.POINTZ):
        x, y = shape.points[0]
        yield Point(x, y).to_radians()
    elif kind in (ShapeType.POLYLINE, ShapeType.POLYLINEM, ShapeType.POLYLINEZ):
        for part in _parts(shape):
            yield LineString(part).to_radians()
    elif kind in (ShapeType.MULTIPOINT, ShapeType.MULTIPOINTM, ShapeType.MULTIPOINTZ):
        for x, y in shape.points:
            yield Point(x, y).to_radians()
    elif kind in (ShapeType.POLYGON, ShapeType.POLYGONM, ShapeType.POLYGONZ):
        for poly in _polygons(shape):
            yield poly.to_radians()
    elif kind == ShapeType.MULTIPATCH:
        raise UnsupportedGeometry(UnsupportedGeoType.MULTIPATCH_SHP)
    else:
        raise UnsupportedGeometry(UnsupportedGeoType.NULL_SHP)