"""Building a quadtree from a GeoJSON file."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Optional, Tuple

from ..errors import (
    CannotParseRecord,
    GeoMungeError,
    InvalidBoundingBox,
    MissingBoundingBox,
    ParseType,
)
from ..geojson import convert_geom, read_geojson
from ..geometry import Point
from .tree import Datum, QtData, Quadtree


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number_text(value) -> str:
    if isinstance(value, int):
        return str(value)
    text = repr(value)
    if "e" in text:
        mantissa, exponent = text.split("e")
        return f"{mantissa}e{int(exponent)}"
    return text


def json_field_val(feature: dict, field: str) -> str:
    """Render a feature's id or first-level property as text."""
    if field == "id":
        fid = feature.get("id")
        if isinstance(fid, str):
            return fid
        if _is_number(fid):
            return _number_text(fid)
        return ""
    props = feature.get("properties")
    if not isinstance(props, dict):
        return ""
    value = props.get(field)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if _is_number(value):
        return _number_text(value)
    return ""


@dataclass
class JsonMeta:
    """Metadata of a GeoJSON feature."""

    feature: dict

    def field_value(self, field: str) -> str:
        return json_field_val(self.feature, field)


def _report(err: Exception) -> None:
    print(err, file=sys.stderr)


def _load(qt: Quadtree, index: int, geometry, meta: Optional[JsonMeta]) -> None:
    if geometry is None:
        _report(CannotParseRecord(index, ParseType.MISSING_GEOMETRY))
        return
    if not isinstance(geometry, dict):
        _report(CannotParseRecord(index, ParseType.GEOJSON))
        return
    try:
        geometries = list(convert_geom(geometry))
    except (ValueError, TypeError):
        _report(CannotParseRecord(index, ParseType.GEOJSON))
        return
    for geom in geometries:
        try:
            qt.insert(Datum(geom, meta, index))
        except GeoMungeError as err:
            _report(err)


def build_geojson(path, opts: QtData) -> Quadtree:
    """Build a quadtree from a GeoJSON geometry, feature or feature collection.

    Records that fail to convert or insert are reported on stderr and skipped.
    """
    obj = read_geojson(path)
    qt = Quadtree(opts)
    kind = obj.get("type")
    if kind == "FeatureCollection":
        for index, feature in enumerate(obj["features"]):
            _load(qt, index, feature.get("geometry"), JsonMeta(feature))
    elif kind == "Feature":
        _load(qt, 0, obj.get("geometry"), JsonMeta(obj))
    else:
        _load(qt, 0, obj, None)
    return qt


def geojson_bbox(path) -> Tuple[Point, Point]:
    """Return the (min, max) corners, in degrees, of a GeoJSON file's bbox."""
    obj = read_geojson(path)
    bbox = obj.get("bbox")
    if bbox is None:
        raise MissingBoundingBox()
    if not isinstance(bbox, list) or len(bbox) != 4 or not all(map(_is_number, bbox)):
        raise InvalidBoundingBox()
    xmin, ymin, xmax, ymax = (float(v) for v in bbox)
    return Point(xmin, ymin), Point(xmax, ymax)