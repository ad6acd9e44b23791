"""Choosing a loader and a bounding box by input file type."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..errors import CannotParseFileExtension, InvalidBoundingBox, UnsupportedFileType
from ..geometry import Point, Rect
from .csv_source import build_csv
from .geojson_source import build_geojson, geojson_bbox
from .kml_source import build_kml
from .shapefile_source import build_shp, shp_bbox
from .tree import QtData, Quadtree

_SPHERE = (Point(-180.0, -90.0), Point(180.0, 90.0))


def _extension(path) -> str:
    suffix = Path(path).suffix
    if not suffix:
        raise CannotParseFileExtension(path)
    return suffix[1:]


def build_quadtree(path, opts: QtData) -> Quadtree:
    """Build a quadtree from a shapefile, GeoJSON, KML/KMZ or csv file."""
    ext = _extension(path)
    if ext == "shp":
        return build_shp(path, opts)
    if ext == "json":
        return build_geojson(path, opts)
    if ext in ("kml", "kmz"):
        return build_kml(path, opts)
    if ext == "csv":
        return build_csv(path, opts)
    raise UnsupportedFileType()


def _parse_f64(text: str) -> float:
    if not text or text != text.strip() or "_" in text:
        raise InvalidBoundingBox()
    try:
        return float(text)
    except ValueError:
        raise InvalidBoundingBox() from None


def _parse_bbox(text: str):
    values = [_parse_f64(part) for part in text.split(",")[:4]]
    if len(values) < 4:
        raise InvalidBoundingBox()
    return Point(values[0], values[1]), Point(values[2], values[3])


def make_bbox(path, sphere: bool, bbox: Optional[str]) -> Rect:
    """Return the quadtree bounds, in radians.

    The whole sphere if asked, else a "lng_min,lat_min,lng_max,lat_max" string
    in degrees, else the bounding box stored in the input file.
    """
    if sphere:
        a, b = _SPHERE
    elif bbox is not None:
        a, b = _parse_bbox(bbox)
    else:
        ext = _extension(path)
        if ext == "shp":
            a, b = shp_bbox(path)
        elif ext == "json":
            a, b = geojson_bbox(path)
        elif ext in ("kml", "kmz", "csv"):
            a, b = _SPHERE
        else:
            raise UnsupportedFileType()
    return Rect(a, b).to_radians()