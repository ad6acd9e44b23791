import json
import math

import pytest

from geomunge.errors import CannotParseFile, CannotReadFile
from geomunge.geojson import convert_geom, read_geojson
from geomunge.geometry import LineString, Point, Polygon


def test_read_geojson_round_trip(tmp_path):
    doc = {"type": "Feature", "geometry": {"type": "Point", "coordinates": [1, 2]},
           "properties": {"a": 1}}
    path = tmp_path / "f.json"
    path.write_text(json.dumps(doc))
    assert read_geojson(path) == doc


def test_read_geojson_missing_file(tmp_path):
    with pytest.raises(CannotReadFile):
        read_geojson(tmp_path / "nope.json")


def test_read_geojson_invalid(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    with pytest.raises(CannotParseFile):
        read_geojson(path)
    path.write_text(json.dumps({"type": "Nonsense"}))
    with pytest.raises(CannotParseFile):
        read_geojson(path)


def test_convert_point_is_radians():
    (geom,) = list(convert_geom({"type": "Point", "coordinates": [180, 90]}))
    assert geom == Point(math.pi, math.pi / 2)


def test_convert_multipoint_flattens():
    out = list(convert_geom({"type": "MultiPoint", "coordinates": [[0, 0], [90, 0], [0, 90]]}))
    assert len(out) == 3
    assert all(isinstance(p, Point) for p in out)


def test_convert_multipolygon_and_linestrings():
    ring = [[0, 0], [1, 0], [1, 1], [0, 0]]
    polys = list(convert_geom({"type": "MultiPolygon", "coordinates": [[ring], [ring]]}))
    assert len(polys) == 2 and isinstance(polys[0], Polygon)
    lines = list(convert_geom({"type": "MultiLineString", "coordinates": [ring]}))
    assert isinstance(lines[0], LineString) and len(lines[0]) == 4


def test_convert_geometry_collection_fails():
    with pytest.raises(ValueError):
        list(convert_geom({"type": "GeometryCollection", "geometries": []}))