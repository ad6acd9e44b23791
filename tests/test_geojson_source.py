import json

import pytest

from geomunge.errors import InvalidBoundingBox, MissingBoundingBox
from geomunge.geometry import Point, Rect
from geomunge.qt.geojson_source import (
    JsonMeta,
    build_geojson,
    geojson_bbox,
    json_field_val,
)
from geomunge.qt.tree import ParsedRecord, QtData

WORLD = Rect(Point(-180.0, -90.0), Point(180.0, 90.0)).to_radians()


def _write(tmp_path, obj):
    path = tmp_path / "data.json"
    path.write_text(json.dumps(obj), encoding="utf-8")
    return path


def _record(lng, lat):
    return ParsedRecord(0, [], Point(lng, lat).to_radians())


def _feature(geometry, props=None, fid=None):
    feature = {"type": "Feature", "geometry": geometry, "properties": props}
    if fid is not None:
        feature["id"] = fid
    return feature


def test_json_field_val():
    feature = _feature(
        None,
        {"s": "text", "n": 2.5, "i": 3, "b": True, "z": None, "a": [1], "o": {}},
        fid=5,
    )
    assert json_field_val(feature, "id") == "5"
    assert json_field_val(feature, "s") == "text"
    assert json_field_val(feature, "n") == "2.5"
    assert json_field_val(feature, "i") == "3"
    assert json_field_val(feature, "b") == "true"
    assert [json_field_val(feature, k) for k in ("z", "a", "o", "missing")] == [""] * 4
    assert json_field_val(_feature(None, None, fid="abc"), "id") == "abc"
    assert json_field_val(_feature(None), "id") == ""
    assert json_field_val(_feature(None, {"big": 1e20}), "big") == "1e20"


def test_feature_collection(tmp_path, capsys):
    obj = {
        "type": "FeatureCollection",
        "features": [
            _feature({"type": "Point", "coordinates": [1, 2]}, {"name": "a"}, fid="p1"),
            _feature(None, {"name": "b"}),
            _feature({"type": "MultiPoint", "coordinates": [[10, 10], [20, 20]]}, {"name": "c"}),
        ],
    }
    qt = build_geojson(_write(tmp_path, obj), QtData(False, WORLD))
    assert len(qt) == 3
    assert "Failed to parse record at index 1: Missing geometry" in capsys.readouterr().err
    datum, dist = qt.find(_record(1, 2), None)
    assert dist == 0.0
    assert list(datum.meta_iter(["id", "name"])) == ["p1", "a"]
    datum, _ = qt.find(_record(20, 20), None)
    assert datum.index == 2
    assert list(datum.meta_iter(["name"])) == ["c"]


def test_bare_geometry_has_no_meta(tmp_path):
    obj = {"type": "Point", "coordinates": [3, 4]}
    qt = build_geojson(_write(tmp_path, obj), QtData(True, WORLD))
    datum, _ = qt.find(_record(0, 0), None)
    assert datum.index == 0
    assert list(datum.meta_iter(["name"])) == [""]


def test_single_feature(tmp_path):
    obj = _feature({"type": "Point", "coordinates": [5, 6]}, {"k": "v"})
    qt = build_geojson(_write(tmp_path, obj), QtData(True, WORLD))
    datum, _ = qt.find(_record(5, 6), None)
    assert isinstance(datum.meta, JsonMeta)
    assert datum.meta.field_value("k") == "v"


def test_point_tree_reports_polygon(tmp_path, capsys):
    ring = [[0, 0], [1, 0], [1, 1], [0, 0]]
    obj = {
        "type": "FeatureCollection",
        "features": [_feature({"type": "Polygon", "coordinates": [ring]})],
    }
    qt = build_geojson(_write(tmp_path, obj), QtData(True, WORLD))
    assert len(qt) == 0
    assert "Cannot insert non-point geometry" in capsys.readouterr().err


def test_geometry_collection_reported(tmp_path, capsys):
    obj = {
        "type": "FeatureCollection",
        "features": [_feature({"type": "GeometryCollection", "geometries": []})],
    }
    qt = build_geojson(_write(tmp_path, obj), QtData(False, WORLD))
    assert len(qt) == 0
    assert "GeoJson feature parsing failed" in capsys.readouterr().err


def test_bbox(tmp_path):
    obj = {"type": "FeatureCollection", "features": [], "bbox": [-10, -5, 10, 5]}
    low, high = geojson_bbox(_write(tmp_path, obj))
    assert (low, high) == (Point(-10.0, -5.0), Point(10.0, 5.0))


def test_bbox_missing(tmp_path):
    obj = {"type": "FeatureCollection", "features": []}
    with pytest.raises(MissingBoundingBox):
        geojson_bbox(_write(tmp_path, obj))


def test_bbox_invalid(tmp_path):
    obj = {"type": "FeatureCollection", "features": [], "bbox": [1, 2]}
    with pytest.raises(InvalidBoundingBox):
        geojson_bbox(_write(tmp_path, obj))