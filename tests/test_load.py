import json

import pytest

from geomunge.errors import (
    CannotParseFileExtension,
    InvalidBoundingBox,
    MissingBoundingBox,
    UnsupportedFileType,
)
from geomunge.geometry import Point, Rect
from geomunge.qt.load import build_quadtree, make_bbox
from geomunge.qt.tree import QtData
from geomunge.shapefile_io import ShapefileWriter

SPHERE = Rect(Point(-180.0, -90.0), Point(180.0, 90.0)).to_radians()


def _opts():
    return QtData(False, SPHERE)


def test_sphere_flag_overrides():
    assert make_bbox("anything.txt", True, "1,2,3,4") == SPHERE


def test_bbox_string():
    assert make_bbox("x.csv", False, "1,2,3,4") == Rect(Point(1, 2), Point(3, 4)).to_radians()


def test_bbox_string_normalised():
    assert make_bbox("x.csv", False, "3,4,1,2") == Rect(Point(1, 2), Point(3, 4)).to_radians()


@pytest.mark.parametrize("text", ["1,2,3", "1,2,x,4", "1, 2,3,4", ""])
def test_bbox_string_invalid(text):
    with pytest.raises(InvalidBoundingBox):
        make_bbox("x.csv", False, text)


@pytest.mark.parametrize("name", ["a.kml", "a.kmz", "a.csv"])
def test_default_sphere_by_type(name):
    assert make_bbox(name, False, None) == SPHERE


def test_unsupported_and_missing_extension():
    with pytest.raises(UnsupportedFileType):
        make_bbox("data.txt", False, None)
    with pytest.raises(CannotParseFileExtension):
        make_bbox("data", False, None)
    with pytest.raises(UnsupportedFileType):
        build_quadtree("data.txt", _opts())
    with pytest.raises(CannotParseFileExtension):
        build_quadtree("data", _opts())


def test_geojson_bbox(tmp_path):
    path = tmp_path / "d.json"
    path.write_text(json.dumps({
        "type": "Point", "coordinates": [1, 2], "bbox": [0, 1, 5, 6]}))
    assert make_bbox(path, False, None) == Rect(Point(0, 1), Point(5, 6)).to_radians()


def test_geojson_without_bbox(tmp_path):
    path = tmp_path / "d.json"
    path.write_text(json.dumps({"type": "Point", "coordinates": [1, 2]}))
    with pytest.raises(MissingBoundingBox):
        make_bbox(path, False, None)


def test_shapefile_bbox(tmp_path):
    path = tmp_path / "d.shp"
    with ShapefileWriter(path) as writer:
        writer.write_point(1, 2)
        writer.write_point(3, 4)
    assert make_bbox(path, False, None) == Rect(Point(1, 2), Point(3, 4)).to_radians()
    assert len(build_quadtree(path, _opts())) == 2


def test_build_csv(tmp_path):
    path = tmp_path / "d.csv"
    path.write_text("lng,lat,name\n1,2,a\n3,4,b\n")
    assert len(build_quadtree(path, _opts())) == 2


def test_build_geojson(tmp_path):
    path = tmp_path / "d.json"
    path.write_text(json.dumps({
        "type": "MultiPoint", "coordinates": [[1, 2], [3, 4], [5, 6]]}))
    assert len(build_quadtree(path, _opts())) == 3


def test_build_kml(tmp_path):
    path = tmp_path / "d.kml"
    path.write_text("<kml><Document><Point><coordinates>1,2</coordinates></Point>"
                    "</Document></kml>")
    assert len(build_quadtree(path, _opts())) == 1