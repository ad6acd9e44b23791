import pytest

from geomunge.errors import CannotReadFile
from geomunge.geometry import Point, Rect
from geomunge.qt.shapefile_source import ShpMeta, build_shp, shp_bbox, shp_field_val
from geomunge.qt.tree import ParsedRecord, QtData
from geomunge.shapefile_io import FieldValue, ShapefileWriter

POINTS = [(1.0, 2.0), (3.0, 4.0), (-5.0, 6.0)]


def _opts(bounds=None, point=False):
    bounds = bounds or Rect(Point(-180, -90), Point(180, 90))
    return QtData(point, bounds.to_radians())


@pytest.fixture
def shp_path(tmp_path):
    path = tmp_path / "data.shp"
    with ShapefileWriter(path) as writer:
        for x, y in POINTS:
            writer.write_point(x, y)
    return path


def test_field_val():
    record = {"NAME": FieldValue("C", "abc"), "FLAG": FieldValue("L", True)}
    assert shp_field_val(record, "NAME") == "abc"
    assert shp_field_val(record, "FLAG") == "true"
    assert shp_field_val(record, "MISSING") == ""
    assert ShpMeta(record).field_value("NAME") == "abc"


def test_build_size(shp_path):
    qt = build_shp(shp_path, _opts())
    assert len(qt) == len(POINTS)


def test_build_point_tree_find(shp_path):
    qt = build_shp(shp_path, _opts(point=True))
    datum, dist = qt.find(ParsedRecord(0, [], Point(3.0, 4.0).to_radians()), None)
    assert datum.index == 1
    assert dist == pytest.approx(0.0, abs=1e-9)


def test_out_of_bounds_reported(shp_path, capsys):
    qt = build_shp(shp_path, _opts(bounds=Rect(Point(0, 0), Point(2, 3))))
    assert len(qt) == 1
    assert "Input point is out of bounds" in capsys.readouterr().err


def test_bbox(shp_path):
    low, high = shp_bbox(shp_path)
    assert low == Point(min(x for x, _ in POINTS), min(y for _, y in POINTS))
    assert high == Point(max(x for x, _ in POINTS), max(y for _, y in POINTS))


def test_missing_file(tmp_path):
    with pytest.raises(CannotReadFile):
        build_shp(tmp_path / "none.shp", _opts())
    with pytest.raises(CannotReadFile):
        shp_bbox(tmp_path / "none.shp")