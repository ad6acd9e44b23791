import pytest

from geomunge.errors import CannotReadFile, MissingLatLngField
from geomunge.geometry import Point, Rect
from geomunge.qt.csv_source import CsvMeta, build_csv, csv_field_val
from geomunge.qt.tree import ParsedRecord, QtData

WORLD = Rect(Point(-180.0, -90.0), Point(180.0, 90.0)).to_radians()


def _write(tmp_path, text):
    path = tmp_path / "points.csv"
    path.write_text(text, encoding="utf-8")
    return path


def _record(lng, lat):
    return ParsedRecord(0, [], Point(lng, lat).to_radians())


def test_csv_field_val():
    record = {"name": "a"}
    assert csv_field_val(record, "name") == "a"
    assert csv_field_val(record, "other") == ""
    assert CsvMeta(record).field_value("name") == "a"


def test_build_and_lookup(tmp_path):
    path = _write(tmp_path, "Name,LNG,Lat\nalpha,1,2\nbeta,50,50\n")
    qt = build_csv(path, QtData(False, WORLD))
    assert len(qt) == 2
    datum, dist = qt.find(_record(1, 2), None)
    assert datum.index == 0
    assert dist == 0.0
    assert list(datum.meta_iter(["name", "lng", "Name"])) == ["alpha", "1", ""]


def test_bad_values_reported(tmp_path, capsys):
    path = _write(tmp_path, "name,lng,lat\na,x,2\nb,1, 2\nc,3,4\n")
    qt = build_csv(path, QtData(True, WORLD))
    assert len(qt) == 1
    err = capsys.readouterr().err
    assert "Failed to parse record at index 0: Lng parsing failed" in err
    assert "Failed to parse record at index 1: Lat parsing failed" in err


def test_unequal_row_reported(tmp_path, capsys):
    path = _write(tmp_path, "name,lng,lat\na,1\nb,1,2\n")
    qt = build_csv(path, QtData(False, WORLD))
    assert len(qt) == 1
    assert "index 0: CSV parsing failed" in capsys.readouterr().err


def test_blank_lines_skipped(tmp_path):
    path = _write(tmp_path, "lng,lat\n\n1,2\n\n3,4\n")
    qt = build_csv(path, QtData(True, WORLD))
    datum, _ = qt.find(_record(3, 4), None)
    assert datum.index == 1


def test_missing_lat(tmp_path):
    path = _write(tmp_path, "name,lng\na,1\n")
    with pytest.raises(MissingLatLngField):
        build_csv(path, QtData(False, WORLD))


def test_empty_file(tmp_path):
    path = _write(tmp_path, "")
    with pytest.raises(MissingLatLngField):
        build_csv(path, QtData(False, WORLD))


def test_missing_file(tmp_path):
    with pytest.raises(CannotReadFile) as info:
        build_csv(tmp_path / "absent.csv", QtData(False, WORLD))
    assert "Cannot read file at" in str(info.value)