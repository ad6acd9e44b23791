import io

import pytest

from geomunge.errors import (
    CannotParseRecord,
    CsvParseError,
    InvalidDelimiter,
    MissingLatLngField,
    ParseType,
)
from geomunge.geometry import Point
from geomunge.proximity.csv_io import (
    build_input_settings,
    make_csv_writer,
    parse_record,
    write_line,
)
from geomunge.qt.csv_source import CsvMeta
from geomunge.qt.tree import Datum


def _settings(text="id,lng,lat\n1,10,20\n", **kwargs):
    return build_input_settings(io.StringIO(text), **kwargs)


def test_header_indices():
    rows, settings = _settings()
    assert (settings.id_index, settings.lng_index, settings.lat_index) == (0, 1, 2)
    assert settings.id_label == "id"
    assert next(rows) == ["1", "10", "20"]


def test_headers_are_case_insensitive():
    _, settings = _settings("LAT;Lng\n1;2\n", delimiter=";")
    assert (settings.lat_index, settings.lng_index, settings.id_index) == (0, 1, None)


def test_missing_lat_field():
    with pytest.raises(MissingLatLngField):
        _settings("id,lng\n1,2\n")


def test_empty_input():
    with pytest.raises(MissingLatLngField):
        _settings("")


def test_invalid_delimiter():
    with pytest.raises(InvalidDelimiter):
        _settings(delimiter=";;")


def test_parse_record_point_in_radians():
    rows, settings = _settings()
    parsed = parse_record(0, next(rows), settings)
    assert parsed.point == Point(10.0, 20.0).to_radians()
    assert parsed.id == "1"
    assert parsed.index == 0


@pytest.mark.parametrize(
    "row, parse_type",
    [(["1", "x", "20"], ParseType.LNG), (["1", "10", " 20"], ParseType.LAT)],
)
def test_parse_record_bad_coordinates(row, parse_type):
    _, settings = _settings()
    with pytest.raises(CannotParseRecord) as info:
        parse_record(4, row, settings)
    assert info.value.parse_type is parse_type
    assert info.value.index == 4


def test_parse_record_wrong_width():
    _, settings = _settings()
    with pytest.raises(CsvParseError):
        parse_record(0, ["1", "10"], settings)


def test_writer_header_and_line():
    rows, settings = _settings(fields=["name"], id_label="key")
    out = io.StringIO()
    writer = make_csv_writer(out, settings)
    parsed = parse_record(0, next(rows), settings)
    datum = Datum(Point(0.0, 0.0), CsvMeta({"name": "x"}), 7)
    write_line(writer, datum, 0.0, parsed, settings)
    assert out.getvalue().splitlines() == [
        "input_index,key,lng,lat,distance,find_index,name",
        "0,1,10,20,0.000,7,x",
    ]


def test_line_without_fields_has_base_columns_only():
    rows, settings = _settings("lng,lat\n5,6\n")
    out = io.StringIO()
    writer = make_csv_writer(out, settings)
    parsed = parse_record(2, next(rows), settings)
    write_line(writer, Datum(Point(0.0, 0.0), None, 3), 0.0, parsed, settings)
    lines = out.getvalue().splitlines()
    assert lines[1] == "2,,5,6,0.000,3"
    assert len(lines[0].split(",")) == len(lines[1].split(","))