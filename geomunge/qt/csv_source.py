"""Building a quadtree from a csv file of lng/lat points."""

from __future__ import annotations

import csv
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

from ..errors import (
    CannotParseRecord,
    CannotReadFile,
    GeoMungeError,
    MissingLatLngField,
    ParseType,
)
from ..geometry import Point
from .tree import Datum, QtData, Quadtree


def csv_field_val(record: Dict[str, str], field: str) -> str:
    """Return the value of a field in a csv record, or an empty string."""
    return record.get(field, "")


@dataclass
class CsvMeta:
    """Metadata of a csv row, keyed by lower-cased header."""

    record: Dict[str, str]

    def field_value(self, field: str) -> str:
        return csv_field_val(self.record, field)


def _parse_f64(text: str) -> float:
    if text != text.strip() or "_" in text or not text:
        raise ValueError(f"invalid float literal: {text!r}")
    return float(text)


def _lng_lat_index(headers: List[str]) -> Tuple[int, int]:
    lng_index = lat_index = None
    for index, header in enumerate(headers):
        name = header.lower()
        if name == "lng":
            lng_index = index
        elif name == "lat":
            lat_index = index
    if lng_index is None or lat_index is None:
        raise MissingLatLngField()
    return lng_index, lat_index


def _datum(index: int, row: List[str], keys: List[str], lng_i: int, lat_i: int) -> Datum:
    if len(row) != len(keys):
        raise CannotParseRecord(index, ParseType.CSV)
    try:
        lng = _parse_f64(row[lng_i])
    except ValueError:
        raise CannotParseRecord(index, ParseType.LNG) from None
    try:
        lat = _parse_f64(row[lat_i])
    except ValueError:
        raise CannotParseRecord(index, ParseType.LAT) from None
    return Datum(Point(lng, lat).to_radians(), CsvMeta(dict(zip(keys, row))), index)


def build_csv(path, opts: QtData) -> Quadtree:
    """Build a quadtree from a csv with lng and lat columns (case-insensitive).

    Rows that fail to parse or insert are reported on stderr and skipped.
    """
    path = Path(path)
    try:
        handle = path.open(newline="", encoding="utf-8", errors="replace")
    except OSError:
        raise CannotReadFile(path) from None
    with handle:
        rows = (row for row in csv.reader(handle, delimiter=",") if row)
        headers = next(rows, [])
        lng_i, lat_i = _lng_lat_index(headers)
        keys = [h.lower() for h in headers]
        qt = Quadtree(opts)
        for index, row in enumerate(rows):
            try:
                qt.insert(_datum(index, row, keys, lng_i, lat_i))
            except GeoMungeError as err:
                print(err, file=sys.stderr)
    return qt