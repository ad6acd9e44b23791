"""Minimal ESRI shapefile (.shp/.shx/.dbf) reader and point writer."""

from __future__ import annotations

import datetime as _dt
import enum
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from .geometry import Point

_HEADER_SIZE = 100
_FILE_CODE = 9994
_VERSION = 1000


class ShapeType(enum.IntEnum):
    NULL = 0
    POINT = 1
    POLYLINE = 3
    POLYGON = 5
    MULTIPOINT = 8
    POINTZ = 11
    POLYLINEZ = 13
    POLYGONZ = 15
    MULTIPOINTZ = 18
    POINTM = 21
    POLYLINEM = 23
    POLYGONM = 25
    MULTIPOINTM = 28
    MULTIPATCH = 31

    def __str__(self) -> str:
        return self.name.title().replace("z", "Z").replace("m", "M") if self.name.endswith(("Z", "M")) else self.name.title()


_POINT_TYPES = {ShapeType.POINT, ShapeType.POINTZ, ShapeType.POINTM}
_MULTIPOINT_TYPES = {ShapeType.MULTIPOINT, ShapeType.MULTIPOINTZ, ShapeType.MULTIPOINTM}
_PARTED_TYPES = {
    ShapeType.POLYLINE, ShapeType.POLYLINEZ, ShapeType.POLYLINEM,
    ShapeType.POLYGON, ShapeType.POLYGONZ, ShapeType.POLYGONM,
    ShapeType.MULTIPATCH,
}


@dataclass
class Shape:
    """A shape record: its type, its (x, y) points and the start index of each part."""

    shape_type: ShapeType
    points: list = field(default_factory=list)
    parts: list = field(default_factory=list)


_FIELD_TYPE_NAMES = {
    "C": "Character",
    "N": "Numeric",
    "F": "Float",
    "L": "Logical",
    "D": "Date",
    "I": "Integer",
    "O": "Double",
    "M": "Memo",
    "Y": "Currency",
    "T": "DateTime",
}


@dataclass(frozen=True)
class FieldValue:
    """A dBase field value: its one-letter type code and Python value."""

    kind: str
    value: Any

    def field_type(self) -> str:
        return _FIELD_TYPE_NAMES.get(self.kind, self.kind)


@dataclass(frozen=True)
class ShapefileHeader:
    version: int
    shape_type: ShapeType
    bbox_min: Point
    bbox_max: Point
    file_length: int


def _parse_header(data: bytes) -> ShapefileHeader:
    if len(data) < _HEADER_SIZE:
        raise ValueError("shapefile header is truncated")
    (code,) = struct.unpack(">i", data[0:4])
    if code != _FILE_CODE:
        raise ValueError("not a shapefile")
    (length,) = struct.unpack(">i", data[24:28])
    version, shape_type = struct.unpack("<ii", data[28:36])
    xmin, ymin, xmax, ymax = struct.unpack("<4d", data[36:68])
    return ShapefileHeader(
        version, ShapeType(shape_type), Point(xmin, ymin), Point(xmax, ymax), length
    )


def _parse_shape(content: bytes) -> Shape:
    (raw_type,) = struct.unpack("<i", content[0:4])
    shape_type = ShapeType(raw_type)
    if shape_type == ShapeType.NULL:
        return Shape(shape_type)
    if shape_type in _POINT_TYPES:
        x, y = struct.unpack("<2d", content[4:20])
        return Shape(shape_type, [(x, y)], [0])
    if shape_type in _MULTIPOINT_TYPES:
        (n,) = struct.unpack("<i", content[36:40])
        pts = list(struct.iter_unpack("<2d", content[40:40 + 16 * n]))
        if len(pts) != n:
            raise ValueError("multipoint record is truncated")
        return Shape(shape_type, pts, [0])
    n_parts, n_points = struct.unpack("<ii", content[36:44])
    start = 44
    parts = list(struct.unpack(f"<{n_parts}i", content[start:start + 4 * n_parts]))
    start += 4 * n_parts
    if shape_type == ShapeType.MULTIPATCH:
        start += 4 * n_parts
    pts = list(struct.iter_unpack("<2d", content[start:start + 16 * n_points]))
    if len(pts) != n_points:
        raise ValueError("shape record is truncated")
    return Shape(shape_type, pts, parts)


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").replace("\x00", "").strip()


def _number(raw: bytes):
    text = _text(raw)
    if not text or set(text) == {"*"}:
        return None
    return float(text)


def _parse_field(kind: str, raw: bytes) -> FieldValue:
    if kind == "C":
        text = _text(raw)
        return FieldValue(kind, text or None)
    if kind in ("N", "F"):
        return FieldValue(kind, _number(raw))
    if kind == "L":
        text = _text(raw)
        value = True if text in ("T", "t", "Y", "y") else False if text in ("F", "f", "N", "n") else None
        return FieldValue(kind, value)
    if kind == "D":
        text = _text(raw)
        if not text:
            return FieldValue(kind, None)
        return FieldValue(kind, _dt.date(int(text[0:4]), int(text[4:6]), int(text[6:8])))
    if kind == "I":
        return FieldValue(kind, struct.unpack("<i", raw[:4])[0])
    if kind == "O":
        return FieldValue(kind, struct.unpack("<d", raw[:8])[0])
    if kind == "Y":
        return FieldValue(kind, struct.unpack("<q", raw[:8])[0] / 10000.0)
    if kind == "T":
        day, ms = struct.unpack("<ii", raw[:8])
        base = _dt.datetime.combine(_dt.date.fromordinal(day - 1721425), _dt.time())
        return FieldValue(kind, base + _dt.timedelta(milliseconds=ms))
    if kind == "M":
        return FieldValue(kind, _text(raw))
    raise ValueError(f"unsupported dbase field type {kind!r}")


def _read_dbf(data: bytes) -> list:
    if len(data) < 32:
        raise ValueError("dbf header is truncated")
    n_records, header_len, record_len = struct.unpack("<IHH", data[4:12])
    fields = []
    offset = 32
    while offset < header_len - 1 and data[offset] != 0x0D:
        desc = data[offset:offset + 32]
        name = desc[0:11].split(b"\x00", 1)[0].decode("ascii", errors="replace").strip()
        fields.append((name, chr(desc[11]), desc[16]))
        offset += 32
    records = []
    pos = header_len
    for _ in range(n_records):
        row = data[pos:pos + record_len]
        if len(row) < record_len:
            raise ValueError("dbf record is truncated")
        pos += record_len
        col = 1
        record = {}
        for name, kind, length in fields:
            record[name] = _parse_field(kind, row[col:col + length])
            col += length
        records.append(record)
    return records


class ShapefileReader:
    """Reads shapes and their attribute records from a shapefile and its .dbf."""

    def __init__(self, path) -> None:
        self.path = Path(path)
        self._shp = self.path.read_bytes()
        self._dbf = self.path.with_suffix(".dbf").read_bytes()
        self.header = _parse_header(self._shp)

    def iter_shapes_and_records(self) -> Iterator[tuple]:
        """Yield (Shape, record dict) pairs in file order."""
        records = _read_dbf(self._dbf)
        offset = _HEADER_SIZE
        index = 0
        while offset + 8 <= len(self._shp):
            _, words = struct.unpack(">ii", self._shp[offset:offset + 8])
            content = self._shp[offset + 8:offset + 8 + 2 * words]
            if len(content) < 2 * words or len(content) < 4:
                raise ValueError("shape record is truncated")
            offset += 8 + 2 * words
            if index >= len(records):
                raise ValueError("dbf has fewer records than shp")
            yield _parse_shape(content), records[index]
            index += 1

    def __enter__(self) -> "ShapefileReader":
        return self

    def __exit__(self, *args) -> None:
        return None


def _main_header(shape_type: int, length_words: int, points: list) -> bytes:
    if points:
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        bbox = (min(xs), min(ys), max(xs), max(ys))
    else:
        bbox = (0.0, 0.0, 0.0, 0.0)
    return (
        struct.pack(">7i", _FILE_CODE, 0, 0, 0, 0, 0, length_words)
        + struct.pack("<ii", _VERSION, shape_type)
        + struct.pack("<8d", *bbox, 0.0, 0.0, 0.0, 0.0)
    )


class ShapefileWriter:
    """Writes point shapes with empty attribute records."""

    def __init__(self, path) -> None:
        self.path = Path(path)
        self._points: list = []
        self._closed = False

    def write_point(self, x: float, y: float) -> None:
        if self._closed:
            raise ValueError("writer is closed")
        self._points.append((float(x), float(y)))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        pts = self._points
        content_words = 10
        shp_words = (_HEADER_SIZE + len(pts) * (8 + 2 * content_words)) // 2
        shx_words = (_HEADER_SIZE + len(pts) * 8) // 2
        shp = bytearray(_main_header(ShapeType.POINT, shp_words, pts))
        shx = bytearray(_main_header(ShapeType.POINT, shx_words, pts))
        for number, (x, y) in enumerate(pts, start=1):
            shx += struct.pack(">ii", len(shp) // 2, content_words)
            shp += struct.pack(">ii", number, content_words)
            shp += struct.pack("<i2d", ShapeType.POINT, x, y)
        today = _dt.date.today()
        dbf = bytearray(
            struct.pack("<4BIHH20x", 0x03, today.year - 1900, today.month, today.day,
                        len(pts), 33, 1)
        )
        dbf += b"\x0d" + b" " * len(pts) + b"\x1a"
        self.path.write_bytes(bytes(shp))
        self.path.with_suffix(".shx").write_bytes(bytes(shx))
        self.path.with_suffix(".dbf").write_bytes(bytes(dbf))

    def __enter__(self) -> "ShapefileWriter":
        return self

    def __exit__(self, *args) -> None:
        self.close()