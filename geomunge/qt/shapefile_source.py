"""Building a quadtree from an ESRI shapefile."""

from __future__ import annotations

import itertools
import struct
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

from ..errors import CannotParseRecord, CannotReadFile, GeoMungeError, ParseType
from ..geometry import Point
from ..shapefile_io import FieldValue, ShapefileReader
from ..shp import convert_dbase_field_opt, convert_shape
from .tree import Datum, QtData, Quadtree


def shp_field_val(record: Dict[str, FieldValue], field: str) -> str:
    """Render a dBase field of a record as text, or an empty string."""
    return convert_dbase_field_opt(record.get(field))


@dataclass
class ShpMeta:
    """Metadata of a shapefile attribute record."""

    record: Dict[str, FieldValue]

    def field_value(self, field: str) -> str:
        return shp_field_val(self.record, field)


def _report(err: Exception) -> None:
    print(err, file=sys.stderr)


def _open(path: Path) -> ShapefileReader:
    try:
        return ShapefileReader(path)
    except (OSError, ValueError, struct.error):
        raise CannotReadFile(path) from None


def _insert_shape(qt: Quadtree, index: int, shape, meta: ShpMeta) -> None:
    try:
        for geom in convert_shape(shape):
            try:
                qt.insert(Datum(geom, meta, index))
            except GeoMungeError as err:
                _report(err)
    except GeoMungeError as err:
        _report(err)


def build_shp(path, opts: QtData) -> Quadtree:
    """Build a quadtree from the shapes of a shapefile.

    Shapes that fail to convert or insert are reported on stderr and skipped.
    """
    reader = _open(Path(path))
    qt = Quadtree(opts)
    pairs = reader.iter_shapes_and_records()
    for index in itertools.count():
        try:
            shape, record = next(pairs)
        except StopIteration:
            break
        except (ValueError, struct.error):
            _report(CannotParseRecord(index, ParseType.SHAPEFILE))
            break
        _insert_shape(qt, index, shape, ShpMeta(record))
    return qt


def shp_bbox(path) -> Tuple[Point, Point]:
    """Return the (min, max) corners, in degrees, of a shapefile's header bbox."""
    header = _open(Path(path)).header
    return header.bbox_min, header.bbox_max