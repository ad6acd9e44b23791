"""Metadata reporting for ESRI shapefiles."""

from __future__ import annotations

import csv
import itertools
import math
import struct
import sys
from decimal import Decimal
from pathlib import Path
from typing import List

from ..errors import CannotReadFile, ShapefileParseError, UnexpectedEndOfInput
from ..shapefile_io import ShapefileReader
from ..shp import convert_dbase_field_opt
from .base import DataOpts, Meta, check_delimiter

_READ_ERRORS = (ValueError, struct.error)


def _fmt(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return format(Decimal(int(value)), "f")
    return format(Decimal(repr(value)), "f")


class ShapefileMeta(Meta):
    """Metadata of a shapefile and its dBase attribute table."""

    def __init__(self, path) -> None:
        self.path = Path(path)

    def _reader(self) -> ShapefileReader:
        try:
            return ShapefileReader(self.path)
        except (OSError,) + _READ_ERRORS:
            raise CannotReadFile(self.path) from None

    def field_names(self, show_types: bool) -> List[str]:
        """Field names of the first record, in table order, optionally with types."""
        pairs = self._reader().iter_shapes_and_records()
        try:
            first = next(pairs, None)
        except _READ_ERRORS as err:
            raise ShapefileParseError(err) from None
        if first is None:
            raise UnexpectedEndOfInput()
        _, record = first
        return [
            f"{name} [{value.field_type()}]" if show_types else name
            for name, value in record.items()
        ]

    def headers(self) -> None:
        header = self._reader().header
        lo, hi = header.bbox_min, header.bbox_max
        print(f"Shapefile version: {header.version}")
        print(f"Shape type: {header.shape_type}")
        print(f"Bounding box: [{_fmt(lo.x)}, {_fmt(lo.y)}, {_fmt(hi.x)}, {_fmt(hi.y)}]")
        print(f"File length: {header.file_length}")

    def fields(self, show_types: bool) -> None:
        for name in self.field_names(show_types):
            print(name)

    def count(self) -> None:
        try:
            total = sum(1 for _ in self._reader().iter_shapes_and_records())
        except _READ_ERRORS as err:
            raise ShapefileParseError(err) from None
        print(total)

    def data(self, opts: DataOpts) -> None:
        delimiter = check_delimiter(opts.delimiter)
        reader = self._reader()
        writer = csv.writer(sys.stdout, delimiter=delimiter, lineterminator="\n")

        # Field order comes from the first record so every row lines up.
        names = self.field_names(False)
        if opts.headers:
            writer.writerow((["index"] if opts.index else []) + names)

        stop = None if opts.length is None else opts.start + opts.length
        window = itertools.islice(reader.iter_shapes_and_records(), opts.start, stop)
        index = opts.start
        while True:
            try:
                _, record = next(window)
            except StopIteration:
                break
            except _READ_ERRORS:
                print(f"cannot read record at index {index}", file=sys.stderr)
                break
            row = [convert_dbase_field_opt(record.get(name)) for name in names]
            if opts.index:
                row.insert(0, str(index))
            try:
                writer.writerow(row)
            except OSError:
                print(
                    f"failed to write output for record at index {index}",
                    file=sys.stderr,
                )
            index += 1