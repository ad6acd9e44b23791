"""Reading comparison points and writing match results as csv."""

from __future__ import annotations

import csv
import sys
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from ..errors import (
    CannotParseRecord,
    CsvParseError,
    CsvWriteError,
    MissingLatLngField,
    ParseType,
)
from ..geometry import Point
from ..meta.base import check_delimiter
from ..qt.tree import Datum, ParsedRecord

MEAN_EARTH_RADIUS = 6371008.8
"""Mean earth radius in metres, used to convert angles to distances."""


@dataclass
class InputSettings:
    """Column positions and search options for the stream of comparison points."""

    lat_index: int
    lng_index: int
    id_index: Optional[int]
    id_label: str
    delimiter: str
    k: Optional[int] = None
    r: Optional[float] = None
    fields: Optional[List[str]] = None
    verbose: bool = False
    width: Optional[int] = None


def _parse_f64(text: str) -> float:
    if not text or text != text.strip() or "_" in text:
        raise ValueError(f"invalid float literal: {text!r}")
    return float(text)


def build_input_settings(
    stream,
    delimiter: str = ",",
    id_label: Optional[str] = None,
    k: Optional[int] = None,
    r: Optional[float] = None,
    fields: Optional[List[str]] = None,
    verbose: bool = False,
) -> Tuple[Iterator[List[str]], InputSettings]:
    """Read the header row and return the remaining rows with the input settings.

    The header must hold lng and lat columns (case-insensitive); an id column
    is picked up if present.
    """
    delimiter = check_delimiter(delimiter)
    rows = (row for row in csv.reader(stream, delimiter=delimiter) if row)
    try:
        headers = next(rows, [])
    except csv.Error as err:
        raise CsvParseError(err) from None

    id_index = lat_index = lng_index = None
    for i, header in enumerate(headers):
        name = header.lower()
        if name == "id":
            id_index = i
        elif name == "lat":
            lat_index = i
        elif name == "lng":
            lng_index = i

    if lat_index is None or lng_index is None:
        raise MissingLatLngField()

    settings = InputSettings(
        lat_index=lat_index,
        lng_index=lng_index,
        id_index=id_index,
        id_label="id" if id_label is None else id_label,
        delimiter=delimiter,
        k=k,
        r=r,
        fields=fields,
        verbose=verbose,
        width=len(headers),
    )
    return rows, settings


def parse_record(index: int, row: List[str], settings: InputSettings) -> ParsedRecord:
    """Extract the comparison point (in radians) and id from a csv row."""
    if settings.width is not None and len(row) != settings.width:
        raise CsvParseError(
            f"found record with {len(row)} fields, but the previous record "
            f"has {settings.width} fields"
        )
    try:
        lng = _parse_f64(row[settings.lng_index])
    except ValueError:
        raise CannotParseRecord(index, ParseType.LNG) from None
    try:
        lat = _parse_f64(row[settings.lat_index])
    except ValueError:
        raise CannotParseRecord(index, ParseType.LAT) from None
    record_id = None if settings.id_index is None else row[settings.id_index]
    return ParsedRecord(index, list(row), Point(lng, lat).to_radians(), record_id)


def make_csv_writer(stream, settings: InputSettings):
    """Create the output writer and write its header row."""
    writer = csv.writer(stream, delimiter=settings.delimiter, lineterminator="\n")
    header = [
        "input_index",
        settings.id_label,
        "lng",
        "lat",
        "distance",
        "find_index",
        *(settings.fields or []),
    ]
    try:
        writer.writerow(header)
    except (OSError, csv.Error) as err:
        raise CsvWriteError(err) from None
    return writer


def write_line(
    writer,
    datum: Datum,
    distance: float,
    parsed: ParsedRecord,
    settings: InputSettings,
) -> None:
    """Write one match; failures are reported on stderr."""
    row = [
        str(parsed.index),
        parsed.id or "",
        parsed.record[settings.lng_index],
        parsed.record[settings.lat_index],
        f"{distance * MEAN_EARTH_RADIUS:.3f}",
        str(datum.index),
        *datum.meta_iter(settings.fields),
    ]
    try:
        writer.writerow(row)
    except (OSError, csv.Error):
        print(
            f"Failed to write output line for record at index {parsed.index}.",
            file=sys.stderr,
        )