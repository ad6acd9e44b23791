"""Building a quadtree from a KML or KMZ file."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Iterator, Union

from ..errors import CannotParseRecord, GeoMungeError, ParseType
from ..geometry import Point
from ..kml import (
    Kml,
    KmlLocation,
    KmlMultiGeometry,
    KmlPlacemark,
    convert_kml_geom,
)
from .tree import Datum, QtData, Quadtree


def kml_field_val(item, field: str) -> str:
    """Render an attribute (or a placemark's name/description) of a KML item."""
    if isinstance(item, KmlMultiGeometry):
        raise ValueError("Nested MultiGeometries not allowed")
    if isinstance(item, KmlPlacemark):
        if field == "name":
            return item.name or ""
        if field == "description":
            return item.description or ""
    return item.attrs.get(field, "")


@dataclass
class KmlItemMeta:
    """Metadata of a KML item."""

    item: object

    def field_value(self, field: str) -> str:
        return kml_field_val(self.item, field)


def _data(index: int, item) -> Iterator[Union[Datum, GeoMungeError]]:
    # Failures are yielded rather than raised so one bad part does not stop the rest.
    if isinstance(item, KmlPlacemark):
        if item.geometry is None:
            yield CannotParseRecord(index, ParseType.MISSING_GEOMETRY)
            return
        try:
            geom, _ = convert_kml_geom(item.geometry)
        except GeoMungeError as err:
            yield err
            return
        yield Datum(geom, KmlItemMeta(item), index)
    elif isinstance(item, KmlMultiGeometry):
        for part in item.geometries:
            try:
                geom, meta = convert_kml_geom(part)
            except GeoMungeError as err:
                yield err
            else:
                yield Datum(geom, KmlItemMeta(meta), index)
    elif isinstance(item, KmlLocation):
        yield Datum(Point(item.latitude, item.longitude), KmlItemMeta(item), index)
    else:
        yield Datum(item.to_geometry().to_radians(), KmlItemMeta(item), index)


def build_kml(path, opts: QtData) -> Quadtree:
    """Build a quadtree from the geometry-bearing items of a KML/KMZ file.

    Items that fail to convert or insert are reported on stderr and skipped.
    """
    kml = Kml.from_path(path)
    qt = Quadtree(opts)
    for index, item in enumerate(kml):
        for result in _data(index, item):
            if isinstance(result, GeoMungeError):
                print(result, file=sys.stderr)
                continue
            try:
                qt.insert(result)
            except GeoMungeError as err:
                print(err, file=sys.stderr)
    return qt