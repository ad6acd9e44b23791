"""Reading KML/KMZ documents and iterating their geometry-bearing items."""

from __future__ import annotations

import xml.etree.ElementTree as ET
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Union

from .errors import (
    CannotParseFile,
    CannotParseFileExtension,
    CannotReadFile,
    UnsupportedFileType,
    UnsupportedGeometry,
    UnsupportedGeoType,
)
from .geometry import Geometry, LineString, Point, Polygon


@dataclass
class KmlPoint:
    coord: tuple
    attrs: dict = field(default_factory=dict)

    def to_geometry(self) -> Point:
        return Point(self.coord[0], self.coord[1])


@dataclass
class KmlLineString:
    coords: list
    attrs: dict = field(default_factory=dict)

    def to_geometry(self) -> LineString:
        return LineString(Point(x, y) for x, y in self.coords)


@dataclass
class KmlLinearRing(KmlLineString):
    pass


@dataclass
class KmlPolygon:
    outer: KmlLinearRing
    inner: list = field(default_factory=list)
    attrs: dict = field(default_factory=dict)

    def to_geometry(self) -> Polygon:
        return Polygon(self.outer.to_geometry(), [r.to_geometry() for r in self.inner])


@dataclass
class KmlLocation:
    longitude: float
    latitude: float
    altitude: float = 0.0
    attrs: dict = field(default_factory=dict)


@dataclass
class KmlElement:
    name: str
    content: Optional[str] = None
    attrs: dict = field(default_factory=dict)
    children: list = field(default_factory=list)


@dataclass
class KmlMultiGeometry:
    geometries: list
    attrs: dict = field(default_factory=dict)


@dataclass
class KmlPlacemark:
    name: Optional[str] = None
    description: Optional[str] = None
    geometry: object = None
    children: list = field(default_factory=list)
    attrs: dict = field(default_factory=dict)


@dataclass
class KmlContainer:
    """A kml root, Document or Folder holding other nodes."""

    kind: str
    elements: list = field(default_factory=list)
    attrs: dict = field(default_factory=dict)


KmlNode = Union[
    KmlContainer, KmlPoint, KmlLineString, KmlLinearRing, KmlPolygon,
    KmlLocation, KmlPlacemark, KmlMultiGeometry, KmlElement,
]

_GEOMETRY_TAGS = {"Point", "LineString", "LinearRing", "Polygon", "MultiGeometry"}
_CONTAINERS = {"kml", "Document", "Folder"}


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(el: ET.Element, name: str) -> Optional[ET.Element]:
    return next((c for c in el if _local(c.tag) == name), None)


def _child_text(el: ET.Element, name: str) -> Optional[str]:
    c = _child(el, name)
    if c is None or c.text is None:
        return None
    return c.text.strip()


def _coords(el: ET.Element) -> list:
    text = _child_text(el, "coordinates")
    if text is None:
        raise ValueError(f"{_local(el.tag)} is missing coordinates")
    out = []
    for tuple_text in text.split():
        values = [float(v) for v in tuple_text.split(",")]
        if len(values) < 2:
            raise ValueError(f"invalid coordinate {tuple_text!r}")
        out.append((values[0], values[1]))
    return out


def _ring(el: Optional[ET.Element]) -> KmlLinearRing:
    if el is None:
        raise ValueError("boundary is missing a LinearRing")
    ring = _child(el, "LinearRing")
    if ring is None:
        raise ValueError("boundary is missing a LinearRing")
    return KmlLinearRing(_coords(ring), dict(ring.attrib))


def _element(el: ET.Element) -> KmlElement:
    text = el.text.strip() if el.text and el.text.strip() else None
    return KmlElement(_local(el.tag), text, dict(el.attrib), [_element(c) for c in el])


def _parse(el: ET.Element) -> KmlNode:
    name = _local(el.tag)
    attrs = dict(el.attrib)
    if name in _CONTAINERS:
        return KmlContainer(name, [_parse(c) for c in el], attrs)
    if name == "Point":
        coords = _coords(el)
        if not coords:
            raise ValueError("Point has no coordinates")
        return KmlPoint(coords[0], attrs)
    if name == "LineString":
        return KmlLineString(_coords(el), attrs)
    if name == "LinearRing":
        return KmlLinearRing(_coords(el), attrs)
    if name == "Polygon":
        outer = _ring(_child(el, "outerBoundaryIs"))
        inner = [
            KmlLinearRing(_coords(r), dict(r.attrib))
            for b in el if _local(b.tag) == "innerBoundaryIs"
            for r in b if _local(r.tag) == "LinearRing"
        ]
        return KmlPolygon(outer, inner, attrs)
    if name == "MultiGeometry":
        return KmlMultiGeometry(
            [_parse(c) for c in el if _local(c.tag) in _GEOMETRY_TAGS], attrs
        )
    if name == "Location":
        return KmlLocation(
            float(_child_text(el, "longitude") or 0.0),
            float(_child_text(el, "latitude") or 0.0),
            float(_child_text(el, "altitude") or 0.0),
            attrs,
        )
    if name == "Placemark":
        placemark = KmlPlacemark(attrs=attrs)
        for c in el:
            tag = _local(c.tag)
            if tag == "name":
                placemark.name = (c.text or "").strip()
            elif tag == "description":
                placemark.description = (c.text or "").strip()
            elif tag in _GEOMETRY_TAGS and placemark.geometry is None:
                placemark.geometry = _parse(c)
            else:
                placemark.children.append(_element(c))
        return placemark
    return _element(el)


def read_kml(path) -> KmlNode:
    """Load the root node of a `.kml` or `.kmz` file."""
    path = Path(path)
    if not path.suffix:
        raise CannotParseFileExtension(path)
    ext = path.suffix[1:]
    if ext == "kml":
        try:
            data = path.read_bytes()
        except OSError:
            raise CannotReadFile(path) from None
    elif ext == "kmz":
        try:
            with zipfile.ZipFile(path) as archive:
                member = next(
                    (n for n in archive.namelist() if n.lower().endswith(".kml")), None
                )
                if member is None:
                    raise CannotParseFile(path)
                data = archive.read(member)
        except (OSError, zipfile.BadZipFile):
            raise CannotReadFile(path) from None
    else:
        raise UnsupportedFileType()
    try:
        return _parse(ET.fromstring(data))
    except (ET.ParseError, ValueError):
        raise CannotParseFile(path) from None


def convert_kml_geom(item) -> tuple:
    """Convert a KML geometry into a radian geometry, paired with the item."""
    if isinstance(item, (KmlPoint, KmlPolygon, KmlLineString)):
        geom: Geometry = item.to_geometry()
        return geom.to_radians(), item
    if isinstance(item, KmlMultiGeometry):
        raise UnsupportedGeometry(UnsupportedGeoType.NESTED_KML_MULTI)
    if isinstance(item, KmlElement):
        raise UnsupportedGeometry(UnsupportedGeoType.KML_ELEMENT)
    raise UnsupportedGeometry(UnsupportedGeoType.UNKNOWN_KML)


_ITEM_TYPES = (
    KmlMultiGeometry, KmlLinearRing, KmlLineString, KmlLocation,
    KmlPlacemark, KmlPoint, KmlPolygon,
)


def _flatten(node) -> Iterator:
    if isinstance(node, KmlContainer):
        for child in node.elements:
            yield from _flatten(child)
    elif isinstance(node, _ITEM_TYPES):
        yield node


class Kml:
    """A KML document whose iteration yields only geometry-bearing items."""

    def __init__(self, root) -> None:
        self.root = root

    @classmethod
    def from_path(cls, path) -> "Kml":
        return cls(read_kml(path))

    def __iter__(self) -> Iterator:
        return _flatten(self.root)

    def iter(self) -> Iterator:
        return _flatten(self.root)