"""Metadata reporting for KML and KMZ files."""

from __future__ import annotations

import csv
import itertools
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from ..kml import Kml, KmlContainer, KmlElement, KmlPlacemark, read_kml
from .base import DataOpts, Meta, check_delimiter


def _window(items: Iterable, start: int, length: Optional[int]):
    stop = None if length is None else start + length
    return itertools.islice(items, start, stop)


def _is_document(node) -> bool:
    return isinstance(node, KmlContainer) and str(
        getattr(node, "kind", "")
    ).lower().endswith("document")


def _header_elements(root) -> list:
    """Return the direct children of the top-level Document, if there is one."""
    if _is_document(root):
        return list(root.elements)
    if isinstance(root, KmlContainer):
        document = next((e for e in root.elements if _is_document(e)), None)
        if document is not None:
            return list(document.elements)
    return []


def _placemark_children(placemark: KmlPlacemark) -> list:
    return list(getattr(placemark, "children", ()) or ())


def _make_fields(kml: Kml, start: int = 0, length: Optional[int] = None) -> List[str]:
    """Field names found on placemarks; name and description are always present."""
    fields = {"name", "description"}
    for item in _window(kml.iter(), start, length):
        if isinstance(item, KmlPlacemark):
            fields.update(str(child.name) for child in _placemark_children(item))
    return sorted(fields)


def _placemark_row(placemark: KmlPlacemark, fields: List[str]) -> List[str]:
    data = {
        child.name: getattr(child, "content", None)
        for child in _placemark_children(placemark)
    }
    row = []
    for field in fields:
        if field == "name":
            row.append(placemark.name or "")
        elif field == "description":
            row.append(placemark.description or "")
        else:
            row.append(data.get(field) or "")
    return row


class KmlMeta(Meta):
    """Metadata of a KML or KMZ document; only placemarks carry fields."""

    def __init__(self, path) -> None:
        self.path = Path(path)

    def headers(self) -> None:
        for element in _header_elements(read_kml(self.path)):
            if isinstance(element, KmlElement):
                content = getattr(element, "content", None)
                if content is not None:
                    print(f"{element.name}: {content}")

    def fields(self, show_types: bool) -> None:
        for field in _make_fields(Kml.from_path(self.path)):
            print(field)

    def count(self) -> None:
        kml = Kml.from_path(self.path)
        print(sum(1 for _ in kml))

    def data(self, opts: DataOpts) -> None:
        delimiter = check_delimiter(opts.delimiter)
        writer = csv.writer(sys.stdout, delimiter=delimiter, lineterminator="\n")

        kml = Kml.from_path(self.path)
        fields = _make_fields(kml, opts.start, opts.length)

        if opts.headers:
            writer.writerow((["index"] if opts.index else []) + fields)

        for i, item in enumerate(_window(kml.iter(), opts.start, opts.length)):
            row = [str(i)] if opts.index else []
            if isinstance(item, KmlPlacemark):
                row += _placemark_row(item, fields)
            else:
                row += ["" for _ in fields]
            writer.writerow(row)