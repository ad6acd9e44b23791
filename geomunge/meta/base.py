"""Shared interface and options for metadata readers."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Optional

from ..errors import InvalidDelimiter


@dataclass
class DataOpts:
    """Options for printing record metadata as csv."""

    headers: bool = False
    delimiter: str = ","
    start: int = 0
    length: Optional[int] = None
    index: bool = False


def check_delimiter(delimiter: str) -> str:
    """Return the delimiter if it is a single one-byte character."""
    if len(delimiter.encode("utf-8")) != 1:
        raise InvalidDelimiter()
    return delimiter


class Meta(abc.ABC):
    """Prints metadata of a geospatial file to stdout."""

    @abc.abstractmethod
    def headers(self) -> None:
        """Print header information."""

    @abc.abstractmethod
    def fields(self, show_types: bool) -> None:
        """Print metadata field names, with their types if asked and available."""

    @abc.abstractmethod
    def count(self) -> None:
        """Print the number of top-level records."""

    @abc.abstractmethod
    def data(self, opts: DataOpts) -> None:
        """Print record metadata in csv form."""