"""Exception hierarchy with human-readable messages."""

from __future__ import annotations

import enum
from pathlib import Path


class ParseType(enum.Enum):
    """What kind of parsing failed for a record."""

    LNG = "Lng parsing failed"
    LAT = "Lat parsing failed"
    GEOJSON = "GeoJson feature parsing failed"
    SHAPEFILE = "Shapefile parsing failed"
    CSV = "CSV parsing failed"
    MISSING_GEOMETRY = "Missing geometry"


class UnsupportedGeoType(enum.Enum):
    """Geometry kinds that cannot be stored in a quadtree."""

    NESTED_KML_MULTI = "Nested KML Multigeometry"
    KML_ELEMENT = "KML Element"
    UNKNOWN_KML = "Unknown KML type"
    NULL_SHP = "Shapefile Null"
    MULTIPATCH_SHP = "Shapefile Multipatch"

    def __str__(self) -> str:
        return self.value


class QuadtreeErrorKind(enum.Enum):
    """Failure kinds reported by quadtree operations."""

    EMPTY = "QuadTree is empty"
    OUT_OF_BOUNDS = "Input point is out of bounds"
    NONE_IN_RADIUS = "No datum available within search radius"
    CANNOT_MAKE_BBOX = "Cannot make the bounding box"
    INVALID_DISTANCE = "Attempt to calculate distances on invalid shapes"
    CANNOT_FIND_SUB_NODE = "Cannot find sub node"
    CANNOT_CAST_INFINITY = "Cannot cast infinity"


class QuadtreeError(Exception):
    """Raised by quadtree operations."""

    def __init__(self, kind: QuadtreeErrorKind) -> None:
        self.kind = kind
        super().__init__(kind.value)


class GeoMungeError(Exception):
    """Base class of all package errors."""


def _path_str(path) -> str:
    return str(Path(path))


class FileIOError(GeoMungeError):
    def __init__(self, err) -> None:
        self.err = err
        super().__init__(f"File IO error encountered; {err}")


class CannotReadFile(GeoMungeError):
    def __init__(self, path) -> None:
        self.path = path
        super().__init__(f"Cannot read file at {_path_str(path)}")


class CannotParseFile(GeoMungeError):
    def __init__(self, path) -> None:
        self.path = path
        super().__init__(f"Cannot parse file at {_path_str(path)}")


class CannotParseFileExtension(GeoMungeError):
    def __init__(self, path) -> None:
        self.path = path
        super().__init__(f"Cannot parse file extension for file {_path_str(path)}")


class UnsupportedFileType(GeoMungeError):
    def __init__(self) -> None:
        super().__init__("Unsupported file type")


class UnexpectedEndOfInput(GeoMungeError):
    def __init__(self) -> None:
        super().__init__("Unexpected end of input")


class InvalidDelimiter(GeoMungeError):
    def __init__(self) -> None:
        super().__init__("Invalid delimiter provided")


class InvalidBoundingBox(GeoMungeError):
    def __init__(self) -> None:
        super().__init__(
            "The bounding box provided in the source file or on the command line is not valid"
        )


class MissingBoundingBox(GeoMungeError):
    def __init__(self) -> None:
        super().__init__("A bounding box was expected but not found")


class TypeDoesNotContainMetadata(GeoMungeError):
    def __init__(self) -> None:
        super().__init__(
            "The provided type was expected to contain metadata, but it does not"
        )


class CsvParseError(GeoMungeError):
    def __init__(self, err) -> None:
        self.err = err
        super().__init__(f"Error parsing csv input: {err}")


class CsvWriteError(GeoMungeError):
    def __init__(self, err) -> None:
        self.err = err
        super().__init__(f"Error writing csv output: {err}")


class ShapefileParseError(GeoMungeError):
    def __init__(self, err) -> None:
        self.err = err
        super().__init__(f"Error parsing shapefile input: {err}")


class ShapefileWriteError(GeoMungeError):
    def __init__(self, err) -> None:
        self.err = err
        super().__init__(f"Error writing to shapefile: {err}")


class MissingLatLngField(GeoMungeError):
    def __init__(self) -> None:
        super().__init__("The test points are missing a lng or lat field")


class CannotParseRecord(GeoMungeError):
    def __init__(self, index: int, parse_type: ParseType) -> None:
        self.index = index
        self.parse_type = parse_type
        super().__init__(
            f"Failed to parse record at index {index}: {parse_type.value}"
        )


class UnsupportedGeometry(GeoMungeError):
    def __init__(self, geo_type: UnsupportedGeoType) -> None:
        self.geo_type = geo_type
        super().__init__(f"Unsupported geometry type encountered: {geo_type}")


class InsertFailed(GeoMungeError):
    def __init__(self, index: int, err: QuadtreeError) -> None:
        self.index = index
        self.err = err
        super().__init__(
            f"Insert failed for geometry at index {index}: {err.kind.value}"
        )


class InsertFailedRequiresPoint(GeoMungeError):
    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(
            "Cannot insert non-point geometry into point quadtree at index "
            f"{index}, to enable bounds mode, create the quadtree without the -p flag"
        )


class FindError(GeoMungeError):
    def __init__(self, index: int, err: QuadtreeError) -> None:
        self.index = index
        self.err = err
        super().__init__(
            f"Match for input record at index {index}, failed: {err.kind.value}"
        )


class FailedToDeserialize(GeoMungeError):
    def __init__(self, path, err) -> None:
        self.path = path
        self.err = err
        super().__init__(
            f"Deserialization failed for file {_path_str(path)}, error provided: {err}"
        )


class ExecPipelineFailed(GeoMungeError):
    def __init__(self, err) -> None:
        self.err = err
        super().__init__(f"Run execution failure: {err}")


class CannotFindCommand(GeoMungeError):
    def __init__(self) -> None:
        super().__init__("Could not locate the proximity command for execution")