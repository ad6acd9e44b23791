"""Command line tool that finds nearest neighbours of csv points in a quadtree."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from ..errors import GeoMungeError
from ..qt.load import build_quadtree, make_bbox
from ..qt.tree import QtData
from .csv_io import MEAN_EARTH_RADIUS, build_input_settings, make_csv_writer
from .runner import exec_multi_thread, exec_single_thread

DEFAULT_PATH = "./data.shp"


def _non_negative(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {text}")
    return value


def _u8(text: str) -> int:
    value = int(text)
    if not 0 <= value <= 255:
        raise argparse.ArgumentTypeError(f"expected an integer from 0 to 255, got {text}")
    return value


def _split_fields(text: str):
    return text.split(",")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="proximity",
        description=(
            "Find nearest neighbours using a quadtree built from an input file, "
            "tested against points given as csv on stdin. Distances use the "
            "haversine formula."
        ),
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=DEFAULT_PATH,
        type=Path,
        help="File to build the quadtree from; defaults to ./data.shp.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging to stderr.")
    parser.add_argument(
        "-t", "--print", action="store_true", help="Print a summary of the quadtree to stderr."
    )
    parser.add_argument(
        "-p", "--point", action="store_true", help="Build a point quadtree (points only)."
    )
    parser.add_argument("-k", type=_non_negative, default=None, help="Retrieve k nearest neighbours.")
    parser.add_argument(
        "-r", type=float, default=None, help="Maximum search radius in metres."
    )
    bounds = parser.add_mutually_exclusive_group()
    bounds.add_argument(
        "-s", "--sphere", action="store_true", help="Use the whole sphere as bounding box."
    )
    bounds.add_argument(
        "-x",
        "--bbox",
        default=None,
        help="Bounding box in degrees: lng_min,lat_min,lng_max,lat_max.",
    )
    parser.add_argument("-d", "--depth", type=_u8, default=None, help="Maximum depth (default 10).")
    parser.add_argument(
        "-c",
        "--children",
        type=_non_negative,
        default=None,
        help="Entries per node before splitting (default 10).",
    )
    parser.add_argument(
        "--single-thread", action="store_true", help="Run searches on a single thread."
    )
    parser.add_argument(
        "--fields",
        type=_split_fields,
        action="extend",
        default=None,
        help="Comma separated metadata fields to output with each match.",
    )
    parser.add_argument(
        "--id-label", default=None, help='Label for the input id column (default "id").'
    )
    parser.add_argument(
        "-l", "--delimiter", default=",", help="Delimiter for input and output csv."
    )
    return parser


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    radius = None if args.r is None else args.r / MEAN_EARTH_RADIUS
    try:
        rows, settings = build_input_settings(
            sys.stdin,
            delimiter=args.delimiter,
            id_label=args.id_label,
            k=args.k,
            r=radius,
            fields=args.fields,
            verbose=args.verbose,
        )
        writer = make_csv_writer(sys.stdout, settings)

        opts = QtData(
            args.point,
            make_bbox(args.path, args.sphere, args.bbox),
            args.depth,
            args.children,
        )
        if args.verbose:
            kind = "point" if opts.is_point_qt else "bounds"
            print(
                f"Building {kind} quadtree: depth={opts.depth}, children={opts.max_children}",
                file=sys.stderr,
            )

        start = time.perf_counter()
        qt = build_quadtree(args.path, opts)
        if args.verbose or args.print:
            print(
                f"Quadtree with {len(qt)} children built in {_elapsed_ms(start)} ms",
                file=sys.stderr,
            )
        if args.print:
            print(qt, file=sys.stderr)

        start = time.perf_counter()
        if args.single_thread:
            if settings.verbose:
                print("Starting single-threaded execution", file=sys.stderr)
            exec_single_thread(rows, writer, qt, settings)
        else:
            if args.verbose:
                print("Starting multi-threaded execution", file=sys.stderr)
            exec_multi_thread(rows, writer, qt, settings)
        if settings.verbose:
            print(f"Finished in {_elapsed_ms(start)} ms", file=sys.stderr)
    except GeoMungeError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())