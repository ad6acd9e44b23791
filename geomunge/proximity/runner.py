"""Matching comparison points against a quadtree and writing the results."""

from __future__ import annotations

import csv
import itertools
import os
import sys
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Tuple, Union

from ..errors import CsvParseError, GeoMungeError
from ..qt.tree import ParsedRecord, Quadtree, SearchResult
from .csv_io import InputSettings, parse_record, write_line


@dataclass
class FindResult:
    """A parsed comparison point with its matches, nearest first."""

    parsed: ParsedRecord
    results: List[SearchResult] = field(default_factory=list)


Output = Union[FindResult, GeoMungeError]


def run_find(index: int, row, qt: Quadtree, settings: InputSettings) -> FindResult:
    """Find the match (or k matches) for one input row.

    A row that is itself an error, as produced when the input could not be
    read, is raised as is.
    """
    if isinstance(row, BaseException):
        raise row
    parsed = parse_record(index, row, settings)
    if settings.k is None or settings.k == 1:
        return FindResult(parsed, [qt.find(parsed, settings.r)])
    return FindResult(parsed, qt.knn(parsed, settings.k, settings.r))


def run_output(writer, settings: InputSettings, output: Output) -> None:
    """Write every match of a result, or report an error on stderr."""
    if isinstance(output, BaseException):
        print(output, file=sys.stderr)
        return
    for datum, distance in output.results:
        write_line(writer, datum, distance, output.parsed, settings)


def _enumerate_rows(rows: Iterable) -> Iterator[Tuple[int, object]]:
    """Number the rows; a read failure becomes a final error entry."""
    iterator = iter(rows)
    for index in itertools.count():
        try:
            row = next(iterator)
        except StopIteration:
            return
        except csv.Error as err:
            yield index, CsvParseError(err)
            return
        yield index, row


def _find_or_error(index: int, row, qt: Quadtree, settings: InputSettings) -> Output:
    try:
        return run_find(index, row, qt, settings)
    except GeoMungeError as err:
        return err


def exec_single_thread(rows: Iterable, writer, qt: Quadtree, settings: InputSettings) -> None:
    """Match and write each row in turn."""
    for index, row in _enumerate_rows(rows):
        run_output(writer, settings, _find_or_error(index, row, qt, settings))


def exec_multi_thread(rows: Iterable, writer, qt: Quadtree, settings: InputSettings) -> None:
    """Match rows on a thread pool while a single consumer writes the output."""
    workers = os.cpu_count() or 1
    window = workers * 4
    with ThreadPoolExecutor(max_workers=workers) as pool:
        pending: deque = deque()
        for index, row in _enumerate_rows(rows):
            pending.append(pool.submit(_find_or_error, index, row, qt, settings))
            if len(pending) >= window:
                run_output(writer, settings, pending.popleft().result())
        while pending:
            run_output(writer, settings, pending.popleft().result())