# geomunge

A command line tool and a library for working with geospatial files:
shapefiles (`.shp`), GeoJSON (`.json`), KML/KMZ (`.kml`, `.kmz`) and CSV
point files. It has no dependencies outside the standard library.

## Installation

```
pip install .
```

## proximity

`proximity` builds a quadtree from a data file, then reads test points as CSV
on stdin and writes the nearest match for each to stdout. Distances are
great-circle distances, reported in metres to three decimal places.

The input CSV needs `lng` and `lat` columns; the names are matched without
regard to case. A column headed `id` is carried through to the output when
present.

```
proximity data.shp < points.csv
proximity -k 3 -r 5000 --fields name,category places.json < points.csv
proximity -p -s cities.kml < points.csv
```

If no path is given, `./data.shp` is used.

Options:

- `-p`, `--point`: use a point quadtree, which accepts point geometries only.
- `-k K`: return the `K` nearest neighbours rather than the single nearest one.
- `-r R`: restrict the search to a radius of `R` metres.
- `-s`, `--sphere`: use the whole sphere as the bounding box.
- `-x`, `--bbox lng_min,lat_min,lng_max,lat_max`: use an explicit bounding box
  in degrees. Cannot be combined with `--sphere`. Without either option the
  bounding box is read from a shapefile header or a GeoJSON `bbox` member;
  KML, KMZ and CSV inputs use the whole sphere.
- `-d`, `--depth` and `-c`, `--children`: maximum depth and entries per node
  before splitting (both default to 10).
- `--fields a,b,c`: metadata fields from the data file to add to each output
  row. For CSV data files the field names are the lower-cased headers; for
  GeoJSON, `id` and first-level properties; for KML, item attributes and a
  placemark's `name` and `description`; for shapefiles, dBase columns.
- `--id-label`: the header printed for the input id column (default `id`).
- `-l`, `--delimiter`: a single-character delimiter for input and output.
- `--single-thread`: do the searches on one thread instead of a thread pool.
- `-v`, `--verbose` and `-t`, `--print`: diagnostics and a quadtree summary on
  stderr.

Each output row holds `input_index`, the id, `lng`, `lat`, `distance`,
`find_index` (the match's position in load order) and any requested fields.
Rows that cannot be parsed or matched are reported on stderr and skipped.

## Library use

Build a quadtree and search it:

```python
from geomunge.geometry import Point
from geomunge.proximity.csv_io import MEAN_EARTH_RADIUS
from geomunge.qt.load import build_quadtree, make_bbox
from geomunge.qt.tree import ParsedRecord, QtData

bounds = make_bbox("data.shp", sphere=True, bbox=None)
qt = build_quadtree("data.shp", QtData(is_point_qt=False, bounds=bounds))
print(len(qt))

record = ParsedRecord(0, [], Point(-0.12, 51.5).to_radians())
datum, angle = qt.find(record, None)
print(datum.index, angle * MEAN_EARTH_RADIUS)
```

`Quadtree.knn(record, k, r)` returns up to `k` matches, nearest first; `r` is
an angle in radians, or `None` for no limit.

Print the metadata of KML/KMZ files and shapefiles to stdout:

```python
from geomunge.meta.base import DataOpts
from geomunge.meta.kml_meta import KmlMeta
from geomunge.meta.shapefile_meta import ShapefileMeta

ShapefileMeta("data.shp").headers()
ShapefileMeta("data.shp").fields(True)
KmlMeta("places.kml").count()
KmlMeta("places.kml").data(DataOpts(headers=True, index=True, start=10, length=100))
```

## What is not included

- There is no command line tool for metadata inspection; the metadata readers
  are available from Python only, as shown above.
- There is no metadata reader for GeoJSON files.
- There is no benchmarking tool; `geomunge.bench` holds no modules.