[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "geomunge"
version = "0.1.0"
description = "Geospatial file tooling: nearest-neighbour search with quadtrees and metadata extraction."
requires-python = ">=3.10"
dependencies = []
keywords = ["gis", "quadtree", "nearest-neighbour", "geojson", "kml", "shapefile", "haversine"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
proximity = "geomunge.proximity.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["geomunge"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
