"""Geospatial file tooling: quadtree proximity search and metadata extraction."""

__version__ = "0.1.0"