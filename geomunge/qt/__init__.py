"""Quadtree construction from geospatial data files."""