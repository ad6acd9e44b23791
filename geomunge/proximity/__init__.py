"""Nearest-neighbour search of CSV points against a geospatial data file."""