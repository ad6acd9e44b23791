"""Metadata inspection for KML/KMZ files and shapefiles."""