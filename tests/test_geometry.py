import math

from geomunge.geometry import LineString, Point, Polygon, Rect


def test_point_to_radians():
    assert Point(180.0, 90.0).to_radians() == Point(math.pi, math.pi / 2)


def test_linestring_to_radians_keeps_length():
    ls = LineString([Point(0, 0), Point(180, 0)])
    out = ls.to_radians()
    assert len(out) == 2
    assert out.points[1] == Point(math.pi, 0.0)


def test_polygon_to_radians_converts_interiors():
    ring = LineString([Point(0, 0), Point(90, 0), Point(0, 0)])
    poly = Polygon(ring, [ring]).to_radians()
    assert poly.interiors[0] == poly.exterior
    assert poly.exterior.points[1].x == math.pi / 2


def test_rect_normalises_corners():
    r = Rect(Point(10, -5), Point(-10, 5))
    assert r.min == Point(-10, -5)
    assert r.max == Point(10, 5)


def test_rect_to_radians():
    r = Rect(Point(-180, -90), Point(180, 90)).to_radians()
    assert r.max == Point(math.pi, math.pi / 2)
    assert r.min == Point(-math.pi, -math.pi / 2)