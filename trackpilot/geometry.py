"""
Line segment and polygon primitives shared by the track, sensors and cars.
Points are plain (x, y) tuples.
"""
from collections import namedtuple

Touch = namedtuple("Touch", ["x", "y", "offset"])


def lerp(a, b, t):
    """Linear interpolation from a to b by fraction t."""
    return a + (b - a) * t


def get_intersection(a, b, c, d):
    """
    Intersect segment AB with segment CD.
    Returns a Touch with the crossing point and offset = fraction along AB,
    or None when the segments are parallel or do not meet.
    """
    t_top = (d[0] - c[0]) * (a[1] - c[1]) - (d[1] - c[1]) * (a[0] - c[0])
    u_top = (c[1] - a[1]) * (a[0] - b[0]) - (c[0] - a[0]) * (a[1] - b[1])
    bottom = (d[1] - c[1]) * (b[0] - a[0]) - (d[0] - c[0]) * (b[1] - a[1])

    if bottom == 0:
        return None

    t = t_top / bottom
    u = u_top / bottom
    if 0 <= t <= 1 and 0 <= u <= 1:
        return Touch(lerp(a[0], b[0], t), lerp(a[1], b[1], t), t)
    return None


def polygon_edges(poly):
    """Yield the closed edges of a polygon as (start, end) pairs."""
    for i in range(len(poly)):
        yield poly[i], poly[(i + 1) % len(poly)]


def _bounds_overlap(p, q):
    return not (max(x for x, _ in p) < min(x for x, _ in q)
                or max(x for x, _ in q) < min(x for x, _ in p)
                or max(y for _, y in p) < min(y for _, y in q)
                or max(y for _, y in q) < min(y for _, y in p))


def polys_intersect(poly1, poly2):
    """True if any edge of poly1 crosses any edge of poly2."""
    if not _bounds_overlap(poly1, poly2):
        return False
    for a, b in polygon_edges(poly1):
        for c, d in polygon_edges(poly2):
            if get_intersection(a, b, c, d):
                return True
    return False


def polygon_touches_segment(poly, segment):
    """True if any edge of poly crosses the segment (start, end)."""
    c, d = segment
    if not _bounds_overlap(poly, segment):
        return False
    for a, b in polygon_edges(poly):
        if get_intersection(a, b, c, d):
            return True
    return False
