"""
Polygon helpers for consumers of the tile geometry document.

Polygons are lists of (x, y) vertices, implicitly closed.
"""

from typing import List, Sequence, Tuple

Vertex = Tuple[float, float]


def polygon_area(polygon: Sequence[Vertex]) -> float:
    """
    Calculate the area of a polygon using the Shoelace formula.

    Args:
        polygon: List of (x, y) vertices

    Returns:
        Area in square pixels (always positive)
    """
    n = len(polygon)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += polygon[i][0] * polygon[j][1]
        area -= polygon[j][0] * polygon[i][1]

    return abs(area) / 2.0


def polygon_centroid(polygon: Sequence[Vertex]) -> Tuple[float, float]:
    """
    Area-weighted centroid of a polygon.

    Degenerate polygons (fewer than 3 vertices or zero area) use the mean
    of their vertices instead.
    """
    if not polygon:
        raise ValueError("polygon must have at least one vertex")

    n = len(polygon)
    twice_area = 0.0
    cx = 0.0
    cy = 0.0
    for i in range(n):
        x0, y0 = polygon[i]
        x1, y1 = polygon[(i + 1) % n]
        cross = x0 * y1 - x1 * y0
        twice_area += cross
        cx += (x0 + x1) * cross
        cy += (y0 + y1) * cross

    if n < 3 or twice_area == 0:
        return (
            sum(p[0] for p in polygon) / n,
            sum(p[1] for p in polygon) / n,
        )

    return (cx / (3.0 * twice_area), cy / (3.0 * twice_area))


def point_in_polygon(x: float, y: float, polygon: Sequence[Vertex]) -> bool:
    """
    Even-odd ray casting test.

    Points exactly on an edge may land on either side.
    """
    inside = False
    n = len(polygon)
    if n < 3:
        return False

    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i

    return inside


def polygon_bounds(polygon: Sequence[Vertex]) -> Tuple[float, float, float, float]:
    """(min_x, min_y, max_x, max_y) of a polygon."""
    if not polygon:
        raise ValueError("polygon must have at least one vertex")
    xs: List[float] = [p[0] for p in polygon]
    ys: List[float] = [p[1] for p in polygon]
    return (min(xs), min(ys), max(xs), max(ys))
