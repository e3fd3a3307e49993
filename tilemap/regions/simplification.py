"""
Douglas-Peucker polygon simplification.

Uses an explicit work stack of (start, end) spans rather than recursion, so
very long contours cannot exhaust the call stack. Each span keeps its
farthest point when that point is more than `tolerance` away from the chord,
which gives the same result as the recursive formulation.
"""

import math
from typing import List, Sequence, Tuple

from .models import Contour

Coordinate = Tuple[float, float]


def perpendicular_distance(
    point: Coordinate,
    line_start: Coordinate,
    line_end: Coordinate,
) -> float:
    """
    Distance from a point to the infinite line through two points.

    Falls back to the distance to `line_start` when both line points coincide.
    """
    dx = line_end[0] - line_start[0]
    dy = line_end[1] - line_start[1]

    norm = math.hypot(dx, dy)
    if norm == 0:
        return math.hypot(point[0] - line_start[0], point[1] - line_start[1])

    return abs(
        dy * point[0] - dx * point[1]
        + line_end[0] * line_start[1] - line_end[1] * line_start[0]
    ) / norm


def douglas_peucker(points: Sequence[Coordinate], tolerance: float) -> List[Coordinate]:
    """
    Simplify an open polyline.

    Args:
        points: Ordered points; first and last are always kept
        tolerance: Maximum allowed distance from the original line.
            0 keeps every point.

    Returns:
        Subsequence of the input points (never longer than the input)
    """
    if tolerance < 0:
        raise ValueError(f"tolerance must be >= 0, got {tolerance}")

    points = list(points)
    if len(points) <= 2 or tolerance == 0:
        return points

    keep = [False] * len(points)
    keep[0] = keep[-1] = True

    spans = [(0, len(points) - 1)]
    while spans:
        start, end = spans.pop()
        if end - start < 2:
            continue

        max_distance = 0.0
        max_index = start
        for i in range(start + 1, end):
            distance = perpendicular_distance(points[i], points[start], points[end])
            if distance > max_distance:
                max_distance = distance
                max_index = i

        if max_distance > tolerance:
            keep[max_index] = True
            spans.append((max_index, end))
            spans.append((start, max_index))

    return [p for p, kept in zip(points, keep) if kept]


def simplify_contour(contour: Contour, tolerance: float = 2.0) -> List[Coordinate]:
    """
    Simplify a traced contour into polygon vertices.

    The repeated closing point is dropped first; the resulting polygon is
    implicitly closed.
    """
    return douglas_peucker(contour.open_points(), tolerance)
