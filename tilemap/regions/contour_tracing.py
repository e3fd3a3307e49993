"""
Moore-Neighbor boundary tracing.

The walk runs over border pixels around a region. It starts on a border
pixel whose right-hand neighbor belongs to the region, so the trace follows
this region's boundary and not a neighbor's. After each step the search
direction turns left, which keeps the walk hugging the region side of the
border.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from .models import Contour, TileRegion, Point

logger = logging.getLogger(__name__)

# Clockwise in image coordinates (y grows downward), starting east
DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (1, 0),    # E
    (1, 1),    # SE
    (0, 1),    # S
    (-1, 1),   # SW
    (-1, 0),   # W
    (-1, -1),  # NW
    (0, -1),   # N
    (1, -1),   # NE
)

# 6/8 of a clockwise turn == a quarter turn counter-clockwise
TURN_LEFT = 6


def find_start_pixel(region: TileRegion, mask: np.ndarray) -> Optional[Point]:
    """
    Find a border pixel whose right neighbor is a member of the region.

    Rows are scanned top to bottom, columns from one pixel left of the
    region's bounding box.

    Returns:
        (x, y) of the start pixel, or None if the region has no such pixel
    """
    for y in range(region.min_y, region.max_y + 1):
        row = mask[y]
        for x in range(max(region.min_x - 1, 0), region.max_x + 1):
            if row[x] and (x + 1, y) in region.pixels:
                return (x, y)
    return None


def bounding_box_contour(region: TileRegion) -> Contour:
    """Degraded 4-point contour made of the region's bounding-box corners."""
    return Contour(points=region.corners(), complete=True, fallback=True)


def trace_contour(
    region: TileRegion,
    mask: np.ndarray,
    max_iterations: int = 10000,
) -> Contour:
    """
    Trace the outer boundary of a region.

    Args:
        region: Region to trace
        mask: Repaired boolean border mask the region was segmented from
        max_iterations: Step limit for walks that never return to the start

    Returns:
        Closed contour (first point == last point). A partial contour flagged
        incomplete if the walk stalled or hit the step limit, or the
        bounding box if no start pixel exists.
    """
    start = find_start_pixel(region, mask)
    if start is None:
        logger.warning(f"Could not find start point for tile {region.id}, using bounding box")
        return bounding_box_contour(region)

    height, width = mask.shape
    x, y = start
    direction = 0
    points = [start]

    for _ in range(max_iterations):
        for turn in range(8):
            candidate = (direction + turn) % 8
            dx, dy = DIRECTIONS[candidate]
            nx, ny = x + dx, y + dy
            if 0 <= nx < width and 0 <= ny < height and mask[ny, nx]:
                break
        else:
            logger.warning(f"Trace for tile {region.id} stalled on isolated pixel {start}")
            return Contour(points=points, complete=False)

        x, y = nx, ny
        direction = (candidate + TURN_LEFT) % 8
        points.append((x, y))

        if (x, y) == start:
            return Contour(points=points, complete=True)

    logger.warning(
        f"Max iterations ({max_iterations}) reached for tile {region.id}, "
        f"keeping {len(points)} partial points"
    )
    return Contour(points=points, complete=False)
