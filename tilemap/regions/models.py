"""
Data structures for segmented tile regions and their contours.
"""

import math
from dataclasses import dataclass, field
from typing import List, Tuple, Dict, Any, FrozenSet

import numpy as np


Point = Tuple[int, int]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (49.5 -> 50, 48.5 -> 49)."""
    return int(math.floor(value + 0.5))


@dataclass
class TileRegion:
    """
    A maximal 4-connected blob of open-space pixels.

    Attributes:
        id: Assignment order among accepted regions (starts at 0)
        min_x, max_x, min_y, max_y: Inclusive bounding box
        pixels: Member pixel coordinates as (x, y)
    """
    id: int
    min_x: int
    max_x: int
    min_y: int
    max_y: int
    pixels: FrozenSet[Point] = field(repr=False)

    @property
    def area(self) -> int:
        return len(self.pixels)

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    @property
    def bounding_box(self) -> Tuple[int, int, int, int]:
        """(x, y, width, height) of the region."""
        return (self.min_x, self.min_y, self.width, self.height)

    @property
    def midpoint(self) -> Tuple[float, float]:
        """Exact bounding-box midpoint."""
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    @property
    def centroid(self) -> Point:
        """Bounding-box midpoint rounded to whole pixels."""
        cx, cy = self.midpoint
        return (round_half_up(cx), round_half_up(cy))

    def contains(self, x: int, y: int) -> bool:
        return (x, y) in self.pixels

    def corners(self) -> List[Point]:
        """Bounding-box corners, clockwise from top-left."""
        return [
            (self.min_x, self.min_y),
            (self.max_x, self.min_y),
            (self.max_x, self.max_y),
            (self.min_x, self.max_y),
        ]

    def to_dict(self) -> Dict[str, Any]:
        cx, cy = self.centroid
        return {
            "id": self.id,
            "area": self.area,
            "bounding_box": {
                "min_x": self.min_x,
                "max_x": self.max_x,
                "min_y": self.min_y,
                "max_y": self.max_y,
            },
            "centroid": {"x": cx, "y": cy},
        }


@dataclass
class Contour:
    """
    Ordered boundary walk around one region.

    A fully traced contour is closed: its first and last points coincide.

    Attributes:
        points: Boundary pixel coordinates in walk order
        complete: False when the walk stopped before returning to its start
        fallback: True when the points are the region's bounding box
    """
    points: List[Point]
    complete: bool = True
    fallback: bool = False

    def __len__(self) -> int:
        return len(self.points)

    @property
    def closed(self) -> bool:
        return len(self.points) > 1 and self.points[0] == self.points[-1]

    @property
    def degraded(self) -> bool:
        return self.fallback or not self.complete

    def open_points(self) -> List[Point]:
        """Points without the repeated closing point."""
        if self.closed:
            return list(self.points[:-1])
        return list(self.points)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": [{"x": x, "y": y} for x, y in self.points],
            "complete": self.complete,
            "fallback": self.fallback,
        }


@dataclass
class SegmentationResult:
    """
    Results from region segmentation.

    Attributes:
        regions: Accepted regions in id order
        labels: int32 map; 0 = never reached, -1 = discarded, id + 1 = region
        discarded: Number of filled regions rejected by the area bounds
    """
    regions: List[TileRegion]
    labels: np.ndarray
    discarded: int = 0

    def get_region(self, region_id: int) -> TileRegion:
        return self.regions[region_id]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "regions": [r.to_dict() for r in self.regions],
            "region_count": len(self.regions),
            "discarded": self.discarded,
            "total_area": sum(r.area for r in self.regions),
        }
