"""
Region stages: segmentation, contour tracing and polygon simplification.
"""

from .models import TileRegion, Contour, SegmentationResult
from .segmenter import segment_regions, flood_fill, iter_seed_points
from .contour_tracing import trace_contour, find_start_pixel, bounding_box_contour
from .simplification import douglas_peucker, perpendicular_distance, simplify_contour

__all__ = [
    "TileRegion",
    "Contour",
    "SegmentationResult",
    "segment_regions",
    "flood_fill",
    "iter_seed_points",
    "trace_contour",
    "find_start_pixel",
    "bounding_box_contour",
    "douglas_peucker",
    "perpendicular_distance",
    "simplify_contour",
]
