"""
Region segmentation by flood fill.

Open space is sampled on a coarse seed grid. Each unvisited open seed is
flood filled (4-connected, explicit stack) and the blob is kept as a tile
when its area falls inside the configured band. Blobs outside the band
(noise specks, the unenclosed background) stay visited so no later seed
refills them.
"""

import logging
from typing import Iterator, List, Optional, Tuple

import numpy as np

from ..config.pipeline_config import SegmentationSettings
from .models import TileRegion, SegmentationResult

logger = logging.getLogger(__name__)

DISCARDED_LABEL = -1


def iter_seed_points(
    width: int,
    height: int,
    stride: int,
    margin: int,
) -> Iterator[Tuple[int, int]]:
    """Yield (x, y) seed points row by row, skipping `margin` pixels at the edges."""
    for y in range(margin, height - margin, stride):
        for x in range(margin, width - margin, stride):
            yield x, y


def flood_fill(
    open_flat: List[bool],
    visited: bytearray,
    width: int,
    height: int,
    start: int,
) -> Tuple[List[int], Tuple[int, int, int, int]]:
    """
    Collect the 4-connected open region containing a flat pixel index.

    Pixels are marked in `visited` as they are pushed, so each is stacked
    at most once.

    Args:
        open_flat: Row-major open-space flags (True = not border)
        visited: Row-major visited flags, updated in place
        width: Image width
        height: Image height
        start: Row-major index of the seed pixel (must be open and unvisited)

    Returns:
        (flat indices of member pixels, (min_x, max_x, min_y, max_y))
    """
    start_y, start_x = divmod(start, width)
    min_x = max_x = start_x
    min_y = max_y = start_y

    pixels = []
    stack = [start]
    visited[start] = 1

    while stack:
        index = stack.pop()
        y, x = divmod(index, width)
        pixels.append(index)

        if x < min_x:
            min_x = x
        elif x > max_x:
            max_x = x
        if y < min_y:
            min_y = y
        elif y > max_y:
            max_y = y

        for neighbor, inside in (
            (index + 1, x + 1 < width),
            (index - 1, x > 0),
            (index + width, y + 1 < height),
            (index - width, y > 0),
        ):
            if inside and open_flat[neighbor] and not visited[neighbor]:
                visited[neighbor] = 1
                stack.append(neighbor)

    return pixels, (min_x, max_x, min_y, max_y)


def segment_regions(
    mask: np.ndarray,
    settings: Optional[SegmentationSettings] = None,
) -> SegmentationResult:
    """
    Label enclosed open-space regions of a repaired border mask.

    Args:
        mask: Boolean border mask (True = border)
        settings: Seed grid and area bounds (defaults if None)

    Returns:
        SegmentationResult with accepted regions and the label map
    """
    settings = settings or SegmentationSettings()
    height, width = mask.shape

    open_flat = (~np.asarray(mask, dtype=bool)).ravel().tolist()
    visited = bytearray(width * height)
    labels = np.zeros(width * height, dtype=np.int32)

    regions: List[TileRegion] = []
    discarded = 0

    for x, y in iter_seed_points(width, height, settings.seed_stride, settings.seed_margin):
        seed = y * width + x
        if visited[seed] or not open_flat[seed]:
            continue

        pixels, (min_x, max_x, min_y, max_y) = flood_fill(open_flat, visited, width, height, seed)
        area = len(pixels)

        if not (settings.min_area <= area <= settings.max_area):
            labels[pixels] = DISCARDED_LABEL
            discarded += 1
            logger.debug(f"Discarded region at seed ({x}, {y}): {area}px outside bounds")
            continue

        region = TileRegion(
            id=len(regions),
            min_x=min_x,
            max_x=max_x,
            min_y=min_y,
            max_y=max_y,
            pixels=frozenset((i % width, i // width) for i in pixels),
        )
        labels[pixels] = region.id + 1
        regions.append(region)

        cx, cy = region.centroid
        logger.debug(
            f"Found tile {region.id}: center({cx}, {cy}), "
            f"size {region.width}x{region.height}, area {area}px"
        )

    narrow = [r.id for r in regions if min(r.width, r.height) <= settings.seed_stride]
    if narrow:
        logger.warning(
            f"{len(narrow)} tile(s) are no wider than the seed stride ({settings.seed_stride}px); "
            f"tiles of that size can be missed. Consider a smaller seed_stride."
        )

    logger.info(f"Segmentation found {len(regions)} tiles ({discarded} regions discarded)")

    return SegmentationResult(
        regions=regions,
        labels=labels.reshape(height, width),
        discarded=discarded,
    )
