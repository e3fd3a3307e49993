"""
Diagnostic rendering of extracted tiles.

Produces an image for a human operator to check the extraction against the
source map. Nothing reads it back programmatically.
"""

from pathlib import Path
from typing import Iterable, Optional

import cv2
import numpy as np

from .document import TileGeometryDocument


# BGR colors
OUTLINE_COLOR = (51, 51, 51)      # #333
CENTER_COLOR = (235, 99, 37)      # #2563eb
DEGRADED_COLOR = (0, 0, 255)      # Red


def render_tiles(
    document: TileGeometryDocument,
    image: Optional[np.ndarray] = None,
    degraded_ids: Iterable[int] = (),
    show_labels: bool = True,
    line_thickness: int = 2,
) -> np.ndarray:
    """
    Draw tile outlines, centers and ids.

    Args:
        document: Tile geometry to draw
        image: Optional RGBA source image to draw over (white canvas if None)
        degraded_ids: Tiles to outline in red (fallback or partial contours)
        show_labels: Whether to write tile ids next to the centers
        line_thickness: Outline thickness in pixels

    Returns:
        BGR image
    """
    if image is not None:
        vis = cv2.cvtColor(image, cv2.COLOR_RGBA2BGR)
    else:
        vis = np.full((document.height, document.width, 3), 255, dtype=np.uint8)

    degraded = set(degraded_ids)

    for tile in document.tiles:
        pts = np.array(
            [[int(round(x)), int(round(y))] for x, y in tile.polygon],
            dtype=np.int32,
        )
        color = DEGRADED_COLOR if tile.id in degraded else OUTLINE_COLOR
        cv2.polylines(vis, [pts], True, color, line_thickness)

        center = (tile.center_x, tile.center_y)
        cv2.circle(vis, center, 3, CENTER_COLOR, -1)

        if show_labels:
            cv2.putText(
                vis,
                str(tile.id),
                (tile.center_x - 5, tile.center_y + 3),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.35,
                CENTER_COLOR,
                1,
            )

    return vis


def save_visualization(
    output_path: str,
    document: TileGeometryDocument,
    image: Optional[np.ndarray] = None,
    degraded_ids: Iterable[int] = (),
) -> str:
    """
    Render tiles and write the result to disk.

    Returns:
        Path to saved visualization
    """
    vis = render_tiles(document, image=image, degraded_ids=degraded_ids)

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(output_path, vis):
        raise IOError(f"Failed to write visualization: {output_path}")

    return output_path
