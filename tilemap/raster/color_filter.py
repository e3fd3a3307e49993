"""
Overlay color removal.

Printed tile numbers are drawn in blue on top of the black border lines.
They are painted over with the background color before border detection so
they cannot be mistaken for structure.
"""

import numpy as np
from typing import Optional

from ..config.pipeline_config import ColorFilterSettings


def classify_overlay(
    image: np.ndarray,
    settings: Optional[ColorFilterSettings] = None,
) -> np.ndarray:
    """
    Find overlay pixels in an RGBA image.

    A pixel is overlay if blue beats red and green by the configured margin
    and is brighter than the blue floor, or if it is a near-white pixel with
    a blue cast (anti-aliased edge of the overlay text).

    Args:
        image: RGBA image (H x W x 4, uint8)
        settings: Classification thresholds (defaults if None)

    Returns:
        Boolean mask (H x W), True for overlay pixels
    """
    settings = settings or ColorFilterSettings()

    # Widen before comparing so r + margin cannot wrap around at 255
    r = image[:, :, 0].astype(np.int16)
    g = image[:, :, 1].astype(np.int16)
    b = image[:, :, 2].astype(np.int16)

    bluish = (
        (b > r + settings.overlay_margin)
        & (b > g + settings.overlay_margin)
        & (b > settings.overlay_blue_floor)
    )

    light_blue = (
        (r > settings.near_white_floor)
        & (g > settings.near_white_floor)
        & (b > settings.near_white_blue_floor)
        & (b > r + settings.near_white_margin)
        & (b > g + settings.near_white_margin)
    )

    return bluish | light_blue


def remove_overlay(
    image: np.ndarray,
    settings: Optional[ColorFilterSettings] = None,
) -> np.ndarray:
    """
    Replace overlay pixels with the background color.

    Alpha and every non-overlay pixel pass through unchanged. The input
    image is not modified.

    Args:
        image: RGBA image (H x W x 4, uint8)
        settings: Classification thresholds and background color

    Returns:
        New RGBA image with the overlay removed
    """
    settings = settings or ColorFilterSettings()

    overlay = classify_overlay(image, settings)

    result = image.copy()
    result[overlay, :3] = settings.background_color

    return result
