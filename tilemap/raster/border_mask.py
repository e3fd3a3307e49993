"""
Border mask creation.

Converts a cleaned RGBA raster into the binary border/open-space mask the
repair and segmentation stages operate on.
"""

import numpy as np


def create_border_mask(image: np.ndarray, dark_threshold: int = 100) -> np.ndarray:
    """
    Classify dark pixels as structural border.

    The outermost 1-pixel frame of the image is always left as open space.

    Args:
        image: RGBA image (H x W x 4, uint8)
        dark_threshold: Pixels with R, G and B all below this are border

    Returns:
        Boolean mask (H x W), True for border pixels
    """
    rgb = image[:, :, :3]
    mask = np.all(rgb < dark_threshold, axis=2)

    mask[0, :] = False
    mask[-1, :] = False
    mask[:, 0] = False
    mask[:, -1] = False

    return mask


def mask_to_image(mask: np.ndarray) -> np.ndarray:
    """
    Render a border mask as an opaque RGBA image (black border on white).

    Args:
        mask: Boolean border mask

    Returns:
        RGBA image (H x W x 4, uint8)
    """
    height, width = mask.shape
    image = np.full((height, width, 4), 255, dtype=np.uint8)
    image[mask, :3] = 0
    return image
