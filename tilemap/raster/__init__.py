"""
Raster stages: overlay removal, border classification and gap repair.
"""

from .color_filter import classify_overlay, remove_overlay
from .border_mask import create_border_mask, mask_to_image
from .border_repair import RepairResult, repair_pass, repair_borders

__all__ = [
    "classify_overlay",
    "remove_overlay",
    "create_border_mask",
    "mask_to_image",
    "RepairResult",
    "repair_pass",
    "repair_borders",
]
