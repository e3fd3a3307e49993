"""
Tile Map Extraction Package

Converts a raster map screenshot into the vector tile polygons the map UI
renders and hit-tests against.
"""

from .config.pipeline_config import PipelineConfig
from .document import TileGeometry, TileGeometryDocument
from .regions.models import TileRegion, Contour, SegmentationResult
from .pipeline import (
    extract_tiles,
    run_pipeline,
    load_image,
    save_image,
    ImageLoadError,
    TileExtractionResult,
)

__all__ = [
    "PipelineConfig",
    "TileGeometry",
    "TileGeometryDocument",
    "TileRegion",
    "Contour",
    "SegmentationResult",
    "extract_tiles",
    "run_pipeline",
    "load_image",
    "save_image",
    "ImageLoadError",
    "TileExtractionResult",
]
