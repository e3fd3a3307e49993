"""
Tile Extraction Pipeline

Turns a raster map screenshot into the tile geometry document:

1. Color filter   - paint printed overlay numbers with the background color
2. Border repair  - close small gaps in the border lines
3. Segmentation   - flood fill enclosed open space into tile regions
4. Contour trace  - Moore-Neighbor walk around each region
5. Simplification - Douglas-Peucker reduction to the final polygon

Stages run sequentially; each consumes the full output of the previous one.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import cv2
import numpy as np

from .config.pipeline_config import PipelineConfig
from .document import TileGeometry, TileGeometryDocument, build_document
from .raster.color_filter import remove_overlay
from .raster.border_mask import create_border_mask, mask_to_image
from .raster.border_repair import RepairResult, repair_borders
from .regions.models import Contour, SegmentationResult, TileRegion
from .regions.segmenter import segment_regions
from .regions.contour_tracing import trace_contour
from .regions.simplification import simplify_contour
from .visualization import save_visualization

logger = logging.getLogger(__name__)

CLEAN_STAGE_NAME = "map-clean.png"
REPAIRED_STAGE_NAME = "map-repaired.png"


class ImageLoadError(Exception):
    """The source image is missing, unreadable or empty."""


@dataclass
class TileExtractionResult:
    """Everything produced by one pipeline run."""
    document: TileGeometryDocument
    filtered_image: np.ndarray
    border_mask: np.ndarray
    repair: RepairResult
    segmentation: SegmentationResult
    contours: Dict[int, Contour] = field(default_factory=dict)
    processing_time_ms: float = 0.0

    @property
    def degraded_tile_ids(self) -> List[int]:
        """Tiles whose contour fell back to a bounding box or stopped early."""
        return [tile_id for tile_id, c in self.contours.items() if c.degraded]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tile_count": len(self.document.tiles),
            "discarded_regions": self.segmentation.discarded,
            "repair": self.repair.to_dict(),
            "degraded_tiles": self.degraded_tile_ids,
            "processing_time_ms": round(self.processing_time_ms, 1),
        }


def load_image(path: Union[str, Path]) -> np.ndarray:
    """
    Read an image file as RGBA.

    Raises:
        ImageLoadError: If the file is missing, cannot be decoded or is empty
    """
    path = Path(path)
    if not path.exists():
        raise ImageLoadError(f"Image not found: {path}")

    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ImageLoadError(f"Could not load image: {path}")
    if image.size == 0:
        raise ImageLoadError(f"Image is empty: {path}")

    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise ImageLoadError(f"Unsupported pixel type {image.dtype}: {path}")

    if len(image.shape) == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)


def save_image(path: Union[str, Path], image: np.ndarray) -> str:
    """Write an RGBA image to disk."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), cv2.cvtColor(image, cv2.COLOR_RGBA2BGRA)):
        raise IOError(f"Failed to write image: {path}")
    return str(path)


def build_tile(region: TileRegion, contour: Contour, tolerance: float) -> TileGeometry:
    """
    Simplify a region's contour into its document entry.

    Polygons that simplify to fewer than 3 points are replaced by the
    region's bounding box.
    """
    polygon = simplify_contour(contour, tolerance)
    if len(polygon) < 3:
        logger.debug(f"Tile {region.id} simplified to {len(polygon)} points, using bounding box")
        polygon = region.corners()

    center_x, center_y = region.centroid
    return TileGeometry(
        id=region.id,
        center_x=center_x,
        center_y=center_y,
        polygon=tuple(polygon),
    )


def extract_tiles(
    image: np.ndarray,
    config: Optional[PipelineConfig] = None,
) -> TileExtractionResult:
    """
    Run all pipeline stages on an RGBA image.

    Args:
        image: RGBA image (H x W x 4, uint8)
        config: Pipeline configuration (defaults if None)

    Returns:
        TileExtractionResult with the document and intermediate outputs
    """
    config = config or PipelineConfig.default()
    start_time = time.time()
    height, width = image.shape[:2]

    logger.info(f"Processing {width}x{height} image")

    filtered = remove_overlay(image, config.color_filter)
    mask = create_border_mask(filtered, config.border.dark_threshold)
    logger.info(f"Detected {int(np.count_nonzero(mask))} border pixels")

    repair = repair_borders(mask, config.repair.passes)
    segmentation = segment_regions(repair.mask, config.segmentation)

    contours: Dict[int, Contour] = {}
    tiles: List[TileGeometry] = []
    for region in segmentation.regions:
        contour = trace_contour(region, repair.mask, config.trace.max_iterations)
        contours[region.id] = contour

        tile = build_tile(region, contour, config.simplify.tolerance)
        tiles.append(tile)
        logger.debug(
            f"Tile {region.id}: {len(contour)} contour points simplified to {len(tile.polygon)}"
        )

    if not tiles:
        logger.warning(
            "No tiles found. Check the area bounds, seed stride and dark threshold."
        )

    document = build_document(width, height, tiles)
    elapsed_ms = (time.time() - start_time) * 1000

    result = TileExtractionResult(
        document=document,
        filtered_image=filtered,
        border_mask=repair.mask,
        repair=repair,
        segmentation=segmentation,
        contours=contours,
        processing_time_ms=elapsed_ms,
    )

    degraded = result.degraded_tile_ids
    if degraded:
        logger.warning(f"{len(degraded)} tile(s) have degraded contours: {degraded}")

    logger.info(f"Extracted {len(tiles)} tiles in {elapsed_ms:.1f}ms")
    return result


def run_pipeline(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    config: Optional[PipelineConfig] = None,
    visualization_path: Optional[Union[str, Path]] = None,
    stage_dir: Optional[Union[str, Path]] = None,
) -> TileExtractionResult:
    """
    Load an image, extract tiles and write the document.

    Args:
        input_path: Source map image
        output_path: Where to write the tile geometry JSON (overwritten)
        config: Pipeline configuration (defaults if None)
        visualization_path: Optional diagnostic image output
        stage_dir: Optional directory for intermediate stage images

    Returns:
        TileExtractionResult of the run

    Raises:
        ImageLoadError: If the input cannot be loaded; nothing is written
    """
    logger.info(f"Loading map image: {input_path}")
    image = load_image(input_path)

    result = extract_tiles(image, config)

    written = result.document.save(output_path)
    logger.info(f"Tile data saved to {written}")

    if stage_dir is not None:
        stage_dir = Path(stage_dir)
        save_image(stage_dir / CLEAN_STAGE_NAME, result.filtered_image)
        save_image(stage_dir / REPAIRED_STAGE_NAME, mask_to_image(result.border_mask))
        logger.info(f"Stage images saved to {stage_dir}")

    if visualization_path is not None:
        save_visualization(
            str(visualization_path),
            result.document,
            degraded_ids=result.degraded_tile_ids,
        )
        logger.info(f"Visualization saved to {visualization_path}")

    return result
