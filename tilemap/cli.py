"""
Command-line interface for tile extraction.

Usage:
    python -m tilemap extract <image_path> [-o tile-data.json] [--config cfg.yaml]
                                           [--visual PATH] [--stages DIR] [-v]
    python -m tilemap inspect <document_path>
    python -m tilemap locate <document_path> <x> <y>
    python -m tilemap config [--config cfg.yaml]
    python -m tilemap --help
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config.pipeline_config import PipelineConfig
from .document import TileGeometryDocument
from .pipeline import ImageLoadError, run_pipeline


def setup_argparse() -> argparse.ArgumentParser:
    """Set up argument parser."""
    parser = argparse.ArgumentParser(
        prog="tilemap",
        description="Extract vector tile polygons from a raster map image",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # extract
    extract_parser = subparsers.add_parser(
        "extract",
        help="Run the extraction pipeline on a map image",
    )
    extract_parser.add_argument(
        "image_path",
        type=str,
        help="Path to the input map image",
    )
    extract_parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="tile-data.json",
        help="Output document path (default: tile-data.json)",
    )
    extract_parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="YAML configuration file",
    )
    extract_parser.add_argument(
        "--visual",
        type=str,
        help="Write a diagnostic tile image to this path",
    )
    extract_parser.add_argument(
        "--stages",
        type=str,
        help="Directory for intermediate stage images",
    )
    extract_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    # inspect
    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Print statistics for a tile geometry document",
    )
    inspect_parser.add_argument(
        "document_path",
        type=str,
        help="Path to the tile geometry JSON",
    )

    # locate
    locate_parser = subparsers.add_parser(
        "locate",
        help="Find the tile containing a point",
    )
    locate_parser.add_argument("document_path", type=str, help="Path to the tile geometry JSON")
    locate_parser.add_argument("x", type=float, help="X coordinate in image pixels")
    locate_parser.add_argument("y", type=float, help="Y coordinate in image pixels")

    # config
    config_parser = subparsers.add_parser(
        "config",
        help="Print the effective configuration as YAML",
    )
    config_parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="YAML configuration file to merge over the defaults",
    )

    return parser


def _load_config(config_path: Optional[str]) -> PipelineConfig:
    if config_path is None:
        return PipelineConfig.default()
    return PipelineConfig.from_yaml(config_path)


def _load_document(document_path: str) -> Optional[TileGeometryDocument]:
    path = Path(document_path)
    if not path.exists():
        print(f"Error: Document not found: {path}", file=sys.stderr)
        return None

    try:
        return TileGeometryDocument.load(path)
    except ValueError as e:
        print(f"Error: Invalid tile document {path}: {e}", file=sys.stderr)
        return None


def cmd_extract(args) -> int:
    """Handle extract command."""
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    logger = logging.getLogger(__name__)

    try:
        config = _load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        result = run_pipeline(
            args.image_path,
            args.output,
            config=config,
            visualization_path=args.visual,
            stage_dir=args.stages,
        )
    except ImageLoadError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    summary = result.to_dict()
    print(f"Tiles: {summary['tile_count']}")
    print(f"Discarded regions: {summary['discarded_regions']}")
    print(f"Repair changes per pass: {summary['repair']['changed_per_pass']}")
    if summary["degraded_tiles"]:
        print(f"Degraded contours: {summary['degraded_tiles']}")
    print(f"Tile data saved to: {args.output}")

    return 0


def cmd_inspect(args) -> int:
    """Handle inspect command."""
    document = _load_document(args.document_path)
    if document is None:
        return 1

    print(json.dumps(document.summary(), indent=2))
    return 0


def cmd_locate(args) -> int:
    """Handle locate command."""
    document = _load_document(args.document_path)
    if document is None:
        return 1

    tile = document.find_tile_at(args.x, args.y)
    if tile is None:
        print(f"No tile at ({args.x:g}, {args.y:g})", file=sys.stderr)
        return 1

    print(json.dumps({"id": tile.id, "centerX": tile.center_x, "centerY": tile.center_y}))
    return 0


def cmd_config(args) -> int:
    """Handle config command."""
    try:
        config = _load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1

    print(config.to_yaml(), end="")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = setup_argparse()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "extract":
        return cmd_extract(args)
    if args.command == "inspect":
        return cmd_inspect(args)
    if args.command == "locate":
        return cmd_locate(args)
    if args.command == "config":
        return cmd_config(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
