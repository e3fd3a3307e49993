"""
Tile geometry document.

The document is the only artifact handed to the map UI:

    {
      "width": 1200, "height": 900,
      "tiles": [
        {"id": 0, "centerX": 52, "centerY": 40,
         "polygon": [{"x": 31, "y": 12}, ...]}
      ]
    }

It is built once per pipeline run and written as a whole; consumers only
read it.
"""

import json
import os
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .geometry import point_in_polygon, polygon_area

Vertex = Tuple[Union[int, float], Union[int, float]]


def _number(value: Any, name: str) -> Union[int, float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    return value


def _integer(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return value


@dataclass(frozen=True)
class TileGeometry:
    """
    One tile as rendered by the UI.

    Attributes:
        id: Tile id (segmentation order)
        center_x: Bounding-box center X, whole pixels
        center_y: Bounding-box center Y, whole pixels
        polygon: Simplified outline, implicitly closed
    """
    id: int
    center_x: int
    center_y: int
    polygon: Tuple[Vertex, ...]

    @property
    def area(self) -> float:
        return polygon_area(self.polygon)

    def contains(self, x: float, y: float) -> bool:
        return point_in_polygon(x, y, self.polygon)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "centerX": self.center_x,
            "centerY": self.center_y,
            "polygon": [{"x": x, "y": y} for x, y in self.polygon],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TileGeometry":
        if not isinstance(data, dict):
            raise ValueError(f"tile must be an object, got {type(data).__name__}")

        try:
            raw_polygon = data["polygon"]
            tile = cls(
                id=_integer(data["id"], "id"),
                center_x=_integer(data["centerX"], "centerX"),
                center_y=_integer(data["centerY"], "centerY"),
                polygon=tuple(
                    (_number(p["x"], "x"), _number(p["y"], "y")) for p in raw_polygon
                ),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed tile entry: {e}") from e

        if len(tile.polygon) < 3:
            raise ValueError(f"Tile {tile.id} polygon needs at least 3 points, got {len(tile.polygon)}")

        return tile


@dataclass(frozen=True)
class TileGeometryDocument:
    """
    Width, height and tiles of one processed map image.
    """
    width: int
    height: int
    tiles: Tuple[TileGeometry, ...] = ()

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"width/height must be >= 0, got {self.width}x{self.height}")
        # Callers may pass a list; store an immutable copy
        object.__setattr__(self, "tiles", tuple(self.tiles))

    def get_tile(self, tile_id: int) -> Optional[TileGeometry]:
        for tile in self.tiles:
            if tile.id == tile_id:
                return tile
        return None

    def find_tile_at(self, x: float, y: float) -> Optional[TileGeometry]:
        """Return the first tile whose polygon contains the point."""
        for tile in self.tiles:
            if tile.contains(x, y):
                return tile
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "tiles": [t.to_dict() for t in self.tiles],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def summary(self) -> Dict[str, Any]:
        """Statistics for operators."""
        vertex_counts: List[int] = [len(t.polygon) for t in self.tiles]
        return {
            "width": self.width,
            "height": self.height,
            "tile_count": len(self.tiles),
            "total_vertices": sum(vertex_counts),
            "min_vertices": min(vertex_counts) if vertex_counts else 0,
            "max_vertices": max(vertex_counts) if vertex_counts else 0,
            "total_polygon_area": round(sum(t.area for t in self.tiles), 1),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TileGeometryDocument":
        if not isinstance(data, dict):
            raise ValueError(f"document must be an object, got {type(data).__name__}")

        try:
            width = _integer(data["width"], "width")
            height = _integer(data["height"], "height")
            raw_tiles = data["tiles"]
        except KeyError as e:
            raise ValueError(f"Missing document field: {e}") from e

        if not isinstance(raw_tiles, list):
            raise ValueError("tiles must be a list")

        return cls(
            width=width,
            height=height,
            tiles=tuple(TileGeometry.from_dict(t) for t in raw_tiles),
        )

    def save(self, path: Union[str, Path]) -> str:
        """
        Write the document, replacing any existing file as a whole.

        Returns:
            The path written
        """
        path = Path(path)
        directory = path.parent
        directory.mkdir(parents=True, exist_ok=True)

        # mkstemp creates files 0600; keep the existing mode or apply the umask
        if path.exists():
            mode = stat.S_IMODE(path.stat().st_mode)
        else:
            umask = os.umask(0)
            os.umask(umask)
            mode = 0o666 & ~umask

        fd, tmp_path = tempfile.mkstemp(dir=str(directory), prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(self.to_json())
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        return str(path)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "TileGeometryDocument":
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)


def build_document(width: int, height: int, tiles: Sequence[TileGeometry]) -> TileGeometryDocument:
    """Assemble a document with tiles ordered by id."""
    return TileGeometryDocument(
        width=width,
        height=height,
        tiles=tuple(sorted(tiles, key=lambda t: t.id)),
    )
