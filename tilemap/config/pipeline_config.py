"""
Configuration for the tile extraction pipeline.

Each stage has its own settings dataclass; PipelineConfig bundles them and
handles dict/YAML round trips.
"""

from dataclasses import dataclass, field, fields
from typing import Dict, Any, Tuple

import yaml


def _require_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _require_number(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")


def _section_dict(settings_cls, data: Any) -> Dict[str, Any]:
    """Check that a section is a mapping of known setting names."""
    if not isinstance(data, dict):
        raise ValueError(
            f"{settings_cls.__name__} section must be a mapping, got {type(data).__name__}"
        )

    unknown = set(data) - {f.name for f in fields(settings_cls)}
    if unknown:
        raise ValueError(f"Unknown {settings_cls.__name__} keys: {sorted(unknown, key=str)}")

    return data


@dataclass
class ColorFilterSettings:
    """
    Thresholds for classifying overlay (printed number) pixels.

    Attributes:
        overlay_margin: Amount blue must exceed red and green by
        overlay_blue_floor: Minimum blue value for a saturated overlay pixel
        near_white_floor: Minimum red/green value for an anti-aliased edge pixel
        near_white_blue_floor: Minimum blue value for an anti-aliased edge pixel
        near_white_margin: Amount blue must exceed red and green by on edges
        background_color: RGB color that replaces overlay pixels
    """
    overlay_margin: int = 0
    overlay_blue_floor: int = 100
    near_white_floor: int = 180
    near_white_blue_floor: int = 200
    near_white_margin: int = 10
    background_color: Tuple[int, int, int] = (255, 255, 255)

    def __post_init__(self):
        for name in (
            "overlay_margin",
            "overlay_blue_floor",
            "near_white_floor",
            "near_white_blue_floor",
            "near_white_margin",
        ):
            value = getattr(self, name)
            _require_int(name, value)
            if not (0 <= value <= 255):
                raise ValueError(f"{name} must be 0-255, got {value}")

        if not isinstance(self.background_color, (list, tuple)):
            raise ValueError(f"background_color must be an RGB triple, got {self.background_color!r}")
        self.background_color = tuple(self.background_color)
        if len(self.background_color) != 3 or not all(
            not isinstance(c, bool) and isinstance(c, int) and 0 <= c <= 255
            for c in self.background_color
        ):
            raise ValueError(f"background_color must be an RGB triple, got {self.background_color}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overlay_margin": self.overlay_margin,
            "overlay_blue_floor": self.overlay_blue_floor,
            "near_white_floor": self.near_white_floor,
            "near_white_blue_floor": self.near_white_blue_floor,
            "near_white_margin": self.near_white_margin,
            "background_color": list(self.background_color),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColorFilterSettings":
        data = _section_dict(cls, data)
        return cls(
            overlay_margin=data.get("overlay_margin", 0),
            overlay_blue_floor=data.get("overlay_blue_floor", 100),
            near_white_floor=data.get("near_white_floor", 180),
            near_white_blue_floor=data.get("near_white_blue_floor", 200),
            near_white_margin=data.get("near_white_margin", 10),
            background_color=data.get("background_color", (255, 255, 255)),
        )


@dataclass
class BorderSettings:
    """Brightness threshold below which all three channels mark a border pixel."""
    dark_threshold: int = 100

    def __post_init__(self):
        _require_int("dark_threshold", self.dark_threshold)
        if not (1 <= self.dark_threshold <= 256):
            raise ValueError(f"dark_threshold must be 1-256, got {self.dark_threshold}")

    def to_dict(self) -> Dict[str, Any]:
        return {"dark_threshold": self.dark_threshold}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BorderSettings":
        data = _section_dict(cls, data)
        return cls(dark_threshold=data.get("dark_threshold", 100))


@dataclass
class RepairSettings:
    """Number of gap-closing passes run over the border mask."""
    passes: int = 3

    def __post_init__(self):
        _require_int("passes", self.passes)
        if self.passes < 0:
            raise ValueError(f"passes must be >= 0, got {self.passes}")

    def to_dict(self) -> Dict[str, Any]:
        return {"passes": self.passes}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepairSettings":
        data = _section_dict(cls, data)
        return cls(passes=data.get("passes", 3))


@dataclass
class SegmentationSettings:
    """
    Seeding and area filtering for region segmentation.

    The seed stride must stay below the smallest expected tile dimension,
    otherwise tiles that fall between seed points are never filled.

    Attributes:
        seed_stride: Distance between seed points on both axes
        seed_margin: Distance from the image edge where seeding starts
        min_area: Smallest accepted region, in pixels (inclusive)
        max_area: Largest accepted region, in pixels (inclusive)
    """
    seed_stride: int = 5
    seed_margin: int = 10
    min_area: int = 201
    max_area: int = 49999

    def __post_init__(self):
        for name in ("seed_stride", "seed_margin", "min_area", "max_area"):
            _require_int(name, getattr(self, name))
        if self.seed_stride < 1:
            raise ValueError(f"seed_stride must be >= 1, got {self.seed_stride}")
        if self.seed_margin < 0:
            raise ValueError(f"seed_margin must be >= 0, got {self.seed_margin}")
        if self.min_area < 1:
            raise ValueError(f"min_area must be >= 1, got {self.min_area}")
        if self.max_area < self.min_area:
            raise ValueError(
                f"max_area must be >= min_area ({self.min_area}), got {self.max_area}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seed_stride": self.seed_stride,
            "seed_margin": self.seed_margin,
            "min_area": self.min_area,
            "max_area": self.max_area,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SegmentationSettings":
        data = _section_dict(cls, data)
        return cls(
            seed_stride=data.get("seed_stride", 5),
            seed_margin=data.get("seed_margin", 10),
            min_area=data.get("min_area", 201),
            max_area=data.get("max_area", 49999),
        )


@dataclass
class TraceSettings:
    """Upper bound on Moore-Neighbor steps per region."""
    max_iterations: int = 10000

    def __post_init__(self):
        _require_int("max_iterations", self.max_iterations)
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")

    def to_dict(self) -> Dict[str, Any]:
        return {"max_iterations": self.max_iterations}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TraceSettings":
        data = _section_dict(cls, data)
        return cls(max_iterations=data.get("max_iterations", 10000))


@dataclass
class SimplifySettings:
    """Douglas-Peucker distance tolerance in pixels (0 disables simplification)."""
    tolerance: float = 2.0

    def __post_init__(self):
        _require_number("tolerance", self.tolerance)
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be >= 0, got {self.tolerance}")

    def to_dict(self) -> Dict[str, Any]:
        return {"tolerance": self.tolerance}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimplifySettings":
        data = _section_dict(cls, data)
        return cls(tolerance=data.get("tolerance", 2.0))


_SECTIONS = {
    "color_filter": ColorFilterSettings,
    "border": BorderSettings,
    "repair": RepairSettings,
    "segmentation": SegmentationSettings,
    "trace": TraceSettings,
    "simplify": SimplifySettings,
}


@dataclass
class PipelineConfig:
    """
    Configuration for a full tile extraction run.

    Attributes:
        color_filter: Overlay removal thresholds
        border: Border pixel classification
        repair: Gap repair pass count
        segmentation: Seed grid and area bounds
        trace: Contour tracing iteration cap
        simplify: Polygon simplification tolerance
    """
    color_filter: ColorFilterSettings = field(default_factory=ColorFilterSettings)
    border: BorderSettings = field(default_factory=BorderSettings)
    repair: RepairSettings = field(default_factory=RepairSettings)
    segmentation: SegmentationSettings = field(default_factory=SegmentationSettings)
    trace: TraceSettings = field(default_factory=TraceSettings)
    simplify: SimplifySettings = field(default_factory=SimplifySettings)

    def __post_init__(self):
        # Accept plain dicts for any section (e.g. straight from YAML)
        for name, settings_cls in _SECTIONS.items():
            value = getattr(self, name)
            if isinstance(value, dict):
                setattr(self, name, settings_cls.from_dict(value))
            elif not isinstance(value, settings_cls):
                raise ValueError(
                    f"{name} must be a {settings_cls.__name__} or dict, got {type(value).__name__}"
                )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {name: getattr(self, name).to_dict() for name in _SECTIONS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        """Create from dictionary. Missing or empty sections use defaults."""
        if not isinstance(data, dict):
            raise ValueError(f"Configuration must be a mapping, got {type(data).__name__}")

        unknown = set(data) - set(_SECTIONS)
        if unknown:
            raise ValueError(f"Unknown configuration sections: {sorted(unknown, key=str)}")

        sections = {}
        for name, settings_cls in _SECTIONS.items():
            section = data.get(name)
            sections[name] = settings_cls.from_dict({} if section is None else section)

        return cls(**sections)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "PipelineConfig":
        """Load configuration from YAML file."""
        with open(yaml_path, "r") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration must be a mapping, got {type(data).__name__}")

        if "tile_extraction" in data:
            data = data["tile_extraction"]
            if data is None:
                data = {}

        return cls.from_dict(data)

    def to_yaml(self) -> str:
        return yaml.safe_dump({"tile_extraction": self.to_dict()}, sort_keys=False)

    @classmethod
    def default(cls) -> "PipelineConfig":
        """Create default configuration."""
        return cls()
