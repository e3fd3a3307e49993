"""Pipeline configuration."""

from .pipeline_config import (
    PipelineConfig,
    ColorFilterSettings,
    BorderSettings,
    RepairSettings,
    SegmentationSettings,
    TraceSettings,
    SimplifySettings,
)

__all__ = [
    "PipelineConfig",
    "ColorFilterSettings",
    "BorderSettings",
    "RepairSettings",
    "SegmentationSettings",
    "TraceSettings",
    "SimplifySettings",
]
