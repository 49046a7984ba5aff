from .angles import PI_OVER_2, PI_OVER_180, TAU, TWO_PI, to_radians
from .base import StatefulSurface, SurfaceSnapshot, SurfaceState
from .config import DrawConfig
from .errors import ConfigurationError, InkwellError, UnsupportedCapabilityError
from .paint import Gradient, GradientStop, Pattern
from .path import DevicePath
from .recording import ClipRegion, PaintCall, RecordingSurface
from .surface import (
    REPETITIONS,
    DrawingSurface,
    GradientHandle,
    ImageData,
    ImageSource,
    PatternHandle,
    Repetition,
    TextMetrics,
    is_pattern_handle,
)
from .svg_surface import SvgSurface

__all__ = [
    "ClipRegion",
    "ConfigurationError",
    "DevicePath",
    "DrawConfig",
    "DrawingSurface",
    "Gradient",
    "GradientHandle",
    "GradientStop",
    "ImageData",
    "ImageSource",
    "InkwellError",
    "PI_OVER_2",
    "PI_OVER_180",
    "PaintCall",
    "Pattern",
    "PatternHandle",
    "REPETITIONS",
    "RecordingSurface",
    "Repetition",
    "StatefulSurface",
    "SurfaceSnapshot",
    "SurfaceState",
    "SvgSurface",
    "TAU",
    "TWO_PI",
    "TextMetrics",
    "UnsupportedCapabilityError",
    "is_pattern_handle",
    "to_radians",
]
