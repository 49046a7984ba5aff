from .context import CanvasContext
from .geometry import (
    Arc,
    BeginPath,
    ClosePath,
    CornerRadii,
    LineTo,
    MoveTo,
    PathCommand,
    Point,
    QuadraticCurveTo,
    Scale,
    Translate,
    build_circle_path,
    build_ellipse_path,
    build_polyline_path,
    build_rounded_rect_path,
    coords_to_points,
    normalize_radii,
    replay_path,
)
from .gradients import (
    ColorStop,
    LinearEndpoints,
    RadialEndpoints,
    apply_color_stops,
    resolve_color_stops,
    resolve_linear_endpoints,
    resolve_radial_endpoints,
    validate_linear_angle,
)

__all__ = [
    "Arc",
    "BeginPath",
    "CanvasContext",
    "ClosePath",
    "ColorStop",
    "CornerRadii",
    "LineTo",
    "LinearEndpoints",
    "MoveTo",
    "PathCommand",
    "Point",
    "QuadraticCurveTo",
    "RadialEndpoints",
    "Scale",
    "Translate",
    "apply_color_stops",
    "build_circle_path",
    "build_ellipse_path",
    "build_polyline_path",
    "build_rounded_rect_path",
    "coords_to_points",
    "normalize_radii",
    "replay_path",
    "resolve_color_stops",
    "resolve_linear_endpoints",
    "resolve_radial_endpoints",
    "validate_linear_angle",
]
