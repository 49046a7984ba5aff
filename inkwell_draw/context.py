from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import Any, Iterable, Iterator, Sequence

from inkwell_core.config import DrawConfig
from inkwell_core.errors import ConfigurationError, UnsupportedCapabilityError
from inkwell_core.path import FillRule
from inkwell_core.surface import (
    REPETITIONS,
    DrawingSurface,
    GradientHandle,
    ImageData,
    ImageSource,
    PaintStyle,
    PatternHandle,
    Repetition,
    TextMetrics,
    is_pattern_handle,
)
from inkwell_core.svg_surface import SvgSurface

from .geometry import (
    PathCommand,
    Point,
    build_circle_path,
    build_ellipse_path,
    build_polyline_path,
    build_rounded_rect_path,
    coords_to_points,
    has_transform,
    normalize_radii,
    replay_path,
)
from .gradients import (
    apply_color_stops,
    resolve_color_stops,
    resolve_linear_endpoints,
    resolve_radial_endpoints,
)


LOGGER = logging.getLogger(__name__)


class CanvasContext:
    """Fluent wrapper with high-level drawing operations over a ``DrawingSurface``.

    Setters and draw calls return the context so calls chain; getters are the
    same methods called without a value. Composite operations never leave a
    transform or style change behind, even when the surface raises midway.
    """

    def __init__(self, surface: DrawingSurface, *, config: DrawConfig | None = None) -> None:
        self.surface = surface
        self.config = config or getattr(surface, "config", None) or DrawConfig()

    @classmethod
    def svg(
        cls, width: int, height: int, *, config: DrawConfig | None = None, background: str | None = None
    ) -> "CanvasContext":
        return cls(SvgSurface(width, height, config=config, background=background), config=config)

    @property
    def width(self) -> int:
        return self.surface.width

    @property
    def height(self) -> int:
        return self.surface.height

    @contextmanager
    def saved(self) -> Iterator["CanvasContext"]:
        """Save/restore scope whose restore runs on every exit path."""
        self.surface.save()
        try:
            yield self
        finally:
            self.surface.restore()

    def _call(self, capability: str, *args: Any) -> Any:
        method = getattr(self.surface, capability, None)
        if not callable(method):
            raise UnsupportedCapabilityError(capability, self.surface)
        return method(*args)

    def _ignore(self, exc: UnsupportedCapabilityError) -> None:
        if self.config.strict_capabilities:
            raise exc
        LOGGER.warning("%s; ignoring call", exc)

    def _optional(self, capability: str, *args: Any) -> Any:
        """Calls an optional surface method, yielding None where the surface lacks it."""
        try:
            return self._call(capability, *args)
        except UnsupportedCapabilityError as exc:
            self._ignore(exc)
            return None

    def _style(self, name: str, value: Any) -> Any:
        if value is None:
            return getattr(self.surface, name)
        setattr(self.surface, name, value)
        return self

    def to_data_url(self) -> str | None:
        return self._optional("to_data_url")

    # ------------------------------------------------------------------ styles

    def fill_style(self, style: PaintStyle | None = None) -> Any:
        return self._style("fill_style", style)

    def stroke_style(self, style: PaintStyle | None = None) -> Any:
        return self._style("stroke_style", style)

    def line_width(self, width: float | None = None) -> Any:
        return self._style("line_width", width)

    def line_cap(self, cap: str | None = None) -> Any:
        return self._style("line_cap", cap)

    def line_join(self, join: str | None = None) -> Any:
        return self._style("line_join", join)

    def miter_limit(self, limit: float | None = None) -> Any:
        return self._style("miter_limit", limit)

    def line_dash(self, sequence: Sequence[float] | None = None) -> Any:
        if sequence is None:
            return self._optional("get_line_dash")
        try:
            self._call("set_line_dash", list(sequence))
        except UnsupportedCapabilityError as exc:
            self._ignore(exc)
            return None
        return self

    def shadow_color(self, color: str | None = None) -> Any:
        return self._style("shadow_color", color)

    def shadow_blur(self, size: float | None = None) -> Any:
        return self._style("shadow_blur", size)

    def shadow_offset_x(self, offset: float | None = None) -> Any:
        return self._style("shadow_offset_x", offset)

    def shadow_offset_y(self, offset: float | None = None) -> Any:
        return self._style("shadow_offset_y", offset)

    def shadow_offset(self, offset_x: float | None = None, offset_y: float | None = None) -> Any:
        if offset_x is None:
            return {"offset_x": self.surface.shadow_offset_x, "offset_y": self.surface.shadow_offset_y}
        self.surface.shadow_offset_x = offset_x
        self.surface.shadow_offset_y = offset_x if offset_y is None else offset_y
        return self

    def shadow_style(self, color: str, offset_x: float, offset_y: float, blur: float) -> "CanvasContext":
        return self.shadow_color(color).shadow_offset_x(offset_x).shadow_offset_y(offset_y).shadow_blur(blur)

    def font(self, font: str | None = None) -> Any:
        return self._style("font", font)

    def text_align(self, alignment: str | None = None) -> Any:
        return self._style("text_align", alignment)

    def text_baseline(self, baseline: str | None = None) -> Any:
        return self._style("text_baseline", baseline)

    def global_alpha(self, alpha: float | None = None) -> Any:
        return self._style("global_alpha", alpha)

    def global_composite_operation(self, operation: str | None = None) -> Any:
        return self._style("global_composite_operation", operation)

    # ------------------------------------------------------- state/transforms

    def save(self) -> "CanvasContext":
        self.surface.save()
        return self

    def restore(self) -> "CanvasContext":
        self.surface.restore()
        return self

    def scale(self, xs: float, ys: float | None = None) -> "CanvasContext":
        self.surface.scale(xs, xs if ys is None else ys)
        return self

    def translate(self, x: float, y: float) -> "CanvasContext":
        self.surface.translate(x, y)
        return self

    def rotate(self, radians: float) -> "CanvasContext":
        self.surface.rotate(radians)
        return self

    def transform(self, m11: float, m12: float, m21: float, m22: float, dx: float, dy: float) -> "CanvasContext":
        self.surface.transform(m11, m12, m21, m22, dx, dy)
        return self

    def set_transform(
        self, m11: float, m12: float, m21: float, m22: float, dx: float, dy: float
    ) -> "CanvasContext":
        self.surface.set_transform(m11, m12, m21, m22, dx, dy)
        return self

    # ------------------------------------------------------ primitive paths

    def begin_path(self) -> "CanvasContext":
        self.surface.begin_path()
        return self

    def close_path(self) -> "CanvasContext":
        self.surface.close_path()
        return self

    def move_to(self, x: float, y: float) -> "CanvasContext":
        self.surface.move_to(x, y)
        return self

    def line_to(self, x: float, y: float) -> "CanvasContext":
        self.surface.line_to(x, y)
        return self

    def quadratic_curve_to(self, cpx: float, cpy: float, x: float, y: float) -> "CanvasContext":
        self.surface.quadratic_curve_to(cpx, cpy, x, y)
        return self

    def bezier_curve_to(
        self, cp1x: float, cp1y: float, cp2x: float, cp2y: float, x: float, y: float
    ) -> "CanvasContext":
        self.surface.bezier_curve_to(cp1x, cp1y, cp2x, cp2y, x, y)
        return self

    def arc(
        self, x: float, y: float, radius: float, start: float, end: float, anticlockwise: bool = False
    ) -> "CanvasContext":
        self.surface.arc(x, y, radius, start, end, anticlockwise)
        return self

    def arc_to(self, x1: float, y1: float, x2: float, y2: float, radius: float) -> "CanvasContext":
        self.surface.arc_to(x1, y1, x2, y2, radius)
        return self

    def rect(self, x: float, y: float, w: float, h: float) -> "CanvasContext":
        self.surface.rect(x, y, w, h)
        return self

    def fill(self, fill_rule: FillRule = "nonzero") -> "CanvasContext":
        self.surface.fill(fill_rule)
        return self

    def stroke(self) -> "CanvasContext":
        self.surface.stroke()
        return self

    def _device_path(self, commands: Sequence[PathCommand]) -> Any:
        """Replays ``commands`` into a detached path, leaving the current path alone."""
        isolated = getattr(self.surface, "isolated_path", None)
        if not callable(isolated):
            raise UnsupportedCapabilityError("isolated_path", self.surface)
        with isolated() as path:
            if has_transform(commands):
                with self.saved():
                    replay_path(self.surface, commands)
            else:
                replay_path(self.surface, commands)
        return path

    def clip(
        self, fill_rule: FillRule = "nonzero", *, path: Sequence[PathCommand] | None = None
    ) -> "CanvasContext":
        """Clips to the current path, or to ``path`` built from path commands."""
        if path is None:
            self.surface.clip(fill_rule)
            return self
        try:
            self.surface.clip(fill_rule, self._device_path(path))
        except UnsupportedCapabilityError as exc:
            self._ignore(exc)
        return self

    def set_clip_rect(self, x: float, y: float, w: float, h: float) -> "CanvasContext":
        return self.begin_path().rect(x, y, w, h).clip()

    def is_point_in_path(
        self, x: float, y: float, fill_rule: FillRule = "nonzero", *, path: Sequence[PathCommand] | None = None
    ) -> bool | None:
        if path is None:
            return self.surface.is_point_in_path(x, y, fill_rule)
        try:
            return self.surface.is_point_in_path(x, y, fill_rule, self._device_path(path))
        except UnsupportedCapabilityError as exc:
            self._ignore(exc)
            return None

    # --------------------------------------------------------------- clearing

    def clear(self) -> "CanvasContext":
        return self.clear_rect(0, 0, self.width, self.height)

    def clear_rect(self, x: float, y: float, w: float, h: float) -> "CanvasContext":
        self._optional("clear_rect", x, y, w, h)
        return self

    # ------------------------------------------------------------ shape paths

    def _paint(self, commands: Sequence[PathCommand], fill: bool) -> "CanvasContext":
        with self.saved():
            replay_path(self.surface, commands)
            if fill:
                self.surface.fill()
            else:
                self.surface.stroke()
        return self

    def draw_rect(self, x: float, y: float, w: float, h: float) -> "CanvasContext":
        self.surface.stroke_rect(x, y, w, h)
        return self

    def fill_rect(self, x: float, y: float, w: float, h: float) -> "CanvasContext":
        self.surface.fill_rect(x, y, w, h)
        return self

    def draw_rounded_rect(self, x: float, y: float, w: float, h: float, radii: float | Sequence[float]) -> "CanvasContext":
        """Strokes a rectangle with corner radii (scalar or four values clockwise from upper-left)."""
        return self._paint(build_rounded_rect_path(x, y, w, h, normalize_radii(radii)), fill=False)

    def fill_rounded_rect(self, x: float, y: float, w: float, h: float, radii: float | Sequence[float]) -> "CanvasContext":
        return self._paint(build_rounded_rect_path(x, y, w, h, normalize_radii(radii)), fill=True)

    def draw_circle(self, x: float, y: float, radius: float) -> "CanvasContext":
        replay_path(self.surface, build_circle_path(x, y, radius))
        self.surface.stroke()
        return self

    def fill_circle(self, x: float, y: float, radius: float) -> "CanvasContext":
        replay_path(self.surface, build_circle_path(x, y, radius))
        self.surface.fill()
        return self

    def draw_arc(
        self, x: float, y: float, radius: float, start: float, end: float, anticlockwise: bool = False
    ) -> "CanvasContext":
        return self.begin_path().arc(x, y, radius, start, end, anticlockwise).stroke()

    def fill_arc(
        self, x: float, y: float, radius: float, start: float, end: float, anticlockwise: bool = False
    ) -> "CanvasContext":
        return self.begin_path().arc(x, y, radius, start, end, anticlockwise).fill()

    def draw_ellipse(self, x: float, y: float, rx: float, ry: float) -> "CanvasContext":
        """Strokes an ellipse; the stroke width is scaled along with the outline."""
        if rx == ry:
            return self.draw_circle(x, y, rx)
        return self._paint(build_ellipse_path(x, y, rx, ry), fill=False)

    def fill_ellipse(self, x: float, y: float, rx: float, ry: float) -> "CanvasContext":
        if rx == ry:
            return self.fill_circle(x, y, rx)
        return self._paint(build_ellipse_path(x, y, rx, ry), fill=True)

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> "CanvasContext":
        return self.begin_path().move_to(x1, y1).line_to(x2, y2).stroke()

    def draw_polyline(self, points: Iterable[Point], closed: bool = False) -> "CanvasContext":
        replay_path(self.surface, build_polyline_path(points, closed))
        self.surface.stroke()
        return self

    def fill_polygon(self, points: Iterable[Point]) -> "CanvasContext":
        replay_path(self.surface, build_polyline_path(points, closed=True))
        self.surface.fill()
        return self

    def draw_lines(self, *coords: float) -> "CanvasContext":
        """Strokes the open polyline through ``x1, y1, x2, y2, ...``."""
        return self.draw_polyline(coords_to_points(coords))

    def draw_shape(self, *coords: float) -> "CanvasContext":
        return self.draw_polyline(coords_to_points(coords), closed=True)

    def fill_shape(self, *coords: float) -> "CanvasContext":
        return self.fill_polygon(coords_to_points(coords))

    # ------------------------------------------------------------------- text

    def draw_text(self, text: str, x: float, y: float, max_width: float | None = None) -> "CanvasContext":
        self.surface.stroke_text(text, x, y, max_width)
        return self

    def fill_text(self, text: str, x: float, y: float, max_width: float | None = None) -> "CanvasContext":
        self.surface.fill_text(text, x, y, max_width)
        return self

    def measure_text(self, text: str) -> TextMetrics | None:
        return self._optional("measure_text", text)

    def text_width(self, text: str) -> float | None:
        metrics = self.measure_text(text)
        return None if metrics is None else metrics.width

    # ----------------------------------------------------------------- images

    def draw_image(
        self, image: ImageSource, x: float, y: float, w: float | None = None, h: float | None = None
    ) -> "CanvasContext":
        width = image.width if w is None else w
        height = image.height if h is None else h
        self.surface.draw_image(image, x, y, width, height)
        return self

    def draw_clipped_image(
        self,
        image: ImageSource,
        sx: float,
        sy: float,
        sw: float,
        sh: float,
        x: float,
        y: float,
        w: float | None = None,
        h: float | None = None,
    ) -> "CanvasContext":
        width = sw if w is None else w
        height = sh if h is None else h
        self.surface.draw_image(image, sx, sy, sw, sh, x, y, width, height)
        return self

    def draw_rotated_image(
        self,
        image: ImageSource,
        x: float,
        y: float,
        angle: float,
        w: float | None = None,
        h: float | None = None,
    ) -> "CanvasContext":
        """Draws ``image`` centered on ``(x, y)`` rotated by ``angle`` radians about its own center."""
        width = image.width if w is None else w
        height = image.height if h is None else h
        with self.saved():
            self.surface.translate(x, y)
            self.surface.rotate(angle)
            self.surface.draw_image(image, -width / 2, -height / 2, width, height)
        return self

    def create_image_data(self, width_or_data: int | ImageData, height: int | None = None) -> ImageData | None:
        if height is None:
            if not isinstance(width_or_data, ImageData):
                raise TypeError("create_image_data needs a height or an ImageData to copy the size of")
            return self._optional("create_image_data", width_or_data.width, width_or_data.height)
        return self._optional("create_image_data", width_or_data, height)

    def get_image_data(
        self, x: int = 0, y: int = 0, w: int | None = None, h: int | None = None
    ) -> ImageData | None:
        return self._optional("get_image_data", x, y, self.width if w is None else w, self.height if h is None else h)

    def put_image_data(
        self,
        image_data: ImageData,
        x: float = 0,
        y: float = 0,
        dirty_x: float | None = None,
        dirty_y: float | None = None,
        dirty_w: float | None = None,
        dirty_h: float | None = None,
    ) -> "CanvasContext":
        """Writes pixels at ``(x, y)``; a dirty rectangle limits which pixels are written.

        Any dirty value left out defaults to 0 for the offsets and to the image
        size for the extent.
        """
        if dirty_x is None and dirty_y is None and dirty_w is None and dirty_h is None:
            self._optional("put_image_data", image_data, x, y)
            return self
        self._optional(
            "put_image_data",
            image_data,
            x,
            y,
            0 if dirty_x is None else dirty_x,
            0 if dirty_y is None else dirty_y,
            image_data.width if dirty_w is None else dirty_w,
            image_data.height if dirty_h is None else dirty_h,
        )
        return self

    # ------------------------------------------------------ gradients/patterns

    def create_linear_gradient(
        self, x0: float, y0: float, x1: float, y1: float, *colors_or_stops: Any
    ) -> GradientHandle:
        stops = resolve_color_stops(colors_or_stops, self.config.stop_policy)
        return apply_color_stops(self.surface.create_linear_gradient(x0, y0, x1, y1), stops)

    def create_radial_gradient(
        self, x0: float, y0: float, r0: float, x1: float, y1: float, r1: float, *colors_or_stops: Any
    ) -> GradientHandle:
        stops = resolve_color_stops(colors_or_stops, self.config.stop_policy)
        return apply_color_stops(self.surface.create_radial_gradient(x0, y0, r0, x1, y1, r1), stops)

    def create_pattern(self, image: ImageSource, repetition: Repetition = "repeat") -> PatternHandle:
        if repetition not in REPETITIONS:
            raise ConfigurationError(
                f"pattern repetition must be one of {', '.join(REPETITIONS)}; got {repetition!r}"
            )
        return self.surface.create_pattern(image, repetition)

    def draw_linear_gradient(
        self, x: float, y: float, w: float, h: float, angle: float, *colors_or_stops: Any
    ) -> "CanvasContext":
        """Fills the rectangle with a gradient running from its origin at ``angle`` in [0, PI/2]."""
        endpoints = resolve_linear_endpoints(x, y, w, h, angle)
        gradient = self.create_linear_gradient(*endpoints.as_args(), *colors_or_stops)
        with self.saved():
            self.surface.fill_style = gradient
            self.surface.fill_rect(x, y, w, h)
        return self

    def draw_radial_gradient(self, x: float, y: float, r: float, *colors_or_stops: Any) -> "CanvasContext":
        """Fills a circle with a gradient from its rim (first stop) to its center."""
        endpoints = resolve_radial_endpoints(x, y, r)
        gradient = self.create_radial_gradient(*endpoints.as_args(), *colors_or_stops)
        with self.saved():
            self.surface.fill_style = gradient
            self.fill_circle(x, y, r)
        return self

    def draw_pattern(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        image_or_pattern: ImageSource | PatternHandle,
        repetition: Repetition = "repeat",
    ) -> "CanvasContext":
        """Fills a rectangle with a pattern anchored at the rectangle origin rather than the surface origin."""
        if is_pattern_handle(image_or_pattern):
            pattern = image_or_pattern
        else:
            pattern = self.create_pattern(image_or_pattern, repetition)  # type: ignore[arg-type]
            LOGGER.debug("created %s pattern for draw_pattern", repetition)
        with self.saved():
            self.surface.fill_style = pattern
            self.surface.translate(x, y)
            self.surface.fill_rect(0, 0, w, h)
        return self
