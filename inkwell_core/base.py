from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field, replace
import logging
import math
from typing import Any, Iterator, Literal

from . import transform as tf
from .config import DrawConfig
from .errors import UnsupportedCapabilityError
from .paint import Gradient, Pattern
from .path import DevicePath, FillRule, arc_to_cubics, tangent_arc
from .surface import REPETITIONS, ImageData, ImageSource, PaintStyle, Repetition, TextMetrics
from .text_metrics import DEFAULT_FONT, measure_text


LOGGER = logging.getLogger(__name__)

PaintMode = Literal["fill", "stroke"]


@dataclass
class SurfaceState:
    fill_style: PaintStyle = "#000000"
    stroke_style: PaintStyle = "#000000"
    line_width: float = 1.0
    line_cap: str = "butt"
    line_join: str = "miter"
    miter_limit: float = 10.0
    line_dash: tuple[float, ...] = ()
    line_dash_offset: float = 0.0
    shadow_color: str = "rgba(0, 0, 0, 0)"
    shadow_blur: float = 0.0
    shadow_offset_x: float = 0.0
    shadow_offset_y: float = 0.0
    font: str = DEFAULT_FONT
    text_align: str = "start"
    text_baseline: str = "alphabetic"
    global_alpha: float = 1.0
    global_composite_operation: str = "source-over"
    matrix: tf.Matrix = field(default_factory=tf.identity)
    clip_token: Any = None

    def copy(self) -> "SurfaceState":
        return replace(self, matrix=self.matrix.copy())


@dataclass(frozen=True)
class SurfaceSnapshot:
    """Comparable view of the drawing state, including the save depth."""

    depth: int
    transform: tf.Components
    fill_style: PaintStyle
    stroke_style: PaintStyle
    line_width: float
    line_cap: str
    line_join: str
    miter_limit: float
    line_dash: tuple[float, ...]
    shadow_color: str
    shadow_blur: float
    shadow_offset: tuple[float, float]
    font: str
    text_align: str
    text_baseline: str
    global_alpha: float
    global_composite_operation: str
    clip_token: Any


def _state_property(name: str, *, positive: bool = False, unit_interval: bool = False) -> property:
    def getter(self: "StatefulSurface") -> Any:
        return getattr(self._state, name)

    def setter(self: "StatefulSurface", value: Any) -> None:
        if positive or unit_interval:
            number = float(value)
            if not math.isfinite(number):
                LOGGER.debug("ignoring non-finite %s=%r", name, value)
                return
            if positive and number <= 0:
                LOGGER.debug("ignoring non-positive %s=%r", name, value)
                return
            if unit_interval and not (0.0 <= number <= 1.0):
                LOGGER.debug("ignoring out-of-range %s=%r", name, value)
                return
            value = number
        setattr(self._state, name, value)

    return property(getter, setter)


class StatefulSurface:
    """Canvas-style state machine shared by the built-in surfaces.

    Subclasses implement the ``_paint_*`` hooks; everything else (state stack,
    transform, current path, factories) lives here.
    """

    fill_style = _state_property("fill_style")
    stroke_style = _state_property("stroke_style")
    line_width = _state_property("line_width", positive=True)
    line_cap = _state_property("line_cap")
    line_join = _state_property("line_join")
    miter_limit = _state_property("miter_limit", positive=True)
    line_dash_offset = _state_property("line_dash_offset")
    shadow_color = _state_property("shadow_color")
    shadow_blur = _state_property("shadow_blur")
    shadow_offset_x = _state_property("shadow_offset_x")
    shadow_offset_y = _state_property("shadow_offset_y")
    font = _state_property("font")
    text_align = _state_property("text_align")
    text_baseline = _state_property("text_baseline")
    global_alpha = _state_property("global_alpha", unit_interval=True)
    global_composite_operation = _state_property("global_composite_operation")

    def __init__(self, width: int, height: int, *, config: DrawConfig | None = None) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be > 0")
        self.width = width
        self.height = height
        self.config = config or DrawConfig()
        self._state = SurfaceState()
        self._stack: list[SurfaceState] = []
        self._path = DevicePath()

    # ------------------------------------------------------------------ state

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def current_transform(self) -> tf.Matrix:
        return self._state.matrix

    def save(self) -> None:
        self._stack.append(self._state.copy())

    def restore(self) -> None:
        if not self._stack:
            LOGGER.debug("restore() on empty state stack ignored")
            return
        self._state = self._stack.pop()

    def snapshot(self) -> SurfaceSnapshot:
        s = self._state
        return SurfaceSnapshot(
            depth=self.depth,
            transform=tf.components(s.matrix),
            fill_style=s.fill_style,
            stroke_style=s.stroke_style,
            line_width=s.line_width,
            line_cap=s.line_cap,
            line_join=s.line_join,
            miter_limit=s.miter_limit,
            line_dash=s.line_dash,
            shadow_color=s.shadow_color,
            shadow_blur=s.shadow_blur,
            shadow_offset=(s.shadow_offset_x, s.shadow_offset_y),
            font=s.font,
            text_align=s.text_align,
            text_baseline=s.text_baseline,
            global_alpha=s.global_alpha,
            global_composite_operation=s.global_composite_operation,
            clip_token=s.clip_token,
        )

    # ------------------------------------------------------------- transforms

    def translate(self, x: float, y: float) -> None:
        self._state.matrix = self._state.matrix @ tf.translation(x, y)

    def scale(self, sx: float, sy: float) -> None:
        self._state.matrix = self._state.matrix @ tf.scaling(sx, sy)

    def rotate(self, radians: float) -> None:
        self._state.matrix = self._state.matrix @ tf.rotation(radians)

    def transform(self, a: float, b: float, c: float, d: float, e: float, f: float) -> None:
        self._state.matrix = self._state.matrix @ tf.from_components(a, b, c, d, e, f)

    def set_transform(self, a: float, b: float, c: float, d: float, e: float, f: float) -> None:
        self._state.matrix = tf.from_components(a, b, c, d, e, f)

    def reset_transform(self) -> None:
        self._state.matrix = tf.identity()

    def get_transform(self) -> tf.Components:
        return tf.components(self._state.matrix)

    # ------------------------------------------------------------------ paths

    def _map(self, x: float, y: float) -> tuple[float, float]:
        return tf.apply_point(self._state.matrix, x, y)

    def begin_path(self) -> None:
        self._path.clear()

    def close_path(self) -> None:
        self._path.close()

    def move_to(self, x: float, y: float) -> None:
        self._path.move_to(self._map(x, y))

    def line_to(self, x: float, y: float) -> None:
        self._path.line_to(self._map(x, y))

    def quadratic_curve_to(self, cpx: float, cpy: float, x: float, y: float) -> None:
        self._path.quad_to(self._map(cpx, cpy), self._map(x, y))

    def bezier_curve_to(
        self, cp1x: float, cp1y: float, cp2x: float, cp2y: float, x: float, y: float
    ) -> None:
        self._path.cubic_to(self._map(cp1x, cp1y), self._map(cp2x, cp2y), self._map(x, y))

    def arc(
        self, x: float, y: float, radius: float, start: float, end: float, anticlockwise: bool = False
    ) -> None:
        start_point, cubics = arc_to_cubics(
            x, y, radius, start, end, anticlockwise, max_span=self.config.arc_segment_radians
        )
        if self._path.current_point is None:
            self._path.move_to(self._map(*start_point))
        else:
            self._path.line_to(self._map(*start_point))
        for c1, c2, p in cubics:
            self._path.cubic_to(self._map(*c1), self._map(*c2), self._map(*p))

    def arc_to(self, x1: float, y1: float, x2: float, y2: float, radius: float) -> None:
        current = self._path.current_point
        if current is None:
            self.move_to(x1, y1)
            return
        if not tf.is_invertible(self._state.matrix):
            return
        p0 = tf.apply_point(tf.invert(self._state.matrix), *current)
        circle = tangent_arc(p0, (x1, y1), (x2, y2), radius)
        if circle is None:
            self.line_to(x1, y1)
            return
        cx, cy, start, end, anticlockwise = circle
        self.arc(cx, cy, radius, start, end, anticlockwise)

    def rect(self, x: float, y: float, w: float, h: float) -> None:
        self._path.move_to(self._map(x, y))
        self._path.line_to(self._map(x + w, y))
        self._path.line_to(self._map(x + w, y + h))
        self._path.line_to(self._map(x, y + h))
        self._path.close()

    def fill(self, fill_rule: FillRule = "nonzero") -> None:
        self._paint_path(self._path.copy(), "fill", fill_rule)

    def stroke(self) -> None:
        self._paint_path(self._path.copy(), "stroke", "nonzero")

    def clip(self, fill_rule: FillRule = "nonzero", path: DevicePath | None = None) -> None:
        target = (path if path is not None else self._path).copy()
        self._state.clip_token = self._push_clip(target, fill_rule, self._state.clip_token)

    def is_point_in_path(
        self, x: float, y: float, fill_rule: FillRule = "nonzero", path: DevicePath | None = None
    ) -> bool:
        return (path if path is not None else self._path).contains(x, y, fill_rule)

    @contextmanager
    def isolated_path(self) -> Iterator[DevicePath]:
        """Path commands issued inside the block build a detached path; the current path is untouched."""
        outer = self._path
        self._path = DevicePath()
        try:
            yield self._path
        finally:
            self._path = outer

    # ------------------------------------------------------------- rectangles

    def _rect_path(self, x: float, y: float, w: float, h: float) -> DevicePath:
        path = DevicePath()
        path.move_to(self._map(x, y))
        path.line_to(self._map(x + w, y))
        path.line_to(self._map(x + w, y + h))
        path.line_to(self._map(x, y + h))
        path.close()
        return path

    def fill_rect(self, x: float, y: float, w: float, h: float) -> None:
        if w == 0 or h == 0:
            return
        self._paint_path(self._rect_path(x, y, w, h), "fill", "nonzero")

    def stroke_rect(self, x: float, y: float, w: float, h: float) -> None:
        self._paint_path(self._rect_path(x, y, w, h), "stroke", "nonzero")

    def clear_rect(self, x: float, y: float, w: float, h: float) -> None:
        self._paint_clear(self._rect_path(x, y, w, h))

    # -------------------------------------------------------- images and text

    def draw_image(self, image: ImageSource, *args: float) -> None:
        iw = float(image.width)
        ih = float(image.height)
        if len(args) == 2:
            source = (0.0, 0.0, iw, ih)
            dest = (args[0], args[1], iw, ih)
        elif len(args) == 4:
            source = (0.0, 0.0, iw, ih)
            dest = (args[0], args[1], args[2], args[3])
        elif len(args) == 8:
            source = (args[0], args[1], args[2], args[3])
            dest = (args[4], args[5], args[6], args[7])
        else:
            raise TypeError(f"draw_image expects 2, 4 or 8 coordinates; got {len(args)}")
        self._paint_image(image, source, dest)

    def fill_text(self, text: str, x: float, y: float, max_width: float | None = None) -> None:
        self._paint_text(text, x, y, max_width, "fill")

    def stroke_text(self, text: str, x: float, y: float, max_width: float | None = None) -> None:
        self._paint_text(text, x, y, max_width, "stroke")

    def measure_text(self, text: str) -> TextMetrics:
        return measure_text(text, self._state.font)

    # ------------------------------------------------------------- line dash

    def set_line_dash(self, segments: list[float] | tuple[float, ...]) -> None:
        values = [float(v) for v in segments]
        if any(not math.isfinite(v) or v < 0 for v in values):
            LOGGER.debug("ignoring invalid line dash %r", segments)
            return
        if len(values) % 2 == 1:
            values = values + values
        self._state.line_dash = tuple(values)

    def get_line_dash(self) -> list[float]:
        return list(self._state.line_dash)

    # -------------------------------------------------------------- factories

    def create_linear_gradient(self, x0: float, y0: float, x1: float, y1: float) -> Gradient:
        return Gradient(kind="linear", coords=(float(x0), float(y0), float(x1), float(y1)))

    def create_radial_gradient(
        self, x0: float, y0: float, r0: float, x1: float, y1: float, r1: float
    ) -> Gradient:
        if r0 < 0 or r1 < 0:
            raise ValueError("radial gradient radii must be >= 0")
        coords = (float(x0), float(y0), float(r0), float(x1), float(y1), float(r1))
        return Gradient(kind="radial", coords=coords)

    def create_pattern(self, image: ImageSource, repetition: Repetition = "repeat") -> Pattern:
        if repetition not in REPETITIONS:
            raise ValueError(f"unknown pattern repetition: {repetition}")
        return Pattern(image=image, repetition=repetition)

    # ------------------------------------------------------------- image data

    def create_image_data(self, width: int, height: int) -> ImageData:
        return ImageData.blank(width, height)

    def get_image_data(self, x: int, y: int, w: int, h: int) -> ImageData:
        raise UnsupportedCapabilityError("get_image_data", self)

    def put_image_data(
        self,
        image_data: ImageData,
        x: float,
        y: float,
        dirty_x: float | None = None,
        dirty_y: float | None = None,
        dirty_w: float | None = None,
        dirty_h: float | None = None,
    ) -> None:
        raise UnsupportedCapabilityError("put_image_data", self)

    @staticmethod
    def _put_region(
        image_data: ImageData, x: float, y: float, dirty: tuple[float | None, ...]
    ) -> tuple[ImageData, float, float] | None:
        """Pixels and device origin for ``put_image_data``; ``None`` when the dirty rect is empty."""
        if all(value is None for value in dirty):
            return image_data, float(x), float(y)
        if any(value is None for value in dirty):
            raise TypeError("put_image_data dirty rectangle needs all of dirty_x, dirty_y, dirty_w, dirty_h")
        region = image_data.region(*dirty)
        if region is None:
            return None
        left, top, pixels = region
        return pixels, float(x) + left, float(y) + top

    # ------------------------------------------------------------------ hooks

    def _paint_path(self, path: DevicePath, mode: PaintMode, fill_rule: FillRule) -> None:
        raise NotImplementedError

    def _paint_clear(self, path: DevicePath) -> None:
        raise NotImplementedError

    def _paint_image(
        self,
        image: ImageSource,
        source: tuple[float, float, float, float],
        dest: tuple[float, float, float, float],
    ) -> None:
        raise NotImplementedError

    def _paint_text(self, text: str, x: float, y: float, max_width: float | None, mode: PaintMode) -> None:
        raise NotImplementedError

    def _push_clip(self, path: DevicePath, fill_rule: FillRule, parent: Any) -> Any:
        raise NotImplementedError
