from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol, TypeAlias, Union, runtime_checkable

import numpy as np

from .path import DevicePath, FillRule


Repetition = Literal["repeat", "repeat-x", "repeat-y", "no-repeat"]
REPETITIONS: tuple[str, ...] = ("repeat", "repeat-x", "repeat-y", "no-repeat")

LineCap = Literal["butt", "round", "square"]
LineJoin = Literal["bevel", "round", "miter"]
TextAlign = Literal["start", "end", "left", "right", "center"]
TextBaseline = Literal["top", "hanging", "middle", "alphabetic", "ideographic", "bottom"]


@runtime_checkable
class ImageSource(Protocol):
    """Anything with pixel dimensions; ``PIL.Image.Image`` satisfies it."""

    @property
    def width(self) -> int:
        ...

    @property
    def height(self) -> int:
        ...


class GradientHandle(Protocol):
    def add_color_stop(self, offset: float, color: str) -> None:
        ...


class PatternHandle(Protocol):
    def set_transform(self, a: float, b: float, c: float, d: float, e: float, f: float) -> None:
        ...


PaintStyle: TypeAlias = Union[str, GradientHandle, PatternHandle]


@dataclass(frozen=True)
class TextMetrics:
    width: float
    ascent: float
    descent: float


@dataclass
class ImageData:
    rgba: np.ndarray

    @classmethod
    def blank(cls, width: int, height: int) -> "ImageData":
        if width <= 0 or height <= 0:
            raise ValueError("image data width and height must be > 0")
        return cls(np.zeros((height, width, 4), dtype=np.uint8))

    @property
    def width(self) -> int:
        return int(self.rgba.shape[1])

    @property
    def height(self) -> int:
        return int(self.rgba.shape[0])

    def region(self, x: float, y: float, w: float, h: float) -> tuple[int, int, "ImageData"] | None:
        """Pixels inside a dirty rectangle as ``(left, top, pixels)``, clamped to the image.

        Negative sizes extend left/up from ``(x, y)``. ``None`` when nothing is left.
        """
        if w < 0:
            x, w = x + w, -w
        if h < 0:
            y, h = y + h, -h
        left = max(0, int(x))
        top = max(0, int(y))
        right = min(self.width, int(x + w))
        bottom = min(self.height, int(y + h))
        if right <= left or bottom <= top:
            return None
        return left, top, ImageData(self.rgba[top:bottom, left:right].copy())


class DrawingSurface(Protocol):
    """Immediate-mode 2D surface consumed by ``CanvasContext``.

    Optional capabilities (line dash, image data, text metrics, detached paths
    through ``isolated_path``) may be missing or raise ``UnsupportedCapabilityError``.
    """

    width: int
    height: int

    # state
    def save(self) -> None: ...
    def restore(self) -> None: ...

    # transforms
    def translate(self, x: float, y: float) -> None: ...
    def scale(self, sx: float, sy: float) -> None: ...
    def rotate(self, radians: float) -> None: ...
    def transform(self, a: float, b: float, c: float, d: float, e: float, f: float) -> None: ...
    def set_transform(self, a: float, b: float, c: float, d: float, e: float, f: float) -> None: ...

    # paths
    def begin_path(self) -> None: ...
    def close_path(self) -> None: ...
    def move_to(self, x: float, y: float) -> None: ...
    def line_to(self, x: float, y: float) -> None: ...
    def quadratic_curve_to(self, cpx: float, cpy: float, x: float, y: float) -> None: ...
    def bezier_curve_to(
        self, cp1x: float, cp1y: float, cp2x: float, cp2y: float, x: float, y: float
    ) -> None: ...
    def arc(
        self, x: float, y: float, radius: float, start: float, end: float, anticlockwise: bool = False
    ) -> None: ...
    def arc_to(self, x1: float, y1: float, x2: float, y2: float, radius: float) -> None: ...
    def rect(self, x: float, y: float, w: float, h: float) -> None: ...
    def fill(self, fill_rule: FillRule = "nonzero") -> None: ...
    def stroke(self) -> None: ...
    def clip(self, fill_rule: FillRule = "nonzero", path: DevicePath | None = None) -> None: ...
    def is_point_in_path(
        self, x: float, y: float, fill_rule: FillRule = "nonzero", path: DevicePath | None = None
    ) -> bool: ...

    # rectangles
    def fill_rect(self, x: float, y: float, w: float, h: float) -> None: ...
    def stroke_rect(self, x: float, y: float, w: float, h: float) -> None: ...
    def clear_rect(self, x: float, y: float, w: float, h: float) -> None: ...

    # images and text
    def draw_image(self, image: ImageSource, *args: float) -> None: ...
    def fill_text(self, text: str, x: float, y: float, max_width: float | None = None) -> None: ...
    def stroke_text(self, text: str, x: float, y: float, max_width: float | None = None) -> None: ...
    def measure_text(self, text: str) -> TextMetrics: ...

    # factories
    def create_linear_gradient(self, x0: float, y0: float, x1: float, y1: float) -> GradientHandle: ...
    def create_radial_gradient(
        self, x0: float, y0: float, r0: float, x1: float, y1: float, r1: float
    ) -> GradientHandle: ...
    def create_pattern(self, image: ImageSource, repetition: Repetition) -> PatternHandle: ...

    # style properties, read and written as plain attributes
    fill_style: PaintStyle
    stroke_style: PaintStyle
    line_width: float
    line_cap: str
    line_join: str
    miter_limit: float
    shadow_color: str
    shadow_blur: float
    shadow_offset_x: float
    shadow_offset_y: float
    font: str
    text_align: str
    text_baseline: str
    global_alpha: float
    global_composite_operation: str


def is_pattern_handle(candidate: object) -> bool:
    """A realized pattern is recognized by its transform-setting capability, not its type."""
    return callable(getattr(candidate, "set_transform", None))
