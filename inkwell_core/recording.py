from __future__ import annotations

from dataclasses import dataclass
import functools
import itertools
from typing import Any, Callable, ContextManager, Iterable

from .base import PaintMode, StatefulSurface, SurfaceSnapshot
from .config import DrawConfig
from .errors import UnsupportedCapabilityError
from .path import DevicePath, FillRule
from .surface import ImageData, ImageSource, TextMetrics


@dataclass(frozen=True)
class PaintCall:
    """One paint operation with the device path and drawing state it ran under."""

    op: str
    args: tuple[Any, ...]
    state: SurfaceSnapshot


@dataclass(frozen=True)
class ClipRegion:
    clip_id: int
    path: tuple[tuple[object, ...], ...]
    fill_rule: FillRule
    parent: "ClipRegion | None"


class RecordingSurface(StatefulSurface):
    """Headless surface that records paint operations instead of producing pixels.

    ``trace`` keeps every primitive call made from outside in order, without the
    calls a primitive makes on itself. ``calls`` keeps only the operations that
    would touch pixels.
    """

    def __init__(
        self,
        width: int = 300,
        height: int = 150,
        *,
        config: DrawConfig | None = None,
        unsupported: Iterable[str] = (),
    ) -> None:
        super().__init__(width, height, config=config)
        self.calls: list[PaintCall] = []
        self.trace: list[tuple[Any, ...]] = []
        self._unsupported = frozenset(unsupported)
        self._clip_ids = itertools.count(1)
        self._trace_depth = 0

    def _require(self, capability: str) -> None:
        if capability in self._unsupported:
            raise UnsupportedCapabilityError(capability, self)

    def _record(self, op: str, *args: Any) -> None:
        self.calls.append(PaintCall(op=op, args=args, state=self.snapshot()))

    @property
    def current_path(self) -> tuple[tuple[object, ...], ...]:
        return self._path.as_tuples()

    def paint_ops(self) -> list[str]:
        return [call.op for call in self.calls]

    def trace_names(self) -> list[str]:
        return [entry[0] for entry in self.trace]

    def reset_log(self) -> None:
        self.calls.clear()
        self.trace.clear()

    # optional capabilities

    def set_line_dash(self, segments: list[float] | tuple[float, ...]) -> None:
        self._require("set_line_dash")
        super().set_line_dash(segments)

    def get_line_dash(self) -> list[float]:
        self._require("get_line_dash")
        return super().get_line_dash()

    def measure_text(self, text: str) -> TextMetrics:
        self._require("measure_text")
        return super().measure_text(text)

    def create_image_data(self, width: int, height: int) -> ImageData:
        self._require("create_image_data")
        return super().create_image_data(width, height)

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
        self._require("put_image_data")
        placed = self._put_region(image_data, x, y, (dirty_x, dirty_y, dirty_w, dirty_h))
        if placed is not None:
            self._record("put_image_data", *placed)

    def isolated_path(self) -> ContextManager[DevicePath]:
        self._require("isolated_path")
        return super().isolated_path()

    # paint hooks

    def _paint_path(self, path: DevicePath, mode: PaintMode, fill_rule: FillRule) -> None:
        self._record(mode, path.as_tuples(), fill_rule)

    def _paint_clear(self, path: DevicePath) -> None:
        self._record("clear", path.as_tuples())

    def _paint_image(
        self,
        image: ImageSource,
        source: tuple[float, float, float, float],
        dest: tuple[float, float, float, float],
    ) -> None:
        self._record("image", image, tuple(float(v) for v in source), tuple(float(v) for v in dest))

    def _paint_text(self, text: str, x: float, y: float, max_width: float | None, mode: PaintMode) -> None:
        self._record(f"{mode}_text", text, float(x), float(y), max_width)

    def _push_clip(self, path: DevicePath, fill_rule: FillRule, parent: Any) -> ClipRegion:
        return ClipRegion(clip_id=next(self._clip_ids), path=path.as_tuples(), fill_rule=fill_rule, parent=parent)


def _traced(name: str, method: Callable[..., Any]) -> Callable[..., Any]:
    @functools.wraps(method)
    def wrapper(self: RecordingSurface, *args: Any, **kwargs: Any) -> Any:
        if self._trace_depth == 0:
            self.trace.append((name, *args, *kwargs.values()))
        self._trace_depth += 1
        try:
            return method(self, *args, **kwargs)
        finally:
            self._trace_depth -= 1

    return wrapper


_TRACED_METHODS = (
    "save",
    "restore",
    "translate",
    "scale",
    "rotate",
    "transform",
    "set_transform",
    "reset_transform",
    "begin_path",
    "close_path",
    "move_to",
    "line_to",
    "quadratic_curve_to",
    "bezier_curve_to",
    "arc",
    "arc_to",
    "rect",
    "fill",
    "stroke",
    "clip",
    "fill_rect",
    "stroke_rect",
    "clear_rect",
    "draw_image",
    "fill_text",
    "stroke_text",
    "set_line_dash",
    "create_linear_gradient",
    "create_radial_gradient",
    "create_pattern",
    "put_image_data",
)

for _name in _TRACED_METHODS:
    setattr(RecordingSurface, _name, _traced(_name, getattr(RecordingSurface, _name)))
del _name
