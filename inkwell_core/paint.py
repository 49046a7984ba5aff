from __future__ import annotations

from dataclasses import dataclass, field
import itertools
import math
from typing import Literal

from . import transform as tf
from .surface import ImageSource, Repetition


_IDS = itertools.count(1)


@dataclass(frozen=True)
class GradientStop:
    offset: float
    color: str


@dataclass(eq=False)
class Gradient:
    """Gradient handle produced by the built-in surfaces.

    Stops are kept in registration order; sorting is left to whoever renders.
    """

    kind: Literal["linear", "radial"]
    coords: tuple[float, ...]
    stops: list[GradientStop] = field(default_factory=list)
    handle_id: int = field(default_factory=lambda: next(_IDS))

    def add_color_stop(self, offset: float, color: str) -> None:
        offset = float(offset)
        if not math.isfinite(offset) or offset < 0.0 or offset > 1.0:
            raise ValueError(f"color stop offset must be within [0, 1]; got {offset}")
        self.stops.append(GradientStop(offset=offset, color=str(color)))


@dataclass(eq=False)
class Pattern:
    image: ImageSource
    repetition: Repetition = "repeat"
    matrix: tf.Matrix = field(default_factory=tf.identity)
    handle_id: int = field(default_factory=lambda: next(_IDS))

    def set_transform(self, a: float, b: float, c: float, d: float, e: float, f: float) -> None:
        self.matrix = tf.from_components(a, b, c, d, e, f)
