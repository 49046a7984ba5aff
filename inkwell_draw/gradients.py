from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Any, Mapping, Sequence

from inkwell_core.angles import PI_OVER_2
from inkwell_core.config import StopPolicy
from inkwell_core.errors import ConfigurationError
from inkwell_core.surface import GradientHandle


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColorStop:
    offset: float
    color: str


@dataclass(frozen=True)
class LinearEndpoints:
    x0: float
    y0: float
    x1: float
    y1: float

    def as_args(self) -> tuple[float, float, float, float]:
        return (self.x0, self.y0, self.x1, self.y1)


@dataclass(frozen=True)
class RadialEndpoints:
    x0: float
    y0: float
    r0: float
    x1: float
    y1: float
    r1: float

    def as_args(self) -> tuple[float, float, float, float, float, float]:
        return (self.x0, self.y0, self.r0, self.x1, self.y1, self.r1)


def validate_linear_angle(angle: float) -> None:
    if not (0.0 <= angle <= PI_OVER_2):
        raise ConfigurationError(f"linear gradient angle must be between 0 and PI/2; got {angle}")


def resolve_linear_endpoints(x: float, y: float, w: float, h: float, angle: float) -> LinearEndpoints:
    """Gradient axis from the rectangle origin, 0 is horizontal and PI/2 vertical.

    Only first-quadrant directions are expressible.
    """
    validate_linear_angle(angle)
    return LinearEndpoints(x, y, x + w * math.cos(angle), y + h * math.sin(angle))


def resolve_radial_endpoints(x: float, y: float, r: float) -> RadialEndpoints:
    """Outer circle ``(x, y, r)`` first, then the zero-radius center."""
    return RadialEndpoints(x, y, r, x, y, 0.0)


def is_two_color_shorthand(args: Sequence[Any]) -> bool:
    return len(args) == 2 and isinstance(args[0], str)


def resolve_color_stops(args: Sequence[Any], policy: StopPolicy = "passthrough") -> list[ColorStop]:
    """Resolves the variadic gradient color arguments into an ordered stop list.

    Exactly two arguments starting with a plain color string mean stops at 0
    and 1; any other shape is a list of ``{offset, color}`` records kept in the
    given order, including the empty list.
    """
    if is_two_color_shorthand(args):
        stops = [ColorStop(0.0, str(args[0])), ColorStop(1.0, str(args[1]))]
    else:
        stops = [_coerce_stop(arg) for arg in args]
    if policy == "sort":
        return sorted(stops, key=lambda s: s.offset)
    if policy == "reject":
        _reject_unordered(stops)
    return stops


def apply_color_stops(gradient: GradientHandle, stops: Sequence[ColorStop]) -> GradientHandle:
    for stop in stops:
        gradient.add_color_stop(stop.offset, stop.color)
    LOGGER.debug("registered %d color stops on %s", len(stops), type(gradient).__name__)
    return gradient


def _coerce_stop(arg: Any) -> ColorStop:
    if isinstance(arg, ColorStop):
        return arg
    if isinstance(arg, Mapping):
        try:
            return ColorStop(float(arg["offset"]), str(arg["color"]))
        except KeyError as exc:
            raise ConfigurationError(f"color stop is missing {exc.args[0]!r}: {arg!r}") from exc
    if hasattr(arg, "offset") and hasattr(arg, "color"):
        return ColorStop(float(arg.offset), str(arg.color))
    if isinstance(arg, (tuple, list)) and len(arg) == 2:
        return ColorStop(float(arg[0]), str(arg[1]))
    raise ConfigurationError(f"not a color stop: {arg!r}")


def _reject_unordered(stops: Sequence[ColorStop]) -> None:
    previous: float | None = None
    for stop in stops:
        if not (0.0 <= stop.offset <= 1.0):
            raise ConfigurationError(f"color stop offset outside [0, 1]: {stop.offset}")
        if previous is not None and stop.offset <= previous:
            raise ConfigurationError(
                f"color stop offsets must be strictly increasing; {stop.offset} follows {previous}"
            )
        previous = stop.offset
