from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, TypeAlias

from inkwell_core.angles import TAU
from inkwell_core.errors import ConfigurationError
from inkwell_core.surface import DrawingSurface


Point: TypeAlias = tuple[float, float]
CornerRadii: TypeAlias = tuple[float, float, float, float]


@dataclass(frozen=True)
class BeginPath:
    pass


@dataclass(frozen=True)
class MoveTo:
    x: float
    y: float


@dataclass(frozen=True)
class LineTo:
    x: float
    y: float


@dataclass(frozen=True)
class QuadraticCurveTo:
    cpx: float
    cpy: float
    x: float
    y: float


@dataclass(frozen=True)
class Arc:
    x: float
    y: float
    radius: float
    start: float
    end: float
    anticlockwise: bool = False


@dataclass(frozen=True)
class ClosePath:
    pass


@dataclass(frozen=True)
class Translate:
    x: float
    y: float


@dataclass(frozen=True)
class Scale:
    sx: float
    sy: float


PathCommand: TypeAlias = BeginPath | MoveTo | LineTo | QuadraticCurveTo | Arc | ClosePath | Translate | Scale


def normalize_radii(radii: float | Sequence[float]) -> CornerRadii:
    """Expands a scalar radius to all four corners (clockwise from upper-left)."""
    if isinstance(radii, (int, float)):
        r = float(radii)
        return (r, r, r, r)
    values = tuple(float(r) for r in radii)
    if len(values) != 4:
        raise ConfigurationError(f"corner radii need exactly 4 values; got {len(values)}")
    return values  # type: ignore[return-value]


def coords_to_points(coords: Sequence[float]) -> list[Point]:
    """Pairs up a flat ``x1, y1, x2, y2, ...`` sequence; a trailing odd value is dropped."""
    return [(float(coords[i]), float(coords[i + 1])) for i in range(0, len(coords) - 1, 2)]


def build_rounded_rect_path(
    x: float, y: float, w: float, h: float, radii: float | Sequence[float]
) -> list[PathCommand]:
    """Edges joined by quadratic corners whose control point is the true corner.

    Radii are not clamped: negative or oversized values give a self-intersecting
    outline rather than an error.
    """
    tl, tr, br, bl = normalize_radii(radii)
    return [
        BeginPath(),
        MoveTo(x + tl, y),
        LineTo(x + w - tr, y),
        QuadraticCurveTo(x + w, y, x + w, y + tr),
        LineTo(x + w, y + h - br),
        QuadraticCurveTo(x + w, y + h, x + w - br, y + h),
        LineTo(x + bl, y + h),
        QuadraticCurveTo(x, y + h, x, y + h - bl),
        LineTo(x, y + tl),
        QuadraticCurveTo(x, y, x + tl, y),
        ClosePath(),
    ]


def build_circle_path(x: float, y: float, radius: float) -> list[PathCommand]:
    return [BeginPath(), Arc(x, y, radius, 0.0, TAU, True), ClosePath()]


def build_ellipse_path(x: float, y: float, rx: float, ry: float) -> list[PathCommand]:
    """Circle path under a non-uniform scale.

    The ``Translate``/``Scale`` commands change the surface transform, so the
    result must be replayed (and painted) inside a save/restore scope. Painting
    inside that scope scales the stroke width along with the outline.
    """
    if rx < 0 or ry < 0:
        raise ConfigurationError("ellipse radii must be >= 0")
    if rx == ry:
        return build_circle_path(x, y, rx)
    radius = max(rx, ry)
    return [
        Translate(x, y),
        Scale(rx / radius, ry / radius),
        BeginPath(),
        Arc(0.0, 0.0, radius, 0.0, TAU, True),
        ClosePath(),
    ]


def build_polyline_path(points: Iterable[Point], closed: bool = False) -> list[PathCommand]:
    commands: list[PathCommand] = [BeginPath()]
    for index, (px, py) in enumerate(points):
        if index == 0:
            commands.append(MoveTo(px, py))
        else:
            commands.append(LineTo(px, py))
    if closed and len(commands) > 1:
        commands.append(ClosePath())
    return commands


def has_transform(commands: Iterable[PathCommand]) -> bool:
    return any(isinstance(cmd, (Translate, Scale)) for cmd in commands)


def replay_path(surface: DrawingSurface, commands: Iterable[PathCommand]) -> None:
    for cmd in commands:
        if isinstance(cmd, BeginPath):
            surface.begin_path()
        elif isinstance(cmd, MoveTo):
            surface.move_to(cmd.x, cmd.y)
        elif isinstance(cmd, LineTo):
            surface.line_to(cmd.x, cmd.y)
        elif isinstance(cmd, QuadraticCurveTo):
            surface.quadratic_curve_to(cmd.cpx, cmd.cpy, cmd.x, cmd.y)
        elif isinstance(cmd, Arc):
            surface.arc(cmd.x, cmd.y, cmd.radius, cmd.start, cmd.end, cmd.anticlockwise)
        elif isinstance(cmd, ClosePath):
            surface.close_path()
        elif isinstance(cmd, Translate):
            surface.translate(cmd.x, cmd.y)
        elif isinstance(cmd, Scale):
            surface.scale(cmd.sx, cmd.sy)
        else:
            raise TypeError(f"unknown path command: {cmd!r}")
