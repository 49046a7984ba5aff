from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Iterator, Literal, TypeAlias

from .angles import PI_OVER_2, TWO_PI


Point: TypeAlias = tuple[float, float]
FillRule = Literal["nonzero", "evenodd"]

_FLATTEN_STEPS = 16
_COLLINEAR_EPSILON = 1e-9


@dataclass(frozen=True)
class LineSegment:
    end: Point


@dataclass(frozen=True)
class QuadSegment:
    control: Point
    end: Point


@dataclass(frozen=True)
class CubicSegment:
    control1: Point
    control2: Point
    end: Point


Segment: TypeAlias = LineSegment | QuadSegment | CubicSegment


@dataclass
class SubPath:
    start: Point
    segments: list[Segment] = field(default_factory=list)
    closed: bool = False

    @property
    def end(self) -> Point:
        if not self.segments:
            return self.start
        return self.segments[-1].end


class DevicePath:
    """Current path of a surface, stored in device space.

    Points arrive already mapped through the transform that was active when the
    path command was issued, so later transform changes do not move them.
    """

    def __init__(self) -> None:
        self.subpaths: list[SubPath] = []

    def __iter__(self) -> Iterator[SubPath]:
        return iter(self.subpaths)

    def is_empty(self) -> bool:
        return not any(sp.segments for sp in self.subpaths)

    def copy(self) -> "DevicePath":
        clone = DevicePath()
        clone.subpaths = [SubPath(sp.start, list(sp.segments), sp.closed) for sp in self.subpaths]
        return clone

    def clear(self) -> None:
        self.subpaths = []

    @property
    def current_point(self) -> Point | None:
        if not self.subpaths:
            return None
        last = self.subpaths[-1]
        if last.closed:
            return last.start
        return last.end

    def move_to(self, point: Point) -> None:
        self.subpaths.append(SubPath(start=point))

    def ensure_subpath(self, point: Point) -> None:
        if not self.subpaths:
            self.move_to(point)
            return
        last = self.subpaths[-1]
        if last.closed:
            self.move_to(last.start)

    def line_to(self, point: Point) -> None:
        if not self.subpaths:
            self.move_to(point)
            return
        self.ensure_subpath(point)
        self.subpaths[-1].segments.append(LineSegment(point))

    def quad_to(self, control: Point, end: Point) -> None:
        self.ensure_subpath(control)
        self.subpaths[-1].segments.append(QuadSegment(control, end))

    def cubic_to(self, control1: Point, control2: Point, end: Point) -> None:
        self.ensure_subpath(control1)
        self.subpaths[-1].segments.append(CubicSegment(control1, control2, end))

    def close(self) -> None:
        if not self.subpaths:
            return
        last = self.subpaths[-1]
        if last.closed:
            return
        last.closed = True

    def as_tuples(self) -> tuple[tuple[object, ...], ...]:
        """Flat command view (``M``/``L``/``Q``/``C``/``Z``) used for comparisons and recording."""
        out: list[tuple[object, ...]] = []
        for sp in self.subpaths:
            out.append(("M", *sp.start))
            for seg in sp.segments:
                if isinstance(seg, LineSegment):
                    out.append(("L", *seg.end))
                elif isinstance(seg, QuadSegment):
                    out.append(("Q", *seg.control, *seg.end))
                else:
                    out.append(("C", *seg.control1, *seg.control2, *seg.end))
            if sp.closed:
                out.append(("Z",))
        return tuple(out)

    def flatten(self) -> list[list[Point]]:
        """Polyline approximation of each subpath, used for hit testing."""
        rings: list[list[Point]] = []
        for sp in self.subpaths:
            pts: list[Point] = [sp.start]
            cur = sp.start
            for seg in sp.segments:
                if isinstance(seg, LineSegment):
                    pts.append(seg.end)
                elif isinstance(seg, QuadSegment):
                    pts.extend(_sample_quad(cur, seg.control, seg.end))
                else:
                    pts.extend(_sample_cubic(cur, seg.control1, seg.control2, seg.end))
                cur = seg.end
            rings.append(pts)
        return rings

    def contains(self, x: float, y: float, fill_rule: FillRule = "nonzero") -> bool:
        winding = 0
        crossings = 0
        for ring in self.flatten():
            if len(ring) < 2:
                continue
            for (x0, y0), (x1, y1) in zip(ring, ring[1:] + ring[:1]):
                if y0 <= y < y1 or y1 <= y < y0:
                    t = (y - y0) / (y1 - y0)
                    ix = x0 + t * (x1 - x0)
                    if ix > x:
                        crossings += 1
                        winding += 1 if y1 > y0 else -1
        if fill_rule == "evenodd":
            return crossings % 2 == 1
        return winding != 0


def adjust_arc_end(start: float, end: float, anticlockwise: bool) -> float:
    """Normalizes the end angle the way browser canvases do.

    ``arc(x, y, r, 0, 2*pi, True)`` is treated as the full circle.
    """
    if not anticlockwise and end - start >= TWO_PI:
        return start + TWO_PI
    if anticlockwise and start - end >= TWO_PI:
        return start - TWO_PI
    if not anticlockwise and start > end:
        return start + (TWO_PI - math.fmod(start - end, TWO_PI))
    if anticlockwise and start < end:
        return start - (TWO_PI - math.fmod(end - start, TWO_PI))
    return end


def arc_to_cubics(
    cx: float,
    cy: float,
    radius: float,
    start: float,
    end: float,
    anticlockwise: bool,
    *,
    max_span: float = PI_OVER_2,
) -> tuple[Point, list[tuple[Point, Point, Point]]]:
    """Returns the arc start point and cubic segments approximating the arc."""
    if radius < 0:
        raise ValueError(f"arc radius must be >= 0; got {radius}")
    end = adjust_arc_end(start, end, anticlockwise)
    start_point = (cx + radius * math.cos(start), cy + radius * math.sin(start))
    sweep = end - start
    if radius == 0 or sweep == 0:
        return start_point, []
    count = max(1, int(math.ceil(abs(sweep) / max_span - 1e-12)))
    step = sweep / count
    k = 4.0 / 3.0 * math.tan(step / 4.0)
    cubics: list[tuple[Point, Point, Point]] = []
    a0 = start
    for _ in range(count):
        a1 = a0 + step
        cos0, sin0 = math.cos(a0), math.sin(a0)
        cos1, sin1 = math.cos(a1), math.sin(a1)
        c1 = (cx + radius * (cos0 - k * sin0), cy + radius * (sin0 + k * cos0))
        c2 = (cx + radius * (cos1 + k * sin1), cy + radius * (sin1 - k * cos1))
        p1 = (cx + radius * cos1, cy + radius * sin1)
        cubics.append((c1, c2, p1))
        a0 = a1
    return start_point, cubics


def tangent_arc(
    p0: Point, p1: Point, p2: Point, radius: float
) -> tuple[float, float, float, float, bool] | None:
    """Circle parameters for ``arcTo``; ``None`` means a straight line to ``p1``."""
    if radius < 0:
        raise ValueError(f"arcTo radius must be >= 0; got {radius}")
    v1 = (p0[0] - p1[0], p0[1] - p1[1])
    v2 = (p2[0] - p1[0], p2[1] - p1[1])
    len1 = math.hypot(*v1)
    len2 = math.hypot(*v2)
    if radius == 0 or len1 == 0 or len2 == 0:
        return None
    u1 = (v1[0] / len1, v1[1] / len1)
    u2 = (v2[0] / len2, v2[1] / len2)
    cross = u1[0] * u2[1] - u1[1] * u2[0]
    if abs(cross) < _COLLINEAR_EPSILON:
        return None
    cos_theta = max(-1.0, min(1.0, u1[0] * u2[0] + u1[1] * u2[1]))
    theta = math.acos(cos_theta)
    center_dist = radius / math.sin(theta / 2.0)
    bisector = (u1[0] + u2[0], u1[1] + u2[1])
    blen = math.hypot(*bisector)
    cx = p1[0] + bisector[0] / blen * center_dist
    cy = p1[1] + bisector[1] / blen * center_dist
    tangent = radius / math.tan(theta / 2.0)
    t1 = (p1[0] + u1[0] * tangent, p1[1] + u1[1] * tangent)
    t2 = (p1[0] + u2[0] * tangent, p1[1] + u2[1] * tangent)
    start = math.atan2(t1[1] - cy, t1[0] - cx)
    end = math.atan2(t2[1] - cy, t2[0] - cx)
    clockwise_sweep = math.fmod(end - start + 2.0 * TWO_PI, TWO_PI)
    anticlockwise = clockwise_sweep > math.pi
    return cx, cy, start, end, anticlockwise


def _sample_quad(p0: Point, c: Point, p1: Point) -> list[Point]:
    out: list[Point] = []
    for i in range(1, _FLATTEN_STEPS + 1):
        t = i / _FLATTEN_STEPS
        mt = 1.0 - t
        out.append(
            (
                mt * mt * p0[0] + 2 * mt * t * c[0] + t * t * p1[0],
                mt * mt * p0[1] + 2 * mt * t * c[1] + t * t * p1[1],
            )
        )
    return out


def _sample_cubic(p0: Point, c1: Point, c2: Point, p1: Point) -> list[Point]:
    out: list[Point] = []
    for i in range(1, _FLATTEN_STEPS + 1):
        t = i / _FLATTEN_STEPS
        mt = 1.0 - t
        a = mt * mt * mt
        b = 3 * mt * mt * t
        c = 3 * mt * t * t
        d = t * t * t
        out.append(
            (
                a * p0[0] + b * c1[0] + c * c2[0] + d * p1[0],
                a * p0[1] + b * c1[1] + c * c2[1] + d * p1[1],
            )
        )
    return out
