from __future__ import annotations

import base64
import io
import itertools
import logging
from pathlib import Path
from typing import Any
import xml.etree.ElementTree as ET

import numpy as np
from PIL import Image

from . import transform as tf
from .base import PaintMode, StatefulSurface
from .config import DrawConfig
from .errors import UnsupportedCapabilityError
from .paint import Gradient, GradientStop, Pattern
from .path import CubicSegment, DevicePath, FillRule, LineSegment, QuadSegment
from .surface import ImageData, ImageSource, PaintStyle
from .text_metrics import parse_font


LOGGER = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"

_NO_REPEAT_SPAN = 1_000_000.0
_TEXT_ANCHORS = {"start": "start", "left": "start", "center": "middle", "end": "end", "right": "end"}
_BASELINES = {
    "top": "text-before-edge",
    "hanging": "hanging",
    "middle": "middle",
    "alphabetic": "alphabetic",
    "ideographic": "ideographic",
    "bottom": "text-after-edge",
}


class SvgSurface(StatefulSurface):
    """Vector surface that serializes paint operations to an SVG document.

    Paths are emitted in the user space of the transform active at paint time,
    with that transform on the element, so stroke widths and gradient
    coordinates follow canvas semantics.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        config: DrawConfig | None = None,
        background: str | None = None,
    ) -> None:
        super().__init__(width, height, config=config)
        self.background = background
        self._defs: list[ET.Element] = []
        self._body: list[ET.Element] = []
        self._ids = itertools.count(1)
        self._href_cache: dict[int, tuple[Any, str]] = {}

    # ---------------------------------------------------------------- export

    def to_element(self) -> ET.Element:
        root = ET.Element(
            "svg",
            {
                "xmlns": SVG_NS,
                "version": "1.1",
                "width": str(self.width),
                "height": str(self.height),
                "viewBox": f"0 0 {self.width} {self.height}",
            },
        )
        defs = ET.SubElement(root, "defs")
        defs.extend(self._defs)
        if self.background:
            ET.SubElement(
                root,
                "rect",
                {"x": "0", "y": "0", "width": str(self.width), "height": str(self.height), "fill": self.background},
            )
        root.extend(self._body)
        return root

    def to_markup(self) -> str:
        return ET.tostring(self.to_element(), encoding="unicode")

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.to_markup().encode("utf-8")).decode("ascii")
        return f"data:image/svg+xml;base64,{encoded}"

    def write(self, path: str | Path) -> Path:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(self.to_markup(), encoding="utf-8")
        return out

    @property
    def element_count(self) -> int:
        return len(self._body)

    # ----------------------------------------------------------- paint hooks

    def _paint_path(self, path: DevicePath, mode: PaintMode, fill_rule: FillRule) -> None:
        if path.is_empty():
            return
        matrix = self._state.matrix
        if not tf.is_invertible(matrix):
            LOGGER.debug("skipping %s under singular transform", mode)
            return
        inverse = tf.invert(matrix)
        attrs = {"d": self._path_data(path, inverse)}
        if mode == "fill":
            attrs["fill"] = self._paint_ref(self._state.fill_style)
            attrs["fill-rule"] = fill_rule
            attrs["stroke"] = "none"
        else:
            attrs["fill"] = "none"
            attrs.update(self._stroke_attrs())
        self._emit(ET.Element("path", attrs), with_transform=True)

    def _paint_clear(self, path: DevicePath) -> None:
        if not self._covers_surface(path):
            raise UnsupportedCapabilityError("partial clear_rect", self)
        self._body.clear()

    def _paint_image(
        self,
        image: ImageSource,
        source: tuple[float, float, float, float],
        dest: tuple[float, float, float, float],
    ) -> None:
        if not tf.is_invertible(self._state.matrix):
            return
        dx, dy, dw, dh = dest
        attrs = {
            "x": self._fmt(dx),
            "y": self._fmt(dy),
            "width": self._fmt(dw),
            "height": self._fmt(dh),
            "preserveAspectRatio": "none",
            "href": self._image_href(image, source),
        }
        self._emit(ET.Element("image", attrs), with_transform=True)

    def _paint_text(self, text: str, x: float, y: float, max_width: float | None, mode: PaintMode) -> None:
        if not tf.is_invertible(self._state.matrix):
            return
        family, size_px = parse_font(self._state.font)
        attrs = {
            "x": self._fmt(x),
            "y": self._fmt(y),
            "font-family": family,
            "font-size": self._fmt(size_px),
            "text-anchor": _TEXT_ANCHORS.get(self._state.text_align, "start"),
            "dominant-baseline": _BASELINES.get(self._state.text_baseline, "alphabetic"),
        }
        if "bold" in self._state.font.split():
            attrs["font-weight"] = "bold"
        if "italic" in self._state.font.split():
            attrs["font-style"] = "italic"
        if max_width is not None:
            measured = self.measure_text(text).width
            if measured > max_width > 0:
                attrs["textLength"] = self._fmt(max_width)
                attrs["lengthAdjust"] = "spacingAndGlyphs"
        if mode == "fill":
            attrs["fill"] = self._paint_ref(self._state.fill_style)
        else:
            attrs["fill"] = "none"
            attrs.update(self._stroke_attrs())
        elem = ET.Element("text", attrs)
        elem.text = text
        self._emit(elem, with_transform=True)

    def _push_clip(self, path: DevicePath, fill_rule: FillRule, parent: Any) -> str:
        clip_id = f"clip{next(self._ids)}"
        clip = ET.Element("clipPath", {"id": clip_id, "clipPathUnits": "userSpaceOnUse"})
        if parent is not None:
            clip.set("clip-path", f"url(#{parent})")
        ET.SubElement(clip, "path", {"d": self._path_data(path, None), "clip-rule": fill_rule})
        self._defs.append(clip)
        return clip_id

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
        placed = self._put_region(image_data, x, y, (dirty_x, dirty_y, dirty_w, dirty_h))
        if placed is None:
            return
        pixels, left, top = placed
        attrs = {
            "x": self._fmt(left),
            "y": self._fmt(top),
            "width": str(pixels.width),
            "height": str(pixels.height),
            "href": self._image_href(pixels, None),
        }
        self._body.append(ET.Element("image", attrs))

    # --------------------------------------------------------------- helpers

    def _emit(self, elem: ET.Element, *, with_transform: bool) -> None:
        if with_transform:
            matrix = self._state.matrix
            if not np.allclose(matrix, tf.identity()):
                elem.set("transform", self._matrix_attr(matrix))
        if self._state.global_alpha < 1.0:
            elem.set("opacity", self._fmt(self._state.global_alpha))
        clip_token = self._state.clip_token
        if clip_token is not None:
            group = ET.Element("g", {"clip-path": f"url(#{clip_token})"})
            group.append(elem)
            elem = group
        self._body.append(elem)

    def _stroke_attrs(self) -> dict[str, str]:
        s = self._state
        attrs = {
            "stroke": self._paint_ref(s.stroke_style),
            "stroke-width": self._fmt(s.line_width),
            "stroke-linecap": s.line_cap,
            "stroke-linejoin": s.line_join,
            "stroke-miterlimit": self._fmt(s.miter_limit),
        }
        if s.line_dash:
            attrs["stroke-dasharray"] = " ".join(self._fmt(v) for v in s.line_dash)
            if s.line_dash_offset:
                attrs["stroke-dashoffset"] = self._fmt(s.line_dash_offset)
        return attrs

    def _paint_ref(self, style: PaintStyle) -> str:
        if isinstance(style, str):
            return style
        if isinstance(style, Gradient):
            return f"url(#{self._gradient_def(style)})"
        if isinstance(style, Pattern):
            return f"url(#{self._pattern_def(style)})"
        raise TypeError(f"SvgSurface cannot paint with {type(style).__name__}")

    def _gradient_def(self, gradient: Gradient) -> str:
        paint_id = f"paint{next(self._ids)}"
        stops = _sorted_stops(gradient.stops)
        if gradient.kind == "linear":
            x0, y0, x1, y1 = gradient.coords
            elem = ET.Element(
                "linearGradient",
                {
                    "id": paint_id,
                    "gradientUnits": "userSpaceOnUse",
                    "x1": self._fmt(x0),
                    "y1": self._fmt(y0),
                    "x2": self._fmt(x1),
                    "y2": self._fmt(y1),
                },
            )
        else:
            x0, y0, r0, x1, y1, r1 = gradient.coords
            if (x0, y0) == (x1, y1) and r0 > r1:
                # SVG needs the focal circle inside the end circle; flip the ramp instead.
                x0, y0, r0, x1, y1, r1 = x1, y1, r1, x0, y0, r0
                stops = [GradientStop(1.0 - s.offset, s.color) for s in reversed(stops)]
            elem = ET.Element(
                "radialGradient",
                {
                    "id": paint_id,
                    "gradientUnits": "userSpaceOnUse",
                    "cx": self._fmt(x1),
                    "cy": self._fmt(y1),
                    "r": self._fmt(r1),
                    "fx": self._fmt(x0),
                    "fy": self._fmt(y0),
                    "fr": self._fmt(r0),
                },
            )
        for stop in stops:
            ET.SubElement(elem, "stop", {"offset": self._fmt(stop.offset), "stop-color": stop.color})
        self._defs.append(elem)
        return paint_id

    def _pattern_def(self, pattern: Pattern) -> str:
        paint_id = f"paint{next(self._ids)}"
        iw = float(pattern.image.width)
        ih = float(pattern.image.height)
        tile_w = iw if pattern.repetition in ("repeat", "repeat-x") else _NO_REPEAT_SPAN
        tile_h = ih if pattern.repetition in ("repeat", "repeat-y") else _NO_REPEAT_SPAN
        attrs = {
            "id": paint_id,
            "patternUnits": "userSpaceOnUse",
            "x": "0",
            "y": "0",
            "width": self._fmt(tile_w),
            "height": self._fmt(tile_h),
        }
        if not np.allclose(pattern.matrix, tf.identity()):
            attrs["patternTransform"] = self._matrix_attr(pattern.matrix)
        elem = ET.Element("pattern", attrs)
        ET.SubElement(
            elem,
            "image",
            {
                "x": "0",
                "y": "0",
                "width": self._fmt(iw),
                "height": self._fmt(ih),
                "href": self._image_href(pattern.image, None),
            },
        )
        self._defs.append(elem)
        return paint_id

    def _image_href(self, image: Any, source: tuple[float, float, float, float] | None) -> str:
        full = source is None or source == (0.0, 0.0, float(image.width), float(image.height))
        if full:
            cached = self._href_cache.get(id(image))
            if cached is not None and cached[0] is image:
                return cached[1]
        pil_image = _to_pil(image)
        if not full and source is not None:
            sx, sy, sw, sh = source
            pil_image = pil_image.crop((int(sx), int(sy), int(sx + sw), int(sy + sh)))
        buf = io.BytesIO()
        pil_image.save(buf, format="PNG")
        href = "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
        if full:
            self._href_cache[id(image)] = (image, href)
        return href

    def _path_data(self, path: DevicePath, inverse: tf.Matrix | None) -> str:
        def pt(point: tuple[float, float]) -> str:
            x, y = point if inverse is None else tf.apply_point(inverse, *point)
            return f"{self._fmt(x)} {self._fmt(y)}"

        parts: list[str] = []
        for sp in path:
            parts.append(f"M {pt(sp.start)}")
            for seg in sp.segments:
                if isinstance(seg, LineSegment):
                    parts.append(f"L {pt(seg.end)}")
                elif isinstance(seg, QuadSegment):
                    parts.append(f"Q {pt(seg.control)} {pt(seg.end)}")
                elif isinstance(seg, CubicSegment):
                    parts.append(f"C {pt(seg.control1)} {pt(seg.control2)} {pt(seg.end)}")
            if sp.closed:
                parts.append("Z")
        return " ".join(parts)

    def _matrix_attr(self, matrix: tf.Matrix) -> str:
        return "matrix(" + " ".join(self._fmt(v) for v in tf.components(matrix)) + ")"

    def _covers_surface(self, path: DevicePath) -> bool:
        rings = path.flatten()
        if not rings or len(rings[0]) < 4:
            return False
        xs = [p[0] for p in rings[0]]
        ys = [p[1] for p in rings[0]]
        axis_aligned = len({round(x, 9) for x in xs}) <= 2 and len({round(y, 9) for y in ys}) <= 2
        return axis_aligned and min(xs) <= 0 and min(ys) <= 0 and max(xs) >= self.width and max(ys) >= self.height

    def _fmt(self, value: float) -> str:
        text = f"{float(value):.{self.config.svg_precision}f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        if text in ("-0", ""):
            text = "0"
        return text


def _sorted_stops(stops: list[GradientStop]) -> list[GradientStop]:
    # Canvas renders stops ordered by offset, keeping insertion order for ties.
    return sorted(stops, key=lambda s: s.offset)


def _to_pil(image: Any) -> Image.Image:
    if isinstance(image, Image.Image):
        return image.convert("RGBA")
    if isinstance(image, ImageData):
        return Image.fromarray(image.rgba)
    if isinstance(image, np.ndarray):
        return Image.fromarray(image.astype(np.uint8)).convert("RGBA")
    raise TypeError(f"SvgSurface cannot embed image of type {type(image).__name__}")
