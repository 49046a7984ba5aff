from __future__ import annotations

import base64
import io
from pathlib import Path
import tempfile
import unittest
import xml.etree.ElementTree as ET

from PIL import Image

from inkwell_core import DrawConfig, ImageData, SvgSurface, UnsupportedCapabilityError
from inkwell_draw import CanvasContext


def _parse(surface: SvgSurface) -> ET.Element:
    root = ET.fromstring(surface.to_markup())
    for elem in root.iter():
        if "}" in elem.tag:
            elem.tag = elem.tag.split("}", 1)[1]
    return root


def _body(root: ET.Element) -> list[ET.Element]:
    return [child for child in root if child.tag != "defs"]


class SvgSurfaceTests(unittest.TestCase):
    def test_document_has_canvas_size(self) -> None:
        root = _parse(SvgSurface(120, 80))
        self.assertEqual(root.tag, "svg")
        self.assertEqual(root.get("width"), "120")
        self.assertEqual(root.get("viewBox"), "0 0 120 80")

    def test_fill_rect_emits_path(self) -> None:
        surface = SvgSurface(50, 50)
        surface.fill_style = "#ff0000"
        surface.fill_rect(1, 2, 3, 4)
        (path,) = _body(_parse(surface))
        self.assertEqual(path.tag, "path")
        self.assertEqual(path.get("d"), "M 1 2 L 4 2 L 4 6 L 1 6 Z")
        self.assertEqual(path.get("fill"), "#ff0000")
        self.assertIsNone(path.get("transform"))

    def test_paths_are_written_in_paint_time_user_space(self) -> None:
        surface = SvgSurface(50, 50)
        surface.translate(10, 20)
        surface.scale(2, 2)
        surface.line_width = 3
        surface.begin_path()
        surface.move_to(0, 0)
        surface.line_to(5, 0)
        surface.stroke()
        (path,) = _body(_parse(surface))
        self.assertEqual(path.get("d"), "M 0 0 L 5 0")
        self.assertEqual(path.get("transform"), "matrix(2 0 0 2 10 20)")
        self.assertEqual(path.get("stroke-width"), "3")
        self.assertEqual(path.get("fill"), "none")

    def test_precision_follows_config(self) -> None:
        surface = SvgSurface(50, 50, config=DrawConfig(svg_precision=1))
        surface.fill_rect(0.26, 0, 1, 1)
        (path,) = _body(_parse(surface))
        self.assertTrue(path.get("d").startswith("M 0.3 0"))

    def test_linear_gradient_is_defined_in_user_space(self) -> None:
        surface = SvgSurface(100, 100)
        CanvasContext(surface).draw_linear_gradient(10, 10, 80, 40, 0, "red", "blue")
        root = _parse(surface)
        gradient = root.find("defs/linearGradient")
        self.assertIsNotNone(gradient)
        self.assertEqual(gradient.get("gradientUnits"), "userSpaceOnUse")
        self.assertEqual((gradient.get("x1"), gradient.get("x2")), ("10", "90"))
        self.assertEqual([s.get("stop-color") for s in gradient.findall("stop")], ["red", "blue"])
        (path,) = _body(root)
        self.assertEqual(path.get("fill"), f"url(#{gradient.get('id')})")

    def test_stops_render_in_offset_order(self) -> None:
        surface = SvgSurface(100, 100)
        CanvasContext(surface).draw_linear_gradient(0, 0, 10, 10, 0, (1.0, "blue"), (0.0, "red"))
        stops = _parse(surface).findall("defs/linearGradient/stop")
        self.assertEqual([s.get("offset") for s in stops], ["0", "1"])
        self.assertEqual([s.get("stop-color") for s in stops], ["red", "blue"])

    def test_rim_to_center_radial_gradient_is_flipped(self) -> None:
        surface = SvgSurface(100, 100)
        CanvasContext(surface).draw_radial_gradient(50, 40, 20, "white", "black")
        gradient = _parse(surface).find("defs/radialGradient")
        self.assertEqual((gradient.get("cx"), gradient.get("cy"), gradient.get("r")), ("50", "40", "20"))
        self.assertEqual(gradient.get("fr"), "0")
        self.assertEqual([s.get("stop-color") for s in gradient.findall("stop")], ["black", "white"])

    def test_pattern_tiles_image(self) -> None:
        surface = SvgSurface(100, 100)
        tile = Image.new("RGBA", (6, 4), (0, 0, 255, 255))
        CanvasContext(surface).draw_pattern(10, 10, 50, 50, tile, "repeat-y")
        root = _parse(surface)
        pattern = root.find("defs/pattern")
        self.assertEqual(pattern.get("height"), "4")
        self.assertEqual(pattern.get("width"), "1000000")
        image = pattern.find("image")
        self.assertTrue(image.get("href").startswith("data:image/png;base64,"))
        (path,) = _body(root)
        self.assertEqual(path.get("transform"), "matrix(1 0 0 1 10 10)")

    def test_images_are_embedded_as_png(self) -> None:
        surface = SvgSurface(100, 100)
        source = Image.new("RGBA", (8, 8), (10, 20, 30, 255))
        CanvasContext(surface).draw_clipped_image(source, 0, 0, 4, 4, 5, 5, 20, 20)
        (image,) = _body(_parse(surface))
        self.assertEqual(image.tag, "image")
        self.assertEqual(image.get("width"), "20")
        payload = base64.b64decode(image.get("href").split(",", 1)[1])
        self.assertTrue(payload.startswith(b"\x89PNG"))

    def test_clip_wraps_painted_elements(self) -> None:
        surface = SvgSurface(100, 100)
        CanvasContext(surface).set_clip_rect(0, 0, 10, 10).fill_rect(0, 0, 50, 50)
        root = _parse(surface)
        clip = root.find("defs/clipPath")
        (group,) = _body(root)
        self.assertEqual(group.tag, "g")
        self.assertEqual(group.get("clip-path"), f"url(#{clip.get('id')})")
        self.assertEqual(group[0].tag, "path")

    def test_text_carries_font_and_alignment(self) -> None:
        surface = SvgSurface(100, 100)
        CanvasContext(surface).font("bold 14px serif").text_align("center").fill_text("hey", 5, 6)
        (text,) = _body(_parse(surface))
        self.assertEqual(text.text, "hey")
        self.assertEqual(text.get("font-family"), "serif")
        self.assertEqual(text.get("font-size"), "14")
        self.assertEqual(text.get("font-weight"), "bold")
        self.assertEqual(text.get("text-anchor"), "middle")

    def test_global_alpha_becomes_opacity(self) -> None:
        surface = SvgSurface(10, 10)
        surface.global_alpha = 0.25
        surface.fill_rect(0, 0, 5, 5)
        (path,) = _body(_parse(surface))
        self.assertEqual(path.get("opacity"), "0.25")

    def test_full_clear_empties_body_and_partial_clear_is_unsupported(self) -> None:
        surface = SvgSurface(10, 10)
        surface.fill_rect(0, 0, 5, 5)
        with self.assertRaises(UnsupportedCapabilityError):
            surface.clear_rect(0, 0, 5, 5)
        self.assertEqual(surface.element_count, 1)
        surface.clear_rect(0, 0, 10, 10)
        self.assertEqual(surface.element_count, 0)

    def test_context_clear_rect_degrades_to_warning(self) -> None:
        ctx = CanvasContext(SvgSurface(10, 10))
        with self.assertLogs("inkwell_draw.context", level="WARNING"):
            self.assertIs(ctx.clear_rect(1, 1, 2, 2), ctx)

    def test_put_image_data_embeds_pixels(self) -> None:
        surface = SvgSurface(10, 10)
        surface.put_image_data(ImageData.blank(3, 2), 1, 1)
        (image,) = _body(_parse(surface))
        self.assertEqual((image.get("width"), image.get("height")), ("3", "2"))

    def test_put_image_data_dirty_rect_embeds_cropped_pixels(self) -> None:
        surface = SvgSurface(10, 10)
        data = ImageData.blank(3, 2)
        data.rgba[1, 2] = (0, 0, 255, 255)
        surface.put_image_data(data, 1, 1, 2, 1, 5, 5)
        surface.put_image_data(data, 1, 1, 3, 0, 1, 1)
        (image,) = _body(_parse(surface))
        self.assertEqual((image.get("x"), image.get("y")), ("3", "2"))
        self.assertEqual((image.get("width"), image.get("height")), ("1", "1"))
        encoded = image.get("href").split(",", 1)[1]
        with Image.open(io.BytesIO(base64.b64decode(encoded))) as png:
            self.assertEqual(png.convert("RGBA").getpixel((0, 0)), (0, 0, 255, 255))

    def test_data_url_and_write(self) -> None:
        surface = SvgSurface(10, 10, background="#fff")
        url = surface.to_data_url()
        self.assertTrue(url.startswith("data:image/svg+xml;base64,"))
        markup = base64.b64decode(url.split(",", 1)[1]).decode("utf-8")
        self.assertIn('fill="#fff"', markup)
        with tempfile.TemporaryDirectory() as tmp:
            out = surface.write(Path(tmp) / "nested" / "scene.svg")
            self.assertTrue(out.exists())
            self.assertEqual(out.read_text(encoding="utf-8"), surface.to_markup())


if __name__ == "__main__":
    unittest.main()
