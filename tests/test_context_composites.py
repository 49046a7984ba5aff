from __future__ import annotations

import math
import unittest

from PIL import Image

from inkwell_core import ConfigurationError, DrawConfig, Gradient, Pattern, RecordingSurface
from inkwell_draw import CanvasContext


def _image(width: int = 8, height: int = 4) -> Image.Image:
    return Image.new("RGBA", (width, height), (255, 0, 0, 255))


class _FailingFillSurface(RecordingSurface):
    def fill(self, fill_rule: str = "nonzero") -> None:
        raise RuntimeError("device lost")


class CompositeStateNeutralityTests(unittest.TestCase):
    def setUp(self) -> None:
        self.surface = RecordingSurface(200, 100)
        self.ctx = CanvasContext(self.surface)
        self.ctx.fill_style("#123456").stroke_style("#654321").line_width(3).translate(4, 5)

    def test_every_composite_leaves_state_untouched(self) -> None:
        image = _image()
        composites = {
            "draw_rounded_rect": lambda c: c.draw_rounded_rect(1, 2, 30, 20, [2, 3, 4, 5]),
            "fill_rounded_rect": lambda c: c.fill_rounded_rect(1, 2, 30, 20, 4),
            "draw_ellipse": lambda c: c.draw_ellipse(50, 40, 20, 10),
            "fill_ellipse": lambda c: c.fill_ellipse(50, 40, 5, 15),
            "draw_rotated_image": lambda c: c.draw_rotated_image(image, 20, 20, 1.2),
            "draw_linear_gradient": lambda c: c.draw_linear_gradient(0, 0, 50, 20, 0.3, "red", "blue"),
            "draw_radial_gradient": lambda c: c.draw_radial_gradient(
                30, 30, 10, {"offset": 0, "color": "white"}, {"offset": 1, "color": "black"}
            ),
            "draw_pattern": lambda c: c.draw_pattern(10, 10, 40, 30, image, "repeat-x"),
        }
        for name, composite in composites.items():
            with self.subTest(composite=name):
                before = self.surface.snapshot()
                self.assertIs(composite(self.ctx), self.ctx)
                self.assertEqual(self.surface.snapshot(), before)

    def test_surface_error_inside_composite_still_restores(self) -> None:
        surface = _FailingFillSurface()
        ctx = CanvasContext(surface).fill_style("green")
        before = surface.snapshot()
        with self.assertRaises(RuntimeError):
            ctx.fill_ellipse(20, 20, 10, 5)
        self.assertEqual(surface.depth, 0)
        self.assertEqual(surface.snapshot(), before)
        self.assertEqual(surface.trace_names()[-1], "restore")

    def test_saved_scope_restores_on_exception(self) -> None:
        with self.assertRaises(KeyError):
            with self.ctx.saved():
                self.ctx.rotate(1.0)
                raise KeyError("boom")
        self.assertEqual(self.surface.depth, 0)
        self.assertEqual(self.surface.get_transform(), (1.0, 0.0, 0.0, 1.0, 4.0, 5.0))


class EllipseTests(unittest.TestCase):
    def test_equal_radii_ellipse_matches_circle(self) -> None:
        a = RecordingSurface()
        b = RecordingSurface()
        CanvasContext(a).draw_ellipse(40, 30, 12, 12)
        CanvasContext(b).draw_circle(40, 30, 12)
        self.assertEqual(a.calls, b.calls)
        self.assertEqual(a.trace, b.trace)

    def test_ellipse_strokes_inside_the_scaled_scope(self) -> None:
        surface = RecordingSurface()
        CanvasContext(surface).draw_ellipse(50, 40, 20, 10)
        self.assertEqual(
            surface.trace_names(),
            ["save", "translate", "scale", "begin_path", "arc", "close_path", "stroke", "restore"],
        )
        (call,) = surface.calls
        self.assertEqual(call.state.transform, (1.0, 0.0, 0.0, 0.5, 50.0, 40.0))
        xs = [v for cmd in call.args[0] if cmd[0] in ("M", "C") for v in cmd[1::2]]
        ys = [v for cmd in call.args[0] if cmd[0] in ("M", "C") for v in cmd[2::2]]
        self.assertAlmostEqual(max(xs), 70.0)
        self.assertAlmostEqual(min(xs), 30.0)
        self.assertLessEqual(max(ys), 50.0 + 1e-9)
        self.assertGreaterEqual(min(ys), 30.0 - 1e-9)

    def test_negative_radius_raises_before_touching_the_surface(self) -> None:
        surface = RecordingSurface()
        ctx = CanvasContext(surface)
        with self.assertRaises(ConfigurationError):
            ctx.fill_ellipse(10, 10, -3, 0)
        self.assertEqual(surface.depth, 0)
        self.assertEqual(surface.trace, [])


class GradientCompositeTests(unittest.TestCase):
    def test_shorthand_and_structured_linear_gradients_match(self) -> None:
        a = RecordingSurface()
        b = RecordingSurface()
        CanvasContext(a).draw_linear_gradient(5, 5, 40, 20, 0, "red", "blue")
        CanvasContext(b).draw_linear_gradient(
            5, 5, 40, 20, 0, {"offset": 0, "color": "red"}, {"offset": 1, "color": "blue"}
        )
        (call_a,) = a.calls
        (call_b,) = b.calls
        self.assertEqual(call_a.args, call_b.args)
        grad_a = call_a.state.fill_style
        grad_b = call_b.state.fill_style
        self.assertIsInstance(grad_a, Gradient)
        self.assertEqual(grad_a.coords, (5.0, 5.0, 45.0, 5.0))
        self.assertEqual((grad_a.coords, grad_a.stops), (grad_b.coords, grad_b.stops))

    def test_invalid_angle_fails_before_touching_surface(self) -> None:
        surface = RecordingSurface()
        ctx = CanvasContext(surface)
        before = surface.snapshot()
        for angle in (-0.1, math.pi / 2 + 0.1):
            with self.subTest(angle=angle):
                with self.assertRaises(ConfigurationError):
                    ctx.draw_linear_gradient(0, 0, 10, 10, angle, "red", "blue")
        self.assertEqual(surface.snapshot(), before)
        self.assertEqual(surface.trace, [])
        self.assertEqual(surface.calls, [])

    def test_linear_gradient_fills_rect_with_gradient(self) -> None:
        surface = RecordingSurface()
        CanvasContext(surface).draw_linear_gradient(0, 0, 10, 10, math.pi / 2, "red", "blue")
        self.assertEqual(
            surface.trace_names(),
            ["create_linear_gradient", "save", "fill_rect", "restore"],
        )

    def test_radial_gradient_runs_from_rim_to_center(self) -> None:
        surface = RecordingSurface()
        CanvasContext(surface).draw_radial_gradient(30, 20, 10, "white", "black")
        (call,) = surface.calls
        self.assertEqual(call.op, "fill")
        gradient = call.state.fill_style
        self.assertEqual(gradient.kind, "radial")
        self.assertEqual(gradient.coords, (30.0, 20.0, 10.0, 30.0, 20.0, 0.0))
        self.assertEqual([(s.offset, s.color) for s in gradient.stops], [(0.0, "white"), (1.0, "black")])

    def test_reject_policy_applies_to_composites(self) -> None:
        surface = RecordingSurface()
        ctx = CanvasContext(surface, config=DrawConfig(stop_policy="reject"))
        with self.assertRaises(ConfigurationError):
            ctx.draw_linear_gradient(0, 0, 10, 10, 0, (0.9, "red"), (0.1, "blue"))
        self.assertEqual(surface.depth, 0)
        self.assertEqual(surface.calls, [])

    def test_create_gradients_return_stopped_handles(self) -> None:
        ctx = CanvasContext(RecordingSurface())
        linear = ctx.create_linear_gradient(0, 0, 10, 0, "red", "blue")
        radial = ctx.create_radial_gradient(0, 0, 0, 0, 0, 5, (0.0, "red"), (0.5, "green"), (1.0, "blue"))
        self.assertEqual(len(linear.stops), 2)
        self.assertEqual([s.color for s in radial.stops], ["red", "green", "blue"])


class PatternCompositeTests(unittest.TestCase):
    def test_realized_pattern_matches_image_with_repeat(self) -> None:
        image = _image()
        a = RecordingSurface()
        b = RecordingSurface()
        ctx_a = CanvasContext(a)
        pattern = ctx_a.create_pattern(image, "repeat")
        a.reset_log()
        ctx_a.draw_pattern(10, 20, 30, 40, pattern)
        CanvasContext(b).draw_pattern(10, 20, 30, 40, image, "repeat")
        (call_a,) = a.calls
        (call_b,) = b.calls
        self.assertEqual(call_a.args, call_b.args)
        self.assertIs(call_a.state.fill_style, pattern)
        self.assertIsInstance(call_b.state.fill_style, Pattern)
        self.assertIs(call_b.state.fill_style.image, image)
        self.assertEqual(call_b.state.fill_style.repetition, "repeat")
        self.assertEqual(call_a.state.transform, (1.0, 0.0, 0.0, 1.0, 10.0, 20.0))

    def test_pattern_fill_anchors_at_rect_origin(self) -> None:
        surface = RecordingSurface()
        CanvasContext(surface).draw_pattern(10, 20, 30, 40, _image())
        self.assertEqual(
            surface.trace_names(),
            ["create_pattern", "save", "translate", "fill_rect", "restore"],
        )
        self.assertIn(("fill_rect", 0, 0, 30, 40), surface.trace)

    def test_invalid_repetition_is_configuration_error(self) -> None:
        surface = RecordingSurface()
        with self.assertRaises(ConfigurationError):
            CanvasContext(surface).draw_pattern(0, 0, 10, 10, _image(), "tile")  # type: ignore[arg-type]
        self.assertEqual(surface.trace, [])


class ImageCompositeTests(unittest.TestCase):
    def test_rotated_image_is_centered_on_anchor(self) -> None:
        surface = RecordingSurface()
        image = _image(8, 4)
        CanvasContext(surface).draw_rotated_image(image, 50, 60, math.pi / 2)
        self.assertEqual(surface.trace_names(), ["save", "translate", "rotate", "draw_image", "restore"])
        (call,) = surface.calls
        self.assertEqual(call.args[2], (-4.0, -2.0, 8.0, 4.0))
        a, b, c, d, e, f = call.state.transform
        self.assertEqual((e, f), (50.0, 60.0))
        self.assertAlmostEqual(b, 1.0)

    def test_draw_image_defaults_to_natural_size(self) -> None:
        surface = RecordingSurface()
        CanvasContext(surface).draw_image(_image(8, 4), 3, 4)
        (call,) = surface.calls
        self.assertEqual(call.args[1:], ((0.0, 0.0, 8.0, 4.0), (3.0, 4.0, 8.0, 4.0)))

    def test_clipped_image_uses_source_rect(self) -> None:
        surface = RecordingSurface()
        CanvasContext(surface).draw_clipped_image(_image(8, 4), 1, 1, 2, 2, 10, 10)
        (call,) = surface.calls
        self.assertEqual(call.args[1:], ((1.0, 1.0, 2.0, 2.0), (10.0, 10.0, 2.0, 2.0)))


class ShapeCompositeTests(unittest.TestCase):
    def test_draw_lines_strokes_open_polyline(self) -> None:
        surface = RecordingSurface()
        CanvasContext(surface).draw_lines(0, 0, 10, 0, 10, 10)
        (call,) = surface.calls
        self.assertEqual(call.op, "stroke")
        self.assertEqual(call.args[0], (("M", 0.0, 0.0), ("L", 10.0, 0.0), ("L", 10.0, 10.0)))

    def test_fill_shape_closes_polygon(self) -> None:
        surface = RecordingSurface()
        CanvasContext(surface).fill_shape(0, 0, 10, 0, 10, 10)
        (call,) = surface.calls
        self.assertEqual(call.op, "fill")
        self.assertEqual(call.args[0][-1], ("Z",))

    def test_rounded_rect_fill_is_bracketed(self) -> None:
        surface = RecordingSurface()
        CanvasContext(surface).fill_rounded_rect(0, 0, 20, 10, 2)
        names = surface.trace_names()
        self.assertEqual(names[0], "save")
        self.assertEqual(names[-2:], ["fill", "restore"])
        self.assertEqual(names.count("quadratic_curve_to"), 4)


if __name__ == "__main__":
    unittest.main()
