from __future__ import annotations

import contextlib
import io
from pathlib import Path
import tempfile
import unittest
import xml.etree.ElementTree as ET

from inkwell_core import RecordingSurface
from inkwell_draw import CanvasContext
from main import main, render_demo


class MainCliTests(unittest.TestCase):
    def test_demo_writes_svg(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "scene.svg"
            stdout = io.StringIO()
            with contextlib.redirect_stdout(stdout):
                main(["demo", "--out", str(out), "--width", "160", "--height", "100"])
            self.assertIn("wrote", stdout.getvalue())
            root = ET.parse(out).getroot()
            self.assertEqual(root.get("width"), "160")
            self.assertEqual(root.get("height"), "100")

    def test_demo_data_url(self) -> None:
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            main(["demo", "--data-url", "--width", "64", "--height", "48"])
        self.assertTrue(stdout.getvalue().startswith("data:image/svg+xml;base64,"))

    def test_demo_rejects_empty_canvas(self) -> None:
        with self.assertRaises(RuntimeError):
            main(["demo", "--width", "0"])

    def test_demo_scene_is_state_neutral(self) -> None:
        surface = RecordingSurface(200, 120)
        ctx = CanvasContext(surface)
        before = surface.snapshot()
        render_demo(ctx)
        after = surface.snapshot()
        self.assertEqual(after.depth, before.depth)
        self.assertEqual(after.transform, before.transform)
        self.assertIn("image", surface.paint_ops())


if __name__ == "__main__":
    unittest.main()
