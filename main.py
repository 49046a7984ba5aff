from __future__ import annotations

import argparse
import logging
import math
from pathlib import Path

import numpy as np
from PIL import Image

from inkwell_core import DrawConfig
from inkwell_draw import CanvasContext


LOGGER = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="inkwell")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING")
    sub = parser.add_subparsers(dest="command", required=True)

    demo = sub.add_parser("demo", help="Render the demo scene to SVG.")
    demo.add_argument("--out", type=Path, default=Path("scene.svg"))
    demo.add_argument("--width", type=int, default=320)
    demo.add_argument("--height", type=int, default=200)
    demo.add_argument("--background", default="#ffffff")
    demo.add_argument(
        "--data-url",
        action="store_true",
        help="Print a data URL instead of writing --out.",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "demo":
        if args.width <= 0 or args.height <= 0:
            raise RuntimeError("--width and --height must be > 0")
        ctx = CanvasContext.svg(args.width, args.height, config=DrawConfig.from_env(), background=args.background)
        render_demo(ctx)
        if args.data_url:
            print(ctx.to_data_url())
            return
        out = ctx.surface.write(args.out)
        print(f"wrote {out} ({ctx.surface.element_count} elements)")
        return

    raise RuntimeError(f"unsupported command: {args.command}")


def render_demo(ctx: CanvasContext) -> CanvasContext:
    """Paints the sample scene scaled to the context size."""
    w = float(ctx.width)
    h = float(ctx.height)
    tile = _checker_tile(8)
    badge = _badge_image(24, 16)

    ctx.draw_linear_gradient(0, 0, w, h * 0.25, math.pi / 4, "#1e3a8a", "#60a5fa")
    ctx.fill_style("#f97316").fill_rounded_rect(w * 0.05, h * 0.32, w * 0.3, h * 0.25, [12, 4, 12, 4])
    ctx.stroke_style("#111827").line_width(2).draw_rounded_rect(w * 0.05, h * 0.32, w * 0.3, h * 0.25, 6)
    ctx.stroke_style("#16a34a").line_width(3).draw_ellipse(w * 0.55, h * 0.45, w * 0.12, h * 0.1)
    ctx.draw_radial_gradient(
        w * 0.82,
        h * 0.45,
        min(w, h) * 0.12,
        {"offset": 0.0, "color": "#fde047"},
        {"offset": 1.0, "color": "#b91c1c"},
    )
    ctx.stroke_style("#7c3aed").line_width(1.5).draw_lines(
        w * 0.05, h * 0.9, w * 0.25, h * 0.7, w * 0.45, h * 0.85, w * 0.65, h * 0.68
    )
    ctx.draw_pattern(w * 0.7, h * 0.65, w * 0.25, h * 0.3, tile, "repeat")
    ctx.draw_rotated_image(badge, w * 0.5, h * 0.85, math.pi / 6)
    ctx.fill_style("#111827").font("12px sans-serif").fill_text("inkwell", w * 0.05, h * 0.25 - 4)
    LOGGER.debug("rendered demo scene %dx%d", ctx.width, ctx.height)
    return ctx


def _checker_tile(size: int) -> Image.Image:
    rows, cols = np.indices((size * 2, size * 2))
    cells = (rows // size + cols // size) % 2
    rgba = np.zeros((size * 2, size * 2, 4), dtype=np.uint8)
    rgba[..., 3] = 255
    rgba[cells == 0, :3] = (226, 232, 240)
    rgba[cells == 1, :3] = (100, 116, 139)
    return Image.fromarray(rgba)


def _badge_image(width: int, height: int) -> Image.Image:
    x = np.linspace(0, 255, width, dtype=np.float32)
    rgba = np.zeros((height, width, 4), dtype=np.uint8)
    rgba[..., 0] = x.astype(np.uint8)
    rgba[..., 1] = 64
    rgba[..., 2] = (255 - x).astype(np.uint8)
    rgba[..., 3] = 255
    return Image.fromarray(rgba)


if __name__ == "__main__":
    main()
