from __future__ import annotations

from functools import lru_cache
from pathlib import Path
import re

from PIL import ImageFont

from .surface import TextMetrics


DEFAULT_FONT = "10px sans-serif"
DEFAULT_FONT_SIZE_PX = 10.0

_SIZE_RE = re.compile(r"(?P<size>\d+(?:\.\d+)?)(?P<unit>px|pt)\b")
_FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
)
_GENERIC_FAMILIES = {
    "sans-serif": ("dejavusans", "arial", "helvetica"),
    "serif": ("dejavuserif", "times"),
    "monospace": ("dejavusansmono", "menlo", "courier"),
}


def parse_font(font: str) -> tuple[str, float]:
    """Splits a CSS font shorthand into ``(family, size_px)``."""
    match = _SIZE_RE.search(font)
    if match is None:
        return (font.strip() or "sans-serif", DEFAULT_FONT_SIZE_PX)
    size = float(match.group("size"))
    if match.group("unit") == "pt":
        size = size * 96.0 / 72.0
    family = font[match.end() :].strip().strip(",").split(",")[0].strip().strip("'\"")
    return (family or "sans-serif", size)


def measure_text(text: str, font: str = DEFAULT_FONT) -> TextMetrics:
    family, size_px = parse_font(font)
    pil_font = _load_font(family, size_px)
    width = float(pil_font.getlength(text)) if text else 0.0
    getmetrics = getattr(pil_font, "getmetrics", None)
    if getmetrics is not None:
        ascent, descent = getmetrics()
    else:
        _, top, _, bottom = pil_font.getbbox(text or "M")
        ascent, descent = bottom - top, 0
    return TextMetrics(width=width, ascent=float(ascent), descent=float(descent))


@lru_cache(maxsize=64)
def _load_font(family: str, size_px: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    size = max(1, int(round(size_px)))
    font_path = _resolve_font_path(family)
    if font_path is not None:
        try:
            return ImageFont.truetype(str(font_path), size=size)
        except OSError:
            pass
    try:
        return ImageFont.load_default(size=size)
    except TypeError:
        return ImageFont.load_default()


def _resolve_font_path(family: str) -> Path | None:
    wanted = family.strip().lower()
    patterns = _GENERIC_FAMILIES.get(wanted, (wanted.replace(" ", ""),))
    for font_dir in _FONT_DIRS:
        if not font_dir.exists():
            continue
        for path in font_dir.rglob("*.tt[fc]"):
            name = path.stem.lower().replace(" ", "").replace("-", "")
            if any(name == pattern or name.startswith(pattern) for pattern in patterns):
                return path
    return None
