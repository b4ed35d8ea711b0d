"""
Font loading, RTL shaping and text measurement for the summary renderer.

Pillow's basic layout engine draws code points left to right without joining,
so Arabic runs are reshaped into presentation forms (arabic-reshaper) and put
into visual order (python-bidi) before they are measured or drawn. Harakat are
kept: the text is Uthmani script.
"""
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import arabic_reshaper
from bidi.algorithm import get_display
from PIL import ImageFont

from render.theme import FontSpec

logger = logging.getLogger(__name__)

_RESHAPER = arabic_reshaper.ArabicReshaper(
    configuration={
        "delete_harakat": False,
        "support_zwj": True,
        "shift_harakat_position": True,
    }
)


def shape_rtl(text: str) -> str:
    """Reshape Arabic letters and reorder for left-to-right drawing."""
    if not text:
        return ""
    return get_display(_RESHAPER.reshape(text))


@dataclass(frozen=True)
class FontSet:
    """TrueType files per family. None falls back to Pillow's bundled font."""
    arabic_path: Optional[str] = None
    ui_path: Optional[str] = None
    ui_bold_path: Optional[str] = None

    def path_for(self, spec: FontSpec) -> Optional[str]:
        if spec.family == "arabic":
            return self.arabic_path
        if spec.bold:
            return self.ui_bold_path or self.ui_path
        return self.ui_path


@lru_cache(maxsize=64)
def load_font(path: Optional[str], size: int):
    if path:
        try:
            return ImageFont.truetype(path, size, layout_engine=ImageFont.Layout.BASIC)
        except OSError:
            logger.warning("Could not load font %s, using Pillow default", path)
    return ImageFont.load_default(size)


def prepare_text(text: str, spec: FontSpec) -> str:
    """Text as it is handed to Pillow: shaped for Arabic, unchanged otherwise."""
    return shape_rtl(text) if spec.family == "arabic" else text


class PillowTextMeasurer:
    """measure(text, spec) -> advance width in canvas units, using the same fonts the rasterizer draws with."""

    def __init__(self, fonts: Optional[FontSet] = None):
        self.fonts = fonts or FontSet()

    def font_for(self, spec: FontSpec):
        return load_font(self.fonts.path_for(spec), spec.size)

    def __call__(self, text: str, spec: FontSpec) -> float:
        if not text:
            return 0.0
        return float(self.font_for(spec).getlength(prepare_text(text, spec)))
