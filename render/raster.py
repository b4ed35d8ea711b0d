"""
Rasterizer: RenderDocument -> JPEG bytes, and the timestamped export file.
"""
import logging
import os
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw

from render.fonts import FontSet, load_font, prepare_text
from render.layout import FillRect, RenderDocument, TextRun

logger = logging.getLogger(__name__)

DEFAULT_JPEG_QUALITY = 90
_ANCHORS = {"left": "ls", "center": "ms", "right": "rs"}


class RenderError(Exception):
    """Raised when the summary image cannot be produced."""


def rasterize(document: RenderDocument, fonts: Optional[FontSet] = None, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """Paint the document at document.scale and encode it as JPEG."""
    fonts = fonts or FontSet()
    scale = document.scale
    try:
        img = Image.new("RGB", (int(document.width * scale), int(document.height * scale)), document.background[:3])
        draw = ImageDraw.Draw(img, "RGBA")
        for prim in document.primitives:
            if isinstance(prim, FillRect):
                x0, y0 = prim.x * scale, prim.y * scale
                x1, y1 = (prim.x + prim.width) * scale, (prim.y + prim.height) * scale
                draw.rectangle([x0, y0, max(x0, x1 - 1), max(y0, y1 - 1)], fill=prim.color)
            elif isinstance(prim, TextRun):
                if not prim.text:
                    continue
                font = load_font(fonts.path_for(prim.font), prim.font.size * scale)
                draw.text(
                    (prim.x * scale, prim.y * scale),
                    prepare_text(prim.text, prim.font) if prim.rtl else prim.text,
                    fill=prim.color,
                    font=font,
                    anchor=_ANCHORS.get(prim.align, "ms"),
                )
        buf = BytesIO()
        img.save(buf, format="JPEG", quality=quality)
    except (OSError, ValueError) as e:
        raise RenderError(f"Could not render summary image: {e}") from e
    return buf.getvalue()


def summary_filename(now: Optional[datetime] = None) -> str:
    """quran-summary-2024-05-01T12-30-45.jpg"""
    now = now or datetime.now(timezone.utc)
    stamp = now.replace(microsecond=0, tzinfo=None).isoformat().replace(":", "-")
    return f"quran-summary-{stamp}.jpg"


def save_summary(
    document: RenderDocument,
    directory: str,
    fonts: Optional[FontSet] = None,
    now: Optional[datetime] = None,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> Path:
    """Rasterize and write the summary; nothing is written if rendering fails."""
    data = rasterize(document, fonts, quality)
    os.makedirs(directory, exist_ok=True)
    path = Path(directory) / summary_filename(now)
    path.write_bytes(data)
    logger.info("Wrote summary image %s (%d bytes)", path, len(data))
    return path
