"""
Summary image rendering: layout into draw primitives, then rasterize to JPEG.
"""
from render.fonts import FontSet, PillowTextMeasurer, shape_rtl
from render.layout import FillRect, RenderDocument, TextRun, layout_summary, wrap_items
from render.raster import RenderError, rasterize, save_summary, summary_filename
from render.theme import FontSpec, RenderTheme, SummaryLabels, rank_color

__all__ = [
    "FontSet",
    "PillowTextMeasurer",
    "shape_rtl",
    "FillRect",
    "RenderDocument",
    "TextRun",
    "layout_summary",
    "wrap_items",
    "RenderError",
    "rasterize",
    "save_summary",
    "summary_filename",
    "FontSpec",
    "RenderTheme",
    "SummaryLabels",
    "rank_color",
]
