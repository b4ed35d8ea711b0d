"""
Colours, fonts, labels and canvas metrics for the summary image.

Everything the layout engine needs besides the session data is injected
through these values; nothing here reads global settings.
"""
from dataclasses import dataclass
from typing import Tuple

Color = Tuple[int, int, int, int]

CANVAS_WIDTH = 500
CANVAS_SCALE = 2
PADDING = 40
CONTENT_WIDTH = CANVAS_WIDTH - 2 * PADDING
BASE_HEIGHT = 720
REVIEW_HEADER_HEIGHT = 70
VERSE_HEADER_HEIGHT = 40
LINE_HEIGHT = 35
VERSE_GAP = 20
FOOTER_OFFSET = 30
COLUMN_X = (130, 250, 370)

# Highlight box relative to the text baseline
HIGHLIGHT_TOP = 22
HIGHLIGHT_HEIGHT = 28


def hex_color(value: str, alpha: int = 255) -> Color:
    value = value.lstrip("#")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16), alpha)


def rgba(r: int, g: int, b: int, a: float) -> Color:
    return (r, g, b, int(round(a * 255)))


SCORE_COLOR = hex_color("#3B82F6")
ACCURACY_GOOD_COLOR = hex_color("#22C55E")
ACCURACY_LOW_COLOR = hex_color("#F59E0B")
FORGOT_COUNT_COLOR = hex_color("#EF4444")
TAJWID_COUNT_COLOR = hex_color("#F59E0B")
FORGOT_HIGHLIGHT = rgba(239, 68, 68, 0.3)
TAJWID_HIGHLIGHT = rgba(245, 158, 11, 0.3)

RANK_COLORS = {
    "X": hex_color("#9333EA"),
    "A": hex_color("#22C55E"),
    "B": hex_color("#3B82F6"),
    "C": hex_color("#F97316"),
    "D": hex_color("#EF4444"),
}
S_RANK_COLOR = hex_color("#F59E0B")
DEFAULT_RANK_COLOR = hex_color("#6B7280")


def rank_color(rank: str) -> Color:
    if rank == "X":
        return RANK_COLORS["X"]
    if "S" in rank:
        return S_RANK_COLOR
    return RANK_COLORS.get(rank, DEFAULT_RANK_COLOR)


@dataclass(frozen=True)
class FontSpec:
    """family is "ui" (Latin interface text) or "arabic" (verse text)."""
    family: str
    size: int
    bold: bool = False


ARABIC_FONT = FontSpec("arabic", 22)


@dataclass(frozen=True)
class RenderTheme:
    dark: bool
    background: Color
    text: Color
    muted: Color
    separator: Color
    footer: Color

    @classmethod
    def light(cls) -> "RenderTheme":
        return cls(
            dark=False,
            background=hex_color("#FFFFFF"),
            text=hex_color("#1F2937"),
            muted=hex_color("#6B7280"),
            separator=hex_color("#E5E7EB"),
            footer=hex_color("#9CA3AF"),
        )

    @classmethod
    def dark_theme(cls) -> "RenderTheme":
        return cls(
            dark=True,
            background=hex_color("#2A2A2A"),
            text=hex_color("#E0E0E0"),
            muted=hex_color("#9CA3AF"),
            separator=hex_color("#4B5563"),
            footer=hex_color("#6B7280"),
        )

    @classmethod
    def named(cls, name: str) -> "RenderTheme":
        return cls.dark_theme() if (name or "").lower() == "dark" else cls.light()


@dataclass(frozen=True)
class SummaryLabels:
    """Interface strings for the summary image; English by default."""
    summary_title: str = "Memorization Summary"
    score: str = "Score"
    rank: str = "Rank"
    accuracy: str = "Accuracy"
    total_words: str = "Total Words"
    forgot: str = "Forgot"
    tajwid: str = "Tajwid"
    review_title: str = "Mistake Analysis"
    verse: str = "Verse"
    app_name: str = "Hifz Practice"
