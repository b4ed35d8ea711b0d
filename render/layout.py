"""
Summary layout engine: session results -> ordered draw primitives.

The layout is computed once, in canvas units (the logical 500px-wide canvas),
and handed to the rasterizer as a RenderDocument. Verses with mistakes are
re-tokenized with core.tokenizer.tokenize so highlights land on the same words
the session marked.

Right-to-left lines: each wrapped line starts at the right content edge and
every item is drawn right-anchored, moving left by its width plus one space.
A word carrying a mistake gets a translucent box emitted before its text.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from core.models import Ayah, MemorizationStats, Mistake, MistakeKind
from core.scoring import score_stats
from core.tokenizer import DisplayItem, tokenize
from render.fonts import PillowTextMeasurer
from render.theme import (
    ACCURACY_GOOD_COLOR,
    ACCURACY_LOW_COLOR,
    ARABIC_FONT,
    BASE_HEIGHT,
    CANVAS_SCALE,
    CANVAS_WIDTH,
    COLUMN_X,
    CONTENT_WIDTH,
    FOOTER_OFFSET,
    FORGOT_COUNT_COLOR,
    FORGOT_HIGHLIGHT,
    HIGHLIGHT_HEIGHT,
    HIGHLIGHT_TOP,
    LINE_HEIGHT,
    PADDING,
    REVIEW_HEADER_HEIGHT,
    SCORE_COLOR,
    TAJWID_COUNT_COLOR,
    TAJWID_HIGHLIGHT,
    VERSE_GAP,
    VERSE_HEADER_HEIGHT,
    Color,
    FontSpec,
    RenderTheme,
    SummaryLabels,
    rank_color,
)

Measure = Callable[[str, FontSpec], float]


@dataclass(frozen=True)
class TextRun:
    """Text drawn with its baseline at y; align says which point of the run sits at x."""
    text: str
    x: float
    y: float
    font: FontSpec
    color: Color
    align: str = "center"  # left | center | right
    rtl: bool = False


@dataclass(frozen=True)
class FillRect:
    x: float
    y: float
    width: float
    height: float
    color: Color


Primitive = Union[TextRun, FillRect]


@dataclass
class RenderDocument:
    width: int
    height: int
    background: Color
    scale: int = CANVAS_SCALE
    primitives: List[Primitive] = field(default_factory=list)

    def text_runs(self) -> List[TextRun]:
        return [p for p in self.primitives if isinstance(p, TextRun)]

    def rects(self) -> List[FillRect]:
        return [p for p in self.primitives if isinstance(p, FillRect)]


def wrap_items(
    items: Sequence[DisplayItem],
    measure: Measure,
    font: FontSpec = ARABIC_FONT,
    max_width: float = CONTENT_WIDTH,
) -> List[List[DisplayItem]]:
    """
    Greedy line breaking in logical order. A line never exceeds max_width
    unless it holds a single item that is wider on its own.
    """
    space = measure(" ", font)
    lines: List[List[DisplayItem]] = []
    line: List[DisplayItem] = []
    line_width = 0.0
    for item in items:
        w = measure(item.raw_text, font)
        extra = space if line else 0.0
        if line and line_width + extra + w > max_width:
            lines.append(line)
            line, line_width = [item], w
        else:
            line.append(item)
            line_width += extra + w
    if line:
        lines.append(line)
    return lines


def group_mistakes(mistakes: Sequence[Mistake], verses: Sequence[Ayah]) -> List[Tuple[int, Dict[int, Mistake]]]:
    """
    Mistakes per verse, ascending by verse index, keyed by word index.
    Mistakes pointing outside the verse list or at a preamble are dropped.
    """
    grouped: Dict[int, Dict[int, Mistake]] = {}
    for m in mistakes:
        if not 0 <= m.verse_index < len(verses) or verses[m.verse_index].is_preamble:
            continue
        grouped.setdefault(m.verse_index, {}).setdefault(m.word_index, m)
    return sorted(grouped.items())


def session_details(verses: Sequence[Ayah], juz_mode: bool, start_number: int, labels: SummaryLabels) -> str:
    practice = [v for v in verses if not v.is_preamble]
    if not practice:
        return ""
    first, last = practice[0], practice[-1]
    if juz_mode:
        return (
            f"From {first.surah.english_name} {first.local_number} "
            f"to {last.surah.english_name} {last.local_number}"
        )
    return f"{labels.verse} {start_number} - {last.local_number}"


def format_percent(value: float) -> str:
    """66.67 -> '66.67', 95.5 -> '95.5', 100.0 -> '100'."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _verse_block_height(lines: List[List[DisplayItem]]) -> int:
    return VERSE_HEADER_HEIGHT + len(lines) * LINE_HEIGHT + VERSE_GAP


def layout_summary(
    stats: MemorizationStats,
    verses: Sequence[Ayah],
    theme: RenderTheme,
    measure: Optional[Measure] = None,
    title: str = "",
    juz_mode: bool = False,
    start_number: int = 1,
    labels: Optional[SummaryLabels] = None,
) -> RenderDocument:
    """Lay out the summary image for a finished session."""
    if measure is None:
        measure = PillowTextMeasurer()
    labels = labels or SummaryLabels()
    result = score_stats(stats)
    center = CANVAS_WIDTH / 2

    # Wrap once; the same lines size the canvas and get drawn
    review = []
    for verse_index, marks in group_mistakes(stats.mistakes, verses):
        items = tokenize(verses[verse_index].text)
        review.append((verses[verse_index], marks, wrap_items(items, measure)))

    height = BASE_HEIGHT
    if review:
        height += REVIEW_HEADER_HEIGHT + sum(_verse_block_height(lines) for _, _, lines in review)

    doc = RenderDocument(width=CANVAS_WIDTH, height=height, background=theme.background)
    out = doc.primitives

    def text(value: str, x: float, y: float, font: FontSpec, color: Color, align: str = "center") -> None:
        out.append(TextRun(value, x, y, font, color, align))

    y = 60
    text(labels.summary_title, center, y, FontSpec("ui", 28, True), theme.text)
    y += 40
    text(title, center, y, FontSpec("ui", 20, True), theme.text)
    y += 25
    text(session_details(verses, juz_mode, start_number, labels), center, y, FontSpec("ui", 16), theme.muted)

    y += 50
    text(labels.score, center, y, FontSpec("ui", 18), theme.muted)
    y += 80
    text(str(result.score), center, y, FontSpec("ui", 80, True), SCORE_COLOR)
    y += 30
    text(labels.rank.upper(), center, y, FontSpec("ui", 16, True), theme.muted)
    y += 50
    text(result.rank, center, y, FontSpec("ui", 50, True), rank_color(result.rank))
    y += 50
    accuracy_color = ACCURACY_GOOD_COLOR if stats.accuracy > 80 else ACCURACY_LOW_COLOR
    text(f"{format_percent(stats.accuracy)}% {labels.accuracy}", center, y, FontSpec("ui", 22, True), accuracy_color)

    y += 80
    col1, col2, col3 = COLUMN_X
    label_font = FontSpec("ui", 16)
    text(labels.total_words, col1, y, label_font, theme.muted)
    text(labels.forgot, col2, y, label_font, theme.muted)
    text(labels.tajwid, col3, y, label_font, theme.muted)
    y += 40
    value_font = FontSpec("ui", 36, True)
    text(str(stats.total_words), col1, y, value_font, theme.text)
    text(str(stats.forgot_count), col2, y, value_font, FORGOT_COUNT_COLOR)
    text(str(stats.tajwid_count), col3, y, value_font, TAJWID_COUNT_COLOR)
    y += 60

    if review:
        out.append(FillRect(PADDING, y, CANVAS_WIDTH - 2 * PADDING, 1, theme.separator))
        y += 40
        text(labels.review_title, center, y, FontSpec("ui", 20, True), theme.text)
        y += 40
        space = measure(" ", ARABIC_FONT)
        for verse, marks, lines in review:
            header = f"{verse.surah.english_name}, {labels.verse} {verse.local_number}"
            text(header, PADDING, y, FontSpec("ui", 16, True), theme.text, align="left")
            y += 30
            for line in lines:
                x = CANVAS_WIDTH - PADDING
                for item in line:
                    w = measure(item.raw_text, ARABIC_FONT)
                    mistake = marks.get(item.logic_index) if item.is_word else None
                    if mistake is not None:
                        fill = FORGOT_HIGHLIGHT if mistake.kind == MistakeKind.FORGOT else TAJWID_HIGHLIGHT
                        out.append(FillRect(x - w, y - HIGHLIGHT_TOP, w, HIGHLIGHT_HEIGHT, fill))
                    out.append(TextRun(item.raw_text, x, y, ARABIC_FONT, theme.text, "right", rtl=True))
                    x -= w + space
                y += LINE_HEIGHT
            y += VERSE_GAP

    text(labels.app_name, center, height - FOOTER_OFFSET, FontSpec("ui", 12), theme.footer)
    return doc
