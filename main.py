"""
Quran memorization practice API.

Stateless: practice sessions run on the client; the server hands out verse
data with display items, scores finished sessions and renders the summary
image. Verse indices in submitted stats refer to the verse list returned by
GET /chapters/{surah} or GET /juz/{juz} (preamble placeholders included).
"""
import logging
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel, Field

import config
from core.models import Ayah, MemorizationStats, Mistake, MistakeKind
from core.scoring import score_session, score_stats
from core.tokenizer import logic_words, tokenize, verse_end_marker
from core.verses import (
    VerseDataError,
    ayahs_from_records,
    load_verse_records,
    select_chapter,
    select_juz,
    validate_start_number,
)
from render import (
    PillowTextMeasurer,
    RenderError,
    RenderTheme,
    SummaryLabels,
    layout_summary,
    rasterize,
    save_summary,
    summary_filename,
)

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Quran Memorization Practice API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _load_verses():
    """Load Quran: config path or quran_with_audio.json / quran.json in cwd."""
    ayahs = ayahs_from_records(load_verse_records(config.get_quran_path()))
    return ayahs, {a.verse_key: a for a in ayahs}


try:
    quran_dataset, quran_map = _load_verses()
except VerseDataError as e:
    logger.warning("%s. Add quran.json or quran_with_audio.json or set QURAN_DATA_PATH", e)
    quran_dataset = []
    quran_map = {}


class ScoreRequest(BaseModel):
    total_words: int = Field(ge=0)
    forgot_count: int = Field(default=0, ge=0)
    tajwid_count: int = Field(default=0, ge=0)


class MistakeModel(BaseModel):
    verse_index: int
    word_index: int
    type: MistakeKind


class StatsModel(BaseModel):
    total_words: int = Field(ge=0)
    forgot_count: int = Field(default=0, ge=0)
    tajwid_count: int = Field(default=0, ge=0)
    accuracy: float = Field(ge=0, le=100)
    mistakes: List[MistakeModel] = Field(default_factory=list)

    def to_stats(self) -> MemorizationStats:
        return MemorizationStats(
            total_words=self.total_words,
            forgot_count=self.forgot_count,
            tajwid_count=self.tajwid_count,
            accuracy=self.accuracy,
            mistakes=tuple(Mistake(m.verse_index, m.word_index, m.type) for m in self.mistakes),
        )


class SummaryRequest(BaseModel):
    stats: StatsModel
    surah: Optional[int] = None
    juz: Optional[int] = None
    start: int = Field(default=1, ge=1)
    theme: str = Field(default="light")
    save: bool = False


def _verse_payload(ayah: Ayah) -> dict:
    return {
        **ayah.to_dict(),
        "items": [item.to_dict() for item in tokenize(ayah.text)],
        "words": logic_words(ayah.text),
        "verse_end": verse_end_marker(ayah.local_number),
    }


def _chapter_or_404(surah: int) -> List[Ayah]:
    verses = select_chapter(quran_dataset, surah)
    if not verses:
        raise HTTPException(status_code=404, detail=f"Surah {surah} not found")
    return verses


def _juz_or_404(juz: int) -> List[Ayah]:
    try:
        verses = select_juz(quran_dataset, juz)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not verses:
        raise HTTPException(status_code=404, detail=f"Juz {juz} not found")
    return verses


@app.get("/")
def health_check():
    return {
        "status": "ok",
        "message": "Quran memorization practice API is running",
        "verses_loaded": len(quran_dataset),
    }


@app.get("/verses/{surah}/{ayah}", response_model=None)
def get_verse(surah: int, ayah: int):
    verse_key = f"{surah}:{ayah}"
    verse = quran_map.get(verse_key)
    if not verse:
        raise HTTPException(status_code=404, detail=f"Ayah {verse_key} not found")
    return _verse_payload(verse)


@app.get("/chapters/{surah}", response_model=None)
def get_chapter(surah: int):
    verses = _chapter_or_404(surah)
    return {"surah": surah, "verses": [_verse_payload(v) for v in verses]}


@app.get("/juz/{juz}", response_model=None)
def get_juz(juz: int):
    verses = _juz_or_404(juz)
    return {"juz": juz, "verses": [_verse_payload(v) for v in verses]}


@app.post("/score")
def score(req: ScoreRequest):
    return score_session(req.total_words, req.forgot_count, req.tajwid_count).to_dict()


@app.post("/summary")
def summary(req: SummaryRequest):
    """Render the session summary as a JPEG download."""
    if (req.surah is None) == (req.juz is None):
        raise HTTPException(status_code=400, detail="Give exactly one of surah or juz")
    if req.juz is not None:
        verses = _juz_or_404(req.juz)
        title = f"Juz {req.juz}"
    else:
        verses = _chapter_or_404(req.surah)
        try:
            validate_start_number(verses, req.start)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        title = next(v.surah.english_name for v in verses if not v.is_preamble)

    stats = req.stats.to_stats()
    fonts = config.get_font_set()
    document = layout_summary(
        stats,
        verses,
        RenderTheme.named(req.theme),
        measure=PillowTextMeasurer(fonts),
        title=title,
        juz_mode=req.juz is not None,
        start_number=req.start,
        labels=SummaryLabels(app_name=config.APP_NAME),
    )
    document.scale = config.SUMMARY_SCALE
    try:
        if req.save:
            path = save_summary(document, config.SUMMARY_OUTPUT_DIR, fonts, quality=config.SUMMARY_JPEG_QUALITY)
            data, filename = path.read_bytes(), path.name
        else:
            data = rasterize(document, fonts, quality=config.SUMMARY_JPEG_QUALITY)
            filename = summary_filename()
    except RenderError as e:
        logger.error("Summary rendering failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    result = score_stats(stats)
    logger.info("Rendered summary %s: score %d, rank %s", filename, result.score, result.rank)
    return Response(
        content=data,
        media_type="image/jpeg",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


if __name__ == "__main__":
    uvicorn.run(app, host=config.HOST, port=config.PORT)
