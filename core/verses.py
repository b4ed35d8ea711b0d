"""
Verse collection helpers: load the local Quran dataset and assemble the verse
lists a practice session runs over.

Two dataset shapes are accepted:
- a list of records keyed by verse_key ("2:255"), with text_uthmani,
  translation_en, transliteration, ...
- a nested mapping {surah: {ayah: record}}.

Every chapter except 1 (Al-Fatiha, where it is verse 1) and 9 (At-Tawba, which
has none) is preceded by a Bismillah placeholder with local_number 0.
"""
import json
import logging
import os
from typing import Any, Dict, Iterable, List

from .models import Ayah, SurahRef

logger = logging.getLogger(__name__)

BISMILLAH_ARABIC = "بِسْمِ ٱللَّهِ ٱلرَّحْمَٰنِ ٱلرَّحِيمِ"
BISMILLAH_TRANSLATION = "In the name of Allah, the Entirely Merciful, the Especially Merciful."
BISMILLAH_TRANSLITERATION = "Bismillāhir-raḥmānir-raḥīm"
CHAPTERS_WITHOUT_PREAMBLE = (1, 9)


class VerseDataError(Exception):
    """Raised when the verse dataset is missing or cannot be parsed."""


def load_verse_records(path: str) -> List[Dict[str, Any]]:
    """Read the dataset at path into a flat list of records, each with a verse_key."""
    if not path or not os.path.isfile(path):
        raise VerseDataError(f"Quran data file not found: {path!r}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise VerseDataError(f"Could not read Quran data from {path}: {e}") from e

    if isinstance(data, list):
        records = [item for item in data if isinstance(item, dict)]
    elif isinstance(data, dict):
        records = []
        for surah_num, ayahs in data.items():
            if not isinstance(ayahs, dict):
                continue
            for ayah_num, item in ayahs.items():
                records.append({"verse_key": f"{surah_num}:{ayah_num}", **item})
    else:
        raise VerseDataError(f"Unsupported Quran data layout in {path}: {type(data).__name__}")
    logger.info("Loaded %d verse records from %s", len(records), path)
    return records


def ayahs_from_records(records: Iterable[Dict[str, Any]]) -> List[Ayah]:
    """Convert records to Ayah values ordered by (surah, verse). Malformed records are skipped."""
    ayahs: List[Ayah] = []
    for item in records:
        try:
            ayahs.append(Ayah.from_record(item))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping verse record %r: %s", item.get("verse_key"), e)
    ayahs.sort(key=lambda a: (a.surah.number, a.local_number))
    return ayahs


def bismillah_preamble(surah: SurahRef, juz_number: int = 0) -> Ayah:
    return Ayah(
        local_number=0,
        global_number=0,
        surah=surah,
        text=BISMILLAH_ARABIC,
        translation=BISMILLAH_TRANSLATION,
        transliteration=BISMILLAH_TRANSLITERATION,
        juz_number=juz_number,
    )


def _strip_bismillah(ayah: Ayah) -> Ayah:
    if not ayah.text.startswith(BISMILLAH_ARABIC):
        return ayah
    return Ayah(
        local_number=ayah.local_number,
        global_number=ayah.global_number,
        surah=ayah.surah,
        text=ayah.text[len(BISMILLAH_ARABIC):].strip(),
        translation=ayah.translation,
        transliteration=ayah.transliteration,
        audio_ref=ayah.audio_ref,
        juz_number=ayah.juz_number,
    )


def insert_preambles(ayahs: Iterable[Ayah]) -> List[Ayah]:
    """
    Put a Bismillah placeholder before verse 1 of each chapter that takes one,
    and strip a Bismillah prefix from that verse 1 text. Existing placeholders
    are kept as they are.
    """
    out: List[Ayah] = []
    for ayah in ayahs:
        if ayah.is_preamble:
            out.append(ayah)
            continue
        if ayah.local_number == 1 and ayah.surah.number not in CHAPTERS_WITHOUT_PREAMBLE:
            if not (out and out[-1].is_preamble and out[-1].surah.number == ayah.surah.number):
                out.append(bismillah_preamble(ayah.surah, ayah.juz_number))
            ayah = _strip_bismillah(ayah)
        out.append(ayah)
    return out


def select_chapter(ayahs: Iterable[Ayah], surah: int) -> List[Ayah]:
    """Verses of one chapter, preamble included. Empty list if the chapter is unknown."""
    chapter = [a for a in ayahs if a.surah.number == surah and not a.is_preamble]
    return insert_preambles(chapter)


def select_juz(ayahs: Iterable[Ayah], juz: int) -> List[Ayah]:
    """Verses of one part in reading order, with preambles for chapters starting inside it."""
    if not 1 <= juz <= 30:
        raise ValueError(f"Juz number must be between 1 and 30, got {juz}")
    part = [a for a in ayahs if a.juz_number == juz and not a.is_preamble]
    return insert_preambles(part)


def validate_start_number(chapter_ayahs: List[Ayah], start: int) -> int:
    """Check that start names a real verse of the chapter; returns it unchanged."""
    numbers = [a.local_number for a in chapter_ayahs if not a.is_preamble]
    if not numbers:
        raise ValueError("Chapter has no verses")
    if start < 1 or start > max(numbers):
        raise ValueError(f"Start verse must be between 1 and {max(numbers)}, got {start}")
    return start
