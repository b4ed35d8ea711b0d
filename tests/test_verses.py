"""
Unit tests for verse data loading and assembly: dataset formats, Bismillah
preambles, chapter and juz selection, start verse validation.
Run: python -m pytest tests/test_verses.py -v
"""
import json
import os
import tempfile
import unittest

from core.models import Ayah, MemorizationStats, Mistake, MistakeKind
from core.verses import (
    BISMILLAH_ARABIC,
    VerseDataError,
    ayahs_from_records,
    insert_preambles,
    load_verse_records,
    select_chapter,
    select_juz,
    validate_start_number,
)

RECORDS = [
    {
        "verse_key": "1:1",
        "text_uthmani": "بِسْمِ ٱللَّهِ ٱلرَّحْمَٰنِ ٱلرَّحِيمِ",
        "translation_en": "In the name of Allah, the Entirely Merciful, the Especially Merciful.",
        "juz": 1,
        "surah": {"number": 1, "name": "الفاتحة", "english_name": "Al-Faatiha"},
    },
    {
        "verse_key": "2:2",
        "text_uthmani": "ذَلِكَ الْكِتَابُ لَا رَيْبَ ۛ فِيهِ ۛ هُدًى لِلْمُتَّقِينَ",
        "juz": 1,
        "surah": {"number": 2, "name": "البقرة", "english_name": "Al-Baqara"},
    },
    {
        "verse_key": "2:1",
        "text_uthmani": BISMILLAH_ARABIC + " الم",
        "transliteration": "Alif-lam-meem",
        "juz": 1,
        "surah": {"number": 2, "name": "البقرة", "english_name": "Al-Baqara"},
    },
    {
        "verse_key": "9:1",
        "text_uthmani": "بَرَاءَةٌ مِنَ اللَّهِ وَرَسُولِهِ",
        "juz": 10,
        "surah": {"number": 9, "name": "التوبة", "english_name": "At-Tawba"},
    },
]


class TestLoading(unittest.TestCase):
    def _write(self, tmp, data):
        path = os.path.join(tmp, "quran.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
        return path

    def test_list_format(self):
        with tempfile.TemporaryDirectory() as tmp:
            records = load_verse_records(self._write(tmp, RECORDS))
        self.assertEqual(len(records), 4)

    def test_nested_format(self):
        nested = {"2": {"1": {"text_uthmani": "الم"}, "2": {"text_uthmani": "ذَلِكَ الْكِتَابُ"}}}
        with tempfile.TemporaryDirectory() as tmp:
            records = load_verse_records(self._write(tmp, nested))
        self.assertEqual([r["verse_key"] for r in records], ["2:1", "2:2"])
        ayahs = ayahs_from_records(records)
        self.assertEqual(ayahs[1].text, "ذَلِكَ الْكِتَابُ")

    def test_missing_file(self):
        with self.assertRaises(VerseDataError):
            load_verse_records("/nonexistent/quran.json")
        with self.assertRaises(VerseDataError):
            load_verse_records("")

    def test_invalid_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "quran.json")
            with open(path, "w", encoding="utf-8") as f:
                f.write("{not json")
            with self.assertRaises(VerseDataError):
                load_verse_records(path)


class TestRecords(unittest.TestCase):
    def test_sorted_and_parsed(self):
        ayahs = ayahs_from_records(RECORDS)
        self.assertEqual([a.verse_key for a in ayahs], ["1:1", "2:1", "2:2", "9:1"])
        self.assertEqual(ayahs[1].surah.english_name, "Al-Baqara")
        self.assertEqual(ayahs[1].transliteration, "Alif-lam-meem")
        self.assertEqual(ayahs[0].juz_number, 1)

    def test_malformed_record_skipped(self):
        ayahs = ayahs_from_records([{"text_uthmani": "الم"}, RECORDS[0]])
        self.assertEqual(len(ayahs), 1)

    def test_record_with_explicit_fields(self):
        ayah = Ayah.from_record({"surah": 2, "number": 255, "text": "اللَّهُ لَا إِلَهَ إِلَّا هُوَ", "number_in_quran": 262})
        self.assertEqual(ayah.verse_key, "2:255")
        self.assertEqual(ayah.global_number, 262)
        self.assertFalse(ayah.is_preamble)


class TestPreambles(unittest.TestCase):
    def setUp(self):
        self.ayahs = ayahs_from_records(RECORDS)

    def test_preamble_before_chapter_two_only(self):
        out = insert_preambles(self.ayahs)
        self.assertEqual([a.verse_key for a in out], ["1:1", "2:0", "2:1", "2:2", "9:1"])
        preamble = out[1]
        self.assertTrue(preamble.is_preamble)
        self.assertEqual(preamble.text, BISMILLAH_ARABIC)
        self.assertEqual(preamble.surah.english_name, "Al-Baqara")

    def test_bismillah_prefix_stripped_from_verse_one(self):
        out = insert_preambles(self.ayahs)
        self.assertEqual(out[2].text, "الم")
        self.assertEqual(out[2].transliteration, "Alif-lam-meem")
        # Al-Fatiha keeps its own first verse
        self.assertEqual(out[0].text, RECORDS[0]["text_uthmani"])

    def test_idempotent(self):
        once = insert_preambles(self.ayahs)
        self.assertEqual(insert_preambles(once), once)


class TestSelection(unittest.TestCase):
    def setUp(self):
        self.ayahs = ayahs_from_records(RECORDS)

    def test_select_chapter(self):
        chapter = select_chapter(self.ayahs, 2)
        self.assertEqual([a.local_number for a in chapter], [0, 1, 2])
        self.assertEqual(select_chapter(self.ayahs, 9)[0].local_number, 1)
        self.assertEqual(select_chapter(self.ayahs, 114), [])

    def test_select_juz(self):
        part = select_juz(self.ayahs, 1)
        self.assertEqual([a.verse_key for a in part], ["1:1", "2:0", "2:1", "2:2"])
        self.assertEqual(select_juz(self.ayahs, 30), [])
        with self.assertRaises(ValueError):
            select_juz(self.ayahs, 31)

    def test_validate_start_number(self):
        chapter = select_chapter(self.ayahs, 2)
        self.assertEqual(validate_start_number(chapter, 2), 2)
        with self.assertRaises(ValueError):
            validate_start_number(chapter, 0)
        with self.assertRaises(ValueError):
            validate_start_number(chapter, 3)
        with self.assertRaises(ValueError):
            validate_start_number([], 1)


class TestStatsRecord(unittest.TestCase):
    def test_dict_round_trip(self):
        stats = MemorizationStats(5, 1, 1, 70.0, (Mistake(1, 0, MistakeKind.TAJWID),))
        data = stats.to_dict()
        self.assertEqual(data["mistakes"], [{"verse_index": 1, "word_index": 0, "type": "tajwid"}])
        self.assertEqual(MemorizationStats.from_dict(data), stats)


if __name__ == "__main__":
    unittest.main()
