"""
Unit tests for summary rasterization and export: JPEG output, pixel size, file naming.
Uses Pillow's bundled font; no font files required.
"""
import os
import tempfile
import unittest
from datetime import datetime, timezone
from io import BytesIO

from PIL import Image

from core.models import Ayah, MemorizationStats, Mistake, MistakeKind, SurahRef
from render.fonts import FontSet, PillowTextMeasurer, shape_rtl
from render.layout import RenderDocument, layout_summary
from render.raster import RenderError, rasterize, save_summary, summary_filename
from render.theme import ARABIC_FONT, FontSpec, RenderTheme

AL_FATIHA = SurahRef(1, "الفاتحة", "Al-Faatiha")


def _document(theme=None):
    verses = [
        Ayah(1, 1, AL_FATIHA, "بِسْمِ اللَّهِ الرَّحْمَنِ الرَّحِيمِ"),
        Ayah(2, 2, AL_FATIHA, "الْحَمْدُ لِلَّهِ رَبِّ الْعَالَمِينَ"),
    ]
    stats = MemorizationStats(
        total_words=8,
        forgot_count=1,
        tajwid_count=1,
        accuracy=81.25,
        mistakes=(Mistake(0, 2, MistakeKind.FORGOT), Mistake(1, 3, MistakeKind.TAJWID)),
    )
    return layout_summary(stats, verses, theme or RenderTheme.light(), measure=PillowTextMeasurer(), title="Al-Faatiha")


class TestRasterize(unittest.TestCase):
    def test_jpeg_at_scale(self):
        doc = _document()
        data = rasterize(doc)
        self.assertTrue(data.startswith(b"\xff\xd8"))
        img = Image.open(BytesIO(data))
        self.assertEqual(img.format, "JPEG")
        self.assertEqual(img.size, (doc.width * 2, doc.height * 2))

    def test_scale_one(self):
        doc = _document(RenderTheme.dark_theme())
        doc.scale = 1
        img = Image.open(BytesIO(rasterize(doc)))
        self.assertEqual(img.size, (500, doc.height))
        # background corner stays the theme colour (JPEG tolerance)
        r, g, b = img.convert("RGB").getpixel((2, 2))
        self.assertTrue(all(abs(c - 42) < 6 for c in (r, g, b)))

    def test_invalid_canvas_raises_render_error(self):
        doc = RenderDocument(width=-10, height=20, background=(255, 255, 255, 255))
        with self.assertRaises(RenderError):
            rasterize(doc)

    def test_missing_font_file_falls_back(self):
        fonts = FontSet(arabic_path="/nonexistent/Amiri.ttf", ui_path="/nonexistent/Inter.ttf")
        data = rasterize(_document(), fonts)
        self.assertTrue(data.startswith(b"\xff\xd8"))


class TestExport(unittest.TestCase):
    def test_summary_filename(self):
        now = datetime(2024, 5, 1, 12, 30, 45, 123456)
        self.assertEqual(summary_filename(now), "quran-summary-2024-05-01T12-30-45.jpg")
        aware = datetime(2024, 5, 1, 12, 30, 45, tzinfo=timezone.utc)
        self.assertEqual(summary_filename(aware), "quran-summary-2024-05-01T12-30-45.jpg")

    def test_save_summary(self):
        with tempfile.TemporaryDirectory() as tmp:
            out_dir = os.path.join(tmp, "summaries")
            path = save_summary(_document(), out_dir, now=datetime(2024, 1, 2, 3, 4, 5))
            self.assertEqual(path.name, "quran-summary-2024-01-02T03-04-05.jpg")
            self.assertTrue(path.exists())
            self.assertEqual(Image.open(path).format, "JPEG")

    def test_failed_render_writes_nothing(self):
        with tempfile.TemporaryDirectory() as tmp:
            doc = RenderDocument(width=-1, height=1, background=(0, 0, 0, 255))
            with self.assertRaises(RenderError):
                save_summary(doc, tmp)
            self.assertEqual(os.listdir(tmp), [])


class TestShaping(unittest.TestCase):
    def test_latin_unchanged(self):
        self.assertEqual(shape_rtl("Score"), "Score")
        self.assertEqual(shape_rtl(""), "")

    def test_arabic_reordered(self):
        shaped = shape_rtl("بسم")
        self.assertEqual(len(shaped), 3)
        self.assertNotEqual(shaped, "بسم")

    def test_font_paths(self):
        fonts = FontSet(arabic_path="amiri.ttf", ui_path="inter.ttf", ui_bold_path="inter-bold.ttf")
        self.assertEqual(fonts.path_for(ARABIC_FONT), "amiri.ttf")
        self.assertEqual(fonts.path_for(FontSpec("ui", 16)), "inter.ttf")
        self.assertEqual(fonts.path_for(FontSpec("ui", 16, True)), "inter-bold.ttf")
        self.assertEqual(FontSet(ui_path="inter.ttf").path_for(FontSpec("ui", 20, True)), "inter.ttf")

    def test_measurer(self):
        measure = PillowTextMeasurer()
        self.assertEqual(measure("", FontSpec("ui", 16)), 0.0)
        narrow = measure("Score", FontSpec("ui", 16))
        wide = measure("Score", FontSpec("ui", 32))
        self.assertGreater(narrow, 0)
        self.assertGreater(wide, narrow)


if __name__ == "__main__":
    unittest.main()
