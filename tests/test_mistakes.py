"""
Unit tests for the mistake log: first mark wins, counts per kind.
"""
import unittest
from core.mistakes import MistakeLog
from core.models import Mistake, MistakeKind


class TestMistakeLog(unittest.TestCase):
    def test_add_and_count(self):
        log = MistakeLog()
        self.assertTrue(log.add(0, 1, MistakeKind.FORGOT))
        self.assertTrue(log.add(0, 2, MistakeKind.TAJWID))
        self.assertTrue(log.add(1, 0, "tajwid"))
        self.assertEqual(len(log), 3)
        self.assertEqual(log.forgot_count, 1)
        self.assertEqual(log.tajwid_count, 2)

    def test_first_mark_wins(self):
        log = MistakeLog()
        log.add(2, 3, MistakeKind.FORGOT)
        self.assertFalse(log.add(2, 3, MistakeKind.TAJWID))
        self.assertFalse(log.add(2, 3, MistakeKind.FORGOT))
        self.assertEqual(len(log), 1)
        self.assertEqual(log.get(2, 3).kind, MistakeKind.FORGOT)
        self.assertEqual(log.tajwid_count, 0)

    def test_lookup_and_snapshot(self):
        log = MistakeLog()
        log.add(1, 0, MistakeKind.TAJWID)
        log.add(0, 4, MistakeKind.FORGOT)
        self.assertTrue(log.has(1, 0))
        self.assertIsNone(log.get(1, 1))
        self.assertEqual(log.for_verse(0), [Mistake(0, 4, MistakeKind.FORGOT)])
        # insertion order is kept
        self.assertEqual([m.verse_index for m in log.snapshot()], [1, 0])

    def test_clear(self):
        log = MistakeLog()
        log.add(0, 0, MistakeKind.FORGOT)
        log.clear()
        self.assertEqual(len(log), 0)
        self.assertFalse(log.has(0, 0))
        self.assertTrue(log.add(0, 0, MistakeKind.TAJWID))


if __name__ == "__main__":
    unittest.main()
