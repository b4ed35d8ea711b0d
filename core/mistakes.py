"""
Mistake log for a practice session.

Append-only and keyed by (verse_index, word_index): the first mark on a word
wins and later marks on the same word are ignored.
"""
from typing import Dict, Iterator, List, Optional, Tuple

from .models import Mistake, MistakeKind


class MistakeLog:
    def __init__(self):
        self._mistakes: List[Mistake] = []
        self._index: Dict[Tuple[int, int], Mistake] = {}

    def add(self, verse_index: int, word_index: int, kind: MistakeKind) -> bool:
        """Record a mistake. Returns False (no-op) if the word is already marked."""
        key = (verse_index, word_index)
        if key in self._index:
            return False
        mistake = Mistake(verse_index, word_index, MistakeKind(kind))
        self._mistakes.append(mistake)
        self._index[key] = mistake
        return True

    def get(self, verse_index: int, word_index: int) -> Optional[Mistake]:
        return self._index.get((verse_index, word_index))

    def has(self, verse_index: int, word_index: int) -> bool:
        return (verse_index, word_index) in self._index

    def count(self, kind: MistakeKind) -> int:
        return sum(1 for m in self._mistakes if m.kind == kind)

    @property
    def forgot_count(self) -> int:
        return self.count(MistakeKind.FORGOT)

    @property
    def tajwid_count(self) -> int:
        return self.count(MistakeKind.TAJWID)

    def for_verse(self, verse_index: int) -> List[Mistake]:
        return [m for m in self._mistakes if m.verse_index == verse_index]

    def snapshot(self) -> Tuple[Mistake, ...]:
        return tuple(self._mistakes)

    def clear(self) -> None:
        self._mistakes.clear()
        self._index.clear()

    def __len__(self) -> int:
        return len(self._mistakes)

    def __iter__(self) -> Iterator[Mistake]:
        return iter(list(self._mistakes))
