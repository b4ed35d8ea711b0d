"""
Verse tokenizer: split raw Uthmani text into logical words and pause marks.

Pause (waqf) marks and small Quranic annotation signs are cut out as their own
display items so they never receive a word index. Every word gets a dense
logic_index in source order; that index is what mistakes are attached to, so
the practice view, the summary image and any later analysis must all come
through tokenize() to agree on word attribution.
"""
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional

# Quranic pause marks, small annotation signs and lam-alif presentation forms
PAUSE_MARK_CLASS = r"\u0610-\u061A\u06D6-\u06DC\u06DE-\u06E8\uFEF5-\uFEFC"
_PAUSE_MARK_RE = re.compile(f"[{PAUSE_MARK_CLASS}]")
# One mark character, or a run of anything that is neither whitespace nor a mark.
# Equivalent to padding every mark with spaces and splitting on whitespace.
_FRAGMENT_RE = re.compile(f"[{PAUSE_MARK_CLASS}]|[^\\s{PAUSE_MARK_CLASS}]+")

VERSE_END_ORNAMENT = "\u06DD"
_ARABIC_INDIC_DIGITS = "\u0660\u0661\u0662\u0663\u0664\u0665\u0666\u0667\u0668\u0669"


class ItemKind(str, Enum):
    WORD = "word"
    PAUSE_MARK = "pause_mark"


@dataclass(frozen=True)
class DisplayItem:
    """One fragment of a verse as shown on screen."""
    kind: ItemKind
    raw_text: str
    logic_index: Optional[int]  # None for pause marks
    group_index: int  # words: own index; pause marks: preceding word (-1 if none)
    separator: str = ""  # source text between the previous item and this one
    trailing: str = ""  # source text after the last item; empty elsewhere

    @property
    def separated(self) -> bool:
        return bool(self.separator)

    @property
    def is_word(self) -> bool:
        return self.kind == ItemKind.WORD

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "text": self.raw_text,
            "logic_index": self.logic_index,
            "group_index": self.group_index,
        }


def clean_arabic_text(text: Optional[str]) -> str:
    """Remove pause marks, annotation signs and lam-alif ligature forms."""
    if not text:
        return ""
    return _PAUSE_MARK_RE.sub("", text)


def tokenize(verse_text: Optional[str]) -> List[DisplayItem]:
    """
    Split verse text into display items.

    A fragment is a pause mark when nothing but whitespace is left after the
    mark characters are stripped; anything else is a word and takes the next
    logic_index. Never raises; empty or None text yields [].
    """
    if not verse_text:
        return []

    items: List[DisplayItem] = []
    logic_index = -1
    prev_end = 0
    for match in _FRAGMENT_RE.finditer(verse_text):
        fragment = match.group(0)
        separator = verse_text[prev_end:match.start()]
        prev_end = match.end()
        if clean_arabic_text(fragment).strip():
            logic_index += 1
            items.append(DisplayItem(ItemKind.WORD, fragment, logic_index, logic_index, separator))
        else:
            items.append(DisplayItem(ItemKind.PAUSE_MARK, fragment, None, logic_index, separator))
    if items and prev_end < len(verse_text):
        items[-1] = replace(items[-1], trailing=verse_text[prev_end:])
    return items


def detokenize(items: List[DisplayItem], collapse: bool = False) -> str:
    """
    Rebuild verse text from items. The default is the exact source text;
    collapse=True trims the ends and turns every separator into one space.
    """
    if not collapse:
        return "".join(item.separator + item.raw_text + item.trailing for item in items)
    parts: List[str] = []
    for i, item in enumerate(items):
        if i > 0 and item.separated:
            parts.append(" ")
        parts.append(item.raw_text)
    return "".join(parts)


def logic_words(verse_text: Optional[str]) -> List[str]:
    """Cleaned text of each word, indexed by logic_index."""
    return [clean_arabic_text(item.raw_text) for item in tokenize(verse_text) if item.is_word]


def word_count(verse_text: Optional[str]) -> int:
    return sum(1 for item in tokenize(verse_text) if item.is_word)


def to_arabic_numeral(n: int) -> str:
    return "".join(_ARABIC_INDIC_DIGITS[int(d)] for d in str(n))


def verse_end_marker(number: int) -> str:
    """End-of-verse ornament with Arabic-Indic digits; empty for the preamble."""
    if number <= 0:
        return ""
    return f"{VERSE_END_ORNAMENT}{to_arabic_numeral(number)}"
