"""
Value types shared by the session engine, scoring and the summary renderer.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class MistakeKind(str, Enum):
    """Forgetting a word outright weighs more than a tajwid slip."""
    FORGOT = "forgot"
    TAJWID = "tajwid"


@dataclass(frozen=True)
class SurahRef:
    number: int
    native_name: str = ""
    english_name: str = ""


@dataclass(frozen=True)
class Ayah:
    """
    A single verse as supplied by the verse-data collaborator.

    local_number is the position within the chapter; 0 marks the Bismillah
    preamble placeholder inserted before verse 1.
    """
    local_number: int
    global_number: int
    surah: SurahRef
    text: str
    translation: str = ""
    transliteration: str = ""
    audio_ref: str = ""
    juz_number: int = 0

    @property
    def is_preamble(self) -> bool:
        return self.local_number == 0

    @property
    def verse_key(self) -> str:
        return f"{self.surah.number}:{self.local_number}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "verse_key": self.verse_key,
            "number": self.local_number,
            "number_in_quran": self.global_number,
            "surah": {
                "number": self.surah.number,
                "name": self.surah.native_name,
                "english_name": self.surah.english_name,
            },
            "text": self.text,
            "translation": self.translation,
            "transliteration": self.transliteration,
            "audio": self.audio_ref,
            "juz": self.juz_number,
        }

    @classmethod
    def from_record(cls, item: Dict[str, Any]) -> "Ayah":
        """
        Build from a dataset record.

        Accepts verse_key-style records (text_uthmani, translation_en, ...) as
        well as records carrying explicit surah/number fields.
        """
        surah_number, local_number = _parse_verse_key(item)
        surah_info = item.get("surah") if isinstance(item.get("surah"), dict) else {}
        surah = SurahRef(
            number=surah_number,
            native_name=surah_info.get("name") or item.get("surah_name") or "",
            english_name=(
                surah_info.get("english_name")
                or surah_info.get("englishName")
                or item.get("surah_name_en")
                or item.get("surah_english_name")
                or ""
            ),
        )
        return cls(
            local_number=local_number,
            global_number=int(item.get("number_in_quran") or item.get("numberInQuran") or item.get("id") or 0),
            surah=surah,
            text=item.get("text_uthmani") or item.get("text") or "",
            translation=item.get("translation_en") or item.get("translation") or "",
            transliteration=item.get("transliteration") or "",
            audio_ref=item.get("audio") or item.get("audio_url") or "",
            juz_number=int(item.get("juz") or item.get("juz_number") or 0),
        )


def _parse_verse_key(item: Dict[str, Any]) -> Tuple[int, int]:
    key = item.get("verse_key")
    if key and ":" in str(key):
        surah, ayah = str(key).split(":", 1)
        return int(surah), int(ayah)
    surah = item.get("surah")
    if isinstance(surah, dict):
        surah = surah.get("number")
    number = item.get("number", item.get("numberInSurah", item.get("ayah")))
    if surah is None or number is None:
        raise ValueError(f"Record has no verse_key or surah/number fields: {sorted(item)}")
    return int(surah), int(number)


@dataclass(frozen=True)
class Mistake:
    """A mark on one word: verse_index into the session's verse list, word_index = logic_index."""
    verse_index: int
    word_index: int
    kind: MistakeKind

    def to_dict(self) -> Dict[str, Any]:
        return {"verse_index": self.verse_index, "word_index": self.word_index, "type": self.kind.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Mistake":
        return cls(
            verse_index=int(data["verse_index"]),
            word_index=int(data["word_index"]),
            kind=MistakeKind(data.get("type") or data.get("kind")),
        )


@dataclass(frozen=True)
class MemorizationStats:
    """Snapshot handed to scoring and the summary renderer when a session ends."""
    total_words: int
    forgot_count: int
    tajwid_count: int
    accuracy: float
    mistakes: Tuple[Mistake, ...] = field(default_factory=tuple)

    def mistake_at(self, verse_index: int, word_index: int) -> Optional[Mistake]:
        for m in self.mistakes:
            if m.verse_index == verse_index and m.word_index == word_index:
                return m
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_words": self.total_words,
            "forgot_count": self.forgot_count,
            "tajwid_count": self.tajwid_count,
            "accuracy": self.accuracy,
            "mistakes": [m.to_dict() for m in self.mistakes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MemorizationStats":
        return cls(
            total_words=int(data.get("total_words", 0)),
            forgot_count=int(data.get("forgot_count", 0)),
            tajwid_count=int(data.get("tajwid_count", 0)),
            accuracy=float(data.get("accuracy", 0.0)),
            mistakes=tuple(Mistake.from_dict(m) for m in data.get("mistakes") or []),
        )
