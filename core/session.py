"""
Memorization session: word-by-word reveal over a list of verses.

The session owns the current position, the furthest position ever reached and
the mistake log. Only steps that move past the furthest position count as new
words, so reviewing backwards and re-advancing never inflates the total.

States:
- NOT_STARTED / SHOWING_PREAMBLE: before start(); SHOWING_PREAMBLE when the
  list opens with a Bismillah placeholder.
- ACTIVE: navigation and mistake marking.
- ENDED: a stats snapshot is available; navigation is ignored until reset().

Preamble placeholders (local_number == 0) have no practice words: advancing
from one steps straight to the next verse, and landing on one is not counted.

Listeners registered with subscribe() are called synchronously as
listener(event, session) after each state change. VERSE_CHANGED is the cue for
the audio collaborator to stop playback of the previous verse.
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from .mistakes import MistakeLog
from .models import Ayah, MemorizationStats, Mistake, MistakeKind
from .scoring import calculate_accuracy
from .tokenizer import DisplayItem, tokenize, verse_end_marker

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    SHOWING_PREAMBLE = "showing_preamble"
    ACTIVE = "active"
    ENDED = "ended"


class SessionEvent(str, Enum):
    STARTED = "started"
    POSITION_CHANGED = "position_changed"
    VERSE_CHANGED = "verse_changed"
    MISTAKE_MARKED = "mistake_marked"
    ENDED = "ended"
    RESET = "reset"


SessionListener = Callable[[SessionEvent, "MemorizationSession"], None]


@dataclass
class SessionProgress:
    current_verse_index: int = 0
    current_word_index: int = 0
    furthest_verse_index: int = 0
    furthest_word_index: int = 0
    session_start_verse_index: int = 0
    total_words_counted: int = 0

    @property
    def current(self) -> Tuple[int, int]:
        return (self.current_verse_index, self.current_word_index)

    @property
    def furthest(self) -> Tuple[int, int]:
        return (self.furthest_verse_index, self.furthest_word_index)


@dataclass(frozen=True)
class VisibleItem:
    item: DisplayItem
    visible: bool
    mistake: Optional[Mistake] = None


class MemorizationSession:
    """
    Practice session over a chapter (start_number selects the entry verse) or
    a whole part (juz_mode=True, always entered at the top of the list).
    """

    def __init__(
        self,
        verses: Sequence[Ayah],
        start_number: int = 1,
        juz_mode: bool = False,
        juz_number: Optional[int] = None,
    ):
        self.verses: List[Ayah] = list(verses)
        self.start_number = start_number
        self.juz_mode = juz_mode
        self.juz_number = juz_number
        self._items: List[List[DisplayItem]] = [tokenize(v.text) for v in self.verses]
        self._listeners: List[SessionListener] = []
        self.mistakes = MistakeLog()
        self.progress = SessionProgress()
        self.state = SessionState.NOT_STARTED
        self._stats: Optional[MemorizationStats] = None
        self._initialize()

    # ----- lifecycle -----

    def _initialize(self) -> None:
        initial = self._initial_index()
        self.progress = SessionProgress(
            current_verse_index=initial,
            furthest_verse_index=initial,
            session_start_verse_index=initial,
        )
        self.mistakes.clear()
        self._stats = None
        if self.verses and self.verses[0].is_preamble and initial == 0:
            self.state = SessionState.SHOWING_PREAMBLE
        else:
            self.state = SessionState.NOT_STARTED

    def _initial_index(self) -> int:
        """Index shown before start(): the preamble if the list opens with one."""
        if not self.verses or self.juz_mode or self.verses[0].is_preamble:
            return 0
        return self._find_local_number(self.start_number, default=0)

    def _entry_index(self) -> int:
        first_real = next((i for i, v in enumerate(self.verses) if not v.is_preamble), 0)
        if self.juz_mode:
            return first_real
        return self._find_local_number(self.start_number, default=first_real)

    def _find_local_number(self, number: int, default: int) -> int:
        for i, verse in enumerate(self.verses):
            if verse.local_number == number:
                return i
        return default

    def start(self) -> None:
        if self.state not in (SessionState.NOT_STARTED, SessionState.SHOWING_PREAMBLE):
            return
        if not self.verses:
            logger.warning("Cannot start a memorization session without verses")
            return
        entry = self._entry_index()
        previous_verse = self.progress.current_verse_index
        self.mistakes.clear()
        self.progress = SessionProgress(
            current_verse_index=entry,
            current_word_index=0,
            furthest_verse_index=entry,
            furthest_word_index=0,
            session_start_verse_index=entry,
            total_words_counted=1,
        )
        self._stats = None
        self.state = SessionState.ACTIVE
        logger.debug("Session started at verse index %d (%s)", entry, self.verses[entry].verse_key)
        self._notify(SessionEvent.STARTED)
        if entry != previous_verse:
            self._notify(SessionEvent.VERSE_CHANGED)
        self._notify(SessionEvent.POSITION_CHANGED)

    def end(self) -> Optional[MemorizationStats]:
        """Conclude the session. Returns None (no-op) if nothing was revealed."""
        if self.state == SessionState.ENDED:
            return self._stats
        if self.state != SessionState.ACTIVE:
            return None
        total = self.progress.total_words_counted
        if total == 0:
            return None
        forgot = self.mistakes.forgot_count
        tajwid = self.mistakes.tajwid_count
        self._stats = MemorizationStats(
            total_words=total,
            forgot_count=forgot,
            tajwid_count=tajwid,
            accuracy=calculate_accuracy(total, forgot, tajwid),
            mistakes=self.mistakes.snapshot(),
        )
        self.state = SessionState.ENDED
        logger.info(
            "Session ended: %d words, %d forgot, %d tajwid, accuracy %.2f%%",
            total, forgot, tajwid, self._stats.accuracy,
        )
        self._notify(SessionEvent.ENDED)
        return self._stats

    def reset(self) -> None:
        """Discard all progress and return to the pre-start state."""
        previous_verse = self.progress.current_verse_index
        self._initialize()
        logger.debug("Session reset to %s", self.state.value)
        self._notify(SessionEvent.RESET)
        if self.progress.current_verse_index != previous_verse:
            self._notify(SessionEvent.VERSE_CHANGED)

    # ----- navigation -----

    def advance_word(self) -> None:
        if self.state != SessionState.ACTIVE:
            return
        p = self.progress
        words = self.practice_word_count(p.current_verse_index)
        if p.current_word_index < words - 1:
            self._move_to(p.current_verse_index, p.current_word_index + 1)
            return

        next_verse = p.current_verse_index + 1
        if next_verse >= len(self.verses):
            self.end()
            return
        self._move_to(next_verse, 0)

    def retreat_word(self) -> None:
        if self.state != SessionState.ACTIVE or self.is_at_session_start:
            return
        p = self.progress
        if p.current_word_index > 0:
            self._move_to(p.current_verse_index, p.current_word_index - 1)
            return
        prev_verse = p.current_verse_index - 1
        if prev_verse < 0:
            return
        self._move_to(prev_verse, max(self.practice_word_count(prev_verse) - 1, 0))

    def _move_to(self, verse_index: int, word_index: int) -> None:
        p = self.progress
        verse_changed = verse_index != p.current_verse_index
        p.current_verse_index = verse_index
        p.current_word_index = word_index
        if (verse_index, word_index) > p.furthest:
            p.furthest_verse_index = verse_index
            p.furthest_word_index = word_index
            if self.practice_word_count(verse_index) > 0:
                p.total_words_counted += 1
        if verse_changed:
            self._notify(SessionEvent.VERSE_CHANGED)
        self._notify(SessionEvent.POSITION_CHANGED)

    # ----- mistakes -----

    def mark_mistake(self, kind: MistakeKind) -> bool:
        """Mark the current word. No-op (False) if it already carries a mistake."""
        if not self.can_mark_mistake:
            return False
        p = self.progress
        added = self.mistakes.add(p.current_verse_index, p.current_word_index, kind)
        if added:
            logger.debug("Marked %s at %d:%d", MistakeKind(kind).value, *p.current)
            self._notify(SessionEvent.MISTAKE_MARKED)
        return added

    def mistake_for(self, verse_index: int, word_index: int) -> Optional[Mistake]:
        return self.mistakes.get(verse_index, word_index)

    # ----- listeners -----

    def subscribe(self, listener: SessionListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            listener(event, self)

    # ----- views -----

    def items_for(self, verse_index: int) -> List[DisplayItem]:
        return self._items[verse_index]

    def practice_word_count(self, verse_index: int) -> int:
        """Words the learner steps through; preamble placeholders have none."""
        if self.verses[verse_index].is_preamble:
            return 0
        return sum(1 for item in self._items[verse_index] if item.is_word)

    @property
    def stats(self) -> Optional[MemorizationStats]:
        return self._stats

    @property
    def current_verse(self) -> Optional[Ayah]:
        if not self.verses:
            return None
        return self.verses[self.progress.current_verse_index]

    @property
    def current_words(self) -> List[str]:
        return [item.raw_text for item in self._items[self.progress.current_verse_index] if item.is_word] if self.verses else []

    @property
    def forgot_count(self) -> int:
        return self.mistakes.forgot_count

    @property
    def tajwid_count(self) -> int:
        return self.mistakes.tajwid_count

    @property
    def is_preamble_screen(self) -> bool:
        if self.state == SessionState.SHOWING_PREAMBLE:
            return True
        verse = self.current_verse
        return self.state == SessionState.ACTIVE and verse is not None and verse.is_preamble

    @property
    def is_at_session_start(self) -> bool:
        p = self.progress
        return p.current_verse_index == p.session_start_verse_index and p.current_word_index == 0

    @property
    def is_last_word(self) -> bool:
        p = self.progress
        if not self.verses or p.current_verse_index != len(self.verses) - 1:
            return False
        return p.current_word_index >= self.practice_word_count(p.current_verse_index) - 1

    @property
    def can_mark_mistake(self) -> bool:
        if self.state != SessionState.ACTIVE or self.is_preamble_screen:
            return False
        return not self.mistakes.has(*self.progress.current)

    @property
    def title(self) -> str:
        if self.juz_mode:
            return f"Juz {self.juz_number}" if self.juz_number is not None else "Juz"
        first_real = next((v for v in self.verses if not v.is_preamble), None)
        return first_real.surah.english_name if first_real else ""

    def display_items(self) -> List[VisibleItem]:
        """Current verse's items with reveal state and any mistake on each word."""
        if not self.verses:
            return []
        p = self.progress
        out: List[VisibleItem] = []
        for item in self._items[p.current_verse_index]:
            mistake = self.mistakes.get(p.current_verse_index, item.logic_index) if item.is_word else None
            out.append(VisibleItem(item, item.group_index <= p.current_word_index, mistake))
        return out

    def _revealed_share(self, text: str) -> str:
        words = text.split(" ") if text else []
        count = self.practice_word_count(self.progress.current_verse_index)
        if count == 0 or not words:
            return ""
        shown = math.ceil((self.progress.current_word_index + 1) / count * len(words))
        return " ".join(words[:shown])

    def revealed_translation(self) -> str:
        verse = self.current_verse
        return self._revealed_share(verse.translation) if verse else ""

    def revealed_transliteration(self) -> str:
        verse = self.current_verse
        return self._revealed_share(verse.transliteration) if verse else ""

    def verse_end_symbol(self) -> str:
        """End-of-verse ornament once the verse's last word is on screen."""
        verse = self.current_verse
        if verse is None:
            return ""
        count = self.practice_word_count(self.progress.current_verse_index)
        if self.progress.current_word_index < count - 1:
            return ""
        return verse_end_marker(verse.local_number)
