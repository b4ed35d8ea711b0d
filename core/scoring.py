"""
Memorization scoring: score, accuracy and rank for a finished practice session.

- score: exponential decay on the weighted mistake ratio. Forgotten words weigh
  1.0 and tajwid mistakes 0.6; a mistake ratio of 5% already cuts the score by
  about 92%.
- accuracy: linear, forgotten words count 1 and tajwid mistakes 0.5.
- rank: step function over accuracy (X, SSS, SS, S, A, B, C, D, F).
"""
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Tuple

from .models import MemorizationStats

FORGOT_WEIGHT = 1.0
TAJWID_WEIGHT = 0.6
# Steepness of the score drop-off
DECAY_FACTOR = 50

ACCURACY_TAJWID_WEIGHT = 0.5

# Lower bound of each band, evaluated top-down; 100 exactly is X
RANK_BANDS: List[Tuple[float, str]] = [
    (99.5, "SSS"),
    (99.0, "SS"),
    (98.0, "S"),
    (95.0, "A"),
    (90.0, "B"),
    (82.5, "C"),
    (75.0, "D"),
]


@dataclass(frozen=True)
class ScoreResult:
    score: int
    accuracy: float
    rank: str

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "accuracy": self.accuracy, "rank": self.rank}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_score(total_words: int, forgot_count: int, tajwid_count: int) -> int:
    """Perfect run scores total_words; any mistake decays it exponentially."""
    if total_words <= 0:
        return 0
    weighted = forgot_count * FORGOT_WEIGHT + tajwid_count * TAJWID_WEIGHT
    if weighted == 0:
        return total_words
    ratio = weighted / total_words
    multiplier = math.exp(-DECAY_FACTOR * ratio)
    return _round_half_up(total_words * multiplier)


def calculate_accuracy(total_words: int, forgot_count: int, tajwid_count: int) -> float:
    """Percentage in [0, 100], 2 decimals."""
    if total_words <= 0:
        return 0.0
    total_mistakes = forgot_count + tajwid_count * ACCURACY_TAJWID_WEIGHT
    accuracy = max(0.0, (total_words - total_mistakes) / total_words * 100)
    # Exact decimal value of the double, ties away from zero
    return float(Decimal(accuracy).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def get_rank(accuracy: float) -> str:
    if accuracy == 100:
        return "X"
    for lower_bound, rank in RANK_BANDS:
        if accuracy >= lower_bound:
            return rank
    return "F"


def score_session(total_words: int, forgot_count: int, tajwid_count: int) -> ScoreResult:
    accuracy = calculate_accuracy(total_words, forgot_count, tajwid_count)
    return ScoreResult(
        score=calculate_score(total_words, forgot_count, tajwid_count),
        accuracy=accuracy,
        rank=get_rank(accuracy),
    )


def score_stats(stats: MemorizationStats) -> ScoreResult:
    """Score a session snapshot; rank follows the accuracy recorded in the snapshot."""
    return ScoreResult(
        score=calculate_score(stats.total_words, stats.forgot_count, stats.tajwid_count),
        accuracy=stats.accuracy,
        rank=get_rank(stats.accuracy),
    )
