"""Pass 2: deterministic score arithmetic, no model involved"""

from typing import Optional, Sequence

from .config import (
    BASE_SCORE,
    DEFAULT_MERIT_POINTS,
    DRAW_MARGIN,
    MAX_SCORE,
    MERIT_POINTS,
    MIN_SCORE,
)
from .types import FlawEntry


def merit_points(merit: str) -> int:
    """Points for one merit note; the first category it contains wins"""
    for name, points in MERIT_POINTS.items():
        if name in merit:
            return points
    return DEFAULT_MERIT_POINTS


def calculate_score(ledger: Sequence[FlawEntry], merits: Sequence[str]) -> int:
    """Score a party from its full ledger and this round's merits

    Args:
        ledger: Every fallacy the party has committed so far
        merits: Merit notes detected in the current round

    Returns:
        Integer score clamped to [0, 10]
    """
    penalty_total = sum(abs(entry.severity) for entry in ledger)
    merit_total = sum(merit_points(merit) for merit in merits)
    return max(MIN_SCORE, min(MAX_SCORE, BASE_SCORE + merit_total - penalty_total))


def determine_winner(
    player1_id: str,
    player2_id: str,
    player1_score: Optional[float],
    player2_score: Optional[float],
) -> Optional[str]:
    """Winner by score differential; |diff| <= 0.5 is a draw (None)"""
    diff = (player1_score or 0) - (player2_score or 0)
    if diff > DRAW_MARGIN:
        return player1_id
    if diff < -DRAW_MARGIN:
        return player2_id
    return None


def format_contradictions(ledger: Sequence[FlawEntry]) -> str:
    """One-line rendering of a ledger, e.g. "M3: 藁人形論法 - 理由; ..." """
    return "; ".join(f"M{f.utterance_index}: {f.kind} - {f.reason}" for f in ledger)
