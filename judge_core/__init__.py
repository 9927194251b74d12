"""Judge Core - two-pass evaluation and lifecycle of a two-party debate"""

from .types import (
    Debate,
    DebateSettings,
    DetectionResult,
    EvaluationResult,
    FinalSummary,
    FlawEntry,
    Message,
    UserStats,
    Utterance,
)
from .config import AI_USER_ID, DEFAULT_THEME
from .sanitize import sanitize_content
from .ledger import PartyLedger, merge_fallacies
from .scoring import calculate_score, determine_winner
from .detector import FallacyDetector
from .summary import SummaryGenerator
from .opponent import OpponentGenerator
from .store import InMemoryDebateStore, InMemoryMessageStore, InMemoryUserStatsStore
from .controller import DebateController

__all__ = [
    "Debate",
    "DebateSettings",
    "DetectionResult",
    "EvaluationResult",
    "FinalSummary",
    "FlawEntry",
    "Message",
    "UserStats",
    "Utterance",
    "AI_USER_ID",
    "DEFAULT_THEME",
    "sanitize_content",
    "PartyLedger",
    "merge_fallacies",
    "calculate_score",
    "determine_winner",
    "FallacyDetector",
    "SummaryGenerator",
    "OpponentGenerator",
    "InMemoryDebateStore",
    "InMemoryMessageStore",
    "InMemoryUserStatsStore",
    "DebateController",
]
