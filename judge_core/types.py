"""Data classes for the debate judge"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Literal
import uuid

PartyRole = Literal["player1", "player2"]
DebateStatus = Literal["waiting", "active", "finished"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def role_label(role: PartyRole) -> str:
    """"player1" -> "Player1", as shown to the model"""
    return "Player1" if role == "player1" else "Player2"


@dataclass(frozen=True)
class Utterance:
    """One transcript entry (index is 1-based)"""
    index: int
    speaker: PartyRole
    text: str


@dataclass(frozen=True)
class FlawEntry:
    """A fallacy committed by `party` in utterance `utterance_index`

    Serialized with the keys the detection model uses:
    message / player / type / reason / penalty.
    """
    utterance_index: int
    party: PartyRole
    kind: str
    reason: str
    severity: int

    @property
    def key(self) -> tuple[int, str]:
        return (self.utterance_index, self.kind)

    def to_dict(self) -> dict:
        return {
            "message": self.utterance_index,
            "player": role_label(self.party),
            "type": self.kind,
            "reason": self.reason,
            "penalty": self.severity,
        }

    @classmethod
    def from_dict(cls, data: dict, party: PartyRole) -> "FlawEntry":
        return cls(
            utterance_index=int(data["message"]),
            party=party,
            kind=str(data["type"]),
            reason=str(data.get("reason", "")),
            severity=int(data["penalty"]),
        )


@dataclass
class DetectionResult:
    """Unscored output of the detection pass"""
    p1_fallacies: list[FlawEntry] = field(default_factory=list)
    p2_fallacies: list[FlawEntry] = field(default_factory=list)
    p1_merits: list[str] = field(default_factory=list)
    p2_merits: list[str] = field(default_factory=list)
    feedback: str = ""
    failed: bool = False

    @classmethod
    def failed_result(cls, feedback: str) -> "DetectionResult":
        return cls(feedback=feedback, failed=True)


@dataclass
class DebateSettings:
    """Per-debate settings chosen when the room is opened"""
    max_utterances: int = 30
    time_limit: int = 600
    automated_opponent: bool = False
    point_diff: int = 10

    def to_dict(self) -> dict:
        return {
            "max_utterances": self.max_utterances,
            "time_limit": self.time_limit,
            "automated_opponent": self.automated_opponent,
            "point_diff": self.point_diff,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DebateSettings":
        defaults = cls()
        return cls(
            max_utterances=int(data.get("max_utterances", defaults.max_utterances)),
            time_limit=int(data.get("time_limit", defaults.time_limit)),
            automated_opponent=bool(data.get("automated_opponent", defaults.automated_opponent)),
            point_diff=int(data.get("point_diff", defaults.point_diff)),
        )


@dataclass
class FinalSummary:
    """Closing review per player"""
    player1_reason: str = ""
    player2_reason: str = ""

    def to_dict(self) -> dict:
        return {
            "player1_reason": self.player1_reason,
            "player2_reason": self.player2_reason,
        }


@dataclass
class Debate:
    """Debate record"""
    debate_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    theme: str = ""
    player1_id: str = ""
    player2_id: Optional[str] = None
    status: DebateStatus = "waiting"
    player1_score: int = 0
    player2_score: int = 0
    advantage: int = 0
    winner_id: Optional[str] = None
    settings: DebateSettings = field(default_factory=DebateSettings)
    p1_fallacies: list[FlawEntry] = field(default_factory=list)
    p2_fallacies: list[FlawEntry] = field(default_factory=list)
    final_summary: Optional[FinalSummary] = None
    created_at: datetime = field(default_factory=utc_now)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def role_of(self, user_id: str) -> Optional[PartyRole]:
        """Which side `user_id` plays, or None for outsiders"""
        if user_id == self.player1_id:
            return "player1"
        if self.player2_id is not None and user_id == self.player2_id:
            return "player2"
        return None

    def to_dict(self) -> dict:
        return {
            "debate_id": self.debate_id,
            "theme": self.theme,
            "player1_id": self.player1_id,
            "player2_id": self.player2_id,
            "status": self.status,
            "player1_score": self.player1_score,
            "player2_score": self.player2_score,
            "advantage": self.advantage,
            "winner_id": self.winner_id,
            "settings": self.settings.to_dict(),
            "p1_fallacies": [f.to_dict() for f in self.p1_fallacies],
            "p2_fallacies": [f.to_dict() for f in self.p2_fallacies],
            "final_summary": self.final_summary.to_dict() if self.final_summary else None,
            "created_at": _format_time(self.created_at),
            "started_at": _format_time(self.started_at),
            "finished_at": _format_time(self.finished_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Debate":
        summary = data.get("final_summary")
        return cls(
            debate_id=data["debate_id"],
            theme=data["theme"],
            player1_id=data["player1_id"],
            player2_id=data.get("player2_id"),
            status=data.get("status", "waiting"),
            player1_score=data.get("player1_score", 0),
            player2_score=data.get("player2_score", 0),
            advantage=data.get("advantage", 0),
            winner_id=data.get("winner_id"),
            settings=DebateSettings.from_dict(data.get("settings") or {}),
            p1_fallacies=[FlawEntry.from_dict(f, "player1") for f in data.get("p1_fallacies", [])],
            p2_fallacies=[FlawEntry.from_dict(f, "player2") for f in data.get("p2_fallacies", [])],
            final_summary=FinalSummary(**summary) if summary else None,
            created_at=_parse_time(data.get("created_at")) or utc_now(),
            started_at=_parse_time(data.get("started_at")),
            finished_at=_parse_time(data.get("finished_at")),
        )


@dataclass
class Message:
    """A stored utterance plus the evaluation payload of its round"""
    debate_id: str
    user_id: str
    content: str
    message_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    ai_evaluation: Optional[dict] = None
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            "message_id": self.message_id,
            "debate_id": self.debate_id,
            "user_id": self.user_id,
            "content": self.content,
            "ai_evaluation": self.ai_evaluation,
            "created_at": _format_time(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Message":
        return cls(
            debate_id=data["debate_id"],
            user_id=data["user_id"],
            content=data["content"],
            message_id=data["message_id"],
            ai_evaluation=data.get("ai_evaluation"),
            created_at=_parse_time(data.get("created_at")) or utc_now(),
        )


@dataclass
class UserStats:
    """Win/loss counters for one user"""
    user_id: str
    wins: int = 0
    losses: int = 0
    debate_count: int = 0

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "wins": self.wins,
            "losses": self.losses,
            "debate_count": self.debate_count,
        }


@dataclass
class EvaluationResult:
    """Outcome of one submitted utterance"""
    utterance: Utterance
    player1_score: int
    player2_score: int
    advantage: int
    latest_feedback: str
    p1_fallacies: list[FlawEntry] = field(default_factory=list)
    p2_fallacies: list[FlawEntry] = field(default_factory=list)
    p1_merits: list[str] = field(default_factory=list)
    p2_merits: list[str] = field(default_factory=list)
    p1_contradictions: str = ""
    p2_contradictions: str = ""
    applied: bool = True
    finished: bool = False
    winner_id: Optional[str] = None
    opponent_turn: Optional["EvaluationResult"] = None

    def evaluation_payload(self) -> dict:
        """The per-message payload stored alongside the utterance"""
        return {
            "player1_score": self.player1_score,
            "player2_score": self.player2_score,
            "latest_feedback": self.latest_feedback,
            "p1_fallacies": [f.to_dict() for f in self.p1_fallacies],
            "p2_fallacies": [f.to_dict() for f in self.p2_fallacies],
            "p1_merits": list(self.p1_merits),
            "p2_merits": list(self.p2_merits),
            "p1_contradictions": self.p1_contradictions,
            "p2_contradictions": self.p2_contradictions,
        }

    def to_dict(self) -> dict:
        data = self.evaluation_payload()
        data.update({
            "utterance": {
                "index": self.utterance.index,
                "speaker": self.utterance.speaker,
                "text": self.utterance.text,
            },
            "advantage": self.advantage,
            "applied": self.applied,
            "finished": self.finished,
            "winner_id": self.winner_id,
            "opponent_turn": self.opponent_turn.to_dict() if self.opponent_turn else None,
        })
        return data
