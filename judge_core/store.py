"""In-memory stores for debates, messages and user statistics

These are the persistence collaborators the controller talks to. Any other
backend only has to provide the same methods and raise StoreError on failure.
"""

import copy
import threading
from dataclasses import fields
from typing import Iterable, Optional

from .exceptions import StoreError
from .types import Debate, DebateStatus, Message, UserStats

_DEBATE_FIELDS = {f.name for f in fields(Debate)} - {"debate_id"}


class InMemoryDebateStore:
    """Debate records keyed by debate_id"""

    def __init__(self):
        self._debates: dict[str, Debate] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def create(self, debate: Debate) -> Debate:
        with self._guard:
            if debate.debate_id in self._debates:
                raise StoreError(f"Debate already exists: {debate.debate_id}")
            self._debates[debate.debate_id] = copy.deepcopy(debate)
        return copy.deepcopy(debate)

    def get(self, debate_id: str) -> Optional[Debate]:
        """Return a copy of the record, or None"""
        with self._guard:
            debate = self._debates.get(debate_id)
            return copy.deepcopy(debate) if debate is not None else None

    def update(self, debate_id: str, **changes) -> Debate:
        """Write `changes` to the record in one step"""
        unknown = set(changes) - _DEBATE_FIELDS
        if unknown:
            raise StoreError(f"Unknown debate fields: {sorted(unknown)}")
        with self._guard:
            debate = self._debates.get(debate_id)
            if debate is None:
                raise StoreError(f"Debate not found: {debate_id}")
            for name, value in changes.items():
                setattr(debate, name, copy.deepcopy(value))
            return copy.deepcopy(debate)

    def list_debates(self, status: Optional[DebateStatus] = None) -> list[Debate]:
        """Debates in creation order, optionally filtered by status"""
        with self._guard:
            debates = sorted(self._debates.values(), key=lambda d: d.created_at)
            return [copy.deepcopy(d) for d in debates if status is None or d.status == status]

    def lock(self, debate_id: str) -> threading.RLock:
        """Re-entrant lock serializing evaluation rounds of one debate"""
        with self._guard:
            return self._locks.setdefault(debate_id, threading.RLock())


class InMemoryMessageStore:
    """Append-only message list per debate"""

    def __init__(self):
        self._messages: dict[str, list[Message]] = {}
        self._guard = threading.Lock()

    def append(self, debate_id: str, user_id: str, content: str) -> Message:
        message = Message(debate_id=debate_id, user_id=user_id, content=content)
        with self._guard:
            self._messages.setdefault(debate_id, []).append(message)
        return copy.deepcopy(message)

    def load(self, messages: Iterable[Message]) -> None:
        """Restore previously saved messages in their original order"""
        with self._guard:
            for message in messages:
                self._messages.setdefault(message.debate_id, []).append(copy.deepcopy(message))

    def list_for_debate(self, debate_id: str) -> list[Message]:
        """Messages of a debate in creation order"""
        with self._guard:
            return [copy.deepcopy(m) for m in self._messages.get(debate_id, [])]

    def count(self, debate_id: str) -> int:
        with self._guard:
            return len(self._messages.get(debate_id, []))

    def set_evaluation(self, message_id: str, evaluation: dict) -> None:
        with self._guard:
            for messages in self._messages.values():
                for message in messages:
                    if message.message_id == message_id:
                        message.ai_evaluation = copy.deepcopy(evaluation)
                        return
        raise StoreError(f"Message not found: {message_id}")


class InMemoryUserStatsStore:
    """Win/loss/debate counters per user"""

    def __init__(self):
        self._stats: dict[str, UserStats] = {}
        self._applied: set[str] = set()
        self._guard = threading.Lock()

    def get(self, user_id: str) -> UserStats:
        with self._guard:
            return copy.deepcopy(self._stats.get(user_id) or UserStats(user_id=user_id))

    def apply_outcome(
        self,
        debate_id: str,
        player1_id: str,
        player2_id: Optional[str],
        winner_id: Optional[str],
        excluded: Iterable[str] = (),
    ) -> bool:
        """Record the result of one debate

        Every counted player gets debate_count + 1; with a winner, the winner
        also gets wins + 1 and the other player losses + 1. Players in
        `excluded` are left untouched. Applying the same debate twice is a
        no-op.

        Returns:
            True if the outcome was applied by this call
        """
        excluded = set(excluded)
        players = [p for p in (player1_id, player2_id) if p and p not in excluded]

        with self._guard:
            if debate_id in self._applied:
                return False
            updated = []
            for user_id in players:
                stats = copy.deepcopy(self._stats.get(user_id) or UserStats(user_id=user_id))
                stats.debate_count += 1
                if winner_id is not None:
                    if user_id == winner_id:
                        stats.wins += 1
                    else:
                        stats.losses += 1
                updated.append(stats)
            for stats in updated:
                self._stats[stats.user_id] = stats
            self._applied.add(debate_id)
        return True
