"""Debate lifecycle: evaluation rounds, end conditions, winner and statistics

Status only moves waiting -> active -> finished. Each evaluation round is
detect (outside the debate lock) then merge/score/persist (inside it), so two
rounds never interleave their ledger writes and a round whose debate finished
while the model was answering is discarded.
"""

import logging
from typing import Optional, Sequence

from .config import AI_USER_ID, MIN_MESSAGES_FOR_SUMMARY
from .detector import FallacyDetector
from .exceptions import (
    DebateNotActiveError,
    DebateNotFoundError,
    InvalidParticipantError,
    PersistenceError,
    StoreError,
)
from .ledger import merge_fallacies
from .opponent import OpponentGenerator
from .scoring import calculate_score, determine_winner, format_contradictions
from .store import InMemoryDebateStore, InMemoryMessageStore, InMemoryUserStatsStore
from .summary import SummaryGenerator
from .types import (
    Debate,
    DebateSettings,
    DetectionResult,
    EvaluationResult,
    FinalSummary,
    Message,
    Utterance,
    utc_now,
)

logger = logging.getLogger(__name__)


def build_transcript(debate: Debate, messages: Sequence[Message]) -> list[Utterance]:
    """Number the debate's messages from 1 and tag each with its side"""
    return [
        Utterance(
            index=i,
            speaker="player1" if m.user_id == debate.player1_id else "player2",
            text=m.content,
        )
        for i, m in enumerate(messages, start=1)
    ]


class DebateController:
    """Runs the two-pass evaluation and owns the debate status transitions"""

    def __init__(
        self,
        debates: InMemoryDebateStore,
        messages: InMemoryMessageStore,
        user_stats: InMemoryUserStatsStore,
        detector: FallacyDetector,
        summarizer: SummaryGenerator,
        opponent: Optional[OpponentGenerator] = None,
        ai_user_id: str = AI_USER_ID,
    ):
        self.debates = debates
        self.messages = messages
        self.user_stats = user_stats
        self.detector = detector
        self.summarizer = summarizer
        self.opponent = opponent
        self.ai_user_id = ai_user_id

    def get_debate(self, debate_id: str) -> Debate:
        debate = self.debates.get(debate_id)
        if debate is None:
            raise DebateNotFoundError(debate_id)
        return debate

    # Room lifecycle

    def create_debate(
        self,
        theme: str,
        player1_id: str,
        settings: Optional[DebateSettings] = None,
    ) -> Debate:
        """Open a room

        With `automated_opponent` the AI user takes the second seat right
        away and the debate starts active.
        """
        if not theme or not theme.strip():
            raise ValueError("theme is required")
        settings = settings or DebateSettings()
        debate = Debate(theme=theme.strip(), player1_id=player1_id, settings=settings)
        if settings.automated_opponent:
            if self.opponent is None:
                raise ValueError("automated opponent requested but no generator configured")
            debate.player2_id = self.ai_user_id
            debate.status = "active"
            debate.started_at = utc_now()

        debate = self.debates.create(debate)
        logger.info("Debate %s created (status=%s)", debate.debate_id, debate.status)
        return debate

    def join_debate(self, debate_id: str, player2_id: str) -> Debate:
        """Bind the second player; waiting -> active"""
        with self.debates.lock(debate_id):
            debate = self.get_debate(debate_id)
            if debate.status != "waiting":
                raise DebateNotActiveError(debate_id, debate.status)
            if player2_id in (debate.player1_id, self.ai_user_id):
                raise InvalidParticipantError(f"{player2_id} cannot join debate {debate_id}")
            debate = self.debates.update(
                debate_id,
                player2_id=player2_id,
                status="active",
                started_at=utc_now(),
            )
        logger.info("Debate %s started", debate_id)
        return debate

    # Evaluation rounds

    def submit_utterance(self, debate_id: str, user_id: str, text: str) -> EvaluationResult:
        """Append an utterance, evaluate it and check the end conditions

        Raises:
            DebateNotFoundError: Unknown debate
            DebateNotActiveError: Debate is waiting or finished
            InvalidParticipantError: `user_id` is not a human player of the debate
            PersistenceError: The scores could not be written
        """
        if not text or not text.strip():
            raise ValueError("utterance text is required")
        if user_id == self.ai_user_id:
            raise InvalidParticipantError("the automated opponent cannot submit utterances")

        result = self._run_round(debate_id, user_id, text.strip())
        if not result.finished:
            result.opponent_turn = self._opponent_turn(debate_id)
        return result

    def _run_round(
        self, debate_id: str, user_id: str, text: str, opponent_turn: bool = False
    ) -> Optional[EvaluationResult]:
        lock = self.debates.lock(debate_id)
        with lock:
            debate = self.get_debate(debate_id)
            if debate.status != "active":
                if opponent_turn:
                    return None
                raise DebateNotActiveError(debate_id, debate.status)
            if debate.role_of(user_id) is None:
                raise InvalidParticipantError(f"{user_id} is not a player of debate {debate_id}")
            if opponent_turn and self._last_speaker(debate_id) == self.ai_user_id:
                logger.info("Debate %s: opponent already replied, skipping", debate_id)
                return None
            if self.messages.count(debate_id) >= 2 * debate.settings.max_utterances:
                # transcript full; the round that filled it finishes the debate
                if opponent_turn:
                    return None
                raise DebateNotActiveError(debate_id, "full")

            message = self.messages.append(debate_id, user_id, text)
            transcript = build_transcript(debate, self.messages.list_for_debate(debate_id))
            utterance = transcript[-1]

        detection = self.detector.detect(
            debate.theme, transcript, debate.p1_fallacies, debate.p2_fallacies
        )

        with lock:
            return self._apply_detection(debate_id, message, utterance, detection)

    def _apply_detection(
        self,
        debate_id: str,
        message: Message,
        utterance: Utterance,
        detection: DetectionResult,
    ) -> EvaluationResult:
        debate = self.get_debate(debate_id)
        if debate.status != "active":
            logger.info("Debate %s ended during evaluation; discarding result", debate_id)
            return self._snapshot(debate, utterance, detection.feedback, applied=False)

        if detection.failed:
            result = self._snapshot(debate, utterance, detection.feedback, applied=False)
        else:
            result = self._score_round(debate, utterance, detection)
        self._store_evaluation(message, result)

        count = self.messages.count(debate_id)
        if count >= 2 * debate.settings.max_utterances:
            logger.info("Debate %s reached %d messages", debate_id, count)
            result.winner_id = self._finish(debate_id, reason="max_utterances")
            result.finished = True
        return result

    def _score_round(
        self, debate: Debate, utterance: Utterance, detection: DetectionResult
    ) -> EvaluationResult:
        p1_fallacies = merge_fallacies(debate.p1_fallacies, detection.p1_fallacies)
        p2_fallacies = merge_fallacies(debate.p2_fallacies, detection.p2_fallacies)
        player1_score = calculate_score(p1_fallacies, detection.p1_merits)
        player2_score = calculate_score(p2_fallacies, detection.p2_merits)
        advantage = player1_score - player2_score

        logger.info(
            "Debate %s M%d: P1 merits=%s fallacies=%d score=%d / P2 merits=%s fallacies=%d score=%d",
            debate.debate_id, utterance.index,
            detection.p1_merits, len(p1_fallacies), player1_score,
            detection.p2_merits, len(p2_fallacies), player2_score,
        )

        try:
            self.debates.update(
                debate.debate_id,
                player1_score=player1_score,
                player2_score=player2_score,
                advantage=advantage,
                p1_fallacies=p1_fallacies,
                p2_fallacies=p2_fallacies,
            )
        except StoreError as e:
            logger.error("Failed to persist scores for debate %s: %s", debate.debate_id, e)
            raise PersistenceError(f"Could not save scores for debate {debate.debate_id}") from e

        return EvaluationResult(
            utterance=utterance,
            player1_score=player1_score,
            player2_score=player2_score,
            advantage=advantage,
            latest_feedback=detection.feedback,
            p1_fallacies=p1_fallacies,
            p2_fallacies=p2_fallacies,
            p1_merits=detection.p1_merits,
            p2_merits=detection.p2_merits,
            p1_contradictions=format_contradictions(p1_fallacies),
            p2_contradictions=format_contradictions(p2_fallacies),
        )

    def _snapshot(
        self, debate: Debate, utterance: Utterance, feedback: str, applied: bool
    ) -> EvaluationResult:
        """Result carrying the persisted state unchanged"""
        return EvaluationResult(
            utterance=utterance,
            player1_score=debate.player1_score,
            player2_score=debate.player2_score,
            advantage=debate.advantage,
            latest_feedback=feedback,
            p1_fallacies=debate.p1_fallacies,
            p2_fallacies=debate.p2_fallacies,
            p1_contradictions=format_contradictions(debate.p1_fallacies),
            p2_contradictions=format_contradictions(debate.p2_fallacies),
            applied=applied,
            finished=debate.status == "finished",
            winner_id=debate.winner_id,
        )

    def _store_evaluation(self, message: Message, result: EvaluationResult) -> None:
        try:
            self.messages.set_evaluation(message.message_id, result.evaluation_payload())
        except StoreError as e:
            logger.warning("Failed to attach evaluation to message %s: %s", message.message_id, e)

    def _last_speaker(self, debate_id: str) -> Optional[str]:
        history = self.messages.list_for_debate(debate_id)
        return history[-1].user_id if history else None

    # Automated opponent

    def _opponent_turn(self, debate_id: str) -> Optional[EvaluationResult]:
        if self.opponent is None:
            return None
        with self.debates.lock(debate_id):
            debate = self.get_debate(debate_id)
            if debate.status != "active" or not debate.settings.automated_opponent:
                return None
            ai_role = debate.role_of(self.ai_user_id)
            if ai_role is None or self._last_speaker(debate_id) == self.ai_user_id:
                return None
            transcript = build_transcript(debate, self.messages.list_for_debate(debate_id))

        text = self.opponent.respond(debate.theme, transcript, ai_role)
        return self._run_round(debate_id, self.ai_user_id, text, opponent_turn=True)

    # End of debate

    def end_debate(self, debate_id: str, reason: str = "time_limit") -> Optional[str]:
        """Finish the debate and return the winner id (None for a draw)

        A debate that is already finished keeps its state and its recorded
        winner is returned. A stats update missed by an earlier failed end
        is applied then.

        Raises:
            DebateNotFoundError: Unknown debate
            DebateNotActiveError: Debate never started
            PersistenceError: The finished state could not be written
        """
        with self.debates.lock(debate_id):
            debate = self.get_debate(debate_id)
            if debate.status == "finished":
                logger.info("Debate %s already finished, ignoring end signal (%s)", debate_id, reason)
                # fills in an outcome a failed earlier end left unrecorded
                self._record_outcome(debate, debate.winner_id)
                return debate.winner_id
            if debate.status != "active":
                raise DebateNotActiveError(debate_id, debate.status)
            return self._finish(debate_id, reason)

    def _finish(self, debate_id: str, reason: str) -> Optional[str]:
        # caller holds the debate lock
        debate = self.get_debate(debate_id)
        messages = self.messages.list_for_debate(debate_id)

        summary = FinalSummary()
        if len(messages) >= MIN_MESSAGES_FOR_SUMMARY:
            summary = self.summarizer.generate(
                debate.theme, messages, debate.player1_id, debate.player2_id
            )

        winner_id = determine_winner(
            debate.player1_id,
            debate.player2_id,
            debate.player1_score,
            debate.player2_score,
        )
        self._write_finished(debate_id, winner_id, summary)
        self._record_outcome(debate, winner_id)

        logger.info("Debate %s finished (%s), winner=%s", debate_id, reason, winner_id)
        return winner_id

    def _record_outcome(self, debate: Debate, winner_id: Optional[str]) -> None:
        """Apply the result to user stats; a no-op once applied for this debate"""
        try:
            self.user_stats.apply_outcome(
                debate.debate_id,
                debate.player1_id,
                debate.player2_id,
                winner_id,
                excluded=[self.ai_user_id],
            )
        except StoreError as e:
            logger.error("Failed to update user stats for debate %s: %s", debate.debate_id, e)
            raise PersistenceError(
                f"Could not update statistics for debate {debate.debate_id}"
            ) from e

    def _write_finished(
        self, debate_id: str, winner_id: Optional[str], summary: FinalSummary
    ) -> None:
        finished_at = utc_now()
        try:
            self.debates.update(
                debate_id,
                status="finished",
                winner_id=winner_id,
                final_summary=summary,
                finished_at=finished_at,
            )
            return
        except StoreError as e:
            logger.error("Failed to update debate %s: %s", debate_id, e)

        # Retry without the summary
        try:
            self.debates.update(
                debate_id,
                status="finished",
                winner_id=winner_id,
                finished_at=finished_at,
            )
        except StoreError as e:
            logger.error("Fallback update of debate %s failed: %s", debate_id, e)
            raise PersistenceError(f"Could not finish debate {debate_id}") from e
