from __future__ import annotations

import json
from typing import Callable, Optional, Sequence, Union

import pytest

from judge_core import (
    DebateController,
    FallacyDetector,
    InMemoryDebateStore,
    InMemoryMessageStore,
    InMemoryUserStatsStore,
    OpponentGenerator,
    SummaryGenerator,
)
from judge_core.prompts import DETECTION_SYSTEM_PROMPT, OPPONENT_SYSTEM_PROMPT, SUMMARY_SYSTEM_PROMPT
from llm_client import GroqClient

Reply = Union[str, Exception]


def detection_json(
    p1_fallacies: Sequence[dict] = (),
    p2_fallacies: Sequence[dict] = (),
    p1_merits: Sequence[str] = (),
    p2_merits: Sequence[str] = (),
    feedback: str = "良い指摘です",
) -> str:
    """検出パスのモデル応答を組み立てる"""
    return json.dumps({
        "p1_fallacies": list(p1_fallacies),
        "p2_fallacies": list(p2_fallacies),
        "p1_merits": list(p1_merits),
        "p2_merits": list(p2_merits),
        "latest_feedback": feedback,
    }, ensure_ascii=False)


def fallacy(message: int, kind: str, penalty: int, player: str = "Player1", reason: str = "理由") -> dict:
    return {"message": message, "player": player, "type": kind, "reason": reason, "penalty": penalty}


class FakeClient(GroqClient):
    """決まった応答を返す偽のLLM（system prompt でパスを判別する）"""

    def __init__(
        self,
        detections: Sequence[Reply] = (),
        summary: Reply = '{"player1_reason": "論理が明快", "player2_reason": "反論が弱い"}',
        opponent: Reply = "その前提は成り立ちません。",
        on_detect: Optional[Callable[[], None]] = None,
    ) -> None:
        self.detections = list(detections)
        self.summary = summary
        self.opponent = opponent
        self.on_detect = on_detect
        self.calls: list[dict] = []

    def get_response(
        self,
        prompt: str,
        system_prompt: str,
        max_tokens: int = 200,
        temperature: Optional[float] = None,
        model: Optional[str] = None,
        max_retries: int = 3,
    ) -> str:
        self.calls.append({
            "prompt": prompt,
            "system_prompt": system_prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "max_retries": max_retries,
        })
        if system_prompt == DETECTION_SYSTEM_PROMPT:
            if self.on_detect:
                self.on_detect()
            reply = self.detections.pop(0) if self.detections else detection_json(feedback="")
        elif system_prompt == SUMMARY_SYSTEM_PROMPT:
            reply = self.summary
        elif system_prompt == OPPONENT_SYSTEM_PROMPT:
            reply = self.opponent
        else:
            raise AssertionError(f"unexpected system prompt: {system_prompt}")
        if isinstance(reply, Exception):
            raise reply
        return reply

    def calls_for(self, system_prompt: str) -> list[dict]:
        return [c for c in self.calls if c["system_prompt"] == system_prompt]


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def stores():
    return InMemoryDebateStore(), InMemoryMessageStore(), InMemoryUserStatsStore()


@pytest.fixture
def make_controller(stores):
    """FakeClient を受け取ってコントローラーを作る"""
    debates, messages, user_stats = stores

    def _make(client: GroqClient, debate_store=None) -> DebateController:
        return DebateController(
            debates=debate_store or debates,
            messages=messages,
            user_stats=user_stats,
            detector=FallacyDetector(client),
            summarizer=SummaryGenerator(client),
            opponent=OpponentGenerator(client),
        )

    return _make
