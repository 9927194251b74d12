"""Automated opponent for single-player debates"""

import logging
from typing import Optional, Sequence

from llm_client import GroqClient, LLMError

from .config import (
    LLM_MAX_TOKENS_OPPONENT,
    LLM_OPPONENT_TEMPERATURE,
    OPPONENT_FALLBACK_TEXT,
    OPPONENT_MAX_CHARS,
)
from .prompts import OPPONENT_SYSTEM_PROMPT, create_opponent_prompt
from .types import PartyRole, Utterance

logger = logging.getLogger(__name__)


class OpponentGenerator:
    """Generates the automated party's rebuttal"""

    def __init__(self, client: GroqClient, model: Optional[str] = None):
        self.client = client
        self.model = model

    def respond(
        self, theme: str, transcript: Sequence[Utterance], ai_role: PartyRole
    ) -> str:
        """Return a rebuttal of at most OPPONENT_MAX_CHARS characters

        Falls back to OPPONENT_FALLBACK_TEXT when the model fails or
        answers with nothing.
        """
        prompt = create_opponent_prompt(theme, transcript, ai_role)
        try:
            text = self.client.get_response(
                prompt=prompt,
                system_prompt=OPPONENT_SYSTEM_PROMPT,
                max_tokens=LLM_MAX_TOKENS_OPPONENT,
                temperature=LLM_OPPONENT_TEMPERATURE,
                model=self.model,
                max_retries=1,
            ).strip()
        except LLMError as e:
            logger.error("Opponent generation failed: %s", e)
            return OPPONENT_FALLBACK_TEXT

        if not text:
            logger.warning("Opponent returned an empty response")
            return OPPONENT_FALLBACK_TEXT
        return text[:OPPONENT_MAX_CHARS]
