"""Closing review generated once per debate"""

import logging
from typing import Optional, Sequence

from llm_client import GroqClient, LLMError

from .config import LLM_MAX_TOKENS_SUMMARY, LLM_SUMMARY_TEMPERATURE
from .detector import extract_json_object
from .prompts import SUMMARY_SYSTEM_PROMPT, create_summary_prompt
from .types import FinalSummary, Message

logger = logging.getLogger(__name__)


class SummaryGenerator:
    """Asks the model for a short review of each player"""

    def __init__(self, client: GroqClient, model: Optional[str] = None):
        self.client = client
        self.model = model

    def generate(
        self,
        theme: str,
        messages: Sequence[Message],
        player1_id: str,
        player2_id: Optional[str],
    ) -> FinalSummary:
        """Review both players; any failure yields an empty FinalSummary"""
        player1_args = [m.content for m in messages if m.user_id == player1_id]
        player2_args = [m.content for m in messages if m.user_id == player2_id]
        prompt = create_summary_prompt(theme, player1_args, player2_args)

        try:
            response_text = self.client.get_response(
                prompt=prompt,
                system_prompt=SUMMARY_SYSTEM_PROMPT,
                max_tokens=LLM_MAX_TOKENS_SUMMARY,
                temperature=LLM_SUMMARY_TEMPERATURE,
                model=self.model,
                max_retries=1,
            )
        except LLMError as e:
            logger.error("Summary generation failed: %s", e)
            return FinalSummary()

        data = extract_json_object(response_text)
        if data is None:
            logger.error("Summary response has no JSON object: %r", response_text)
            return FinalSummary()

        return FinalSummary(
            player1_reason=str(data.get("player1_reason") or ""),
            player2_reason=str(data.get("player2_reason") or ""),
        )
