"""Groq API client used by the detector, summary and opponent passes"""

import logging
import os
import time
from typing import Optional

from .exceptions import RateLimitError, APIKeyError, LLMError, ModelError

logger = logging.getLogger(__name__)


class GroqClient:
    """Client for Groq API"""

    DEFAULT_MODEL = "llama-3.3-70b-versatile"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        """Initialize the Groq client

        Args:
            api_key: Groq API key. If not provided, reads from GROQ_API_KEY env var.
            model: Default model. If not provided, reads from JUDGE_MODEL env var.

        Raises:
            APIKeyError: If no API key is provided or found in environment
        """
        self.api_key = api_key or os.getenv("GROQ_API_KEY")
        if not self.api_key:
            raise APIKeyError(
                "GROQ_API_KEY not found. Set it as an environment variable or pass it to the constructor."
            )
        self.model = model or os.getenv("JUDGE_MODEL") or self.DEFAULT_MODEL
        self._client = None

    def _get_client(self):
        """Lazy initialization of Groq client"""
        if self._client is None:
            from groq import Groq
            self._client = Groq(api_key=self.api_key)
        return self._client

    def get_response(
        self,
        prompt: str,
        system_prompt: str,
        max_tokens: int = 200,
        temperature: Optional[float] = None,
        model: Optional[str] = None,
        max_retries: int = 3,
    ) -> str:
        """Get a response from Groq API

        Args:
            prompt: User prompt
            system_prompt: System prompt
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature (API default when None)
            model: Model to use (defaults to self.model)
            max_retries: Number of attempts on rate limit

        Returns:
            Response text

        Raises:
            RateLimitError: If rate limited after all retries
            ModelError: If the model returned no content
            LLMError: For other API errors
        """
        client = self._get_client()
        model = model or self.model

        params = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": max_tokens,
        }
        if temperature is not None:
            params["temperature"] = temperature

        for attempt in range(max_retries):
            try:
                response = client.chat.completions.create(**params)
            except Exception as e:
                error_msg = str(e).lower()

                # Check for rate limit errors
                if "rate" in error_msg or "limit" in error_msg or "429" in error_msg:
                    wait_time = 5 * (attempt + 1)
                    if attempt < max_retries - 1:
                        logger.warning("Rate limited by Groq, retrying in %ss", wait_time)
                        time.sleep(wait_time)
                        continue
                    raise RateLimitError(
                        f"API rate limit exceeded after {max_retries} attempts",
                        retry_after=60,
                    )

                # Check for auth errors
                if "auth" in error_msg or "key" in error_msg or "401" in error_msg:
                    raise APIKeyError("Invalid API key")

                # Other errors
                raise LLMError(f"Groq API error: {e}")

            content = response.choices[0].message.content if response.choices else None
            if content is None:
                raise ModelError(f"Model {model} returned no content")
            return content

        raise LLMError("Unexpected error in get_response")
