"""Pass 1: fallacy and merit detection by the language model

The model only detects. Scores are computed afterwards by judge_core.scoring.
"""

import json
import logging
import re
from typing import Any, Optional, Sequence

from llm_client import GroqClient, LLMError

from .config import (
    CRITICAL_PENALTY,
    EVALUATION_FAILED_FEEDBACK,
    FALLACY_ALIASES,
    FALLACY_SEVERITY,
    LLM_DETECTION_TEMPERATURE,
    LLM_MAX_TOKENS_DETECTION,
    MINOR_PENALTY,
)
from .prompts import DETECTION_SYSTEM_PROMPT, create_detection_prompt
from .types import DetectionResult, FlawEntry, PartyRole, Utterance

logger = logging.getLogger(__name__)

# Models sometimes write "penalty": +3. String literals are matched first so
# their contents pass through untouched.
_PLUS_NUMBER_RE = re.compile(r'("(?:[^"\\]|\\.)*")|(:\s*)\+(?=\d)')
_DECODER = json.JSONDecoder()

_RESULT_KEYS = ("p1_fallacies", "p2_fallacies", "p1_merits", "p2_merits")


def extract_json_object(text: str) -> Optional[dict]:
    """Return the first well-formed JSON object found anywhere in `text`"""
    cleaned = _PLUS_NUMBER_RE.sub(lambda m: m.group(1) or m.group(2), text or "")
    for match in re.finditer(r"\{", cleaned):
        try:
            value, _ = _DECODER.raw_decode(cleaned, match.start())
        except json.JSONDecodeError:
            continue
        if isinstance(value, dict):
            return value
    return None


def canonical_kind(kind: str) -> str:
    """Map a model-written fallacy name onto the fixed vocabulary when possible"""
    kind = kind.strip()
    if kind in FALLACY_SEVERITY:
        return kind
    for name in FALLACY_SEVERITY:
        if name in kind:
            return name
    for alias, name in FALLACY_ALIASES.items():
        if alias in kind:
            return name
    return kind


def resolve_severity(kind: str, reported: Any) -> int:
    """Fixed severity for known kinds, otherwise the model's penalty in [-5, -1]"""
    if kind in FALLACY_SEVERITY:
        return FALLACY_SEVERITY[kind]
    try:
        value = -abs(int(float(reported)))
    except (TypeError, ValueError):
        return MINOR_PENALTY
    if value == 0:
        return MINOR_PENALTY
    return max(CRITICAL_PENALTY, value)


def _parse_flaws(raw: list, party: PartyRole, transcript_length: int) -> list[FlawEntry]:
    flaws = []
    for item in raw:
        try:
            index = int(item["message"])
            raw_kind = item["type"]
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed fallacy entry: %r", item)
            continue
        if raw_kind is None or not str(raw_kind).strip():
            logger.warning("Skipping fallacy entry without a type: %r", item)
            continue
        kind = canonical_kind(str(raw_kind))
        if not 1 <= index <= transcript_length:
            logger.warning("Skipping fallacy entry outside the transcript: %r", item)
            continue
        flaws.append(FlawEntry(
            utterance_index=index,
            party=party,
            kind=kind,
            reason=str(item.get("reason") or ""),
            severity=resolve_severity(kind, item.get("penalty")),
        ))
    return flaws


def _parse_merits(raw: list) -> list[str]:
    merits = []
    for item in raw:
        if isinstance(item, (dict, list)) or item is None:
            continue
        text = str(item).strip()
        if text:
            merits.append(text)
    return merits


def parse_detection(text: str, transcript_length: int) -> DetectionResult:
    """Turn raw model output into a DetectionResult

    A missing or malformed top-level object yields a failed result. Single
    malformed fallacy entries are dropped without failing the whole round.
    """
    data = extract_json_object(text)
    if data is None or not any(key in data for key in _RESULT_KEYS):
        logger.error("Detection response has no usable JSON object: %r", text)
        return DetectionResult.failed_result(EVALUATION_FAILED_FEEDBACK)

    lists = {key: data.get(key) or [] for key in _RESULT_KEYS}
    if not all(isinstance(value, list) for value in lists.values()):
        logger.error("Detection response has a malformed shape: %r", data)
        return DetectionResult.failed_result(EVALUATION_FAILED_FEEDBACK)

    return DetectionResult(
        p1_fallacies=_parse_flaws(lists["p1_fallacies"], "player1", transcript_length),
        p2_fallacies=_parse_flaws(lists["p2_fallacies"], "player2", transcript_length),
        p1_merits=_parse_merits(lists["p1_merits"]),
        p2_merits=_parse_merits(lists["p2_merits"]),
        feedback=str(data.get("latest_feedback") or ""),
    )


class FallacyDetector:
    """Runs the detection pass: one model call per evaluation round"""

    def __init__(self, client: GroqClient, model: Optional[str] = None):
        self.client = client
        self.model = model

    def detect(
        self,
        theme: str,
        transcript: Sequence[Utterance],
        p1_ledger: Sequence[FlawEntry] = (),
        p2_ledger: Sequence[FlawEntry] = (),
    ) -> DetectionResult:
        """Detect fallacies and merits over the whole transcript

        Model and parse failures are recovered here and come back as a
        failed DetectionResult. A missing theme raises ValueError.
        """
        prompt = create_detection_prompt(theme, transcript, p1_ledger, p2_ledger)
        logger.debug("Detection prompt:\n%s", prompt)

        try:
            response_text = self.client.get_response(
                prompt=prompt,
                system_prompt=DETECTION_SYSTEM_PROMPT,
                max_tokens=LLM_MAX_TOKENS_DETECTION,
                temperature=LLM_DETECTION_TEMPERATURE,
                model=self.model,
                max_retries=1,
            )
        except LLMError as e:
            logger.error("Detection call failed: %s", e)
            return DetectionResult.failed_result(EVALUATION_FAILED_FEEDBACK)

        logger.debug("Detection result:\n%s", response_text)
        return parse_detection(response_text, len(transcript))
