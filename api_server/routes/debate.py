"""Debate API endpoints"""

from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, HTTPException, Request, Header
from pydantic import BaseModel, Field

from judge_core import (
    DebateController,
    DebateSettings,
    FallacyDetector,
    InMemoryDebateStore,
    InMemoryMessageStore,
    InMemoryUserStatsStore,
    OpponentGenerator,
    SummaryGenerator,
    Debate,
)
from judge_core.exceptions import (
    DebateError,
    DebateNotActiveError,
    DebateNotFoundError,
    InvalidParticipantError,
    PersistenceError,
)
from llm_client import GroqClient, APIKeyError
from api_server.middleware.rate_limit import limiter, get_rate_limit_string, get_evaluate_limit_string

router = APIRouter(prefix="/debates", tags=["debates"])

# Global stores shared by every request
debate_store = InMemoryDebateStore()
message_store = InMemoryMessageStore()
user_stats_store = InMemoryUserStatsStore()


def get_controller(api_key: Optional[str] = None) -> DebateController:
    """Build a controller whose model passes use the provided API key

    Args:
        api_key: API key from request header (takes priority) or env var
    """
    try:
        client = GroqClient(api_key=api_key)
    except APIKeyError:
        raise HTTPException(
            status_code=401,
            detail="APIキーが必要です。Groq APIキーを入力してください。"
        )
    return DebateController(
        debates=debate_store,
        messages=message_store,
        user_stats=user_stats_store,
        detector=FallacyDetector(client),
        summarizer=SummaryGenerator(client),
        opponent=OpponentGenerator(client),
    )


def to_http_error(error: Exception) -> HTTPException:
    """Map judge_core errors onto HTTP status codes"""
    if isinstance(error, DebateNotFoundError):
        return HTTPException(status_code=404, detail="Debate not found")
    if isinstance(error, DebateNotActiveError):
        return HTTPException(status_code=409, detail=f"Debate is {error.status}")
    if isinstance(error, InvalidParticipantError):
        return HTTPException(status_code=403, detail=str(error))
    if isinstance(error, PersistenceError):
        return HTTPException(status_code=500, detail=str(error))
    if isinstance(error, ValueError):
        return HTTPException(status_code=400, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


def remaining_seconds(debate: Debate) -> Optional[int]:
    """Seconds left on the debate clock, None unless active"""
    if debate.status != "active" or debate.started_at is None:
        return None
    elapsed = (datetime.now(timezone.utc) - debate.started_at).total_seconds()
    return max(0, int(debate.settings.time_limit - elapsed))


# Request/Response models
class SettingsInput(BaseModel):
    """Debate settings input"""
    max_utterances: int = Field(default=30, ge=1, le=100)
    time_limit: int = Field(default=600, ge=30, le=7200)
    automated_opponent: bool = False


class CreateRequest(BaseModel):
    """Request to open a debate room"""
    theme: str = Field(..., min_length=1, max_length=200)
    player1_id: str = Field(..., min_length=1, max_length=64)
    settings: Optional[SettingsInput] = None


class JoinRequest(BaseModel):
    """Request to take the second seat"""
    player_id: str = Field(..., min_length=1, max_length=64)


class UtteranceRequest(BaseModel):
    """Request to submit an utterance"""
    player_id: str = Field(..., min_length=1, max_length=64)
    content: str = Field(..., min_length=1, max_length=1000)


class EndRequest(BaseModel):
    """Request to end a debate (e.g. time limit reached)"""
    reason: str = Field(default="time_limit", max_length=50)


class DebateResponse(BaseModel):
    """A debate record"""
    debate: dict
    remaining_seconds: Optional[int] = None


class DebateListResponse(BaseModel):
    """Debate records"""
    debates: list[dict]


class MessagesResponse(BaseModel):
    """Messages of a debate in creation order"""
    messages: list[dict]


class EvaluationResponse(BaseModel):
    """Result of an evaluation round"""
    evaluation: dict


class EndResponse(BaseModel):
    """Result of ending a debate"""
    winner_id: Optional[str]
    reason: str
    final_summary: Optional[dict]


def _debate_response(debate: Debate) -> DebateResponse:
    return DebateResponse(debate=debate.to_dict(), remaining_seconds=remaining_seconds(debate))


@router.post("", response_model=DebateResponse, status_code=201)
@limiter.limit(get_rate_limit_string())
async def create_debate(
    request: Request,
    body: CreateRequest,
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
):
    """Open a debate room

    The room waits for a second player unless the automated opponent is
    enabled, in which case it starts immediately.
    """
    controller = get_controller(x_api_key)
    settings = DebateSettings(**body.settings.model_dump()) if body.settings else None
    try:
        debate = controller.create_debate(body.theme, body.player1_id, settings)
    except (DebateError, ValueError) as e:
        raise to_http_error(e)
    return _debate_response(debate)


@router.get("", response_model=DebateListResponse)
async def list_debates(status: Optional[str] = None):
    """List debates, optionally filtered by status"""
    if status not in (None, "waiting", "active", "finished"):
        raise HTTPException(status_code=400, detail="Unknown status")
    return DebateListResponse(debates=[d.to_dict() for d in debate_store.list_debates(status)])


@router.get("/{debate_id}", response_model=DebateResponse)
async def get_debate(debate_id: str):
    """Get a debate record"""
    debate = debate_store.get(debate_id)
    if debate is None:
        raise HTTPException(status_code=404, detail="Debate not found")
    return _debate_response(debate)


@router.post("/{debate_id}/join", response_model=DebateResponse)
@limiter.limit(get_rate_limit_string())
async def join_debate(
    request: Request,
    debate_id: str,
    body: JoinRequest,
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
):
    """Take the second seat and start the debate"""
    controller = get_controller(x_api_key)
    try:
        debate = controller.join_debate(debate_id, body.player_id)
    except (DebateError, ValueError) as e:
        raise to_http_error(e)
    return _debate_response(debate)


@router.get("/{debate_id}/messages", response_model=MessagesResponse)
async def list_messages(debate_id: str):
    """Messages with their evaluation payloads"""
    if debate_store.get(debate_id) is None:
        raise HTTPException(status_code=404, detail="Debate not found")
    return MessagesResponse(messages=[m.to_dict() for m in message_store.list_for_debate(debate_id)])


@router.post("/{debate_id}/utterances", response_model=EvaluationResponse)
@limiter.limit(get_evaluate_limit_string())
def submit_utterance(
    request: Request,
    debate_id: str,
    body: UtteranceRequest,
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
):
    """Submit an utterance and get the post-round scores

    Runs detection, ledger merge and scoring for both players, then checks
    the end conditions. With the automated opponent enabled the response
    also carries the opponent's evaluated reply.
    """
    controller = get_controller(x_api_key)
    try:
        result = controller.submit_utterance(debate_id, body.player_id, body.content)
    except (DebateError, ValueError) as e:
        raise to_http_error(e)
    return EvaluationResponse(evaluation=result.to_dict())


@router.post("/{debate_id}/end", response_model=EndResponse)
@limiter.limit(get_rate_limit_string())
def end_debate(
    request: Request,
    debate_id: str,
    body: EndRequest,
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
):
    """End the debate (time limit or manual stop)

    Calling this again on a finished debate returns the recorded result.
    """
    controller = get_controller(x_api_key)
    try:
        winner_id = controller.end_debate(debate_id, reason=body.reason)
    except (DebateError, ValueError) as e:
        raise to_http_error(e)
    debate = controller.get_debate(debate_id)
    return EndResponse(
        winner_id=winner_id,
        reason=body.reason,
        final_summary=debate.final_summary.to_dict() if debate.final_summary else None,
    )
