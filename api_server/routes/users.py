"""User statistics endpoint"""

from fastapi import APIRouter
from pydantic import BaseModel

import api_server.routes.debate as debate_routes

router = APIRouter(prefix="/users", tags=["users"])


class StatsResponse(BaseModel):
    """Win/loss counters"""
    user_id: str
    wins: int
    losses: int
    debate_count: int


@router.get("/{user_id}/stats", response_model=StatsResponse)
async def get_user_stats(user_id: str):
    """Win/loss/debate counters of a user (zeros for unknown users)"""
    return StatsResponse(**debate_routes.user_stats_store.get(user_id).to_dict())
