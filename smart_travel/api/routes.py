"""
API Routes for the Travel Planner.
"""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..services.travel_planner import get_travel_planner, InvalidUserIdError


router = APIRouter(prefix="/api", tags=["travel-planner"])


# Request/Response Models
class PlanRequest(BaseModel):
    user_id: str
    request: str = ""


class SessionSummary(BaseModel):
    user_id: str
    created_at: str
    last_active_at: str
    conversations: int


# Endpoints

@router.post("/plan")
async def plan(body: PlanRequest):
    """Generate a personalised travel plan."""
    planner = get_travel_planner()
    try:
        response = await planner.plan_travel(body.user_id, body.request)
    except InvalidUserIdError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return response.to_display_dict()


@router.get("/sessions", response_model=list[SessionSummary])
async def list_sessions():
    """List every known user session."""
    store = get_travel_planner().store
    return [
        SessionSummary(
            user_id=record.id,
            created_at=record.created_at.isoformat(),
            last_active_at=record.last_active_at.isoformat(),
            conversations=len(record.conversation_history),
        )
        for record in store.list_sessions()
    ]


@router.get("/sessions/{user_id}")
async def get_session(user_id: str):
    """Get a user's profile and recent conversation history."""
    store = get_travel_planner().store
    record = store.get(user_id)
    if not record:
        raise HTTPException(status_code=404, detail="Session not found")

    return {
        "session": record.model_dump(mode="json", by_alias=True),
        "summary": store.conversation_summary(user_id),
    }
