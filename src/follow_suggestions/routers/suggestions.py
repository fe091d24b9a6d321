"""Suggestions router – exposes the suggestions engine via HTTP.

GET /suggestions/{user_id}
    Ranked follow suggestions for one user.

POST /suggestions/{user_id}/invalidate
    Drop cached suggestions for one user (after a follow/unfollow).

POST /suggestions/invalidate
    Drop every cached suggestion.

POST /suggestions/events
    Record what a user did with a suggestion.
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import BaseModel, Field

from ..lib.engine import SuggestionsEngine
from ..models import Candidate, Location, SignalType, SuggestionOptions
from ..security import verify_api_key

router = APIRouter(tags=["suggestions"], dependencies=[Depends(verify_api_key)])

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------

class SuggestionsResponse(BaseModel):
    user_id: str
    suggestions: list[Candidate]


class SuggestionEventRequest(BaseModel):
    """Request body for the events endpoint."""

    user_id: str = Field(..., description="Account the suggestion was shown to")
    candidate_id: str = Field(..., description="Suggested account")
    action: Literal["viewed", "followed", "dismissed"] = Field(..., description="What the user did")
    signal_type: SignalType = Field(..., description="Primary signal of the suggestion")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def get_engine(request: Request) -> SuggestionsEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        logger.error("Suggestions engine is not configured")
        raise HTTPException(status_code=503, detail="Suggestions engine unavailable")
    return engine


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/suggestions/{user_id}", response_model=SuggestionsResponse)
async def suggestions_for_user(
    user_id: str,
    engine: SuggestionsEngine = Depends(get_engine),
    limit: int = Query(10, ge=1, le=50),
    include_location: bool = Query(True),
    include_mutual: bool = Query(True),
    include_activity: bool = Query(True),
    include_popular: bool = Query(True),
    latitude: float | None = Query(None, ge=-90, le=90),
    longitude: float | None = Query(None, ge=-180, le=180),
) -> SuggestionsResponse:
    """Return diversified follow suggestions for *user_id*."""
    if (latitude is None) != (longitude is None):
        raise HTTPException(
            status_code=422,
            detail="latitude and longitude must be given together",
        )
    location = None
    if latitude is not None:
        location = Location(latitude=latitude, longitude=longitude)

    options = SuggestionOptions(
        limit=limit,
        include_location=include_location,
        include_mutual=include_mutual,
        include_activity=include_activity,
        include_popular=include_popular,
        location=location,
    )
    suggestions = await engine.get_suggestions(user_id, options)
    return SuggestionsResponse(user_id=user_id, suggestions=suggestions)


@router.post("/suggestions/invalidate", status_code=status.HTTP_204_NO_CONTENT)
async def invalidate_all_suggestions(
    engine: SuggestionsEngine = Depends(get_engine),
) -> Response:
    engine.invalidate_all()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/suggestions/{user_id}/invalidate", status_code=status.HTTP_204_NO_CONTENT)
async def invalidate_suggestions(
    user_id: str,
    engine: SuggestionsEngine = Depends(get_engine),
) -> Response:
    engine.invalidate(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/suggestions/events", status_code=status.HTTP_202_ACCEPTED)
async def record_suggestion_event(
    payload: SuggestionEventRequest,
    engine: SuggestionsEngine = Depends(get_engine),
) -> dict:
    """Accept a telemetry event.  Delivery happens in the background."""
    engine.record_event(
        payload.user_id,
        payload.candidate_id,
        payload.action,
        payload.signal_type,
    )
    return {"status": "accepted"}
